#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Blocking client for the Clash external-controller HTTP API.

Every public call collapses transport, status and decode failures into a
``None``/``False`` result so the dashboard never has to handle them.
"""

import logging
import urllib.parse
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

import requests  # type: ignore

LOGGER = logging.getLogger("clash_console")

DEFAULT_BASE_URL = "http://localhost:9090"
DEFAULT_TIMEOUT = 5.0


class ControlApiError(Exception):
    """A control API call failed (transport, HTTP status or payload shape)."""

    def __init__(self, method: str, path: str, cause: Any):
        super().__init__(f"{method} {path}: {cause}")
        self.method = method
        self.path = path
        self.cause = cause


# ──────────────────────────────────────────────────────────────
# Proxy entries
# ──────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ProxyGroup:
    name: str
    members: Tuple[str, ...]  # name-sorted
    active: Optional[str] = None


@dataclass(frozen=True)
class ProxyLeaf:
    name: str


ProxyEntry = Union[ProxyGroup, ProxyLeaf]


def decode_proxy(key: str, raw: Any) -> ProxyEntry:
    """Turn one ``/proxies`` entry into a group or a leaf.

    Presence of ``all`` is what makes an entry a group.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"proxy {key!r} is not an object")
    name = raw.get("name") or key
    if not isinstance(name, str):
        raise ValueError(f"proxy {key!r} has a non-string name")
    members = raw.get("all")
    if members is None:
        return ProxyLeaf(name=name)
    if not isinstance(members, list) or not all(isinstance(m, str) for m in members):
        raise ValueError(f"proxy group {name!r} has a malformed member list")
    active = raw.get("now")
    if active is not None and not isinstance(active, str):
        active = None
    return ProxyGroup(name=name, members=tuple(sorted(members)), active=active)


def quote_segment(value: str) -> str:
    """Percent-encode a single path segment, leaving nothing reserved unescaped."""
    return urllib.parse.quote(value, safe="")


# ──────────────────────────────────────────────────────────────
# Client
# ──────────────────────────────────────────────────────────────
class ControlClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, secret: str = "",
                 timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if secret:
            self.session.headers["Authorization"] = f"Bearer {secret}"

    def _request(self, method: str, path: str, body: Optional[dict] = None,
                 want_json: bool = True) -> Any:
        url = f"{self.base_url}{path}"
        LOGGER.debug("%s %s", method, url)
        try:
            resp = self.session.request(method, url, json=body, timeout=self.timeout)
            resp.raise_for_status()
            if not want_json:
                return None
            return resp.json()
        except requests.RequestException as exc:
            raise ControlApiError(method, path, exc) from exc
        except ValueError as exc:
            # invalid JSON body
            raise ControlApiError(method, path, exc) from exc

    def get_mode(self) -> Optional[str]:
        try:
            data = self._request("GET", "/configs")
            mode = data["mode"]
            if not isinstance(mode, str):
                raise ControlApiError("GET", "/configs", f"mode is {type(mode).__name__}")
            return mode
        except (ControlApiError, KeyError, TypeError) as exc:
            LOGGER.warning("Failed to read mode: %s", exc)
            return None

    def set_mode(self, mode: str) -> bool:
        try:
            self._request("PATCH", "/configs", {"mode": mode}, want_json=False)
        except ControlApiError as exc:
            LOGGER.warning("Failed to set mode %s: %s", mode, exc)
            return False
        return True

    def get_proxies(self) -> Optional[Dict[str, ProxyEntry]]:
        try:
            data = self._request("GET", "/proxies")
            raw = data["proxies"]
            if not isinstance(raw, dict):
                raise ControlApiError("GET", "/proxies", "proxies is not an object")
            return {key: decode_proxy(key, value) for key, value in raw.items()}
        except (ControlApiError, KeyError, TypeError, ValueError) as exc:
            LOGGER.warning("Failed to read proxies: %s", exc)
            return None

    def select_member(self, group: str, member: str) -> bool:
        path = f"/proxies/{quote_segment(group)}"
        try:
            self._request("PUT", path, {"name": member}, want_json=False)
        except ControlApiError as exc:
            LOGGER.warning("Failed to select %s in %s: %s", member, group, exc)
            return False
        return True

    def close(self) -> None:
        self.session.close()
