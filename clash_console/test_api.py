"""Control API client against an in-memory session."""

import json

import pytest
import requests  # type: ignore

from clash_console.api import (
    ControlApiError,
    ControlClient,
    ProxyGroup,
    ProxyLeaf,
    decode_proxy,
    quote_segment,
)


class FakeResponse:
    def __init__(self, status=200, payload=None, text=None):
        self.status_code = status
        self._payload = payload
        self._text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._text is not None:
            return json.loads(self._text)
        return self._payload


class FakeSession:
    def __init__(self, responses=None, error=None):
        self.headers = {}
        self.calls = []
        self.responses = list(responses or [])
        self.error = error
        self.closed = False

    def request(self, method, url, json=None, timeout=None):
        self.calls.append((method, url, json, timeout))
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    def close(self):
        self.closed = True


def _client(session, **kwargs):
    return ControlClient("http://127.0.0.1:9090/", session=session, **kwargs)


def test_get_mode_reads_configs() -> None:
    session = FakeSession([FakeResponse(payload={"mode": "rule", "port": 7890})])
    client = _client(session, timeout=2.5)

    assert client.get_mode() == "rule"
    assert session.calls == [("GET", "http://127.0.0.1:9090/configs", None, 2.5)]


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.ConnectionError("refused")),
        FakeSession(error=requests.Timeout("slow")),
        FakeSession([FakeResponse(status=401)]),
        FakeSession([FakeResponse(text="<html>")]),
        FakeSession([FakeResponse(payload={"port": 7890})]),
        FakeSession([FakeResponse(payload=["rule"])]),
        FakeSession([FakeResponse(payload={"mode": 3})]),
    ],
)
def test_get_mode_failures_collapse_to_none(session) -> None:
    assert _client(session).get_mode() is None


def test_set_mode_sends_patch_and_ignores_empty_body() -> None:
    session = FakeSession([FakeResponse(status=204, text="")])
    client = _client(session)

    assert client.set_mode("global") is True
    assert session.calls[0][:3] == ("PATCH", "http://127.0.0.1:9090/configs", {"mode": "global"})


def test_set_mode_reports_failure() -> None:
    assert _client(FakeSession([FakeResponse(status=400)])).set_mode("bogus") is False
    assert _client(FakeSession(error=requests.ConnectionError())).set_mode("rule") is False


def test_get_proxies_decodes_groups_and_leaves() -> None:
    payload = {
        "proxies": {
            "Proxy": {"name": "Proxy", "type": "Selector", "now": "b", "all": ["c", "a", "b"]},
            "a": {"name": "a", "type": "Shadowsocks"},
            "DIRECT": {"type": "Direct"},
        }
    }
    proxies = _client(FakeSession([FakeResponse(payload=payload)])).get_proxies()

    assert proxies == {
        "Proxy": ProxyGroup(name="Proxy", members=("a", "b", "c"), active="b"),
        "a": ProxyLeaf(name="a"),
        "DIRECT": ProxyLeaf(name="DIRECT"),
    }


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"proxies": []},
        {"proxies": {"G": "not an object"}},
        {"proxies": {"G": {"name": "G", "all": "a,b"}}},
        {"proxies": {"G": {"name": "G", "all": ["a", 1]}}},
    ],
)
def test_get_proxies_rejects_unexpected_shapes(payload) -> None:
    assert _client(FakeSession([FakeResponse(payload=payload)])).get_proxies() is None


def test_get_proxies_transport_failure() -> None:
    assert _client(FakeSession(error=requests.ConnectionError())).get_proxies() is None


def test_select_member_escapes_group_name() -> None:
    session = FakeSession([FakeResponse(status=204)])
    client = _client(session)

    assert client.select_member('a b"c', "x") is True
    method, url, body, _ = session.calls[0]
    assert method == "PUT"
    assert url == "http://127.0.0.1:9090/proxies/a%20b%22c"
    assert body == {"name": "x"}


def test_quote_segment_escapes_reserved_and_control_characters() -> None:
    assert quote_segment("<a>`b`") == "%3Ca%3E%60b%60"
    assert quote_segment("x/y?z#w") == "x%2Fy%3Fz%23w"
    assert quote_segment("tab\there\n") == "tab%09here%0A"
    assert quote_segment("🚀 节点") == "%F0%9F%9A%80%20%E8%8A%82%E7%82%B9"


def test_select_member_failure() -> None:
    assert _client(FakeSession([FakeResponse(status=404)])).select_member("G", "x") is False


def test_secret_becomes_bearer_header() -> None:
    session = FakeSession()
    _client(session, secret="s3cret")
    assert session.headers["Authorization"] == "Bearer s3cret"

    bare = FakeSession()
    _client(bare)
    assert "Authorization" not in bare.headers


def test_decode_proxy_uses_key_when_name_missing() -> None:
    assert decode_proxy("GLOBAL", {"all": ["b", "a"]}) == ProxyGroup("GLOBAL", ("a", "b"), None)


def test_control_api_error_keeps_context() -> None:
    err = ControlApiError("GET", "/configs", "boom")
    assert err.method == "GET"
    assert err.path == "/configs"
    assert str(err) == "GET /configs: boom"


def test_close_closes_session() -> None:
    session = FakeSession()
    _client(session).close()
    assert session.closed
