#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration bootstrap.

Precedence, lowest first: built-in defaults, the JSON config file, the
environment (a ``.env`` file is loaded first), then command-line flags.
"""

import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv  # type: ignore

from .api import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

STATE_DIR = Path.home() / ".clash_console"
CONFIG_PATH = STATE_DIR / "config.json"

ENV_URL = "CLASH_CONSOLE_URL"
ENV_SECRET = "CLASH_CONSOLE_SECRET"


def _default_config() -> dict:
    return {
        "schema": 1,
        "base_url": DEFAULT_BASE_URL,
        "secret": "",
        "tick_rate": 1.0,
        "timeout": DEFAULT_TIMEOUT,
        "log_file": str(STATE_DIR / "console.log"),
        "log_level": "INFO",
    }


def load_config(path: Optional[Path] = None) -> dict:
    path = path or CONFIG_PATH
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(_default_config(), indent=2))
    cfg = json.loads(path.read_text())
    if not isinstance(cfg, dict):
        raise SystemExit(f"Config {path} must contain a JSON object")

    defaults = _default_config()
    for key, value in defaults.items():
        cfg.setdefault(key, value)
    cfg["tick_rate"] = float(cfg["tick_rate"])
    cfg["timeout"] = float(cfg["timeout"])

    load_dotenv()
    if os.environ.get(ENV_URL):
        cfg["base_url"] = os.environ[ENV_URL]
    if os.environ.get(ENV_SECRET):
        cfg["secret"] = os.environ[ENV_SECRET]
    return cfg
