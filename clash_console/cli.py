#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""clash-console: curses dashboard for a Clash external controller."""

import argparse
from pathlib import Path
from typing import List, Optional

from .api import ControlClient
from .config import CONFIG_PATH, load_config
from .logs import setup_logging
from .state import App
from .ui import Dashboard


# ──────────────────────────────────────────────────────────────
# CLI
# ──────────────────────────────────────────────────────────────
def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Terminal dashboard for a Clash controller")
    ap.add_argument("base_url", nargs="?", help="Controller URL (default http://localhost:9090)")
    ap.add_argument("--secret", help="Controller secret, sent as a bearer token")
    ap.add_argument("--config", default=str(CONFIG_PATH), help="Path to config.json")
    ap.add_argument("--tick-rate", type=float, help="Seconds between redraws")
    ap.add_argument("--timeout", type=float, help="HTTP timeout in seconds")
    ap.add_argument("--log-file", help="Where to write the log")
    return ap.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> dict:
    cfg = load_config(Path(args.config).expanduser().resolve())
    if args.base_url:
        cfg["base_url"] = args.base_url
    if args.secret is not None:
        cfg["secret"] = args.secret
    if args.tick_rate is not None:
        cfg["tick_rate"] = args.tick_rate
    if args.timeout is not None:
        cfg["timeout"] = args.timeout
    if args.log_file:
        cfg["log_file"] = args.log_file
    return cfg


def main(argv: Optional[List[str]] = None) -> None:
    cfg = resolve_settings(parse_args(argv))
    logger = setup_logging(Path(cfg["log_file"]).expanduser(), cfg["log_level"])
    logger.info("Starting dashboard against %s", cfg["base_url"])

    client = ControlClient(cfg["base_url"], secret=cfg["secret"], timeout=cfg["timeout"])
    app = App(client)
    app.fetch()
    try:
        Dashboard(app, cfg["tick_rate"]).run()
    except KeyboardInterrupt:
        pass
    finally:
        client.close()
        logger.info("Dashboard closed")


if __name__ == "__main__":
    main()
