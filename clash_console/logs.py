#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""File logging; curses owns the terminal so nothing goes to stderr."""

import logging
from pathlib import Path

LOGGER = logging.getLogger("clash_console")


def setup_logging(log_file: Path, level: str = "INFO") -> logging.Logger:
    if not LOGGER.handlers:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        LOGGER.addHandler(file_handler)
    LOGGER.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    LOGGER.propagate = False
    return LOGGER
