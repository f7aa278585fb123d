"""Curses dashboard for a Clash-compatible proxy daemon's control API."""

__version__ = "0.1.0"
