#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Curses dashboard: tick-driven refresh loop, key bindings and rendering.

Layout
- Left column (30%): section menu, current section highlighted
- Right column: the current section's pane (mode list, proxy group tabs and
  member list, or an empty placeholder box)
"""

import sys
import time
from typing import Callable, Dict, Optional

from .state import Action, App, Focus, Section, SECTIONS

try:
    import curses  # type: ignore
except Exception:  # pragma: no cover
    curses = None

ESC = 27

KEYMAP: Dict[int, Action] = {
    ord("q"): Action.QUIT,
    ord("j"): Action.NEXT,
    ord("k"): Action.PREVIOUS,
    ord("l"): Action.ENTER,
    ord("h"): Action.BACK,
    ESC: Action.BACK,
    ord(" "): Action.CONFIRM,
    ord("L"): Action.NEXT_GROUP,
    ord("H"): Action.PREVIOUS_GROUP,
    ord("1"): Action.JUMP_1,
    ord("2"): Action.JUMP_2,
    ord("3"): Action.JUMP_3,
    ord("4"): Action.JUMP_4,
    ord("5"): Action.JUMP_5,
    10: Action.ENTER,
    13: Action.ENTER,
}
if curses is not None:
    KEYMAP.update({
        curses.KEY_DOWN: Action.NEXT,
        curses.KEY_UP: Action.PREVIOUS,
        curses.KEY_RIGHT: Action.ENTER,
        curses.KEY_LEFT: Action.BACK,
        curses.KEY_ENTER: Action.ENTER,
    })


def key_to_action(ch: int) -> Optional[Action]:
    return KEYMAP.get(ch)


def run_loop(app: App, render: Callable[[App], None],
             poll_key: Callable[[float], Optional[int]], tick_rate: float,
             clock: Callable[[], float] = time.monotonic) -> None:
    """Render, wait out the rest of the tick for one key, dispatch, repeat.

    ``poll_key(timeout)`` returns a key code or None when the timeout expires.
    Network calls made by a dispatched action block the loop until they return.
    """
    last_tick = clock()
    while True:
        render(app)

        timeout = max(0.0, tick_rate - (clock() - last_tick))
        ch = poll_key(timeout)
        if ch is not None and app.dispatch(key_to_action(ch)):
            return

        if clock() - last_tick >= tick_rate:
            last_tick = clock()


# ──────────────────────────────────────────────────────────────
# Curses rendering
# ──────────────────────────────────────────────────────────────
class Dashboard:
    """Draws an ``App`` onto a curses screen and drives ``run_loop``."""

    def __init__(self, app: App, tick_rate: float, title: str = "Clash"):
        self.app = app
        self.tick_rate = tick_rate
        self.title = title
        self.stdscr = None

    def run(self):
        if curses is None or not sys.stdout.isatty():
            raise SystemExit("clash-console needs an interactive terminal")
        curses.wrapper(self._main)

    def _main(self, stdscr):
        self.stdscr = stdscr
        curses.curs_set(0)

        if curses.has_colors():
            curses.start_color()
            curses.use_default_colors()
            curses.init_pair(1, curses.COLOR_CYAN, -1)  # Header
            curses.init_pair(2, curses.COLOR_RED, -1)  # Server-side current
            curses.init_pair(3, curses.COLOR_WHITE, curses.COLOR_BLUE)  # Cursor

        run_loop(self.app, self.render, self._poll_key, self.tick_rate)

    def _poll_key(self, timeout: float) -> Optional[int]:
        self.stdscr.timeout(int(timeout * 1000))
        ch = self.stdscr.getch()
        return None if ch == -1 else ch

    def render(self, app: App):
        stdscr = self.stdscr
        stdscr.erase()
        h, w = stdscr.getmaxyx()
        if h < 8 or w < 30:
            self._safe_addstr(stdscr, 0, 0, "terminal too small")
            stdscr.refresh()
            return
        menu_w = max(16, w * 3 // 10)
        menu_w = min(menu_w, w - 10)
        menu_win = stdscr.derwin(h, menu_w, 0, 0)
        content_win = stdscr.derwin(h, w - menu_w, 0, menu_w)

        self._render_menu(menu_win, app)
        section = app.section
        if section is Section.GENERAL:
            self._render_general(content_win, app)
        elif section is Section.PROXIES:
            self._render_proxies(content_win, app)
        else:
            self._draw_box(content_win, section.value)

        menu_win.noutrefresh()
        content_win.noutrefresh()
        stdscr.noutrefresh()
        curses.doupdate()

    def _safe_addstr(self, win, y, x, text, attr=0):
        """Add a string clipped to the window; out-of-bounds writes are dropped."""
        try:
            h, w = win.getmaxyx()
            if 0 <= y < h and 0 <= x < w:
                max_len = w - x - 1
                if len(text) > max_len:
                    text = text[:max_len]
                win.addstr(y, x, text, attr)
        except curses.error:
            pass

    def _draw_box(self, win, title: str, attr=0):
        try:
            win.attron(curses.A_DIM)
            win.box()
            win.attroff(curses.A_DIM)
        except curses.error:
            pass
        self._safe_addstr(win, 0, 2, f" {title} ", attr or curses.A_BOLD)

    def _render_menu(self, win, app: App):
        header = curses.color_pair(1) | curses.A_BOLD
        self._draw_box(win, self.title, header)
        for row, section in enumerate(SECTIONS):
            attr = curses.A_NORMAL
            if row == app.sections.index:
                attr = curses.color_pair(3) | curses.A_BOLD
            self._safe_addstr(win, row + 1, 2, f"{row + 1} {section.value}", attr)

        hint = "j/k move  l enter  h back  q quit"
        h, _ = win.getmaxyx()
        self._safe_addstr(win, h - 2, 2, hint, curses.A_DIM)

    def _render_general(self, win, app: App):
        self._draw_box(win, Section.GENERAL.value)
        state = app.general
        focused = app.focus is Focus.GENERAL
        for row, mode in enumerate(state.OPTIONS):
            attr = curses.A_NORMAL
            if mode == state.current_mode:
                attr = curses.color_pair(2) | curses.A_BOLD
            if focused and row == state.index:
                attr = curses.color_pair(3) | (attr & curses.A_BOLD)
            marker = "*" if mode == state.current_mode else " "
            self._safe_addstr(win, row + 1, 2, f"{marker} {mode}", attr)
        if state.current_mode is None:
            self._safe_addstr(win, len(state.OPTIONS) + 2, 2, "(mode unavailable)", curses.A_DIM)

    def _render_proxies(self, win, app: App):
        state = app.proxies
        focused = app.focus is Focus.PROXIES
        self._draw_box(win, Section.PROXIES.value)
        if state.group_count == 0:
            self._safe_addstr(win, 1, 2, "(no proxy groups)", curses.A_DIM)
            return

        # Group tabs, starting at the selected group
        h, w = win.getmaxyx()
        x = 2
        groups = state.groups()
        for offset, group in enumerate(groups[state.group_index:]):
            label = f" {group.name} "
            attr = curses.A_NORMAL
            if offset == 0:
                attr = curses.A_BOLD | (curses.color_pair(1) if focused else 0)
            self._safe_addstr(win, 1, x, label, attr)
            x += len(label) + 1
            if x >= w - 2:
                break
        self._safe_addstr(win, 2, 1, "─" * max(0, w - 2), curses.A_DIM)

        # Member list, scrolled so the cursor is the first row
        group = state.current_group()
        active = group.active if group else None
        for row, name in enumerate(state.members()[state.member_index:]):
            y = row + 3
            if y >= h - 1:
                break
            attr = curses.A_NORMAL
            if name == active:
                attr = curses.color_pair(2) | curses.A_BOLD
            if row == 0 and focused:
                attr = curses.color_pair(3) | (attr & curses.A_BOLD)
            self._safe_addstr(win, y, 2, name, attr)
