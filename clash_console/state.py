#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Navigation and remote-state model for the dashboard.

Lists coming from the controller are addressed by rank in name-sorted order;
nothing here keeps a persistent handle on a group or member.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .api import ControlClient, ProxyEntry, ProxyGroup

LOGGER = logging.getLogger("clash_console")


class Section(Enum):
    GENERAL = "General"
    PROXIES = "Proxies"
    RULES = "Rules"
    CONNECTIONS = "Connections"
    LOGS = "Logs"


SECTIONS: Tuple[Section, ...] = tuple(Section)


class Focus(Enum):
    MENU = "menu"
    GENERAL = "general"
    PROXIES = "proxies"


class Action(Enum):
    QUIT = "quit"
    NEXT = "next"
    PREVIOUS = "previous"
    ENTER = "enter"
    BACK = "back"
    CONFIRM = "confirm"
    NEXT_GROUP = "next_group"
    PREVIOUS_GROUP = "previous_group"
    JUMP_1 = "jump_1"
    JUMP_2 = "jump_2"
    JUMP_3 = "jump_3"
    JUMP_4 = "jump_4"
    JUMP_5 = "jump_5"


JUMPS: Dict[Action, int] = {
    Action.JUMP_1: 0,
    Action.JUMP_2: 1,
    Action.JUMP_3: 2,
    Action.JUMP_4: 3,
    Action.JUMP_5: 4,
}


# ──────────────────────────────────────────────────────────────
# Section menu
# ──────────────────────────────────────────────────────────────
class SectionRegistry:
    def __init__(self):
        self.index = 0

    @property
    def current(self) -> Section:
        return SECTIONS[self.index]

    def next(self):
        self.index = (self.index + 1) % len(SECTIONS)

    def previous(self):
        self.index = (self.index + len(SECTIONS) - 1) % len(SECTIONS)

    def jump_to(self, n: int):
        self.index = n % len(SECTIONS)


# ──────────────────────────────────────────────────────────────
# General: routing mode
# ──────────────────────────────────────────────────────────────
class ModeState:
    """Mode cursor plus the mode the server last reported.

    The cursor and ``current_mode`` are independent; only ``confirm`` sends
    the cursor value to the server.
    """

    OPTIONS: Tuple[str, ...] = ("global", "rule", "direct")

    def __init__(self):
        self.index = 0
        self.current_mode: Optional[str] = None

    @property
    def selected(self) -> str:
        return self.OPTIONS[self.index]

    def fetch(self, client: ControlClient):
        self.current_mode = client.get_mode()

    def next(self):
        self.index = (self.index + 1) % len(self.OPTIONS)

    def previous(self):
        self.index = (self.index + len(self.OPTIONS) - 1) % len(self.OPTIONS)

    def confirm(self, client: ControlClient):
        mode = self.selected
        LOGGER.info("Switching mode to %s", mode)
        client.set_mode(mode)
        self.fetch(client)


# ──────────────────────────────────────────────────────────────
# Proxies: group tabs and member list
# ──────────────────────────────────────────────────────────────
class ProxiesState:
    def __init__(self):
        self.proxies: Optional[Dict[str, ProxyEntry]] = None
        self.group_index = 0
        self.member_index = 0
        self.group_count = 0
        self.member_count = 0

    def groups(self) -> List[ProxyGroup]:
        if not self.proxies:
            return []
        groups = [p for p in self.proxies.values() if isinstance(p, ProxyGroup)]
        groups.sort(key=lambda g: g.name)
        return groups

    def current_group(self) -> Optional[ProxyGroup]:
        groups = self.groups()
        if 0 <= self.group_index < len(groups):
            return groups[self.group_index]
        return None

    def members(self) -> Tuple[str, ...]:
        group = self.current_group()
        return group.members if group else ()

    def _reset(self):
        self.group_index = 0
        self.member_index = 0
        self.group_count = 0
        self.member_count = 0

    def _load_group(self, index: int):
        self.group_index = index
        self.member_count = len(self.members())
        self.member_index = 0

    def fetch(self, client: ControlClient):
        self.proxies = client.get_proxies()
        if self.proxies is None:
            self._reset()
            return
        self.group_count = len(self.groups())
        self._load_group(0)

    def next_group(self):
        if self.group_count == 0:
            self.group_index = 0
            return
        self._load_group((self.group_index + 1) % self.group_count)

    def previous_group(self):
        if self.group_count == 0:
            self.group_index = 0
            return
        self._load_group((self.group_index + self.group_count - 1) % self.group_count)

    def next_member(self):
        if self.member_count == 0:
            self.member_index = 0
            return
        self.member_index = (self.member_index + 1) % self.member_count

    def previous_member(self):
        if self.member_count == 0:
            self.member_index = 0
            return
        self.member_index = (self.member_index + self.member_count - 1) % self.member_count

    def confirm(self, client: ControlClient):
        if self.group_count == 0 or self.member_count == 0:
            return
        group_index, member_index = self.group_index, self.member_index
        group = self.current_group()
        if group is None or not 0 <= member_index < len(group.members):
            return
        member = group.members[member_index]

        LOGGER.info("Selecting %s in group %s", member, group.name)
        client.select_member(group.name, member)
        self.fetch(client)

        # Snap back to the same ranks when the new snapshot still has them.
        if self.group_count == 0 or self.member_count == 0:
            return
        if group_index < self.group_count:
            self._load_group(group_index)
        if member_index < self.member_count:
            self.member_index = member_index


# ──────────────────────────────────────────────────────────────
# Focus and dispatch
# ──────────────────────────────────────────────────────────────
class App:
    """All dashboard state, owned by the refresh loop."""

    def __init__(self, client: ControlClient):
        self.client = client
        self.sections = SectionRegistry()
        self.focus = Focus.MENU
        self.general = ModeState()
        self.proxies = ProxiesState()

    @property
    def section(self) -> Section:
        return self.sections.current

    def fetch(self):
        """Refresh whatever the current section shows."""
        section = self.section
        if section is Section.GENERAL:
            self.general.fetch(self.client)
        elif section is Section.PROXIES:
            self.proxies.fetch(self.client)

    def dispatch(self, action: Optional[Action]) -> bool:
        """Apply one input action. Returns True when the dashboard should exit."""
        if action is Action.QUIT:
            return True
        if action is None:
            return False

        if self.focus is Focus.MENU:
            self._handle_menu(action)
        elif self.focus is Focus.GENERAL:
            self._handle_general(action)
        elif self.focus is Focus.PROXIES:
            self._handle_proxies(action)
        return False

    def _handle_menu(self, action: Action):
        if action is Action.NEXT:
            self.sections.next()
            self.fetch()
        elif action is Action.PREVIOUS:
            self.sections.previous()
            self.fetch()
        elif action in JUMPS:
            self.sections.jump_to(JUMPS[action])
            self.fetch()
        elif action is Action.ENTER:
            if self.section is Section.GENERAL:
                self.focus = Focus.GENERAL
                self.fetch()
            elif self.section is Section.PROXIES:
                self.focus = Focus.PROXIES
                self.fetch()

    def _handle_general(self, action: Action):
        if action is Action.BACK:
            self.focus = Focus.MENU
        elif action is Action.NEXT:
            self.general.next()
        elif action is Action.PREVIOUS:
            self.general.previous()
        elif action is Action.CONFIRM:
            self.general.confirm(self.client)

    def _handle_proxies(self, action: Action):
        if action is Action.BACK:
            self.focus = Focus.MENU
        elif action is Action.NEXT:
            self.proxies.next_member()
        elif action is Action.PREVIOUS:
            self.proxies.previous_member()
        elif action is Action.NEXT_GROUP:
            self.proxies.next_group()
        elif action is Action.PREVIOUS_GROUP:
            self.proxies.previous_group()
        elif action is Action.CONFIRM:
            self.proxies.confirm(self.client)
