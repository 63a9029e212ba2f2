"""Paging-mode key bindings.

``KeyHandler`` turns symbolic key names into ``Action`` values using the
configured binding table. The two-key ``gg`` chord is tracked with a single
pending flag.
"""

from __future__ import annotations

import enum
import logging

from ..config import KeyConfig
from .key_registry import KeyComboBinding, KeyComboRegistry

logger = logging.getLogger("helpv.input")

CHORD_PREFIX = "g"
CHORD = "gg"

_KEY_ALIASES = {
    "esc": "Escape",
    "escape": "Escape",
    "space": " ",
    "return": "Enter",
    "enter": "Enter",
    "backspace": "Backspace",
    "tab": "Tab",
    "up": "Up",
    "down": "Down",
    "left": "Left",
    "right": "Right",
    "home": "Home",
    "end": "End",
    "pageup": "PageUp",
    "pagedown": "PageDown",
    "delete": "Delete",
}


class Action(enum.Enum):
    """Paging-mode actions; values are the ``[keys]`` config names."""

    QUIT = "quit"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    HALF_PAGE_UP = "half_page_up"
    HALF_PAGE_DOWN = "half_page_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    TOP = "top"
    BOTTOM = "bottom"
    SEARCH = "search"
    NEXT_MATCH = "next_match"
    PREV_MATCH = "prev_match"
    OPEN_FINDER = "find_subcommand"
    OPEN_COMMAND = "open_command"
    BACK = "back"
    SHOW_HELP = "help"


def normalize_key_name(name: str) -> str:
    """Canonical spelling of a configured or decoded key name.

    ``Esc`` becomes ``Escape``, ``Space`` becomes ``" "``, ``Ctrl-X`` becomes
    ``Ctrl-x`` and ``Return`` becomes ``Enter``. Single characters are kept
    as-is so ``G`` and ``g`` stay distinct.
    """
    if len(name) <= 1:
        return name
    lowered = name.lower()
    alias = _KEY_ALIASES.get(lowered)
    if alias is not None:
        return alias
    if lowered.startswith(("ctrl-", "ctrl+", "c-")):
        rest = name.split("-", 1)[-1] if "-" in name else name.split("+", 1)[-1]
        if len(rest) == 1:
            return f"Ctrl-{rest.lower()}"
    return name


def build_registry(keys: KeyConfig) -> KeyComboRegistry[Action]:
    registry: KeyComboRegistry[Action] = KeyComboRegistry(normalize=normalize_key_name)
    for action in Action:
        combos = tuple(getattr(keys, action.value))
        registry.register_binding(KeyComboBinding(combos, lambda action=action: action))
    return registry


class KeyHandler:
    """Binding lookup plus the pending state of the ``gg`` chord."""

    def __init__(self, keys: KeyConfig | None = None) -> None:
        self.keys = keys if keys is not None else KeyConfig()
        self._registry = build_registry(self.keys)
        self.pending_g = False

    def handle(self, key: str) -> Action | None:
        if self.pending_g:
            self.pending_g = False
            if key == CHORD_PREFIX:
                return self._registry.dispatch(CHORD)
        elif key == CHORD_PREFIX and CHORD in self._registry:
            self.pending_g = True
            return None
        action = self._registry.dispatch(key)
        if action is None and key:
            logger.debug("unbound key %r", key)
        return action

    def reset_pending(self) -> None:
        self.pending_g = False

    def keys_for(self, action: Action) -> list[str]:
        return list(getattr(self.keys, action.value))


__all__ = [
    "Action",
    "KeyHandler",
    "build_registry",
    "normalize_key_name",
]
