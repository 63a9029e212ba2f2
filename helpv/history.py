"""Navigation stack and session command history.

This module has no UI concerns; the runtime pushes and pops entries as the
user drills into subcommands and walks back out.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .fetcher import ContentSource

BREADCRUMB_SEPARATOR = " > "


@dataclass(frozen=True)
class HistoryEntry:
    """Where the user was before a drill-in."""

    command_path: tuple[str, ...]
    scroll_position: int = 0
    content_source: ContentSource = ContentSource.HELP


class NavigationStack:
    """LIFO stack of ``HistoryEntry`` values."""

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []

    def push(
        self,
        command_path: Sequence[str],
        scroll_position: int,
        content_source: ContentSource,
    ) -> HistoryEntry:
        entry = HistoryEntry(
            command_path=tuple(command_path),
            scroll_position=max(0, scroll_position),
            content_source=content_source,
        )
        self._entries.append(entry)
        return entry

    def pop(self) -> HistoryEntry | None:
        if not self._entries:
            return None
        return self._entries.pop()

    def peek(self) -> HistoryEntry | None:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def breadcrumb(self, current: Sequence[str]) -> str:
        """Last token of every stacked path followed by the current one.

        ``git > commit`` after drilling from ``git`` into ``commit``.
        """
        parts = [entry.command_path[-1] for entry in self._entries if entry.command_path]
        if current:
            parts.append(current[-1])
        return BREADCRUMB_SEPARATOR.join(parts)


class CommandHistory:
    """Insertion-ordered, de-duplicated base commands opened this session."""

    def __init__(self, initial: Iterable[str] = ()) -> None:
        self._items: list[str] = []
        for command in initial:
            self.add(command)

    def add(self, command: str) -> bool:
        """Append ``command`` unless already present; return whether it was added."""
        command = command.strip()
        if not command or command in self._items:
            return False
        self._items.append(command)
        return True

    def items(self) -> list[str]:
        return list(self._items)

    def __contains__(self, command: object) -> bool:
        return command in self._items

    def __len__(self) -> int:
        return len(self._items)


__all__ = [
    "BREADCRUMB_SEPARATOR",
    "CommandHistory",
    "HistoryEntry",
    "NavigationStack",
]
