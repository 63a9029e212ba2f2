"""Command switcher overlay: jump to a history entry or a typed command."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass

from .finder import SelectionList


class SwitcherActionKind(enum.Enum):
    NONE = "none"
    CLOSE = "close"
    SELECT = "select"


@dataclass(frozen=True)
class SwitcherAction:
    """Outcome of one key press; ``command`` is set for ``SELECT``."""

    kind: SwitcherActionKind
    command: str | None = None

    @classmethod
    def none(cls) -> SwitcherAction:
        return cls(SwitcherActionKind.NONE)

    @classmethod
    def close(cls) -> SwitcherAction:
        return cls(SwitcherActionKind.CLOSE)

    @classmethod
    def select(cls, command: str) -> SwitcherAction:
        return cls(SwitcherActionKind.SELECT, command)


class CommandSwitcher(SelectionList[str]):
    """History entries ranked by the query, plus the query itself as a new command."""

    def __init__(self, history: Sequence[str], page_size: int = 10) -> None:
        super().__init__(history, page_size=page_size)

    def free_form_command(self) -> str | None:
        """The typed query when it is offered as an extra row."""
        candidate = self.query.strip()
        if not candidate or candidate in self.items:
            return None
        return candidate

    def row_count(self) -> int:
        return len(self.filtered) + (1 if self.free_form_command() is not None else 0)

    def is_free_form_row(self, row: int) -> bool:
        return row == len(self.filtered) and self.free_form_command() is not None

    def selected_command(self) -> str | None:
        item = self.selected_item()
        if item is not None:
            return item
        if self.is_free_form_row(self.selected):
            return self.free_form_command()
        return None

    def handle_key(self, key: str) -> SwitcherAction:
        if key == "Escape":
            return SwitcherAction.close()
        if key == "Enter":
            command = self.selected_command()
            return SwitcherAction.select(command) if command is not None else SwitcherAction.none()
        self.handle_edit_or_move(key)
        return SwitcherAction.none()


__all__ = ["CommandSwitcher", "SwitcherAction", "SwitcherActionKind"]
