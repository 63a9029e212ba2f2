"""Fuzzy-filtered selection list used by the subcommand finder overlay.

``SelectionList`` owns the query, ranking, selection and scroll window;
``Finder`` binds it to ``Subcommand`` items. The command switcher reuses the
same base over history strings.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from typing import Generic, TypeVar

from .parser import Subcommand
from .search.fuzzy import Scorer, fuzzy_score, rank_items

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10

_MOVE_KEYS = {
    "Up": "move_up",
    "Ctrl-p": "move_up",
    "Down": "move_down",
    "Ctrl-n": "move_down",
    "Ctrl-u": "half_page_up",
    "Ctrl-d": "half_page_down",
    "Ctrl-b": "page_up",
    "PageUp": "page_up",
    "Ctrl-f": "page_down",
    "PageDown": "page_down",
    "Home": "move_first",
    "End": "move_last",
}


class FinderAction(enum.Enum):
    """Outcome of one key press inside the finder."""

    NONE = "none"
    CLOSE = "close"
    SELECT = "select"


def is_printable_key(key: str) -> bool:
    """Single printable character tokens edit overlay queries."""
    return len(key) == 1 and key.isprintable()


class SelectionList(Generic[T]):
    """Query, ranked matches and a saturating selection over ``items``."""

    def __init__(
        self,
        items: Sequence[T],
        page_size: int = DEFAULT_PAGE_SIZE,
        scorer: Scorer = fuzzy_score,
    ) -> None:
        self.items: list[T] = list(items)
        self.query = ""
        self.filtered: list[tuple[int, int]] = []
        self.selected = 0
        self.scroll_offset = 0
        self.page_size = max(1, page_size)
        self._scorer = scorer
        self._refilter()

    def fields_for(self, item: T) -> Sequence[str | None]:
        return (str(item),)

    def _refilter(self) -> None:
        self.filtered = rank_items(
            self.query,
            [self.fields_for(item) for item in self.items],
            self._scorer,
        )
        self.selected = 0
        self.scroll_offset = 0

    def row_count(self) -> int:
        """Number of selectable rows."""
        return len(self.filtered)

    def set_page_size(self, page_size: int) -> None:
        self.page_size = max(1, page_size)
        self._ensure_visible()

    def set_query(self, query: str) -> None:
        self.query = query
        self._refilter()

    def push_char(self, char: str) -> None:
        self.set_query(self.query + char)

    def pop_char(self) -> None:
        if self.query:
            self.set_query(self.query[:-1])

    def clear_query(self) -> None:
        self.set_query("")

    def _move_to(self, index: int) -> None:
        last = self.row_count() - 1
        if last < 0:
            self.selected = 0
            self.scroll_offset = 0
            return
        self.selected = max(0, min(index, last))
        self._ensure_visible()

    def _ensure_visible(self) -> None:
        if self.selected < self.scroll_offset:
            self.scroll_offset = self.selected
        elif self.selected >= self.scroll_offset + self.page_size:
            self.scroll_offset = self.selected - self.page_size + 1
        max_offset = max(0, self.row_count() - self.page_size)
        self.scroll_offset = max(0, min(self.scroll_offset, max_offset))

    def move_up(self) -> None:
        self._move_to(self.selected - 1)

    def move_down(self) -> None:
        self._move_to(self.selected + 1)

    def half_page_up(self) -> None:
        self._move_to(self.selected - max(1, self.page_size // 2))

    def half_page_down(self) -> None:
        self._move_to(self.selected + max(1, self.page_size // 2))

    def page_up(self) -> None:
        self._move_to(self.selected - self.page_size)

    def page_down(self) -> None:
        self._move_to(self.selected + self.page_size)

    def move_first(self) -> None:
        self._move_to(0)

    def move_last(self) -> None:
        self._move_to(self.row_count() - 1)

    def visible_rows(self) -> list[tuple[int, int]]:
        """``(row_index, item_index)`` pairs inside the scroll window."""
        window = self.filtered[self.scroll_offset : self.scroll_offset + self.page_size]
        return [(self.scroll_offset + offset, idx) for offset, (_, idx) in enumerate(window)]

    def selected_item(self) -> T | None:
        if 0 <= self.selected < len(self.filtered):
            return self.items[self.filtered[self.selected][1]]
        return None

    def handle_edit_or_move(self, key: str) -> bool:
        """Apply shared editing and movement keys; return whether ``key`` was used."""
        method = _MOVE_KEYS.get(key)
        if method is not None:
            getattr(self, method)()
            return True
        if key == "Backspace":
            self.pop_char()
            return True
        if key == "Ctrl-w":
            self.clear_query()
            return True
        if is_printable_key(key):
            self.push_char(key)
            return True
        return False


class Finder(SelectionList[Subcommand]):
    """Subcommand picker ranked over name and description."""

    def fields_for(self, item: Subcommand) -> Sequence[str | None]:
        return (item.name, item.description)

    def handle_key(self, key: str) -> FinderAction:
        if key == "Escape":
            return FinderAction.CLOSE
        if key == "Enter":
            return FinderAction.SELECT if self.selected_item() is not None else FinderAction.NONE
        self.handle_edit_or_move(key)
        return FinderAction.NONE


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "Finder",
    "FinderAction",
    "SelectionList",
    "is_printable_key",
]
