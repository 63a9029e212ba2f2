"""Scrollable help-text buffer with incremental literal search."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SearchSnapshot:
    """Search and scroll state captured when the search prompt opens."""

    query: str | None
    match_lines: tuple[int, ...]
    current_match: int
    scroll: int


@dataclass
class Pager:
    """Content lines plus scroll offset and search state.

    ``scroll`` may temporarily exceed the last page; callers clamp it against
    the real viewport height before drawing.
    """

    lines: list[str] = field(default_factory=list)
    scroll: int = 0
    search_query: str | None = None
    match_lines: list[int] = field(default_factory=list)
    current_match: int = 0

    @classmethod
    def from_text(cls, text: str) -> Pager:
        return cls(lines=text.splitlines())

    def __len__(self) -> int:
        return len(self.lines)

    def max_scroll(self, viewport: int) -> int:
        return max(0, len(self.lines) - max(1, viewport))

    def scroll_up(self, amount: int = 1) -> None:
        self.scroll = max(0, self.scroll - max(0, amount))

    def scroll_down(self, amount: int = 1) -> None:
        self.scroll += max(0, amount)

    def scroll_to_top(self) -> None:
        self.scroll = 0

    def scroll_to_bottom(self, viewport: int) -> None:
        self.scroll = self.max_scroll(viewport)

    def clamp_scroll(self, viewport: int) -> None:
        self.scroll = max(0, min(self.scroll, self.max_scroll(viewport)))

    def scroll_percentage(self, viewport: int) -> int:
        """Position of the viewport in the content as 0-100."""
        maximum = self.max_scroll(viewport)
        if maximum == 0:
            return 100
        return min(100, int(self.scroll * 100 / maximum))

    def set_search(self, query: str, origin: int | None = None) -> None:
        """Search for ``query`` (case-insensitive literal) and jump to a match.

        The current match is the first one at or after ``origin`` (defaults to
        the scroll offset), wrapping to the first match. Empty query clears.
        """
        if not query:
            self.clear_search()
            return
        needle = query.casefold()
        self.search_query = query
        self.match_lines = [idx for idx, line in enumerate(self.lines) if needle in line.casefold()]
        self.current_match = 0
        if not self.match_lines:
            return
        start = self.scroll if origin is None else origin
        for position, line_no in enumerate(self.match_lines):
            if line_no >= start:
                self.current_match = position
                break
        self.scroll = self.match_lines[self.current_match]

    def clear_search(self) -> None:
        self.search_query = None
        self.match_lines = []
        self.current_match = 0

    def next_match(self) -> None:
        if not self.match_lines:
            return
        self.current_match = (self.current_match + 1) % len(self.match_lines)
        self.scroll = self.match_lines[self.current_match]

    def prev_match(self) -> None:
        if not self.match_lines:
            return
        self.current_match = (self.current_match - 1) % len(self.match_lines)
        self.scroll = self.match_lines[self.current_match]

    def match_count(self) -> int:
        return len(self.match_lines)

    def current_match_line(self) -> int | None:
        if not self.match_lines:
            return None
        return self.match_lines[self.current_match]

    def snapshot_search(self) -> SearchSnapshot:
        return SearchSnapshot(
            query=self.search_query,
            match_lines=tuple(self.match_lines),
            current_match=self.current_match,
            scroll=self.scroll,
        )

    def restore_search(self, snapshot: SearchSnapshot) -> None:
        self.search_query = snapshot.query
        self.match_lines = list(snapshot.match_lines)
        self.current_match = snapshot.current_match
        self.scroll = snapshot.scroll

    def visible_lines(self, viewport: int) -> list[tuple[int, str]]:
        """``(line_number, text)`` pairs for the rows currently on screen."""
        start = max(0, self.scroll)
        stop = start + max(0, viewport)
        return list(enumerate(self.lines[start:stop], start=start))


__all__ = ["Pager", "SearchSnapshot"]
