"""ANSI-aware text measurement, clipping and highlighting.

Escape sequences pass through untouched and never count toward width; tabs
expand to 8-column stops; East Asian wide characters take two cells.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8
RESET = "\033[0m"

def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``."""
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1

def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)

def display_width(text: str) -> int:
    """Display columns of ``text`` once escape sequences are removed."""
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col

def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    Tabs are expanded into spaces so clipping aligns with rendered cells.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if col + w > max_cols:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
        i += 1

    return "".join(out)

def fit_ansi_line(text: str, width: int) -> str:
    """Clip to ``width`` and pad with spaces so the row is exactly ``width`` wide."""
    clipped = clip_ansi_line(text, width)
    return clipped + " " * max(0, width - display_width(clipped))

def _visible_positions(text: str) -> list[tuple[int, str]]:
    """Raw offset and character of every visible character in ``text``."""
    positions: list[tuple[int, str]] = []
    i = 0
    while i < len(text):
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                i = match.end()
                continue
        positions.append((i, text[i]))
        i += 1
    return positions

def highlight_substrings(text: str, query: str, style: str, end_style: str = RESET) -> str:
    """Wrap every case-insensitive occurrence of ``query`` in ``style``.

    Matching runs on the visible characters; escape sequences inside ``text``
    are preserved.
    """
    if not text or not query:
        return text

    positions = _visible_positions(text)
    visible = "".join(ch for _, ch in positions).casefold()
    needle = query.casefold()
    # casefold can change length (ß -> ss); offsets would no longer line up.
    if len(visible) != len(positions):
        return text

    pieces: list[str] = []
    raw_cursor = 0
    start = visible.find(needle)
    while start >= 0:
        stop = start + len(needle)
        raw_start = positions[start][0]
        raw_stop = positions[stop - 1][0] + 1
        pieces.extend((text[raw_cursor:raw_start], style, text[raw_start:raw_stop], end_style))
        raw_cursor = raw_stop
        start = visible.find(needle, stop)
    if not pieces:
        return text
    pieces.append(text[raw_cursor:])
    return "".join(pieces)

__all__ = [
    "ANSI_ESCAPE_RE",
    "RESET",
    "char_display_width",
    "clip_ansi_line",
    "display_width",
    "fit_ansi_line",
    "highlight_substrings",
    "strip_ansi",
]
