"""Frame composition for the help viewer.

``render_frame`` turns the current ``App`` state into one string of ANSI
output: content rows, the status bar or search prompt, a dimmed backdrop with
a centered box for overlays, and the error banner. It has no side effects.
"""

from __future__ import annotations

from ..fetcher import ContentSource
from ..finder import Finder
from ..parser import Subcommand
from ..runtime.app import App, Mode
from ..switcher import CommandSwitcher
from .ansi import RESET, clip_ansi_line, display_width, fit_ansi_line, highlight_substrings, strip_ansi
from .help import HELP_TITLE, describe_keys, help_lines

MATCH_STYLE = "\033[30;43m"
CURRENT_MATCH_STYLE = "\033[1;30;46m"
STATUS_STYLE = "\033[7m"
PROMPT_STYLE = "\033[1;38;5;81m"
BANNER_STYLE = "\033[1;97;41m"
DIM_STYLE = "\033[2m"
FRAME_STYLE = "\033[38;5;45m"
TITLE_STYLE = "\033[1;38;5;45m"
QUERY_STYLE = "\033[38;5;229m"
DESCRIPTION_STYLE = "\033[38;5;250m"
LABEL_STYLE = "\033[2;38;5;81m"
SELECTED_STYLE = "\033[7m"
SEPARATOR_STYLE = "\033[2;38;5;245m"

OVERLAY_MIN_WIDTH = 30
OVERLAY_MAX_WIDTH = 60
OVERLAY_MIN_HEIGHT = 8
OVERLAY_MAX_HEIGHT = 20
HELP_MAX_WIDTH = 72
HELP_MAX_HEIGHT = 30
# Query line and separator sit above the list inside the frame.
OVERLAY_HEADER_ROWS = 2


def _move(row: int, col: int) -> str:
    return f"\033[{row + 1};{col + 1}H"


def overlay_box(width: int, height: int) -> tuple[int, int, int, int]:
    """``(x, y, box_width, box_height)`` of the centered finder/switcher box."""
    box_w = min(width, max(OVERLAY_MIN_WIDTH, min(OVERLAY_MAX_WIDTH, width * 2 // 3)))
    box_h = min(height, max(OVERLAY_MIN_HEIGHT, min(OVERLAY_MAX_HEIGHT, height * 2 // 3)))
    return max(0, (width - box_w) // 2), max(0, (height - box_h) // 2), box_w, box_h


def overlay_list_rows(width: int, height: int) -> int:
    """Number of list rows visible inside the finder/switcher box."""
    _, _, _, box_h = overlay_box(width, height)
    return max(1, box_h - 2 - OVERLAY_HEADER_ROWS)


def content_rows(height: int) -> int:
    """Rows available to help text; the last row is the status bar."""
    return max(1, height - 1)


def build_status_line(left_text: str, width: int, right_text: str) -> str:
    usable = max(1, width)
    if usable <= len(right_text):
        return right_text[-usable:]
    left_limit = max(0, usable - len(right_text) - 1)
    left = left_text[:left_limit]
    gap = " " * (usable - len(left) - len(right_text))
    return f"{left}{gap}{right_text}"


def status_text(app: App) -> tuple[str, str]:
    """Left and right halves of the status bar."""
    pager = app.pager
    parts = [f" {app.breadcrumb()}"]
    if app.content_source is ContentSource.MAN:
        parts.append("[man]")
    if pager.search_query:
        count = pager.match_count()
        if count:
            parts.append(f"/{pager.search_query} ({pager.current_match + 1}/{count})")
        else:
            parts.append(f"/{pager.search_query} (no matches)")
    if app.subcommands:
        parts.append(f"{len(app.subcommands)} subcommands")
    if app.discovery is not None:
        parts.append("discovering...")
    percent = pager.scroll_percentage(app.viewport_height)
    keys = app.config.keys
    hints = (
        f"{describe_keys(keys.find_subcommand[:1])}:find "
        f"{describe_keys(keys.open_command[:1])}:open "
        f"{describe_keys(keys.help[:1])}:help"
    )
    return "  ".join(parts), f"{percent}%  {hints} "


def _content_line(app: App, line_no: int, text: str, dimmed: bool) -> str:
    if dimmed:
        return f"{DIM_STYLE}{strip_ansi(text)}"
    pager = app.pager
    if pager.search_query and line_no in pager.match_lines:
        style = CURRENT_MATCH_STYLE if line_no == pager.current_match_line() else MATCH_STYLE
        return highlight_substrings(text, pager.search_query, style)
    return text


def _draw_box(
    out: list[str],
    x: int,
    y: int,
    box_w: int,
    box_h: int,
    title: str,
    body: list[str],
) -> None:
    inner_w = max(1, box_w - 2)
    inner_h = max(0, box_h - 2)
    out.append(f"{_move(y, x)}{RESET}{FRAME_STYLE}╭{'─' * inner_w}╮{RESET}")
    for i in range(inner_h):
        text = body[i] if i < len(body) else ""
        out.append(f"{_move(y + 1 + i, x)}{FRAME_STYLE}│{RESET}")
        out.append(fit_ansi_line(text, inner_w))
        out.append(f"{RESET}{FRAME_STYLE}│{RESET}")
    out.append(f"{_move(y + box_h - 1, x)}{FRAME_STYLE}╰{'─' * inner_w}╯{RESET}")
    label = clip_ansi_line(f" {title} ", max(0, inner_w - 2))
    if label:
        title_x = x + 1 + max(1, (inner_w - display_width(label)) // 2)
        out.append(f"{_move(y, title_x)}{TITLE_STYLE}{label}{RESET}")


def _list_row(text: str, selected: bool, width: int) -> str:
    row = fit_ansi_line(text, width)
    if selected:
        return SELECTED_STYLE + row.replace(RESET, RESET + SELECTED_STYLE) + RESET
    return row


def _subcommand_text(item: Subcommand, name_width: int) -> str:
    text = item.name.ljust(name_width)
    if item.description:
        text += f"  {DESCRIPTION_STYLE}{item.description}{RESET}"
    if item.label:
        text += f"  {LABEL_STYLE}[{item.label}]{RESET}"
    return text


def finder_body(finder: Finder, inner_w: int) -> list[str]:
    body = [f"{QUERY_STYLE}> {finder.query}{RESET}", f"{SEPARATOR_STYLE}{'─' * inner_w}{RESET}"]
    rows = finder.visible_rows()
    name_width = min(24, max((len(finder.items[idx].name) for _, idx in rows), default=0))
    for row, idx in rows:
        text = " " + _subcommand_text(finder.items[idx], name_width)
        body.append(_list_row(text, row == finder.selected, inner_w))
    if not rows:
        body.append(f"{DESCRIPTION_STYLE} no matches{RESET}")
    return body


def switcher_body(switcher: CommandSwitcher, inner_w: int) -> list[str]:
    body = [f"{QUERY_STYLE}> {switcher.query}{RESET}", f"{SEPARATOR_STYLE}{'─' * inner_w}{RESET}"]
    for row, idx in switcher.visible_rows():
        body.append(_list_row(f" {switcher.items[idx]}", row == switcher.selected, inner_w))
    free_form = switcher.free_form_command()
    if free_form is not None:
        free_row = len(switcher.filtered)
        window_end = switcher.scroll_offset + switcher.page_size
        if switcher.scroll_offset <= free_row < window_end:
            text = f" {LABEL_STYLE}open{RESET} {free_form}"
            body.append(_list_row(text, switcher.selected == free_row, inner_w))
    return body


def render_frame(app: App, width: int, height: int) -> str:
    """Compose one full frame for a ``width`` x ``height`` terminal."""
    width = max(1, width)
    height = max(1, height)
    rows = content_rows(height)
    overlay = app.mode in {Mode.FINDING, Mode.SWITCHING, Mode.HELP}

    out: list[str] = [RESET]
    visible = app.pager.visible_lines(rows)
    for row in range(rows):
        text = ""
        if row < len(visible):
            line_no, line = visible[row]
            text = _content_line(app, line_no, line, overlay)
        out.append(_move(row, 0))
        out.append(fit_ansi_line(text, width))
        out.append(RESET)

    bottom = height - 1
    out.append(_move(bottom, 0))
    if app.banner:
        out.append(f"{BANNER_STYLE}{fit_ansi_line(' ' + app.banner, width)}{RESET}")
    elif app.mode is Mode.SEARCHING:
        out.append(fit_ansi_line(f"{PROMPT_STYLE}/{app.search_input}{RESET}", width))
    else:
        left, right = status_text(app)
        out.append(f"{STATUS_STYLE}{build_status_line(left, width, right)}{RESET}")

    if app.mode is Mode.FINDING and app.finder is not None:
        x, y, box_w, box_h = overlay_box(width, height)
        title = f"Subcommands ({len(app.finder.filtered)}/{len(app.finder.items)})"
        _draw_box(out, x, y, box_w, box_h, title, finder_body(app.finder, box_w - 2))
    elif app.mode is Mode.SWITCHING and app.switcher is not None:
        x, y, box_w, box_h = overlay_box(width, height)
        _draw_box(out, x, y, box_w, box_h, "Open command", switcher_body(app.switcher, box_w - 2))
    elif app.mode is Mode.HELP:
        body = [""] + help_lines(app.config.keys)
        box_w = min(width, HELP_MAX_WIDTH)
        box_h = min(height, HELP_MAX_HEIGHT, len(body) + 2)
        x = max(0, (width - box_w) // 2)
        y = max(0, (height - box_h) // 2)
        _draw_box(out, x, y, box_w, box_h, HELP_TITLE, body)

    return "".join(out)


__all__ = [
    "build_status_line",
    "content_rows",
    "overlay_box",
    "overlay_list_rows",
    "render_frame",
    "status_text",
]
