"""Help overlay content.

Lines are built from the active key bindings so user remaps show up in the
overlay. Presentation only; no terminal writes happen here.
"""

from __future__ import annotations

from ..config import KeyConfig

KEY_STYLE = "\033[38;5;229m"
HEADING_STYLE = "\033[1;38;5;81m"
HINT_STYLE = "\033[2;38;5;250m"
RESET = "\033[0m"

HELP_TITLE = "helpv help"

_PAGING_ROWS: tuple[tuple[str, str], ...] = (
    ("scroll_down", "scroll down"),
    ("scroll_up", "scroll up"),
    ("half_page_down", "half page down"),
    ("half_page_up", "half page up"),
    ("page_down", "page down"),
    ("page_up", "page up"),
    ("top", "top"),
    ("bottom", "bottom"),
)

_NAVIGATION_ROWS: tuple[tuple[str, str], ...] = (
    ("search", "search in text"),
    ("next_match", "next match"),
    ("prev_match", "previous match"),
    ("find_subcommand", "find subcommand"),
    ("open_command", "open another command"),
    ("back", "go back"),
    ("help", "this help"),
    ("quit", "quit"),
)

OVERLAY_LINES: tuple[str, ...] = (
    f"  {KEY_STYLE}Type{RESET} filter   {KEY_STYLE}Up/Down{RESET} or {KEY_STYLE}Ctrl+P/N{RESET} move",
    f"  {KEY_STYLE}Ctrl+U/D{RESET} half page   {KEY_STYLE}Ctrl+B/F{RESET} page   {KEY_STYLE}Ctrl+W{RESET} clear",
    f"  {KEY_STYLE}Enter{RESET} open selection   {KEY_STYLE}Esc{RESET} close",
)


def describe_keys(names: list[str]) -> str:
    """Human spelling of a binding list: ``j/Down``, ``Space`` for ``" "``."""
    shown = ["Space" if name == " " else name for name in names]
    return "/".join(shown) if shown else "(unbound)"


def _binding_rows(keys: KeyConfig, rows: tuple[tuple[str, str], ...]) -> list[str]:
    bindings = keys.bindings()
    labels = [(describe_keys(bindings.get(action, [])), text) for action, text in rows]
    key_width = max(len(label) for label, _ in labels)
    return [f"  {KEY_STYLE}{label.ljust(key_width)}{RESET}  {text}" for label, text in labels]


def help_lines(keys: KeyConfig | None = None) -> list[str]:
    """Body lines of the help overlay for the given bindings."""
    keys = keys if keys is not None else KeyConfig()
    lines = [f"{HEADING_STYLE}Paging{RESET}"]
    lines.extend(_binding_rows(keys, _PAGING_ROWS))
    lines.append("")
    lines.append(f"{HEADING_STYLE}Navigation{RESET}")
    lines.extend(_binding_rows(keys, _NAVIGATION_ROWS))
    lines.append("")
    lines.append(f"{HEADING_STYLE}Finder and command switcher{RESET}")
    lines.extend(OVERLAY_LINES)
    lines.append("")
    lines.append(f"{HINT_STYLE}Press ? / Esc / q / Enter to close{RESET}")
    return lines


__all__ = ["HELP_TITLE", "describe_keys", "help_lines"]
