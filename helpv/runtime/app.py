"""Navigation state machine for one interactive help session.

``App`` owns the pager, the overlays, the navigation stack and the command
history. It is driven one key name at a time and never touches the terminal,
so the whole navigation flow can be exercised with stub command runners.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Sequence

from ..config import Config
from ..discovery import DiscoveryChannel, parse_see_also, spawn_discovery
from ..errors import HelpvError
from ..fetcher import ContentSource, fetch_best, fetch_with_invoke, source_for_template
from ..finder import DEFAULT_PAGE_SIZE, Finder, FinderAction, is_printable_key
from ..history import CommandHistory, NavigationStack
from ..input.keymap import Action, KeyHandler
from ..pager import Pager, SearchSnapshot
from ..parser import Subcommand, merge_subcommands, parse_subcommands
from ..process import CommandRunner, run_command
from ..switcher import CommandSwitcher, SwitcherActionKind

logger = logging.getLogger("helpv.runtime")

DEFAULT_VIEWPORT_HEIGHT = 23
NO_SUBCOMMANDS_MESSAGE = "No subcommands found"
HELP_CLOSE_KEYS = frozenset({"Escape", "q", "?", "Enter"})

DiscoverySpawner = Callable[[str], "DiscoveryChannel | None"]


class Mode(enum.Enum):
    PAGING = "paging"
    SEARCHING = "searching"
    FINDING = "finding"
    SWITCHING = "switching"
    HELP = "help"


class App:
    """Interactive session state.

    The initial fetch happens in the constructor and raises ``HelpvError``
    subclasses on failure; later fetch failures become a one-line banner.
    """

    def __init__(
        self,
        command_path: Sequence[str],
        config: Config | None = None,
        *,
        runner: CommandRunner | None = None,
        spawn: DiscoverySpawner | None = None,
    ) -> None:
        self.config = config if config is not None else Config()
        self.runner = runner if runner is not None else run_command
        self._spawn = spawn if spawn is not None else self._spawn_default

        path = list(command_path)
        content, source = fetch_best(path, self.config, self.runner)

        self.mode = Mode.PAGING
        self.command_path: list[str] = path
        self.content_source = source
        self.pager = Pager.from_text(content)
        self.subcommands: list[Subcommand] = parse_subcommands(content, self.config)
        self.nav_stack = NavigationStack()
        self.command_history = CommandHistory([path[0]])
        self.key_handler = KeyHandler(self.config.keys)
        self.finder: Finder | None = None
        self.switcher: CommandSwitcher | None = None
        self.search_input = ""
        self._search_snapshot: SearchSnapshot | None = None
        self.banner: str | None = None
        self.should_quit = False
        self.dirty = True
        self.viewport_height = DEFAULT_VIEWPORT_HEIGHT
        self.overlay_rows = DEFAULT_PAGE_SIZE
        self.discovery: DiscoveryChannel | None = None
        self._start_discovery(path[0])
        logger.info("opened %r (%s, %d subcommands)", " ".join(path), source.value, len(self.subcommands))

    def _spawn_default(self, base: str) -> DiscoveryChannel:
        return spawn_discovery(base, self.config.toolpacks, self.runner)

    @property
    def base_command(self) -> str:
        return self.command_path[0]

    def breadcrumb(self) -> str:
        return self.nav_stack.breadcrumb(self.command_path)

    def set_viewport(self, content_rows: int, overlay_rows: int | None = None) -> None:
        """Record the real content height and overlay list height."""
        content_rows = max(1, content_rows)
        if content_rows != self.viewport_height:
            self.viewport_height = content_rows
            self.dirty = True
        if overlay_rows is not None:
            self.overlay_rows = max(1, overlay_rows)
            for overlay in (self.finder, self.switcher):
                if overlay is not None:
                    overlay.set_page_size(self.overlay_rows)
        previous = self.pager.scroll
        self.pager.clamp_scroll(self.viewport_height)
        if self.pager.scroll != previous:
            self.dirty = True

    def show_banner(self, message: str) -> None:
        logger.info("banner: %s", message)
        self.banner = message
        self.dirty = True

    def _start_discovery(self, base: str) -> None:
        self._replace_discovery(self._spawn(base))

    def _replace_discovery(self, channel: DiscoveryChannel | None) -> None:
        if self.discovery is not None:
            self.discovery.close()
        self.discovery = channel

    def poll_discovery(self) -> bool:
        """Merge a delivered discovery payload; return whether anything changed."""
        channel = self.discovery
        if channel is None:
            return False
        items = channel.try_receive()
        if items is not None:
            before = len(self.subcommands)
            merge_subcommands(self.subcommands, items)
            self.discovery = None
            added = len(self.subcommands) - before
            logger.debug("merged %d discovered item(s) for %s", added, self.base_command)
            if added:
                self.dirty = True
            return added > 0
        if channel.disconnected():
            self.discovery = None
        return False

    def handle_key(self, key: str) -> None:
        if not key:
            return
        self.banner = None
        self.dirty = True
        handler = {
            Mode.PAGING: self._handle_paging_key,
            Mode.SEARCHING: self._handle_searching_key,
            Mode.FINDING: self._handle_finding_key,
            Mode.SWITCHING: self._handle_switching_key,
            Mode.HELP: self._handle_help_key,
        }[self.mode]
        handler(key)

    def _enter_mode(self, mode: Mode) -> None:
        self.mode = mode
        self.key_handler.reset_pending()

    def _handle_paging_key(self, key: str) -> None:
        action = self.key_handler.handle(key)
        if action is None:
            return
        pager = self.pager
        half_page = max(1, self.viewport_height // 2)
        full_page = max(1, self.viewport_height)
        if action is Action.QUIT:
            self.should_quit = True
        elif action is Action.SCROLL_UP:
            pager.scroll_up(1)
        elif action is Action.SCROLL_DOWN:
            pager.scroll_down(1)
        elif action is Action.HALF_PAGE_UP:
            pager.scroll_up(half_page)
        elif action is Action.HALF_PAGE_DOWN:
            pager.scroll_down(half_page)
        elif action is Action.PAGE_UP:
            pager.scroll_up(full_page)
        elif action is Action.PAGE_DOWN:
            pager.scroll_down(full_page)
        elif action is Action.TOP:
            pager.scroll_to_top()
        elif action is Action.BOTTOM:
            pager.scroll_to_bottom(self.viewport_height)
        elif action is Action.NEXT_MATCH:
            pager.next_match()
        elif action is Action.PREV_MATCH:
            pager.prev_match()
        elif action is Action.SEARCH:
            self.open_search()
        elif action is Action.OPEN_FINDER:
            self.open_finder()
        elif action is Action.OPEN_COMMAND:
            self.open_switcher()
        elif action is Action.BACK:
            self.go_back()
        elif action is Action.SHOW_HELP:
            self._enter_mode(Mode.HELP)
        self.pager.clamp_scroll(self.viewport_height)

    def open_search(self) -> None:
        self._search_snapshot = self.pager.snapshot_search()
        self.search_input = ""
        self._enter_mode(Mode.SEARCHING)

    def _apply_live_search(self) -> None:
        origin = self._search_snapshot.scroll if self._search_snapshot is not None else None
        if self.search_input:
            self.pager.set_search(self.search_input, origin=origin)
        else:
            self.pager.clear_search()
            if origin is not None:
                self.pager.scroll = origin
        self.pager.clamp_scroll(self.viewport_height)

    def _handle_searching_key(self, key: str) -> None:
        if key == "Escape":
            if self._search_snapshot is not None:
                self.pager.restore_search(self._search_snapshot)
            self._search_snapshot = None
            self.search_input = ""
            self.mode = Mode.PAGING
        elif key == "Enter":
            self._apply_live_search()
            self._search_snapshot = None
            self.mode = Mode.PAGING
        elif key == "Backspace":
            self.search_input = self.search_input[:-1]
            self._apply_live_search()
        elif is_printable_key(key):
            self.search_input += key
            self._apply_live_search()

    def open_finder(self) -> None:
        if not self.subcommands:
            self.show_banner(NO_SUBCOMMANDS_MESSAGE)
            return
        self.finder = Finder(self.subcommands, page_size=self.overlay_rows)
        self._enter_mode(Mode.FINDING)

    def open_switcher(self) -> None:
        self.switcher = CommandSwitcher(self.command_history.items(), page_size=self.overlay_rows)
        self._enter_mode(Mode.SWITCHING)

    def _close_overlays(self) -> None:
        self.finder = None
        self.switcher = None
        self.mode = Mode.PAGING

    def _handle_finding_key(self, key: str) -> None:
        finder = self.finder
        if finder is None:
            self.mode = Mode.PAGING
            return
        action = finder.handle_key(key)
        if action is FinderAction.CLOSE:
            self._close_overlays()
        elif action is FinderAction.SELECT:
            item = finder.selected_item()
            if item is not None:
                self.drill_into(item)

    def _handle_switching_key(self, key: str) -> None:
        switcher = self.switcher
        if switcher is None:
            self.mode = Mode.PAGING
            return
        action = switcher.handle_key(key)
        if action.kind is SwitcherActionKind.CLOSE:
            self._close_overlays()
        elif action.kind is SwitcherActionKind.SELECT and action.command is not None:
            self.switch_to(action.command)

    def _handle_help_key(self, key: str) -> None:
        if key in HELP_CLOSE_KEYS:
            self.mode = Mode.PAGING

    def _show_content(self, content: str, source: ContentSource, subcommands: list[Subcommand]) -> None:
        self.pager = Pager.from_text(content)
        self.content_source = source
        self.subcommands = subcommands

    def drill_into(self, item: Subcommand) -> bool:
        """Open ``item`` and push the current location; roll back on failure."""
        self.nav_stack.push(self.command_path, self.pager.scroll, self.content_source)
        base = self.base_command
        try:
            if item.invoke_template is not None:
                content = fetch_with_invoke(base, item.name, item.invoke_template, self.runner)
                source = source_for_template(item.invoke_template)
                new_path = list(self.command_path)
            else:
                new_path = [*self.command_path, item.name]
                content, source = fetch_best(new_path, self.config, self.runner)
        except HelpvError as exc:
            self.nav_stack.pop()
            self._close_overlays()
            self.show_banner(str(exc))
            return False

        subcommands = parse_subcommands(content, self.config)
        if item.invoke_template is not None:
            if source is ContentSource.MAN:
                merge_subcommands(subcommands, parse_see_also(content, base))
        else:
            self.command_path = new_path
            self._start_discovery(base)
        self._show_content(content, source, subcommands)
        self._close_overlays()
        logger.info("drilled into %r", item.name)
        return True

    def go_back(self) -> bool:
        """Pop the navigation stack and re-fetch that location."""
        entry = self.nav_stack.pop()
        if entry is None:
            return False
        path = list(entry.command_path)
        try:
            content, _source = fetch_best(path, self.config, self.runner)
        except HelpvError as exc:
            self.show_banner(f"Could not go back: {exc}")
            return False
        self._show_content(content, entry.content_source, parse_subcommands(content, self.config))
        self.pager.scroll = entry.scroll_position
        self.command_path = path
        self._start_discovery(path[0])
        logger.info("back to %r", " ".join(path))
        return True

    def switch_to(self, command: str) -> bool:
        """Replace the session with a fresh fetch of ``command``."""
        command = command.strip()
        path = [command]
        try:
            content, source = fetch_best(path, self.config, self.runner)
        except HelpvError as exc:
            self._close_overlays()
            self.show_banner(str(exc))
            return False
        self.command_history.add(command)
        self.nav_stack.clear()
        self.command_path = path
        self._show_content(content, source, parse_subcommands(content, self.config))
        self._close_overlays()
        self._start_discovery(command)
        logger.info("switched to %r", command)
        return True

    def close(self) -> None:
        """Discard any pending discovery result."""
        self._replace_discovery(None)


__all__ = ["App", "DiscoverySpawner", "Mode", "NO_SUBCOMMANDS_MESSAGE"]
