"""Main interactive event loop.

Each tick reads the terminal size, feeds the real viewport height to the
state machine, merges finished discovery work, redraws when something
changed, and waits up to one tick for a key.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable

from ..input import read_key
from ..render import content_rows, overlay_list_rows, render_frame
from .app import App
from .terminal import TerminalController

logger = logging.getLogger("helpv.runtime")

TICK_MS = 100

FrameRenderer = Callable[[App, int, int], str]
KeyReader = Callable[[int, int], str]


def run_main_loop(
    app: App,
    terminal: TerminalController,
    stdin_fd: int,
    render: FrameRenderer = render_frame,
    read: KeyReader = read_key,
) -> None:
    """Run until the app asks to quit; the terminal is restored on every exit."""
    last_size: tuple[int, int] | None = None
    with terminal.raw_mode():
        while not app.should_quit:
            term = shutil.get_terminal_size((80, 24))
            size = (term.columns, term.lines)
            app.set_viewport(content_rows(term.lines), overlay_list_rows(term.columns, term.lines))
            if app.poll_discovery():
                logger.debug("discovery results merged")
            if size != last_size:
                last_size = size
                app.dirty = True
            if app.dirty:
                terminal.write(render(app, term.columns, term.lines))
                app.dirty = False

            try:
                key = read(stdin_fd, TICK_MS)
            except KeyboardInterrupt:
                continue
            if key:
                app.handle_key(key)
    app.close()


__all__ = ["TICK_MS", "run_main_loop"]
