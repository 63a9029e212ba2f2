"""Runtime package: navigation state machine, terminal control and main loop.

Only the state machine is exported here; ``loop`` and ``terminal`` are
imported directly by the CLI so that rendering can depend on ``runtime.app``.
"""

from .app import App, Mode

__all__ = ["App", "Mode"]
