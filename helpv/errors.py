"""Exception types shared across fetch, config, and terminal layers.

Each error carries the process exit code used when it escapes to the CLI.
Runtime fetch errors never reach the CLI after startup; they become banners.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class ExitCode:
    """Process exit codes for the ``helpv`` command."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2


class HelpvError(Exception):
    """Base class for all helpv errors."""

    exit_code = ExitCode.GENERAL_ERROR


class NoCommandError(HelpvError):
    """Raised when a fetch is requested for an empty command path."""

    exit_code = ExitCode.USAGE_ERROR

    def __init__(self) -> None:
        super().__init__("No command specified")


class FetchFailedError(HelpvError):
    """Raised when no fetch strategy produced non-empty help text."""

    def __init__(self, command_path: Sequence[str], reason: str = "no help output") -> None:
        self.command_path = list(command_path)
        self.reason = reason
        super().__init__(f"Could not fetch help for '{' '.join(self.command_path)}': {reason}")


class ConfigParseError(HelpvError):
    """Raised when the main config file cannot be read or validated."""

    def __init__(self, path: Path | None, reason: str) -> None:
        self.path = path
        self.reason = reason
        location = str(path) if path is not None else "<config>"
        super().__init__(f"Invalid config {location}: {reason}")


class LogFileError(HelpvError):
    """Raised when the requested log file cannot be opened."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot open log file {path}: {reason}")


class TerminalInitError(HelpvError):
    """Raised when the controlling terminal cannot enter TUI mode."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Terminal initialization failed: {reason}")


__all__ = [
    "ExitCode",
    "HelpvError",
    "NoCommandError",
    "FetchFailedError",
    "ConfigParseError",
    "LogFileError",
    "TerminalInitError",
]
