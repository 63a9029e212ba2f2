"""Logging configuration for helpv.

Verbosity levels:
- 0 (default): WARNING - malformed tool files, unexpected worker failures
- 1 (-v):      INFO - fetch strategy selection, navigation events
- 2+ (-vv):    DEBUG - every child invocation and discovery sub-task

The TUI owns the terminal while it runs, so console output is suspended for
that window. Pass ``--log-file`` (or set ``HELPV_LOG``) to keep a record.
"""

from __future__ import annotations

import contextlib
import logging
import os
import sys
from pathlib import Path

from .errors import LogFileError

LOGGER_NAME = "helpv"
LOG_FILE_ENV = "HELPV_LOG"

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def _level_for_verbosity(verbosity: int) -> int:
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(verbosity: int = 0, log_file: Path | None = None) -> logging.Logger:
    """Configure the ``helpv`` logger hierarchy.

    Writes to ``log_file`` (or the ``HELPV_LOG`` path) when given, otherwise to
    stderr. Existing handlers are replaced so repeated calls are idempotent.
    Raises ``LogFileError`` when the log file cannot be opened.
    """
    level = _level_for_verbosity(verbosity)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    if log_file is None:
        env_path = os.environ.get(LOG_FILE_ENV, "").strip()
        if env_path:
            log_file = Path(env_path).expanduser()

    handler: logging.Handler
    if log_file is not None:
        try:
            handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as exc:
            raise LogFileError(log_file, exc.strerror or str(exc)) from exc
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
        if verbosity >= 2:
            formatter = logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
        else:
            formatter = logging.Formatter("helpv: %(message)s")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def _console_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [
        handler
        for handler in logger.handlers
        if isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.FileHandler)
        and getattr(handler, "stream", None) in {sys.stderr, sys.stdout}
    ]


@contextlib.contextmanager
def console_suspended():
    """Silence stderr/stdout log handlers while the alternate screen is active."""
    handlers = _console_handlers(logging.getLogger(LOGGER_NAME))
    saved_levels = [handler.level for handler in handlers]
    for handler in handlers:
        handler.setLevel(logging.CRITICAL + 1)
    try:
        yield
    finally:
        for handler, level in zip(handlers, saved_levels):
            handler.setLevel(level)
