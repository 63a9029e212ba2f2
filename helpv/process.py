"""Child-process execution for help and discovery commands.

Command lines are split on whitespace and executed without a shell.
Both output streams are captured independently; stdin is closed.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable, Mapping
from dataclasses import dataclass

logger = logging.getLogger("helpv.process")

MAN_ENVIRONMENT: dict[str, str] = {
    "MANPAGER": "cat",
    "PAGER": "cat",
    "MAN_KEEP_FORMATTING": "0",
}


@dataclass(frozen=True)
class CommandResult:
    """Captured output of one finished child process."""

    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


CommandRunner = Callable[[str], "CommandResult | None"]


def tokenize(command_line: str) -> list[str]:
    """Split an expanded template into argv. Quoting is intentionally unsupported."""
    return command_line.split()


def child_environment(program: str, extra: Mapping[str, str] | None = None) -> dict[str, str] | None:
    """Return the environment for ``program`` or ``None`` to inherit unchanged."""
    overrides: dict[str, str] = {}
    if os.path.basename(program) == "man":
        overrides.update(MAN_ENVIRONMENT)
    if extra:
        overrides.update(extra)
    if not overrides:
        return None
    env = dict(os.environ)
    env.update(overrides)
    return env


def run_command(command_line: str, env: Mapping[str, str] | None = None) -> CommandResult | None:
    """Run ``command_line`` to completion and capture its output.

    Returns ``None`` when the line is empty or the program cannot be spawned
    (missing binary, permission error). A non-zero exit is not an error here;
    callers decide what output to accept.
    """
    argv = tokenize(command_line)
    if not argv:
        return None
    logger.debug("running %s", argv)
    try:
        proc = subprocess.run(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=child_environment(argv[0], env),
            check=False,
        )
    except OSError as exc:
        logger.debug("could not spawn %s: %s", argv[0], exc)
        return None
    return CommandResult(
        argv=tuple(argv),
        returncode=proc.returncode,
        stdout=proc.stdout.decode("utf-8", errors="replace"),
        stderr=proc.stderr.decode("utf-8", errors="replace"),
    )


__all__ = [
    "CommandResult",
    "CommandRunner",
    "MAN_ENVIRONMENT",
    "child_environment",
    "run_command",
    "tokenize",
]
