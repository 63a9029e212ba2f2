"""Help-text acquisition.

Tries the toolpack (or generic) help templates in order, keeps the first
non-empty textual output, and falls back to the manual page. Manual-page
output is stripped of overstrike and ANSI formatting before it is returned.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence

from .config import Config
from .errors import FetchFailedError, NoCommandError
from .process import CommandResult, CommandRunner, run_command
from .toolpacks import GENERIC_HELP_TEMPLATES, GENERIC_SUBCOMMAND_TEMPLATES, expand_invoke, expand_template

logger = logging.getLogger("helpv.fetcher")

HELP_MARKERS: tuple[str, ...] = ("usage:", "options:", "commands:", "--help", "synopsis")


class ContentSource(enum.Enum):
    """Which pipeline produced the displayed content."""

    HELP = "help"
    MAN = "man"


def looks_like_help(text: str) -> bool:
    """Return whether ``text`` plausibly is help output rather than an error."""
    lower = text.lower()
    return any(marker in lower for marker in HELP_MARKERS)


def strip_man_formatting(text: str) -> str:
    """Remove overstrike sequences and CSI escapes from manual-page output.

    ``X\\bX`` (bold) and ``_\\bX`` (underline) collapse to ``X``.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\x08":
            if out:
                out.pop()
            i += 1
            continue
        if ch == "\x1b":
            if i + 1 < n and text[i + 1] == "[":
                i += 2
                while i < n:
                    terminator = text[i]
                    i += 1
                    if terminator.isascii() and terminator.isalpha():
                        break
            else:
                i += 1
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def select_output(result: CommandResult | None) -> str | None:
    """Pick the usable help text from one invocation, or ``None``.

    Priority: non-empty stdout; stderr of a successful run; stderr that looks
    like help even though the command failed.
    """
    if result is None:
        return None
    if result.stdout.strip():
        return result.stdout
    if result.stderr.strip():
        if result.ok:
            return result.stderr
        if looks_like_help(result.stderr):
            return result.stderr
    return None


def help_templates(command_path: Sequence[str], config: Config) -> list[str]:
    """Ordered templates to try for ``command_path``."""
    base = command_path[0]
    pack = config.toolpacks.lookup(base)
    if len(command_path) == 1:
        override = config.help_override(base)
        if override is not None:
            return override
        return pack.help_commands() if pack is not None else list(GENERIC_HELP_TEMPLATES)
    return pack.subcommand_commands() if pack is not None else list(GENERIC_SUBCOMMAND_TEMPLATES)


def man_page_candidates(command_path: Sequence[str]) -> list[str]:
    """Manual page names to try, most specific first, without duplicates."""
    candidates = ["-".join(command_path)]
    if len(command_path) == 1 and command_path[0] not in candidates:
        candidates.append(command_path[0])
    return candidates


def fetch_man_page(command_path: Sequence[str], runner: CommandRunner = run_command) -> str | None:
    """Return de-formatted manual-page text for ``command_path`` or ``None``."""
    for page in man_page_candidates(command_path):
        result = runner(f"man {page}")
        if result is None or not result.ok:
            continue
        text = strip_man_formatting(result.stdout)
        if text.strip():
            return text
    return None


def fetch_best(
    command_path: Sequence[str],
    config: Config,
    runner: CommandRunner = run_command,
) -> tuple[str, ContentSource]:
    """Fetch help for ``command_path`` using the best available strategy.

    Raises ``NoCommandError`` for an empty path and ``FetchFailedError`` when
    neither the help templates nor the manual page produce text.
    """
    path = list(command_path)
    if not path:
        raise NoCommandError()

    for template in help_templates(path, config):
        expanded = expand_template(template, path)
        text = select_output(runner(expanded))
        if text is not None:
            if source_for_template(template) is ContentSource.MAN:
                text = strip_man_formatting(text)
            logger.info("help for %r from %r", " ".join(path), expanded)
            return text, ContentSource.HELP

    text = fetch_man_page(path, runner)
    if text is not None:
        logger.info("help for %r from manual page", " ".join(path))
        return text, ContentSource.MAN

    raise FetchFailedError(path, "no help output and no manual page")


def source_for_template(template: str) -> ContentSource:
    """Manual-page templates produce ``MAN`` content; everything else ``HELP``."""
    return ContentSource.MAN if template.startswith("man ") else ContentSource.HELP


def fetch_with_invoke(
    base: str,
    name: str,
    template: str,
    runner: CommandRunner = run_command,
) -> str:
    """Run a discovery item's invoke template and return its help text."""
    expanded = expand_invoke(template, base, name)
    if not expanded.split():
        raise FetchFailedError([base, name], "empty invoke command")
    text = select_output(runner(expanded))
    if text is None:
        raise FetchFailedError([base, name], f"'{expanded}' produced no output")
    if source_for_template(template) is ContentSource.MAN:
        text = strip_man_formatting(text)
    return text


__all__ = [
    "ContentSource",
    "HELP_MARKERS",
    "fetch_best",
    "fetch_man_page",
    "fetch_with_invoke",
    "help_templates",
    "looks_like_help",
    "man_page_candidates",
    "select_output",
    "source_for_template",
    "strip_man_formatting",
]
