"""Subcommand extraction from free-form help text.

Three independent passes run in order and the first non-empty result wins:
configured section/entry patterns, a git-style listing pass, and an
aggressive fallback. All passes preserve source order and keep the first
occurrence of each name.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from .config import Config

GIT_ENTRY_RE = re.compile(r"^   ([a-z][\w-]*)\s{2,}(.+)$")
AGGRESSIVE_ENTRY_RE = re.compile(r"^\s{2,6}([a-z][\w-]*):?\s{2,}(.*)$")
AGGRESSIVE_SECTION_WORDS: tuple[str, ...] = ("command", "subcommand", "available")


@dataclass(frozen=True)
class Subcommand:
    """One navigable entry in the finder."""

    name: str
    description: str | None = None
    label: str | None = None
    invoke_template: str | None = None


class _Accumulator:
    """Ordered, name-unique collection of parsed entries."""

    def __init__(self) -> None:
        self.items: list[Subcommand] = []
        self._names: set[str] = set()

    def add(self, match: re.Match[str]) -> None:
        name = match.group(1)
        if not name or name.startswith("-") or name in self._names:
            return
        description = None
        if match.re.groups >= 2 and match.group(2) is not None:
            description = match.group(2).strip()
        self._names.add(name)
        self.items.append(Subcommand(name=name, description=description))


def _is_indented(line: str) -> bool:
    return line.startswith((" ", "\t"))


def parse_configured(help_text: str, config: Config) -> list[Subcommand]:
    """Apply each configured ``(section, entry)`` pair over the whole text."""
    found = _Accumulator()
    lines = help_text.splitlines()
    for pattern in config.subcommand_patterns:
        section_re = config.compiled(pattern.section)
        entry_re = config.compiled(pattern.entry)
        in_section = False
        blank_run = 0
        for line in lines:
            if section_re.search(line):
                in_section = True
                blank_run = 0
                continue
            if not in_section:
                continue
            if not line.strip():
                blank_run += 1
                if blank_run >= 2:
                    in_section = False
                continue
            if not _is_indented(line) and line.endswith(":"):
                in_section = False
                continue
            blank_run = 0
            match = entry_re.search(line)
            if match:
                found.add(match)
    return found.items


def parse_git_style(help_text: str) -> list[Subcommand]:
    """Parse listings shaped like ``git --help``.

    Lowercase non-indented lines are category headers; entries are indented by
    exactly three spaces; quoted footer lines end the listing.
    """
    found = _Accumulator()
    past_usage = False
    in_command_section = False
    for line in help_text.splitlines():
        if line.startswith(("usage:", "Usage:")):
            past_usage = False
            continue
        if not past_usage:
            if not line.strip():
                past_usage = True
            continue
        stripped = line.strip()
        if stripped and not _is_indented(line):
            if stripped[0].islower() or "(see also:" in stripped:
                in_command_section = True
                continue
            if stripped.startswith(("'", '"')):
                in_command_section = False
                continue
        if in_command_section:
            match = GIT_ENTRY_RE.match(line)
            if match:
                found.add(match)
    return found.items


def _continues_aggressive_section(line: str) -> bool:
    stripped = line.strip()
    lower = line.lower()
    return stripped[:1].islower() or "command" in lower or "see also" in lower


def parse_aggressive(help_text: str) -> list[Subcommand]:
    """Last-resort pass: any line mentioning commands opens a listing.

    The header test is a plain substring match, so descriptive prose that
    mentions "command" also opens a section.
    """
    found = _Accumulator()
    in_section = False
    for line in help_text.splitlines():
        lower = line.lower()
        if any(word in lower for word in AGGRESSIVE_SECTION_WORDS):
            in_section = True
            continue
        if not in_section or not line.strip():
            continue
        if not _is_indented(line):
            if not _continues_aggressive_section(line):
                in_section = False
            continue
        match = AGGRESSIVE_ENTRY_RE.match(line)
        if match:
            found.add(match)
    return found.items


def parse_subcommands(help_text: str, config: Config) -> list[Subcommand]:
    """Extract subcommands from ``help_text`` using the layered strategy."""
    for layer in (
        lambda text: parse_configured(text, config),
        parse_git_style,
        parse_aggressive,
    ):
        entries = layer(help_text)
        if entries:
            return entries
    return []


def merge_subcommands(existing: list[Subcommand], incoming: Iterable[Subcommand]) -> list[Subcommand]:
    """Append ``incoming`` entries whose name is not already in ``existing``.

    Mutates and returns ``existing``.
    """
    names = {item.name for item in existing}
    for item in incoming:
        if item.name in names:
            continue
        names.add(item.name)
        existing.append(item)
    return existing


__all__ = [
    "Subcommand",
    "merge_subcommands",
    "parse_aggressive",
    "parse_configured",
    "parse_git_style",
    "parse_subcommands",
]
