"""Per-tool recipes for fetching help and discovering navigable items.

A toolpack names the command templates used to fetch base and subcommand
help, plus discovery sources that list extra items (guides, plugins, topics).
The embedded catalog ships with the package; TOML files under
``<user-config>/helpv/tools/`` replace entries per tool name.
"""

from __future__ import annotations

import logging
import re
import tomllib
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from . import paths

logger = logging.getLogger("helpv.toolpacks")

GENERIC_HELP_TEMPLATES: tuple[str, ...] = ("{cmd} --help", "{cmd} -h")
GENERIC_SUBCOMMAND_TEMPLATES: tuple[str, ...] = ("{cmd} --help", "{base} help {sub}", "{cmd} -h")

DEFAULT_TOOLPACKS_TOML = r"""
[git]
help = ["git --help"]
subcommand = ["git help {sub}", "git {sub} -h"]

[[git.discover]]
label = "All Commands"
run = "git help -a"
section = '^Main Porcelain Commands'
pattern = '^\s{3}([a-z][\w-]*)\s+(.*)$'
invoke = "git help {name}"

[[git.discover]]
label = "Guides"
run = "git help -g"
pattern = '^\s{3}([a-z][\w-]*)\s+(.*)$'
invoke = "git help {name}"

[cargo]
help = ["cargo --help"]
subcommand = ["cargo {sub} --help", "cargo help {sub}"]

[[cargo.discover]]
label = "Installed Commands"
run = "cargo --list"
section = '^Installed Commands:'
pattern = '^\s{4}([a-z][\w-]*)(?:\s+(.*))?$'
invoke = "cargo {name} --help"

[go]
help = ["go help"]
subcommand = ["go help {sub}", "go {sub} -h"]

[[go.discover]]
label = "Topics"
run = "go help"
section = '^Additional help topics:'
pattern = '^\s+([a-z][\w.-]*)\s{2,}(.*)$'
invoke = "go help {name}"

[npm]
help = ["npm help"]
subcommand = ["npm {sub} --help", "npm help {sub}"]

[docker]
help = ["docker --help"]
subcommand = ["docker {sub} --help"]

[kubectl]
help = ["kubectl --help"]
subcommand = ["kubectl {sub} --help"]

[systemctl]
help = ["systemctl --help"]
subcommand = ["man systemctl"]

[pip]
help = ["pip --help"]
subcommand = ["pip {sub} --help", "pip help {sub}"]
"""


class ToolPackError(ValueError):
    """Raised when a toolpack table does not have the expected shape."""


@dataclass(frozen=True)
class DiscoverySource:
    """One recipe producing navigable items from a command's output."""

    label: str
    run: str
    pattern: str
    invoke: str
    section: str | None = None


@dataclass(frozen=True)
class ToolPack:
    """Fetch and discovery recipes for one tool."""

    help: tuple[str, ...] = ()
    subcommand: tuple[str, ...] = ()
    discover: tuple[DiscoverySource, ...] = ()

    def help_commands(self) -> list[str]:
        """Templates for base help, falling back to the generic list."""
        return list(self.help) if self.help else list(GENERIC_HELP_TEMPLATES)

    def subcommand_commands(self) -> list[str]:
        """Templates for subcommand help, falling back to the generic list."""
        return list(self.subcommand) if self.subcommand else list(GENERIC_SUBCOMMAND_TEMPLATES)


def expand_template(template: str, command_path: Sequence[str], name: str | None = None) -> str:
    """Substitute ``{cmd}``, ``{base}``, ``{sub}`` and optionally ``{name}``."""
    tokens = list(command_path)
    base = tokens[0] if tokens else ""
    expanded = (
        template.replace("{cmd}", " ".join(tokens))
        .replace("{base}", base)
        .replace("{sub}", " ".join(tokens[1:]))
    )
    if name is not None:
        expanded = expanded.replace("{name}", name)
    return expanded


def expand_invoke(template: str, base: str, name: str) -> str:
    """Expand a discovery ``invoke`` template; only ``{base}`` and ``{name}`` apply."""
    return template.replace("{base}", base).replace("{name}", name)


def _string_list(value: object, field: str, tool: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ToolPackError(f"{tool}.{field} must be a list of strings")
    return tuple(value)


def _required_string(table: Mapping[str, object], field: str, tool: str) -> str:
    value = table.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ToolPackError(f"{tool}.discover.{field} must be a non-empty string")
    return value


def _check_regex(pattern: str, field: str, tool: str) -> None:
    try:
        re.compile(pattern)
    except re.error as exc:
        raise ToolPackError(f"{tool}.discover.{field} is not a valid regex: {exc}") from exc


def discovery_source_from_mapping(tool: str, table: object) -> DiscoverySource:
    """Validate one ``[[<tool>.discover]]`` table."""
    if not isinstance(table, dict):
        raise ToolPackError(f"{tool}.discover entries must be tables")
    section = table.get("section")
    if section is not None and not isinstance(section, str):
        raise ToolPackError(f"{tool}.discover.section must be a string")
    source = DiscoverySource(
        label=_required_string(table, "label", tool),
        run=_required_string(table, "run", tool),
        pattern=_required_string(table, "pattern", tool),
        invoke=_required_string(table, "invoke", tool),
        section=section or None,
    )
    _check_regex(source.pattern, "pattern", tool)
    if source.section is not None:
        _check_regex(source.section, "section", tool)
    return source


def toolpack_from_mapping(tool: str, table: object) -> ToolPack:
    """Validate one top-level ``[<tool>]`` table."""
    if not isinstance(table, dict):
        raise ToolPackError(f"{tool} must be a table")
    raw_discover = table.get("discover", [])
    if not isinstance(raw_discover, list):
        raise ToolPackError(f"{tool}.discover must be an array of tables")
    return ToolPack(
        help=_string_list(table.get("help"), "help", tool),
        subcommand=_string_list(table.get("subcommand"), "subcommand", tool),
        discover=tuple(discovery_source_from_mapping(tool, entry) for entry in raw_discover),
    )


def parse_toolpacks(text: str) -> dict[str, ToolPack]:
    """Parse a TOML document mapping tool name to toolpack.

    Raises ``tomllib.TOMLDecodeError`` or ``ToolPackError`` on invalid input.
    """
    data = tomllib.loads(text)
    return {name: toolpack_from_mapping(name, table) for name, table in data.items()}


def _toolpack_files(tools_dir: Path) -> list[Path]:
    try:
        candidates = sorted(tools_dir.iterdir())
    except OSError:
        return []
    return [path for path in candidates if path.suffix == paths.TOOLPACK_SUFFIX and path.is_file()]


class ToolPackRegistry:
    """Lookup table of toolpacks keyed by base command."""

    def __init__(self, packs: Mapping[str, ToolPack] | None = None) -> None:
        self._packs: dict[str, ToolPack] = dict(packs or {})

    @classmethod
    def defaults(cls) -> ToolPackRegistry:
        """Registry holding only the embedded catalog."""
        return cls(parse_toolpacks(DEFAULT_TOOLPACKS_TOML))

    @classmethod
    def load(cls, tools_dir: Path | None = None) -> ToolPackRegistry:
        """Embedded catalog overlaid with every valid user toolpack file.

        Files are applied in name order; a later file wins for the same tool.
        Malformed files are skipped with a warning.
        """
        registry = cls.defaults()
        directory = paths.TOOLS_DIR if tools_dir is None else tools_dir
        for path in _toolpack_files(directory):
            try:
                packs = parse_toolpacks(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError, ToolPackError) as exc:
                logger.warning("skipping toolpack file %s: %s", path, exc)
                continue
            logger.debug("loaded %d toolpack(s) from %s", len(packs), path)
            registry.update(packs)
        return registry

    def update(self, packs: Mapping[str, ToolPack]) -> None:
        """Replace whole toolpacks by tool name."""
        self._packs.update(packs)

    def lookup(self, base_command: str) -> ToolPack | None:
        return self._packs.get(base_command)

    def names(self) -> Iterable[str]:
        return sorted(self._packs)

    def __contains__(self, base_command: object) -> bool:
        return base_command in self._packs

    def __len__(self) -> int:
        return len(self._packs)


__all__ = [
    "DEFAULT_TOOLPACKS_TOML",
    "DiscoverySource",
    "GENERIC_HELP_TEMPLATES",
    "GENERIC_SUBCOMMAND_TEMPLATES",
    "ToolPack",
    "ToolPackError",
    "ToolPackRegistry",
    "discovery_source_from_mapping",
    "expand_invoke",
    "expand_template",
    "parse_toolpacks",
    "toolpack_from_mapping",
]
