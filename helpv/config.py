"""User configuration loaded from ``<user-config>/helpv/config.toml``.

Holds per-tool help-template overrides, the ordered subcommand pattern pairs
used by the parser, and the key-binding table. Missing values fall back to
defaults; malformed files raise ``ConfigParseError`` at startup.
"""

from __future__ import annotations

import functools
import logging
import re
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path

from . import paths
from .errors import ConfigParseError
from .toolpacks import ToolPackRegistry

logger = logging.getLogger("helpv.config")


@dataclass(frozen=True)
class ToolConfig:
    """User override of the base-help templates for one tool."""

    help_flags: tuple[str, ...]


@dataclass(frozen=True)
class SubcommandPattern:
    """A section-header regex paired with the entry regex used inside it."""

    section: str
    entry: str


DEFAULT_SUBCOMMAND_PATTERNS: tuple[SubcommandPattern, ...] = (
    SubcommandPattern(
        section=r"(?im)^(commands?|subcommands?|available\s+commands?):?\s*$",
        entry=r"^\s{2,4}([\w][\w-]*)\s+(.*)$",
    ),
    SubcommandPattern(
        section=r"(?im)^(usage|options):?\s*$",
        entry=r"^\s{2,4}([\w][\w-]*)\s{2,}(.*)$",
    ),
    SubcommandPattern(
        section=r"^\w+\s+COMMANDS?\s*$",
        entry=r"^\s{2}([\w][\w-]*):\s+(.*)$",
    ),
)


def _keys(*names: str):
    return field(default_factory=lambda: list(names))


@dataclass
class KeyConfig:
    """Paging-mode binding table: action name to symbolic key names."""

    quit: list[str] = _keys("q", "Escape")
    scroll_up: list[str] = _keys("k", "Up")
    scroll_down: list[str] = _keys("j", "Down")
    half_page_up: list[str] = _keys("Ctrl-u", "u")
    half_page_down: list[str] = _keys("Ctrl-d", "d")
    page_up: list[str] = _keys("Ctrl-b", "b", "PageUp")
    page_down: list[str] = _keys("Ctrl-f", "Space", "PageDown")
    top: list[str] = _keys("gg", "Home")
    bottom: list[str] = _keys("G", "End")
    search: list[str] = _keys("/")
    next_match: list[str] = _keys("n")
    prev_match: list[str] = _keys("N")
    find_subcommand: list[str] = _keys("f")
    open_command: list[str] = _keys("o")
    back: list[str] = _keys("Backspace")
    help: list[str] = _keys("?")

    @classmethod
    def action_names(cls) -> tuple[str, ...]:
        return tuple(item.name for item in fields(cls))

    def bindings(self) -> dict[str, list[str]]:
        """Return ``{action_name: [key, ...]}`` in declaration order."""
        return {name: list(getattr(self, name)) for name in self.action_names()}


@functools.lru_cache(maxsize=512)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile ``pattern`` once per process; parser calls reuse the result."""
    return re.compile(pattern)


@dataclass
class Config:
    """Effective runtime configuration."""

    tools: dict[str, ToolConfig] = field(default_factory=dict)
    subcommand_patterns: list[SubcommandPattern] = field(
        default_factory=lambda: list(DEFAULT_SUBCOMMAND_PATTERNS)
    )
    keys: KeyConfig = field(default_factory=KeyConfig)
    toolpacks: ToolPackRegistry = field(default_factory=ToolPackRegistry.defaults)

    def help_override(self, tool: str) -> list[str] | None:
        """User-configured base-help templates for ``tool``, if any."""
        tool_config = self.tools.get(tool)
        if tool_config is None or not tool_config.help_flags:
            return None
        return list(tool_config.help_flags)

    def compiled(self, pattern: str) -> re.Pattern[str]:
        return compile_pattern(pattern)


def _string_list(value: object, where: str, path: Path | None) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigParseError(path, f"{where} must be a string or a list of strings")
    return list(value)


def _parse_tools(raw: object, path: Path | None) -> dict[str, ToolConfig]:
    if not isinstance(raw, dict):
        raise ConfigParseError(path, "[tools] must be a table")
    tools: dict[str, ToolConfig] = {}
    for name, table in raw.items():
        if not isinstance(table, dict):
            raise ConfigParseError(path, f"[tools.{name}] must be a table")
        help_flags = _string_list(table.get("help_flags", []), f"tools.{name}.help_flags", path)
        tools[name] = ToolConfig(help_flags=tuple(help_flags))
    return tools


def _parse_patterns(raw: object, path: Path | None) -> list[SubcommandPattern]:
    if not isinstance(raw, list):
        raise ConfigParseError(path, "subcommand_patterns must be an array of tables")
    patterns: list[SubcommandPattern] = []
    for idx, table in enumerate(raw):
        if not isinstance(table, dict):
            raise ConfigParseError(path, f"subcommand_patterns[{idx}] must be a table")
        section = table.get("section")
        entry = table.get("entry")
        if not isinstance(section, str) or not isinstance(entry, str):
            raise ConfigParseError(path, f"subcommand_patterns[{idx}] needs string 'section' and 'entry'")
        for label, pattern in (("section", section), ("entry", entry)):
            try:
                compile_pattern(pattern)
            except re.error as exc:
                raise ConfigParseError(path, f"subcommand_patterns[{idx}].{label}: {exc}") from exc
        patterns.append(SubcommandPattern(section=section, entry=entry))
    return patterns or list(DEFAULT_SUBCOMMAND_PATTERNS)


def _parse_keys(raw: object, path: Path | None) -> KeyConfig:
    if not isinstance(raw, dict):
        raise ConfigParseError(path, "[keys] must be a table")
    keys = KeyConfig()
    known = set(KeyConfig.action_names())
    for action, value in raw.items():
        if action not in known:
            logger.warning("ignoring unknown key action %r in %s", action, path)
            continue
        bound = _string_list(value, f"keys.{action}", path)
        if bound:
            setattr(keys, action, bound)
    return keys


def config_from_mapping(
    data: dict[str, object],
    path: Path | None = None,
    toolpacks: ToolPackRegistry | None = None,
) -> Config:
    """Build a ``Config`` from decoded TOML, applying defaults for absent keys."""
    config = Config(toolpacks=toolpacks if toolpacks is not None else ToolPackRegistry.defaults())
    if "tools" in data:
        config.tools = _parse_tools(data["tools"], path)
    if "subcommand_patterns" in data:
        config.subcommand_patterns = _parse_patterns(data["subcommand_patterns"], path)
    if "keys" in data:
        config.keys = _parse_keys(data["keys"], path)
    return config


def load_config(
    config_path: Path | None = None,
    tools_dir: Path | None = None,
    required: bool = False,
) -> Config:
    """Load the main config file and the toolpack registry.

    A missing config file yields defaults unless ``required`` is set, as it is
    for a path given on the command line. Read or parse failures of the main
    file raise ``ConfigParseError``; bad toolpack files are skipped.
    """
    path = paths.CONFIG_PATH if config_path is None else config_path
    toolpacks = ToolPackRegistry.load(tools_dir)
    if not path.exists():
        if required:
            raise ConfigParseError(path, "file not found")
        logger.debug("no config file at %s; using defaults", path)
        return Config(toolpacks=toolpacks)
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigParseError(path, f"cannot read file: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigParseError(path, str(exc)) from exc
    logger.info("loaded config from %s", path)
    return config_from_mapping(data, path, toolpacks)


__all__ = [
    "Config",
    "DEFAULT_SUBCOMMAND_PATTERNS",
    "KeyConfig",
    "SubcommandPattern",
    "ToolConfig",
    "compile_pattern",
    "config_from_mapping",
    "load_config",
]
