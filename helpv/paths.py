"""Filesystem locations for user configuration.

Resolved once through ``platformdirs`` so every platform gets its native
config directory (``~/.config/helpv`` on Linux).
"""

from __future__ import annotations

from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "helpv"
CONFIG_FILENAME = "config.toml"
TOOLS_DIRNAME = "tools"
TOOLPACK_SUFFIX = ".toml"

CONFIG_DIR = Path(user_config_dir(APP_NAME, appauthor=False))
CONFIG_PATH = CONFIG_DIR / CONFIG_FILENAME
TOOLS_DIR = CONFIG_DIR / TOOLS_DIRNAME
