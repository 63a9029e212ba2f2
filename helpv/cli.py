"""Command-line front door for helpv.

Parses the command path, configures logging, loads the configuration and
fetches the initial help text, then hands the terminal to the main loop.
Startup failures print ``helpv: <message>`` and return the error's exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import load_config
from .errors import ExitCode, HelpvError
from .logging import console_suspended, setup_logging

logger = logging.getLogger("helpv.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="helpv",
        description="Browse a command's help text, search it, and drill into subcommands.",
    )
    parser.add_argument("command", help="Command to show help for, e.g. 'git'.")
    parser.add_argument(
        "subcommands",
        nargs="*",
        metavar="SUBCOMMAND",
        help="Optional subcommand path, e.g. 'remote add'.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug).",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Write logs to this file.")
    parser.add_argument("--config", type=Path, default=None, help="Use this config.toml instead of the default.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _fail(error: HelpvError) -> int:
    print(f"helpv: {error}", file=sys.stderr)
    return error.exit_code


def main(argv: list[str] | None = None) -> int:
    """Run helpv and return the process exit code."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        code = exc.code
        return code if isinstance(code, int) else ExitCode.USAGE_ERROR

    # Imported late so argument errors and --version stay fast.
    from .runtime.app import App
    from .runtime.loop import run_main_loop
    from .runtime.terminal import TerminalController

    command_path = [args.command, *args.subcommands]
    try:
        setup_logging(args.verbose, args.log_file)
        logger.debug("starting with command path %r", command_path)
        config = load_config(args.config, required=args.config is not None)
        app = App(command_path, config)
    except HelpvError as exc:
        return _fail(exc)

    try:
        terminal = TerminalController(sys.stdin.fileno(), sys.stdout.fileno())
        with console_suspended():
            run_main_loop(app, terminal, sys.stdin.fileno())
    except HelpvError as exc:
        app.close()
        return _fail(exc)
    return ExitCode.SUCCESS


if __name__ == "__main__":
    sys.exit(main())
