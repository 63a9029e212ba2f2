"""Tests for help-text acquisition and manual-page cleanup.

Child processes are replaced with a stub runner keyed by the expanded
command line, so every fetch strategy can be exercised deterministically.
"""

from __future__ import annotations

import unittest

from helpv.config import Config, ToolConfig
from helpv.errors import FetchFailedError, NoCommandError
from helpv.fetcher import (
    ContentSource,
    fetch_best,
    fetch_with_invoke,
    help_templates,
    looks_like_help,
    man_page_candidates,
    select_output,
    source_for_template,
    strip_man_formatting,
)
from helpv.process import CommandResult


def ok(stdout: str = "", stderr: str = "", returncode: int = 0) -> CommandResult:
    return CommandResult(argv=(), returncode=returncode, stdout=stdout, stderr=stderr)


class StubRunner:
    def __init__(self, responses: dict[str, CommandResult] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[str] = []

    def __call__(self, line: str) -> CommandResult | None:
        self.calls.append(line)
        return self.responses.get(line)


class FetchBestTests(unittest.TestCase):
    def test_empty_command_path_raises_no_command(self) -> None:
        with self.assertRaises(NoCommandError):
            fetch_best([], Config(), StubRunner())

    def test_first_template_with_output_wins(self) -> None:
        runner = StubRunner(
            {
                "mytool --help": ok(returncode=1),
                "mytool -h": ok("usage: mytool [options]\n"),
            }
        )
        text, source = fetch_best(["mytool"], Config(), runner)
        self.assertEqual(text, "usage: mytool [options]\n")
        self.assertIs(source, ContentSource.HELP)
        self.assertEqual(runner.calls, ["mytool --help", "mytool -h"])

    def test_falls_back_to_deformatted_manual_page(self) -> None:
        runner = StubRunner({"man mytool": ok("N\bNA\bAM\bME\bE\n       mytool - does things\n")})
        text, source = fetch_best(["mytool"], Config(), runner)
        self.assertEqual(text, "NAME\n       mytool - does things\n")
        self.assertIs(source, ContentSource.MAN)
        self.assertEqual(runner.calls[-1], "man mytool")

    def test_subcommand_path_uses_hyphenated_manual_page(self) -> None:
        runner = StubRunner({"man mytool-run": ok("MYTOOL-RUN(1)\n")})
        text, source = fetch_best(["mytool", "run"], Config(), runner)
        self.assertEqual(text, "MYTOOL-RUN(1)\n")
        self.assertIs(source, ContentSource.MAN)
        self.assertIn("mytool run --help", runner.calls)
        self.assertIn("mytool help run", runner.calls)

    def test_failure_reports_the_command_path(self) -> None:
        with self.assertRaises(FetchFailedError) as ctx:
            fetch_best(["mytool", "run"], Config(), StubRunner())
        self.assertEqual(ctx.exception.command_path, ["mytool", "run"])
        self.assertIn("mytool run", str(ctx.exception))

    def test_user_help_flags_override_templates(self) -> None:
        config = Config(tools={"mytool": ToolConfig(help_flags=("{cmd} help",))})
        runner = StubRunner({"mytool help": ok("Usage: mytool\n")})
        text, _source = fetch_best(["mytool"], config, runner)
        self.assertEqual(text, "Usage: mytool\n")
        self.assertEqual(runner.calls, ["mytool help"])

    def test_toolpack_templates_apply_to_known_tools(self) -> None:
        self.assertEqual(help_templates(["git"], Config()), ["git --help"])
        self.assertEqual(help_templates(["git", "commit"], Config()), ["git help {sub}", "git {sub} -h"])
        self.assertEqual(help_templates(["unknown"], Config()), ["{cmd} --help", "{cmd} -h"])

    def test_manual_page_help_templates_are_deformatted(self) -> None:
        runner = StubRunner({"man systemctl": ok("S\bSY\bYN\bNO\bOP\bPS\bSI\bIS\bS\n       _\bs_\by_\bs\n")})
        text, source = fetch_best(["systemctl", "start"], Config(), runner)
        self.assertEqual(text, "SYNOPSIS\n       sys\n")
        self.assertNotIn("\b", text)
        self.assertIs(source, ContentSource.HELP)
        self.assertEqual(runner.calls, ["man systemctl"])

    def test_manual_page_candidates_are_unique(self) -> None:
        self.assertEqual(man_page_candidates(["git"]), ["git"])
        self.assertEqual(man_page_candidates(["git", "remote", "add"]), ["git-remote-add"])


class SelectOutputTests(unittest.TestCase):
    def test_prefers_stdout(self) -> None:
        self.assertEqual(select_output(ok("out", "err")), "out")

    def test_uses_stderr_of_successful_run(self) -> None:
        self.assertEqual(select_output(ok("  \n", "help on stderr")), "help on stderr")

    def test_uses_help_like_stderr_of_failed_run(self) -> None:
        self.assertEqual(select_output(ok("", "Usage: tool [flags]", returncode=2)), "Usage: tool [flags]")

    def test_rejects_error_stderr_of_failed_run(self) -> None:
        self.assertIsNone(select_output(ok("", "error: unknown command", returncode=1)))

    def test_missing_result_yields_none(self) -> None:
        self.assertIsNone(select_output(None))

    def test_help_markers(self) -> None:
        self.assertTrue(looks_like_help("USAGE: program [options]"))
        self.assertTrue(looks_like_help("SYNOPSIS\n    program [options]"))
        self.assertTrue(looks_like_help("Use --help for more information"))
        self.assertFalse(looks_like_help("Error: command not found"))
        self.assertFalse(looks_like_help(""))


class FetchWithInvokeTests(unittest.TestCase):
    def test_runs_expanded_invoke_template(self) -> None:
        runner = StubRunner({"git help commit": ok("GIT-COMMIT(1)\n")})
        self.assertEqual(fetch_with_invoke("git", "commit", "git help {name}", runner), "GIT-COMMIT(1)\n")
        self.assertEqual(runner.calls, ["git help commit"])

    def test_manual_page_invocations_are_deformatted(self) -> None:
        runner = StubRunner({"man git-log": ok("_\bl_\bo_\bg\n")})
        self.assertEqual(fetch_with_invoke("git", "git-log", "man {name}", runner), "log\n")

    def test_empty_output_raises(self) -> None:
        with self.assertRaises(FetchFailedError):
            fetch_with_invoke("git", "nothing", "git help {name}", StubRunner())

    def test_source_for_template(self) -> None:
        self.assertIs(source_for_template("man {name}"), ContentSource.MAN)
        self.assertIs(source_for_template("git help {name}"), ContentSource.HELP)


class StripManFormattingTests(unittest.TestCase):
    def test_bold_overstrike(self) -> None:
        self.assertEqual(strip_man_formatting("N\bNA\bAM\bME\bE"), "NAME")

    def test_underline_overstrike(self) -> None:
        self.assertEqual(strip_man_formatting("_\bf_\bo_\bo"), "foo")

    def test_ansi_sequences(self) -> None:
        text = "\x1b[1mBold\x1b[0m and \x1b[38;5;196mred\x1b[0m text"
        self.assertEqual(strip_man_formatting(text), "Bold and red text")

    def test_mixed_formatting(self) -> None:
        text = "\x1b[1mH\bHe\bel\blp\bp\x1b[0m - description"
        self.assertEqual(strip_man_formatting(text), "Help - description")

    def test_plain_text_is_unchanged_and_stripping_is_idempotent(self) -> None:
        plain = "Line one\nLine two"
        self.assertEqual(strip_man_formatting(plain), plain)
        self.assertEqual(strip_man_formatting(""), "")
        once = strip_man_formatting("N\bNA\bAM\bME\bE \x1b[4mx\x1b[0m")
        self.assertEqual(strip_man_formatting(once), once)


if __name__ == "__main__":
    unittest.main()
