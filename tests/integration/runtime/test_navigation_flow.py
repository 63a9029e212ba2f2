"""End-to-end navigation flows through ``helpv.runtime.app.App``.

Drives the state machine one key at a time against stub command output:
drill-in and back, the command switcher, in-text search, discovery merges
and the banner paths for failed fetches.
"""

from __future__ import annotations

import unittest

from helpv.config import Config
from helpv.discovery import DiscoveryChannel
from helpv.fetcher import ContentSource
from helpv.parser import Subcommand
from helpv.process import CommandResult
from helpv.runtime.app import NO_SUBCOMMANDS_MESSAGE, App, Mode

TOOL_HELP = (
    "Usage: tool COMMAND\n"
    "\n"
    "Commands:\n"
    "  build    Compile the project\n"
    "  test     Run the test suite\n"
    "\n"
    "Details:\n" + "".join(f"detail line {idx}\n" for idx in range(20))
)

BUILD_HELP = "Usage: tool build [OPTIONS]\n\nOptions:\n  --release  Build in release mode\n"


def ok(stdout: str) -> CommandResult:
    return CommandResult(argv=(), returncode=0, stdout=stdout, stderr="")


class StubRunner:
    def __init__(self, responses: dict[str, str]) -> None:
        self.responses = {line: ok(text) for line, text in responses.items()}
        self.calls: list[str] = []

    def __call__(self, line: str) -> CommandResult | None:
        self.calls.append(line)
        return self.responses.get(line)


class SpawnRecorder:
    """Hands out fresh channels and remembers which base each was for."""

    def __init__(self) -> None:
        self.bases: list[str] = []
        self.channels: list[DiscoveryChannel] = []

    def __call__(self, base: str) -> DiscoveryChannel:
        channel = DiscoveryChannel()
        self.bases.append(base)
        self.channels.append(channel)
        return channel


def press(app: App, *keys: str) -> None:
    for key in keys:
        app.handle_key(key)


class NavigationFlowTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = StubRunner(
            {
                "tool --help": TOOL_HELP,
                "tool build --help": BUILD_HELP,
                "other --help": "Usage: other\n",
                "tool help deploy": "Deploy the project somewhere\n",
                "man tool-extra": "TOOL-EXTRA(1)\n\nSEE ALSO\n       tool(1), tool-more(1)\n",
            }
        )
        self.spawn = SpawnRecorder()
        self.app = App(["tool"], Config(), runner=self.runner, spawn=self.spawn)
        self.app.set_viewport(5)


class DrillAndBackTests(NavigationFlowTestCase):
    def test_drill_into_subcommand_and_back_restores_scroll(self) -> None:
        app = self.app
        press(app, "j", "j", "j")
        self.assertEqual(app.pager.scroll, 3)

        press(app, "f", "b", "u")
        self.assertIs(app.mode, Mode.FINDING)
        press(app, "Enter")

        self.assertIs(app.mode, Mode.PAGING)
        self.assertIsNone(app.finder)
        self.assertEqual(app.command_path, ["tool", "build"])
        self.assertEqual(app.pager.scroll, 0)
        self.assertEqual(app.breadcrumb(), "tool > build")
        self.assertEqual(len(app.nav_stack), 1)
        self.assertEqual(app.subcommands, [])

        press(app, "Backspace")
        self.assertEqual(app.command_path, ["tool"])
        self.assertEqual(app.pager.scroll, 3)
        self.assertEqual(len(app.nav_stack), 0)
        self.assertEqual([item.name for item in app.subcommands], ["build", "test"])
        self.assertEqual(self.runner.calls.count("tool --help"), 2)
        self.assertEqual(self.spawn.bases, ["tool", "tool", "tool"])

    def test_back_on_empty_stack_does_nothing(self) -> None:
        press(self.app, "Backspace")
        self.assertEqual(self.app.command_path, ["tool"])
        self.assertIsNone(self.app.banner)

    def test_failed_drill_rolls_back_and_shows_banner(self) -> None:
        app = self.app
        press(app, "j", "j", "f", "t", "e", "s", "t", "Enter")
        self.assertIs(app.mode, Mode.PAGING)
        self.assertEqual(app.command_path, ["tool"])
        self.assertEqual(len(app.nav_stack), 0)
        self.assertEqual(app.pager.scroll, 2)
        assert app.banner is not None
        self.assertTrue(app.banner.startswith("Could not fetch help for 'tool test'"))

        press(app, "j")
        self.assertIsNone(app.banner)

    def test_finder_without_subcommands_shows_banner(self) -> None:
        app = App(["tool", "build"], Config(), runner=self.runner, spawn=self.spawn)
        press(app, "f")
        self.assertIs(app.mode, Mode.PAGING)
        self.assertEqual(app.banner, NO_SUBCOMMANDS_MESSAGE)

    def test_finder_escape_returns_to_paging(self) -> None:
        press(self.app, "f", "x", "Escape")
        self.assertIs(self.app.mode, Mode.PAGING)
        self.assertIsNone(self.app.finder)


class PagingKeyTests(NavigationFlowTestCase):
    def test_g_chord_and_bottom(self) -> None:
        app = self.app
        press(app, "G")
        self.assertEqual(app.pager.scroll, len(app.pager.lines) - 5)
        press(app, "g", "g")
        self.assertEqual(app.pager.scroll, 0)

    def test_g_followed_by_other_key_applies_that_key(self) -> None:
        press(self.app, "g", "j")
        self.assertEqual(self.app.pager.scroll, 1)
        self.assertFalse(self.app.key_handler.pending_g)

    def test_page_keys_use_viewport_height_and_clamp(self) -> None:
        app = self.app
        press(app, "Ctrl-d")
        self.assertEqual(app.pager.scroll, 2)
        press(app, " ")
        self.assertEqual(app.pager.scroll, 7)
        for _ in range(10):
            press(app, "PageDown")
        self.assertEqual(app.pager.scroll, app.pager.max_scroll(5))
        press(app, "k")
        self.assertEqual(app.pager.scroll, app.pager.max_scroll(5) - 1)

    def test_alt_chord_is_ignored_while_paging(self) -> None:
        press(self.app, "j", "Alt-q")
        self.assertFalse(self.app.should_quit)
        self.assertIs(self.app.mode, Mode.PAGING)
        self.assertEqual(self.app.pager.scroll, 1)

    def test_help_overlay_opens_and_closes_without_quitting(self) -> None:
        press(self.app, "?")
        self.assertIs(self.app.mode, Mode.HELP)
        press(self.app, "q")
        self.assertIs(self.app.mode, Mode.PAGING)
        self.assertFalse(self.app.should_quit)
        press(self.app, "q")
        self.assertTrue(self.app.should_quit)


class SearchFlowTests(NavigationFlowTestCase):
    def test_enter_commits_search_and_n_cycles(self) -> None:
        app = self.app
        press(app, "/", *"detail line 1", "Enter")
        self.assertIs(app.mode, Mode.PAGING)
        self.assertEqual(app.pager.search_query, "detail line 1")
        first = app.pager.current_match_line()
        press(app, "n")
        self.assertNotEqual(app.pager.current_match_line(), first)
        press(app, "N")
        self.assertEqual(app.pager.current_match_line(), first)

    def test_escape_restores_state_from_before_the_prompt(self) -> None:
        app = self.app
        press(app, "j", "j", "/", *"line 15")
        self.assertEqual(app.pager.scroll, 22)
        press(app, "Escape")
        self.assertIs(app.mode, Mode.PAGING)
        self.assertIsNone(app.pager.search_query)
        self.assertEqual(app.pager.scroll, 2)

    def test_backspace_to_empty_clears_matches(self) -> None:
        app = self.app
        press(app, "/", "x", "Backspace")
        self.assertIsNone(app.pager.search_query)
        self.assertEqual(app.search_input, "")


class SwitcherFlowTests(NavigationFlowTestCase):
    def test_switching_replaces_session_and_records_history(self) -> None:
        app = self.app
        press(app, "f", "b", "u", "Enter")
        self.assertEqual(len(app.nav_stack), 1)

        press(app, "o", *"other", "Enter")
        self.assertIs(app.mode, Mode.PAGING)
        self.assertEqual(app.command_path, ["other"])
        self.assertEqual(len(app.nav_stack), 0)
        self.assertEqual(app.command_history.items(), ["tool", "other"])
        self.assertEqual(self.spawn.bases[-1], "other")

        press(app, "o", "Down", "Up", "Enter")
        self.assertEqual(app.command_path, ["tool"])
        self.assertEqual(app.command_history.items(), ["tool", "other"])

    def test_failed_switch_keeps_current_session(self) -> None:
        app = self.app
        press(app, "o", *"nope", "Enter")
        self.assertIs(app.mode, Mode.PAGING)
        self.assertEqual(app.command_path, ["tool"])
        self.assertEqual(app.command_history.items(), ["tool"])
        assert app.banner is not None
        self.assertIn("'nope'", app.banner)


class DiscoveryFlowTests(NavigationFlowTestCase):
    def test_discovered_items_merge_without_duplicates(self) -> None:
        app = self.app
        self.assertFalse(app.poll_discovery())
        self.spawn.channels[0].send(
            [
                Subcommand("build", "From discovery", label="All Commands", invoke_template="tool help {name}"),
                Subcommand("deploy", "Deploy it", label="Guides", invoke_template="tool help {name}"),
            ]
        )
        self.assertTrue(app.poll_discovery())
        self.assertEqual([item.name for item in app.subcommands], ["build", "test", "deploy"])
        self.assertIsNone(app.subcommands[0].label)
        self.assertIsNone(app.discovery)

    def test_drilling_into_discovered_item_uses_its_invoke_template(self) -> None:
        app = self.app
        self.spawn.channels[0].send([Subcommand("deploy", label="Guides", invoke_template="tool help {name}")])
        app.poll_discovery()
        press(app, "f", *"deploy", "Enter")
        self.assertEqual(app.pager.lines, ["Deploy the project somewhere"])
        self.assertEqual(app.command_path, ["tool"])
        self.assertIs(app.content_source, ContentSource.HELP)
        self.assertEqual(len(app.nav_stack), 1)
        self.assertEqual(len(self.spawn.channels), 1)

    def test_manual_page_item_merges_see_also_references(self) -> None:
        app = self.app
        self.spawn.channels[0].send([Subcommand("tool-extra", label="Man Pages", invoke_template="man {name}")])
        app.poll_discovery()
        press(app, "f", *"extra", "Enter")
        self.assertIs(app.content_source, ContentSource.MAN)
        self.assertEqual([item.name for item in app.subcommands], ["tool-more"])

        press(app, "Backspace")
        self.assertIs(app.content_source, ContentSource.HELP)

    def test_navigation_cancels_pending_discovery(self) -> None:
        app = self.app
        first = self.spawn.channels[0]
        press(app, "f", "b", "u", "Enter")
        self.assertTrue(first.closed)
        self.assertFalse(first.send([Subcommand("late")]))
        self.assertIs(app.discovery, self.spawn.channels[1])

    def test_sender_finishing_empty_clears_pending_channel(self) -> None:
        app = self.app
        self.spawn.channels[0].close_sender()
        self.assertFalse(app.poll_discovery())
        self.assertIsNone(app.discovery)

    def test_close_discards_pending_results(self) -> None:
        app = self.app
        channel = self.spawn.channels[0]
        app.close()
        self.assertTrue(channel.closed)
        self.assertIsNone(app.discovery)


if __name__ == "__main__":
    unittest.main()
