"""Command switcher overlay: history filtering and the free-form row."""

from __future__ import annotations

import unittest

from helpv.switcher import CommandSwitcher, SwitcherActionKind


def type_text(switcher: CommandSwitcher, text: str) -> None:
    for ch in text:
        switcher.handle_key(ch)


class CommandSwitcherTests(unittest.TestCase):
    def test_enter_on_empty_query_opens_selected_history_entry(self) -> None:
        switcher = CommandSwitcher(["git", "cargo"])
        switcher.handle_key("Down")
        action = switcher.handle_key("Enter")
        self.assertIs(action.kind, SwitcherActionKind.SELECT)
        self.assertEqual(action.command, "cargo")

    def test_typed_command_is_offered_after_history_matches(self) -> None:
        switcher = CommandSwitcher(["git", "go"])
        type_text(switcher, "g")
        self.assertEqual(switcher.free_form_command(), "g")
        self.assertEqual(switcher.row_count(), 3)
        switcher.handle_key("End")
        self.assertTrue(switcher.is_free_form_row(switcher.selected))
        action = switcher.handle_key("Enter")
        self.assertEqual(action.command, "g")

    def test_query_naming_a_history_entry_has_no_extra_row(self) -> None:
        switcher = CommandSwitcher(["git", "go"])
        type_text(switcher, "go")
        self.assertIsNone(switcher.free_form_command())
        self.assertEqual(switcher.selected_command(), "go")

    def test_unmatched_query_selects_free_form_row_first(self) -> None:
        switcher = CommandSwitcher(["git"])
        type_text(switcher, "docker")
        self.assertEqual(switcher.filtered, [])
        self.assertEqual(switcher.selected, 0)
        action = switcher.handle_key("Enter")
        self.assertIs(action.kind, SwitcherActionKind.SELECT)
        self.assertEqual(action.command, "docker")

    def test_empty_history_and_blank_query_cannot_select(self) -> None:
        switcher = CommandSwitcher([])
        switcher.handle_key(" ")
        self.assertIsNone(switcher.free_form_command())
        self.assertIs(switcher.handle_key("Enter").kind, SwitcherActionKind.NONE)

    def test_escape_closes(self) -> None:
        switcher = CommandSwitcher(["git"])
        self.assertIs(switcher.handle_key("Escape").kind, SwitcherActionKind.CLOSE)


if __name__ == "__main__":
    unittest.main()
