"""Pager scrolling and in-text search behavior."""

from __future__ import annotations

import unittest

from helpv.pager import Pager


def numbered(count: int) -> Pager:
    return Pager.from_text("\n".join(f"line {idx}" for idx in range(count)))


class PagerScrollTests(unittest.TestCase):
    def test_scroll_down_is_unbounded_until_clamped(self) -> None:
        pager = numbered(10)
        pager.scroll_down(50)
        self.assertEqual(pager.scroll, 50)
        pager.clamp_scroll(4)
        self.assertEqual(pager.scroll, 6)

    def test_scroll_up_saturates_at_zero(self) -> None:
        pager = numbered(10)
        pager.scroll_down(2)
        pager.scroll_up(5)
        self.assertEqual(pager.scroll, 0)

    def test_top_and_bottom(self) -> None:
        pager = numbered(30)
        pager.scroll_to_bottom(10)
        self.assertEqual(pager.scroll, 20)
        pager.scroll_to_top()
        self.assertEqual(pager.scroll, 0)

    def test_short_content_never_scrolls(self) -> None:
        pager = numbered(3)
        pager.scroll_to_bottom(10)
        self.assertEqual(pager.scroll, 0)
        self.assertEqual(pager.scroll_percentage(10), 100)

    def test_scroll_percentage(self) -> None:
        pager = numbered(30)
        self.assertEqual(pager.scroll_percentage(10), 0)
        pager.scroll = 10
        self.assertEqual(pager.scroll_percentage(10), 50)
        pager.scroll = 20
        self.assertEqual(pager.scroll_percentage(10), 100)

    def test_visible_lines_carry_line_numbers(self) -> None:
        pager = numbered(10)
        pager.scroll = 8
        self.assertEqual(pager.visible_lines(5), [(8, "line 8"), (9, "line 9")])


class PagerSearchTests(unittest.TestCase):
    TEXT = "Usage: tool\n  build   Build it\n  test    Test it\nMore BUILD notes\n"

    def test_search_is_case_insensitive_and_jumps_to_first_match(self) -> None:
        pager = Pager.from_text(self.TEXT)
        pager.set_search("build")
        self.assertEqual(pager.match_lines, [1, 3])
        self.assertEqual(pager.current_match, 0)
        self.assertEqual(pager.scroll, 1)
        self.assertEqual(pager.current_match_line(), 1)

    def test_search_prefers_match_at_or_after_origin(self) -> None:
        pager = Pager.from_text(self.TEXT)
        pager.set_search("build", origin=2)
        self.assertEqual(pager.current_match_line(), 3)

    def test_search_wraps_to_first_match_when_none_follow(self) -> None:
        pager = Pager.from_text(self.TEXT)
        pager.set_search("usage", origin=3)
        self.assertEqual(pager.current_match_line(), 0)
        self.assertEqual(pager.scroll, 0)

    def test_next_and_prev_wrap_around(self) -> None:
        pager = Pager.from_text(self.TEXT)
        pager.set_search("it")
        self.assertEqual(pager.match_lines, [1, 2])
        pager.next_match()
        self.assertEqual(pager.scroll, 2)
        pager.next_match()
        self.assertEqual(pager.scroll, 1)
        pager.prev_match()
        self.assertEqual(pager.scroll, 2)

    def test_no_matches_leaves_scroll_alone(self) -> None:
        pager = Pager.from_text(self.TEXT)
        pager.scroll = 2
        pager.set_search("zzz")
        self.assertEqual(pager.match_count(), 0)
        self.assertIsNone(pager.current_match_line())
        pager.next_match()
        self.assertEqual(pager.scroll, 2)

    def test_empty_query_clears_search(self) -> None:
        pager = Pager.from_text(self.TEXT)
        pager.set_search("test")
        pager.set_search("")
        self.assertIsNone(pager.search_query)
        self.assertEqual(pager.match_lines, [])

    def test_snapshot_round_trip_restores_previous_search(self) -> None:
        pager = Pager.from_text(self.TEXT)
        pager.set_search("build")
        snapshot = pager.snapshot_search()
        pager.set_search("test")
        pager.scroll = 0
        pager.restore_search(snapshot)
        self.assertEqual(pager.search_query, "build")
        self.assertEqual(pager.match_lines, [1, 3])
        self.assertEqual(pager.scroll, 1)


if __name__ == "__main__":
    unittest.main()
