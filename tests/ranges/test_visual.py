"""Tests for visual ordering of citation groups."""

from citemarks.ranges.overlap import SimpleRange
from citemarks.ranges.visual import Point, visual_sort


class TestVisualSort:
    """Test ordering by on-screen position."""

    def test_top_to_bottom_left_to_right(self):
        ranges = {
            "G1": SimpleRange("body", 30, 31),
            "G2": SimpleRange("body", 10, 11),
            "G3": SimpleRange("body", 20, 21),
        }
        positions = {30: Point(5, 200), 10: Point(300, 100), 20: Point(10, 100)}
        order = visual_sort(ranges, lambda r: positions[r.start])
        assert order == ["G3", "G2", "G1"]

    def test_tuple_positions(self):
        ranges = {"a": SimpleRange("body", 1, 2), "b": SimpleRange("body", 0, 1)}
        positions = {1: (0, 50), 0: (0, 10)}
        assert visual_sort(ranges, lambda r: positions[r.start]) == ["b", "a"]

    def test_same_position_keeps_text_order(self):
        """Ranges at one position sort by their start in the text flow."""
        ranges = {
            "late": SimpleRange("body", 8, 8),
            "early": SimpleRange("body", 2, 2),
        }
        assert visual_sort(ranges, lambda r: Point(0, 0)) == ["early", "late"]

    def test_footnote_at_anchor(self):
        """Footnote citations are placed at their anchor in the main text.

        With multi-column layouts the anchor may not match reading
        order; this placement is accepted.
        """
        footnote = SimpleRange("footnote-1", 0, 4)
        ranges = {
            "G1": SimpleRange("body", 0, 1),
            "G_fn": footnote,
            "G2": SimpleRange("body", 50, 51),
        }
        anchor = SimpleRange("body", 20, 21)
        positions = {
            ("body", 0): Point(0, 10),
            ("body", 20): Point(0, 20),
            ("body", 50): Point(0, 30),
            ("footnote-1", 0): Point(0, 900),
        }

        def anchor_of(text_range):
            return anchor if text_range.text_flow == "footnote-1" else None

        order = visual_sort(
            ranges,
            lambda r: positions[(r.text_flow, r.start)],
            footnote_anchor_of=anchor_of,
        )
        assert order == ["G1", "G_fn", "G2"]

    def test_footnote_citations_share_anchor(self):
        anchor = SimpleRange("body", 20, 21)
        ranges = {
            "second": SimpleRange("fn", 9, 10),
            "first": SimpleRange("fn", 1, 2),
        }
        order = visual_sort(ranges, lambda r: Point(0, r.start), lambda r: anchor)
        assert order == ["first", "second"]
