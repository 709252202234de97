"""Document range checks and visual ordering."""

from citemarks.ranges.overlap import (
    ProtectedRanges,
    RangeForOverlapCheck,
    RangeOverlap,
    RangeOverlapKind,
    SimpleRange,
    TextRange,
    check_range_overlaps,
    check_range_overlaps_with_cursor,
    classify,
    find_overlapping_ranges,
    footnote_anchor_ranges,
)
from citemarks.ranges.visual import Point, visual_sort

__all__ = [
    "Point",
    "ProtectedRanges",
    "RangeForOverlapCheck",
    "RangeOverlap",
    "RangeOverlapKind",
    "SimpleRange",
    "TextRange",
    "check_range_overlaps",
    "check_range_overlaps_with_cursor",
    "classify",
    "find_overlapping_ranges",
    "footnote_anchor_ranges",
    "visual_sort",
]
