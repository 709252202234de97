"""Overlap checks for protected document ranges.

Before the host changes document structure it can verify that
citation marks, the bibliography, the cursor and footnote anchors do
not overlap. Ranges are compared only within one text flow (the body
text, a footnote, a frame, ...).
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from enum import Enum
from typing import Any, Protocol

import msgspec

from citemarks.exceptions import RangeOverlapError


class TextRange(Protocol):
    """Host range: a text flow and comparable start and end positions."""

    @property
    def text_flow(self) -> Hashable: ...

    @property
    def start(self) -> Any: ...

    @property
    def end(self) -> Any: ...


class SimpleRange(msgspec.Struct, frozen=True):
    """Range given by integer offsets within a text flow."""

    text_flow: str
    start: int
    end: int


class RangeOverlapKind(Enum):
    """Relationship between two ranges of the same text flow."""

    EQUAL_RANGE = "equal-range"
    OVERLAP = "overlap"
    TOUCH = "touch"
    DISJOINT = "disjoint"


class RangeForOverlapCheck(msgspec.Struct, frozen=True):
    """A range with what it protects, for reporting."""

    range: Any
    kind: str
    description: str = ""

    def label(self) -> str:
        return f"{self.kind} {self.description}".strip()


class RangeOverlap(msgspec.Struct, frozen=True):
    """Ranges found to be equal, overlapping or touching."""

    kind: RangeOverlapKind
    ranges: tuple[RangeForOverlapCheck, ...]

    def describe(self) -> str:
        names = ", ".join(r.label() for r in self.ranges)
        return f"{self.kind.value}: {names}"


def classify(a: TextRange, b: TextRange) -> RangeOverlapKind:
    """Classify two ranges of the same text flow."""
    if a.start == b.start and a.end == b.end:
        return RangeOverlapKind.EQUAL_RANGE

    low = max(a.start, b.start)
    high = min(a.end, b.end)
    if low < high:
        return RangeOverlapKind.OVERLAP
    if low == high:
        # An empty range strictly inside the other one overlaps it
        if a.start < low < a.end or b.start < low < b.end:
            return RangeOverlapKind.OVERLAP
        return RangeOverlapKind.TOUCH
    return RangeOverlapKind.DISJOINT


def _is_reported(kind: RangeOverlapKind, include_touching: bool) -> bool:
    if kind is RangeOverlapKind.DISJOINT:
        return False
    return include_touching or kind is not RangeOverlapKind.TOUCH


def _partition(
    items: Iterable[RangeForOverlapCheck],
) -> dict[Hashable, list[RangeForOverlapCheck]]:
    partitions: dict[Hashable, list[RangeForOverlapCheck]] = {}
    for item in items:
        partitions.setdefault(item.range.text_flow, []).append(item)
    return partitions


def find_overlapping_ranges(
    items: Iterable[RangeForOverlapCheck],
    report_at_most: int = 0,
    include_touching: bool = False,
) -> list[RangeOverlap]:
    """Find equal, overlapping and (optionally) touching ranges.

    Ranges are partitioned by text flow and sorted by start. Identical
    ranges are reported together as one EQUAL_RANGE overlap; the
    remaining ranges are scanned once, each compared with the range
    reaching furthest so far.

    Args:
        items: Ranges to check.
        report_at_most: Stop after this many overlaps; 0 for no limit.
        include_touching: Also report ranges that only touch.

    Returns:
        Overlaps found, in text flow and position order.
    """
    found: list[RangeOverlap] = []

    def full() -> bool:
        return 0 < report_at_most <= len(found)

    for partition in _partition(items).values():
        partition.sort(key=lambda item: (item.range.start, item.range.end))

        distinct: list[RangeForOverlapCheck] = []
        index = 0
        while index < len(partition):
            same = [partition[index]]
            index += 1
            while index < len(partition) and (
                classify(same[0].range, partition[index].range)
                is RangeOverlapKind.EQUAL_RANGE
            ):
                same.append(partition[index])
                index += 1
            if len(same) > 1:
                found.append(RangeOverlap(RangeOverlapKind.EQUAL_RANGE, tuple(same)))
                if full():
                    return found
            distinct.append(same[0])

        reach: RangeForOverlapCheck | None = None
        for item in distinct:
            if reach is not None:
                kind = classify(reach.range, item.range)
                if _is_reported(kind, include_touching):
                    found.append(RangeOverlap(kind, (reach, item)))
                    if full():
                        return found
            if reach is None or item.range.end >= reach.range.end:
                reach = item

    return found


def find_overlaps_with(
    user_items: Iterable[RangeForOverlapCheck],
    protected_items: Iterable[RangeForOverlapCheck],
    report_at_most: int = 0,
    include_touching: bool = False,
) -> list[RangeOverlap]:
    """Compare user ranges with protected ranges, not among themselves."""
    found: list[RangeOverlap] = []
    protected = _partition(protected_items)

    for user_item in user_items:
        for item in protected.get(user_item.range.text_flow, []):
            kind = classify(user_item.range, item.range)
            if _is_reported(kind, include_touching):
                found.append(RangeOverlap(kind, (user_item, item)))
                if 0 < report_at_most <= len(found):
                    return found
    return found


def footnote_anchor_ranges(
    ranges: Iterable[TextRange],
    anchor_of: Callable[[TextRange], TextRange | None],
) -> list[TextRange]:
    """Anchors of the footnotes containing the given ranges, without repeats."""
    anchors: list[TextRange] = []
    seen: set[tuple] = set()
    for text_range in ranges:
        anchor = anchor_of(text_range)
        if anchor is None:
            continue
        identity = (anchor.text_flow, anchor.start, anchor.end)
        if identity not in seen:
            seen.add(identity)
            anchors.append(anchor)
    return anchors


class ProtectedRanges(msgspec.Struct, kw_only=True):
    """Ranges the host must not let overlap."""

    citation_ranges: dict[str, Any] = msgspec.field(default_factory=dict)
    bibliography_range: Any | None = None
    footnote_anchor_ranges: list[Any] = msgspec.field(default_factory=list)

    def items(self) -> list[RangeForOverlapCheck]:
        items = [
            RangeForOverlapCheck(text_range, "citation", group_id)
            for group_id, text_range in self.citation_ranges.items()
        ]
        if self.bibliography_range is not None:
            items.append(RangeForOverlapCheck(self.bibliography_range, "bibliography"))
        items.extend(
            RangeForOverlapCheck(anchor, "footnote")
            for anchor in self.footnote_anchor_ranges
        )
        return items


def check_range_overlaps(
    protected: ProtectedRanges,
    require_separation: bool = False,
    report_at_most: int = 10,
) -> list[RangeOverlap]:
    """Check protected ranges against each other."""
    return find_overlapping_ranges(
        protected.items(), report_at_most, include_touching=require_separation
    )


def check_range_overlaps_with_cursor(
    protected: ProtectedRanges,
    cursor_range: TextRange,
    require_separation: bool = False,
    report_at_most: int = 10,
) -> list[RangeOverlap]:
    """Check the cursor range against the protected ranges only."""
    return find_overlaps_with(
        [RangeForOverlapCheck(cursor_range, "cursor")],
        protected.items(),
        report_at_most,
        include_touching=require_separation,
    )


def raise_on_overlaps(overlaps: list[RangeOverlap]) -> None:
    """Raise RangeOverlapError if any overlap was found."""
    if overlaps:
        raise RangeOverlapError(overlaps)
