"""Global order of citation groups from their on-screen positions.

Groups are ordered top-to-bottom, then left-to-right. Ranges sharing a
position keep their order within their text flow. A group inside a
footnote is placed at the footnote's anchor in the main text, so
footnote citations are numbered as if they appeared at the anchor.
This is an approximation: with multi-column layouts the anchor
position does not always reflect reading order.
"""

import logging
from collections.abc import Callable, Hashable, Mapping
from typing import Any

import msgspec

from citemarks.ranges.overlap import TextRange

logger = logging.getLogger(__name__)


class Point(msgspec.Struct, frozen=True):
    """Position on the rendered page, y growing downwards."""

    x: float
    y: float


class VisualSortEntry(msgspec.Struct, kw_only=True):
    """A range to sort, with the data the sort is based on."""

    key: Hashable
    range: Any
    position_range: Any
    index_in_position: int = 0
    position: Point | None = None


def _index_in_text_flow(entries: list[VisualSortEntry]) -> None:
    """Number entries by their start within their own text flow."""
    flows: dict[Hashable, list[VisualSortEntry]] = {}
    for entry in entries:
        flows.setdefault(entry.range.text_flow, []).append(entry)
    for flow_entries in flows.values():
        flow_entries.sort(key=lambda e: (e.range.start, e.range.end))
        for index, entry in enumerate(flow_entries):
            entry.index_in_position = index


def visual_sort(
    ranges: Mapping[Hashable, TextRange],
    position_of: Callable[[TextRange], Any],
    footnote_anchor_of: Callable[[TextRange], TextRange | None] | None = None,
) -> list[Hashable]:
    """Sort keyed ranges into visual order.

    Args:
        ranges: Range of each group, by group ID.
        position_of: Host callback giving the on-screen position of a
            range, as a Point or an (x, y) pair.
        footnote_anchor_of: Host callback giving the anchor of the
            footnote containing a range, or None outside footnotes.

    Returns:
        Keys in visual order.
    """
    entries = []
    for key, text_range in ranges.items():
        anchor = footnote_anchor_of(text_range) if footnote_anchor_of else None
        entries.append(
            VisualSortEntry(
                key=key,
                range=text_range,
                position_range=anchor if anchor is not None else text_range,
            )
        )

    _index_in_text_flow(entries)

    for entry in entries:
        position = position_of(entry.position_range)
        if not isinstance(position, Point):
            x, y = position
            position = Point(x, y)
        entry.position = position

    entries.sort(key=lambda e: (e.position.y, e.position.x, e.index_in_position))
    logger.debug("Visual order of %d ranges computed", len(entries))
    return [entry.key for entry in entries]
