"""Numeric citation markers with compressed number ranges.

Markers such as ``[2-4,7]`` are produced by one sort of the entries
followed by a single linear pass that builds blocks of consecutive
numbers.
"""

from collections.abc import Iterable

import msgspec

from citemarks.citations.citation import page_info_sort_key
from citemarks.style.options import StyleOptions
from citemarks.text import FormattedText, normalize_page_info

# Sort position of unresolved entries
UNRESOLVED = 0


class NumericMarkerEntry(msgspec.Struct, frozen=True):
    """One citation as seen by the numeric marker formatter.

    A missing number means the citation is unresolved and is shown by
    its citation key.
    """

    citation_key: str
    number: int | None = None
    page_info: FormattedText | None = None


def _render_single(entry: NumericMarkerEntry, options: StyleOptions) -> str:
    if entry.number is None:
        text = options.undefined_marker + entry.citation_key
    else:
        text = str(entry.number)
    if entry.page_info is not None:
        text += options.page_info_separator + entry.page_info.text
    return text


def _render_block(block: list[NumericMarkerEntry], options: StyleOptions) -> str:
    if len(block) == 1:
        return _render_single(block[0], options)
    if 0 < options.min_grouping_count <= len(block):
        return (
            f"{block[0].number}{options.grouped_numbers_separator}{block[-1].number}"
        )
    return options.citation_separator.join(
        _render_single(entry, options) for entry in block
    )


def compress_numbers(
    entries: Iterable[NumericMarkerEntry], options: StyleOptions
) -> str:
    """Render numbers with consecutive runs merged, without brackets.

    Rules:
    - Entries sort by number (unresolved as 0), then page info with
      missing page info first
    - Repeated (number, page info) pairs are shown once; repeated
      unresolved keys are shown once per page info
    - A number continues the current block only when both it and the
      previous number are resolved, neither has page info, and it is
      one more than the previous number
    - Blocks of at least ``min_grouping_count`` numbers render as
      "first-last"; shorter blocks list their numbers

    Args:
        entries: Citations of one group, in any order.
        options: Style providing separators and the grouping threshold.

    Returns:
        Text such as "1-3,5".
    """
    normalized = [
        NumericMarkerEntry(e.citation_key, e.number, normalize_page_info(e.page_info))
        for e in entries
    ]
    normalized.sort(
        key=lambda e: (
            UNRESOLVED if e.number is None else e.number,
            page_info_sort_key(e.page_info),
        )
    )

    blocks: list[list[NumericMarkerEntry]] = []
    seen: set[tuple] = set()
    previous: NumericMarkerEntry | None = None

    for entry in normalized:
        page = None if entry.page_info is None else entry.page_info.text
        identity = (
            ("key", entry.citation_key, page)
            if entry.number is None
            else ("number", entry.number, page)
        )
        if identity in seen:
            continue
        seen.add(identity)

        joins = (
            previous is not None
            and previous.number is not None
            and entry.number is not None
            and previous.page_info is None
            and entry.page_info is None
            and entry.number == previous.number + 1
        )
        if joins:
            blocks[-1].append(entry)
        else:
            blocks.append([entry])
        previous = entry

    return options.citation_separator.join(
        _render_block(block, options) for block in blocks
    )


def format_numeric_marker(
    entries: Iterable[NumericMarkerEntry], options: StyleOptions
) -> FormattedText:
    """Numeric marker for one citation group, e.g. "[2-4,7]"."""
    return FormattedText(
        options.bracket_before
        + compress_numbers(entries, options)
        + options.bracket_after
    )


def numeric_bibliography_label(
    number: int | None, citation_key: str, options: StyleOptions
) -> FormattedText:
    """Label in front of a numbered bibliography entry, e.g. "[1] "."""
    entry = NumericMarkerEntry(citation_key, number)
    return FormattedText(
        options.list_bracket_before
        + _render_single(entry, options)
        + options.list_bracket_after
        + " "
    )
