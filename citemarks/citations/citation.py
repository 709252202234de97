"""Single citations and the values attached to them.

A Citation is one occurrence of a citation key inside a citation
group. Lookup, numbering and lettering write into citations in place;
the citation key itself never changes.
"""

from collections.abc import Callable
from typing import Any

import msgspec

from citemarks.core.models import Database, Entry
from citemarks.text import FormattedText, normalize_page_info


class LookupResult(msgspec.Struct, frozen=True):
    """An entry together with the database it was found in."""

    entry: Entry
    database: Database


class CitationPath(msgspec.Struct, frozen=True):
    """Stable address of a citation: group ID and storage index."""

    group_id: str
    storage_index: int


class Citation(msgspec.Struct, kw_only=True):
    """A single citation of one source inside a citation group."""

    citation_key: str
    lookup_result: LookupResult | None = None
    number: int | None = None
    unique_letter: str | None = None
    page_info: FormattedText | None = None
    is_first_appearance: bool | None = None

    def __post_init__(self):
        self.page_info = normalize_page_info(self.page_info)

    @property
    def is_resolved(self) -> bool:
        """Whether a database entry was found for the key."""
        return self.lookup_result is not None

    @property
    def entry(self) -> Entry | None:
        if self.lookup_result is None:
            return None
        return self.lookup_result.entry

    def set_page_info(self, page_info: FormattedText | str | None) -> None:
        self.page_info = normalize_page_info(page_info)


def page_info_sort_key(page_info: FormattedText | None) -> tuple[int, str]:
    """Sort key placing missing page info first."""
    if page_info is None:
        return (0, "")
    return (1, page_info.text)


def citation_sort_key(
    entry_key: Callable[[Entry], Any],
    unresolved_first: bool = True,
    use_page_info: bool = True,
) -> Callable[[Citation], tuple]:
    """Build a sort key ordering citations by their entries.

    Unresolved citations sort before (or after) resolved ones and
    among themselves by citation key. Resolved citations sort by
    ``entry_key``. Ties fall back to page info when ``use_page_info``
    is set.

    Args:
        entry_key: Key function for resolved entries.
        unresolved_first: Place unresolved citations first.
        use_page_info: Compare page info on ties.

    Returns:
        Key function for ``sorted``.
    """
    unresolved_rank = 0 if unresolved_first else 1

    def key(citation: Citation) -> tuple:
        if citation.lookup_result is None:
            main = (unresolved_rank, (citation.citation_key,))
        else:
            main = (1 - unresolved_rank, entry_key(citation.lookup_result.entry))
        if use_page_info:
            return main + (page_info_sort_key(citation.page_info),)
        return main

    return key
