"""Marker strategies: turn a store of citation groups into marker texts.

Processing runs through fixed states::

    UNRESOLVED -> LOOKED_UP -> LOCALLY_ORDERED -> GLOBALLY_ORDERED
        -> NUMBERED | LETTERED -> BIBLIOGRAPHY_BUILT -> MARKERS_EMITTED

The strategy is chosen by ``StyleOptions.kind``:
- citation-key: keys joined by a comma; bibliography sorted by author,
  year and title
- numeric: bibliography in order of first appearance (sort by
  position) or sorted, numbered in that order; markers compress
  number runs
- author-year: unique letters for clashing markers, bibliography
  sorted, markers spell out more authors on a first appearance
"""

import logging
from collections.abc import Iterable, Sequence
from enum import Enum

import msgspec

from citemarks.citations.cited_keys import CitedKeys
from citemarks.citations.group import CitationGroup
from citemarks.citations.letters import assign_unique_letters
from citemarks.citations.store import CitationGroupStore
from citemarks.core.models import Database
from citemarks.core.sorting import (
    AUTHOR_YEAR_TITLE,
    YEAR_AUTHOR_TITLE,
    SortKeyGenerator,
)
from citemarks.exceptions import OrderingError
from citemarks.style.author_year import (
    AuthorYearMarkerEntry,
    format_author_year_marker,
    normalized_marker,
)
from citemarks.style.bibliography import format_bibliography
from citemarks.style.numeric import NumericMarkerEntry, format_numeric_marker
from citemarks.style.options import MarkerKind, StyleOptions
from citemarks.text import FormattedText, set_char_style, set_locale_none

logger = logging.getLogger(__name__)

BIBLIOGRAPHY_ORDER = SortKeyGenerator(AUTHOR_YEAR_TITLE)


class ProcessState(Enum):
    """Progress of a marker computation."""

    UNRESOLVED = "unresolved"
    LOOKED_UP = "looked-up"
    LOCALLY_ORDERED = "locally-ordered"
    GLOBALLY_ORDERED = "globally-ordered"
    NUMBERED = "numbered"
    LETTERED = "lettered"
    BIBLIOGRAPHY_BUILT = "bibliography-built"
    MARKERS_EMITTED = "markers-emitted"


class CitationMarkers(msgspec.Struct, kw_only=True):
    """Marker texts per group and the bibliography they refer to."""

    markers: dict[str, FormattedText]
    formatted_markers: dict[str, FormattedText]
    bibliography: CitedKeys
    bibliography_text: FormattedText


def decorate_marker(marker: FormattedText, options: StyleOptions) -> FormattedText:
    """Apply the citation character style, then mark as non-linguistic."""
    if options.format_citations and options.citation_character_format:
        marker = set_char_style(marker, options.citation_character_format)
    return set_locale_none(marker)


def local_order_key(options: StyleOptions) -> SortKeyGenerator:
    """Order of citations inside a group."""
    if options.multi_cite_chronological:
        return SortKeyGenerator(YEAR_AUTHOR_TITLE)
    return SortKeyGenerator(AUTHOR_YEAR_TITLE)


class CitationProcessor:
    """Runs one marker strategy over a citation group store."""

    def __init__(self, store: CitationGroupStore, options: StyleOptions):
        """Initialize with the store and the style to apply."""
        self.store = store
        self.options = options
        self.state = ProcessState.UNRESOLVED

    def _advance(self, state: ProcessState) -> None:
        logger.debug("Marker processing: %s -> %s", self.state.value, state.value)
        self.state = state

    def run(
        self,
        databases: Sequence[Database],
        global_order: Iterable[str] | None = None,
    ) -> CitationMarkers:
        """Compute markers and the bibliography.

        The store is left as it was when an error is raised.

        Args:
            databases: Databases to resolve citation keys against.
            global_order: Group IDs in document order. When omitted the
                order already set on the store is used.

        Returns:
            Marker texts per group ID and the bibliography.

        Raises:
            OrderingError: If a global order is needed but missing or
                does not match the groups.
            NonUniqueMarkerError: For indistinguishable author-year
                markers in strict mode.
        """
        if global_order is not None:
            global_order = self.store.validate_global_order(global_order)
        elif self.store.global_order is None and self._needs_global_order():
            raise OrderingError(
                f"{self.options.kind.value} markers need the document order of groups"
            )

        self.state = ProcessState.UNRESOLVED
        with self.store.transaction():
            return self._run(databases, global_order)

    def _run(
        self, databases: Sequence[Database], global_order: list[str] | None
    ) -> CitationMarkers:
        self.store.reset_citations()

        self.store.lookup_citations(databases)
        self._advance(ProcessState.LOOKED_UP)

        self.store.impose_local_order(local_order_key(self.options))
        self._advance(ProcessState.LOCALLY_ORDERED)

        if global_order is not None:
            self.store.set_global_order(global_order)
        if self.store.global_order is not None:
            self._advance(ProcessState.GLOBALLY_ORDERED)

        match self.options.kind:
            case MarkerKind.NUMERIC:
                markers = self._numeric_markers()
            case MarkerKind.AUTHOR_YEAR:
                markers = self._author_year_markers()
            case MarkerKind.CITATION_KEY:
                markers = self._citation_key_markers()

        bibliography = self.store.require_bibliography()
        result = CitationMarkers(
            markers=markers,
            formatted_markers={
                group_id: decorate_marker(marker, self.options)
                for group_id, marker in markers.items()
            },
            bibliography=bibliography,
            bibliography_text=format_bibliography(
                self.store, bibliography, self.options
            ),
        )
        self._advance(ProcessState.MARKERS_EMITTED)
        return result

    def _needs_global_order(self) -> bool:
        if self.options.kind is MarkerKind.AUTHOR_YEAR:
            return True
        if self.options.kind is MarkerKind.NUMERIC and self.options.sort_by_position:
            return True
        return self.store.provides_reference_mark_names() and len(self.store) > 0

    def _groups(self) -> list[CitationGroup]:
        if self.store.global_order is not None:
            return self.store.groups_in_global_order()
        return list(self.store)

    def _citation_key_markers(self) -> dict[str, FormattedText]:
        self.store.create_plain_bibliography_sorted(BIBLIOGRAPHY_ORDER)
        self._advance(ProcessState.BIBLIOGRAPHY_BUILT)

        options = self.options
        return {
            group.group_id: FormattedText(
                options.bracket_before
                + options.citation_key_separator.join(
                    group.citation_keys_in_local_order()
                )
                + options.bracket_after
            )
            for group in self._groups()
        }

    def _numeric_markers(self) -> dict[str, FormattedText]:
        if self.options.sort_by_position:
            self.store.create_numbered_bibliography_in_appearance_order()
        else:
            self.store.create_numbered_bibliography_sorted(BIBLIOGRAPHY_ORDER)
        self._advance(ProcessState.NUMBERED)
        self._advance(ProcessState.BIBLIOGRAPHY_BUILT)

        markers = {}
        for group in self._groups():
            entries = [
                NumericMarkerEntry(c.citation_key, c.number, c.page_info)
                for c in group.citations_in_local_order()
            ]
            markers[group.group_id] = format_numeric_marker(entries, self.options)
        return markers

    def _author_year_markers(self) -> dict[str, FormattedText]:
        cited_keys = self.store.cited_keys_in_appearance_order()
        for cited_key in cited_keys:
            if cited_key.entry is not None:
                cited_key.normalized_marker = normalized_marker(
                    cited_key.entry, self.options
                )
        assign_unique_letters(cited_keys)
        self.store.distribute_unique_letters(cited_keys)
        self._advance(ProcessState.LETTERED)

        self.store.create_plain_bibliography_sorted(BIBLIOGRAPHY_ORDER)
        self._advance(ProcessState.BIBLIOGRAPHY_BUILT)

        self.store.mark_first_appearances()

        markers = {}
        for group in self._groups():
            items = [
                AuthorYearMarkerEntry(
                    citation_key=c.citation_key,
                    entry=c.entry,
                    unique_letter=c.unique_letter,
                    page_info=c.page_info,
                    is_first_appearance=bool(c.is_first_appearance),
                )
                for c in group.citations_in_local_order()
            ]
            markers[group.group_id] = format_author_year_marker(
                items, group.citation_type.in_parentheses, self.options
            )
        return markers


def produce_citation_markers(
    store: CitationGroupStore,
    databases: Sequence[Database],
    options: StyleOptions,
    global_order: Iterable[str] | None = None,
) -> CitationMarkers:
    """Compute markers and the bibliography for every group in the store."""
    return CitationProcessor(store, options).run(databases, global_order)
