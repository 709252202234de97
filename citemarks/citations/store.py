"""Document-wide store of citation groups.

The store owns every citation group, the global (document appearance)
order of the groups and the bibliography derived from them. Adding or
removing a group invalidates both the global order and the
bibliography; they must be recomputed before they are used again.

Operations check all their preconditions before changing anything, so
an operation that raises leaves the store as it was.
"""

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from citemarks.citations.citation import Citation, CitationPath
from citemarks.citations.cited_keys import CitedKeys, KeyOrdering
from citemarks.citations.group import CitationGroup, DataModel
from citemarks.core.models import Database, Entry
from citemarks.exceptions import (
    DataModelConflictError,
    OrderingError,
    StaleBibliographyError,
    UnknownGroupError,
)

logger = logging.getLogger(__name__)

EntryKey = Callable[[Entry], Any]


class CitationGroupStore:
    """All citation groups of one document.

    Not safe for concurrent mutation: callers serialize mutating calls
    through a single owner.
    """

    def __init__(self, data_model: DataModel = DataModel.PER_CITATION):
        """Initialize an empty store.

        Args:
            data_model: Where page info lives in this document.
        """
        self.data_model = data_model
        self._groups: dict[str, CitationGroup] = {}
        self._global_order: list[str] | None = None
        self._bibliography: CitedKeys | None = None

    # Groups

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._groups

    def __iter__(self) -> Iterator[CitationGroup]:
        """Iterate groups in insertion order."""
        return iter(self._groups.values())

    def group_ids(self) -> list[str]:
        return list(self._groups)

    def get_group(self, group_id: str) -> CitationGroup:
        """Get a group by ID.

        Raises:
            UnknownGroupError: If no group has this ID.
        """
        group = self._groups.get(group_id)
        if group is None:
            raise UnknownGroupError(group_id)
        return group

    def check_can_add(self, group_id: str, data_model: DataModel) -> None:
        """Check that a group with this ID and data model can be added.

        Raises:
            DataModelConflictError: If ``data_model`` is not the store's.
            ValueError: If a group with the same ID exists.
        """
        if data_model is not self.data_model:
            raise DataModelConflictError(
                group_id,
                f"group uses {data_model.value}, "
                f"document uses {self.data_model.value}",
            )
        if group_id in self._groups:
            raise ValueError(f"Citation group already exists: {group_id}")

    def add_group(self, group: CitationGroup) -> None:
        """Add a group and invalidate the global order and bibliography.

        Raises:
            DataModelConflictError: If the group uses another page info
                data model than the store.
            ValueError: If a group with the same ID exists.
        """
        self.check_can_add(group.group_id, group.data_model)
        self._groups[group.group_id] = group
        logger.debug("Added citation group %s", group.group_id)
        self.invalidate()

    def remove_group(self, group_id: str) -> CitationGroup:
        """Remove a group and invalidate the global order and bibliography.

        Raises:
            UnknownGroupError: If no group has this ID.
        """
        group = self.get_group(group_id)
        del self._groups[group_id]
        logger.debug("Removed citation group %s", group_id)
        self.invalidate()
        return group

    def invalidate(self) -> None:
        """Forget the global order, the bibliography and per-citation values.

        Lookup results, numbers, letters and appearance flags are derived
        from the whole set of groups, so they go stale together with the
        bibliography.
        """
        if self._global_order is not None or self._bibliography is not None:
            logger.debug("Invalidating global order and bibliography")
        self._global_order = None
        for group in self._groups.values():
            group.index_in_global_order = None
        self.reset_citations()

    @contextmanager
    def transaction(self) -> Iterator["CitationGroupStore"]:
        """Restore the order, bibliography and citation values on error.

        Groups added or removed inside the block are not tracked.
        """
        global_order = self._global_order
        bibliography = self._bibliography
        saved = [
            (
                group,
                group.index_in_global_order,
                list(group.local_order),
                [
                    (
                        citation,
                        citation.lookup_result,
                        citation.number,
                        citation.unique_letter,
                        citation.is_first_appearance,
                        citation.page_info,
                    )
                    for citation in group.citations
                ],
            )
            for group in self._groups.values()
        ]
        try:
            yield self
        except Exception:
            logger.debug("Rolling back citation group store")
            self._global_order = global_order
            self._bibliography = bibliography
            for group, index, local_order, citations in saved:
                group.index_in_global_order = index
                group.local_order = local_order
                for citation, *values in citations:
                    (
                        citation.lookup_result,
                        citation.number,
                        citation.unique_letter,
                        citation.is_first_appearance,
                        citation.page_info,
                    ) = values
            raise

    # Global order

    @property
    def global_order(self) -> tuple[str, ...] | None:
        """Group IDs in document order, or None if not set."""
        if self._global_order is None:
            return None
        return tuple(self._global_order)

    def require_global_order(self) -> list[str]:
        """Get the global order.

        Raises:
            OrderingError: If no global order is set.
        """
        if self._global_order is None:
            raise OrderingError("no global order has been set")
        return list(self._global_order)

    def validate_global_order(self, order: Iterable[str]) -> list[str]:
        """Check that ``order`` lists every group exactly once.

        Returns:
            The order as a list.

        Raises:
            OrderingError: If the order does not list each group once.
            UnknownGroupError: If the order names an unknown group.
        """
        order = list(order)
        if len(order) != len(self._groups):
            raise OrderingError(
                f"global order has {len(order)} groups, store has {len(self._groups)}"
            )
        for group_id in order:
            if group_id not in self._groups:
                raise UnknownGroupError(group_id)
        if len(set(order)) != len(order):
            raise OrderingError("global order lists a group more than once")
        return order

    def set_global_order(self, order: Iterable[str]) -> None:
        """Set the document order of the groups.

        Each group's ``index_in_global_order`` is set to its position.

        Raises:
            OrderingError: If the order does not list each group once.
            UnknownGroupError: If the order names an unknown group.
        """
        order = self.validate_global_order(order)
        self._global_order = order
        for index, group_id in enumerate(order):
            self._groups[group_id].index_in_global_order = index
        logger.debug("Global order set for %d groups", len(order))

    def groups_in_global_order(self) -> list[CitationGroup]:
        return [self._groups[group_id] for group_id in self.require_global_order()]

    # Per-citation state

    def reset_citations(self) -> None:
        """Clear lookup results, numbers, letters and appearance flags.

        The bibliography is derived from these and is dropped as well;
        the global order is kept.
        """
        self._bibliography = None
        for group in self._groups.values():
            for citation in group.citations:
                citation.lookup_result = None
                citation.number = None
                citation.unique_letter = None
                citation.is_first_appearance = None

    def impose_local_order(
        self, entry_key: EntryKey, unresolved_first: bool = True
    ) -> None:
        """Sort the citations of every group for presentation."""
        for group in self._groups.values():
            group.impose_local_order(entry_key, unresolved_first)

    def mark_first_appearances(self) -> None:
        """Flag the first citation of each source in document order.

        Raises:
            OrderingError: If no global order is set.
        """
        seen: set[str] = set()
        for group in self.groups_in_global_order():
            for citation in group.citations_in_local_order():
                citation.is_first_appearance = citation.citation_key not in seen
                seen.add(citation.citation_key)

    # Cited keys

    def cited_keys_unordered(self) -> CitedKeys:
        """Cited keys from groups in insertion order, citations in storage order."""
        cited_keys = CitedKeys(KeyOrdering.UNORDERED)
        for group in self._groups.values():
            for path in group.citation_paths():
                cited_keys.add(path, group.get_citation(path.storage_index))
        return cited_keys

    def cited_keys_in_appearance_order(self) -> CitedKeys:
        """Cited keys from groups in global order, citations in local order.

        Raises:
            OrderingError: If no global order is set.
        """
        cited_keys = CitedKeys(KeyOrdering.APPEARANCE)
        for group in self.groups_in_global_order():
            for path in group.paths_in_local_order():
                cited_keys.add(path, group.get_citation(path.storage_index))
        return cited_keys

    def lookup_citations(self, databases: Sequence[Database]) -> CitedKeys:
        """Resolve every cited key and write the results to the citations."""
        cited_keys = self.cited_keys_unordered()
        cited_keys.lookup_in_databases(databases)
        self.distribute_lookup_results(cited_keys)

        unresolved = cited_keys.unresolved_keys()
        if unresolved:
            logger.info("Unresolved citation keys: %s", ", ".join(unresolved))
        return cited_keys

    def unresolved_keys(self) -> list[str]:
        """Citation keys without a lookup result, in storage traversal order."""
        return self.cited_keys_unordered().unresolved_keys()

    def distribute_lookup_results(self, cited_keys: CitedKeys) -> None:
        self._distribute(cited_keys, "lookup_result")

    def distribute_numbers(self, cited_keys: CitedKeys) -> None:
        self._distribute(cited_keys, "number")

    def distribute_unique_letters(self, cited_keys: CitedKeys) -> None:
        self._distribute(cited_keys, "unique_letter")

    def _distribute(self, cited_keys: CitedKeys, field: str) -> None:
        """Copy a shared field of each cited key to all its citations."""
        writes = [
            (self._citation_at(path), getattr(cited_key, field))
            for cited_key in cited_keys
            for path in cited_key.where
        ]
        for citation, value in writes:
            setattr(citation, field, value)

    def _citation_at(self, path: CitationPath) -> Citation:
        group = self.get_group(path.group_id)
        if not 0 <= path.storage_index < len(group):
            raise ValueError(f"No citation at {path}")
        return group.get_citation(path.storage_index)

    # Bibliography

    def get_bibliography(self) -> CitedKeys | None:
        """The bibliography, or None if it has not been built."""
        return self._bibliography

    def require_bibliography(self) -> CitedKeys:
        """Get the bibliography.

        Raises:
            OrderingError: If the bibliography has not been built.
        """
        if self._bibliography is None:
            raise OrderingError("no bibliography has been built")
        return self._bibliography

    def create_numbered_bibliography_in_appearance_order(self) -> CitedKeys:
        """Bibliography in order of first appearance, numbered 1..N.

        Raises:
            StaleBibliographyError: If a bibliography already exists.
            OrderingError: If no global order is set.
        """
        self._check_no_bibliography()
        cited_keys = self.cited_keys_in_appearance_order()
        cited_keys.number_in_current_order()
        self.distribute_numbers(cited_keys)
        return self._set_bibliography(cited_keys)

    def create_plain_bibliography_sorted(self, entry_key: EntryKey) -> CitedKeys:
        """Unnumbered bibliography sorted by ``entry_key``.

        Raises:
            StaleBibliographyError: If a bibliography already exists.
        """
        self._check_no_bibliography()
        cited_keys = self.cited_keys_unordered()
        cited_keys.sort_by(entry_key)
        return self._set_bibliography(cited_keys)

    def create_numbered_bibliography_sorted(self, entry_key: EntryKey) -> CitedKeys:
        """Bibliography sorted by ``entry_key``, numbered in that order.

        Raises:
            StaleBibliographyError: If a bibliography already exists.
        """
        self._check_no_bibliography()
        cited_keys = self.cited_keys_unordered()
        cited_keys.sort_by(entry_key)
        cited_keys.number_in_current_order()
        self.distribute_numbers(cited_keys)
        return self._set_bibliography(cited_keys)

    def _check_no_bibliography(self) -> None:
        if self._bibliography is not None:
            raise StaleBibliographyError()

    def _set_bibliography(self, cited_keys: CitedKeys) -> CitedKeys:
        self._bibliography = cited_keys
        logger.debug(
            "Bibliography built with %d keys (%s)",
            len(cited_keys),
            cited_keys.ordering.value,
        )
        return cited_keys

    # Export

    def export_cited(
        self, databases: Sequence[Database], name: str = "cited"
    ) -> tuple[Database, list[str]]:
        """Collect the cited entries into a new database.

        Keys are resolved against ``databases`` without writing to the
        citations. A resolved entry's ``crossref`` is followed one
        level, in the database the entry was found in; a referenced
        entry that is missing there is skipped. Every entry is added
        once.

        Args:
            databases: Databases to resolve citation keys against.
            name: Name of the new database.

        Returns:
            The new database and the unresolved keys in storage
            traversal order.
        """
        cited_keys = self.cited_keys_unordered()
        cited_keys.lookup_in_databases(databases)

        exported = Database(name)
        unresolved: list[str] = []
        followed: set[str] = set()
        for cited_key in cited_keys:
            result = cited_key.lookup_result
            if result is None:
                unresolved.append(cited_key.citation_key)
                continue
            if result.entry.key not in exported:
                exported.add(result.entry)

            crossref = result.entry.crossref
            if not crossref or crossref in followed:
                continue
            followed.add(crossref)
            parent = result.database.get_entry_by_key(crossref)
            if parent is not None and parent.key not in exported:
                exported.add(parent)

        logger.info(
            "Exported %d entries, %d unresolved keys", len(exported), len(unresolved)
        )
        return exported, unresolved

    # Linking

    def provides_reference_mark_names(self) -> bool:
        """Whether every group has a reference mark name for linking."""
        return all(g.reference_mark_name for g in self._groups.values())
