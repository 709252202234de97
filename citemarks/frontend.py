"""The seam between the citation engine and a host document.

The host (a word-processor integration) owns the actual document. The
engine reaches it only through the DocumentHost protocol; every call
that needs the document fails with NoDocumentError when none is open.
"""

import logging
from collections.abc import Hashable, Sequence
from typing import Any, Protocol

from citemarks.citations.group import CitationGroup, CitationType, DataModel
from citemarks.citations.store import CitationGroupStore
from citemarks.core.models import Database
from citemarks.exceptions import (
    DataModelConflictError,
    NoDocumentError,
    OrderingError,
)
from citemarks.ranges.overlap import (
    ProtectedRanges,
    RangeOverlap,
    TextRange,
    check_range_overlaps,
    check_range_overlaps_with_cursor,
    footnote_anchor_ranges,
    raise_on_overlaps,
)
from citemarks.ranges.visual import visual_sort
from citemarks.style.options import StyleOptions
from citemarks.style.process import CitationMarkers, produce_citation_markers
from citemarks.text import FormattedText

logger = logging.getLogger(__name__)


class DocumentHost(Protocol):
    """Operations the host document provides."""

    def has_document(self) -> bool: ...

    def get_range_for_group(self, group_id: str) -> TextRange | None: ...

    def get_visual_position(self, text_range: TextRange) -> Any: ...

    def footnote_anchor_for(self, text_range: TextRange) -> TextRange | None: ...

    def get_bibliography_range(self) -> TextRange | None: ...

    def get_cursor_range(self) -> TextRange | None: ...

    def create_group(
        self,
        keys: Sequence[str],
        page_infos: Sequence[FormattedText | str | None],
        citation_type: CitationType,
        insertion_point: Any,
    ) -> CitationGroup: ...

    def remove_group(self, group_id: str) -> None: ...


class CitationFrontend:
    """Keeps a citation group store in step with a host document."""

    def __init__(
        self,
        host: DocumentHost | None,
        data_model: DataModel = DataModel.PER_CITATION,
    ):
        """Initialize with a host and an empty store."""
        self.host = host
        self.store = CitationGroupStore(data_model)

    def _require_host(self, operation: str) -> DocumentHost:
        if self.host is None or not self.host.has_document():
            raise NoDocumentError(operation)
        return self.host

    def insert_group(
        self,
        keys: Sequence[str],
        page_infos: Sequence[FormattedText | str | None],
        citation_type: CitationType,
        insertion_point: Any,
        check_cursor: bool = True,
    ) -> CitationGroup:
        """Insert a citation group at the insertion point.

        Args:
            keys: Citation keys in storage order.
            page_infos: Page info per citation.
            citation_type: Presentation type.
            insertion_point: Host cursor to insert at.
            check_cursor: Refuse to insert inside a protected range.

        Raises:
            NoDocumentError: If no document is open.
            RangeOverlapError: If the cursor is inside a protected range.
            DataModelConflictError: If the host created a group with
                another page info data model. The group is removed from
                the document again.
            ValueError: If the host reused an existing group ID. The
                document is left to the host, since removing by that ID
                would also remove the existing group.
        """
        host = self._require_host("insert_group")
        if len(keys) != len(page_infos):
            raise ValueError("keys and page_infos must have the same length")

        if check_cursor:
            raise_on_overlaps(self.check_cursor_overlaps(report_at_most=1))

        group = host.create_group(keys, page_infos, citation_type, insertion_point)
        try:
            self.store.check_can_add(group.group_id, group.data_model)
        except DataModelConflictError:
            logger.warning("Removing rejected citation group %s", group.group_id)
            host.remove_group(group.group_id)
            raise
        self.store.add_group(group)
        logger.info("Inserted citation group %s", group.group_id)
        return group

    def add_existing_group(self, group: CitationGroup) -> None:
        """Register a group the host found in the document."""
        self.store.add_group(group)

    def remove_group(self, group_id: str) -> None:
        """Remove a group from the document and the store.

        Raises:
            NoDocumentError: If no document is open.
            UnknownGroupError: If no group has this ID.
        """
        host = self._require_host("remove_group")
        self.store.get_group(group_id)
        host.remove_group(group_id)
        self.store.remove_group(group_id)
        logger.info("Removed citation group %s", group_id)

    def group_ranges(self) -> dict[str, TextRange]:
        """Ranges of the groups present in the document."""
        host = self._require_host("group_ranges")
        ranges = {}
        for group_id in self.store.group_ids():
            text_range = host.get_range_for_group(group_id)
            if text_range is None:
                logger.warning("No range found for citation group %s", group_id)
                continue
            ranges[group_id] = text_range
        return ranges

    def protected_ranges(self) -> ProtectedRanges:
        """Citation marks, bibliography and footnote anchors of citations."""
        host = self._require_host("protected_ranges")
        citation_ranges = self.group_ranges()
        return ProtectedRanges(
            citation_ranges=citation_ranges,
            bibliography_range=host.get_bibliography_range(),
            footnote_anchor_ranges=footnote_anchor_ranges(
                citation_ranges.values(), host.footnote_anchor_for
            ),
        )

    def check_overlaps(
        self, require_separation: bool = False, report_at_most: int = 10
    ) -> list[RangeOverlap]:
        """Overlaps among the protected ranges."""
        return check_range_overlaps(
            self.protected_ranges(), require_separation, report_at_most
        )

    def check_cursor_overlaps(
        self, require_separation: bool = False, report_at_most: int = 10
    ) -> list[RangeOverlap]:
        """Overlaps between the cursor and the protected ranges."""
        host = self._require_host("check_cursor_overlaps")
        cursor = host.get_cursor_range()
        if cursor is None:
            return []
        return check_range_overlaps_with_cursor(
            self.protected_ranges(), cursor, require_separation, report_at_most
        )

    def impose_global_order(self) -> list[Hashable]:
        """Order the groups by their position in the document.

        Raises:
            NoDocumentError: If no document is open.
            OrderingError: If some group has no range in the document.
        """
        host = self._require_host("impose_global_order")
        ranges = self.group_ranges()
        if len(ranges) != len(self.store):
            missing = sorted(set(self.store.group_ids()) - set(ranges))
            raise OrderingError(
                f"groups without a document range: {', '.join(missing)}"
            )

        order = visual_sort(ranges, host.get_visual_position, host.footnote_anchor_for)
        self.store.set_global_order(order)
        return order

    def update(
        self, databases: Sequence[Database], options: StyleOptions
    ) -> CitationMarkers:
        """Recompute the global order, markers and bibliography."""
        raise_on_overlaps(self.check_overlaps())
        self.impose_global_order()
        return produce_citation_markers(self.store, databases, options)

    def export_cited(
        self, databases: Sequence[Database], name: str = "cited"
    ) -> tuple[Database, list[str]]:
        """New database of the entries cited in the document.

        Raises:
            NoDocumentError: If no document is open.
        """
        self._require_host("export_cited")
        return self.store.export_cited(databases, name)
