"""Citation groups: citations inserted together at one point of a document."""

import logging
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any

from citemarks.citations.citation import Citation, CitationPath, citation_sort_key
from citemarks.core.models import Entry
from citemarks.exceptions import DataModelConflictError
from citemarks.text import FormattedText, normalize_page_info

logger = logging.getLogger(__name__)


class CitationType(Enum):
    """How the citations of a group are presented in the text."""

    AUTHOR_YEAR = "author-year"
    AUTHOR_YEAR_PAR = "author-year-par"
    CITATION_KEYS = "citation-keys"
    NUMERIC = "numeric"

    @property
    def in_parentheses(self) -> bool:
        """Whether the whole marker is bracketed, e.g. "[Smith, 2000]"."""
        return self is not CitationType.AUTHOR_YEAR


class DataModel(Enum):
    """Where page info is stored.

    LEGACY: the group owns one page info, shown after the last
    citation in local order. PER_CITATION: each citation owns its page
    info. A document uses exactly one of them.
    """

    LEGACY = "legacy"
    PER_CITATION = "per-citation"


class CitationGroup:
    """An ordered set of citations appearing together in the document.

    Citations keep their storage order; presentation order is the
    ``local_order`` permutation of storage indices.
    """

    def __init__(
        self,
        group_id: str,
        citation_type: CitationType,
        citations: Iterable[Citation],
        data_model: DataModel = DataModel.PER_CITATION,
        page_info: FormattedText | str | None = None,
        reference_mark_name: str | None = None,
    ):
        """Initialize a citation group.

        Args:
            group_id: Host-assigned unique ID.
            citation_type: Presentation type.
            citations: Citations in storage order.
            data_model: Page info data model of the document.
            page_info: Group-level page info, LEGACY model only.
            reference_mark_name: Name of the host reference mark, used
                for "Cited on pages" links.

        Raises:
            DataModelConflictError: If page info is present at both
                levels or at the level the data model does not use.
            ValueError: If the group has no citations.
        """
        self.group_id = group_id
        self.citation_type = citation_type
        self.citations = list(citations)
        self.data_model = data_model
        self.reference_mark_name = reference_mark_name
        self.index_in_global_order: int | None = None

        if not self.citations:
            raise ValueError(f"Citation group {group_id} has no citations")

        page_info = normalize_page_info(page_info)
        citation_page_info = any(c.page_info is not None for c in self.citations)

        if page_info is not None and citation_page_info:
            raise DataModelConflictError(
                group_id, "both group and citations carry page info"
            )
        if data_model is DataModel.PER_CITATION and page_info is not None:
            raise DataModelConflictError(
                group_id, "group-level page info in a per-citation document"
            )
        if data_model is DataModel.LEGACY and citation_page_info:
            raise DataModelConflictError(
                group_id, "citation-level page info in a legacy document"
            )

        self._page_info = page_info
        self.local_order: list[int] = list(range(len(self.citations)))
        self._attach_group_page_info()

    @property
    def page_info(self) -> FormattedText | None:
        """Group-level page info (LEGACY model only)."""
        return self._page_info

    def __len__(self) -> int:
        return len(self.citations)

    def __repr__(self) -> str:
        keys = ", ".join(c.citation_key for c in self.citations)
        return f"CitationGroup({self.group_id!r}, [{keys}])"

    def get_citation(self, storage_index: int) -> Citation:
        return self.citations[storage_index]

    def citation_paths(self) -> list[CitationPath]:
        """Paths of the citations in storage order."""
        return [CitationPath(self.group_id, i) for i in range(len(self.citations))]

    def citations_in_local_order(self) -> list[Citation]:
        return [self.citations[i] for i in self.local_order]

    def paths_in_local_order(self) -> list[CitationPath]:
        return [CitationPath(self.group_id, i) for i in self.local_order]

    def citation_keys_in_local_order(self) -> list[str]:
        return [self.citations[i].citation_key for i in self.local_order]

    def page_infos_in_local_order(self) -> list[FormattedText | None]:
        return [self.citations[i].page_info for i in self.local_order]

    def set_local_order(self, order: Iterable[int]) -> None:
        """Set the presentation order directly.

        Raises:
            ValueError: If ``order`` is not a permutation of the storage
                indices.
        """
        order = list(order)
        if sorted(order) != list(range(len(self.citations))):
            raise ValueError(
                f"Local order {order} is not a permutation for group {self.group_id}"
            )
        self._detach_group_page_info()
        self.local_order = order
        self._attach_group_page_info()

    def impose_local_order(
        self,
        entry_key: Callable[[Entry], Any],
        unresolved_first: bool = True,
    ) -> None:
        """Sort citations for presentation.

        Under the LEGACY model the group's page info is detached from
        the last citation before sorting, so it plays no part in the
        order, and attached to the new last citation afterwards.

        Args:
            entry_key: Sort key for resolved entries.
            unresolved_first: Place unresolved citations first.
        """
        legacy = self.data_model is DataModel.LEGACY
        key = citation_sort_key(entry_key, unresolved_first, use_page_info=not legacy)

        self._detach_group_page_info()
        self.local_order = sorted(
            range(len(self.citations)), key=lambda i: key(self.citations[i])
        )
        self._attach_group_page_info()
        logger.debug("Local order of %s: %s", self.group_id, self.local_order)

    def _detach_group_page_info(self) -> None:
        if self._page_info is not None:
            self.citations[self.local_order[-1]].page_info = None

    def _attach_group_page_info(self) -> None:
        if self._page_info is not None:
            self.citations[self.local_order[-1]].page_info = self._page_info
