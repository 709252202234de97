"""Citations aggregated by citation key across the whole document.

A CitedKey collects the paths of every citation sharing one key,
together with the lookup result, number and unique letter they all
share. CitedKeys is the ordered collection of them and is the basis
of both letter assignment and the bibliography.
"""

import logging
from collections.abc import Callable, Iterator, Sequence
from enum import Enum
from typing import Any

import msgspec

from citemarks.citations.citation import (
    Citation,
    CitationPath,
    LookupResult,
    citation_sort_key,
)
from citemarks.citations.lookup import lookup
from citemarks.core.models import Database, Entry
from citemarks.exceptions import OrderingError

logger = logging.getLogger(__name__)


class KeyOrdering(Enum):
    """What the order of a CitedKeys collection means."""

    UNORDERED = "unordered"  # first seen in storage order
    APPEARANCE = "appearance"  # first appearance in the document
    SORTED = "sorted"  # bibliography sort order


class CitedKey(msgspec.Struct, kw_only=True):
    """All citations of one citation key."""

    citation_key: str
    where: list[CitationPath] = msgspec.field(default_factory=list)
    lookup_result: LookupResult | None = None
    number: int | None = None
    unique_letter: str | None = None
    normalized_marker: str | None = None

    @classmethod
    def from_citation(cls, path: CitationPath, citation: Citation) -> "CitedKey":
        """Start a CitedKey from its first citation."""
        return cls(
            citation_key=citation.citation_key,
            where=[path],
            lookup_result=citation.lookup_result,
            number=citation.number,
            unique_letter=citation.unique_letter,
        )

    @property
    def is_resolved(self) -> bool:
        return self.lookup_result is not None

    @property
    def entry(self) -> Entry | None:
        if self.lookup_result is None:
            return None
        return self.lookup_result.entry

    def add_path(self, path: CitationPath, citation: Citation) -> None:
        """Record another citation of this key.

        Raises:
            ValueError: If the citation disagrees with the values shared
                by this key.
        """
        for field in ("lookup_result", "number", "unique_letter"):
            if getattr(citation, field) != getattr(self, field):
                raise ValueError(
                    f"Citation at {path} disagrees with key "
                    f"{self.citation_key!r} on {field}"
                )
        if path not in self.where:
            self.where.append(path)


class CitedKeys:
    """Ordered mapping from citation key to CitedKey.

    Insertion order is significant: adding a path for a key already
    present does not move the key.
    """

    def __init__(self, ordering: KeyOrdering = KeyOrdering.UNORDERED):
        self._data: dict[str, CitedKey] = {}
        self._ordering = ordering

    @property
    def ordering(self) -> KeyOrdering:
        return self._ordering

    def add(self, path: CitationPath, citation: Citation) -> None:
        """Merge a citation into the collection."""
        cited_key = self._data.get(citation.citation_key)
        if cited_key is None:
            self._data[citation.citation_key] = CitedKey.from_citation(path, citation)
        else:
            cited_key.add_path(path, citation)

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[CitedKey]:
        return iter(self._data.values())

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __getitem__(self, key: str) -> CitedKey:
        return self._data[key]

    def get(self, key: str) -> CitedKey | None:
        return self._data.get(key)

    def keys(self) -> list[str]:
        return list(self._data)

    def values(self) -> list[CitedKey]:
        return list(self._data.values())

    def sort_by(
        self, entry_key: Callable[[Entry], Any], unresolved_first: bool = True
    ) -> None:
        """Reorder into bibliography order.

        Raises:
            OrderingError: If the collection already has an ordering.
        """
        if self._ordering is not KeyOrdering.UNORDERED:
            raise OrderingError(
                f"cannot sort cited keys already in {self._ordering.value} order"
            )

        key = citation_sort_key(entry_key, unresolved_first, use_page_info=False)
        ordered = sorted(self._data.values(), key=key)
        self._data = {cited_key.citation_key: cited_key for cited_key in ordered}
        self._ordering = KeyOrdering.SORTED

    def number_in_current_order(self) -> None:
        """Number resolved keys 1..N in the current order.

        Unresolved keys get no number; they are shown by citation key.
        """
        number = 1
        for cited_key in self._data.values():
            if cited_key.is_resolved:
                cited_key.number = number
                number += 1
            else:
                cited_key.number = None

    def lookup_in_databases(self, databases: Sequence[Database]) -> None:
        for cited_key in self._data.values():
            cited_key.lookup_result = lookup(databases, cited_key.citation_key)

    def unresolved_keys(self) -> list[str]:
        return [ck.citation_key for ck in self._data.values() if not ck.is_resolved]

    def __repr__(self) -> str:
        return f"CitedKeys({self._ordering.value}, {list(self._data)})"
