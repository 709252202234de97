"""Citation groups, cited keys and the document-wide store."""

from citemarks.citations.citation import (
    Citation,
    CitationPath,
    LookupResult,
    citation_sort_key,
)
from citemarks.citations.cited_keys import CitedKey, CitedKeys, KeyOrdering
from citemarks.citations.group import CitationGroup, CitationType, DataModel
from citemarks.citations.letters import assign_unique_letters
from citemarks.citations.lookup import lookup
from citemarks.citations.store import CitationGroupStore

__all__ = [
    "Citation",
    "CitationGroup",
    "CitationGroupStore",
    "CitationPath",
    "CitationType",
    "CitedKey",
    "CitedKeys",
    "DataModel",
    "KeyOrdering",
    "LookupResult",
    "assign_unique_letters",
    "citation_sort_key",
    "lookup",
]
