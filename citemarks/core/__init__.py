"""Bibliographic entry model used by the citation engine."""

from citemarks.core.fields import EntryType
from citemarks.core.models import Database, Entry
from citemarks.core.names import NameParser, ParsedName
from citemarks.core.sorting import (
    AUTHOR_YEAR_TITLE,
    YEAR_AUTHOR_TITLE,
    SortKeyGenerator,
    entry_sort_key,
)
from citemarks.core.titles import TitleProcessor

__all__ = [
    "AUTHOR_YEAR_TITLE",
    "Database",
    "Entry",
    "EntryType",
    "NameParser",
    "ParsedName",
    "SortKeyGenerator",
    "TitleProcessor",
    "YEAR_AUTHOR_TITLE",
    "entry_sort_key",
]
