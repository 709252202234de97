"""Shared fixtures for style tests."""

import pytest

from citemarks.core.fields import EntryType
from citemarks.core.models import Entry
from citemarks.style.options import MarkerKind, StyleOptions


@pytest.fixture
def author_year_options() -> StyleOptions:
    """Author-year style with default separators."""
    return StyleOptions(kind=MarkerKind.AUTHOR_YEAR)


@pytest.fixture
def make_entry():
    """Factory for article entries."""

    def factory(key: str, author: str | None = None, year: int | None = None, **fields):
        fields.setdefault("type", EntryType.ARTICLE)
        return Entry(key=key, author=author, year=year, **fields)

    return factory
