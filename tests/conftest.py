"""Pytest configuration and fixtures."""

import os

import pytest

from citemarks.citations.citation import Citation
from citemarks.citations.group import CitationGroup, CitationType, DataModel
from citemarks.core.fields import EntryType
from citemarks.core.models import Database, Entry


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Isolate environment variables for each test.

    This prevents test pollution where one test's environment
    changes affect other tests.
    """
    # Save current environment
    original_env = os.environ.copy()

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Run with an empty config home and working directory."""
    config_home = tmp_path / "config"
    config_home.mkdir()
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    for name in (
        "CITEMARKS_STYLE",
        "CITEMARKS_STYLE_DIR",
        "CITEMARKS_ALWAYS_CITED_ON_PAGES",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(workdir)
    return tmp_path


@pytest.fixture
def sample_entries() -> dict[str, Entry]:
    """Entries keyed by citation key."""
    entries = [
        Entry(
            key="Smith2000a",
            type=EntryType.ARTICLE,
            author="Smith, John",
            title="Alpha results",
            journal="Nature",
            year=2000,
        ),
        Entry(
            key="Smith2000b",
            type=EntryType.ARTICLE,
            author="Smith, John",
            title="Beta results",
            journal="Nature",
            year=2000,
        ),
        Entry(
            key="Jones2001",
            type=EntryType.BOOK,
            author="Jones, Mary",
            title="A Book",
            publisher="Springer",
            year=2001,
        ),
        Entry(
            key="Adams1999",
            type=EntryType.ARTICLE,
            author="Adams, Zoe",
            title="Early work",
            journal="Science",
            year=1999,
        ),
    ]
    return {entry.key: entry for entry in entries}


@pytest.fixture
def database(sample_entries) -> Database:
    """Database holding all sample entries."""
    return Database("main", sample_entries.values())


@pytest.fixture
def make_group():
    """Factory for citation groups."""

    def factory(
        group_id: str,
        keys: list[str],
        page_infos: list[str | None] | None = None,
        citation_type: CitationType = CitationType.NUMERIC,
        data_model: DataModel = DataModel.PER_CITATION,
        page_info: str | None = None,
        reference_mark_name: str | None = None,
    ) -> CitationGroup:
        page_infos = page_infos or [None] * len(keys)
        citations = [
            Citation(citation_key=key, page_info=info)
            for key, info in zip(keys, page_infos)
        ]
        return CitationGroup(
            group_id,
            citation_type,
            citations,
            data_model=data_model,
            page_info=page_info,
            reference_mark_name=reference_mark_name,
        )

    return factory
