"""Tests for the citation group store."""

import pytest

from citemarks.citations.citation import CitationPath
from citemarks.citations.cited_keys import CitedKeys, KeyOrdering
from citemarks.citations.group import DataModel
from citemarks.citations.store import CitationGroupStore
from citemarks.core.fields import EntryType
from citemarks.core.models import Database, Entry
from citemarks.core.sorting import SortKeyGenerator
from citemarks.exceptions import (
    DataModelConflictError,
    OrderingError,
    StaleBibliographyError,
    UnknownGroupError,
)


@pytest.fixture
def store(make_group):
    """Store with three groups: G1(Jones2001), G2(Adams1999), G3(Jones2001)."""
    store = CitationGroupStore()
    store.add_group(make_group("G1", ["Jones2001"]))
    store.add_group(make_group("G2", ["Adams1999", "missing"]))
    store.add_group(make_group("G3", ["Jones2001"]))
    return store


class TestGroups:
    """Test adding and removing groups."""

    def test_add_and_get(self, store):
        assert len(store) == 3
        assert "G2" in store
        assert store.get_group("G2").citation_keys_in_local_order() == [
            "Adams1999",
            "missing",
        ]
        assert store.group_ids() == ["G1", "G2", "G3"]

    def test_unknown_group(self, store):
        with pytest.raises(UnknownGroupError):
            store.get_group("nope")
        with pytest.raises(UnknownGroupError):
            store.remove_group("nope")

    def test_duplicate_group(self, store, make_group):
        with pytest.raises(ValueError):
            store.add_group(make_group("G1", ["x"]))

    def test_data_model_mismatch(self, make_group):
        """Groups must use the document's data model."""
        store = CitationGroupStore(DataModel.LEGACY)
        with pytest.raises(DataModelConflictError):
            store.add_group(make_group("G1", ["a"]))
        assert len(store) == 0

    def test_add_invalidates(self, store, make_group, database):
        """Adding a group drops the global order and the bibliography."""
        store.set_global_order(["G1", "G2", "G3"])
        store.lookup_citations([database])
        store.create_numbered_bibliography_in_appearance_order()

        store.add_group(make_group("G4", ["Smith2000a"]))

        assert store.global_order is None
        assert store.get_bibliography() is None
        assert store.get_group("G1").index_in_global_order is None
        citation = store.get_group("G1").get_citation(0)
        assert citation.lookup_result is None
        assert citation.number is None

    def test_remove_invalidates(self, store, database):
        """Removing a group drops the global order and derived values."""
        store.set_global_order(["G1", "G2", "G3"])
        store.lookup_citations([database])
        removed = store.remove_group("G2")
        assert removed.group_id == "G2"
        assert store.global_order is None
        assert "G2" not in store
        assert store.get_group("G3").get_citation(0).lookup_result is None

    def test_rebuild_after_add(self, store, make_group, database):
        """A bibliography can be built again after a group is added."""
        store.set_global_order(["G1", "G2", "G3"])
        store.lookup_citations([database])
        store.create_numbered_bibliography_in_appearance_order()

        store.add_group(make_group("G4", ["Jones2001"]))
        store.set_global_order(["G1", "G2", "G3", "G4"])
        store.lookup_citations([database])
        bibliography = store.create_numbered_bibliography_in_appearance_order()

        assert bibliography.keys() == ["Jones2001", "Adams1999", "missing"]
        assert bibliography["Jones2001"].where == [
            CitationPath("G1", 0),
            CitationPath("G3", 0),
            CitationPath("G4", 0),
        ]
        assert store.get_group("G4").get_citation(0).number == 1
        assert store.get_group("G2").get_citation(0).number == 2


class TestGlobalOrder:
    """Test the document order of groups."""

    def test_set(self, store):
        store.set_global_order(["G3", "G1", "G2"])
        assert store.global_order == ("G3", "G1", "G2")
        assert store.get_group("G3").index_in_global_order == 0
        assert store.get_group("G2").index_in_global_order == 2
        assert [g.group_id for g in store.groups_in_global_order()] == [
            "G3",
            "G1",
            "G2",
        ]

    def test_require_without_order(self, store):
        with pytest.raises(OrderingError):
            store.require_global_order()

    @pytest.mark.parametrize(
        "order, error",
        [
            (["G1", "G2"], OrderingError),
            (["G1", "G2", "G3", "G4"], OrderingError),
            (["G1", "G2", "G2"], OrderingError),
            (["G1", "G2", "X"], UnknownGroupError),
        ],
    )
    def test_invalid_order_leaves_store_unchanged(self, store, order, error):
        """A rejected order changes nothing."""
        store.set_global_order(["G1", "G2", "G3"])
        with pytest.raises(error):
            store.set_global_order(order)
        assert store.global_order == ("G1", "G2", "G3")

    def test_validate_does_not_apply(self, store):
        assert store.validate_global_order(("G2", "G1", "G3")) == ["G2", "G1", "G3"]
        assert store.global_order is None
        with pytest.raises(OrderingError):
            store.validate_global_order(["G1"])

    def test_appearance_order_needs_global_order(self, store):
        with pytest.raises(OrderingError):
            store.cited_keys_in_appearance_order()
        with pytest.raises(OrderingError):
            store.mark_first_appearances()


class TestLookupAndDistribution:
    """Test lookup and copying shared values to citations."""

    def test_lookup_citations(self, store, database):
        """Every citation receives the lookup result of its key."""
        cited_keys = store.lookup_citations([database])

        assert cited_keys.keys() == ["Jones2001", "Adams1999", "missing"]
        for group_id in ("G1", "G3"):
            citation = store.get_group(group_id).get_citation(0)
            assert citation.entry.key == "Jones2001"
        assert store.get_group("G2").get_citation(1).lookup_result is None
        assert store.unresolved_keys() == ["missing"]

    def test_distribute_numbers(self, store):
        cited_keys = store.cited_keys_unordered()
        cited_keys["Jones2001"].number = 7
        store.distribute_numbers(cited_keys)
        assert store.get_group("G1").get_citation(0).number == 7
        assert store.get_group("G3").get_citation(0).number == 7

    def test_distribute_unknown_group_writes_nothing(self, store):
        """A bad path is detected before any citation is written."""
        cited_keys = store.cited_keys_unordered()
        cited_keys["Jones2001"].number = 7
        cited_keys["Adams1999"].where.append(CitationPath("nope", 0))
        cited_keys["Adams1999"].number = 8

        with pytest.raises(UnknownGroupError):
            store.distribute_numbers(cited_keys)
        assert store.get_group("G1").get_citation(0).number is None

    def test_distribute_bad_index(self, store):
        cited_keys = store.cited_keys_unordered()
        cited_keys["Jones2001"].where.append(CitationPath("G1", 5))
        with pytest.raises(ValueError):
            store.distribute_unique_letters(cited_keys)

    def test_reset_citations(self, store, database):
        """Reset clears derived values and the bibliography, not the order."""
        store.set_global_order(["G1", "G2", "G3"])
        store.lookup_citations([database])
        store.mark_first_appearances()
        store.create_numbered_bibliography_in_appearance_order()

        store.reset_citations()

        for group in store:
            for citation in group.citations:
                assert citation.lookup_result is None
                assert citation.number is None
                assert citation.is_first_appearance is None
        assert store.get_bibliography() is None
        assert store.global_order == ("G1", "G2", "G3")

    def test_mark_first_appearances(self, store):
        store.set_global_order(["G3", "G2", "G1"])
        store.mark_first_appearances()
        assert store.get_group("G3").get_citation(0).is_first_appearance is True
        assert store.get_group("G1").get_citation(0).is_first_appearance is False


class TestBibliography:
    """Test building bibliographies."""

    def test_appearance_order_numbering(self, store, database):
        """Numbers follow first appearance and reach every citation."""
        store.set_global_order(["G2", "G1", "G3"])
        store.lookup_citations([database])

        bibliography = store.create_numbered_bibliography_in_appearance_order()

        assert bibliography.ordering is KeyOrdering.APPEARANCE
        assert bibliography.keys() == ["Adams1999", "missing", "Jones2001"]
        assert [ck.number for ck in bibliography] == [1, None, 2]
        assert store.get_group("G1").get_citation(0).number == 2
        assert store.get_group("G3").get_citation(0).number == 2
        assert store.get_group("G2").get_citation(1).number is None
        assert store.require_bibliography() is bibliography

    def test_numbers_round_trip(self, store, database):
        """Cited keys rebuilt from citations agree with the bibliography."""
        store.set_global_order(["G1", "G2", "G3"])
        store.lookup_citations([database])
        bibliography = store.create_numbered_bibliography_in_appearance_order()

        rebuilt = store.cited_keys_in_appearance_order()
        assert [(ck.citation_key, ck.number) for ck in rebuilt] == [
            (ck.citation_key, ck.number) for ck in bibliography
        ]

    def test_sorted_numbering(self, store, database):
        store.lookup_citations([database])
        bibliography = store.create_numbered_bibliography_sorted(SortKeyGenerator())
        assert bibliography.keys() == ["missing", "Adams1999", "Jones2001"]
        assert [ck.number for ck in bibliography] == [None, 1, 2]

    def test_plain_sorted(self, store, database):
        store.lookup_citations([database])
        bibliography = store.create_plain_bibliography_sorted(SortKeyGenerator())
        assert bibliography.ordering is KeyOrdering.SORTED
        assert all(ck.number is None for ck in bibliography)

    def test_stale_bibliography(self, store, database):
        """A second bibliography needs an invalidation first."""
        store.lookup_citations([database])
        store.create_plain_bibliography_sorted(SortKeyGenerator())
        with pytest.raises(StaleBibliographyError):
            store.create_plain_bibliography_sorted(SortKeyGenerator())

        store.invalidate()
        store.create_plain_bibliography_sorted(SortKeyGenerator())

    def test_require_bibliography(self, store):
        assert store.get_bibliography() is None
        with pytest.raises(OrderingError):
            store.require_bibliography()

    def test_cited_keys_unordered(self, store):
        cited_keys = store.cited_keys_unordered()
        assert isinstance(cited_keys, CitedKeys)
        assert cited_keys.ordering is KeyOrdering.UNORDERED


class TestReferenceMarkNames:
    def test_all_named(self, make_group):
        store = CitationGroupStore()
        store.add_group(make_group("G1", ["a"], reference_mark_name="rm1"))
        assert store.provides_reference_mark_names()
        store.add_group(make_group("G2", ["b"]))
        assert not store.provides_reference_mark_names()


class TestTransaction:
    """Test restoring the store when an operation fails."""

    def test_rollback_on_error(self, store, database):
        store.set_global_order(["G1", "G2", "G3"])
        store.lookup_citations([database])
        bibliography = store.create_numbered_bibliography_in_appearance_order()

        with pytest.raises(RuntimeError):
            with store.transaction():
                store.reset_citations()
                store.get_group("G2").set_local_order([1, 0])
                store.set_global_order(["G3", "G2", "G1"])
                raise RuntimeError("failed midway")

        assert store.require_bibliography() is bibliography
        assert store.global_order == ("G1", "G2", "G3")
        assert store.get_group("G1").index_in_global_order == 0
        assert store.get_group("G2").local_order == [0, 1]
        assert store.get_group("G1").get_citation(0).number == 1
        assert store.get_group("G2").get_citation(0).entry.key == "Adams1999"

    def test_changes_kept_on_success(self, store):
        with store.transaction():
            store.set_global_order(["G3", "G2", "G1"])
        assert store.global_order == ("G3", "G2", "G1")


class TestExportCited:
    """Test collecting cited entries into a new database."""

    @pytest.fixture
    def proceedings(self):
        return Database(
            "conf",
            [
                Entry(
                    key="Paper2005",
                    type=EntryType.INPROCEEDINGS,
                    author="Lee, Ann",
                    title="A paper",
                    year=2005,
                    crossref="Conf2005",
                ),
                Entry(
                    key="Talk2005",
                    type=EntryType.INPROCEEDINGS,
                    author="Kim, Bo",
                    title="A talk",
                    year=2005,
                    crossref="Conf2005",
                ),
                Entry(
                    key="Poster2005",
                    type=EntryType.INPROCEEDINGS,
                    author="Park, Cy",
                    title="A poster",
                    year=2005,
                    crossref="Adams1999",
                ),
                Entry(
                    key="Conf2005",
                    type=EntryType.PROCEEDINGS,
                    title="Proceedings",
                    year=2005,
                ),
            ],
        )

    def test_export(self, make_group, proceedings, database):
        """Cross references are followed once, in the entry's own database."""
        store = CitationGroupStore()
        store.add_group(make_group("G1", ["Paper2005", "missing"]))
        store.add_group(make_group("G2", ["Talk2005", "Poster2005", "Jones2001"]))

        exported, unresolved = store.export_cited([proceedings, database], "out")

        assert exported.name == "out"
        assert [entry.key for entry in exported] == [
            "Paper2005",
            "Conf2005",
            "Talk2005",
            "Poster2005",
            "Jones2001",
        ]
        assert unresolved == ["missing"]

    def test_export_leaves_citations_alone(self, make_group, proceedings):
        store = CitationGroupStore()
        store.add_group(make_group("G1", ["Paper2005"]))
        store.export_cited([proceedings])
        assert store.get_group("G1").get_citation(0).lookup_result is None

    def test_cited_parent_added_once(self, make_group, proceedings):
        store = CitationGroupStore()
        store.add_group(make_group("G1", ["Conf2005", "Paper2005", "Talk2005"]))

        exported, unresolved = store.export_cited([proceedings])

        assert [entry.key for entry in exported] == [
            "Conf2005",
            "Paper2005",
            "Talk2005",
        ]
        assert unresolved == []
