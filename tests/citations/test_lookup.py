"""Tests for citation key lookup."""

from citemarks.citations.lookup import lookup
from citemarks.core.models import Database, Entry


class TestLookup:
    """Test resolving keys against databases."""

    def test_found(self, database):
        """A known key resolves to its entry and database."""
        result = lookup([database], "Jones2001")
        assert result is not None
        assert result.entry.key == "Jones2001"
        assert result.database is database

    def test_missing(self, database):
        """An unknown key is not an error."""
        assert lookup([database], "Nobody2020") is None

    def test_no_databases(self):
        """Nothing resolves without databases."""
        assert lookup([], "Jones2001") is None

    def test_first_database_wins(self):
        """Databases are searched in order."""
        first = Database("first", [Entry(key="k", title="First")])
        second = Database("second", [Entry(key="k", title="Second")])

        result = lookup([first, second], "k")
        assert result.entry.title == "First"
        assert result.database is first

        result = lookup([second, first], "k")
        assert result.entry.title == "Second"

    def test_later_database(self):
        """Keys missing in early databases are found in later ones."""
        first = Database("first", [Entry(key="a")])
        second = Database("second", [Entry(key="b")])
        assert lookup([first, second], "b").database is second
