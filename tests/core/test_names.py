"""Tests for BibTeX author name parsing and display forms."""

from citemarks.core.names import NameParser, ParsedName


class TestNameParser:
    """Test name parsing according to BibTeX's three formats."""

    def test_format_0_first_von_last(self) -> None:
        """Format 0: First von Last (no commas)."""
        parsed = NameParser.parse("Donald E. Knuth")
        assert parsed.first == ["Donald", "E."]
        assert parsed.von == []
        assert parsed.last == ["Knuth"]
        assert parsed.jr == []

        parsed = NameParser.parse("Ludwig van Beethoven")
        assert parsed.first == ["Ludwig"]
        assert parsed.von == ["van"]
        assert parsed.last == ["Beethoven"]

    def test_format_1_von_last_first(self) -> None:
        """Format 1: von Last, First (one comma)."""
        parsed = NameParser.parse("van Beethoven, Ludwig")
        assert parsed.first == ["Ludwig"]
        assert parsed.von == ["van"]
        assert parsed.last == ["Beethoven"]

        parsed = NameParser.parse("Garcia Lopez, Maria")
        assert parsed.von == []
        assert parsed.last == ["Garcia", "Lopez"]

    def test_format_2_von_last_jr_first(self) -> None:
        """Format 2: von Last, Jr, First (two commas)."""
        parsed = NameParser.parse("King, Jr., Martin Luther")
        assert parsed.first == ["Martin", "Luther"]
        assert parsed.last == ["King"]
        assert parsed.jr == ["Jr."]

    def test_braced_organization_is_one_last_name(self) -> None:
        """Braced names are a single token and never split on commas."""
        parsed = NameParser.parse("{Open Source Development Team}")
        assert parsed.first == []
        assert parsed.last == ["{Open Source Development Team}"]

        parsed = NameParser.parse("{Barnes, Noble and Co}")
        assert parsed.last == ["{Barnes, Noble and Co}"]

    def test_empty_name(self) -> None:
        """Empty input parses to an empty name."""
        assert NameParser.parse("   ").is_empty()


class TestParsedNameDisplay:
    """Test the display forms used in markers and references."""

    def test_von_last(self) -> None:
        """Marker form keeps the von part and drops braces."""
        assert NameParser.parse("Alpha von Beta").von_last() == "von Beta"
        assert (
            NameParser.parse("{Open Source Development Team}").von_last()
            == "Open Source Development Team"
        )

    def test_von_last_converts_latex_accents(self) -> None:
        """LaTeX accents become Unicode characters."""
        assert NameParser.parse('Gustav Bostr\\"{o}m').von_last() == "Boström"
        assert NameParser.parse("Marine Bod\\'{e}n").von_last() == "Bodén"

    def test_initials(self) -> None:
        """First names abbreviate, hyphenated names keep the hyphen."""
        parsed = ParsedName(["Jean-Paul", "Marie"], [], ["Sartre"], [])
        assert parsed.initials() == "J.-P. M."

    def test_last_first(self) -> None:
        """Reference form is 'von Last, F.' with Jr appended."""
        assert NameParser.parse("Alpha von Beta").last_first() == "von Beta, A."
        assert (
            NameParser.parse("King, Jr., Martin Luther").last_first()
            == "King, M. L., Jr."
        )
        assert (
            NameParser.parse("Donald E. Knuth").last_first(initialize=False)
            == "Knuth, Donald E."
        )
