"""Tests for style options and the style registry."""

import logging

import pytest

from citemarks.style.options import (
    BUILTIN_STYLES,
    MarkerKind,
    StyleOptions,
    StyleRegistry,
)


class TestStyleOptions:
    """Test StyleOptions dataclass."""

    def test_defaults(self):
        options = StyleOptions()
        assert options.kind is MarkerKind.NUMERIC
        assert options.bracket_before == "["
        assert options.bracket_after == "]"
        assert options.min_grouping_count == 3
        assert options.max_authors == 3
        assert options.strict_author_year

    def test_kind_from_string(self):
        assert StyleOptions(kind="author-year").kind is MarkerKind.AUTHOR_YEAR

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown marker kind"):
            StyleOptions(kind="chicago")

    @pytest.mark.parametrize("value", [0, -2])
    def test_invalid_author_limits(self, value):
        with pytest.raises(ValueError):
            StyleOptions(max_authors=value)
        with pytest.raises(ValueError):
            StyleOptions(max_authors_first=value)

    def test_list_brackets(self):
        """List brackets fall back to the marker brackets."""
        options = StyleOptions(bracket_before="(", bracket_after=")")
        assert options.list_bracket_before == "("
        assert options.list_bracket_after == ")"

        options = StyleOptions(bracket_before_in_list="", bracket_after_in_list=".")
        assert options.list_bracket_before == ""
        assert options.list_bracket_after == "."

    def test_from_dict(self):
        data = {"kind": "citation-key", "bracket_before": "{"}
        options = StyleOptions.from_dict(data)
        assert options.kind is MarkerKind.CITATION_KEY
        assert options.bracket_before == "{"

    def test_from_dict_unknown_keys(self):
        with pytest.raises(ValueError, match="colour"):
            StyleOptions.from_dict({"colour": "red"})

    def test_to_dict(self):
        data = StyleOptions(kind=MarkerKind.AUTHOR_YEAR).to_dict()
        assert data["kind"] == "author-year"
        assert StyleOptions.from_dict(data) == StyleOptions(kind=MarkerKind.AUTHOR_YEAR)

    def test_merge_dict(self):
        base = StyleOptions(citation_separator=",")
        merged = base.merge({"bracket_before": "(", "bracket_after": ")"})
        assert merged.citation_separator == ","
        assert merged.bracket_before == "("
        assert base.bracket_before == "["

    def test_merge_options(self):
        """Only non-default fields of the other options override."""
        base = StyleOptions(citation_separator=",", max_authors=2)
        merged = base.merge(StyleOptions(max_authors=5))
        assert merged.citation_separator == ","
        assert merged.max_authors == 5


class TestStyleRegistry:
    """Test StyleRegistry."""

    def test_builtin_styles(self):
        registry = StyleRegistry()
        for name in BUILTIN_STYLES:
            assert name in registry
        assert registry.get("numeric-position").sort_by_position

    @pytest.mark.parametrize(
        "alias, kind",
        [
            ("harvard", MarkerKind.AUTHOR_YEAR),
            ("IEEE", MarkerKind.NUMERIC),
            ("keys", MarkerKind.CITATION_KEY),
        ],
    )
    def test_aliases(self, alias, kind):
        assert StyleRegistry().get(alias).kind is kind

    def test_unknown_style(self):
        with pytest.raises(ValueError, match="Unknown citation style"):
            StyleRegistry().get("nope")

    def test_get_returns_copy(self):
        registry = StyleRegistry()
        options = registry.get("numeric")
        options.bracket_before = "("
        assert registry.get("numeric").bracket_before == "["

    def test_register(self):
        registry = StyleRegistry()
        registry.register("Mine", StyleOptions(bracket_before="<"))
        assert "mine" in registry
        assert registry.get("MINE").bracket_before == "<"
        assert "mine" in registry.list_styles()

    def test_load_file(self, tmp_path):
        """A style file is applied on top of its base style."""
        path = tmp_path / "apa-like.yaml"
        path.write_text(
            "name: apa-like\nbase: author-year\nmax_authors: 2\noxford_comma: ','\n"
        )
        registry = StyleRegistry()

        assert registry.load_file(path) == "apa-like"
        options = registry.get("apa-like")
        assert options.kind is MarkerKind.AUTHOR_YEAR
        assert options.max_authors == 2
        assert options.oxford_comma == ","

    def test_load_file_name_from_stem(self, tmp_path):
        path = tmp_path / "Plain.yml"
        path.write_text("bracket_before: '('\nbracket_after: ')'\n")
        registry = StyleRegistry()
        assert registry.load_file(path) == "plain"
        assert registry.get("plain").bracket_before == "("

    def test_load_file_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("kind: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            StyleRegistry().load_file(path)

    def test_load_file_not_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            StyleRegistry().load_file(path)

    def test_load_directory(self, tmp_path, caplog):
        """Broken files are skipped with a warning."""
        (tmp_path / "one.yaml").write_text("citation_separator: ','\n")
        (tmp_path / "two.yml").write_text("unknown_option: 1\n")
        (tmp_path / "notes.txt").write_text("ignored")
        registry = StyleRegistry()

        with caplog.at_level(logging.WARNING, logger="citemarks.style.options"):
            loaded = registry.load_directory(tmp_path)

        assert loaded == ["one"]
        assert "two" not in registry
        assert "two.yml" in caplog.text
