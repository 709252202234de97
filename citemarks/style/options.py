"""Citation style configuration and the registry of named styles."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


class MarkerKind(Enum):
    """Which marker strategy a style uses."""

    NUMERIC = "numeric"
    AUTHOR_YEAR = "author-year"
    CITATION_KEY = "citation-key"


@dataclass
class StyleOptions:
    """Configuration options for citation markers and bibliographies."""

    kind: MarkerKind = MarkerKind.NUMERIC

    # Ordering
    sort_by_position: bool = False
    multi_cite_chronological: bool = True

    # Brackets
    bracket_before: str = "["
    bracket_after: str = "]"
    bracket_before_in_list: str | None = None
    bracket_after_in_list: str | None = None

    # Separators
    citation_separator: str = "; "
    page_info_separator: str = "; "
    grouped_numbers_separator: str = "-"
    year_separator: str = ", "
    in_text_year_separator: str = " "
    unique_letter_separator: str = ","
    citation_key_separator: str = ","

    # Numeric ranges; 0 or less disables them
    min_grouping_count: int = 3

    # Author lists
    author_separator: str = ", "
    author_last_separator: str = " & "
    oxford_comma: str = ""
    et_al_string: str = " et al."
    max_authors: int = 3
    max_authors_first: int = -1  # -1 shows all authors

    # Unresolved keys and strictness
    undefined_marker: str = "??"
    strict_author_year: bool = True

    # Markup
    format_citations: bool = False
    citation_character_format: str = ""
    reference_paragraph_format: str = "Default"
    reference_header_paragraph_format: str = "Heading 1"
    bibliography_title: str = ""
    always_add_cited_on_pages: bool = False

    def __post_init__(self):
        """Validate options."""
        if isinstance(self.kind, str):
            try:
                self.kind = MarkerKind(self.kind)
            except ValueError:
                raise ValueError(f"Unknown marker kind: {self.kind}") from None
        for name in ("max_authors", "max_authors_first"):
            value = getattr(self, name)
            if value == 0 or value < -1:
                raise ValueError(f"{name} must be positive or -1, got {value}")

    @property
    def list_bracket_before(self) -> str:
        """Opening bracket of bibliography labels."""
        if self.bracket_before_in_list is None:
            return self.bracket_before
        return self.bracket_before_in_list

    @property
    def list_bracket_after(self) -> str:
        """Closing bracket of bibliography labels."""
        if self.bracket_after_in_list is None:
            return self.bracket_after
        return self.bracket_after_in_list

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StyleOptions:
        """Create options from a mapping, rejecting unknown keys."""
        names = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - names)
        if unknown:
            raise ValueError(f"Unknown style options: {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["kind"] = self.kind.value
        return data

    def merge(self, other: StyleOptions | dict[str, Any]) -> StyleOptions:
        """Merge with other options, other takes precedence.

        A StyleOptions only overrides the fields it sets to non-default
        values; a mapping overrides exactly the keys it contains.
        """
        if isinstance(other, StyleOptions):
            defaults = StyleOptions()
            overrides = {
                f.name: getattr(other, f.name)
                for f in dataclasses.fields(other)
                if getattr(other, f.name) != getattr(defaults, f.name)
            }
        else:
            overrides = dict(other)
        merged = {**self.to_dict(), **overrides}
        return StyleOptions.from_dict(merged)


BUILTIN_STYLES: dict[str, StyleOptions] = {
    "numeric": StyleOptions(kind=MarkerKind.NUMERIC, citation_separator=","),
    "numeric-position": StyleOptions(
        kind=MarkerKind.NUMERIC, citation_separator=",", sort_by_position=True
    ),
    "author-year": StyleOptions(kind=MarkerKind.AUTHOR_YEAR),
    "citation-key": StyleOptions(kind=MarkerKind.CITATION_KEY),
}


class StyleRegistry:
    """Registry of available citation styles."""

    def __init__(self):
        """Initialize with built-in styles."""
        self._styles: dict[str, StyleOptions] = dict(BUILTIN_STYLES)

        # Aliases
        self._aliases = {
            "numerical": "numeric",
            "ieee": "numeric-position",
            "vancouver": "numeric-position",
            "authoryear": "author-year",
            "harvard": "author-year",
            "keys": "citation-key",
        }

    def __contains__(self, name: str) -> bool:
        """Check if style is registered."""
        name = name.lower()
        return name in self._styles or name in self._aliases

    def get(self, name: str) -> StyleOptions:
        """Get a copy of the options of a style."""
        name = name.lower()
        name = self._aliases.get(name, name)

        if name not in self._styles:
            raise ValueError(f"Unknown citation style: {name}")

        return dataclasses.replace(self._styles[name])

    def register(self, name: str, options: StyleOptions) -> None:
        """Register custom style."""
        self._styles[name.lower()] = options

    def load_file(self, path: Path | str) -> str:
        """Load and register a YAML style file.

        The file is a mapping of option names to values. Optional keys:
        ``name`` (defaults to the file stem) and ``base``, a registered
        style the options are applied on top of.

        Returns:
            The registered style name.

        Raises:
            ValueError: If the file is not valid YAML or names unknown
                options.
        """
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in style file {path}: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Style file {path} must contain a mapping")

        name = str(data.pop("name", path.stem))
        base = data.pop("base", None)
        options = self.get(base) if base else StyleOptions()
        self.register(name, options.merge(data))
        return name.lower()

    def load_directory(self, path: Path | str) -> list[str]:
        """Load all YAML style files from a directory."""
        loaded = []
        path = Path(path)
        for style_file in sorted(path.glob("*.y*ml")):
            try:
                loaded.append(self.load_file(style_file))
            except (OSError, ValueError, TypeError) as e:
                logger.warning("Skipping style file %s: %s", style_file, e)
        return loaded

    def list_styles(self) -> list[str]:
        """List available style names."""
        return list(self._styles.keys())
