"""Bibliographic entries and the databases citations are resolved against.

Key components:
- Entry: Immutable bibliography entry carrying the BibTeX fields the
  marker and reference formatters read
- Database: Named, ordered collection of entries indexed by citation key
"""

import re
from collections.abc import Iterable, Iterator
from typing import Any

import msgspec

from .fields import EntryType

_AND_RE = re.compile(r"\s+and\s+")


def split_names(field: str | None) -> tuple[str, ...]:
    """Split a BibTeX name list on ' and ' delimiters.

    Escaped ampersands (\\&) are not treated as delimiters, and the
    word 'and' inside braces does not split an organization name.
    """
    if not field:
        return ()

    temp = field.replace(r"\&", "\x00")
    names: list[str] = []
    current: list[str] = []
    depth = 0
    pos = 0
    while pos < len(temp):
        char = temp[pos]
        if char == "{":
            depth += 1
        elif char == "}":
            depth = max(0, depth - 1)
        elif depth == 0:
            match = _AND_RE.match(temp, pos)
            if match and pos > 0:
                names.append("".join(current))
                current = []
                pos = match.end()
                continue
        current.append(char)
        pos += 1
    names.append("".join(current))

    return tuple(
        name.replace("\x00", "&").strip() for name in names if name.strip()
    )


class Entry(msgspec.Struct, frozen=True, kw_only=True):
    """Immutable bibliography entry conforming to BibTeX conventions.

    Only the fields used when rendering citation markers and
    bibliography references are modelled; anything else can be kept
    in ``custom``.
    """

    key: str
    type: EntryType = EntryType.MISC
    author: str | None = None
    editor: str | None = None
    title: str | None = None
    journal: str | None = None
    booktitle: str | None = None
    publisher: str | None = None
    address: str | None = None
    school: str | None = None
    institution: str | None = None
    organization: str | None = None
    howpublished: str | None = None
    edition: str | None = None
    volume: str | None = None
    number: str | None = None
    pages: str | None = None
    month: str | None = None
    year: int | None = None
    note: str | None = None
    doi: str | None = None
    url: str | None = None
    crossref: str | None = None
    custom: dict[str, Any] | None = None

    @property
    def authors(self) -> tuple[str, ...]:
        """Parse author field into individual names."""
        return split_names(self.author)

    @property
    def editors(self) -> tuple[str, ...]:
        """Parse editor field into individual names."""
        return split_names(self.editor)

    def get(self, field: str) -> Any:
        """Get a field value by name, falling back to custom fields."""
        if field in self.__struct_fields__:
            return getattr(self, field)
        if self.custom:
            return self.custom.get(field)
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        data = msgspec.to_builtins(self)
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entry":
        """Create Entry from dictionary representation.

        Args:
            data: Dictionary with entry fields. ``type`` may be given as
                the BibTeX type name.

        Returns:
            New Entry instance.
        """
        data = dict(data)
        if "type" in data:
            entry_type = data["type"]
            if not isinstance(entry_type, EntryType):
                entry_type = EntryType(str(entry_type).lower())
            data["type"] = entry_type.value
        if "year" in data and isinstance(data["year"], str):
            data["year"] = int(data["year"]) if data["year"].strip() else None
        return msgspec.convert(data, cls)


class Database:
    """Named collection of entries addressed by citation key.

    Entries keep their insertion order. When two entries share a key
    the first one wins, as a BibTeX reader would report.
    """

    def __init__(self, name: str, entries: Iterable[Entry] = ()):
        """Initialize with a name and optional entries."""
        self.name = name
        self._entries: list[Entry] = []
        self._index: dict[str, Entry] = {}
        for entry in entries:
            self.add(entry)

    def add(self, entry: Entry) -> None:
        """Add an entry to the database."""
        self._entries.append(entry)
        self._index.setdefault(entry.key, entry)

    def get_entry_by_key(self, key: str) -> Entry | None:
        """Get the entry for a citation key, if present."""
        return self._index.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Database):
            return NotImplemented
        return self.name == other.name and self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"Database({self.name!r}, {len(self._entries)} entries)"
