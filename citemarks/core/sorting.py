"""Sort keys for ordering bibliography entries.

Two orders are provided, both case-insensitive and based on purified
field text:
- author-year-title: bibliography order and the default order of
  citations inside one group
- year-author-title: chronological order of citations inside one group
"""

from collections.abc import Callable

from .models import Entry
from .names import NameParser
from .titles import TitleProcessor

AUTHOR_YEAR_TITLE = "author-year-title"
YEAR_AUTHOR_TITLE = "year-author-title"

SortKey = tuple[str, ...]


class SortKeyGenerator:
    """Generate sort keys for bibliography entries.

    Entries without an author sort after those with one; entries
    without a year sort as year 9999.
    """

    def __init__(self, order: str = AUTHOR_YEAR_TITLE):
        """Initialize with the field order.

        Args:
            order: AUTHOR_YEAR_TITLE or YEAR_AUTHOR_TITLE.
        """
        if order not in (AUTHOR_YEAR_TITLE, YEAR_AUTHOR_TITLE):
            raise ValueError(f"Unknown sort order: {order}")
        self.order = order

    def generate(self, entry: Entry) -> SortKey:
        """Generate sort key for an entry."""
        author = self._author_key(entry)
        year = self._year_key(entry)
        title = TitleProcessor.purify(entry.title).lower()

        if self.order == YEAR_AUTHOR_TITLE:
            return (year, author, title)
        return (author, year, title)

    def __call__(self, entry: Entry) -> SortKey:
        return self.generate(entry)

    @staticmethod
    def _author_key(entry: Entry) -> str:
        """Author last names then first names, purified.

        The leading marker puts entries with authors first.
        """
        names = entry.authors or entry.editors
        if not names:
            return "1"

        parts = ["0"]
        for name in names:
            parsed = NameParser.parse(name)
            for part in parsed.von + parsed.last + parsed.first:
                purified = TitleProcessor.purify(part)
                if purified:
                    parts.append(purified)

        return " ".join(parts).lower()

    @staticmethod
    def _year_key(entry: Entry) -> str:
        if entry.year:
            return str(entry.year).zfill(4)
        return "9999"


def entry_sort_key(order: str = AUTHOR_YEAR_TITLE) -> Callable[[Entry], SortKey]:
    """Get a key function for sorting entries in the given order."""
    return SortKeyGenerator(order)
