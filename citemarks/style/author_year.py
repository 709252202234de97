"""Author-year citation markers.

Markers are either parenthesized, ``[Smith et al., 2000a,b; Jones,
2001]``, or in-text, ``Smith et al. [2000a,b]; Jones [2001]``. Sources
whose markers differ only in their unique letter are joined into one
block.
"""

import logging
from collections.abc import Iterable

import msgspec

from citemarks.core.models import Entry
from citemarks.core.names import NameParser
from citemarks.exceptions import NonUniqueMarkerError
from citemarks.style.options import StyleOptions
from citemarks.text import FormattedText, normalize_page_info

logger = logging.getLogger(__name__)

ALL_AUTHORS = -1


class AuthorYearMarkerEntry(msgspec.Struct, frozen=True, kw_only=True):
    """One citation as seen by the author-year marker formatter."""

    citation_key: str
    entry: Entry | None = None
    unique_letter: str | None = None
    page_info: FormattedText | None = None
    is_first_appearance: bool = False


def unresolved_text(citation_key: str) -> str:
    return f"Unresolved({citation_key})"


def author_names(entry: Entry) -> tuple[list[str], bool]:
    """Names shown for the authors (or editors) of an entry.

    Returns:
        The "von Last" names and whether the list was cut short with
        BibTeX's "and others".
    """
    names = [
        NameParser.parse(name).von_last() for name in entry.authors or entry.editors
    ]
    truncated = bool(names) and names[-1].lower() == "others"
    if truncated:
        names = names[:-1]
    return names, truncated


def format_authors(entry: Entry, max_authors: int, options: StyleOptions) -> str:
    """Author part of a marker.

    More than ``max_authors`` authors are shown as the first author and
    ``et_al_string``; ``ALL_AUTHORS`` shows every author.
    """
    names, truncated = author_names(entry)
    if not names:
        return ""

    if truncated or (max_authors != ALL_AUTHORS and len(names) > max_authors):
        return names[0] + options.et_al_string

    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return names[0] + options.author_last_separator + names[1]
    return (
        options.author_separator.join(names[:-1])
        + options.oxford_comma
        + options.author_last_separator
        + names[-1]
    )


def format_year(entry: Entry) -> str:
    return str(entry.year) if entry.year else ""


def normalized_marker(entry: Entry, options: StyleOptions) -> str:
    """Marker text used to detect clashes, e.g. "Smith, 2000".

    Always uses ``max_authors`` and carries no letter or page info.
    """
    return (
        format_authors(entry, options.max_authors, options)
        + options.year_separator
        + format_year(entry)
    )


def _author_limit(item: AuthorYearMarkerEntry, options: StyleOptions) -> int:
    """Number of authors the marker of an item may show."""
    if item.is_first_appearance:
        limit = options.max_authors_first
    else:
        limit = options.max_authors
    if limit == ALL_AUTHORS and item.entry is not None:
        return max(len(author_names(item.entry)[0]), 1)
    return limit


def _marker_text(item: AuthorYearMarkerEntry, limit: int, options: StyleOptions) -> str:
    """Authors and year of a resolved item, without letter or page info."""
    return (
        format_authors(item.entry, limit, options)
        + options.year_separator
        + format_year(item.entry)
    )


class _Block:
    """Consecutive items sharing authors and year, shown once."""

    def __init__(self, head: AuthorYearMarkerEntry, limit: int):
        self.items = [head]
        self.limit = limit

    @property
    def head(self) -> AuthorYearMarkerEntry:
        return self.items[0]

    def accepts(
        self, item: AuthorYearMarkerEntry, limit: int, options: StyleOptions
    ) -> bool:
        head = self.head
        if head.entry is None or item.entry is None:
            return False
        if head.unique_letter is None or item.unique_letter is None:
            return False
        if head.page_info is not None or item.page_info is not None:
            return False
        if limit > self.limit:
            return False
        return _marker_text(item, self.limit, options) == _marker_text(
            head, self.limit, options
        )

    def render(self, in_parentheses: bool, options: StyleOptions) -> str:
        head = self.head
        if head.entry is None:
            text = unresolved_text(head.citation_key)
            if head.page_info is not None:
                text += options.page_info_separator + head.page_info.text
            return text

        year = format_year(head.entry) + (head.unique_letter or "")
        letters = [item.unique_letter or "" for item in self.items[1:]]
        year = options.unique_letter_separator.join([year] + letters)
        if head.page_info is not None:
            year += options.page_info_separator + head.page_info.text

        authors = format_authors(head.entry, self.limit, options)
        if in_parentheses:
            return authors + options.year_separator + year
        return (
            authors
            + options.in_text_year_separator
            + options.bracket_before
            + year
            + options.bracket_after
        )


def format_author_year_marker(
    items: Iterable[AuthorYearMarkerEntry],
    in_parentheses: bool,
    options: StyleOptions,
    strict: bool | None = None,
) -> FormattedText:
    """Author-year marker for the citations of one group.

    Items are taken in the given (local) order. Repeated citations of
    a source with the same page info are shown once; empty page info
    counts as missing.

    Args:
        items: Citations of the group in presentation order.
        in_parentheses: Bracket the whole marker rather than the years.
        options: Style providing separators and author limits.
        strict: Raise when two different sources would read the same
            without unique letters. Defaults to the style setting.

    Raises:
        NonUniqueMarkerError: In strict mode, for indistinguishable
            adjacent sources.
    """
    if strict is None:
        strict = options.strict_author_year

    unique_items: list[AuthorYearMarkerEntry] = []
    seen: set[tuple[str, str | None]] = set()
    for item in items:
        page_info = normalize_page_info(item.page_info)
        if page_info != item.page_info:
            item = AuthorYearMarkerEntry(
                citation_key=item.citation_key,
                entry=item.entry,
                unique_letter=item.unique_letter,
                page_info=page_info,
                is_first_appearance=item.is_first_appearance,
            )
        identity = (item.citation_key, None if page_info is None else page_info.text)
        if identity not in seen:
            seen.add(identity)
            unique_items.append(item)

    blocks: list[_Block] = []
    previous: AuthorYearMarkerEntry | None = None
    for item in unique_items:
        limit = _author_limit(item, options)
        if blocks and blocks[-1].accepts(item, limit, options):
            blocks[-1].items.append(item)
        else:
            if strict and previous is not None:
                _check_distinguishable(previous, item, options)
            blocks.append(_Block(item, limit))
        previous = item

    pieces = [block.render(in_parentheses, options) for block in blocks]
    if in_parentheses:
        text = (
            options.bracket_before
            + options.citation_separator.join(pieces)
            + options.bracket_after
        )
    else:
        text = options.citation_separator.join(pieces)
    return FormattedText(text)


def _check_distinguishable(
    previous: AuthorYearMarkerEntry,
    item: AuthorYearMarkerEntry,
    options: StyleOptions,
) -> None:
    if previous.citation_key == item.citation_key:
        return
    if previous.entry is None or item.entry is None:
        return
    if previous.unique_letter is not None or item.unique_letter is not None:
        return
    previous_text = _marker_text(previous, _author_limit(previous, options), options)
    item_text = _marker_text(item, _author_limit(item, options), options)
    if previous_text == item_text:
        raise NonUniqueMarkerError(previous_text)
