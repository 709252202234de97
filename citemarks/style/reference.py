"""Reference text of resolved bibliography entries."""

from __future__ import annotations

from citemarks.core.fields import IN_CONTAINER_TYPES, EntryType, container_fields
from citemarks.core.models import Entry
from citemarks.core.names import NameParser
from citemarks.core.titles import TitleProcessor
from citemarks.text import FormattedText, bold, italic

# Types whose own title is italicized
STANDALONE_TYPES = frozenset(
    {
        EntryType.BOOK,
        EntryType.BOOKLET,
        EntryType.MANUAL,
        EntryType.MASTERSTHESIS,
        EntryType.PHDTHESIS,
        EntryType.THESIS,
        EntryType.PROCEEDINGS,
        EntryType.TECHREPORT,
        EntryType.ONLINE,
        EntryType.SOFTWARE,
        EntryType.DATASET,
    }
)


def format_ordinal(number: int | str) -> str:
    """Format number as ordinal (1st, 2nd, 3rd, etc.)."""
    try:
        n = int(str(number))
    except (ValueError, TypeError):
        return str(number)

    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")

    return f"{n}{suffix}"


class ReferenceFormatter:
    """Formats the body of a bibliography entry.

    Output looks like::

        <b>Smith, J.</b> and <b>Doe, J.</b> (2000a). Title. <i>Journal</i>, 12(3), 4-9.
    """

    def __init__(
        self,
        name_separator: str = "; ",
        last_name_separator: str = " and ",
        no_date: str = "n.d.",
    ):
        """Initialize formatter."""
        self.name_separator = name_separator
        self.last_name_separator = last_name_separator
        self.no_date = no_date

    def format(self, entry: Entry, unique_letter: str | None = None) -> FormattedText:
        """Format a resolved entry, appending ``unique_letter`` to the year."""
        parts = []

        names = self.format_names(entry)
        year = f"({self.format_year(entry, unique_letter)})"
        parts.append(f"{names} {year}" if names else year)

        if entry.title:
            title = TitleProcessor.to_plain(entry.title)
            if entry.type in STANDALONE_TYPES:
                title = str(italic(title))
            parts.append(title)

        container = self._format_container(entry)
        if container:
            parts.append(container)

        link = self._format_link(entry)
        if link:
            parts.append(link)

        return FormattedText(self._join(parts))

    def format_names(self, entry: Entry) -> str:
        """Authors as "Last, F.", falling back to editors marked "(Ed.)"."""
        names = entry.authors
        editors = False
        if not names:
            names = entry.editors
            editors = bool(names)
        if not names:
            return ""

        formatted = [str(bold(NameParser.parse(name).last_first())) for name in names]
        if len(formatted) == 1:
            result = formatted[0]
        else:
            result = (
                self.name_separator.join(formatted[:-1])
                + self.last_name_separator
                + formatted[-1]
            )

        if editors:
            result += " (Eds.)" if len(formatted) > 1 else " (Ed.)"
        return result

    def format_year(self, entry: Entry, unique_letter: str | None = None) -> str:
        year = str(entry.year) if entry.year else self.no_date
        return year + (unique_letter or "")

    def _format_container(self, entry: Entry) -> str:
        container = ""
        for field in container_fields(entry.type):
            value = entry.get(field)
            if value:
                container = TitleProcessor.to_plain(str(value))
                break

        pages = TitleProcessor.to_plain(entry.pages) if entry.pages else ""

        match entry.type:
            case EntryType.ARTICLE:
                parts = [str(italic(container))] if container else []
                if entry.volume:
                    volume = entry.volume
                    if entry.number:
                        volume += f"({entry.number})"
                    parts.append(volume)
                if pages:
                    parts.append(pages)
                return ", ".join(parts)

            case _ if entry.type in IN_CONTAINER_TYPES:
                result = f"In: {italic(container)}" if container else ""
                if pages:
                    result += f", pp. {pages}" if result else f"pp. {pages}"
                if entry.publisher and entry.publisher != container:
                    result += f", {TitleProcessor.to_plain(entry.publisher)}"
                return result

            case EntryType.BOOK:
                parts = []
                if entry.edition:
                    parts.append(f"{format_ordinal(entry.edition)} ed.")
                if container:
                    location = ""
                    if entry.address:
                        location = f"{TitleProcessor.to_plain(entry.address)}: "
                    parts.append(f"{location}{container}")
                return " ".join(parts)

            case EntryType.PHDTHESIS | EntryType.MASTERSTHESIS | EntryType.THESIS:
                kind = {
                    EntryType.PHDTHESIS: "PhD thesis",
                    EntryType.MASTERSTHESIS: "Master's thesis",
                }.get(entry.type, "Thesis")
                return f"{kind}, {container}" if container else kind

            case EntryType.TECHREPORT:
                report = "Technical report"
                if entry.number:
                    report += f" {entry.number}"
                return f"{report}, {container}" if container else report

            case _:
                return container

    def _format_link(self, entry: Entry) -> str:
        if entry.doi:
            doi = entry.doi
            if not doi.startswith("http"):
                doi = f"https://doi.org/{doi}"
            return doi
        return entry.url or ""

    @staticmethod
    def _join(parts: list[str]) -> str:
        """Join parts with periods, avoiding doubled periods."""
        result = ""
        for i, part in enumerate(parts):
            if i > 0:
                if result.endswith((".", "?", "!")):
                    result += " "
                else:
                    result += ". "
            result += part

        if result and not result.endswith("."):
            result += "."

        return result
