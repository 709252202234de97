"""Entry types and the fields the reference formatter reads for each."""

from enum import Enum, unique


@unique
class EntryType(Enum):
    """BibTeX entry types."""

    ARTICLE = "article"
    BOOK = "book"
    BOOKLET = "booklet"
    INBOOK = "inbook"
    INCOLLECTION = "incollection"
    INPROCEEDINGS = "inproceedings"
    CONFERENCE = "conference"  # Alias for inproceedings
    MANUAL = "manual"
    MASTERSTHESIS = "mastersthesis"
    MISC = "misc"
    PHDTHESIS = "phdthesis"
    PROCEEDINGS = "proceedings"
    TECHREPORT = "techreport"
    UNPUBLISHED = "unpublished"

    # Modern types
    ONLINE = "online"
    SOFTWARE = "software"
    DATASET = "dataset"
    THESIS = "thesis"


# Field naming the work an entry is published in, checked in order
CONTAINER_FIELDS: dict[EntryType, tuple[str, ...]] = {
    EntryType.ARTICLE: ("journal",),
    EntryType.INBOOK: ("booktitle", "publisher"),
    EntryType.INCOLLECTION: ("booktitle",),
    EntryType.INPROCEEDINGS: ("booktitle",),
    EntryType.CONFERENCE: ("booktitle",),
    EntryType.BOOK: ("publisher",),
    EntryType.BOOKLET: ("howpublished",),
    EntryType.MANUAL: ("organization",),
    EntryType.MASTERSTHESIS: ("school",),
    EntryType.PHDTHESIS: ("school",),
    EntryType.THESIS: ("school", "institution"),
    EntryType.PROCEEDINGS: ("publisher", "organization"),
    EntryType.TECHREPORT: ("institution",),
    EntryType.ONLINE: ("organization", "url"),
    EntryType.SOFTWARE: ("organization", "url"),
    EntryType.DATASET: ("publisher", "howpublished"),
}

# Types whose container is rendered after "In: "
IN_CONTAINER_TYPES = frozenset(
    {
        EntryType.INBOOK,
        EntryType.INCOLLECTION,
        EntryType.INPROCEEDINGS,
        EntryType.CONFERENCE,
    }
)


def container_fields(entry_type: EntryType) -> tuple[str, ...]:
    """Get the container field names for an entry type."""
    return CONTAINER_FIELDS.get(entry_type, ("howpublished", "publisher"))
