"""Citation markers and bibliographies for documents with persistent citations."""

from citemarks.citations import (
    Citation,
    CitationGroup,
    CitationGroupStore,
    CitationPath,
    CitationType,
    CitedKey,
    CitedKeys,
    DataModel,
    LookupResult,
    lookup,
)
from citemarks.core import Database, Entry, EntryType
from citemarks.exceptions import (
    CitationEngineError,
    DataModelConflictError,
    NoDocumentError,
    NonUniqueMarkerError,
    OrderingError,
    RangeOverlapError,
    StaleBibliographyError,
    UnknownGroupError,
)
from citemarks.frontend import CitationFrontend, DocumentHost
from citemarks.style import (
    CitationMarkers,
    MarkerKind,
    StyleOptions,
    StyleRegistry,
    produce_citation_markers,
)
from citemarks.text import FormattedText

__version__ = "0.1.0"

__all__ = [
    "Citation",
    "CitationEngineError",
    "CitationFrontend",
    "CitationGroup",
    "CitationGroupStore",
    "CitationMarkers",
    "CitationPath",
    "CitationType",
    "CitedKey",
    "CitedKeys",
    "DataModel",
    "DataModelConflictError",
    "Database",
    "DocumentHost",
    "Entry",
    "EntryType",
    "FormattedText",
    "LookupResult",
    "MarkerKind",
    "NoDocumentError",
    "NonUniqueMarkerError",
    "OrderingError",
    "RangeOverlapError",
    "StaleBibliographyError",
    "StyleOptions",
    "StyleRegistry",
    "UnknownGroupError",
    "lookup",
    "produce_citation_markers",
]
