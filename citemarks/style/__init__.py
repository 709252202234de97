"""Citation marker and bibliography formatting."""

from citemarks.style.author_year import (
    AuthorYearMarkerEntry,
    format_author_year_marker,
    normalized_marker,
)
from citemarks.style.bibliography import format_bibliography
from citemarks.style.numeric import (
    NumericMarkerEntry,
    compress_numbers,
    format_numeric_marker,
)
from citemarks.style.options import MarkerKind, StyleOptions, StyleRegistry
from citemarks.style.process import (
    CitationMarkers,
    CitationProcessor,
    ProcessState,
    produce_citation_markers,
)
from citemarks.style.reference import ReferenceFormatter

__all__ = [
    "AuthorYearMarkerEntry",
    "CitationMarkers",
    "CitationProcessor",
    "MarkerKind",
    "NumericMarkerEntry",
    "ProcessState",
    "ReferenceFormatter",
    "StyleOptions",
    "StyleRegistry",
    "compress_numbers",
    "format_author_year_marker",
    "format_bibliography",
    "format_numeric_marker",
    "normalized_marker",
    "produce_citation_markers",
]
