"""Exception classes for the citation engine."""


class CitationEngineError(Exception):
    """Base exception for citation engine errors."""

    pass


class OrderingError(CitationEngineError):
    """Raised when an ordering is missing or does not match the store."""

    def __init__(self, message: str):
        """Initialize with a description of the ordering problem."""
        super().__init__(f"Ordering error: {message}")


class DataModelConflictError(CitationEngineError, ValueError):
    """Raised when group-owned and citation-owned page info are mixed."""

    def __init__(self, group_id: str, message: str = ""):
        """Initialize with the offending group ID."""
        self.group_id = group_id
        detail = f": {message}" if message else ""
        super().__init__(f"Page info data model conflict in group {group_id}{detail}")


class StaleBibliographyError(CitationEngineError):
    """Raised when a bibliography is built twice without invalidation."""

    def __init__(self):
        """Initialize with a fixed message."""
        super().__init__("Bibliography already exists; invalidate it before rebuilding")


class UnknownGroupError(CitationEngineError):
    """Raised when a citation group is not found in the store."""

    def __init__(self, group_id: str):
        """Initialize with group ID."""
        self.group_id = group_id
        super().__init__(f"Citation group not found: {group_id}")


class NoDocumentError(CitationEngineError):
    """Raised when the host document is not available."""

    def __init__(self, operation: str):
        """Initialize with the operation that needed the document."""
        self.operation = operation
        super().__init__(f"No document available for {operation}")


class NonUniqueMarkerError(CitationEngineError):
    """Raised when different sources would produce identical markers."""

    def __init__(self, marker: str):
        """Initialize with the ambiguous marker text."""
        self.marker = marker
        super().__init__(f"Different sources share the citation marker: {marker}")


class RangeOverlapError(CitationEngineError):
    """Raised when protected document ranges overlap."""

    def __init__(self, overlaps: list):
        """Initialize with the overlaps found."""
        self.overlaps = overlaps
        descriptions = "; ".join(overlap.describe() for overlap in overlaps)
        super().__init__(f"Overlapping ranges: {descriptions}")
