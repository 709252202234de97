"""Resolve citation keys against an ordered list of databases."""

import logging
from collections.abc import Sequence

from citemarks.citations.citation import LookupResult
from citemarks.core.models import Database

logger = logging.getLogger(__name__)


def lookup(databases: Sequence[Database], key: str) -> LookupResult | None:
    """Find the entry for a citation key.

    Databases are scanned in the given order and the first match wins.
    A miss is not an error: the citation stays unresolved.

    Args:
        databases: Databases in priority order.
        key: Citation key to resolve.

    Returns:
        The entry and its database, or None if no database has the key.
    """
    for database in databases:
        entry = database.get_entry_by_key(key)
        if entry is not None:
            return LookupResult(entry, database)

    logger.debug("Citation key %r not found in %d databases", key, len(databases))
    return None
