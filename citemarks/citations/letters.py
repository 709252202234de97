"""Disambiguating letters for author-year markers.

Sources whose markers would read the same ("Smith, 2000") get letters
in order of first appearance: "Smith, 2000a", "Smith, 2000b".
"""

import logging
from string import ascii_lowercase

from citemarks.citations.cited_keys import CitedKeys, KeyOrdering
from citemarks.exceptions import OrderingError

logger = logging.getLogger(__name__)


def unique_letter(index: int) -> str:
    """Letter for the index-th source of a clash: a..z, aa, ab, ..."""
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = ascii_lowercase[remainder] + letters
    return letters


def assign_unique_letters(cited_keys: CitedKeys) -> dict[str, list[str]]:
    """Assign unique letters to cited keys with clashing markers.

    Every existing letter is cleared first, so the result depends only
    on the current keys and their order. Keys without a normalized
    marker (unresolved keys) never get a letter.

    Args:
        cited_keys: Keys in order of first appearance, each with its
            ``normalized_marker`` set.

    Returns:
        The clashing markers, each with its keys in letter order.

    Raises:
        OrderingError: If the keys are not in appearance order.
    """
    if cited_keys.ordering is not KeyOrdering.APPEARANCE:
        raise OrderingError(
            "unique letters require cited keys in order of first appearance"
        )

    by_marker: dict[str, list[str]] = {}
    for cited_key in cited_keys:
        cited_key.unique_letter = None
        if cited_key.normalized_marker is None:
            continue
        by_marker.setdefault(cited_key.normalized_marker, []).append(
            cited_key.citation_key
        )

    clashes = {marker: keys for marker, keys in by_marker.items() if len(keys) > 1}
    for marker, keys in clashes.items():
        for index, key in enumerate(keys):
            cited_keys[key].unique_letter = unique_letter(index)
        logger.debug("Marker %r shared by %s", marker, ", ".join(keys))

    return clashes
