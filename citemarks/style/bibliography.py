"""Bibliography text: one paragraph per cited key."""

import logging

from citemarks.citations.cited_keys import CitedKey, CitedKeys
from citemarks.citations.store import CitationGroupStore
from citemarks.exceptions import OrderingError
from citemarks.style.author_year import unresolved_text
from citemarks.style.numeric import numeric_bibliography_label
from citemarks.style.options import MarkerKind, StyleOptions
from citemarks.style.reference import ReferenceFormatter
from citemarks.text import FormattedText, paragraph, reference_to_page_number

logger = logging.getLogger(__name__)

CITED_ON_PAGES = "Cited on pages"


def format_entry_body(
    cited_key: CitedKey, formatter: ReferenceFormatter | None = None
) -> FormattedText:
    """Reference text of a key, or "Unresolved(key)" without an entry."""
    if cited_key.lookup_result is None:
        return FormattedText(unresolved_text(cited_key.citation_key))
    formatter = formatter or ReferenceFormatter()
    return formatter.format(cited_key.lookup_result.entry, cited_key.unique_letter)


def format_cited_on_pages(
    store: CitationGroupStore, cited_key: CitedKey
) -> FormattedText:
    """Page references to every group citing a key, in document order.

    Empty unless every group has a reference mark name.

    Raises:
        OrderingError: If a citing group has no position in the global
            order.
    """
    if not store.provides_reference_mark_names():
        return FormattedText()

    groups = []
    for group_id in dict.fromkeys(path.group_id for path in cited_key.where):
        group = store.get_group(group_id)
        if group.index_in_global_order is None:
            raise OrderingError(f"group {group_id} has no position in the global order")
        groups.append(group)
    groups.sort(key=lambda group: group.index_in_global_order)

    links = ", ".join(
        str(reference_to_page_number(group.reference_mark_name)) for group in groups
    )
    return FormattedText(f" ({CITED_ON_PAGES}: {links})")


def format_bibliography_entry(
    store: CitationGroupStore,
    cited_key: CitedKey,
    options: StyleOptions,
    formatter: ReferenceFormatter | None = None,
) -> FormattedText:
    """Paragraph for one key: label, reference and "Cited on pages".

    Numeric styles prefix the number (or the undefined marker and key
    for unresolved keys). Unresolved keys always link to their
    citations when links are available; resolved keys only with
    ``always_add_cited_on_pages``.
    """
    text = FormattedText()

    if options.kind is MarkerKind.NUMERIC:
        text += numeric_bibliography_label(
            cited_key.number, cited_key.citation_key, options
        )

    text += format_entry_body(cited_key, formatter)

    if not cited_key.is_resolved or options.always_add_cited_on_pages:
        text += format_cited_on_pages(store, cited_key)

    return paragraph(text, options.reference_paragraph_format)


def format_bibliography(
    store: CitationGroupStore,
    bibliography: CitedKeys,
    options: StyleOptions,
    formatter: ReferenceFormatter | None = None,
) -> FormattedText:
    """Full bibliography text, with the title paragraph if configured."""
    formatter = formatter or ReferenceFormatter()
    parts = []

    if options.bibliography_title:
        parts.append(
            paragraph(
                options.bibliography_title, options.reference_header_paragraph_format
            )
        )

    for cited_key in bibliography:
        parts.append(format_bibliography_entry(store, cited_key, options, formatter))

    logger.debug("Formatted bibliography with %d entries", len(bibliography))
    return FormattedText.join(parts)
