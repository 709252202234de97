"""Marked-up text exchanged with the host document.

Marker and bibliography text is a small markup language the host
knows how to write into a document: ``<p>`` paragraphs with an
optional paragraph style, ``<span>`` elements carrying a character
style or a locale, ``<b>``/``<i>`` emphasis, and page-number
references to reference marks. Plain text passes through unchanged.
"""

from collections.abc import Iterable

import msgspec

LOCALE_NONE = "zxx"


class FormattedText(msgspec.Struct, frozen=True):
    """Immutable piece of marked-up text."""

    text: str = ""

    @classmethod
    def of(cls, value: "FormattedText | str | None") -> "FormattedText | None":
        """Wrap a string, passing FormattedText and None through."""
        if value is None or isinstance(value, FormattedText):
            return value
        return cls(value)

    @classmethod
    def join(
        cls, parts: Iterable["FormattedText | str"], separator: str = ""
    ) -> "FormattedText":
        """Concatenate parts with a separator."""
        return cls(separator.join(str(part) for part in parts))

    def is_empty(self) -> bool:
        """Check whether the text is empty."""
        return not self.text

    def __add__(self, other: "FormattedText | str") -> "FormattedText":
        return FormattedText(self.text + str(other))

    def __str__(self) -> str:
        return self.text


def normalize_page_info(value: FormattedText | str | None) -> FormattedText | None:
    """Trim page info; empty page info becomes None."""
    if value is None:
        return None
    stripped = str(value).strip()
    if not stripped:
        return None
    return FormattedText(stripped)


def set_locale(text: FormattedText | str, locale: str) -> FormattedText:
    """Mark text as written in a locale, e.g. "en-US"."""
    return FormattedText(f'<span lang="{locale}">{text}</span>')


def set_locale_none(text: FormattedText | str) -> FormattedText:
    """Mark text as having no linguistic content.

    Hosts use this to turn off spellchecking inside citation markers.
    """
    return set_locale(text, LOCALE_NONE)


def set_char_style(text: FormattedText | str, char_style: str) -> FormattedText:
    """Apply a named character style."""
    return FormattedText(f'<span oo:CharStyleName="{char_style}">{text}</span>')


def paragraph(
    text: FormattedText | str, para_style: str | None = None
) -> FormattedText:
    """Wrap text in a paragraph, with a paragraph style if given."""
    if para_style:
        return FormattedText(f'<p oo:ParaStyleName="{para_style}">{text}</p>')
    return FormattedText(f"<p>{text}</p>")


def bold(text: FormattedText | str) -> FormattedText:
    return FormattedText(f"<b>{text}</b>")


def italic(text: FormattedText | str) -> FormattedText:
    return FormattedText(f"<i>{text}</i>")


def reference_to_page_number(reference_mark_name: str) -> FormattedText:
    """Cross-reference showing the page number of a reference mark."""
    return FormattedText(
        f'<oo:referenceToPageNumberOfReferenceMark target="{reference_mark_name}">'
    )
