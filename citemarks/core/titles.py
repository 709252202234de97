"""LaTeX-aware text cleanup for sort keys and rendered references."""

import re
import unicodedata


class TitleProcessor:
    """Process BibTeX field text for sorting and display."""

    # Special LaTeX commands that convert to specific letters
    SPECIAL_LATEX_COMMANDS = {
        r"\i": "i",
        r"\j": "j",
        r"\oe": "oe",
        r"\OE": "OE",
        r"\ae": "ae",
        r"\AE": "AE",
        r"\aa": "aa",
        r"\AA": "AA",
        r"\o": "o",
        r"\O": "O",
        r"\l": "l",
        r"\L": "L",
        r"\ss": "ss",
    }

    # Accent commands mapped to Unicode combining characters
    ACCENTS = {
        '"': "\u0308",
        "'": "\u0301",
        "`": "\u0300",
        "^": "\u0302",
        "~": "\u0303",
        "=": "\u0304",
        ".": "\u0307",
        "u": "\u0306",
        "v": "\u030c",
        "H": "\u030b",
        "c": "\u0327",
        "k": "\u0328",
        "r": "\u030a",
    }

    _ACCENT_RE = re.compile(
        r"\{?\\([\"'`^~=.]|[uvHckr](?=[\s{]))\s*\{?([A-Za-z]|\\[ij])\}?\}?"
    )

    @staticmethod
    def to_plain(text: str | None) -> str:
        """Convert LaTeX markup to plain Unicode text for display.

        Accent commands become composed characters, special letters
        are substituted, remaining commands keep their argument, and
        grouping braces are dropped.
        """
        if not text:
            return ""

        def accent(match: re.Match) -> str:
            base = match.group(2)
            if base.startswith("\\"):
                base = base[1:]
            combining = TitleProcessor.ACCENTS[match.group(1)]
            return unicodedata.normalize("NFC", base + combining)

        result = TitleProcessor._ACCENT_RE.sub(accent, text)

        for cmd, replacement in TitleProcessor.SPECIAL_LATEX_COMMANDS.items():
            result = re.sub(
                r"\{?" + re.escape(cmd) + r"(?![a-zA-Z])\s?\}?", replacement, result
            )

        result = result.replace(r"\&", "&")
        # Commands with a braced argument keep the argument text
        result = re.sub(r"\\[a-zA-Z]+\*?\{([^{}]*)\}", r"\1", result)
        result = re.sub(r"\\[a-zA-Z]+\*?\s?", "", result)
        result = result.replace("{", "").replace("}", "")
        result = result.replace("~", " ").replace("--", "-")
        return re.sub(r"\s+", " ", result).strip()

    @staticmethod
    def purify(text: str | None) -> str:
        """
        Remove non-alphanumeric characters for sorting.

        Rules:
        - LaTeX accents and special letters reduced to their base letters
        - Other LaTeX commands removed
        - Hyphens and tildes become spaces
        - Non-ASCII and non-alphanumeric characters removed
        """
        if not text:
            return ""

        result = TitleProcessor.to_plain(text)
        result = result.replace("-", " ").replace("—", " ").replace("–", " ")

        # NFD separates base characters from combining marks
        result = unicodedata.normalize("NFD", result)
        result = "".join(c for c in result if not unicodedata.combining(c))
        result = "".join(c for c in result if ord(c) < 128)
        result = re.sub(r"[^a-zA-Z0-9\s]", "", result)

        return result.strip()
