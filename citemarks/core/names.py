"""Author name parsing according to BibTeX rules."""

from dataclasses import dataclass

from .titles import TitleProcessor


@dataclass
class ParsedName:
    """Parsed name components."""

    first: list[str]
    von: list[str]
    last: list[str]
    jr: list[str]

    def is_empty(self) -> bool:
        """Check if name is empty."""
        return not any([self.first, self.von, self.last, self.jr])

    def von_last(self) -> str:
        """Format as 'von Last' with LaTeX markup removed.

        This is the form shown in author-year citation markers, e.g.
        "von Beta" or "Open Source Development Team" for a braced
        organization name.
        """
        return TitleProcessor.to_plain(" ".join(self.von + self.last))

    def initials(self) -> str:
        """Abbreviate first names, e.g. "Jean-Paul Marie" -> "J.-P. M."."""
        abbrevs = []
        for name in self.first:
            plain = TitleProcessor.to_plain(name)
            if not plain:
                continue
            if "-" in plain:
                parts = plain.split("-")
                abbrevs.append("-".join(p[0].upper() + "." for p in parts if p))
            else:
                abbrevs.append(plain[0].upper() + ".")
        return " ".join(abbrevs)

    def last_first(self, initialize: bool = True) -> str:
        """Format as 'von Last, F.' (or full first names), adding Jr."""
        result = self.von_last()
        first = (
            self.initials()
            if initialize
            else TitleProcessor.to_plain(" ".join(self.first))
        )
        if first:
            result = f"{result}, {first}" if result else first
        if self.jr:
            result += ", " + TitleProcessor.to_plain(" ".join(self.jr))
        return result


class NameParser:
    """Parse author names according to BibTeX rules."""

    @staticmethod
    def parse(name: str) -> ParsedName:
        """
        Parse name according to BibTeX's three formats.

        Format determined by comma count at brace depth zero:
        - 0 commas: "First von Last"
        - 1 comma: "von Last, First"
        - 2 commas: "von Last, Jr, First"
        """
        name = name.strip()
        if not name:
            return ParsedName([], [], [], [])

        parts = NameParser._split_commas(name)

        if len(parts) == 1:
            return NameParser._parse_first_von_last(parts[0])

        von, last = NameParser._split_von_last(NameParser._tokenize(parts[0]))
        if len(parts) == 2:
            return ParsedName(NameParser._tokenize(parts[1]), von, last, [])

        # Anything after the second comma is treated as first name
        first = ",".join(parts[2:])
        return ParsedName(
            NameParser._tokenize(first), von, last, NameParser._tokenize(parts[1])
        )

    @staticmethod
    def _split_commas(name: str) -> list[str]:
        """Split on commas outside braces."""
        parts = []
        current = []
        depth = 0
        for char in name:
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
            elif char == "," and depth == 0:
                parts.append("".join(current).strip())
                current = []
                continue
            current.append(char)
        parts.append("".join(current).strip())
        return parts

    @staticmethod
    def _tokenize(name: str) -> list[str]:
        """Split name into tokens, preserving braced groups."""
        tokens = []
        current = []
        brace_level = 0

        for char in name:
            if char == "{":
                brace_level += 1
                current.append(char)
            elif char == "}":
                brace_level -= 1
                current.append(char)
            elif char in " \t\n~" and brace_level == 0:
                if current:
                    tokens.append("".join(current))
                    current = []
            else:
                current.append(char)

        if current:
            tokens.append("".join(current))

        return [token for token in tokens if token]

    @staticmethod
    def _starts_with_lowercase(word: str) -> bool:
        """
        Check if word starts with lowercase letter.

        BibTeX rules:
        - {X} at start means NOT lowercase (braced words are not von)
        - Special chars ignored
        - First real letter determines case
        """
        if word.startswith("{") and word.endswith("}"):
            return False

        for char in word:
            if char.isalpha():
                return char.islower()

        return False

    @staticmethod
    def _split_von_last(tokens: list[str]) -> tuple[list[str], list[str]]:
        """Split 'von Last' tokens; Last keeps at least one token."""
        von_end = -1
        for i in range(len(tokens) - 1):
            if NameParser._starts_with_lowercase(tokens[i]):
                von_end = i
        return tokens[: von_end + 1], tokens[von_end + 1 :]

    @staticmethod
    def _parse_first_von_last(name: str) -> ParsedName:
        """Parse 'First von Last' format."""
        tokens = NameParser._tokenize(name)

        if not tokens:
            return ParsedName([], [], [], [])

        if len(tokens) == 1:
            return ParsedName([], [], tokens, [])

        # von is the continuous run of lowercase-starting words that
        # does not include the last word
        von_start = None
        von_end = None

        for i in range(len(tokens) - 1):
            if NameParser._starts_with_lowercase(tokens[i]):
                if von_start is None:
                    von_start = i
                von_end = i
            elif von_start is not None:
                break

        if von_start is not None and von_end is not None:
            first = tokens[:von_start]
            von = tokens[von_start : von_end + 1]
            last = tokens[von_end + 1 :]
        else:
            first = tokens[:-1]
            von = []
            last = tokens[-1:]

        return ParsedName(first, von, last, [])
