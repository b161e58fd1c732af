"""Per-family citation rules.

Each family knows how to pull bibliography entries out of citation text, how
to recognise its in-text markers and which runs deserve emphasis. The
highlighter only talks to the ``CitationRules`` interface.
"""
import re
from typing import Dict, List, Pattern, Sequence, Type, Union

from ..core.models import BibliographyEntry
from ..core.styles import CitationStyle, StyleFamily, StyleRule, get_style_rule
from .markup import Annotation, Emphasis, Inline, Text

SUPERSCRIPT_DIGITS = "⁰¹²³⁴⁵⁶⁷⁸⁹"
_FROM_SUPERSCRIPT = str.maketrans(SUPERSCRIPT_DIGITS, "0123456789")

# Any family's marker; used to count citations in a sentence.
GENERIC_MARKER = re.compile(
    r"\[\d{1,3}(?:\s*[,\-–]\s*\d{1,3})*\]"
    r"|\^\d{1,3}"
    rf"|[{SUPERSCRIPT_DIGITS}]+"
    r"|\([A-Z][^()]{0,80}?\d+[a-z]?\)"
)

_WORD = r"[A-Z][\w'&\-]*"
_CASE_NAME = re.compile(
    rf"\b{_WORD}(?:\s{_WORD})*\sv\.?\s{_WORD}(?:\s(?:(?:of|and|the|for)\s)*{_WORD})*"
)
_ACT_NAME = re.compile(rf"\b(?:{_WORD}\s)+Act(?:\s\[?\d{{4}}\]?)?")
_QUOTED_TITLE = re.compile(r"\"[^\"\n]{2,200}\"|“[^”\n]{2,200}”")
_LEADING_SURNAME = re.compile(r"^([A-Z][\w'\-]+)(?=,)")

# Expanding "[1-500]" into hundreds of keys is never meant.
_MAX_RANGE = 100


def count_markers(text: str) -> int:
    """Count citation markers of any family in plain text."""
    return len(GENERIC_MARKER.findall(text))


class CitationRules:
    """Base rules shared by every family.

    Subclasses set ``marker_pattern`` and implement ``extract`` and
    ``marker_keys``.
    """

    family: StyleFamily
    marker_pattern: Pattern

    def __init__(self, rule: StyleRule):
        self.rule = rule
        emphasis = []
        if rule.legal:
            emphasis.extend([_CASE_NAME, _ACT_NAME])
        if rule.italicize_quoted_titles:
            emphasis.append(_QUOTED_TITLE)
        self._emphasis_patterns: List[Pattern] = emphasis

    def extract(self, text: str) -> List[BibliographyEntry]:
        raise NotImplementedError

    def marker_keys(self, match: "re.Match") -> List[str]:
        raise NotImplementedError

    def lookup(self, keys: Sequence[str], entries: Sequence[BibliographyEntry]) -> List[BibliographyEntry]:
        """Entries whose key matches any of the marker keys."""
        wanted = set(keys)
        return [entry for entry in entries if entry.key in wanted]

    def sort_entries(self, entries: Sequence[BibliographyEntry]) -> List[BibliographyEntry]:
        return list(entries)

    def entry_text(self, entry: BibliographyEntry) -> str:
        """Text of an entry as it appears in a synthesized section."""
        return entry.text

    def wrap_markers(self, text: str, entries: Sequence[BibliographyEntry]) -> List[Inline]:
        """Turn a body line into nodes with every in-text marker annotated.

        A marker's hover title lists the matching entries; a marker with no
        matching entry gets no title.
        """
        nodes: List[Inline] = []
        pos = 0
        for match in self.marker_pattern.finditer(text):
            nodes.extend(self.emphasize(text[pos:match.start()]))
            matched = self.lookup(self.marker_keys(match), entries)
            title = "; ".join(entry.text for entry in matched) or None
            nodes.append(Annotation([Text(match.group())], title=title))
            pos = match.end()
        nodes.extend(self.emphasize(text[pos:]))
        return nodes

    def emphasize(self, text: str) -> List[Inline]:
        """Italicise case names, statutes and quoted titles where the style asks for it."""
        if not text:
            return []
        spans = []
        for pattern in self._emphasis_patterns:
            spans.extend((m.start(), m.end()) for m in pattern.finditer(text))
        spans.sort()

        nodes: List[Inline] = []
        pos = 0
        for start, end in spans:
            if start < pos:
                continue
            if start > pos:
                nodes.append(Text(text[pos:start]))
            nodes.append(Emphasis([Text(text[start:end])]))
            pos = end
        if pos < len(text):
            nodes.append(Text(text[pos:]))
        return nodes

    def entry_nodes(self, text: str) -> List[Inline]:
        """Nodes for one bibliography entry line."""
        if self.rule.bold_author_surnames:
            match = _LEADING_SURNAME.match(text)
            if match:
                surname = Emphasis([Text(match.group(1))], tag="strong")
                return [surname] + self.emphasize(text[match.end():])
        return self.emphasize(text)


class NumberedRules(CitationRules):
    """Entries introduced by "N." or "[N]" at the start of a line."""

    entry_pattern = re.compile(r"^[ \t]*(?:\[(\d{1,3})\]|(\d{1,3})\.)[ \t]+", re.MULTILINE)
    marker_pattern = re.compile(rf"\[(\d{{1,3}})\]|\^(\d{{1,3}})|([{SUPERSCRIPT_DIGITS}]+)")
    label_format = "{}."

    def extract(self, text: str) -> List[BibliographyEntry]:
        matches = list(self.entry_pattern.finditer(text))
        entries = []
        for i, match in enumerate(matches):
            end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
            body = " ".join(text[match.end():end].split())
            if not body:
                continue
            key = str(int(next(group for group in match.groups() if group)))
            entries.append(BibliographyEntry(key=key, text=body, start=match.start(), end=end))
        return entries

    def marker_keys(self, match: "re.Match") -> List[str]:
        value = next(group for group in match.groups() if group)
        return [str(int(value.translate(_FROM_SUPERSCRIPT)))]

    def sort_entries(self, entries: Sequence[BibliographyEntry]) -> List[BibliographyEntry]:
        return sorted(entries, key=lambda entry: int(entry.key))

    def entry_text(self, entry: BibliographyEntry) -> str:
        return f"{self.label_format.format(entry.key)} {entry.text}"


class FootnoteRules(NumberedRules):
    family = StyleFamily.FOOTNOTE


class NumericRules(NumberedRules):
    family = StyleFamily.NUMERIC


class BracketedRules(NumberedRules):
    family = StyleFamily.BRACKETED
    entry_pattern = re.compile(r"^[ \t]*\[(\d{1,3})\][ \t]*", re.MULTILINE)
    marker_pattern = re.compile(r"\[(\d{1,3}(?:\s*[,\-–]\s*\d{1,3})*)\]")
    label_format = "[{}]"

    def marker_keys(self, match: "re.Match") -> List[str]:
        keys = []
        for part in re.split(r"\s*,\s*", match.group(1)):
            bounds = re.split(r"\s*[\-–]\s*", part)
            if len(bounds) == 2:
                low, high = int(bounds[0]), int(bounds[1])
                if low <= high and high - low <= _MAX_RANGE:
                    keys.extend(str(n) for n in range(low, high + 1))
                    continue
            keys.extend(str(int(bound)) for bound in bounds)
        return keys


class AuthorDateRules(CitationRules):
    """``(Author, Year)`` markers against ``Surname, I. ... (Year)`` entries."""

    family = StyleFamily.AUTHOR_DATE
    entry_pattern = re.compile(
        r"^[ \t]*(([A-Z][\w'\-]+),[ \t]+(?:[A-Z]\.[ \t]?)+[^\n]*?\((\d{4}[a-z]?)\)[^\n]*)",
        re.MULTILINE,
    )
    marker_pattern = re.compile(
        r"\([A-Z][^()]{0,80}?,?\s\d{4}[a-z]?(?:;\s*[A-Z][^()]{0,80}?,?\s\d{4}[a-z]?)*\)"
    )
    _part_pattern = re.compile(r"([A-Z][\w'\-]+)[^;]*?(\d{4}[a-z]?)")

    def extract(self, text: str) -> List[BibliographyEntry]:
        entries = []
        for match in self.entry_pattern.finditer(text):
            key = f"{match.group(2).lower()}-{match.group(3)}"
            entries.append(
                BibliographyEntry(
                    key=key,
                    text=match.group(1).strip(),
                    start=match.start(1),
                    end=match.end(1),
                )
            )
        return entries

    def marker_keys(self, match: "re.Match") -> List[str]:
        inner = match.group()[1:-1]
        keys = []
        for part in inner.split(";"):
            found = self._part_pattern.search(part)
            if found:
                keys.append(f"{found.group(1).lower()}-{found.group(2)}")
        return keys


class AuthorPageRules(AuthorDateRules):
    """``(Author Page)`` markers against ``Surname, First. ... Year`` entries."""

    family = StyleFamily.AUTHOR_PAGE
    entry_pattern = re.compile(
        r"^[ \t]*(([A-Z][\w'\-]+),[ \t]+[A-Z][\w'\-]*[.,][^\n]*?\b(\d{4})\b[^\n]*)",
        re.MULTILINE,
    )
    marker_pattern = re.compile(r"\(([A-Z][\w'\-]+)[^()\d]*?\s(\d+(?:[\-–]\d+)?)\)")

    def marker_keys(self, match: "re.Match") -> List[str]:
        return [f"{match.group(1).lower()}-"]

    def lookup(self, keys: Sequence[str], entries: Sequence[BibliographyEntry]) -> List[BibliographyEntry]:
        return [entry for entry in entries if any(entry.key.startswith(key) for key in keys)]


_RULES_BY_FAMILY: Dict[StyleFamily, Type[CitationRules]] = {
    StyleFamily.FOOTNOTE: FootnoteRules,
    StyleFamily.NUMERIC: NumericRules,
    StyleFamily.BRACKETED: BracketedRules,
    StyleFamily.AUTHOR_DATE: AuthorDateRules,
    StyleFamily.AUTHOR_PAGE: AuthorPageRules,
}


def get_rules(style: Union[str, CitationStyle, StyleRule]) -> CitationRules:
    """Build the rules object for a style.

    Raises:
        UnknownStyleError: If the style is not supported
    """
    rule = style if isinstance(style, StyleRule) else get_style_rule(style)
    return _RULES_BY_FAMILY[rule.family](rule)

