"""Citation highlighter and formatter.

Turns raw citation text into markup for a rich-text surface: sub-headings,
paragraphs, annotated in-text markers, emphasis, highlighted "newly added"
citation sentences and a synthesized bibliography section.

Plain text is parsed into a ``Document`` tree and serialised once. Text that
already carries markup is only touched at the text-node level, through
BeautifulSoup, so its structure survives repeated formatting.
"""
import logging
import re
from html import escape
from typing import List, Optional, Sequence, Set, Tuple, Union

from bs4 import BeautifulSoup, NavigableString
from bs4.element import PreformattedString

from ..core.models import BibliographyEntry
from ..core.normalizer import normalize_line_breaks
from ..core.styles import CitationStyle, StyleFamily, get_style_rule
from .markup import (
    ANNOTATION_CLASS,
    ENTRY_CLASS,
    HIGHLIGHT_CLASS,
    HIGHLIGHT_STYLE,
    MARKUP_TAGS,
    Document,
    Heading,
    Inline,
    Paragraph,
    Text,
    highlight,
    plain_text,
)
from .rules import count_markers, get_rules

logger = logging.getLogger(__name__)

DEFAULT_HEADING_MAX_LENGTH = 60

DISCOURSE_MARKERS = (
    "according to",
    "suggests that",
    "see also",
    "as noted by",
    "as noted in",
    "as argued by",
    "as cited in",
    "as stated in",
    "argues that",
    "contends that",
    "demonstrates that",
    "found that",
    "notes that",
    "cf.",
)

BIBLIOGRAPHY_HEADINGS = (
    "references",
    "reference list",
    "bibliography",
    "works cited",
    "footnotes",
    "notes",
)

_DISCOURSE_PATTERN = re.compile(
    r"(?<![A-Za-z])(?:" + "|".join(re.escape(marker) for marker in DISCOURSE_MARKERS) + r")(?!\w)",
    re.IGNORECASE,
)
_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+(?=[A-Z\"“(\[])")

# Text under these is never highlighted again.
_GUARD_CLASSES = {ANNOTATION_CLASS, HIGHLIGHT_CLASS, ENTRY_CLASS}
_GUARD_TAGS = {"mark", "h1", "h2", "h3", "h4", "h5", "h6", "script", "style"}

_ANNOTATION_BRACKETS = {
    StyleFamily.FOOTNOTE: ("[", "]"),
    StyleFamily.BRACKETED: ("[", "]"),
}


def is_new_citation(sentence: str) -> bool:
    """Whether a sentence looks like a newly added citation.

    True when it holds a discourse marker or two or more citation markers.
    """
    return bool(_DISCOURSE_PATTERN.search(sentence)) or count_markers(sentence) >= 2


def has_markup(text: str) -> bool:
    """Whether the text contains at least one rich-text element.

    Angle-bracketed URLs and e-mail addresses do not count as markup.
    """
    return BeautifulSoup(text, "html.parser").find(MARKUP_TAGS) is not None


def is_bibliography_heading(line: str) -> bool:
    return line.strip().rstrip(":").strip().lower() in BIBLIOGRAPHY_HEADINGS


def _split_sentences(nodes: Sequence[Inline]) -> List[Tuple[List[Inline], str]]:
    """Split inline nodes into (sentence, trailing whitespace) pairs.

    Boundaries are only looked for inside plain text nodes.
    """
    sentences = []
    current: List[Inline] = []
    for node in nodes:
        if not isinstance(node, Text):
            current.append(node)
            continue
        pos = 0
        for match in _SENTENCE_BOUNDARY.finditer(node.text):
            if match.start() > pos:
                current.append(Text(node.text[pos:match.start()]))
            sentences.append((current, match.group()))
            current = []
            pos = match.end()
        if pos < len(node.text):
            current.append(Text(node.text[pos:]))
    if current:
        sentences.append((current, ""))
    return sentences


def _split_text(text: str) -> List[Tuple[str, str]]:
    pieces = []
    pos = 0
    for match in _SENTENCE_BOUNDARY.finditer(text):
        pieces.append((text[pos:match.start()], match.group()))
        pos = match.end()
    pieces.append((text[pos:], ""))
    return pieces


class CitationHighlighter:
    """Formats citation text for one citation style.

    Args:
        style: Citation style name or enum
        heading_max_length: Lines shorter than this, without a period, become
            sub-headings

    Raises:
        UnknownStyleError: If the style is not supported
    """

    def __init__(
        self,
        style: Union[str, CitationStyle],
        heading_max_length: int = DEFAULT_HEADING_MAX_LENGTH,
    ):
        self.rule = get_style_rule(style)
        self.rules = get_rules(self.rule)
        self.heading_max_length = heading_max_length

    def format(self, text: Optional[str]) -> str:
        """Format citation text as markup.

        Never raises on malformed input: failures are logged and the input is
        returned escaped (plain text) or untouched (markup).
        """
        if not text or not text.strip():
            return ""

        try:
            if has_markup(text):
                return self.highlight_markup(text)
        except Exception as e:
            logger.error(f"Failed to highlight markup for {self.rule.name}: {e}")
            return text

        try:
            return self.format_plain(text).render()
        except Exception as e:
            logger.error(f"Failed to format citation text for {self.rule.name}: {e}")
            return "".join(
                f"<p>{escape(line.strip(), quote=False)}</p>"
                for line in text.splitlines()
                if line.strip()
            )

    def format_plain(self, text: str) -> Document:
        """Build the document tree for plain citation text."""
        text = normalize_line_breaks(text)
        entries = self.rules.extract(text)
        has_heading = any(is_bibliography_heading(line) for line in text.split("\n"))
        if entries:
            logger.debug(f"Extracted {len(entries)} {self.rule.name} bibliography entries")

        document = Document()
        offset = 0
        for line in text.split("\n"):
            start, offset = offset, offset + len(line) + 1
            stripped = line.strip()
            if not stripped:
                continue

            if self._inside_entry(start, entries):
                if has_heading:
                    document.append(Paragraph(self.rules.entry_nodes(stripped), css_class=ENTRY_CLASS))
                continue

            if self.is_heading(stripped):
                document.append(Heading([Text(stripped)]))
            else:
                nodes = self.rules.wrap_markers(stripped, entries)
                document.append(Paragraph(self.highlight_sentences(nodes)))

        if entries and not has_heading:
            self._append_bibliography(document, entries)
        return document

    def is_heading(self, line: str) -> bool:
        return bool(line) and len(line) < self.heading_max_length and "." not in line

    def highlight_sentences(self, nodes: Sequence[Inline]) -> List[Inline]:
        """Wrap each newly-added-citation sentence in a highlight span."""
        result: List[Inline] = []
        for sentence, gap in _split_sentences(nodes):
            if is_new_citation(plain_text(sentence)):
                result.append(highlight(sentence))
            else:
                result.extend(sentence)
            if gap:
                result.append(Text(gap))
        return result

    def highlight_markup(self, html: str) -> str:
        """Highlight new-citation sentences in text nodes of existing markup."""
        soup = BeautifulSoup(html, "html.parser")
        wrapped = 0
        for node in list(soup.find_all(string=True)):
            if isinstance(node, PreformattedString) or _is_guarded(node):
                continue
            pieces = _split_text(str(node))
            if not any(is_new_citation(sentence) for sentence, _ in pieces):
                continue

            replacements = []
            for sentence, gap in pieces:
                if sentence and is_new_citation(sentence):
                    span = soup.new_tag("span", attrs={"class": HIGHLIGHT_CLASS, "style": HIGHLIGHT_STYLE})
                    span.string = sentence
                    replacements.append(span)
                    wrapped += 1
                elif sentence:
                    replacements.append(NavigableString(sentence))
                if gap:
                    replacements.append(NavigableString(gap))
            node.replace_with(*replacements)

        if wrapped:
            logger.debug(f"Highlighted {wrapped} sentences in existing markup")
        return str(soup)

    def _inside_entry(self, position: int, entries: Sequence[BibliographyEntry]) -> bool:
        return any(entry.start <= position < entry.end for entry in entries)

    def _append_bibliography(self, document: Document, entries: Sequence[BibliographyEntry]) -> None:
        document.append(Heading([Text(self.rule.bibliography_title)], level=2))
        for entry in self.rules.sort_entries(entries):
            text = self.rules.entry_text(entry)
            document.append(Paragraph(self.rules.entry_nodes(text), css_class=ENTRY_CLASS))


def _is_guarded(node) -> bool:
    for parent in node.parents:
        if parent.name in _GUARD_TAGS:
            return True
        if _GUARD_CLASSES.intersection(parent.get("class") or ()):
            return True
    return False


def format_citation(
    text: Optional[str],
    style: Union[str, CitationStyle],
    heading_max_length: int = DEFAULT_HEADING_MAX_LENGTH,
) -> str:
    """Format citation text for a style. See ``CitationHighlighter.format``."""
    return CitationHighlighter(style, heading_max_length).format(text)


def restyle_annotations(html: str, style: Union[str, CitationStyle]) -> str:
    """Rewrap annotated citations in the brackets of another style.

    Spans carrying a ``data-citation`` payload get their text replaced by the
    payload in square brackets (footnote and bracket-numbered styles) or
    parentheses (every other style).
    """
    rule = get_style_rule(style)
    opening, closing = _ANNOTATION_BRACKETS.get(rule.family, ("(", ")"))
    soup = BeautifulSoup(html or "", "html.parser")
    restyled: Set[str] = set()
    for span in soup.find_all(attrs={"data-citation": True}):
        payload = span["data-citation"].strip().strip("[]()").strip()
        if not payload:
            continue
        span.string = f"{opening}{payload}{closing}"
        span["data-style"] = rule.name
        restyled.add(payload)
    logger.debug(f"Restyled {len(restyled)} annotations to {rule.name}")
    return str(soup)
