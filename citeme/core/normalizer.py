"""Bibliography text normalization.

Model output arrives with inconsistent line endings and paragraph spacing.
``normalize_bibliography`` turns it into paragraphs separated by exactly one
blank line and applies the ordinal conventions of the style's family.
"""
import re
from typing import Callable, Dict, List, Optional, Union

from .models import PARAGRAPH_BREAK, Footnotes, join_footnotes
from .styles import CitationStyle, StyleFamily, get_style_rule

_BLANK_LINE = re.compile(r"^[^\S\n]+$", re.MULTILINE)
_EXCESS_BREAKS = re.compile(r"\n{3,}")
_LEADING_ORDINALS = re.compile(r"^\s*(?:\d+\.\s+)+")
_LEADING_BRACKET = re.compile(r"^\s*\[(\d+)\]\s*")
_LEADING_NUMBER = re.compile(r"^\s*(\d+)\.\s+")


def _strip_ordinal(line: str) -> str:
    return _LEADING_ORDINALS.sub("", line)


def _space_bracket(line: str) -> str:
    return _LEADING_BRACKET.sub(lambda m: f"[{m.group(1)}] ", line)


def _space_number(line: str) -> str:
    return _LEADING_NUMBER.sub(lambda m: f"{m.group(1)}. ", line)


_LINE_RULES: Dict[StyleFamily, Callable[[str], str]] = {
    StyleFamily.FOOTNOTE: _strip_ordinal,
    StyleFamily.BRACKETED: _space_bracket,
    StyleFamily.NUMERIC: _space_number,
}


def normalize_line_breaks(text: str) -> str:
    """Unify line endings and collapse 3+ line breaks into one paragraph break."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _BLANK_LINE.sub("", text)
    return _EXCESS_BREAKS.sub(PARAGRAPH_BREAK, text)


def split_paragraphs(text: Optional[str]) -> List[str]:
    """Split text on the paragraph break, dropping blank paragraphs."""
    if not text:
        return []
    return [p.strip() for p in text.split(PARAGRAPH_BREAK) if p.strip()]


def normalize_bibliography(
    text: Optional[Footnotes],
    style: Union[str, CitationStyle],
) -> str:
    """Normalize bibliography or footnote text for a citation style.

    Line breaks are normalized before any style rule runs. Numbered-footnote
    styles lose their leading "N. " ordinals, bracket-numbered styles keep
    "[N]" followed by exactly one space, numeric styles keep "N." followed by
    one space. Whitespace-only lines and paragraphs are dropped.

    The function is idempotent.

    Args:
        text: Bibliography text, or an ordered list of entries
        style: Citation style name or enum

    Returns:
        Paragraphs joined by ``PARAGRAPH_BREAK``

    Raises:
        UnknownStyleError: If the style is not supported
    """
    rule = get_style_rule(style)
    raw = join_footnotes(text)
    if not raw:
        return ""

    line_rule = _LINE_RULES.get(rule.family)
    paragraphs = []
    for paragraph in normalize_line_breaks(raw).split(PARAGRAPH_BREAK):
        lines = paragraph.split("\n")
        if line_rule is not None:
            lines = [line_rule(line) for line in lines]
        lines = [line.strip() for line in lines if line.strip()]
        cleaned = "\n".join(lines).strip()
        if cleaned:
            paragraphs.append(cleaned)

    return PARAGRAPH_BREAK.join(paragraphs)
