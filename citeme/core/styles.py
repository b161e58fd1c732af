"""Citation style rule table.

Every supported style maps to a read-only ``StyleRule`` describing its in-text
form, its reference-list layout and a worked example. The family of a style
decides how bibliography text is normalized, which markers the formatter looks
for and how exporters lay out the reference section.
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Union

from ..exceptions import UnknownStyleError


class CitationStyle(str, Enum):
    """Supported citation styles."""
    APA = "APA"
    MLA = "MLA"
    CHICAGO = "Chicago"
    HARVARD = "Harvard"
    OSCOLA = "OSCOLA"
    BLUEBOOK = "Bluebook"
    IEEE = "IEEE"
    AMA = "AMA"


class StyleFamily(Enum):
    """Structural families shared by several styles."""
    FOOTNOTE = "footnote"  # numbered footnotes, ordinals are re-rendered
    NUMERIC = "numeric"  # superscript numbers, numbered reference list
    BRACKETED = "bracketed"  # [N] in text and in the reference list
    AUTHOR_DATE = "author_date"  # (Author, Year)
    AUTHOR_PAGE = "author_page"  # (Author Page)

    @property
    def is_numbered(self) -> bool:
        return self in (StyleFamily.FOOTNOTE, StyleFamily.NUMERIC, StyleFamily.BRACKETED)


@dataclass(frozen=True)
class StyleRule:
    """Formatting contract of a citation style.

    Attributes:
        style: The style this rule describes
        family: Structural family of the style
        in_text_format: How in-text citations look
        reference_format: How the reference list is laid out
        example: A worked example of an in-text citation
        legal: Case and statute names are italicised
        italicize_quoted_titles: Quoted titles are italicised
        bibliography_title: Heading used for a synthesized bibliography
    """
    style: CitationStyle
    family: StyleFamily
    in_text_format: str
    reference_format: str
    example: str
    legal: bool = False
    italicize_quoted_titles: bool = False
    bibliography_title: str = "References"

    @property
    def bold_author_surnames(self) -> bool:
        return self.family in (StyleFamily.AUTHOR_DATE, StyleFamily.AUTHOR_PAGE)

    @property
    def name(self) -> str:
        return self.style.value


STYLE_RULES: Mapping[CitationStyle, StyleRule] = MappingProxyType({
    CitationStyle.OSCOLA: StyleRule(
        style=CitationStyle.OSCOLA,
        family=StyleFamily.FOOTNOTE,
        in_text_format="footnote numbers in superscript",
        reference_format="footnotes at the bottom of the page. A new paragraph for each citation",
        example="[1] Smith v Jones [2020] UKSC 1",
        legal=True,
        bibliography_title="Footnotes",
    ),
    CitationStyle.BLUEBOOK: StyleRule(
        style=CitationStyle.BLUEBOOK,
        family=StyleFamily.FOOTNOTE,
        in_text_format="footnote numbers in superscript",
        reference_format="numbered footnotes with short-form repeats. A new paragraph for each citation",
        example="[1] Brown v. Board of Education, 347 U.S. 483 (1954)",
        legal=True,
        bibliography_title="Footnotes",
    ),
    CitationStyle.APA: StyleRule(
        style=CitationStyle.APA,
        family=StyleFamily.AUTHOR_DATE,
        in_text_format="author-date in parentheses",
        reference_format="alphabetical bibliography. A new paragraph for each citation",
        example="(Smith, 2020)",
        italicize_quoted_titles=True,
    ),
    CitationStyle.HARVARD: StyleRule(
        style=CitationStyle.HARVARD,
        family=StyleFamily.AUTHOR_DATE,
        in_text_format="author-date in parentheses without a comma",
        reference_format="alphabetical reference list. A new paragraph for each citation",
        example="(Smith 2020)",
        italicize_quoted_titles=True,
    ),
    CitationStyle.CHICAGO: StyleRule(
        style=CitationStyle.CHICAGO,
        family=StyleFamily.AUTHOR_DATE,
        in_text_format="author-date or footnote numbers",
        reference_format="bibliography or footnotes. A new paragraph for each citation",
        example="(Smith 2020) or [1]",
    ),
    CitationStyle.MLA: StyleRule(
        style=CitationStyle.MLA,
        family=StyleFamily.AUTHOR_PAGE,
        in_text_format="author-page in parentheses",
        reference_format="alphabetical works cited. A new paragraph for each citation",
        example="(Smith 42)",
        bibliography_title="Works Cited",
    ),
    CitationStyle.IEEE: StyleRule(
        style=CitationStyle.IEEE,
        family=StyleFamily.BRACKETED,
        in_text_format="numbered references in square brackets",
        reference_format="numbered bibliography. A new paragraph for each citation",
        example="[1]",
        italicize_quoted_titles=True,
    ),
    CitationStyle.AMA: StyleRule(
        style=CitationStyle.AMA,
        family=StyleFamily.NUMERIC,
        in_text_format="numbered references in superscript",
        reference_format="numbered bibliography. A new paragraph for each citation",
        example="¹",
    ),
})


def supported_styles() -> List[str]:
    """Return the display names of every supported style."""
    return [style.value for style in CitationStyle]


def validate_style(style: Union[str, CitationStyle]) -> CitationStyle:
    """Resolve a style name to a ``CitationStyle``.

    Matching is case-insensitive on the display name, so ``"apa"`` and
    ``"APA"`` are the same style.

    Raises:
        UnknownStyleError: If the style is not in the supported set
    """
    if isinstance(style, CitationStyle):
        return style
    if isinstance(style, str):
        wanted = style.strip().lower()
        for candidate in CitationStyle:
            if candidate.value.lower() == wanted:
                return candidate
    raise UnknownStyleError(style, supported_styles())


def get_style_rule(style: Union[str, CitationStyle]) -> StyleRule:
    """Look up the formatting contract for a style.

    Raises:
        UnknownStyleError: If the style is not in the supported set
    """
    return STYLE_RULES[validate_style(style)]
