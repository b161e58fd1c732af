"""Shared export helpers.

Exporters never see raw model output: ``prepare_export`` strips markup,
normalizes the bibliography and splits everything into the blocks a page or
flow document lays out.
"""
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Union

from bs4 import BeautifulSoup

from ..core.models import Footnotes, join_footnotes
from ..core.normalizer import normalize_bibliography, normalize_line_breaks, split_paragraphs
from ..core.styles import CitationStyle, StyleFamily, StyleRule, get_style_rule
from ..exceptions import ConversionError
from ..formatting.markup import MARKUP_TAGS

logger = logging.getLogger(__name__)

REFERENCES_HEADING = "References/Footnotes"

BLOCK_TAGS = [
    "p", "div", "li", "blockquote", "pre", "tr", "section",
    "h1", "h2", "h3", "h4", "h5", "h6",
]

_BLOCK_SEPARATOR = "\u2029"
_LEADING_NUMBER = re.compile(r"^\s*\[?(\d+)")


def strip_markup(html: Optional[str]) -> str:
    """Extract plain text from rich-text markup.

    Block elements and ``<br>`` become paragraph breaks and whitespace inside
    a paragraph collapses to single spaces. Text without markup only has its
    line breaks normalized.
    """
    if not html or not html.strip():
        return ""
    soup = BeautifulSoup(html, "html.parser")
    if soup.find(MARKUP_TAGS) is None:
        return normalize_line_breaks(html).strip()

    for br in soup.find_all("br"):
        br.replace_with(_BLOCK_SEPARATOR)
    for block in soup.find_all(BLOCK_TAGS):
        block.insert_before(_BLOCK_SEPARATOR)
        block.insert_after(_BLOCK_SEPARATOR)

    paragraphs = [" ".join(part.split()) for part in soup.get_text().split(_BLOCK_SEPARATOR)]
    return "\n\n".join(p for p in paragraphs if p)


def export_file_name(file_name: str, extension: str) -> str:
    """Derive the download name, e.g. ``paper.pdf`` -> ``citation_paper_pdf.pdf``."""
    sanitized = re.sub(r"[^A-Za-z0-9]", "_", file_name or "")
    return f"citation_{sanitized}.{extension.lstrip('.')}"


@dataclass
class ExportContent:
    """Everything an exporter lays out for one document.

    Attributes:
        rule: Style rule of the active citation style
        file_name: Source document name
        paragraphs: Citation text, one item per paragraph
        blocks: Bibliography blocks in layout order
        continuous: Blocks form one continuous footnote block
        generated_on: Date printed in titles and footers
    """

    rule: StyleRule
    file_name: str
    paragraphs: List[str] = field(default_factory=list)
    blocks: List[str] = field(default_factory=list)
    continuous: bool = False
    generated_on: date = field(default_factory=date.today)

    @property
    def style_name(self) -> str:
        return self.rule.name

    @property
    def date_text(self) -> str:
        return self.generated_on.strftime("%Y-%m-%d")

    @property
    def has_footnotes(self) -> bool:
        return bool(self.blocks)


def _number_order(blocks: List[str]) -> List[str]:
    def key(item):
        index, block = item
        match = _LEADING_NUMBER.match(block)
        return (0, int(match.group(1)), index) if match else (1, 0, index)

    return [block for _, block in sorted(enumerate(blocks), key=key)]


def prepare_export(
    citation: Optional[str],
    footnotes: Optional[Footnotes],
    style: Union[str, CitationStyle],
    file_name: str = "",
    generated_on: Optional[date] = None,
) -> ExportContent:
    """Turn a citation and its footnotes into export blocks.

    The numbered-footnote family keeps its footnotes as one continuous block.
    Every other family gets one block per paragraph; numbered families are
    ordered by their leading number.

    Raises:
        UnknownStyleError: If the style is not supported
    """
    rule = get_style_rule(style)
    paragraphs = split_paragraphs(strip_markup(citation))

    raw_footnotes = join_footnotes(footnotes)
    normalized = normalize_bibliography(strip_markup(raw_footnotes), rule.style)

    continuous = rule.family == StyleFamily.FOOTNOTE
    if not normalized:
        blocks = []
    elif continuous:
        blocks = [normalized]
    else:
        blocks = split_paragraphs(normalized)
        if rule.family.is_numbered:
            blocks = _number_order(blocks)

    return ExportContent(
        rule=rule,
        file_name=file_name,
        paragraphs=paragraphs,
        blocks=blocks,
        continuous=continuous,
        generated_on=generated_on or date.today(),
    )


@dataclass
class ExportResult:
    """Outcome of one export: the bytes, or the error message."""

    file_name: str
    data: Optional[bytes] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None

    def save(self, output_dir: str) -> str:
        """Write the exported bytes into a directory.

        Raises:
            ConversionError: If the export failed
        """
        if not self.ok:
            raise ConversionError(self.error or f"Nothing to save for {self.file_name}")
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, self.file_name)
        with open(path, "wb") as f:
            f.write(self.data)
        return path


class ExportConverter:
    """Base class for exporters producing a downloadable artifact."""

    extension = ""
    label = ""

    def render(self, content: ExportContent) -> bytes:
        raise NotImplementedError

    def convert(
        self,
        citation: Optional[str],
        footnotes: Optional[Footnotes] = None,
        style: Union[str, CitationStyle] = CitationStyle.OSCOLA,
        file_name: str = "",
        generated_on: Optional[date] = None,
    ) -> bytes:
        """Export one citation.

        Returns:
            Document bytes

        Raises:
            UnknownStyleError: If the style is not supported
            ConversionError: If rendering fails
        """
        content = prepare_export(citation, footnotes, style, file_name, generated_on)
        logger.info(f"Converting citation for {file_name or 'document'} to {self.label}")
        try:
            return self.render(content)
        except ConversionError:
            raise
        except Exception as e:
            logger.error(f"{self.label} conversion failed: {e}")
            raise ConversionError(f"{self.label} rendering failed: {e}")

    def save(
        self,
        citation: Optional[str],
        footnotes: Optional[Footnotes],
        style: Union[str, CitationStyle],
        file_name: str,
        output_dir: str,
    ) -> str:
        """Export one citation and write it to ``output_dir``.

        Nothing is written unless the conversion succeeds.

        Returns:
            Path to the created file
        """
        data = self.convert(citation, footnotes, style, file_name)
        result = ExportResult(export_file_name(file_name, self.extension), data=data)
        path = result.save(output_dir)
        logger.info(f"✓ {self.label} saved: {path}")
        return path
