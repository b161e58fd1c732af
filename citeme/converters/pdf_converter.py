"""Citation to PDF converter.

Lays out a citation on fixed-size pages with reportlab's platypus engine.
Each bibliography entry is kept together, so an entry that does not fit the
remaining space moves to the next page instead of splitting.
"""
import logging
from html import escape
from io import BytesIO
from typing import Callable, List, Sequence, Tuple, Union

try:
    from reportlab.lib import colors
    from reportlab.lib.enums import TA_JUSTIFY, TA_LEFT
    from reportlab.lib.pagesizes import A4, letter
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.lib.units import cm
    from reportlab.platypus import HRFlowable, KeepTogether, Paragraph, SimpleDocTemplate, Spacer
    REPORTLAB_AVAILABLE = True
except ImportError:
    REPORTLAB_AVAILABLE = False

from ..exceptions import ConversionError, ValidationError
from .base import REFERENCES_HEADING, ExportContent, ExportConverter

logger = logging.getLogger(__name__)

PageSize = Union[str, Tuple[float, float]]


def resolve_page_size(page_size: PageSize) -> Tuple[float, float]:
    """Map ``"A4"``/``"letter"`` or a ``(width, height)`` pair in points to a page size.

    Raises:
        ValidationError: If the page size is not recognised
    """
    if isinstance(page_size, str):
        sizes = {"a4": A4, "letter": letter}
        try:
            return sizes[page_size.strip().lower()]
        except KeyError:
            raise ValidationError(f"Unsupported page size: {page_size!r}. Use A4 or letter")
    width, height = page_size
    if width <= 0 or height <= 0:
        raise ValidationError(f"Invalid page size: {page_size!r}")
    return float(width), float(height)


def _markup(text: str) -> str:
    """Escape text for a platypus Paragraph, keeping line breaks."""
    return escape(text, quote=False).replace("\n", "<br/>")


class PdfConverter(ExportConverter):
    """Convert a citation and its footnotes to a paginated PDF."""

    extension = "pdf"
    label = "PDF"

    def __init__(self, page_size: PageSize = "A4", margin: float = 56.7):
        """Initialize PDF converter.

        Args:
            page_size: ``"A4"``, ``"letter"`` or ``(width, height)`` in points
            margin: Page margin in points

        Raises:
            ConversionError: If reportlab is not installed
            ValidationError: If the page size is not recognised
        """
        if not REPORTLAB_AVAILABLE:
            raise ConversionError(
                "reportlab not installed. Install it with: pip install reportlab"
            )
        self.page_size = resolve_page_size(page_size)
        self.margin = margin
        self.styles = self._create_styles()

    def _create_styles(self):
        styles = getSampleStyleSheet()
        styles.add(ParagraphStyle(
            "CitationTitle",
            parent=styles["Title"],
            fontSize=16,
            leading=20,
            spaceAfter=6,
        ))
        styles.add(ParagraphStyle(
            "CitationMeta",
            parent=styles["Normal"],
            fontSize=9,
            textColor=colors.grey,
            spaceAfter=12,
        ))
        styles.add(ParagraphStyle(
            "CitationBody",
            parent=styles["Normal"],
            fontName="Times-Roman",
            fontSize=11,
            leading=15,
            alignment=TA_JUSTIFY,
            spaceAfter=8,
        ))
        styles.add(ParagraphStyle(
            "ReferencesHeading",
            parent=styles["Heading2"],
            spaceBefore=6,
            keepWithNext=True,
        ))
        styles.add(ParagraphStyle(
            "BibliographyEntry",
            parent=styles["CitationBody"],
            alignment=TA_LEFT,
            leftIndent=0.5 * cm,
            firstLineIndent=-0.5 * cm,
            spaceAfter=6,
        ))
        styles.add(ParagraphStyle(
            "FootnotesBlock",
            parent=styles["CitationBody"],
            fontSize=10,
            leading=13,
            alignment=TA_LEFT,
        ))
        return styles

    def render(self, content: ExportContent) -> bytes:
        """Build the PDF twice: once to count pages, once with "Page X of Y"."""
        total_pages = self._build(content, BytesIO(), total_pages=0)
        buffer = BytesIO()
        pages = self._build(content, buffer, total_pages=total_pages)
        logger.info(f"✓ PDF rendered: {pages} page(s) for {content.file_name or 'document'}")
        return buffer.getvalue()

    def _build(self, content: ExportContent, buffer: BytesIO, total_pages: int) -> int:
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.page_size,
            topMargin=self.margin,
            bottomMargin=self.margin,
            leftMargin=self.margin,
            rightMargin=self.margin,
            title=f"Citation ({content.style_name})",
            subject=content.file_name,
            author="CiteMe",
        )
        decorate = self._page_decorator(content, total_pages)
        doc.build(self._story(content), onFirstPage=decorate, onLaterPages=decorate)
        return doc.page

    def _story(self, content: ExportContent) -> List:
        styles = self.styles
        story: List = [
            Paragraph(_markup(f"Citation ({content.style_name}) - {content.date_text}"), styles["CitationTitle"]),
            Paragraph(_markup(self._metadata_line(content)), styles["CitationMeta"]),
        ]
        for paragraph in content.paragraphs:
            story.append(Paragraph(_markup(paragraph), styles["CitationBody"]))

        if content.has_footnotes:
            story.append(Spacer(1, 6))
            story.append(HRFlowable(width="100%", thickness=0.5, color=colors.grey, spaceAfter=6))
            story.append(Paragraph(REFERENCES_HEADING, styles["ReferencesHeading"]))
            story.extend(self._blocks(content.blocks, content.continuous))
        return story

    def _blocks(self, blocks: Sequence[str], continuous: bool) -> List:
        if continuous:
            return [Paragraph(_markup(block), self.styles["FootnotesBlock"]) for block in blocks]
        return [
            KeepTogether([Paragraph(_markup(block), self.styles["BibliographyEntry"])])
            for block in blocks
        ]

    @staticmethod
    def _metadata_line(content: ExportContent) -> str:
        parts = [f"Style: {content.style_name}", f"Date: {content.date_text}"]
        if content.file_name:
            parts.append(f"Source: {content.file_name}")
        return " | ".join(parts)

    def _page_decorator(self, content: ExportContent, total_pages: int) -> Callable:
        """Running header with the style name and a page counter on every page."""

        def draw(canvas, doc):
            canvas.saveState()
            width, height = doc.pagesize
            canvas.setFont("Helvetica", 8)
            canvas.setFillGray(0.4)
            canvas.drawString(doc.leftMargin, height - doc.topMargin / 2, f"Citation Style: {content.style_name}")
            counter = f"Page {doc.page} of {total_pages}" if total_pages else f"Page {doc.page}"
            canvas.drawRightString(width - doc.rightMargin, doc.bottomMargin / 2, counter)
            canvas.restoreState()

        return draw
