"""Citation to DOCX converter.

Lays out one citation per document with a styled header, footer and
reference section.
"""
import logging
from io import BytesIO

try:
    from docx import Document
    from docx.enum.style import WD_STYLE_TYPE
    from docx.enum.text import WD_ALIGN_PARAGRAPH
    from docx.oxml import OxmlElement
    from docx.oxml.ns import qn
    from docx.shared import Cm, Pt, RGBColor
    DOCX_AVAILABLE = True
except ImportError:
    DOCX_AVAILABLE = False

from ..exceptions import ConversionError, ValidationError
from .base import REFERENCES_HEADING, ExportContent, ExportConverter

logger = logging.getLogger(__name__)

FOOTNOTES_STYLE = "Footnotes Style"
BIBLIOGRAPHY_STYLE = "Bibliography Style"


class DocxConverter(ExportConverter):
    """Convert a citation and its footnotes to DOCX with academic styling."""

    extension = "docx"
    label = "DOCX"

    def __init__(self, page_height_cm: float = 29.7, page_width_cm: float = 21.0, margin_cm: float = 2.5):
        """Initialize DOCX converter.

        Args:
            page_height_cm: Page height, A4 by default
            page_width_cm: Page width, A4 by default
            margin_cm: Margin on every side

        Raises:
            ConversionError: If python-docx not installed
            ValidationError: If the page is too small for its margins
        """
        if not DOCX_AVAILABLE:
            raise ConversionError(
                "python-docx not installed. Install it with: pip install python-docx"
            )
        if min(page_height_cm, page_width_cm) <= 2 * margin_cm:
            raise ValidationError(
                f"Page {page_width_cm}x{page_height_cm}cm leaves no room inside {margin_cm}cm margins"
            )
        self.page_height_cm = page_height_cm
        self.page_width_cm = page_width_cm
        self.margin_cm = margin_cm
        self.document = None

    def render(self, content: ExportContent) -> bytes:
        self.document = Document()
        self._set_document_styles()
        self._add_header_footer(content)

        self.document.add_heading(f"Citation for: {content.file_name}", level=1)
        for text in content.paragraphs:
            paragraph = self.document.add_paragraph(text)
            paragraph.alignment = WD_ALIGN_PARAGRAPH.JUSTIFY

        if content.has_footnotes:
            self.document.add_heading(REFERENCES_HEADING, level=2)
            self._add_divider()
            style = FOOTNOTES_STYLE if content.continuous else BIBLIOGRAPHY_STYLE
            for block in content.blocks:
                self._add_block(block, style)

        buffer = BytesIO()
        self.document.save(buffer)
        logger.info(f"✓ DOCX rendered: {len(content.blocks)} reference block(s)")
        return buffer.getvalue()

    def _set_document_styles(self):
        """Configure page layout and the paragraph styles of the reference section."""
        section = self.document.sections[0]
        section.page_height = Cm(self.page_height_cm)
        section.page_width = Cm(self.page_width_cm)
        section.top_margin = Cm(self.margin_cm)
        section.bottom_margin = Cm(self.margin_cm)
        section.left_margin = Cm(self.margin_cm)
        section.right_margin = Cm(self.margin_cm)

        font = self.document.styles["Normal"].font
        font.name = "Times New Roman"
        font.size = Pt(12)
        rFonts = font._element.rPr.get_or_add_rFonts()
        rFonts.set(qn("w:ascii"), "Times New Roman")
        rFonts.set(qn("w:hAnsi"), "Times New Roman")

        footnotes_style = self.document.styles.add_style(FOOTNOTES_STYLE, WD_STYLE_TYPE.PARAGRAPH)
        footnotes_style.base_style = self.document.styles["Normal"]
        footnotes_style.font.size = Pt(10)
        footnotes_style.paragraph_format.space_after = Pt(6)

        bibliography_style = self.document.styles.add_style(BIBLIOGRAPHY_STYLE, WD_STYLE_TYPE.PARAGRAPH)
        bibliography_style.base_style = self.document.styles["Normal"]
        bibliography_style.font.size = Pt(11)
        paragraph_format = bibliography_style.paragraph_format
        paragraph_format.left_indent = Cm(1.27)
        paragraph_format.first_line_indent = Cm(-1.27)
        paragraph_format.space_after = Pt(6)

    def _add_header_footer(self, content: ExportContent):
        section = self.document.sections[0]

        header_para = section.header.paragraphs[0]
        header_para.alignment = WD_ALIGN_PARAGRAPH.RIGHT
        run = header_para.add_run(f"Citation Style: {content.style_name}")
        run.font.size = Pt(9)
        run.font.color.rgb = RGBColor(0x66, 0x66, 0x66)

        footer_para = section.footer.paragraphs[0]
        footer_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = footer_para.add_run(f"Generated on {content.date_text}")
        run.font.size = Pt(9)
        run.font.color.rgb = RGBColor(0x66, 0x66, 0x66)

    def _add_divider(self):
        """Add an empty paragraph with a top border."""
        paragraph = self.document.add_paragraph()
        pPr = paragraph._p.get_or_add_pPr()
        borders = OxmlElement("w:pBdr")
        top = OxmlElement("w:top")
        top.set(qn("w:val"), "single")
        top.set(qn("w:sz"), "6")
        top.set(qn("w:space"), "1")
        top.set(qn("w:color"), "999999")
        borders.append(top)
        pPr.append(borders)

    def _add_block(self, block: str, style: str):
        """Add one reference block as a single paragraph, line breaks preserved."""
        paragraph = self.document.add_paragraph(style=style)
        paragraph.paragraph_format.keep_together = True
        lines = block.split("\n")
        for i, line in enumerate(lines):
            run = paragraph.add_run(line)
            if i < len(lines) - 1:
                run.add_break()
        return paragraph
