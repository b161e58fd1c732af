"""Format converters."""
from .base import ExportResult, export_file_name, prepare_export, strip_markup
from .docx_converter import DocxConverter
from .html_converter import HtmlConverter
from .pdf_converter import PdfConverter

__all__ = [
    "DocxConverter",
    "HtmlConverter",
    "PdfConverter",
    "ExportResult",
    "export_file_name",
    "prepare_export",
    "strip_markup",
]
