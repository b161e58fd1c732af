"""CiteMe - Citation generation and document export.

A Python library for turning reference PDFs into styled citations:
- Citation generation with a vision-capable LLM
- Bibliography normalization for eight citation styles
- Citation highlighting for rich-text editors
- PDF, DOCX and HTML export
"""

from .config import Config
from .exceptions import (
    CiteMeError,
    ConfigurationError,
    ValidationError,
    UnknownStyleError,
    MissingUploadError,
    LLMError,
    RateLimitError,
    GenerationError,
    ConversionError,
)
from .core.models import BibliographyEntry, CitationError, CitationResult, ServiceResponse
from .core.normalizer import normalize_bibliography
from .core.styles import CitationStyle, StyleFamily, StyleRule, get_style_rule, supported_styles, validate_style
from .formatting.highlighter import CitationHighlighter, format_citation
from .citeme import CiteMe

__version__ = "0.1.0"
__all__ = [
    "CiteMe",
    "Config",
    "CitationStyle",
    "StyleFamily",
    "StyleRule",
    "CitationResult",
    "CitationError",
    "ServiceResponse",
    "BibliographyEntry",
    "CitationHighlighter",
    "get_style_rule",
    "validate_style",
    "supported_styles",
    "normalize_bibliography",
    "format_citation",
    "CiteMeError",
    "ConfigurationError",
    "ValidationError",
    "UnknownStyleError",
    "MissingUploadError",
    "LLMError",
    "RateLimitError",
    "GenerationError",
    "ConversionError",
]
