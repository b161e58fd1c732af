"""Rich-text formatting of citation text."""
from .highlighter import CitationHighlighter, format_citation, restyle_annotations

__all__ = ["CitationHighlighter", "format_citation", "restyle_annotations"]
