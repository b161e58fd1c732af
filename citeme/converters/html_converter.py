"""Citation to HTML converter."""
import logging
from html import escape

from ..formatting.highlighter import CitationHighlighter
from ..formatting.markup import ENTRY_CLASS
from .base import REFERENCES_HEADING, ExportContent, ExportConverter

logger = logging.getLogger(__name__)


class HtmlConverter(ExportConverter):
    """Convert a citation to a standalone HTML page with academic styling.

    The citation body goes through the highlighter, so in-text markers and
    newly added citations keep their annotations.
    """

    extension = "html"
    label = "HTML"

    def __init__(self, include_css: bool = True, heading_max_length: int = 60):
        self.include_css = include_css
        self.heading_max_length = heading_max_length

    def render(self, content: ExportContent) -> bytes:
        highlighter = CitationHighlighter(content.rule.style, self.heading_max_length)
        body = highlighter.format("\n".join(content.paragraphs))

        if content.has_footnotes:
            body += f"<h2>{REFERENCES_HEADING}</h2>"
            for block in content.blocks:
                lines = "<br>".join(escape(line, quote=False) for line in block.split("\n"))
                body += f'<p class="{ENTRY_CLASS}">{lines}</p>'

        if self.include_css:
            body = self._create_html_document(body, content)
        return body.encode("utf-8")

    def _create_html_document(self, body: str, content: ExportContent) -> str:
        """Wrap content in full HTML document with CSS."""
        title = escape(f"Citation for: {content.file_name}" if content.file_name else "Citation")
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        {self._get_academic_css()}
    </style>
</head>
<body>
    <div class="container">
        <h1>{title}</h1>
        <p class="meta">Citation Style: {escape(content.style_name)} | Generated on {content.date_text}</p>
        {body}
    </div>
</body>
</html>"""

    def _get_academic_css(self) -> str:
        """Get CSS styling for citation pages."""
        return """
        body {
            font-family: 'Times New Roman', Times, serif;
            font-size: 12pt;
            line-height: 1.6;
            color: #333;
            background-color: #fff;
            margin: 0;
            padding: 0;
        }

        .container {
            max-width: 800px;
            margin: 0 auto;
            padding: 2.5cm;
        }

        h1 {
            font-size: 20pt;
            border-bottom: 2px solid #000;
            padding-bottom: 0.3em;
        }

        h2 {
            font-size: 16pt;
            border-bottom: 1px solid #999;
            padding-bottom: 0.2em;
        }

        h3 {
            font-size: 13pt;
        }

        p {
            text-align: justify;
            margin-bottom: 1em;
        }

        .meta {
            color: #666;
            font-size: 10pt;
        }

        .bibliography-entry {
            text-align: left;
            padding-left: 1.27cm;
            text-indent: -1.27cm;
        }

        .citation-marker {
            cursor: help;
        }

        @media print {
            .container {
                max-width: none;
                margin: 0;
            }

            h1, h2 {
                page-break-after: avoid;
            }

            .bibliography-entry {
                page-break-inside: avoid;
            }
        }
        """
