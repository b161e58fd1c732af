"""Main CiteMe class - entry point for the library."""
import logging
from typing import Dict, List, Optional, Sequence, Union

from .config import Config
from .converters.base import ExportConverter, ExportResult, export_file_name
from .converters.docx_converter import DocxConverter
from .converters.html_converter import HtmlConverter
from .converters.pdf_converter import PdfConverter
from .core.generator import CitationGenerator
from .core.models import CitationError, CitationResult, ServiceResponse
from .core.styles import CitationStyle, validate_style
from .exceptions import CiteMeError, ConfigurationError, LLMError, ValidationError
from .formatting.highlighter import format_citation, restyle_annotations
from .providers.llm.gemini import GeminiProvider
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)

# Page height and width in cm for DOCX export
DOCX_PAGE_SIZES = {
    "a4": (29.7, 21.0),
    "letter": (27.94, 21.59),
}

EXPORT_FORMATS = ("pdf", "docx", "html")


class CiteMe:
    """Main entry point for CiteMe.

    Holds one citation session: the active style, the results of the last
    generation, per-document errors and the user's edits.

    Example:
        >>> from citeme import CiteMe
        >>> session = CiteMe(gemini_api_key="your-key", citation_style="APA")
        >>> session.generate(["smith2020.pdf"])
        >>> html = session.formatted("smith2020.pdf")
        >>> result = session.export_pdf("smith2020.pdf")
    """

    def __init__(
        self,
        gemini_api_key: Optional[str] = None,
        citation_style: Optional[Union[str, CitationStyle]] = None,
        config: Optional[Config] = None,
        llm_provider=None,
        log_level: int = logging.INFO,
    ):
        """Initialize CiteMe.

        Args:
            gemini_api_key: API key for Google Gemini
            citation_style: Active citation style (default: config, then OSCOLA)
            config: Optional Config object (loaded from the environment if omitted)
            llm_provider: Optional LLM provider instance replacing Gemini
            log_level: Logging level (default: INFO)

        Raises:
            UnknownStyleError: If the citation style is not supported
        """
        setup_logging(level=log_level)

        if config is None:
            config = Config.from_env()
        if gemini_api_key:
            config.gemini_api_key = gemini_api_key
        if citation_style:
            config.citation_style = citation_style

        self.config = config
        self.style = validate_style(config.citation_style)

        self.llm_provider = llm_provider
        if self.llm_provider is None:
            self._init_provider()
        self.generator = CitationGenerator(self.llm_provider, config) if self.llm_provider else None

        self.results: Dict[str, CitationResult] = {}
        self.errors: List[CitationError] = []
        self._edits: Dict[str, str] = {}

        logger.info(f"CiteMe initialized with {self.style.value} citation style")

    def _init_provider(self):
        """Initialize the Gemini provider if an API key is configured."""
        if not self.config.gemini_api_key:
            logger.warning("Gemini API key not configured. Citation generation is unavailable.")
            return
        try:
            self.llm_provider = GeminiProvider(self.config)
            logger.info("Gemini LLM provider initialized successfully")
        except LLMError as e:
            logger.warning(f"Failed to initialize Gemini provider: {e}")
            self.llm_provider = None

    # ==================== Style ====================

    @property
    def style_name(self) -> str:
        return self.style.value

    def set_style(self, style: Union[str, CitationStyle]) -> CitationStyle:
        """Change the active citation style.

        Raises:
            UnknownStyleError: If the style is not supported
        """
        self.style = validate_style(style)
        logger.info(f"Citation style set to {self.style.value}")
        return self.style

    # ==================== Generation ====================

    def generate(
        self,
        reference_paths: Sequence[str],
        masterpiece_path: Optional[str] = None,
        masterpiece_text: Optional[str] = None,
        style: Optional[Union[str, CitationStyle]] = None,
    ) -> ServiceResponse:
        """Generate citations for reference PDFs, replacing the session state.

        Raises:
            ConfigurationError: If no LLM provider is available
            UnknownStyleError: If the style is not supported
            MissingUploadError: If no reference documents were given
        """
        if self.generator is None:
            raise ConfigurationError(
                "Citation generation requires an LLM provider. Set GEMINI_API_KEY."
            )
        if style:
            self.set_style(style)

        response = self.generator.generate(
            reference_paths,
            self.style,
            masterpiece_path=masterpiece_path,
            masterpiece_text=masterpiece_text,
        )
        return self.load_response(response)

    def load_response(self, response: Union[ServiceResponse, dict, str]) -> ServiceResponse:
        """Load a service response (object, dict or JSON) into the session.

        Previous results, errors and edits are discarded.

        Raises:
            ValidationError: If a JSON string cannot be parsed
        """
        if isinstance(response, str):
            response = ServiceResponse.from_json(response)
        elif isinstance(response, dict):
            response = ServiceResponse.from_dict(response)

        self.results = {result.file_name: result for result in response.results}
        self.errors = list(response.errors)
        self._edits = {}

        for error in self.errors:
            logger.warning(str(error))
        logger.info(f"Loaded {len(self.results)} citation result(s)")
        return response

    # ==================== Content ====================

    def get_result(self, file_name: str) -> CitationResult:
        """Look up a result by file name.

        Raises:
            ValidationError: If the session has no result for the file
        """
        try:
            return self.results[file_name]
        except KeyError:
            raise ValidationError(f"No citation result for {file_name}")

    def content(self, file_name: str) -> str:
        """Current citation text for a document: the user's edit, else the result."""
        if file_name in self._edits:
            return self._edits[file_name]
        return self.get_result(file_name).citation

    def formatted(self, file_name: str) -> str:
        """Citation markup for the rich-text surface."""
        return format_citation(self.content(file_name), self.style, self.config.heading_max_length)

    def update_content(self, file_name: str, content: str) -> None:
        """Store an edit made in the rich-text editor."""
        self.get_result(file_name)
        self._edits[file_name] = content

    def restyle_annotations(self, file_name: str) -> str:
        """Rewrap annotated citations of a document in the active style's brackets."""
        restyled = restyle_annotations(self.formatted(file_name), self.style)
        self._edits[file_name] = restyled
        return restyled

    # ==================== Export ====================

    def export_pdf(self, file_name: str) -> ExportResult:
        return self.export(file_name, "pdf")

    def export_docx(self, file_name: str) -> ExportResult:
        return self.export(file_name, "docx")

    def export_html(self, file_name: str) -> ExportResult:
        return self.export(file_name, "html")

    def export_all(
        self,
        output_dir: Optional[str] = None,
        formats: Sequence[str] = ("pdf", "docx"),
    ) -> List[str]:
        """Export every result in the session.

        Failed exports are logged and skipped.

        Returns:
            Paths of the written files
        """
        output_dir = output_dir or self.config.output_dir
        paths = []
        for file_name in self.results:
            for fmt in formats:
                result = self.export(file_name, fmt)
                if not result.ok:
                    logger.error(result.error)
                    continue
                try:
                    path = result.save(output_dir)
                except OSError as e:
                    logger.error(f"Failed to write {result.file_name}: {e}")
                    continue
                logger.info(f"✓ Exported {path}")
                paths.append(path)
        return paths

    def export(self, file_name: str, fmt: str) -> ExportResult:
        fmt = fmt.lower()
        label = fmt.upper()
        output_name = export_file_name(file_name, fmt)
        try:
            result = self.get_result(file_name)
            converter = self._converter(fmt)
            data = converter.convert(
                self.content(file_name),
                result.footnotes,
                self.style,
                file_name,
            )
        except CiteMeError as e:
            logger.error(f"{label} export failed for {file_name}: {e}")
            return ExportResult(output_name, error=f"Failed to generate {label}: {e}")
        return ExportResult(output_name, data=data)

    def _converter(self, fmt: str) -> ExportConverter:
        if fmt == "pdf":
            return PdfConverter(page_size=self.config.page_size)
        if fmt == "docx":
            try:
                height, width = DOCX_PAGE_SIZES[self.config.page_size.strip().lower()]
            except KeyError:
                raise ValidationError(f"Unsupported page size: {self.config.page_size!r}. Use A4 or letter")
            return DocxConverter(page_height_cm=height, page_width_cm=width)
        if fmt == "html":
            return HtmlConverter(heading_max_length=self.config.heading_max_length)
        raise ValidationError(f"Unsupported export format: {fmt}. Must be one of: {', '.join(EXPORT_FORMATS)}")

