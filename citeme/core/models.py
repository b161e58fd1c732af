"""Data models for CiteMe."""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

PARAGRAPH_BREAK = "\n\n"

Footnotes = Union[str, Sequence[str]]


@dataclass
class CitationResult:
    """Citation generated for one source document.

    Attributes:
        file_name: Name of the source document, unique within a batch
        citation: Citation text, may contain presentational markup
        analysis: Optional analysis of the document's citations
        footnotes: Optional bibliography, a string or ordered list of entries
    """

    file_name: str
    citation: str
    analysis: Optional[str] = None
    footnotes: Optional[Footnotes] = None

    @property
    def footnotes_text(self) -> str:
        """Footnotes as a single string, list entries joined by paragraph breaks."""
        return join_footnotes(self.footnotes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to the service's JSON shape."""
        data: Dict[str, Any] = {"fileName": self.file_name, "citation": self.citation}
        if self.analysis is not None:
            data["analysis"] = self.analysis
        if self.footnotes is not None:
            data["footnotes"] = (
                self.footnotes if isinstance(self.footnotes, str) else list(self.footnotes)
            )
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CitationResult":
        """Create a result from the service's JSON shape.

        Raises:
            ValidationError: If ``fileName`` or ``citation`` is missing, or
                ``analysis`` or ``footnotes`` have the wrong type
        """
        if not isinstance(data, dict):
            raise ValidationError(f"Result must be an object, got {type(data).__name__}")
        file_name = data.get("fileName")
        citation = data.get("citation")
        if not file_name or not isinstance(file_name, str):
            raise ValidationError("Result is missing 'fileName'")
        if not citation or not isinstance(citation, str):
            raise ValidationError(f"Result for {file_name} is missing 'citation'")

        analysis = data.get("analysis")
        if analysis is not None and not isinstance(analysis, str):
            raise ValidationError(f"Result for {file_name} has a non-text 'analysis'")

        footnotes = data.get("footnotes")
        if footnotes is not None and not isinstance(footnotes, str):
            if not isinstance(footnotes, (list, tuple)) or not all(
                isinstance(entry, str) for entry in footnotes
            ):
                raise ValidationError(
                    f"Result for {file_name} has 'footnotes' that are not text or a list of text"
                )
            footnotes = list(footnotes)

        return cls(
            file_name=file_name,
            citation=citation,
            analysis=analysis,
            footnotes=footnotes,
        )


@dataclass
class CitationError:
    """Per-document failure reported by the citation service."""

    file_name: str
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {"fileName": self.file_name, "error": self.error}

    def __str__(self) -> str:
        return f"Error processing {self.file_name}: {self.error}"


@dataclass
class ServiceResponse:
    """Results and errors of one citation generation request."""

    results: List[CitationResult] = field(default_factory=list)
    errors: List[CitationError] = field(default_factory=list)

    def get(self, file_name: str) -> Optional[CitationResult]:
        for result in self.results:
            if result.file_name == file_name:
                return result
        return None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"results": [r.to_dict() for r in self.results]}
        if self.errors:
            data["errors"] = [e.to_dict() for e in self.errors]
        return data

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceResponse":
        """Parse a service payload.

        Malformed result or error entries are skipped with a warning; a later
        duplicate ``fileName`` replaces the earlier one.
        """
        response = cls()
        if not isinstance(data, dict):
            logger.warning(f"No results in response: {data!r}")
            return response

        results = data.get("results")
        if isinstance(results, list):
            by_name: Dict[str, CitationResult] = {}
            for raw in results:
                try:
                    result = CitationResult.from_dict(raw)
                except ValidationError as e:
                    logger.warning(f"Invalid result format: {e}")
                    continue
                by_name[result.file_name] = result
            response.results = list(by_name.values())
        else:
            logger.warning("No results in response")

        errors = data.get("errors")
        if isinstance(errors, list):
            for raw in errors:
                if isinstance(raw, dict) and raw.get("fileName") and raw.get("error"):
                    response.errors.append(CitationError(str(raw["fileName"]), str(raw["error"])))
                else:
                    logger.warning(f"Invalid error format: {raw!r}")

        return response

    @classmethod
    def from_json(cls, text: str) -> "ServiceResponse":
        """Parse a JSON service payload.

        Raises:
            ValidationError: If the text is not valid JSON
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Failed to parse response body: {e}")
        return cls.from_dict(data)


@dataclass(frozen=True)
class BibliographyEntry:
    """Bibliography entry extracted from citation text.

    Attributes:
        key: Footnote number, or "surname-year" for author styles
        text: Full entry text
        start: Offset of the entry in the source text
        end: Offset just past the entry in the source text
    """

    key: str
    text: str
    start: int = 0
    end: int = 0


def join_footnotes(footnotes: Optional[Footnotes]) -> str:
    """Join footnotes into one string using the paragraph break."""
    if not footnotes:
        return ""
    if isinstance(footnotes, str):
        return footnotes
    return PARAGRAPH_BREAK.join(str(entry) for entry in footnotes if entry is not None)
