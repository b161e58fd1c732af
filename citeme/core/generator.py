"""Citation generation with a vision-capable LLM."""
import json
import logging
import os
from typing import Any, Dict, List, Optional, Sequence, Union

from ..exceptions import GenerationError, LLMError, MissingUploadError
from .models import CitationError, CitationResult, ServiceResponse
from .styles import CitationStyle, StyleRule, get_style_rule, validate_style

logger = logging.getLogger(__name__)

# Extra reference-list instructions for the comparison prompt
REFERENCE_GUIDANCE = {
    CitationStyle.OSCOLA: [
        "Use numbered footnotes with proper legal citation format",
        "Include case names in italics",
        "Include statute names in italics",
        "Each footnote must be on its own paragraph, separated by double line breaks",
    ],
    CitationStyle.BLUEBOOK: [
        "Use numbered footnotes with Bluebook legal citation format",
        "Use short forms and id. for repeated sources",
        "Each footnote must be on its own paragraph, separated by double line breaks",
    ],
    CitationStyle.APA: [
        "Alphabetical order by author surname",
        "Include DOI or URL if available",
        "Use hanging indent format",
        "Each reference must be on its own paragraph, separated by double line breaks",
    ],
    CitationStyle.HARVARD: [
        "Alphabetical order by author surname",
        "Include URL and access date for online sources",
        "Each reference must be on its own paragraph, separated by double line breaks",
    ],
    CitationStyle.MLA: [
        "Alphabetical order by author surname",
        "Use hanging indent format",
        "Include medium of publication",
        "Each work cited entry must be on its own paragraph, separated by double line breaks",
    ],
    CitationStyle.IEEE: [
        "Numbered references in order of appearance",
        "Include DOI if available",
        "Use square brackets for in-text citations",
        "Each reference must be on its own paragraph, separated by double line breaks",
    ],
    CitationStyle.CHICAGO: [
        "Use either author-date or footnote style consistently",
        "Include URL or DOI if available",
        "Use hanging indent format",
        "Each citation must be on its own paragraph, separated by double line breaks",
    ],
    CitationStyle.AMA: [
        "Numbered references in order of appearance",
        "Include DOI if available",
        "Use superscript numbers for in-text citations",
        "Each reference must be on its own paragraph, separated by double line breaks",
    ],
}


def comparison_fallback(style_name: str, reason: str) -> Dict[str, str]:
    """Structured reply used when the comparison response cannot be parsed."""
    return {
        "improvedText": (
            f"Could not process the document using {style_name} citation style. "
            "Please try again or use a different citation style."
        ),
        "footnotes": "Unable to generate footnotes due to processing error.",
        "analysis": f"Error processing response: {reason}",
    }


def parse_comparison(text: str, style: Union[str, CitationStyle]) -> Dict[str, Any]:
    """Parse the JSON reply of a masterpiece comparison.

    Missing fields get their defaults; an unparsable reply yields the
    structured fallback instead of raising.
    """
    style_name = get_style_rule(style).name
    try:
        content = json.loads(text)
        if not isinstance(content, dict):
            raise ValueError(f"Unexpected content type: {type(content).__name__}")
    except ValueError as e:
        logger.error(f"Error parsing comparison response: {e}; preview: {text[:200]!r}")
        return comparison_fallback(style_name, str(e))

    return {
        "improvedText": content.get("improvedText") or f"No changes needed for {style_name} format",
        "footnotes": content.get("footnotes") or "No footnotes required",
        "analysis": content.get("analysis") or "No analysis required",
    }


def unwrap_citation(text: str) -> str:
    """Extract the citation from a JSON-mode reply.

    Uses the ``citation`` key, else the first string value. Replies that are
    not JSON are returned as they are.
    """
    text = (text or "").strip()
    try:
        content = json.loads(text)
    except ValueError:
        return text

    if isinstance(content, str):
        return content.strip()
    if isinstance(content, dict):
        citation = content.get("citation")
        if isinstance(citation, str):
            return citation.strip()
        for value in content.values():
            if isinstance(value, str) and value.strip():
                return value.strip()
    if isinstance(content, list) and all(isinstance(item, str) for item in content):
        return "\n\n".join(item.strip() for item in content)
    return text


class CitationGenerator:
    """Generates citations for reference PDFs using an LLM provider.

    Without a masterpiece, each reference gets its own citation. With a
    masterpiece (a PDF or pasted text), one comparison request rewrites the
    masterpiece with in-text citations and a consolidated reference list.
    """

    def __init__(self, llm_provider, config):
        """Initialize citation generator.

        Args:
            llm_provider: LLM provider instance (e.g., GeminiProvider)
            config: Configuration object
        """
        self.llm_provider = llm_provider
        self.config = config

    def generate(
        self,
        reference_paths: Sequence[str],
        style: Union[str, CitationStyle],
        masterpiece_path: Optional[str] = None,
        masterpiece_text: Optional[str] = None,
        masterpiece_name: Optional[str] = None,
    ) -> ServiceResponse:
        """Generate citations for a batch of reference documents.

        A failing document is recorded in ``errors`` and does not stop the
        batch.

        Raises:
            UnknownStyleError: If the style is not supported
            MissingUploadError: If no reference documents were given
        """
        rule = get_style_rule(validate_style(style))
        if not reference_paths:
            raise MissingUploadError("At least one reference PDF is required")

        response = ServiceResponse()
        references = []
        for path in reference_paths:
            if os.path.exists(path):
                references.append(path)
            else:
                logger.error(f"Reference PDF not found: {path}")
                response.errors.append(CitationError(os.path.basename(path), f"File not found: {path}"))

        has_masterpiece = bool(masterpiece_path or (masterpiece_text and masterpiece_text.strip()))
        if has_masterpiece:
            name = masterpiece_name or (
                os.path.basename(masterpiece_path) if masterpiece_path else "masterpiece.txt"
            )
            if references:
                self._compare(response, rule, name, references, masterpiece_path, masterpiece_text)
        else:
            for path in references:
                file_name = os.path.basename(path)
                try:
                    citation = self.generate_citation(path, rule.style)
                    response.results.append(CitationResult(file_name=file_name, citation=citation))
                except (LLMError, GenerationError, FileNotFoundError) as e:
                    logger.error(f"Error processing PDF {file_name}: {e}")
                    response.errors.append(CitationError(file_name, str(e)))

        logger.info(
            f"Generated {len(response.results)} {rule.name} result(s), {len(response.errors)} error(s)"
        )
        return response

    def generate_citation(self, file_path: str, style: Union[str, CitationStyle]) -> str:
        """Generate a citation for one reference PDF.

        Raises:
            GenerationError: If the model returns no citation
            LLMError: If the model call fails
        """
        rule = get_style_rule(style)
        file_name = os.path.basename(file_path)
        logger.info(f"Generating citation for {file_name} in {rule.name} style")

        reply = self.llm_provider.generate_with_files(
            prompt=self.build_citation_prompt(rule),
            file_paths=[file_path],
            model=self.config.gemini_model_default,
            temperature=self.config.temperature,
            max_tokens=500,
            json_mode=True,
        )
        citation = unwrap_citation(reply)
        if not citation:
            raise GenerationError(f"Empty citation returned for {file_name}")
        return citation

    def compare_masterpiece(
        self,
        reference_paths: Sequence[str],
        style: Union[str, CitationStyle],
        masterpiece_name: str,
        masterpiece_path: Optional[str] = None,
        masterpiece_text: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Compare a masterpiece with its references.

        Returns:
            Dict with ``improvedText``, ``footnotes`` and ``analysis``

        Raises:
            LLMError: If the model call fails
        """
        rule = get_style_rule(style)
        logger.info(
            f"Comparing masterpiece with {len(reference_paths)} references for {rule.name} citations"
        )
        reference_names = [os.path.basename(path) for path in reference_paths]
        prompt = self.build_comparison_prompt(rule, masterpiece_name, reference_names, masterpiece_text)
        files = ([masterpiece_path] if masterpiece_path else []) + list(reference_paths)

        reply = self.llm_provider.generate_with_files(
            prompt=prompt,
            file_paths=files,
            model=self.config.gemini_model_default,
            temperature=self.config.temperature,
            max_tokens=4000,
            json_mode=True,
        )
        if not reply or not reply.strip():
            raise LLMError(f"Empty content received for {rule.name} citation style")
        return parse_comparison(reply, rule.style)

    def _compare(
        self,
        response: ServiceResponse,
        rule: StyleRule,
        name: str,
        references: List[str],
        masterpiece_path: Optional[str],
        masterpiece_text: Optional[str],
    ) -> None:
        try:
            analysis = self.compare_masterpiece(references, rule.style, name, masterpiece_path, masterpiece_text)
        except (LLMError, FileNotFoundError) as e:
            logger.error(f"Error during comparison analysis: {e}")
            response.errors.append(CitationError(name, f"Comparison analysis failed: {e}"))
            return

        response.results.append(
            CitationResult(
                file_name=name,
                citation=analysis["improvedText"],
                analysis=analysis["analysis"],
                footnotes=analysis["footnotes"],
            )
        )

    @staticmethod
    def build_citation_prompt(rule: StyleRule) -> str:
        return f"""You are a citation generator. Examine the attached PDF document and generate a citation in {rule.name} format.

IMPORTANT FORMATTING RULES:
- For in-text citations: {rule.in_text_format}
- For reference list: {rule.reference_format}
- Example format: {rule.example}

DO NOT use numbered citations (like ¹) unless the style requires them (IEEE, AMA, OSCOLA, Bluebook).
For APA, Harvard and MLA, always use author-date or author-page format respectively.

Return a JSON object with a single "citation" field holding the citation text, without any additional comments or explanations."""

    @staticmethod
    def build_comparison_prompt(
        rule: StyleRule,
        masterpiece_name: str,
        reference_names: Sequence[str],
        masterpiece_text: Optional[str] = None,
    ) -> str:
        if masterpiece_text:
            intro = (
                f'The main document titled "{masterpiece_name}" is given below as text. '
                f"The {len(reference_names)} attached PDF files are the reference documents, "
                f"in this order: {', '.join(reference_names)}."
            )
        else:
            intro = (
                f'The first attached PDF is the main document titled "{masterpiece_name}". '
                f"It is followed by {len(reference_names)} reference documents, "
                f"in this order: {', '.join(reference_names)}."
            )
        guidance = "\n".join(f"     - {line}" for line in REFERENCE_GUIDANCE[rule.style])
        style = rule.name

        prompt = f"""You are a citation and plagiarism expert.

{intro}

Analyze the documents and return a JSON object with exactly these fields:

1. improvedText: The main document text with proper in-text citations in {style} format.
   - Format: {rule.in_text_format}
   - Example: {rule.example}
   - Wrap every in-text citation you add in <mark class="uncited">...</mark> tags.
   - DO NOT use numbered citations (like ¹) unless the style requires them.
   - Accuracy is HIGH PRIORITY. In-text citations must sit next to the sentences they support.

2. footnotes: A complete, consolidated list of all references in proper {style} format.
   - Format: {rule.reference_format}
   - Each citation MUST be on its own paragraph, separated by double line breaks (\\n\\n)
   - For {style}:
{guidance}

3. analysis: A short analysis of the citations that were missing or incorrect.

IMPORTANT RULES:
- Always return a complete JSON object with all required fields
- If no changes are needed, set improvedText to "No changes needed for {style} format"
- If no footnotes are needed, set footnotes to "No footnotes required"
- Ensure all citations match the {style} format exactly
- Do not include any text outside the JSON structure"""

        if masterpiece_text:
            prompt += f"\n\nMain document text:\n---\n{masterpiece_text.strip()}\n---"
        return prompt
