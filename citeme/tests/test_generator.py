"""Tests for citation generation with a stubbed LLM provider."""

import json

import pytest

from citeme.core.generator import CitationGenerator, parse_comparison, unwrap_citation
from citeme.exceptions import LLMError, MissingUploadError, UnknownStyleError


class TestReplyParsing:
    """Test parsing of model replies."""

    def test_unwrap_citation_key(self):
        """Test that the citation field is used when present."""
        assert unwrap_citation('{"citation": " Smith, J. (2020). "}') == "Smith, J. (2020)."

    def test_unwrap_first_string(self):
        """Test that another string field is used as a fallback."""
        assert unwrap_citation('{"apa": "Smith, J. (2020)."}') == "Smith, J. (2020)."

    def test_unwrap_plain_text(self):
        """Test that a non-JSON reply is returned as it is."""
        assert unwrap_citation("Smith, J. (2020).") == "Smith, J. (2020)."

    def test_unwrap_list(self):
        """Test that a list of entries is joined into paragraphs."""
        assert unwrap_citation('["[1] A.", "[2] B."]') == "[1] A.\n\n[2] B."

    def test_parse_comparison_defaults(self):
        """Test the defaults for missing comparison fields."""
        parsed = parse_comparison('{"improvedText": "Text (Smith, 2020)."}', "APA")
        assert parsed["improvedText"] == "Text (Smith, 2020)."
        assert parsed["footnotes"] == "No footnotes required"
        assert parsed["analysis"] == "No analysis required"

        parsed = parse_comparison("{}", "MLA")
        assert parsed["improvedText"] == "No changes needed for MLA format"

    def test_parse_comparison_fallback(self):
        """Test the structured fallback for an unparsable reply."""
        parsed = parse_comparison("not json at all", "OSCOLA")
        assert parsed["improvedText"].startswith("Could not process the document using OSCOLA")
        assert parsed["analysis"].startswith("Error processing response:")

        parsed = parse_comparison('["a list"]', "OSCOLA")
        assert parsed["footnotes"] == "Unable to generate footnotes due to processing error."


class TestCitationGenerator:
    """Test batch generation."""

    def test_one_citation_per_reference(self, config, fake_provider, reference_pdfs):
        """Test that every reference gets its own result."""
        provider = fake_provider('{"citation": "Smith, J. (2020). Title."}', "Jones, K. (2019). Other.")
        response = CitationGenerator(provider, config).generate(reference_pdfs, "APA")

        assert [r.file_name for r in response.results] == ["smith2020.pdf", "jones2019.pdf"]
        assert response.results[0].citation == "Smith, J. (2020). Title."
        assert response.results[1].citation == "Jones, K. (2019). Other."
        assert response.errors == []
        assert all(call["json_mode"] for call in provider.calls)
        assert provider.calls[0]["file_paths"] == [reference_pdfs[0]]
        assert "APA format" in provider.calls[0]["prompt"]

    def test_failure_recorded(self, config, fake_provider, reference_pdfs):
        """Test that a failing document does not stop the batch."""
        provider = fake_provider(LLMError("quota"), '{"citation": "Jones, K. (2019). Other."}')
        response = CitationGenerator(provider, config).generate(reference_pdfs, "APA")

        assert [r.file_name for r in response.results] == ["jones2019.pdf"]
        assert len(response.errors) == 1
        assert response.errors[0].file_name == "smith2020.pdf"
        assert "quota" in response.errors[0].error

    def test_empty_citation_recorded(self, config, fake_provider, reference_pdfs):
        """Test that an empty reply is reported as an error."""
        provider = fake_provider("   ")
        response = CitationGenerator(provider, config).generate(reference_pdfs[:1], "IEEE")
        assert response.results == []
        assert "Empty citation" in response.errors[0].error

    def test_missing_file(self, config, fake_provider, tmp_path):
        """Test that a missing reference is reported without calling the model."""
        provider = fake_provider()
        response = CitationGenerator(provider, config).generate([str(tmp_path / "gone.pdf")], "APA")
        assert response.results == []
        assert response.errors[0].file_name == "gone.pdf"
        assert provider.calls == []

    def test_no_references(self, config, fake_provider):
        """Test that a request without references is rejected."""
        with pytest.raises(MissingUploadError):
            CitationGenerator(fake_provider(), config).generate([], "APA")

    def test_unknown_style(self, config, fake_provider, reference_pdfs):
        """Test that an unsupported style is rejected before any call."""
        provider = fake_provider()
        with pytest.raises(UnknownStyleError):
            CitationGenerator(provider, config).generate(reference_pdfs, "Vancouver")
        assert provider.calls == []


class TestMasterpieceComparison:
    """Test comparing the user's own document with its references."""

    def test_masterpiece_pdf(self, config, fake_provider, reference_pdfs, tmp_path):
        """Test that the masterpiece is sent first and its reply parsed."""
        masterpiece = tmp_path / "essay.pdf"
        masterpiece.write_bytes(b"%PDF-1.4\n")
        reply = json.dumps({
            "improvedText": 'Courts adapt <mark class="uncited">(Smith, 2020)</mark>.',
            "footnotes": ["Smith, J. (2020). Title.", "Jones, K. (2019). Other."],
        })
        provider = fake_provider(reply)

        response = CitationGenerator(provider, config).generate(
            reference_pdfs, "APA", masterpiece_path=str(masterpiece)
        )

        assert len(response.results) == 1
        result = response.results[0]
        assert result.file_name == "essay.pdf"
        assert result.citation.startswith("Courts adapt")
        assert result.footnotes == ["Smith, J. (2020). Title.", "Jones, K. (2019). Other."]
        assert result.analysis == "No analysis required"
        assert provider.calls[0]["file_paths"] == [str(masterpiece)] + reference_pdfs

    def test_masterpiece_text(self, config, fake_provider, reference_pdfs):
        """Test that pasted text goes into the prompt, not the uploads."""
        provider = fake_provider('{"improvedText": "Text.", "analysis": "Fine."}')
        response = CitationGenerator(provider, config).generate(
            reference_pdfs, "OSCOLA", masterpiece_text="My essay about torts."
        )

        assert response.results[0].file_name == "masterpiece.txt"
        assert provider.calls[0]["file_paths"] == reference_pdfs
        assert "My essay about torts." in provider.calls[0]["prompt"]

    def test_unparsable_reply(self, config, fake_provider, reference_pdfs):
        """Test that an unparsable reply yields the fallback result."""
        provider = fake_provider("Sorry, I cannot help with that.")
        response = CitationGenerator(provider, config).generate(
            reference_pdfs, "APA", masterpiece_text="Essay."
        )
        assert response.results[0].citation.startswith("Could not process the document using APA")

    def test_comparison_failure(self, config, fake_provider, reference_pdfs):
        """Test that a failed comparison is reported as an error."""
        provider = fake_provider(LLMError("service down"))
        response = CitationGenerator(provider, config).generate(
            reference_pdfs, "APA", masterpiece_text="Essay."
        )
        assert response.results == []
        assert response.errors[0].error == "Comparison analysis failed: service down"
