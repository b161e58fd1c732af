"""Tests for the citation service data models."""

import json

import pytest

from citeme.core.models import CitationError, CitationResult, ServiceResponse
from citeme.exceptions import ValidationError


class TestCitationResult:
    """Test single citation results."""

    def test_from_dict(self):
        """Test parsing the service's result shape."""
        result = CitationResult.from_dict({
            "fileName": "paper.pdf",
            "citation": "Smith, J. (2020). Title.",
            "footnotes": ["[1] First ref.", "[2] Second ref."],
        })
        assert result.file_name == "paper.pdf"
        assert result.analysis is None
        assert result.footnotes == ["[1] First ref.", "[2] Second ref."]
        assert result.footnotes_text == "[1] First ref.\n\n[2] Second ref."

    def test_missing_citation(self):
        """Test that a result without citation text is rejected."""
        with pytest.raises(ValidationError):
            CitationResult.from_dict({"fileName": "paper.pdf"})

    def test_to_dict_omits_unset_fields(self):
        """Test that optional fields only appear when set."""
        result = CitationResult(file_name="paper.pdf", citation="Text.")
        assert result.to_dict() == {"fileName": "paper.pdf", "citation": "Text."}

    def test_string_footnotes(self):
        """Test that footnotes given as one string are kept as they are."""
        result = CitationResult("paper.pdf", "Text.", footnotes="1. A v B")
        assert result.footnotes_text == "1. A v B"

    @pytest.mark.parametrize("footnotes", [5, True, {"1": "A v B"}, ["A v B", 2]])
    def test_malformed_footnotes(self, footnotes):
        """Test that footnotes other than text or a list of text are rejected."""
        with pytest.raises(ValidationError):
            CitationResult.from_dict({"fileName": "a.pdf", "citation": "ok", "footnotes": footnotes})

    def test_malformed_analysis(self):
        """Test that a non-text analysis is rejected."""
        with pytest.raises(ValidationError):
            CitationResult.from_dict({"fileName": "a.pdf", "citation": "ok", "analysis": ["x"]})

    def test_tuple_footnotes(self):
        """Test that a tuple of entries is accepted as a list."""
        result = CitationResult.from_dict({"fileName": "a.pdf", "citation": "ok", "footnotes": ("A", "B")})
        assert result.footnotes == ["A", "B"]


class TestServiceResponse:
    """Test parsing whole service responses."""

    def test_invalid_entries_skipped(self):
        """Test that malformed results and errors are skipped."""
        response = ServiceResponse.from_dict({
            "results": [
                {"fileName": "good.pdf", "citation": "Text."},
                {"fileName": "bad.pdf"},
                "not an object",
            ],
            "errors": [{"fileName": "broken.pdf", "error": "Failed"}, {"error": "no name"}],
        })
        assert [r.file_name for r in response.results] == ["good.pdf"]
        assert len(response.errors) == 1
        assert str(response.errors[0]) == "Error processing broken.pdf: Failed"

    def test_duplicate_file_names(self):
        """Test that a later result for the same file replaces the earlier one."""
        response = ServiceResponse.from_dict({
            "results": [
                {"fileName": "paper.pdf", "citation": "First."},
                {"fileName": "paper.pdf", "citation": "Second."},
            ]
        })
        assert len(response.results) == 1
        assert response.get("paper.pdf").citation == "Second."
        assert response.get("missing.pdf") is None

    def test_malformed_footnotes_skip_only_that_result(self):
        """Test that a result with malformed footnotes does not abort the response."""
        response = ServiceResponse.from_dict({
            "results": [
                {"fileName": "a.pdf", "citation": "ok", "footnotes": 5},
                {"fileName": "c.pdf", "citation": "ok", "footnotes": {"1": "x"}},
                {"fileName": "b.pdf", "citation": "fine"},
            ]
        })
        assert [r.file_name for r in response.results] == ["b.pdf"]

    def test_missing_results(self):
        """Test that a payload without results parses to an empty response."""
        assert ServiceResponse.from_dict({}).results == []
        assert ServiceResponse.from_dict(["not", "a", "dict"]).results == []

    def test_from_json_invalid(self):
        """Test that an unparsable body raises ValidationError."""
        with pytest.raises(ValidationError):
            ServiceResponse.from_json("{not json")

    def test_to_json(self):
        """Test serialising back to the service shape."""
        response = ServiceResponse(
            results=[CitationResult("paper.pdf", "Text.", analysis="Fine.")],
            errors=[CitationError("broken.pdf", "Failed")],
        )
        assert json.loads(response.to_json()) == {
            "results": [{"fileName": "paper.pdf", "citation": "Text.", "analysis": "Fine."}],
            "errors": [{"fileName": "broken.pdf", "error": "Failed"}],
        }
