"""Tests for the citation style rule table."""

import dataclasses

import pytest

from citeme.core.styles import (
    STYLE_RULES,
    CitationStyle,
    StyleFamily,
    get_style_rule,
    supported_styles,
    validate_style,
)
from citeme.exceptions import UnknownStyleError, ValidationError


class TestStyleLookup:
    """Test resolving style names to rules."""

    def test_every_supported_style_has_a_rule(self):
        """Test that the rule table covers every supported style."""
        for name in supported_styles():
            rule = get_style_rule(name)
            assert rule.name == name
            assert rule.in_text_format
            assert rule.reference_format
            assert rule.example

    def test_lookup_is_case_insensitive(self):
        """Test that 'apa' and 'APA' resolve to the same style."""
        assert validate_style("apa") is CitationStyle.APA
        assert validate_style(" Chicago ") is CitationStyle.CHICAGO
        assert get_style_rule("ieee") is get_style_rule(CitationStyle.IEEE)

    def test_unknown_style_raises(self):
        """Test that styles outside the supported set are rejected."""
        with pytest.raises(UnknownStyleError) as exc_info:
            get_style_rule("Vancouver")
        assert "Vancouver" in str(exc_info.value)
        assert "OSCOLA" in exc_info.value.supported

    def test_unknown_style_is_validation_error(self):
        """Test that unknown styles can be caught as validation errors."""
        with pytest.raises(ValidationError):
            validate_style(None)

    def test_families(self):
        """Test the family assignment of each style."""
        assert get_style_rule("OSCOLA").family == StyleFamily.FOOTNOTE
        assert get_style_rule("Bluebook").family == StyleFamily.FOOTNOTE
        assert get_style_rule("AMA").family == StyleFamily.NUMERIC
        assert get_style_rule("IEEE").family == StyleFamily.BRACKETED
        assert get_style_rule("APA").family == StyleFamily.AUTHOR_DATE
        assert get_style_rule("Harvard").family == StyleFamily.AUTHOR_DATE
        assert get_style_rule("MLA").family == StyleFamily.AUTHOR_PAGE

    def test_bibliography_titles(self):
        """Test the heading used for a synthesized bibliography."""
        assert get_style_rule("MLA").bibliography_title == "Works Cited"
        assert get_style_rule("OSCOLA").bibliography_title == "Footnotes"
        assert get_style_rule("APA").bibliography_title == "References"


class TestStyleTableIsReadOnly:
    """Test that the rule table cannot be changed at runtime."""

    def test_table_rejects_assignment(self):
        """Test that the mapping itself is immutable."""
        with pytest.raises(TypeError):
            STYLE_RULES[CitationStyle.APA] = STYLE_RULES[CitationStyle.MLA]

    def test_rule_rejects_assignment(self):
        """Test that individual rules are frozen."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            get_style_rule("APA").example = "(Doe, 1999)"

    def test_legal_styles_italicise_case_names(self):
        """Test which styles carry the legal emphasis rules."""
        legal = {name for name in supported_styles() if get_style_rule(name).legal}
        assert legal == {"OSCOLA", "Bluebook"}
