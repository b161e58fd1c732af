"""Tests for the citation highlighter and formatter."""

import pytest
from bs4 import BeautifulSoup

from citeme.exceptions import UnknownStyleError
from citeme.formatting.highlighter import (
    CitationHighlighter,
    format_citation,
    has_markup,
    is_new_citation,
    restyle_annotations,
)
from citeme.formatting.markup import ANNOTATION_CLASS, ENTRY_CLASS, HIGHLIGHT_CLASS


def parse(html):
    return BeautifulSoup(html, "html.parser")


def markers(soup):
    return soup.find_all("span", class_=ANNOTATION_CLASS)


def highlights(soup):
    return soup.find_all("span", class_=HIGHLIGHT_CLASS)


class TestPlainText:
    """Test formatting of plain citation text."""

    def test_author_date_marker_annotated(self):
        """Test that an APA marker becomes an annotation without a hover title."""
        soup = parse(format_citation("(Smith, 2020) argues the point.", "APA"))
        found = markers(soup)
        assert len(found) == 1
        assert found[0].get_text() == "(Smith, 2020)"
        assert not found[0].has_attr("title")
        assert highlights(soup) == []
        assert soup.find("p").get_text() == "(Smith, 2020) argues the point."

    def test_headings_and_paragraphs(self):
        """Test that short lines without a period become sub-headings."""
        text = (
            "Introduction\n"
            "Background\n"
            "Methods\n"
            "This study examines how citation practices shape academic writing in universities.\n"
            "The second paragraph describes the method used across several disciplines."
        )
        soup = parse(format_citation(text, "APA"))
        assert [h.get_text() for h in soup.find_all("h3")] == ["Introduction", "Background", "Methods"]
        assert len(soup.find_all("p")) == 2
        assert soup.find("h2") is None

    def test_heading_threshold(self):
        """Test that the sub-heading length limit is configurable."""
        highlighter = CitationHighlighter("APA", heading_max_length=5)
        soup = parse(highlighter.format("Introduction"))
        assert soup.find("h3") is None
        assert soup.find("p").get_text() == "Introduction"

    def test_markup_is_escaped(self):
        """Test that plain text characters are escaped in the output."""
        html = format_citation("Costs rose by 5 < 6 percent & more.", "APA")
        assert "&lt;" in html
        assert "&amp;" in html

    def test_empty_input(self):
        """Test that empty input formats to an empty string."""
        assert format_citation("", "APA") == ""
        assert format_citation(None, "IEEE") == ""
        assert format_citation("   \n ", "MLA") == ""

    def test_unknown_style(self):
        """Test that an unsupported style is rejected at construction."""
        with pytest.raises(UnknownStyleError):
            CitationHighlighter("Vancouver")


class TestBibliography:
    """Test bibliography extraction and marker titles."""

    def test_synthesized_section(self):
        """Test that entries without a heading move to a synthesized section."""
        text = 'Prior work exists [1].\n[1] A. Author, "Title of paper," Journal, 2020.'
        soup = parse(format_citation(text, "IEEE"))

        heading = soup.find("h2")
        assert heading is not None
        assert heading.get_text() == "References"

        entries = soup.find_all("p", class_=ENTRY_CLASS)
        assert len(entries) == 1
        assert entries[0].get_text() == '[1] A. Author, "Title of paper," Journal, 2020.'
        assert entries[0].find("em").get_text() == '"Title of paper,"'

        found = markers(soup)
        assert len(found) == 1
        assert "A. Author" in found[0]["title"]

    def test_synthesized_section_is_ordered(self):
        """Test that numbered entries are sorted by their number."""
        text = "Both agree [1] and [2].\n[2] Second ref.\n[1] First ref."
        soup = parse(format_citation(text, "IEEE"))
        entries = [p.get_text() for p in soup.find_all("p", class_=ENTRY_CLASS)]
        assert entries == ["[1] First ref.", "[2] Second ref."]

    def test_entries_stay_under_existing_heading(self):
        """Test that entries under a references heading are rendered in place."""
        text = (
            "Smith argues the point (Smith, 2020).\n"
            "References\n"
            "Smith, J. (2020). Legal writing. Oxford Press."
        )
        soup = parse(format_citation(text, "APA"))
        assert soup.find("h2") is None
        assert [h.get_text() for h in soup.find_all("h3")] == ["References"]

        entry = soup.find("p", class_=ENTRY_CLASS)
        assert entry.find("strong").get_text() == "Smith"
        assert entry.get_text() == "Smith, J. (2020). Legal writing. Oxford Press."

        found = markers(soup)
        assert len(found) == 1
        assert found[0]["title"].startswith("Smith, J. (2020)")

    def test_legal_names_italicised(self):
        """Test that OSCOLA case names are emphasised."""
        text = "The court in Smith v Jones [2020] UKSC 1 agreed [1].\n1. Smith v Jones [2020] UKSC 1"
        soup = parse(format_citation(text, "OSCOLA"))
        body = soup.find("p")
        assert body.find("em").get_text() == "Smith v Jones"
        assert soup.find("h2").get_text() == "Footnotes"
        assert markers(soup)[0]["title"] == "Smith v Jones [2020] UKSC 1"


class TestHighlighting:
    """Test highlighting of newly added citation sentences."""

    def test_discourse_marker_sentence(self):
        """Test that only the sentence with a discourse marker is highlighted."""
        text = "According to recent work, courts adapt (Smith, 2020). Another sentence here."
        soup = parse(format_citation(text, "APA"))
        found = highlights(soup)
        assert len(found) == 1
        assert found[0].get_text() == "According to recent work, courts adapt (Smith, 2020)."
        assert found[0].find("span", class_=ANNOTATION_CLASS) is not None
        assert "Another sentence here." not in found[0].get_text()

    def test_two_markers_highlighted(self):
        """Test that a sentence with two citation markers is highlighted."""
        soup = parse(format_citation("Several studies agree [1], [2].", "IEEE"))
        assert len(highlights(soup)) == 1
        assert len(markers(soup)) == 2

    def test_is_new_citation(self):
        """Test the sentence heuristic directly."""
        assert is_new_citation("As noted by Smith, this holds.")
        assert is_new_citation("Two sources [1] agree [2].")
        assert not is_new_citation("One source agrees (Smith, 2020).")

    def test_discourse_marker_after_superscript(self):
        """Test that a discourse marker directly after a superscript is found on every pass."""
        text = "Ref¹According to Smith, the rule holds."
        assert is_new_citation(text)
        first = format_citation(text, "OSCOLA")
        second = format_citation(first, "OSCOLA")
        assert len(highlights(parse(first))) == 1
        assert len(highlights(parse(second))) == 1

    def test_discourse_marker_inside_word_ignored(self):
        """Test that a marker glued to a preceding letter does not count."""
        assert not is_new_citation("Reaccording to plan, it holds.")

    def test_existing_markup(self):
        """Test that text nodes of existing markup are highlighted in place."""
        html = "<p>According to Smith, this is new.</p><h3>See also the notes</h3>"
        soup = parse(format_citation(html, "APA"))
        found = highlights(soup)
        assert len(found) == 1
        assert found[0].parent.name == "p"
        assert soup.find("h3").find("span") is None

    def test_marked_text_untouched(self):
        """Test that text inside a mark element is never highlighted."""
        html = '<p><mark class="uncited">According to Smith (Smith, 2020)</mark> it holds.</p>'
        soup = parse(format_citation(html, "APA"))
        assert highlights(soup) == []

    @pytest.mark.parametrize("style", ["APA", "IEEE", "OSCOLA", "MLA"])
    def test_idempotent(self, style):
        """Test that formatting its own output adds no nested highlights."""
        text = (
            "Overview\n"
            "According to recent work, courts adapt (Smith, 2020) [1]. Another sentence here.\n"
            "Several studies agree [1], [2].\n"
            "[1] First ref.\n"
            "[2] Second ref."
        )
        first = format_citation(text, style)
        second = format_citation(first, style)
        soup_first, soup_second = parse(first), parse(second)

        assert len(highlights(soup_second)) == len(highlights(soup_first))
        assert len(markers(soup_second)) == len(markers(soup_first))
        for span in highlights(soup_second):
            assert span.find_parent("span", class_=HIGHLIGHT_CLASS) is None
            assert span.find_parent("span", class_=ANNOTATION_CLASS) is None

    def test_malformed_input_does_not_raise(self):
        """Test that odd input still returns a string."""
        assert isinstance(format_citation("<<<>>> [ ( ^", "IEEE"), str)
        assert isinstance(format_citation("<p>unclosed <em>tag", "OSCOLA"), str)


class TestRestyleAnnotations:
    """Test rewrapping annotated citations in another style's brackets."""

    def test_bracketed_style(self):
        """Test that bracket-numbered styles use square brackets."""
        html = '<p>Text <span data-citation="Smith 2020">(Smith 2020)</span></p>'
        soup = parse(restyle_annotations(html, "IEEE"))
        span = soup.find("span")
        assert span.get_text() == "[Smith 2020]"
        assert span["data-style"] == "IEEE"

    def test_author_style(self):
        """Test that author styles use parentheses."""
        html = '<p>Text <span data-citation="[Smith 2020]">[Smith 2020]</span></p>'
        soup = parse(restyle_annotations(html, "APA"))
        assert soup.find("span").get_text() == "(Smith 2020)"

    def test_spans_without_payload_untouched(self):
        """Test that ordinary spans are left as they are."""
        html = '<p><span class="other">keep me</span></p>'
        assert parse(restyle_annotations(html, "OSCOLA")).find("span").get_text() == "keep me"


class TestAngleBrackets:
    """Test plain text that holds angle-bracketed URLs or addresses."""

    def test_has_markup(self):
        """Test that only known rich-text elements count as markup."""
        assert not has_markup("Title. <https://doi.org/10.1/x>")
        assert not has_markup("Written by Smith <smith@uni.edu>.")
        assert has_markup("<p>Text</p>")
        assert has_markup("Some <em>emphasised</em> words")

    def test_doi_entry_formats_as_plain_text(self):
        """Test that a bibliography entry ending in a bracketed DOI keeps the body layout."""
        text = (
            "Introduction\n"
            "The first paragraph.\n"
            "References\n"
            "Smith, J. (2020). Title. <https://doi.org/10.1/x>"
        )
        html = format_citation(text, "APA")
        soup = parse(html)
        assert [h.get_text() for h in soup.find_all("h3")] == ["Introduction", "References"]
        assert soup.find("p").get_text() == "The first paragraph."
        entry = soup.find("p", class_=ENTRY_CLASS)
        assert entry.get_text() == "Smith, J. (2020). Title. <https://doi.org/10.1/x>"
        assert "&lt;https://doi.org/10.1/x&gt;" in html

    def test_email_in_body(self):
        """Test that an e-mail address in angle brackets stays visible text."""
        soup = parse(format_citation("Smith <smith@uni.edu> argues the point.", "APA"))
        assert soup.find("p").get_text() == "Smith <smith@uni.edu> argues the point."
