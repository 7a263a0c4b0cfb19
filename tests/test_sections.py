"""Unit tests for the section codec."""
from hypothesis import given
from hypothesis import strategies as st

from clinscribe.sections import (
    HEADERS,
    Sections,
    compose_text,
    extract_sections,
    replace_document,
    word_count,
)

_LABEL_WORDS = ("potential", "helpful", "clinical")
_PLACEHOLDERS = {header.placeholder for header in HEADERS}

section_body = (
    st.text(alphabet=st.characters(min_codepoint=32, max_codepoint=126) | st.just("\n"), max_size=200)
    .map(str.strip)
    .filter(lambda s: not any(word in s.lower() for word in _LABEL_WORDS))
    .filter(lambda s: s not in _PLACEHOLDERS)
)

sections_strategy = st.builds(
    Sections,
    potential_issues=section_body,
    helpful_content=section_body,
    document=section_body,
)


class TestExtractSections:
    """Tests for extract_sections."""

    def test_extract_all_sections(self):
        """Test splitting a well-formed note."""
        text = (
            "Potential Transcription Errors:\n'metoprolol' may be 'metformin'\n\n"
            "Helpful Content:\nConsider ECG.\n\n"
            "Clinical Document:\nHPI: chest pain x2h\nPlan: observe\n"
        )
        sections = extract_sections(text)

        assert sections.potential_issues == "'metoprolol' may be 'metformin'"
        assert sections.helpful_content == "Consider ECG."
        assert sections.document == "HPI: chest pain x2h\nPlan: observe"

    def test_empty_input_yields_empty_sections(self):
        """Test that None and blank text never raise."""
        assert extract_sections(None) == Sections()
        assert extract_sections("") == Sections()

    def test_text_without_headers_yields_empty_sections(self):
        """Test that unrecognized text is not assigned to any section."""
        assert extract_sections("Just some prose about a patient.") == Sections()

    def test_missing_section_is_empty(self):
        """Test that an absent header yields an empty field."""
        text = "Helpful Content:\nhydrate\n\nClinical Document:\nNote body"
        sections = extract_sections(text)

        assert sections.potential_issues == ""
        assert sections.helpful_content == "hydrate"
        assert sections.document == "Note body"

    def test_placeholder_body_is_empty(self):
        """Test that a placeholder body reads back as empty."""
        text = compose_text(Sections(document="Note"))
        sections = extract_sections(text)

        assert sections.potential_issues == ""
        assert sections.helpful_content == ""
        assert sections.document == "Note"

    def test_alternate_label_and_decorations(self):
        """Test numbered, markdown and alternate header forms."""
        text = (
            "## 1) Potential Transcription Recommendations\nCheck dose\n"
            "2. helpful content:\nNone needed\n"
            "   3) CLINICAL DOCUMENT:\nAssessment: stable\n"
        )
        sections = extract_sections(text)

        assert sections.potential_issues == "Check dose"
        assert sections.helpful_content == "None needed"
        assert sections.document == "Assessment: stable"

        combined = extract_sections(
            "Potential Transcription Errors/Recommendations:\nNone\n"
            "Helpful Content:\nfoo\nClinical Document:\nbar"
        )
        assert combined.potential_issues == "None"
        assert combined.document == "bar"

    def test_out_of_order_headers(self):
        """Test that sections are cut by position, not canonical order."""
        text = "Clinical Document:\nBody\nHelpful Content:\nTip"
        sections = extract_sections(text)

        assert sections.document == "Body"
        assert sections.helpful_content == "Tip"

    def test_header_must_start_line(self):
        """Test that a label in the middle of a line is not a header."""
        text = "Clinical Document:\nSee the Helpful Content: above"
        sections = extract_sections(text)

        assert sections.document == "See the Helpful Content: above"
        assert sections.helpful_content == ""

    @given(sections_strategy)
    def test_extract_is_case_insensitive(self, sections: Sections):
        """Property test: upper-casing the headers does not change the result."""
        text = compose_text(sections)
        for header in HEADERS:
            text = text.replace(f"{header.label}:", f"{header.label.upper()}:")
        assert extract_sections(text) == sections


class TestComposeText:
    """Tests for compose_text."""

    def test_compose_layout(self):
        """Test the canonical header layout."""
        text = compose_text(Sections(potential_issues="a", helpful_content="b", document="c"))

        assert text == (
            "Potential Transcription Errors:\na\n\n"
            "Helpful Content:\nb\n\n"
            "Clinical Document:\nc\n"
        )

    def test_compose_empty_uses_placeholders(self):
        """Test that empty fields are written as placeholders."""
        text = compose_text(Sections())

        for header in HEADERS:
            assert f"{header.label}:\n{header.placeholder}\n" in text

    @given(sections_strategy)
    def test_round_trip(self, sections: Sections):
        """Property test: extracting composed text restores the sections."""
        assert extract_sections(compose_text(sections)) == sections

    @given(sections_strategy)
    def test_compose_is_idempotent(self, sections: Sections):
        """Property test: composing re-extracted sections is byte-identical."""
        once = compose_text(sections)
        twice = compose_text(extract_sections(once))
        assert once == twice


class TestReplaceDocument:
    """Tests for replace_document and word_count."""

    def test_replace_document_keeps_other_sections(self):
        """Test that editing the document preserves issues and helpful content."""
        original = compose_text(
            Sections(potential_issues="typo?", helpful_content="tip", document="old")
        )
        updated = extract_sections(replace_document(original, "  new body  "))

        assert updated.potential_issues == "typo?"
        assert updated.helpful_content == "tip"
        assert updated.document == "new body"

    def test_word_count(self):
        """Test whitespace-delimited counting."""
        assert word_count("HPI: chest pain x2h") == 4
        assert word_count("  ") == 0
        assert word_count("") == 0
