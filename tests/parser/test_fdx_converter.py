"""Tests for converting FDX documents into screenplay documents."""

import pytest

from scriptsync.exceptions import ParseError
from scriptsync.models.element import ScriptElementType
from scriptsync.parser.fdx_converter import FDXDocumentConverter, revision_color_from_fdx


def fdx(content: str, extra: str = "") -> bytes:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f"<FinalDraft><Content>{content}</Content>{extra}</FinalDraft>"
    ).encode()


class TestRevisionColorFromFdx:
    """Test revision color name normalization."""

    def test_title_cases_names(self):
        """Test that lowercase names are title-cased."""
        assert revision_color_from_fdx("blue") == "Blue"
        assert revision_color_from_fdx("  GOLDENROD ") == "Goldenrod"

    def test_special_names(self):
        """Test empty and gray spellings."""
        assert revision_color_from_fdx("") == "White"
        assert revision_color_from_fdx("grey") == "Gray"
        assert revision_color_from_fdx("Gray") == "Gray"


class TestFDXDocumentConverter:
    """Test full document conversion."""

    def test_converts_sample_document(self, sample_fdx):
        """Test elements, title page and scene metadata."""
        document = FDXDocumentConverter().convert_strict(sample_fdx)

        assert document.title == "Coffee Run"
        assert document.author == "Jo Writer"
        assert [e.type for e in document.elements] == [
            ScriptElementType.SCENE_HEADING,
            ScriptElementType.ACTION,
            ScriptElementType.CHARACTER,
            ScriptElementType.DIALOGUE,
            ScriptElementType.SCENE_HEADING,
            ScriptElementType.ACTION,
            ScriptElementType.SCENE_HEADING,
            ScriptElementType.ACTION,
        ]
        headings = [document.elements[i] for i in document.scene_heading_indices()]
        assert [h.text for h in headings] == [
            "INT. KITCHEN - DAY",
            "EXT. ALLEY - NIGHT",
            "INT./EXT. CAR - CONTINUOUS",
        ]
        assert [h.scene_number for h in headings] == ["1", "2", "3"]
        assert [h.page_eighths for h in headings] == [10, 4, None]
        assert document.characters == ["SARAH"]

    def test_unnumbered_headings_use_ordinal(self):
        """Test that headings without numbers are numbered by position."""
        data = fdx(
            '<Paragraph Type="Scene Heading"><Text>INT. A - DAY</Text></Paragraph>'
            '<Paragraph Type="Action"><Text>Something happens.</Text></Paragraph>'
            '<Paragraph Type="Scene Heading"><Text>INT. B - DAY</Text></Paragraph>'
        )

        document = FDXDocumentConverter().convert_strict(data)

        headings = [document.elements[i] for i in document.scene_heading_indices()]
        assert [h.scene_number for h in headings] == ["1", "2"]

    def test_omitted_scene_and_placeholder_text(self):
        """Test omitted flags and headings without text."""
        data = fdx(
            '<Paragraph Type="Scene Heading" Number="4">'
            '<SceneProperties Omitted="Yes" Length="1/8"/>'
            "</Paragraph>"
        )

        document = FDXDocumentConverter().convert_strict(data)

        heading = document.elements[0]
        assert heading.is_omitted
        assert heading.text == "SCENE 4"
        assert heading.page_eighths == 1

    def test_revision_colors(self):
        """Test document and paragraph revision colors."""
        data = fdx(
            '<Paragraph Type="Action"><Text RevisionColor="pink">Changed line.</Text></Paragraph>'
            '<Paragraph Type="Action"><Text>Unchanged line.</Text></Paragraph>',
            extra=(
                "<Revisions>"
                '<Revision Color="blue" ID="1"/>'
                '<Revision Color="pink" ID="2"/>'
                "</Revisions>"
            ),
        )

        document = FDXDocumentConverter().convert_strict(data)

        assert document.current_revision_color == "Pink"
        assert document.elements[0].revision_color == "Pink"
        assert document.elements[0].has_revision_mark
        assert not document.elements[1].has_revision_mark

    def test_unknown_paragraph_type_is_general(self):
        """Test that unrecognized paragraph types map to general elements."""
        data = fdx('<Paragraph Type="Cast List"><Text>SARAH, TOM</Text></Paragraph>')

        document = FDXDocumentConverter().convert_strict(data)

        assert document.elements[0].type == ScriptElementType.GENERAL

    def test_empty_paragraphs_are_skipped(self):
        """Test that paragraphs without text produce no elements."""
        data = fdx('<Paragraph Type="Action"><Text>  </Text></Paragraph>')

        assert FDXDocumentConverter().convert_strict(data).elements == []

    def test_title_fallback(self):
        """Test that the given title is used without a title page."""
        document = FDXDocumentConverter().convert_strict(fdx(""), title="draft-3")

        assert document.title == "draft-3"

    def test_strict_raises_on_malformed_xml(self):
        """Test that strict conversion reports well-formedness errors."""
        with pytest.raises(ParseError) as exc_info:
            FDXDocumentConverter().convert_strict(b"<FinalDraft><Content></FinalDraft>")

        assert "not well-formed" in exc_info.value.message
        assert "line" in exc_info.value.details

    def test_strict_raises_on_missing_file(self, tmp_path):
        """Test that strict conversion reports unreadable files."""
        with pytest.raises(ParseError, match="Cannot read FDX document"):
            FDXDocumentConverter().convert_strict(tmp_path / "nope.fdx")

    def test_lenient_returns_none(self, tmp_path):
        """Test that lenient conversion returns None instead of raising."""
        converter = FDXDocumentConverter()

        assert converter.convert(b"garbage") is None
        assert converter.convert(tmp_path / "nope.fdx") is None
