"""Tests for the streaming FDX scene parser."""

import io

import pytest

from scriptsync.parser.fdx_parser import (
    FDXParser,
    FDXScene,
    HeadingClassification,
    attributes_look_like_heading,
    classify_element,
    parse_length_to_eighths,
)


def fdx(content: str) -> bytes:
    """Wrap paragraph markup in a minimal FinalDraft document."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<FinalDraft DocumentType="Script"><Content>{content}</Content></FinalDraft>'
    ).encode()


class TestParseLengthToEighths:
    """Test page length parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("3", 24),
            ("1/2", 4),
            ("3/8", 3),
            ("2 3/8", 19),
            ("1 2/8", 10),
            ("1.5", 12),
            (" 4/8 ", 4),
            ("3/16", 2),
        ],
    )
    def test_supported_forms(self, raw, expected):
        """Test whole, fractional, mixed and decimal lengths."""
        assert parse_length_to_eighths(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "abc", "1/0", "1/2/3", "two"])
    def test_unparseable_is_none_not_zero(self, raw):
        """Test that empty or unparseable lengths are absent rather than zero."""
        assert parse_length_to_eighths(raw) is None


class TestHeadingClassification:
    """Test the two-stage heading classifier."""

    def test_dedicated_tag_is_confirmed(self):
        """Test that SceneHeading elements are always headings."""
        assert classify_element("SceneHeading", {}) is HeadingClassification.CONFIRMED

    def test_styled_paragraph_is_confirmed(self):
        """Test paragraphs styled as headings through known attributes."""
        assert (
            classify_element("Paragraph", {"Type": "Scene Heading"})
            is HeadingClassification.CONFIRMED
        )
        assert (
            classify_element("Paragraph", {"style": "Slugline"})
            is HeadingClassification.CONFIRMED
        )
        assert (
            classify_element("Paragraph", {"ParaStyle": "Scene-Heading"})
            is HeadingClassification.CONFIRMED
        )

    def test_unstyled_paragraph_is_tentative(self):
        """Test that other paragraphs wait for their text."""
        assert (
            classify_element("Paragraph", {"Type": "Action"})
            is HeadingClassification.TENTATIVE
        )
        assert classify_element("Paragraph", {}) is HeadingClassification.TENTATIVE

    def test_other_elements_are_not_headings(self):
        """Test that non-paragraph elements are never headings."""
        assert classify_element("Text", {}) is HeadingClassification.NOT_HEADING
        assert (
            classify_element("SceneProperties", {"Type": "Scene Heading"})
            is HeadingClassification.NOT_HEADING
        )

    def test_any_attribute_value_is_checked(self):
        """Test that nonstandard attribute names still mark headings."""
        assert attributes_look_like_heading({"Kind": "sceneHeading"})
        assert attributes_look_like_heading({"x-role": "Scene Heading"})
        assert not attributes_look_like_heading({"Kind": "Dialogue"})
        assert not attributes_look_like_heading({})


class TestFDXParser:
    """Test scene extraction from FDX documents."""

    def test_heading_number_with_properties_length(self):
        """Test a numbered heading whose length comes from its properties."""
        data = fdx(
            '<SceneHeading Number="12A">'
            "<Text>INT. KITCHEN - DAY</Text>"
            '<SceneProperties Length="2 3/8"/>'
            "</SceneHeading>"
        )

        scenes = FDXParser().parse(data)

        assert scenes == [FDXScene(number="12A", heading="INT. KITCHEN - DAY", page_length_eighths=19)]

    def test_unstyled_paragraph_detected_by_prefix(self):
        """Test plain paragraphs that start like headings."""
        data = fdx(
            "<Paragraph><Text>ext. alley - night</Text></Paragraph>"
            "<Paragraph><Text>He walks to the door.</Text></Paragraph>"
        )

        scenes = FDXParser().parse(data)

        assert len(scenes) == 1
        assert scenes[0].heading == "EXT. ALLEY - NIGHT"
        assert scenes[0].number == ""
        assert scenes[0].page_length_eighths == 0

    def test_action_paragraph_is_never_a_heading(self):
        """Test that ordinary action text is ignored."""
        data = fdx('<Paragraph Type="Action"><Text>He walks to the door.</Text></Paragraph>')

        assert FDXParser().parse(data) == []

    def test_heading_attributes_and_text_normalization(self):
        """Test attribute lengths and newline collapsing in heading text."""
        data = fdx(
            '<Paragraph Type="Scene Heading" number=" 4 " length="1/2">'
            "<Text>int. office\n- day</Text>"
            "</Paragraph>"
        )

        scenes = FDXParser().parse(data)

        assert scenes[0].number == "4"
        assert scenes[0].heading == "INT. OFFICE - DAY"
        assert scenes[0].page_length_eighths == 4

    def test_pending_number_from_preceding_properties(self):
        """Test that properties seen before any scene number the next heading."""
        data = fdx(
            '<SceneProperties Number="7" Length="1"/>'
            '<Paragraph Type="Scene Heading"><Text>INT. HALL - DAY</Text></Paragraph>'
        )

        scenes = FDXParser().parse(data)

        assert scenes == [FDXScene(number="7", heading="INT. HALL - DAY", page_length_eighths=8)]

    def test_properties_number_carried_to_unnumbered_scene(self):
        """Test that a later number attaches to the last unnumbered scene."""
        data = fdx(
            '<Paragraph Type="Scene Heading"><Text>INT. A - DAY</Text></Paragraph>'
            '<SceneProperties Number="4" Length="1"/>'
            '<Paragraph Type="Scene Heading" Number="5"><Text>INT. B - DAY</Text></Paragraph>'
        )

        scenes = FDXParser().parse(data)

        assert [s.number for s in scenes] == ["4", "5"]
        assert scenes[0].page_length_eighths == 8
        assert scenes[1].page_length_eighths == 0

    def test_properties_number_pending_when_last_scene_numbered(self):
        """Test that a number becomes pending when the last scene has one."""
        data = fdx(
            '<Paragraph Type="Scene Heading" Number="1"><Text>INT. A - DAY</Text></Paragraph>'
            '<SceneProperties Number="9"/>'
            '<Paragraph Type="Scene Heading"><Text>INT. B - DAY</Text></Paragraph>'
        )

        scenes = FDXParser().parse(data)

        assert [s.number for s in scenes] == ["1", "9"]

    def test_nested_lengths_stay_with_their_numbered_headings(self):
        """Test that each numbered heading keeps the length nested inside it."""
        data = fdx(
            '<Paragraph Type="Scene Heading" Number="1">'
            '<SceneProperties Length="1 2/8"/><Text>INT. A - DAY</Text>'
            "</Paragraph>"
            '<Paragraph Type="Scene Heading" Number="2">'
            '<SceneProperties Length="3/8"/><Text>INT. B - DAY</Text>'
            "</Paragraph>"
        )

        scenes = FDXParser().parse(data)

        assert [s.page_length_eighths for s in scenes] == [10, 3]

    def test_properties_length_pending_when_last_scene_numbered(self):
        """Test that a length becomes pending when the last scene has a number."""
        data = fdx(
            '<Paragraph Type="Scene Heading" Number="1" Length="2"><Text>INT. A - DAY</Text></Paragraph>'
            '<SceneProperties Length="5/8"/>'
            '<Paragraph Type="Scene Heading"><Text>INT. B - DAY</Text></Paragraph>'
            '<Paragraph Type="Scene Heading"><Text>INT. C - DAY</Text></Paragraph>'
        )

        scenes = FDXParser().parse(data)

        assert [s.page_length_eighths for s in scenes] == [16, 5, 0]

    def test_sample_document_lengths(self, sample_fdx):
        """Test lengths of a Final Draft export with nested scene properties."""
        scenes = FDXParser().parse(sample_fdx)

        assert [(s.number, s.page_length_eighths) for s in scenes] == [
            ("1", 10),
            ("2", 4),
            ("3", 0),
        ]

    def test_heading_attribute_number_wins_over_pending(self):
        """Test number precedence at heading finalization."""
        data = fdx(
            '<SceneProperties Number="2"/>'
            '<SceneHeading Number="3"><Text>INT. A - DAY</Text></SceneHeading>'
        )

        assert FDXParser().parse(data)[0].number == "3"

    def test_empty_heading_text_is_discarded(self):
        """Test that headings with no text after normalization are dropped."""
        data = fdx(
            '<SceneHeading Number="1"><Text>   \n  </Text></SceneHeading>'
            '<SceneHeading Number="2"><Text>INT. B - DAY</Text></SceneHeading>'
        )

        scenes = FDXParser().parse(data)

        assert [s.number for s in scenes] == ["2"]

    def test_malformed_document_keeps_scenes_parsed_so_far(self):
        """Test that a well-formedness error returns the partial result."""
        data = (
            b"<FinalDraft><Content>"
            b'<SceneHeading Number="1"><Text>INT. A - DAY</Text></SceneHeading>'
            b"<Paragraph><Text>EXT. B - NIGHT</Wrong>"
        )

        scenes = FDXParser().parse(data)

        assert [s.heading for s in scenes] == ["INT. A - DAY"]

    def test_not_xml_returns_empty(self):
        """Test that garbage input yields no scenes."""
        assert FDXParser().parse(b"this is not xml") == []

    def test_missing_file_returns_empty(self, tmp_path):
        """Test that an unreadable path yields no scenes."""
        assert FDXParser().parse(tmp_path / "missing.fdx") == []

    def test_parse_path_and_stream(self, tmp_path, sample_fdx):
        """Test that paths, strings and binary streams are accepted."""
        path = tmp_path / "script.fdx"
        path.write_bytes(sample_fdx)

        from_path = FDXParser().parse(path)
        from_str = FDXParser().parse(str(path))
        from_stream = FDXParser().parse(io.BytesIO(sample_fdx))

        assert [s.heading for s in from_path] == [
            "INT. KITCHEN - DAY",
            "EXT. ALLEY - NIGHT",
            "INT./EXT. CAR - CONTINUOUS",
        ]
        assert from_str == from_path
        assert from_stream == from_path

    def test_stream_not_closed_by_parser(self, sample_fdx):
        """Test that caller-owned streams stay open."""
        stream = io.BytesIO(sample_fdx)

        FDXParser().parse(stream)

        assert not stream.closed

    def test_parser_is_reusable(self):
        """Test that no state carries over between parses."""
        parser = FDXParser()
        first = parser.parse(fdx('<SceneProperties Number="8"/>'))
        second = parser.parse(
            fdx('<SceneHeading><Text>INT. A - DAY</Text></SceneHeading>')
        )

        assert first == []
        assert second[0].number == ""
