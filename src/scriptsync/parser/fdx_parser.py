"""FDX scene parser.

Extracts scene headings, scene numbers and page lengths from Final Draft
interchange documents in a single streaming pass. Exports from different
tools encode headings inconsistently: some use a dedicated ``SceneHeading``
tag, some style a ``Paragraph`` through one of several attribute names, and
some leave the paragraph unstyled so only its text identifies it.
"""

from __future__ import annotations

import re
import xml.sax
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from scriptsync.config import get_logger
from scriptsync.parser.fdx_events import (
    Characters,
    ElementEnd,
    ElementStart,
    FDXEvent,
    FDXSource,
    iter_events,
    open_source,
)
from scriptsync.utils.screenplay import ScreenplayUtils

logger = get_logger(__name__)

PARAGRAPH = "Paragraph"
SCENE_HEADING = "SceneHeading"
SCENE_PROPERTIES = "SceneProperties"

# Attribute names that commonly carry a paragraph's style
STYLE_ATTRIBUTE_KEYS: tuple[str, ...] = (
    "Type",
    "type",
    "Style",
    "style",
    "ParagraphStyle",
    "paragraphStyle",
    "ParaStyle",
    "paraStyle",
    "Class",
    "class",
    "Element",
    "element",
)

_INTEGER = re.compile(r"^[+-]?\d+$")
_DECIMAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


@dataclass
class FDXScene:
    """A scene found by the parser.

    ``heading`` is normalized to uppercase; ``page_length_eighths`` is 0
    when the document does not specify a length.
    """

    number: str
    heading: str
    page_length_eighths: int = 0


class HeadingClassification(Enum):
    """How a paragraph-level element relates to scene headings."""

    CONFIRMED = "confirmed"
    TENTATIVE = "tentative"
    NOT_HEADING = "not_heading"


class ParserState(Enum):
    IDLE = "idle"
    INSIDE_HEADING = "inside_heading"
    INSIDE_TENTATIVE_HEADING = "inside_tentative_heading"


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def parse_length_to_eighths(raw: str) -> int | None:
    """Parse an FDX page length into eighths of a page.

    Accepts whole pages (``"3"`` -> 24), fractions (``"1/2"`` -> 4),
    whole plus fraction (``"2 3/8"`` -> 19) and decimals (``"1.5"`` -> 12).

    Args:
        raw: Length attribute value

    Returns:
        Length in eighths, or None when the value is empty or unparseable
    """
    text = raw.strip()
    if not text:
        return None

    if " " in text and "/" in text:
        whole, _, fraction = text.partition(" ")
        if _INTEGER.match(whole):
            return int(whole) * 8 + (parse_length_to_eighths(fraction) or 0)

    if "/" in text:
        numerator, _, denominator = text.partition("/")
        if (
            "/" not in denominator
            and _INTEGER.match(numerator)
            and _INTEGER.match(denominator)
            and int(denominator) != 0
        ):
            return _round_half_up(Decimal(int(numerator) * 8) / Decimal(int(denominator)))

    if _INTEGER.match(text):
        return int(text) * 8

    if _DECIMAL.match(text):
        try:
            return _round_half_up(Decimal(text) * 8)
        except InvalidOperation:
            return None

    return None


def _value_looks_like_heading(raw: str) -> bool:
    value = raw.lower()
    return (
        "slug" in value
        or value == "scene heading"
        or ("scene" in value and "heading" in value)
        or "sceneheading" in value.replace(" ", "")
    )


def attributes_look_like_heading(attrs: Mapping[str, str]) -> bool:
    """Check whether an element's attributes mark it as a scene heading.

    Known style attributes are checked first, then every attribute value
    regardless of its name.
    """
    for key in STYLE_ATTRIBUTE_KEYS:
        value = attrs.get(key)
        if value is not None and _value_looks_like_heading(value):
            return True
    return any(_value_looks_like_heading(value) for value in attrs.values())


def classify_element(name: str, attrs: Mapping[str, str]) -> HeadingClassification:
    """First classification stage, run when an element opens.

    Unstyled paragraphs stay tentative until their text is known.
    """
    if name == SCENE_HEADING:
        return HeadingClassification.CONFIRMED
    if name != PARAGRAPH:
        return HeadingClassification.NOT_HEADING
    if attributes_look_like_heading(attrs):
        return HeadingClassification.CONFIRMED
    return HeadingClassification.TENTATIVE


def _first_attribute(attrs: Mapping[str, str], *keys: str) -> str | None:
    for key in keys:
        if key in attrs:
            return attrs[key]
    return None


class _SceneCollector:
    """Per-parse state machine fed with FDX events."""

    def __init__(self) -> None:
        self.scenes: list[FDXScene] = []
        self.state = ParserState.IDLE
        self.heading_text: list[str] = []
        self.pending_number = ""
        self.pending_length: int | None = None
        self.last_unnumbered_index: int | None = None
        self.heading_number = ""
        self.heading_length: int | None = None

    def handle(self, event: FDXEvent) -> None:
        if isinstance(event, ElementStart):
            self._start(event.name, event.attrs)
        elif isinstance(event, Characters):
            if self.state is not ParserState.IDLE:
                self.heading_text.append(event.text)
        elif isinstance(event, ElementEnd):
            self._end(event.name)

    def _start(self, name: str, attrs: Mapping[str, str]) -> None:
        if name == SCENE_PROPERTIES:
            self._scene_properties(attrs)

        if name not in (PARAGRAPH, SCENE_HEADING):
            return

        self.heading_text = []
        classification = classify_element(name, attrs)
        if classification is HeadingClassification.CONFIRMED:
            self.state = ParserState.INSIDE_HEADING
            number = (_first_attribute(attrs, "Number", "number") or "").strip()
            self.heading_number = number
            raw_length = _first_attribute(attrs, "Length", "length")
            self.heading_length = (
                parse_length_to_eighths(raw_length) if raw_length is not None else None
            )
        else:
            self.state = ParserState.INSIDE_TENTATIVE_HEADING

    def _scene_properties(self, attrs: Mapping[str, str]) -> None:
        # Values attach to the last scene only while it lacks a number,
        # otherwise they wait for the next scene to finalize
        target = self.last_unnumbered_index

        number = (_first_attribute(attrs, "Number", "number") or "").strip()
        if number:
            if target is not None:
                self.scenes[target].number = number
                self.last_unnumbered_index = None
            else:
                self.pending_number = number

        raw_length = _first_attribute(attrs, "Length", "length", "PageLength", "pageLength")
        if raw_length is None:
            return
        length = parse_length_to_eighths(raw_length)
        if length is None:
            return
        if target is not None:
            self.scenes[target].page_length_eighths = length
        else:
            self.pending_length = length

    def _end(self, name: str) -> None:
        if name not in (PARAGRAPH, SCENE_HEADING):
            return

        text = ScreenplayUtils.normalize_heading_text("".join(self.heading_text))
        is_heading = self.state is ParserState.INSIDE_HEADING or (
            self.state is ParserState.INSIDE_TENTATIVE_HEADING
            and ScreenplayUtils.looks_like_heading(text)
        )
        if is_heading and text:
            self._finalize(text)

        self.state = ParserState.IDLE
        self.heading_text = []
        self.heading_number = ""
        self.heading_length = None

    def _finalize(self, heading: str) -> None:
        number = self.heading_number or self.pending_number
        if self.heading_length is not None:
            length = self.heading_length
        elif self.pending_length is not None:
            length = self.pending_length
        else:
            length = 0

        self.scenes.append(FDXScene(number=number, heading=heading, page_length_eighths=length))

        if self.pending_number and number == self.pending_number:
            self.pending_number = ""
        self.pending_length = None
        self.last_unnumbered_index = len(self.scenes) - 1 if not number else None


class FDXParser:
    """Parse FDX documents into ordered scene records.

    The parser never raises for bad input: an unreadable source yields an
    empty list and a malformed document yields the scenes recognized before
    the error. Instances hold no state between calls.
    """

    def parse(self, source: FDXSource) -> list[FDXScene]:
        """Parse an FDX source.

        Args:
            source: Raw bytes, a file path, or a binary file object

        Returns:
            Scenes in document order
        """
        try:
            stream = open_source(source)
        except OSError as e:
            logger.warning("Could not open FDX source", error=str(e))
            return []

        try:
            return self.parse_events(iter_events(stream))
        finally:
            if stream is not source:
                stream.close()

    def parse_events(self, events: Iterable[FDXEvent]) -> list[FDXScene]:
        """Run the scene state machine over an event sequence."""
        collector = _SceneCollector()
        try:
            for event in events:
                collector.handle(event)
        except xml.sax.SAXParseException as e:
            logger.warning(
                "FDX document is not well-formed, keeping scenes parsed so far",
                error=str(e),
                scenes=len(collector.scenes),
            )
        logger.debug("Parsed FDX scenes", count=len(collector.scenes))
        return collector.scenes
