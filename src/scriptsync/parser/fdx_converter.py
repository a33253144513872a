"""Convert complete FDX documents into screenplay documents."""

from __future__ import annotations

import xml.sax
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from scriptsync.config import get_logger
from scriptsync.exceptions import ParseError
from scriptsync.models.element import ScriptElement, ScriptElementType
from scriptsync.models.screenplay import ScreenplayDocument
from scriptsync.parser.fdx_events import (
    Characters,
    ElementEnd,
    ElementStart,
    FDXEvent,
    FDXSource,
    iter_events,
    open_source,
)
from scriptsync.parser.fdx_parser import parse_length_to_eighths

logger = get_logger(__name__)

# Final Draft paragraph types; anything else becomes a general element
FDX_ELEMENT_TYPES: dict[str, ScriptElementType] = {
    "Scene Heading": ScriptElementType.SCENE_HEADING,
    "Action": ScriptElementType.ACTION,
    "Character": ScriptElementType.CHARACTER,
    "Parenthetical": ScriptElementType.PARENTHETICAL,
    "Dialogue": ScriptElementType.DIALOGUE,
    "Transition": ScriptElementType.TRANSITION,
    "Shot": ScriptElementType.SHOT,
}

_TITLE_FIELDS = {
    "title": "title",
    "written by": "author",
    "writtenby": "author",
    "author": "author",
}


def revision_color_from_fdx(value: str) -> str:
    """Normalize an FDX revision color name (``"blue"`` -> ``"Blue"``)."""
    normalized = value.strip().lower()
    if not normalized:
        return "White"
    if normalized in {"gray", "grey"}:
        return "Gray"
    return normalized.title()


def _attr(attrs: Mapping[str, str], key: str) -> str | None:
    """Case-insensitive attribute lookup, exact key first."""
    if key in attrs:
        return attrs[key]
    lower = key.lower()
    for name, value in attrs.items():
        if name.lower() == lower:
            return value
    return None


@dataclass
class _PendingHeading:
    ordinal: int
    number: str | None = None
    text: list[str] = field(default_factory=list)
    page_eighths: int | None = None
    is_omitted: bool = False
    revision_color: str | None = None


class _DocumentBuilder:
    """Event handler that assembles elements paragraph by paragraph.

    Scene headings stay pending until the next top-level paragraph begins
    so that ``SceneProperties`` and ``SceneNumber`` children seen anywhere
    inside the heading can still attach to it.
    """

    def __init__(self) -> None:
        self.elements: list[ScriptElement] = []
        self.title = ""
        self.author = ""
        self.revision_colors: list[str] = []
        self.scene_count = 0

        self.depth = 0
        self.in_title_page = False
        self.in_revisions = False
        self.in_text = False
        self.title_field: str | None = None
        self.paragraph_type = ""
        self.paragraph_text: list[str] = []
        self.paragraph_color: str | None = None
        self.in_scene_number = False
        self.scene_number_text: list[str] = []
        self.pending: _PendingHeading | None = None

    def handle(self, event: FDXEvent) -> None:
        if isinstance(event, ElementStart):
            self._start(event.name.lower(), event.attrs)
        elif isinstance(event, Characters):
            self._characters(event.text)
        elif isinstance(event, ElementEnd):
            self._end(event.name.lower())

    def finish(self) -> None:
        self._finalize_heading()

    def _start(self, name: str, attrs: Mapping[str, str]) -> None:
        if name == "titlepage":
            self.in_title_page = True
        elif name == "revisions":
            self.in_revisions = True
        elif name == "revision" and self.in_revisions:
            color = _attr(attrs, "Color")
            if color is not None:
                self.revision_colors.append(revision_color_from_fdx(color))
        elif name in _TITLE_FIELDS and self.in_title_page:
            self.title_field = _TITLE_FIELDS[name]
        elif name == "paragraph":
            self._start_paragraph(attrs)
        elif name == "text":
            self.in_text = True
            color = _attr(attrs, "RevisionColor")
            if color:
                self.paragraph_color = revision_color_from_fdx(color)
        elif name == "sceneproperties" and not self.in_title_page:
            self._scene_properties(attrs)
        elif name in {"scenenumber", "number"} and self.pending is not None:
            self.in_scene_number = True
            self.scene_number_text = []

    def _start_paragraph(self, attrs: Mapping[str, str]) -> None:
        self.depth += 1
        if self.depth != 1 or self.in_title_page:
            return

        self._finalize_heading()
        self.paragraph_type = _attr(attrs, "Type") or "Action"
        self.paragraph_text = []
        self.paragraph_color = None
        if "scene heading" in self.paragraph_type.lower():
            self.scene_count += 1
            number = _attr(attrs, "Number") or _attr(attrs, "SceneNumber")
            self.pending = _PendingHeading(ordinal=self.scene_count, number=number or None)

    def _scene_properties(self, attrs: Mapping[str, str]) -> None:
        if self.pending is None:
            # Some exports mark scenes only through their properties
            self.scene_count += 1
            self.pending = _PendingHeading(ordinal=self.scene_count)
            self.paragraph_text = []

        number = _attr(attrs, "Number")
        if number:
            self.pending.number = number
        length = _attr(attrs, "Length")
        if length is not None:
            self.pending.page_eighths = parse_length_to_eighths(length)
        if (_attr(attrs, "Omitted") or "").lower() == "yes":
            self.pending.is_omitted = True

    def _characters(self, text: str) -> None:
        if self.in_scene_number:
            self.scene_number_text.append(text)
        if self.in_title_page:
            stripped = text.strip()
            if self.title_field and stripped:
                current = getattr(self, self.title_field)
                setattr(self, self.title_field, current + stripped)
            return
        if self.in_text and self.depth >= 1:
            self.paragraph_text.append(text)
            if self.pending is not None and self.depth == 1:
                self.pending.text.append(text)

    def _end(self, name: str) -> None:
        if name == "titlepage":
            self.in_title_page = False
        elif name == "revisions":
            self.in_revisions = False
        elif name in _TITLE_FIELDS:
            self.title_field = None
        elif name == "text":
            self.in_text = False
        elif name in {"scenenumber", "number"} and self.in_scene_number:
            number = "".join(self.scene_number_text).strip()
            if number and self.pending is not None and not self.pending.number:
                self.pending.number = number
            self.in_scene_number = False
        elif name == "paragraph":
            self.depth = max(0, self.depth - 1)
            if self.depth == 0 and not self.in_title_page:
                if self.pending is None:
                    self._finish_paragraph()
                elif self.paragraph_color and not self.pending.revision_color:
                    self.pending.revision_color = self.paragraph_color

    def _finish_paragraph(self) -> None:
        text = "".join(self.paragraph_text).strip()
        self.paragraph_text = []
        if not text:
            return
        element_type = FDX_ELEMENT_TYPES.get(self.paragraph_type, ScriptElementType.GENERAL)
        self.elements.append(
            ScriptElement(type=element_type, text=text, revision_color=self.paragraph_color)
        )

    def _finalize_heading(self) -> None:
        pending = self.pending
        if pending is None:
            return
        self.pending = None

        number = pending.number or str(pending.ordinal)
        text = "".join(pending.text).strip() or f"SCENE {number}"
        self.elements.append(
            ScriptElement(
                type=ScriptElementType.SCENE_HEADING,
                text=text,
                scene_number=number,
                is_omitted=pending.is_omitted,
                page_eighths=pending.page_eighths,
                revision_color=pending.revision_color,
            )
        )


class FDXDocumentConverter:
    """Build a :class:`ScreenplayDocument` from a full FDX document."""

    def convert_strict(self, source: FDXSource, title: str | None = None) -> ScreenplayDocument:
        """Convert an FDX source, raising on failure.

        Args:
            source: Raw bytes, a file path, or a binary file object
            title: Title to use when the document's title page has none

        Returns:
            The converted document

        Raises:
            ParseError: If the source cannot be read or is not well-formed
        """
        try:
            stream = open_source(source)
        except OSError as e:
            raise ParseError(
                message="Cannot read FDX document",
                hint="Check that the file exists and is readable",
                details={"error": str(e)},
            ) from e

        try:
            builder = self._build(iter_events(stream))
        except xml.sax.SAXParseException as e:
            raise ParseError(
                message="FDX document is not well-formed XML",
                hint="Re-export the script from Final Draft and try again",
                details={"line": e.getLineNumber(), "error": e.getMessage()},
            ) from e
        finally:
            if stream is not source:
                stream.close()

        document = ScreenplayDocument(
            title=builder.title or title or "Untitled Screenplay",
            author=builder.author,
            elements=builder.elements,
            current_revision_color=(
                builder.revision_colors[-1] if builder.revision_colors else None
            ),
        )
        logger.debug(
            "Converted FDX document",
            elements=len(document.elements),
            scenes=builder.scene_count,
        )
        return document

    def convert(self, source: FDXSource, title: str | None = None) -> ScreenplayDocument | None:
        """Convert an FDX source, returning None when it cannot be parsed."""
        try:
            return self.convert_strict(source, title=title)
        except ParseError as e:
            logger.warning("FDX conversion failed", error=e.message, details=e.details)
            return None

    @staticmethod
    def _build(events: Iterable[FDXEvent]) -> _DocumentBuilder:
        builder = _DocumentBuilder()
        for event in events:
            builder.handle(event)
        builder.finish()
        return builder
