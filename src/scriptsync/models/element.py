"""Paragraph-level screenplay elements."""

from __future__ import annotations

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ScriptElementType(str, Enum):
    """Kinds of screenplay paragraphs."""

    SCENE_HEADING = "Scene Heading"
    ACTION = "Action"
    CHARACTER = "Character"
    PARENTHETICAL = "Parenthetical"
    DIALOGUE = "Dialogue"
    TRANSITION = "Transition"
    SHOT = "Shot"
    GENERAL = "General"
    TITLE_PAGE = "Title Page"


class ScriptElement(BaseModel):
    """One paragraph of screenplay text.

    Only scene headings carry a meaningful ``scene_number`` and
    ``page_eighths`` (the stored length from an FDX import).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: ScriptElementType
    text: str = ""
    scene_number: str | None = None
    is_omitted: bool = False
    page_eighths: int | None = None
    revision_color: str | None = None

    @property
    def is_scene_heading(self) -> bool:
        """Whether this element opens a scene."""
        return self.type == ScriptElementType.SCENE_HEADING

    @property
    def has_revision_mark(self) -> bool:
        """Whether the element is marked with a non-white revision color."""
        return (
            self.revision_color is not None
            and self.revision_color.lower() != "white"
        )
