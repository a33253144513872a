"""Normalized screenplay document model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from scriptsync.models.element import ScriptElement, ScriptElementType
from scriptsync.models.scene_strip import SceneStrip


@dataclass(frozen=True)
class SceneSummary:
    """Lightweight scene listing entry used by breakdown import."""

    number: str
    heading: str
    element_index: int
    page_eighths: int


class ScreenplayDocument(BaseModel):
    """An ordered sequence of screenplay elements.

    Scene boundaries are defined exactly by scene heading elements; every
    derived view (strips, scene summaries, page counts) is recomputed on
    access and never cached.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str = "Untitled Screenplay"
    author: str = ""
    elements: list[ScriptElement] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    current_revision_color: str | None = None

    @property
    def scene_strips(self) -> list[SceneStrip]:
        """Scene strips with page ranges and eighths lengths."""
        from scriptsync.pagination import scene_strips

        return scene_strips(self.elements)

    def scene_heading_indices(self) -> list[int]:
        """Element indices of every scene heading, in order."""
        return [i for i, element in enumerate(self.elements) if element.is_scene_heading]

    def scene_elements(self, heading_index: int) -> list[ScriptElement]:
        """Elements from a heading up to (not including) the next heading."""
        end = heading_index + 1
        while end < len(self.elements) and not self.elements[end].is_scene_heading:
            end += 1
        return self.elements[heading_index:end]

    @property
    def scenes(self) -> list[SceneSummary]:
        """Scene listing with stored FDX lengths taking priority over estimates.

        Unnumbered scenes are numbered by their ordinal.
        """
        from scriptsync.pagination import estimate_scene_eighths

        summaries: list[SceneSummary] = []
        for ordinal, index in enumerate(self.scene_heading_indices(), start=1):
            heading = self.elements[index]
            if heading.page_eighths and heading.page_eighths > 0:
                eighths = heading.page_eighths
            else:
                eighths = estimate_scene_eighths(self.scene_elements(index))
            summaries.append(
                SceneSummary(
                    number=heading.scene_number or str(ordinal),
                    heading=heading.text,
                    element_index=index,
                    page_eighths=eighths,
                )
            )
        return summaries

    @property
    def estimated_page_count(self) -> int:
        from scriptsync.pagination import estimated_page_count

        return estimated_page_count(self.elements)

    @property
    def characters(self) -> list[str]:
        """Unique speaking characters, extensions such as (V.O.) removed."""
        names = set()
        for element in self.elements:
            if element.type != ScriptElementType.CHARACTER:
                continue
            name = element.text.upper().strip()
            name = name.split("(", 1)[0].strip()
            names.add(name)
        return sorted(names)

    def encode(self) -> bytes:
        """Serialize to JSON with ISO-8601 timestamps."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def decode(cls, data: bytes | str) -> ScreenplayDocument:
        """Deserialize a document produced by :meth:`encode`.

        Raises:
            pydantic.ValidationError: If the payload is not a document.
        """
        return cls.model_validate_json(data)
