"""Derived per-scene summaries used by scheduling, shots and breakdowns."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class SceneStrip:
    """Read-only view of one scene's boundaries within a document.

    ``id`` is the id of the scene heading element that opens the scene and
    ``index`` is its 1-based ordinal. Page numbers are 1-based.
    """

    id: str
    index: int
    slugline: str
    int_ext: str
    location: str
    day_night: str
    start_page: int
    end_page: int
    scene_number: str | None = None
    is_omitted: bool = False
    raw_heading: str | None = None
    page_eighths: int = 1
    shoot_location: str | None = None

    @property
    def page_count(self) -> int:
        """Whole pages between start and end, never negative."""
        return max(0, self.end_page - self.start_page)

    @property
    def heading_line(self) -> str:
        """Single-line heading in classic strip-board style."""
        place = self.slugline or self.location
        return f"{self.index}. {self.int_ext} {place} - {self.day_night}"

    @property
    def page_length_text(self) -> str:
        pages = self.page_count
        return "Pg. 1" if pages <= 1 else f"Pg. {pages}"

    @property
    def shoot_location_line(self) -> str | None:
        if not self.shoot_location or not self.shoot_location.strip():
            return None
        return f"Location: {self.shoot_location}"

    @property
    def joinable_number(self) -> str | None:
        """Scene number usable as a merge key, or None for unnumbered scenes."""
        if self.scene_number is None:
            return None
        number = self.scene_number.strip()
        return number or None

    def with_index(self, index: int) -> SceneStrip:
        """Return a copy carrying a different ordinal."""
        return replace(self, index=index)

    @staticmethod
    def normalized(strips: Iterable[SceneStrip]) -> list[SceneStrip]:
        """Sort strips by ordinal and renumber them 1..n."""
        ordered = sorted(strips, key=lambda strip: strip.index)
        return [strip.with_index(i) for i, strip in enumerate(ordered, start=1)]
