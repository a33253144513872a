"""Revision colors, sent revisions and consumer modules."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class RevisionColor(str, Enum):
    """Industry revision colors, in the order successive drafts use them."""

    WHITE = "White"
    BLUE = "Blue"
    PINK = "Pink"
    YELLOW = "Yellow"
    GREEN = "Green"
    GOLDENROD = "Goldenrod"
    BUFF = "Buff"
    SALMON = "Salmon"
    CHERRY = "Cherry"
    TAN = "Tan"
    IVORY = "Ivory"

    @property
    def revision_number(self) -> int:
        """Position of the color in the cycle, White being 0."""
        return list(RevisionColor).index(self)

    @classmethod
    def for_revision(cls, number: int) -> RevisionColor:
        """Color used by the ``number``-th revision; the cycle repeats every 11."""
        colors = list(cls)
        return colors[number % len(colors)]

    @property
    def next(self) -> RevisionColor:
        return RevisionColor.for_revision(self.revision_number + 1)

    @classmethod
    def from_name(cls, name: str) -> RevisionColor | None:
        """Look up a color by name, ignoring case and surrounding whitespace."""
        wanted = name.strip().lower()
        for color in cls:
            if color.value.lower() == wanted:
                return color
        return None


class SyncModule(str, Enum):
    """Consumer modules that load sent revisions independently."""

    SCHEDULER = "Scheduler"
    SHOTS = "Shots"
    BREAKDOWNS = "Breakdowns"


class StoredRevision(BaseModel):
    """An authoring-side revision of a screenplay file."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    color_name: str = RevisionColor.WHITE.value
    file_name: str
    scene_count: int = 0
    page_count: int = 0
    file_hash: str | None = None
    imported_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class SentRevision(BaseModel):
    """A revision published to the consumer modules.

    Instances are immutable; state changes produce new copies so that
    readers never observe a half-applied update.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    revision_id: str
    color_name: str
    file_name: str
    sent_date: datetime = Field(default_factory=lambda: datetime.now(UTC))
    scene_count: int = 0
    page_count: int = 0
    loaded_in_scheduler: bool = False
    loaded_in_shots: bool = False
    loaded_in_breakdowns: bool = False
    scheduler_load_date: datetime | None = None
    shots_load_date: datetime | None = None
    breakdowns_load_date: datetime | None = None

    @property
    def display_name(self) -> str:
        if self.color_name.lower() == "white":
            return "Original Draft"
        return f"{self.color_name} Revision"

    def is_loaded_in(self, module: SyncModule) -> bool:
        return bool(getattr(self, f"loaded_in_{module.name.lower()}"))

    def load_date(self, module: SyncModule) -> datetime | None:
        return getattr(self, f"{module.name.lower()}_load_date")

    def marked_loaded(self, module: SyncModule, when: datetime) -> SentRevision:
        """Copy of this revision marked as loaded into ``module``."""
        key = module.name.lower()
        return self.model_copy(
            update={f"loaded_in_{key}": True, f"{key}_load_date": when}
        )

    def with_loads_reset(self) -> SentRevision:
        """Copy of this revision with every module back to not-loaded."""
        return self.model_copy(
            update={f"loaded_in_{module.name.lower()}": False for module in SyncModule}
        )
