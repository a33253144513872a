"""Screenplay-specific utility functions."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HeadingParts:
    """Decomposition of a scene heading such as ``INT. KITCHEN - DAY``."""

    int_ext: str
    location: str
    day_night: str

    @property
    def slugline(self) -> str:
        """Slugline text; currently identical to the location."""
        return self.location


class ScreenplayUtils:
    """Utility functions for screenplay processing."""

    # Longer prefixes must be tried first so INT./EXT. never matches as INT.
    # Both combined spellings are recorded as INT./EXT.
    HEADING_PREFIXES: tuple[tuple[str, str], ...] = (
        ("INT./EXT.", "INT./EXT."),
        ("INT/EXT.", "INT./EXT."),
        ("INT.", "INT."),
        ("EXT.", "EXT."),
        ("I/E.", "I/E."),
    )

    # Prefixes that mark a plain paragraph as a scene heading
    HEADING_MARKERS: tuple[str, ...] = ("INT.", "EXT.", "INT./EXT.", "I/E.")

    DAY_NIGHT_SEPARATOR = " - "

    @staticmethod
    def parse_scene_heading(heading: str) -> HeadingParts:
        """Split a raw heading into int/ext prefix, location and time of day.

        Args:
            heading: Raw heading text in any case

        Returns:
            HeadingParts with uppercase components
        """
        rest = heading.strip().upper()
        int_ext = ""
        for prefix, canonical in ScreenplayUtils.HEADING_PREFIXES:
            if rest.startswith(prefix):
                int_ext = canonical
                rest = rest[len(prefix) :].strip()
                break

        parts = rest.split(ScreenplayUtils.DAY_NIGHT_SEPARATOR)
        if len(parts) >= 2:
            day_night = parts[-1].strip()
            location = ScreenplayUtils.DAY_NIGHT_SEPARATOR.join(parts[:-1]).strip()
        else:
            day_night = ""
            location = rest
        return HeadingParts(int_ext=int_ext, location=location, day_night=day_night)

    @staticmethod
    def location_type(int_ext: str) -> str:
        """Return the stored location type for an int/ext prefix (dots removed)."""
        return int_ext.replace(".", "")

    @staticmethod
    def looks_like_heading(text: str) -> bool:
        """Check whether normalized paragraph text starts like a scene heading."""
        return text.startswith(ScreenplayUtils.HEADING_MARKERS)

    @staticmethod
    def normalize_heading_text(text: str) -> str:
        """Collapse newlines to spaces, trim and uppercase heading text."""
        return text.replace("\r", " ").replace("\n", " ").strip().upper()

    @staticmethod
    def format_page_eighths(eighths: int) -> str:
        """Format an eighths count the way production reports show it.

        Examples: ``8`` -> ``"1"``, ``19`` -> ``"2 3/8"``, ``3`` -> ``"3/8"``.
        """
        whole, fraction = divmod(max(0, eighths), 8)
        if whole and fraction:
            return f"{whole} {fraction}/8"
        if whole:
            return str(whole)
        return f"{fraction}/8"
