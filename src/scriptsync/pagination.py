"""Scene pagination: derive scene strips and page metrics from elements.

All functions here are pure and safe to call concurrently on independent
inputs.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from scriptsync.models.element import ScriptElement, ScriptElementType
from scriptsync.models.scene_strip import SceneStrip
from scriptsync.utils.screenplay import ScreenplayUtils

CHARS_PER_LINE = 60
LINES_PER_PAGE = 55
EIGHTHS_PER_PAGE = 8

# Blank lines that follow each element type when laid out on the page
_SPACING: dict[ScriptElementType, int] = {
    ScriptElementType.SCENE_HEADING: 2,
    ScriptElementType.CHARACTER: 1,
    ScriptElementType.DIALOGUE: 0,
    ScriptElementType.PARENTHETICAL: 0,
}

# Narrower columns used when estimating scene length for the inspector
_ESTIMATE_CHARS_PER_LINE: dict[ScriptElementType, int] = {
    ScriptElementType.DIALOGUE: 35,
    ScriptElementType.PARENTHETICAL: 30,
}


def page_number(line_count: int) -> int:
    """Return the 1-based page on which ``line_count`` falls."""
    return max(1, line_count // LINES_PER_PAGE + 1)


def element_line_count(element: ScriptElement) -> int:
    """Lines an element occupies, including the spacing after it."""
    text_lines = max(1, len(element.text) // CHARS_PER_LINE + 1)
    return text_lines + _SPACING.get(element.type, 1)


def lines_to_eighths(line_count: int) -> int:
    """Convert a line count to page eighths, never less than one."""
    return max(1, round(line_count * EIGHTHS_PER_PAGE / LINES_PER_PAGE))


def scene_strips(elements: Sequence[ScriptElement]) -> list[SceneStrip]:
    """Compute scene strips for an ordered element sequence.

    Args:
        elements: Elements in reading order

    Returns:
        One strip per scene heading, in document order
    """
    strips: list[SceneStrip] = []
    cumulative = 0
    scene_start = 0
    heading: ScriptElement | None = None

    def close_scene(opening: ScriptElement) -> None:
        parts = ScreenplayUtils.parse_scene_heading(opening.text)
        strips.append(
            SceneStrip(
                id=opening.id,
                index=len(strips) + 1,
                slugline=parts.slugline,
                int_ext=parts.int_ext,
                location=parts.location,
                day_night=parts.day_night,
                start_page=page_number(scene_start),
                end_page=page_number(cumulative),
                scene_number=opening.scene_number,
                is_omitted=opening.is_omitted,
                raw_heading=opening.text,
                page_eighths=lines_to_eighths(cumulative - scene_start),
            )
        )

    for element in elements:
        if element.is_scene_heading:
            if heading is not None:
                close_scene(heading)
            heading = element
            scene_start = cumulative
        cumulative += element_line_count(element)

    if heading is not None:
        close_scene(heading)

    return strips


def estimate_scene_eighths(elements: Iterable[ScriptElement]) -> int:
    """Estimate a scene's length from its elements using per-type columns.

    The first element is expected to be the scene heading; spacing is
    ignored in this estimate.
    """
    total_lines = 0
    for element in elements:
        chars = _ESTIMATE_CHARS_PER_LINE.get(element.type, CHARS_PER_LINE)
        total_lines += max(1, len(element.text) // chars + 1)
    return lines_to_eighths(total_lines)


def estimated_page_count(elements: Iterable[ScriptElement]) -> int:
    """Rough page count for a whole document."""
    total_lines = sum(
        max(1, len(element.text) // CHARS_PER_LINE + 1) + 1 for element in elements
    )
    return max(1, total_lines // LINES_PER_PAGE + 1)
