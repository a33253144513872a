"""Render single scenes as minimal FDX documents for script previews."""

from __future__ import annotations

from xml.sax.saxutils import escape, quoteattr

from scriptsync.models.element import ScriptElementType
from scriptsync.models.screenplay import ScreenplayDocument

_ENTITIES = {'"': "&quot;", "'": "&apos;"}

# Title page paragraphs have no FDX paragraph type of their own
_PARAGRAPH_TYPES = {ScriptElementType.TITLE_PAGE: "General"}


def _paragraph_type(element_type: ScriptElementType) -> str:
    return _PARAGRAPH_TYPES.get(element_type, element_type.value)


def extract_scene_text(document: ScreenplayDocument, heading_index: int) -> str:
    """Body text of a scene, one blank line between elements.

    The heading itself is not included.
    """
    body = document.scene_elements(heading_index)[1:]
    return "\n\n".join(element.text for element in body)


def generate_scene_fdx(
    document: ScreenplayDocument, heading_index: int, scene_number: str
) -> str:
    """Build an FDX document containing only one scene.

    Args:
        document: Source document
        heading_index: Element index of the scene heading
        scene_number: Number written on the heading paragraph

    Returns:
        FDX XML text
    """
    paragraphs = []
    for element in document.scene_elements(heading_index):
        text = escape(element.text, _ENTITIES)
        paragraph_type = quoteattr(_paragraph_type(element.type))
        if element.is_scene_heading:
            paragraphs.append(
                f"    <Paragraph Type={paragraph_type} Number={quoteattr(scene_number)}>\n"
                f'      <SceneProperties Length="1" Page="1"/>\n'
                f"      <Text>{text}</Text>\n"
                f"    </Paragraph>"
            )
        else:
            paragraphs.append(
                f"    <Paragraph Type={paragraph_type}>\n"
                f"      <Text>{text}</Text>\n"
                f"    </Paragraph>"
            )

    body = "\n".join(paragraphs)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<FinalDraft DocumentType="Script" Template="No" Version="1">\n'
        "  <Content>\n"
        f"{body}\n"
        "  </Content>\n"
        "</FinalDraft>\n"
    )
