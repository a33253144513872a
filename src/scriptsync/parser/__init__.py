"""FDX parsing, conversion and rendering."""

from scriptsync.parser.fdx_converter import FDXDocumentConverter, revision_color_from_fdx
from scriptsync.parser.fdx_events import Characters, ElementEnd, ElementStart, iter_events
from scriptsync.parser.fdx_parser import (
    FDXParser,
    FDXScene,
    HeadingClassification,
    attributes_look_like_heading,
    classify_element,
    parse_length_to_eighths,
)
from scriptsync.parser.fdx_writer import extract_scene_text, generate_scene_fdx

__all__ = [
    "Characters",
    "ElementEnd",
    "ElementStart",
    "FDXDocumentConverter",
    "FDXParser",
    "FDXScene",
    "HeadingClassification",
    "attributes_look_like_heading",
    "classify_element",
    "extract_scene_text",
    "generate_scene_fdx",
    "iter_events",
    "parse_length_to_eighths",
    "revision_color_from_fdx",
]
