"""Streaming FDX reader that turns SAX callbacks into explicit events.

Consumers iterate over ``ElementStart``, ``Characters`` and ``ElementEnd``
values instead of implementing a SAX handler, so parsing logic can be
written as a plain state machine over a single forward pass.
"""

from __future__ import annotations

import io
import xml.sax
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, TypeAlias
from xml.sax.handler import ContentHandler, feature_external_ges, feature_namespaces
from xml.sax.xmlreader import AttributesImpl

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ElementStart:
    name: str
    attrs: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Characters:
    text: str


@dataclass(frozen=True)
class ElementEnd:
    name: str


FDXEvent: TypeAlias = ElementStart | Characters | ElementEnd
FDXSource: TypeAlias = bytes | str | Path | BinaryIO


class _EventCollector(ContentHandler):
    """SAX handler that buffers events until the reader drains them."""

    def __init__(self) -> None:
        super().__init__()
        self.events: list[FDXEvent] = []

    def startElement(self, name: str, attrs: AttributesImpl) -> None:  # noqa: N802
        self.events.append(ElementStart(name, dict(attrs.items())))

    def characters(self, content: str) -> None:
        self.events.append(Characters(content))

    def endElement(self, name: str) -> None:  # noqa: N802
        self.events.append(ElementEnd(name))


def open_source(source: FDXSource) -> BinaryIO:
    """Open an FDX source as a binary stream.

    Bytes are wrapped in memory; ``str`` and ``Path`` values are treated as
    file paths.

    Raises:
        OSError: If a file path cannot be opened.
    """
    if isinstance(source, bytes):
        return io.BytesIO(source)
    if isinstance(source, (str, Path)):  # noqa: UP038
        return Path(source).open("rb")
    return source


def iter_events(stream: BinaryIO) -> Iterator[FDXEvent]:
    """Yield events from an FDX byte stream in document order.

    Events are produced incrementally as the stream is read; no tree is
    built. Events that precede a well-formedness error are still yielded
    before the error propagates.

    Raises:
        xml.sax.SAXParseException: If the document is not well-formed XML.
    """
    collector = _EventCollector()
    reader = xml.sax.make_parser()
    reader.setFeature(feature_namespaces, False)
    reader.setFeature(feature_external_ges, False)
    reader.setContentHandler(collector)

    def drain() -> Iterator[FDXEvent]:
        pending = list(collector.events)
        collector.events.clear()
        return iter(pending)

    while chunk := stream.read(CHUNK_SIZE):
        try:
            reader.feed(chunk)
        except xml.sax.SAXParseException:
            yield from drain()
            raise
        yield from drain()

    try:
        reader.close()
    except xml.sax.SAXParseException:
        yield from drain()
        raise
    yield from drain()
