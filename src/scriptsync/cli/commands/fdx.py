"""Commands that read FDX and document files without touching the database."""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from scriptsync.cli.formatters.json_formatter import JsonFormatter
from scriptsync.cli.formatters.table_formatter import TableFormatter
from scriptsync.cli.utils.cli_handler import cli_command
from scriptsync.exceptions import ParseError
from scriptsync.parser.fdx_parser import FDXParser
from scriptsync.sync.document_loader import decode_document
from scriptsync.utils.screenplay import ScreenplayUtils

console = Console()

ScriptFile = Annotated[
    Path,
    typer.Argument(
        help="Path to an FDX file or a saved screenplay document",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]


@cli_command
def parse_fdx_command(path: ScriptFile, json_output: JsonOption = False) -> None:
    """List the scenes found in an FDX file.

    Headings are detected from explicit markup or, for unstyled
    paragraphs, from an INT./EXT. prefix.
    """
    scenes = FDXParser().parse(path)

    if json_output:
        JsonFormatter().print([asdict(scene) for scene in scenes])
        return

    if not scenes:
        console.print("[yellow]No scenes found.[/yellow]")
        return

    rows = [
        {
            "number": scene.number or "-",
            "heading": scene.heading,
            "length": (
                ScreenplayUtils.format_page_eighths(scene.page_length_eighths)
                if scene.page_length_eighths
                else ""
            ),
        }
        for scene in scenes
    ]
    TableFormatter(title=f"{path.name}: {len(scenes)} scenes").print(rows)


@cli_command
def strips_command(path: ScriptFile, json_output: JsonOption = False) -> None:
    """Show scene strips with page ranges and eighths lengths."""
    document = decode_document(path.read_bytes(), title=path.stem)
    if document is None:
        raise ParseError(
            message=f"Cannot read screenplay from {path.name}",
            hint="Pass an FDX file or a document saved by ScriptSync",
        )
    strips = document.scene_strips

    if json_output:
        JsonFormatter().print(strips)
        return

    rows = [
        {
            "scene": strip.scene_number or strip.index,
            "heading": strip.raw_heading or strip.heading_line,
            "pages": f"{strip.start_page}-{strip.end_page}",
            "eighths": ScreenplayUtils.format_page_eighths(strip.page_eighths),
        }
        for strip in strips
    ]
    TableFormatter(title=document.title).print(rows)
