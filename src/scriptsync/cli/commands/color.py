"""Revision color lookup."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from scriptsync.cli.formatters.json_formatter import JsonFormatter
from scriptsync.models.revision import RevisionColor

console = Console()


def color_command(
    number: Annotated[int, typer.Argument(help="Revision number (0 is the original draft)")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show the color used by a revision number and the one after it."""
    color = RevisionColor.for_revision(number)
    info = {
        "revision": number,
        "color": color.value,
        "next": color.next.value,
    }
    if json_output:
        JsonFormatter().print(info)
        return
    console.print(f"Revision {number}: [bold]{color.value}[/bold] (next: {color.next.value})")
