"""Base formatter classes for CLI output."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar, Generic, TypeVar

import typer
from rich.console import Console

T = TypeVar("T")


class OutputFormat(str, Enum):
    """Output formats a command can produce."""

    JSON = "json"
    TABLE = "table"


class OutputFormatter(ABC, Generic[T]):
    """Renders command results and writes them to the terminal."""

    output_format: ClassVar[OutputFormat]

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    @abstractmethod
    def format(self, data: T) -> str:
        """Render ``data`` as text."""

    def print(self, data: T) -> None:
        """Render ``data`` and write it out.

        JSON goes to stdout untouched so it can be piped; tables go through
        the Rich console.
        """
        output = self.format(data)
        if self.output_format is OutputFormat.JSON:
            typer.echo(output)
        else:
            self.console.print(output)
