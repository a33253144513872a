"""Table output formatter for CLI."""

import io
from typing import Any

from rich.console import Console
from rich.table import Table

from scriptsync.cli.formatters.base import OutputFormat, OutputFormatter


class TableFormatter(OutputFormatter[list[dict[str, Any]]]):
    """Formatter for tabular data output."""

    output_format = OutputFormat.TABLE

    def __init__(self, console: Console | None = None, title: str | None = None) -> None:
        super().__init__(console)
        self.title = title

    def format(self, data: list[dict[str, Any]]) -> str:
        """Render rows as a Rich table; column headers come from the first row."""
        if not data:
            return "No data to display"

        columns = list(data[0].keys())
        table = Table(title=self.title, show_header=True, header_style="bold magenta")
        for col in columns:
            table.add_column(col.replace("_", " ").title())
        for row in data:
            table.add_row(*[self._cell(row.get(col)) for col in columns])

        string_io = io.StringIO()
        temp_console = Console(file=string_io, force_terminal=True, width=120)
        temp_console.print(table)
        return string_io.getvalue()

    @staticmethod
    def _cell(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "yes" if value else "no"
        return str(value)

    def create_summary_table(self, title: str, data: dict[str, Any]) -> str:
        """Create a two-column property table from key-value pairs."""
        table = Table(title=title, show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="white")
        for key, value in data.items():
            table.add_row(key.replace("_", " ").title(), self._cell(value))

        string_io = io.StringIO()
        temp_console = Console(file=string_io, force_terminal=True, width=120)
        temp_console.print(table)
        return string_io.getvalue()
