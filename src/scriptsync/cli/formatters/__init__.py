"""Output formatters for the ScriptSync CLI."""

from __future__ import annotations

from scriptsync.cli.formatters.base import OutputFormat, OutputFormatter
from scriptsync.cli.formatters.json_formatter import JsonFormatter
from scriptsync.cli.formatters.table_formatter import TableFormatter

__all__ = [
    "JsonFormatter",
    "OutputFormat",
    "OutputFormatter",
    "TableFormatter",
]
