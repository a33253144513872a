"""Tests for CLI output formatters."""

import io
import json
from dataclasses import dataclass

from rich.console import Console

from scriptsync.cli.formatters import JsonFormatter, TableFormatter
from scriptsync.exceptions import RevisionNotFoundError
from scriptsync.models.merge import MergeResult
from scriptsync.models.revision import StoredRevision


@dataclass
class Point:
    x: int
    y: int


class TestJsonFormatter:
    """Test JSON output."""

    def test_pydantic_models(self):
        """Test that models are dumped in JSON mode."""
        revision = StoredRevision(file_name="a.fdx", color_name="Blue")

        data = json.loads(JsonFormatter().format(revision))

        assert data["file_name"] == "a.fdx"
        assert data["color_name"] == "Blue"
        assert isinstance(data["imported_at"], str)

    def test_dataclasses_and_containers(self):
        """Test dataclasses nested in lists and dicts."""
        formatter = JsonFormatter()

        assert json.loads(formatter.format([Point(1, 2)])) == [{"x": 1, "y": 2}]
        assert json.loads(formatter.format({"p": (1, 2)})) == {"p": [1, 2]}
        assert json.loads(formatter.format(MergeResult()))["conflicts"] == []

    def test_success_response(self):
        """Test the success envelope."""
        response = json.loads(JsonFormatter().format_success("Done", {"count": 2}))

        assert response == {"success": True, "message": "Done", "data": {"count": 2}}
        assert "data" not in json.loads(JsonFormatter().format_success("Done"))

    def test_error_response(self):
        """Test the error envelope for project errors and plain exceptions."""
        formatter = JsonFormatter()

        project = json.loads(
            formatter.format_error_response(RevisionNotFoundError(hint="Send it first"), 3)
        )
        plain = json.loads(formatter.format_error_response(RuntimeError("boom")))

        assert project == {
            "success": False,
            "error": "Script revision not found",
            "code": 3,
            "hint": "Send it first",
        }
        assert plain == {"success": False, "error": "boom", "code": 1}


class TestTableFormatter:
    """Test table output."""

    def test_rows(self, strip_ansi):
        """Test headers and cell rendering."""
        output = strip_ansi(
            TableFormatter(title="Strips").format(
                [
                    {"scene_number": "1", "loaded": True, "note": None},
                    {"scene_number": "2A", "loaded": False, "note": "moved"},
                ]
            )
        )

        assert "Strips" in output
        assert "Scene Number" in output
        assert "2A" in output
        assert "yes" in output
        assert "no" in output
        assert "moved" in output

    def test_empty(self):
        """Test the placeholder for no rows."""
        assert TableFormatter().format([]) == "No data to display"

    def test_summary_table(self, strip_ansi):
        """Test key-value tables."""
        output = strip_ansi(
            TableFormatter().create_summary_table(
                "Shots status", {"updates_available": True, "loaded_revision": None}
            )
        )

        assert "Shots status" in output
        assert "Updates Available" in output
        assert "yes" in output

    def test_print_json_goes_to_stdout(self, capsys):
        """Test that JSON bypasses the Rich console."""
        buffer = io.StringIO()
        formatter = JsonFormatter(console=Console(file=buffer))

        formatter.print({"heading": "INT. " + "LONG HALLWAY " * 10 + "- DAY"})

        assert buffer.getvalue() == ""
        assert json.loads(capsys.readouterr().out)["heading"].endswith("- DAY")

    def test_print_table_uses_console(self, strip_ansi):
        """Test that tables are written through the formatter's console."""
        buffer = io.StringIO()
        formatter = TableFormatter(console=Console(file=buffer, width=120), title="Strips")

        formatter.print([{"scene_number": "12A"}])

        output = strip_ansi(buffer.getvalue())
        assert "Strips" in output
        assert "12A" in output
