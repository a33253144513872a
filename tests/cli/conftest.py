"""CLI test fixtures with automatic ANSI stripping."""

import json
import re
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner, Result

from scriptsync.cli.main import app


def strip_ansi_codes(text: str) -> str:
    """Strip ANSI escape sequences and table box characters from text.

    Args:
        text: Text potentially containing ANSI escape codes

    Returns:
        Text with escape sequences removed
    """
    text = re.compile(r"\x1b\[[0-9;]*[A-Za-z]").sub("", text)
    text = re.compile(r"\x1b\].*?\x07").sub("", text)
    return re.compile(r"[━─╭╮╰╯│├┤┬┴┼┃┏┓┗┛┡┩]").sub("", text)  # noqa: RUF001


class CleanResult:
    """A wrapper around CliRunner Result that strips ANSI codes."""

    def __init__(self, result: Result):
        self._result = result

    @property
    def exit_code(self) -> int:
        return self._result.exit_code

    @property
    def exception(self) -> BaseException | None:
        return self._result.exception

    @property
    def output(self) -> str:
        """Cleaned output (stdout + stderr)."""
        return strip_ansi_codes(self._result.output)

    @property
    def stdout(self) -> str:
        return strip_ansi_codes(self._result.stdout)

    def __contains__(self, text: str) -> bool:
        return text in self.output

    def assert_success(self) -> "CleanResult":
        """Assert that the command exited with code 0."""
        assert self.exit_code == 0, (
            f"Command failed with exit code {self.exit_code}.\nOutput: {self.output}"
        )
        return self

    def assert_failure(self, exit_code: int = 1) -> "CleanResult":
        """Assert that the command exited with ``exit_code``."""
        assert self.exit_code == exit_code, (
            f"Expected exit code {exit_code}, got {self.exit_code}.\nOutput: {self.output}"
        )
        return self

    def parse_json(self) -> Any:
        """Parse stdout as JSON."""
        try:
            return json.loads(self.stdout)
        except json.JSONDecodeError as e:
            raise AssertionError(
                f"Failed to parse output as JSON: {e}\nOutput: {self.stdout}"
            ) from e


class CleanCliRunner(CliRunner):
    """A CliRunner that returns CleanResult objects."""

    def invoke(self, *args, **kwargs) -> CleanResult:
        return CleanResult(super().invoke(*args, **kwargs))


@pytest.fixture
def cli_db(tmp_path) -> Path:
    return tmp_path / "cli.db"


@pytest.fixture
def cli_invoke(cli_db):
    """Invoke the CLI against a throwaway database."""
    runner = CleanCliRunner()

    def invoke(*args: str) -> CleanResult:
        return runner.invoke(app, ["--db-path", str(cli_db), *args])

    return invoke


@pytest.fixture
def fdx_file(tmp_path, sample_fdx) -> Path:
    path = tmp_path / "coffee.fdx"
    path.write_bytes(sample_fdx)
    return path


@pytest.fixture
def strip_ansi():
    return strip_ansi_codes
