"""Tests for the scriptsync command line."""

import pytest


@pytest.fixture
def imported(cli_invoke, fdx_file):
    """Id of the sample script after importing it."""
    result = cli_invoke("import", str(fdx_file), "--json").assert_success()
    return result.parse_json()["data"]["id"]


@pytest.fixture
def sent(cli_invoke, imported):
    """Id of the sample script's sent revision."""
    result = cli_invoke("send", imported, "--json").assert_success()
    return result.parse_json()["data"]["id"]


class TestColorCommand:
    """Test revision color lookup."""

    def test_text_output(self, cli_invoke):
        """Test the human-readable color line."""
        result = cli_invoke("color", "2").assert_success()

        assert "Revision 2: Pink (next: Yellow)" in result.output

    def test_json_output(self, cli_invoke):
        """Test that the cycle wraps after Ivory."""
        result = cli_invoke("color", "11", "--json").assert_success()

        assert result.parse_json() == {"revision": 11, "color": "White", "next": "Blue"}


class TestFileCommands:
    """Test commands that read script files."""

    def test_parse_fdx_json(self, cli_invoke, fdx_file):
        """Test listing parsed scenes as JSON."""
        result = cli_invoke("parse-fdx", str(fdx_file), "--json").assert_success()

        scenes = result.parse_json()
        assert [s["number"] for s in scenes] == ["1", "2", "3"]
        assert scenes[2]["heading"] == "INT./EXT. CAR - CONTINUOUS"

    def test_parse_fdx_table(self, cli_invoke, fdx_file):
        """Test the scene table."""
        result = cli_invoke("parse-fdx", str(fdx_file)).assert_success()

        assert "KITCHEN" in result.output
        assert "ALLEY" in result.output

    def test_parse_fdx_without_scenes(self, cli_invoke, tmp_path):
        """Test a document with no headings."""
        path = tmp_path / "empty.fdx"
        path.write_text("<FinalDraft><Content/></FinalDraft>")

        result = cli_invoke("parse-fdx", str(path)).assert_success()

        assert "No scenes found." in result.output

    def test_parse_fdx_missing_file(self, cli_invoke, tmp_path):
        """Test that typer rejects paths that do not exist."""
        cli_invoke("parse-fdx", str(tmp_path / "missing.fdx")).assert_failure(2)

    def test_strips_json(self, cli_invoke, fdx_file):
        """Test strips with page ranges."""
        result = cli_invoke("strips", str(fdx_file), "--json").assert_success()

        strips = result.parse_json()
        assert [s["scene_number"] for s in strips] == ["1", "2", "3"]
        assert [s["index"] for s in strips] == [1, 2, 3]
        assert strips[0]["start_page"] == 1
        assert all(s["page_eighths"] >= 1 for s in strips)

    def test_strips_table(self, cli_invoke, fdx_file):
        """Test the strip table title and rows."""
        result = cli_invoke("strips", str(fdx_file)).assert_success()

        assert "Coffee" in result.output
        assert "KITCHEN" in result.output

    def test_strips_unreadable_file(self, cli_invoke, tmp_path):
        """Test that non-script files are reported."""
        path = tmp_path / "notes.txt"
        path.write_text("not a screenplay")

        result = cli_invoke("strips", str(path)).assert_failure()

        assert "Cannot read screenplay from notes.txt" in result.output


class TestRevisionCommands:
    """Test the import, send and load workflow."""

    def test_import(self, cli_invoke, fdx_file):
        """Test importing a script file."""
        result = cli_invoke("import", str(fdx_file), "--json").assert_success()

        payload = result.parse_json()
        assert payload["success"] is True
        assert payload["data"]["color_name"] == "White"
        assert payload["data"]["scene_count"] == 3

    def test_import_text_output(self, cli_invoke, fdx_file):
        """Test the import confirmation line."""
        result = cli_invoke("import", str(fdx_file), "--color", "pink").assert_success()

        assert "Imported" in result.output
        assert "Pink" in result.output

    def test_import_unknown_color(self, cli_invoke, fdx_file):
        """Test rejecting colors outside the cycle."""
        result = cli_invoke("import", str(fdx_file), "--color", "Mauve").assert_failure()

        assert "Unknown revision color" in result.output

    def test_import_non_script(self, cli_invoke, tmp_path):
        """Test importing a file that is not a screenplay."""
        path = tmp_path / "notes.txt"
        path.write_text("shopping list")

        result = cli_invoke("import", str(path)).assert_failure()

        assert "not an FDX or screenplay document" in result.output

    def test_send(self, cli_invoke, imported):
        """Test sending an imported revision."""
        result = cli_invoke("send", imported, "--json").assert_success()

        data = result.parse_json()["data"]
        assert data["revision_id"] == imported
        assert data["loaded_in_shots"] is False

    def test_send_unknown_revision(self, cli_invoke):
        """Test sending a revision that was never imported."""
        result = cli_invoke("send", "does-not-exist").assert_failure()

        assert "Script revision not found" in result.output

    def test_send_unknown_revision_json(self, cli_invoke):
        """Test the JSON error payload."""
        result = cli_invoke("send", "does-not-exist", "--json").assert_failure()

        payload = result.parse_json()
        assert payload["success"] is False
        assert payload["error"] == "Script revision not found"
        assert payload["hint"] == "Run 'scriptsync import' first"

    def test_revisions_empty(self, cli_invoke):
        """Test listing before anything was sent."""
        result = cli_invoke("revisions").assert_success()

        assert "No revisions have been sent." in result.output

    def test_revisions_list(self, cli_invoke, sent):
        """Test listing sent revisions."""
        revisions = cli_invoke("revisions", "--json").assert_success().parse_json()
        assert [r["id"] for r in revisions] == [sent]

        table = cli_invoke("revisions").assert_success()
        assert "coffee.fdx" in table.output
        assert "Original" in table.output

    def test_load_and_status(self, cli_invoke, sent):
        """Test loading a revision and the module status afterwards."""
        before = cli_invoke("status", "--module", "shots", "--json").assert_success()
        assert before.parse_json()["updates_available"] is True

        result = cli_invoke("load", sent[:8], "--module", "shots", "--json").assert_success()
        merged = result.parse_json()
        assert len(merged["scenes_added"]) == 3
        assert merged["conflicts"] == []

        after = cli_invoke("status", "--module", "shots", "--json").assert_success()
        status = after.parse_json()
        assert status["updates_available"] is False
        assert status["loaded_revision"] == sent
        assert status["module"] == "Shots"

        other = cli_invoke("status", "--module", "scheduler", "--json").assert_success()
        assert other.parse_json()["updates_available"] is True

    def test_load_again_reports_no_changes(self, cli_invoke, sent):
        """Test the text summary of a repeated load."""
        cli_invoke("load", sent, "--module", "breakdowns").assert_success()

        result = cli_invoke("load", sent, "--module", "breakdowns").assert_success()

        assert "No changes" in result.output

    def test_load_unknown_revision(self, cli_invoke):
        """Test loading with an id that matches nothing."""
        result = cli_invoke("load", "zzz", "--module", "shots").assert_failure()

        assert "Script revision not found" in result.output


class TestGlobalOptions:
    """Test options handled by the main callback."""

    def test_unsupported_config_file(self, cli_invoke, tmp_path):
        """Test that unknown config formats are reported."""
        config = tmp_path / "settings.ini"
        config.write_text("[scriptsync]\n")

        result = cli_invoke("--config", str(config), "color", "0").assert_failure()

        assert "Error" in result.output

    def test_help(self, cli_invoke):
        """Test that every command is listed."""
        result = cli_invoke("--help").assert_success()

        for command in ("parse-fdx", "strips", "import", "send", "revisions", "load", "status"):
            assert command in result.output
