"""Main CLI entry point."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from scriptsync.cli.commands import (
    color_command,
    import_command,
    load_command,
    parse_fdx_command,
    revisions_command,
    send_command,
    status_command,
    strips_command,
)
from scriptsync.cli.utils.cli_handler import CLIHandler
from scriptsync.config import (
    configure_logging,
    get_logger,
    get_settings_for_cli,
    set_settings,
)

logger = get_logger(__name__)

app = typer.Typer(
    name="scriptsync",
    help="Sync screenplay revisions into Scheduler, Shots and Breakdowns",
    pretty_exceptions_enable=False,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(name="parse-fdx")(parse_fdx_command)
app.command(name="strips")(strips_command)
app.command(name="import")(import_command)
app.command(name="send")(send_command)
app.command(name="revisions")(revisions_command)
app.command(name="load")(load_command)
app.command(name="status")(status_command)
app.command(name="color")(color_command)


@app.callback()
def main_callback(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (YAML, TOML, or JSON)",
            envvar="SCRIPTSYNC_CONFIG",
        ),
    ] = None,
    db_path: Annotated[
        Path | None,
        typer.Option("--db-path", help="SQLite database file"),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure global options."""
    overrides: dict[str, object] = {"database_path": db_path}
    if debug:
        overrides.update({"debug": True, "log_level": "DEBUG"})

    try:
        settings = get_settings_for_cli(config_file=config, cli_overrides=overrides)
    except Exception as e:
        CLIHandler().handle_error(e)
        return

    set_settings(settings)
    if debug:
        configure_logging(settings)
        logger.debug("Debug mode enabled", database=str(settings.database_path))


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
