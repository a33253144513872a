"""Commands for importing, sending and loading script revisions."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from scriptsync.cli.formatters.json_formatter import JsonFormatter
from scriptsync.cli.formatters.table_formatter import TableFormatter
from scriptsync.cli.utils.cli_handler import CLIHandler, cli_command
from scriptsync.cli.utils.services import SyncServices
from scriptsync.exceptions import RevisionNotFoundError
from scriptsync.models.revision import RevisionColor, SentRevision, SyncModule

console = Console()

JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]
ModuleOption = Annotated[
    SyncModule,
    typer.Option("--module", "-m", help="Consumer module", case_sensitive=False),
]


def _revision_row(revision: SentRevision) -> dict[str, object]:
    row: dict[str, object] = {
        "id": revision.id[:8],
        "revision": revision.display_name,
        "file": revision.file_name,
        "sent": revision.sent_date.strftime("%Y-%m-%d %H:%M"),
        "scenes": revision.scene_count,
    }
    for module in SyncModule:
        row[module.value.lower()] = revision.is_loaded_in(module)
    return row


def _find_sent(services: SyncServices, sent_id: str) -> SentRevision:
    """Resolve a full or abbreviated sent revision id."""
    revision = services.registry.get(sent_id)
    if revision is not None:
        return revision
    matches = [r for r in services.registry.sent_revisions if r.id.startswith(sent_id)]
    if len(matches) == 1:
        return matches[0]
    raise RevisionNotFoundError(
        hint="Run 'scriptsync revisions' to list sent revisions",
        details={"sent_id": sent_id, "matches": len(matches)},
    )


@cli_command
def import_command(
    path: Annotated[
        Path,
        typer.Argument(help="FDX file to import", exists=True, dir_okay=False, readable=True),
    ],
    color: Annotated[
        str | None,
        typer.Option("--color", help="Revision color (default: next in the cycle)"),
    ] = None,
    json_output: JsonOption = False,
) -> None:
    """Store a script file as an authoring revision."""
    color_name = None
    if color is not None:
        parsed = RevisionColor.from_name(color)
        if parsed is None:
            raise typer.BadParameter(
                f"Unknown revision color '{color}'. "
                f"Choose from: {', '.join(c.value for c in RevisionColor)}"
            )
        color_name = parsed.value

    services = SyncServices.from_settings()
    try:
        revision = services.documents.import_revision(path.name, path.read_bytes(), color_name)
    finally:
        services.close()

    CLIHandler(console).handle_success(
        f"Imported {revision.file_name} as {revision.color_name} "
        f"({revision.scene_count} scenes) [{revision.id}]",
        data=revision,
        json_output=json_output,
    )


@cli_command
def send_command(
    revision_id: Annotated[str, typer.Argument(help="Imported revision id")],
    json_output: JsonOption = False,
) -> None:
    """Send an imported revision to Scheduler, Shots and Breakdowns."""
    services = SyncServices.from_settings()
    try:
        stored = services.documents.get(revision_id)
        if stored is None:
            raise RevisionNotFoundError(
                hint="Run 'scriptsync import' first",
                details={"revision_id": revision_id},
            )
        sent = services.registry.send_revision(stored)
    finally:
        services.close()

    CLIHandler(console).handle_success(
        f"Sent {sent.display_name} [{sent.id}]",
        data=sent,
        json_output=json_output,
    )


@cli_command
def revisions_command(json_output: JsonOption = False) -> None:
    """List sent revisions and where each has been loaded."""
    services = SyncServices.from_settings()
    try:
        revisions = services.registry.sent_revisions
    finally:
        services.close()

    if json_output:
        JsonFormatter().print(list(revisions))
        return
    if not revisions:
        console.print("[yellow]No revisions have been sent.[/yellow]")
        return
    TableFormatter(title="Sent revisions").print([_revision_row(r) for r in revisions])


@cli_command
async def load_command(
    sent_id: Annotated[str, typer.Argument(help="Sent revision id or unique prefix")],
    module: ModuleOption,
    json_output: JsonOption = False,
) -> None:
    """Merge a sent revision into a module's scenes, keeping local edits."""
    services = SyncServices.from_settings()
    try:
        revision = _find_sent(services, sent_id)
        result = await services.registry.load_revision(
            revision, module, services.scene_store(module)
        )
    finally:
        services.close()

    if json_output:
        JsonFormatter().print(result)
        return

    console.print(f"[green]Loaded {revision.display_name} into {module.value}[/green]")
    console.print(f"  {result.summary}")
    for conflict in result.conflicts:
        console.print(
            f"  [yellow]Scene {conflict.scene_number}: {conflict.local_change}; "
            f"kept local version[/yellow]"
        )


@cli_command
def status_command(module: ModuleOption, json_output: JsonOption = False) -> None:
    """Show whether a module has revisions waiting to be loaded."""
    services = SyncServices.from_settings()
    try:
        registry = services.registry
        latest_id = registry.latest_revision_by_module.get(module)
        pending = registry.get_latest_unloaded_revision(module)
        info = {
            "module": module.value,
            "updates_available": registry.has_updates_available(module),
            "loaded_revision": latest_id,
            "latest_unloaded": pending.id if pending else None,
            "sent_revisions": len(registry.sent_revisions),
        }
    finally:
        services.close()

    if json_output:
        JsonFormatter().print(info)
        return
    console.print(TableFormatter().create_summary_table(f"{module.value} status", info))
