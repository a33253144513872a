"""CLI command implementations."""

from scriptsync.cli.commands.color import color_command
from scriptsync.cli.commands.fdx import parse_fdx_command, strips_command
from scriptsync.cli.commands.revisions import (
    import_command,
    load_command,
    revisions_command,
    send_command,
    status_command,
)

__all__ = [
    "color_command",
    "import_command",
    "load_command",
    "parse_fdx_command",
    "revisions_command",
    "send_command",
    "status_command",
    "strips_command",
]
