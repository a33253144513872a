"""ScriptSync command-line interface."""

from scriptsync.cli.main import app, main

__all__ = ["app", "main"]
