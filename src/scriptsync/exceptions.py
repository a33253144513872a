"""Custom exception hierarchy for ScriptSync with helpful error messages."""

from __future__ import annotations

from typing import Any


class ScriptSyncError(Exception):
    """Base exception with helpful formatting for all ScriptSync errors.

    Provides structured error messages with hints and details to help users
    understand and fix problems.
    """

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize exception with structured error information.

        Args:
            message: Primary error message describing what went wrong
            hint: Optional hint suggesting how to fix the problem
            details: Optional dictionary with additional debugging information
        """
        self.message = message
        self.hint = hint
        self.details = details
        super().__init__(self.format_error())

    def format_error(self) -> str:
        """Format the error message with hint and details.

        Returns:
            Formatted error string with all available information
        """
        output = f"Error: {self.message}"
        if self.hint:
            output += f"\nHint: {self.hint}"
        if self.details:
            details_str = "\n".join(
                f"  {key}: {value}" for key, value in self.details.items()
            )
            output += f"\nDetails:\n{details_str}"
        return output


class DatabaseError(ScriptSyncError):
    """Database-related errors including connection and query issues."""

    pass


class ConfigurationError(ScriptSyncError):
    """Configuration errors including invalid settings and missing config files."""

    pass


class ParseError(ScriptSyncError):
    """FDX document conversion errors raised by strict conversion entry points."""

    pass


class SyncError(ScriptSyncError):
    """Base class for revision registry and reconciliation failures.

    Each subclass carries a fixed ``description`` that callers may show
    verbatim; it is stable across releases.
    """

    description = "Script sync failed"

    def __init__(
        self,
        message: str | None = None,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message or self.description, hint=hint, details=details)


class RevisionNotFoundError(SyncError):
    """The backing document of a sent revision could not be located."""

    description = "Script revision not found"


class MergeConflictError(SyncError):
    """Raised by callers that refuse to proceed while conflicts are pending."""

    description = "Merge conflict detected"


class StoreNotConfiguredError(SyncError):
    """A sync operation was requested without a record store."""

    description = "Record store not configured"


class DraftNotFoundError(SyncError):
    """A screenplay draft requested for breakdown sync does not exist."""

    description = "Screenplay draft not found"


class SaveError(SyncError):
    """The record store transaction failed to commit.

    The underlying storage error is available as ``cause`` and is also
    chained as ``__cause__`` when raised with ``raise ... from``.
    """

    def __init__(
        self,
        cause: BaseException,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.cause = cause
        self.description = f"Failed to save: {cause}"
        super().__init__(
            self.description,
            hint=hint or "No changes were written; retry the load once resolved",
            details=details,
        )


def check_config_keys(config: dict[str, Any]) -> None:
    """Check for common configuration mistakes.

    Args:
        config: Configuration dictionary to validate

    Raises:
        ConfigurationError: With hints about correct configuration keys
    """
    wrong_keys = {
        "db_path": "database_path",
        "sync_mode": "default_sync_mode",
        "level": "log_level",
    }

    for wrong, correct in wrong_keys.items():
        if wrong in config:
            raise ConfigurationError(
                message=f"Invalid configuration key '{wrong}'",
                hint=f"Use '{correct}' instead of '{wrong}'",
                details={
                    "found_keys": list(config.keys()),
                    "invalid_key": wrong,
                    "correct_key": correct,
                },
            )
