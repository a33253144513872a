"""JSON output formatter for CLI."""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from typing import Any

from scriptsync.cli.formatters.base import OutputFormat, OutputFormatter


class JsonFormatter(OutputFormatter[Any]):
    """Generic JSON formatter for CLI output."""

    output_format = OutputFormat.JSON

    def format(self, data: Any) -> str:
        """Format data as JSON.

        Args:
            data: Data to format

        Returns:
            JSON string
        """
        return json.dumps(self._to_jsonable(data), default=str, indent=2)

    def _to_jsonable(self, data: Any) -> Any:
        if hasattr(data, "model_dump"):
            # Pydantic models
            return data.model_dump(mode="json")
        if hasattr(data, "to_dict"):
            return data.to_dict()
        if is_dataclass(data) and not isinstance(data, type):
            return asdict(data)
        if isinstance(data, dict):
            return {str(key): self._to_jsonable(value) for key, value in data.items()}
        if isinstance(data, list | tuple):
            return [self._to_jsonable(item) for item in data]
        if hasattr(data, "__dict__"):
            return data.__dict__
        return data

    def format_success(self, message: str, data: Any = None) -> str:
        """Format a success response.

        Args:
            message: Success message
            data: Optional additional data

        Returns:
            JSON string
        """
        response: dict[str, Any] = {"success": True, "message": message}
        if data is not None:
            response["data"] = self._to_jsonable(data)
        return json.dumps(response, default=str, indent=2)

    def format_error_response(self, error: str | Exception, code: int = 1) -> str:
        """Format an error response.

        Args:
            error: Error message or exception
            code: Error code

        Returns:
            JSON string
        """
        message = getattr(error, "message", None) or str(error)
        response: dict[str, Any] = {"success": False, "error": message, "code": code}
        hint = getattr(error, "hint", None)
        if hint:
            response["hint"] = hint
        return json.dumps(response, default=str, indent=2)
