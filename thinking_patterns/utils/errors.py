"""Custom exceptions for Thinking Patterns MCP."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError


class ThinkingPatternsException(Exception):
    """Base exception for Thinking Patterns MCP."""

    pass


class ValidationException(ThinkingPatternsException):
    """Raised when tool input does not satisfy its schema."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)

    @classmethod
    def from_pydantic(cls, error: ValidationError) -> ValidationException:
        """Build from a pydantic ValidationError.

        Produces a single-line message of the form
        ``Validation failed: field.path: message, other: message``.
        """
        details = error.errors()
        parts = []
        for item in details:
            path = ".".join(str(p) for p in item.get("loc", ()))
            parts.append(f"{path}: {item.get('msg', 'invalid value')}")
        return cls(f"Validation failed: {', '.join(parts)}", errors=list(details))


class ToolNotFoundError(ThinkingPatternsException):
    """Raised when a tool name is not registered."""

    def __init__(self, tool_name: str, available: list[str] | None = None) -> None:
        self.tool_name = tool_name
        self.available = available or []
        message = f"Tool '{tool_name}' not found"
        if self.available:
            message += f". Available tools: {', '.join(self.available)}"
        super().__init__(message)


class ToolExecutionError(Exception):
    """Raised when tool execution fails in MCP context.

    Provides structured error information that can be returned
    to the LLM client in a parseable format.
    """

    def __init__(
        self,
        tool_name: str,
        error_message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize tool execution error.

        Args:
            tool_name: Name of the tool that failed.
            error_message: Human-readable error message.
            details: Optional dictionary with additional error details.

        """
        self.tool_name = tool_name
        self.error_message = error_message
        self.details = details or {}
        super().__init__(f"Tool {tool_name} failed: {error_message}")

    @classmethod
    def from_exception(cls, tool_name: str, error: BaseException) -> ToolExecutionError:
        """Wrap an arbitrary exception raised while running a tool."""
        details: dict[str, Any] = {"type": type(error).__name__}
        if isinstance(error, ValidationException) and error.errors:
            details["fields"] = [
                ".".join(str(p) for p in item.get("loc", ())) for item in error.errors
            ]
        return cls(tool_name, str(error), details)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the failed response envelope.

        Returns:
            Dictionary with ``error``, ``status`` ("failed"), ``tool``,
            ``details`` and an ISO-8601 ``timestamp``.

        """
        return {
            "error": self.error_message,
            "status": "failed",
            "tool": self.tool_name,
            "details": self.details,
            "timestamp": datetime.now(UTC).isoformat(),
        }
