"""Utility modules for Thinking Patterns MCP."""

from .errors import (
    ThinkingPatternsException,
    ToolExecutionError,
    ToolNotFoundError,
    ValidationException,
)
from .logging import LogFormat, LogLevel, configure_logging, log_context
from .session import SessionManager

__all__ = [
    "ThinkingPatternsException",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ValidationException",
    "LogFormat",
    "LogLevel",
    "configure_logging",
    "log_context",
    "SessionManager",
]
