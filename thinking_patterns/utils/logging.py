"""Logging utilities for Thinking Patterns MCP.

Provides a consistent loguru setup with:
- Structured JSON logging for production
- Human-readable format for development
- Context injection for session and tool tracking
- Log level configuration from environment/config
"""

from __future__ import annotations

import sys
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from loguru import Record

# Context variables for request tracking
_session_id: ContextVar[str | None] = ContextVar("session_id", default=None)
_tool_name: ContextVar[str | None] = ContextVar("tool_name", default=None)


class LogFormat(str, Enum):
    """Supported log output formats."""

    JSON = "json"
    TEXT = "text"


class LogLevel(str, Enum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def context_prefix() -> str:
    """Render the active logging context as ``[sess=... tool=...] ``."""
    parts = []
    if session_id := _session_id.get():
        parts.append(f"sess={session_id[:8]}")
    if tool_name := _tool_name.get():
        parts.append(f"tool={tool_name}")
    return f"[{' '.join(parts)}] " if parts else ""


def _patch_record(record: Record) -> None:
    """Copy context variables into the record's extra dict."""
    record["extra"]["context"] = context_prefix()
    if session_id := _session_id.get():
        record["extra"]["session_id"] = session_id
    if tool_name := _tool_name.get():
        record["extra"]["tool"] = tool_name


TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{extra[context]}<level>{message}</level>"
)


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    log_format: LogFormat | str = LogFormat.TEXT,
    log_file: str | Path | None = None,
) -> None:
    """Configure loguru handlers.

    Logs go to stderr so that the stdio MCP transport keeps stdout clean.

    Args:
        level: Minimum log level.
        log_format: Output format (json or text).
        log_file: Optional file path for rotated JSON log output.

    """
    level = LogLevel(level.upper()) if isinstance(level, str) else level
    log_format = LogFormat(log_format.lower()) if isinstance(log_format, str) else log_format

    logger.remove()
    logger.configure(patcher=_patch_record, extra={"context": ""})

    if log_format == LogFormat.JSON:
        logger.add(sys.stderr, format="{message}", level=level.value, serialize=True)
    else:
        logger.add(sys.stderr, format=TEXT_FORMAT, level=level.value, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format="{message}",
            level=level.value,
            serialize=True,
            rotation="100 MB",
            retention="7 days",
            compression="gz",
        )


@contextmanager
def log_context(
    session_id: str | None = None,
    tool_name: str | None = None,
) -> Generator[None, None, None]:
    """Scope logging context for the duration of a tool call.

    Example:
        with log_context(session_id="abc123", tool_name="sequential_thinking"):
            logger.info("Processing")  # prefixed with [sess=abc123 tool=...]

    """
    tokens: list[Any] = []
    if session_id:
        tokens.append(_session_id.set(session_id))
    if tool_name:
        tokens.append(_tool_name.set(tool_name))
    try:
        yield
    finally:
        for token in reversed(tokens):
            token.var.reset(token)


def get_session_id() -> str | None:
    """Get the current session ID from context."""
    return _session_id.get()


def get_tool_name() -> str | None:
    """Get the current tool name from context."""
    return _tool_name.get()
