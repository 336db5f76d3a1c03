"""Unit tests for thinking_patterns/utils/logging.py."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from loguru import logger

from thinking_patterns.utils.logging import (
    LogFormat,
    LogLevel,
    configure_logging,
    context_prefix,
    get_session_id,
    get_tool_name,
    log_context,
)


@pytest.fixture(autouse=True)
def restore_logger() -> Iterator[None]:
    """Put back a plain stderr handler after each test."""
    yield
    logger.remove()
    logger.add(sys.stderr)


class TestEnums:
    """Test LogFormat and LogLevel enums."""

    def test_formats(self) -> None:
        """Format values are lowercase."""
        assert LogFormat.JSON.value == "json"
        assert LogFormat.TEXT.value == "text"

    def test_levels(self) -> None:
        """Level values match loguru's names."""
        assert [level.value for level in LogLevel] == [
            "DEBUG",
            "INFO",
            "WARNING",
            "ERROR",
            "CRITICAL",
        ]


class TestLogContext:
    """Tests for the context variables."""

    def test_empty_outside_context(self) -> None:
        """No prefix without an active context."""
        assert context_prefix() == ""
        assert get_session_id() is None
        assert get_tool_name() is None

    def test_prefix(self) -> None:
        """Session IDs are shortened to eight characters."""
        with log_context(session_id="abcdef123456", tool_name="mental_model"):
            assert context_prefix() == "[sess=abcdef12 tool=mental_model] "
            assert get_session_id() == "abcdef123456"
        assert context_prefix() == ""

    def test_tool_only(self) -> None:
        """Either variable may be set alone."""
        with log_context(tool_name="sequential_thinking"):
            assert context_prefix() == "[tool=sequential_thinking] "

    def test_nested_contexts_restore(self) -> None:
        """Inner contexts are undone on exit."""
        with log_context(session_id="outer", tool_name="a"):
            with log_context(tool_name="b"):
                assert get_tool_name() == "b"
                assert get_session_id() == "outer"
            assert get_tool_name() == "a"

    def test_reset_on_error(self) -> None:
        """Context is reset even when the body raises."""
        with pytest.raises(ValueError), log_context(session_id="s"):
            raise ValueError("x")
        assert get_session_id() is None


class TestConfigureLogging:
    """Tests for handler configuration."""

    def test_context_in_records(self) -> None:
        """Records carry the active context in extra."""
        configure_logging("DEBUG", "text")
        records: list[dict[str, Any]] = []
        sink_id = logger.add(lambda m: records.append(dict(m.record["extra"])), level="DEBUG")

        with log_context(session_id="session-1", tool_name="sequential_thinking"):
            logger.info("inside")
        logger.info("outside")
        logger.remove(sink_id)

        assert records[0]["context"] == "[sess=session- tool=sequential_thinking] "
        assert records[0]["session_id"] == "session-1"
        assert records[0]["tool"] == "sequential_thinking"
        assert records[1]["context"] == ""

    def test_level_filtering(self) -> None:
        """Messages below the configured level are dropped."""
        configure_logging(LogLevel.WARNING, LogFormat.TEXT)
        messages: list[str] = []
        sink_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
        logger.info("quiet")
        logger.warning("loud")
        logger.remove(sink_id)
        assert messages == ["loud"]

    def test_json_file_output(self, tmp_path: Path) -> None:
        """File output is serialized JSON, one record per line."""
        log_file = tmp_path / "logs" / "server.log"
        configure_logging("info", "json", log_file)

        logger.info("hello")
        logger.remove()

        lines = log_file.read_text().strip().splitlines()
        assert json.loads(lines[-1])["record"]["message"] == "hello"

    def test_invalid_level(self) -> None:
        """Unknown level names are rejected."""
        with pytest.raises(ValueError):
            configure_logging("verbose")
