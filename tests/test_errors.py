"""Unit tests for thinking_patterns/utils/errors.py."""

from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import BaseModel, Field, ValidationError

from thinking_patterns.utils.errors import (
    ThinkingPatternsException,
    ToolExecutionError,
    ToolNotFoundError,
    ValidationException,
)


class _Model(BaseModel):
    name: str
    count: int = Field(ge=1)


def _validation_error(**data) -> ValidationError:
    with pytest.raises(ValidationError) as exc_info:
        _Model(**data)
    return exc_info.value


class TestValidationException:
    """Tests for ValidationException."""

    def test_from_pydantic_message(self) -> None:
        """Messages list each failing field."""
        error = ValidationException.from_pydantic(_validation_error(count=0))
        message = str(error)
        assert message.startswith("Validation failed: ")
        assert "name: Field required" in message
        assert "count: " in message
        assert len(error.errors) == 2

    def test_is_base_exception(self) -> None:
        """Derives from the package base exception."""
        assert isinstance(ValidationException("x"), ThinkingPatternsException)


class TestToolNotFoundError:
    """Tests for ToolNotFoundError."""

    def test_message_with_available(self) -> None:
        """Available tools are listed."""
        error = ToolNotFoundError("foo", ["a", "b"])
        assert str(error) == "Tool 'foo' not found. Available tools: a, b"
        assert error.tool_name == "foo"

    def test_message_without_available(self) -> None:
        """No list when nothing is registered."""
        assert str(ToolNotFoundError("foo")) == "Tool 'foo' not found"


class TestToolExecutionError:
    """Tests for ToolExecutionError."""

    def test_to_dict(self) -> None:
        """Envelope has the fixed keys."""
        error = ToolExecutionError("mental_model", "bad input", {"hint": "x"})
        data = error.to_dict()

        assert data["error"] == "bad input"
        assert data["status"] == "failed"
        assert data["tool"] == "mental_model"
        assert data["details"] == {"hint": "x"}
        datetime.fromisoformat(data["timestamp"])

    def test_str(self) -> None:
        """String form names the tool."""
        assert str(ToolExecutionError("t", "oops")) == "Tool t failed: oops"

    def test_from_exception(self) -> None:
        """Arbitrary exceptions keep their type name."""
        error = ToolExecutionError.from_exception("t", KeyError("k"))
        assert error.details == {"type": "KeyError"}

    def test_from_validation_exception(self) -> None:
        """Validation failures list the failing fields."""
        validation = ValidationException.from_pydantic(_validation_error(name="x", count=0))
        error = ToolExecutionError.from_exception("t", validation)
        assert error.details == {"type": "ValidationException", "fields": ["count"]}
