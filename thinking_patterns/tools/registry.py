"""Name-keyed registry of reasoning tools.

Each tool is an independent object satisfying `ReasoningTool`: a pydantic
input model for validation and a `handle()` that turns validated input into
a plain result dict. The registry owns the validate -> handle -> envelope
sequence, so tools never format errors themselves.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from loguru import logger
from pydantic import BaseModel, ValidationError

from thinking_patterns.utils.errors import (
    ToolExecutionError,
    ToolNotFoundError,
    ValidationException,
)
from thinking_patterns.utils.logging import log_context

from .reasoning_models import STRUCTURED_TOOLS
from .sequential_thinking import SequentialThinkingTool
from .session_store import ThoughtSessionStore


@runtime_checkable
class ReasoningTool(Protocol):
    """Capability interface implemented by every registered tool."""

    name: str
    description: str
    input_model: type[BaseModel]

    def handle(self, validated: Any) -> dict[str, Any]: ...


class ToolRegistry:
    """Maps tool names to tool implementations.

    Example:
        registry = ToolRegistry()
        registry.register(MentalModelTool())
        registry.process("mental_model", {"model_name": "first_principles", ...})
    """

    def __init__(self) -> None:
        self._tools: dict[str, ReasoningTool] = {}

    def register(self, tool: ReasoningTool) -> None:
        """Register a tool under its name, replacing any previous one."""
        if tool.name in self._tools:
            logger.warning(f"Replacing registered tool '{tool.name}'")
        self._tools[tool.name] = tool

    def get(self, name: str) -> ReasoningTool:
        """Look up a tool by (case-insensitive) name.

        Raises:
            ToolNotFoundError: If no tool is registered under the name.

        """
        tool = self._tools.get(name.lower())
        if tool is None:
            raise ToolNotFoundError(name, self.names())
        return tool

    def has(self, name: str) -> bool:
        return name.lower() in self._tools

    def names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[dict[str, Any]]:
        """Name, description and JSON schema for every tool."""
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.input_model.model_json_schema(),
            }
            for tool in self._tools.values()
        ]

    def validate(self, name: str, raw: Any) -> BaseModel:
        """Validate raw input against a tool's input model.

        Raises:
            ToolNotFoundError: Unknown tool.
            ValidationException: Input does not satisfy the schema.

        """
        tool = self.get(name)
        try:
            return tool.input_model.model_validate(raw)
        except ValidationError as e:
            raise ValidationException.from_pydantic(e) from e

    def process(self, name: str, raw: Any) -> dict[str, Any]:
        """Validate and run a tool, returning its result or a failed envelope.

        Unknown tool names are not part of the envelope contract and raise
        ToolNotFoundError so the protocol layer can report them.
        """
        tool = self.get(name)
        session_id = raw.get("session_id") if isinstance(raw, dict) else None
        if not isinstance(session_id, str):
            session_id = None
        with log_context(session_id=session_id, tool_name=tool.name):
            try:
                return tool.handle(self.validate(name, raw))
            except Exception as e:
                error = ToolExecutionError.from_exception(tool.name, e)
                logger.error(f"Tool call failed: {error}")
                return error.to_dict()


def create_default_registry(store: ThoughtSessionStore | None = None) -> ToolRegistry:
    """Registry with sequential thinking and every structured reasoning tool.

    The tracker's default recommendation pool is narrowed to the reasoning
    tools actually registered, so recommendations always name a callable tool.

    Args:
        store: Session store shared with the sequential thinking tool.

    """
    registry = ToolRegistry()
    tracker = SequentialThinkingTool(store=store)
    registry.register(tracker)
    for tool_class in STRUCTURED_TOOLS:
        registry.register(tool_class())
    tracker.update_available_tools([name for name in registry.names() if name != tracker.name])
    return registry
