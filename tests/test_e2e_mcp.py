"""End-to-end tests for MCP protocol integration.

These tests verify the full MCP protocol flow using FastMCP Client.
"""

from __future__ import annotations

import json
from typing import Any

import pytest
from fastmcp import Client, FastMCP

from thinking_patterns.config import Config
from thinking_patterns.server import create_server
from thinking_patterns.tools.recommendation_engine import KNOWN_TOOLS
from thinking_patterns.tools.session_store import ThoughtSessionStore


@pytest.fixture
def server_store() -> ThoughtSessionStore:
    return ThoughtSessionStore()


@pytest.fixture
def server(server_store: ThoughtSessionStore) -> FastMCP:
    return create_server(server_store, Config())


async def _call(client: Client, tool: str, args: dict[str, Any]) -> dict[str, Any]:
    result = await client.call_tool(tool, args)
    assert not result.is_error, f"Tool returned error: {result.data}"
    return json.loads(result.data)


class TestMCPProtocol:
    """Test MCP protocol compliance and tool registration."""

    @pytest.mark.asyncio
    async def test_tools_registered(self, server: FastMCP) -> None:
        """Test that all expected tools are registered."""
        async with Client(server) as client:
            tools = await client.list_tools()

        tool_names = {tool.name for tool in tools}
        expected = {"sequential_thinking", *KNOWN_TOOLS, "session_status", "clear_session"}
        assert tool_names == expected

    @pytest.mark.asyncio
    async def test_module_level_server(self) -> None:
        """The importable server instance exposes the same tools."""
        from thinking_patterns.server import mcp

        async with Client(mcp) as client:
            tools = await client.list_tools()
        assert "sequential_thinking" in {tool.name for tool in tools}


class TestSequentialThinkingFlow:
    """Test a thought sequence through the protocol."""

    @pytest.mark.asyncio
    async def test_sequence_workflow(
        self, server: FastMCP, server_store: ThoughtSessionStore
    ) -> None:
        """Thoughts move from initial to final and are recorded."""
        async with Client(server) as client:
            first = await _call(
                client,
                "sequential_thinking",
                {
                    "thought": "I have a problem with the system",
                    "thought_number": 1,
                    "total_thoughts": 3,
                    "next_thought_needed": True,
                    "session_id": "e2e",
                },
            )
            assert first["status"] == "success"
            assert first["stage"] == "initial"
            assert first["recommended_tools"][0]["tool_name"] == "mental_model"

            second = await _call(
                client,
                "sequential_thinking",
                {
                    "thought": "Let me analyze the research data",
                    "thought_number": 2,
                    "total_thoughts": 3,
                    "next_thought_needed": True,
                    "session_id": "e2e",
                },
            )
            assert second["stage"] == "middle"

            last = await _call(
                client,
                "sequential_thinking",
                {
                    "thought": "We must decide which option to choose",
                    "thought_number": 3,
                    "total_thoughts": 3,
                    "next_thought_needed": False,
                    "session_id": "e2e",
                },
            )
            assert last["stage"] == "final"
            assert last["completion_status"] == "sequence complete"
            assert last["history_length"] == 3

        assert len(server_store.get_thought_history("e2e")) == 3

    @pytest.mark.asyncio
    async def test_branch_and_status(self, server: FastMCP) -> None:
        """Branches show up in the session status."""
        async with Client(server) as client:
            await _call(
                client,
                "sequential_thinking",
                {
                    "thought": "Start",
                    "thought_number": 1,
                    "total_thoughts": 3,
                    "next_thought_needed": True,
                    "session_id": "branchy",
                },
            )
            await _call(
                client,
                "sequential_thinking",
                {
                    "thought": "Alternative route",
                    "thought_number": 2,
                    "total_thoughts": 3,
                    "next_thought_needed": True,
                    "branch_from_thought": 1,
                    "branch_id": "alt",
                    "session_id": "branchy",
                },
            )
            status = await _call(client, "session_status", {"session_id": "branchy"})

        assert status["thought_count"] == 2
        assert status["branches"]["alt"][0]["thought"] == "Alternative route"
        assert "current_step" not in status["thought_history"][0]

    @pytest.mark.asyncio
    async def test_options_passed_through(self, server: FastMCP) -> None:
        """available_tools and problem_domain reach the engine."""
        async with Client(server) as client:
            response = await _call(
                client,
                "sequential_thinking",
                {
                    "thought": "I have a problem with the system",
                    "thought_number": 1,
                    "total_thoughts": 3,
                    "next_thought_needed": True,
                    "available_tools": ["debugging_approach", "scientific_method"],
                    "problem_domain": "technical",
                },
            )
        assert [r["tool_name"] for r in response["recommended_tools"]] == [
            "debugging_approach",
            "scientific_method",
        ]

    @pytest.mark.asyncio
    async def test_recommendations_are_callable(self, server: FastMCP) -> None:
        """Every default recommendation names a tool the server lists."""
        async with Client(server) as client:
            listed = {tool.name for tool in await client.list_tools()}
            response = await _call(
                client,
                "sequential_thinking",
                {
                    "thought": "Time to decide on a strategy option",
                    "thought_number": 3,
                    "total_thoughts": 3,
                    "next_thought_needed": False,
                },
            )
        names = {rec["tool_name"] for rec in response["recommended_tools"]}
        assert names
        assert names <= listed

    @pytest.mark.asyncio
    async def test_caller_current_step(self, server: FastMCP) -> None:
        """A caller-supplied current_step is kept instead of generated."""
        async with Client(server) as client:
            response = await _call(
                client,
                "sequential_thinking",
                {
                    "thought": "Check the cache layer",
                    "thought_number": 2,
                    "total_thoughts": 4,
                    "next_thought_needed": True,
                    "current_step": {
                        "step_description": "Inspect cache hit rates",
                        "expected_outcome": "Know whether misses explain latency",
                        "next_step_conditions": ["hit rate below 80%"],
                    },
                },
            )
        assert response["status"] == "success"
        assert response["has_current_step"] is True
        assert response["current_step"]["step_description"] == "Inspect cache hit rates"
        assert response["recommended_tools"] == []

    @pytest.mark.asyncio
    async def test_invalid_input_envelope(self, server: FastMCP) -> None:
        """Constraint violations come back as a failed envelope."""
        async with Client(server) as client:
            response = await _call(
                client,
                "sequential_thinking",
                {
                    "thought": "x",
                    "thought_number": 0,
                    "total_thoughts": 3,
                    "next_thought_needed": True,
                },
            )
        assert response["status"] == "failed"
        assert response["tool"] == "sequential_thinking"
        assert "thought_number" in response["error"]


class TestSessionTools:
    """Test status and clear tools."""

    @pytest.mark.asyncio
    async def test_server_status(self, server: FastMCP) -> None:
        """Server status lists tools and sessions."""
        async with Client(server) as client:
            status = await _call(client, "session_status", {})

        assert status["server"]["name"] == "Thinking-Patterns-MCP"
        assert "clear_session" in status["server"]["tools"]
        assert status["sessions"]["total"] == 0
        assert status["sessions"]["timeout_minutes"] == 60

    @pytest.mark.asyncio
    async def test_unknown_session(self, server: FastMCP) -> None:
        """Unknown sessions come back as a failed envelope, not a raise."""
        async with Client(server) as client:
            result = await client.call_tool("session_status", {"session_id": "ghost"})
        status = json.loads(result.data)

        assert status["status"] == "failed"
        assert status["tool"] == "session_status"
        assert status["error"] == "Session not found: ghost"
        assert "timestamp" in status
        assert result.data.startswith("{\n")

    @pytest.mark.asyncio
    async def test_clear_session(
        self, server: FastMCP, server_store: ThoughtSessionStore
    ) -> None:
        """Clearing removes the session; clearing again reports nothing cleared."""
        async with Client(server) as client:
            await _call(
                client,
                "sequential_thinking",
                {
                    "thought": "Start",
                    "thought_number": 1,
                    "total_thoughts": 2,
                    "next_thought_needed": True,
                    "session_id": "tmp",
                },
            )
            cleared = await _call(client, "clear_session", {"session_id": "tmp"})
            again = await _call(client, "clear_session", {"session_id": "tmp"})

        assert cleared == {"session_id": "tmp", "cleared": True, "status": "success"}
        assert again["cleared"] is False
        assert not server_store.session_exists("tmp")

    @pytest.mark.asyncio
    async def test_reasoning_tools(self, server: FastMCP) -> None:
        """Mental model and debugging tools summarize their input."""
        async with Client(server) as client:
            model = await _call(
                client,
                "mental_model",
                {"model_name": "first_principles", "problem": "Slow builds"},
            )
            debug = await _call(
                client,
                "debugging_approach",
                {"approach_name": "binary_search", "issue": "Regression", "steps": ["bisect"]},
            )

        assert model["status"] == "success"
        assert model["has_steps"] is False
        assert debug["step_count"] == 1


class TestStructuredReasoningTools:
    """Each structured reasoning tool round-trips through the protocol."""

    @pytest.mark.asyncio
    async def test_decision_framework(self, server: FastMCP) -> None:
        """Nested options and criteria are accepted as plain objects."""
        async with Client(server) as client:
            result = await _call(
                client,
                "decision_framework",
                {
                    "decision_statement": "Choose a queue",
                    "options": [{"name": "Kafka", "description": "Log based"}],
                    "criteria": [
                        {
                            "name": "ops cost",
                            "description": "Effort to run",
                            "weight": 0.5,
                            "evaluation_method": "qualitative",
                        }
                    ],
                    "analysis_type": "multi-criteria",
                    "stage": "recommendation",
                    "decision_id": "queue",
                    "iteration": 2,
                    "next_stage_needed": False,
                    "recommendation": "Kafka",
                },
            )
        assert result["status"] == "success"
        assert result["option_count"] == 1
        assert result["has_recommendation"] is True

    @pytest.mark.asyncio
    async def test_scientific_method(self, server: FastMCP) -> None:
        """Inquiry stages are summarized."""
        async with Client(server) as client:
            result = await _call(
                client,
                "scientific_method",
                {
                    "stage": "question",
                    "question": "Why do retries spike?",
                    "inquiry_id": "retries",
                    "iteration": 0,
                    "next_stage_needed": True,
                },
            )
        assert result["has_question"] is True
        assert result["has_hypothesis"] is False

    @pytest.mark.asyncio
    async def test_metacognitive_monitoring(self, server: FastMCP) -> None:
        """Confidence and uncertainty areas are echoed."""
        async with Client(server) as client:
            result = await _call(
                client,
                "metacognitive_monitoring",
                {
                    "task": "Review a proof",
                    "stage": "evaluation",
                    "overall_confidence": 0.4,
                    "uncertainty_areas": ["lemma 2"],
                    "recommended_approach": "Re-derive lemma 2",
                    "monitoring_id": "proof",
                    "iteration": 1,
                    "next_assessment_needed": False,
                },
            )
        assert result["overall_confidence"] == 0.4
        assert result["uncertainty_area_count"] == 1

    @pytest.mark.asyncio
    async def test_collaborative_reasoning(self, server: FastMCP) -> None:
        """Personas are counted."""
        async with Client(server) as client:
            result = await _call(
                client,
                "collaborative_reasoning",
                {
                    "topic": "API versioning",
                    "personas": [{"id": "dev", "name": "Developer"}],
                    "stage": "ideation",
                    "active_persona_id": "dev",
                    "session_id": "versioning",
                    "iteration": 0,
                    "next_contribution_needed": True,
                },
            )
        assert result["persona_count"] == 1
        assert result["contribution_count"] == 0

    @pytest.mark.asyncio
    async def test_structured_argumentation(self, server: FastMCP) -> None:
        """Arguments are summarized."""
        async with Client(server) as client:
            result = await _call(
                client,
                "structured_argumentation",
                {
                    "claim": "Types reduce bugs",
                    "premises": ["Checked at build time"],
                    "conclusion": "Adopt type checking",
                    "argument_type": "thesis",
                    "confidence": 0.8,
                    "next_argument_needed": True,
                },
            )
        assert result["argument_type"] == "thesis"
        assert result["premise_count"] == 1

    @pytest.mark.asyncio
    async def test_visual_reasoning(self, server: FastMCP) -> None:
        """Diagram elements are counted."""
        async with Client(server) as client:
            result = await _call(
                client,
                "visual_reasoning",
                {
                    "operation": "create",
                    "elements": [{"id": "start", "type": "node", "label": "Start"}],
                    "diagram_id": "flow",
                    "diagram_type": "flowchart",
                    "iteration": 0,
                    "next_operation_needed": True,
                },
            )
        assert result["element_count"] == 1
        assert result["transformation_type"] is None

    @pytest.mark.asyncio
    async def test_stochastic_algorithm(self, server: FastMCP) -> None:
        """Known algorithms produce a summary result."""
        async with Client(server) as client:
            result = await _call(
                client,
                "stochastic_algorithm",
                {"algorithm": "hmm", "problem": "Speech tagging"},
            )
        assert result["has_result"] is True
        assert "hidden states" in result["result"]

    @pytest.mark.asyncio
    async def test_invalid_enum_envelope(self, server: FastMCP) -> None:
        """Out-of-range enum values come back as a failed envelope."""
        async with Client(server) as client:
            result = await _call(
                client,
                "visual_reasoning",
                {
                    "operation": "explode",
                    "diagram_id": "flow",
                    "diagram_type": "flowchart",
                    "iteration": 0,
                    "next_operation_needed": False,
                },
            )
        assert result["status"] == "failed"
        assert result["tool"] == "visual_reasoning"
