"""Sequential thinking tracker.

Interprets one thought in the context of its numbered, branchable and
revisable sequence: classifies its stage, attaches a recommended plan for
the current step, and optionally records it in a session store.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from loguru import logger

from .recommendation_engine import KNOWN_TOOLS, ToolRecommendationEngine
from .session_store import ThoughtSessionStore
from .stage_rules import completion_percentage, completion_status, determine_stage
from .thought_types import ThoughtRecord, ToolContext, ToolRecommendation

FRAMEWORK_NAME = "thinking-patterns"
HISTORY_SUMMARY_LENGTH = 5
HISTORY_SUMMARY_CHARS = 120

CALL_OPTIONS = frozenset({"session_id", "available_tools", "problem_domain"})


class SequentialThinkingInput(ThoughtRecord):
    """Tool-call input: a thought record plus per-call options."""

    session_id: str | None = None
    available_tools: list[str] | None = None
    problem_domain: str | None = None

    def to_record(self) -> ThoughtRecord:
        """The thought record without the call options."""
        return ThoughtRecord.model_validate(self.model_dump(exclude=set(CALL_OPTIONS)))


class SequentialThinkingTool:
    """Processes thought records into enriched sequence responses.

    Args:
        engine: Recommendation engine; a default one is created if omitted.
        store: Session store used when a session ID is supplied. Without a
            store the tool is stateless.
        available_tools: Default tools offered to the engine when the caller
            supplies no context.

    Example:
        tool = SequentialThinkingTool(store=ThoughtSessionStore())
        result = tool.process(record, session_id="abc")
        result["stage"]  # "initial"
    """

    name = "sequential_thinking"
    description = (
        "A detailed tool for dynamic and reflective problem-solving through thoughts. "
        "Tracks a numbered, revisable, branchable sequence and recommends which "
        "reasoning tool to apply next."
    )
    input_model = SequentialThinkingInput

    def __init__(
        self,
        engine: ToolRecommendationEngine | None = None,
        store: ThoughtSessionStore | None = None,
        available_tools: list[str] | None = None,
    ) -> None:
        self.engine = engine or ToolRecommendationEngine()
        self.store = store
        self.available_tools = list(dict.fromkeys(available_tools or KNOWN_TOOLS))

    def update_available_tools(self, tools: list[str]) -> None:
        """Replace the default available tools (deduplicated, order kept)."""
        self.available_tools = list(dict.fromkeys(tools))

    def _history_summaries(self, session_id: str | None) -> list[str]:
        if self.store is None or not session_id:
            return []
        history = self.store.get_thought_history(session_id)
        return [
            record.thought[:HISTORY_SUMMARY_CHARS]
            for record in history[-HISTORY_SUMMARY_LENGTH:]
        ]

    def build_context(
        self,
        session_id: str | None = None,
        context: ToolContext | None = None,
    ) -> ToolContext:
        """Build the tool context for a recommendation pass.

        A caller-supplied context wins; otherwise the default available tools
        are used. Session history summaries are filled in when the caller
        did not provide any.
        """
        if context is None:
            context = ToolContext(available_tools=self.available_tools)
        if not context.session_history:
            summaries = self._history_summaries(session_id)
            if summaries:
                context = context.model_copy(update={"session_history": summaries})
        return context

    def get_tool_recommendations(
        self,
        thought: str,
        thought_number: int,
        total_thoughts: int,
        context: ToolContext | None = None,
    ) -> list[ToolRecommendation]:
        """Raw engine ranking for a thought, without recording anything."""
        return self.engine.generate_recommendations(
            thought, thought_number, total_thoughts, self.build_context(context=context)
        )

    def _record(self, session_id: str, record: ThoughtRecord) -> int:
        assert self.store is not None
        self.store.add_thought(session_id, record)
        if record.is_branch:
            assert record.branch_id is not None
            self.store.add_branch(session_id, record.branch_id, record)
        return len(self.store.get_thought_history(session_id))

    def process(
        self,
        record: ThoughtRecord,
        *,
        session_id: str | None = None,
        context: ToolContext | None = None,
    ) -> dict[str, Any]:
        """Process one thought.

        Args:
            record: Validated thought record.
            session_id: Optional session to record the thought in.
            context: Optional tool context overriding the defaults.

        Returns:
            Response dict with the echoed sequence fields, ``status``
            ("success"), ``stage``, the current step plan, completion state
            and a ``timestamp``.

        """
        if record.thought_number > record.total_thoughts:
            record = record.model_copy(update={"total_thoughts": record.thought_number})

        has_current_step = record.current_step is not None
        if not has_current_step:
            tool_context = self.build_context(session_id, context)
            plan = self.engine.generate_current_step(
                record.thought, record.thought_number, record.total_thoughts, tool_context
            )
            record = record.model_copy(update={"current_step": plan})
        assert record.current_step is not None

        stage = determine_stage(record.thought_number, record.total_thoughts)

        history_length = None
        if self.store is not None and session_id:
            history_length = self._record(session_id, record)

        kind = "revision" if record.is_revision else "branch" if record.is_branch else "thought"
        logger.info(
            f"Processed {kind} {record.thought_number}/{record.total_thoughts} "
            f"(stage={stage.value})"
        )

        return {
            "thought": record.thought,
            "thought_number": record.thought_number,
            "total_thoughts": record.total_thoughts,
            "next_thought_needed": record.next_thought_needed,
            "status": "success",
            "stage": stage.value,
            "is_revision": bool(record.is_revision),
            "revises_thought": record.revises_thought,
            "is_branch": record.is_branch,
            "branch_from_thought": record.branch_from_thought,
            "branch_id": record.branch_id,
            "needs_more_thoughts": record.needs_more_thoughts,
            "has_current_step": has_current_step,
            "current_step": record.current_step.model_dump(mode="json"),
            "recommended_tools": [
                rec.model_dump(mode="json") for rec in record.current_step.recommended_tools
            ],
            "completion_status": completion_status(record).value,
            "completion_percentage": completion_percentage(
                record.thought_number, record.total_thoughts
            ),
            "session_id": session_id,
            "history_length": history_length,
            "framework": FRAMEWORK_NAME,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    def handle(self, validated: SequentialThinkingInput) -> dict[str, Any]:
        """Registry entry point."""
        context = None
        if validated.available_tools is not None or validated.problem_domain:
            context = ToolContext(
                available_tools=(
                    self.available_tools
                    if validated.available_tools is None
                    else validated.available_tools
                ),
                problem_domain=validated.problem_domain,
            )
        return self.process(
            validated.to_record(), session_id=validated.session_id, context=context
        )
