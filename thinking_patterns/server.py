"""Thinking Patterns MCP Server.

FastMCP 2.0 implementation exposing structured reasoning tools.
The calling LLM does all reasoning; these tools track the thought sequence
and recommend which reasoning tool to apply next.

Tools:
1. sequential_thinking - Record a thought, get stage and tool recommendations
2. Structured reasoning tools - mental_model, debugging_approach, decision_framework,
   scientific_method, metacognitive_monitoring, collaborative_reasoning,
   structured_argumentation, visual_reasoning, stochastic_algorithm
3. session_status - Server or session status
4. clear_session - Drop a session's history

Run with: thinking-patterns
Or: python -m thinking_patterns.server
"""

# Note: We intentionally do NOT use `from __future__ import annotations` here
# because it causes issues with Pydantic/FastMCP type resolution at decorator time.

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import orjson
from dotenv import load_dotenv
from fastmcp import Context, FastMCP
from loguru import logger

from thinking_patterns import __version__
from thinking_patterns.config import Config, get_config
from thinking_patterns.tools.registry import ToolRegistry, create_default_registry
from thinking_patterns.tools.session_store import ThoughtSessionStore
from thinking_patterns.utils.errors import ToolExecutionError, ToolNotFoundError
from thinking_patterns.utils.logging import configure_logging

# Load environment variables from .env file (for local development)
load_dotenv()


def _json(data: dict[str, Any] | None, *, indent: bool = True) -> str:
    """Serialize data to JSON string with proper typing.

    Type-safe wrapper around orjson.dumps that returns str.
    """
    if data is None:
        data = {}
    opts = orjson.OPT_INDENT_2 if indent else 0
    result: bytes = orjson.dumps(data, option=opts, default=str)
    return result.decode("utf-8")


def _drop_none(**kwargs: Any) -> dict[str, Any]:
    return {key: value for key, value in kwargs.items() if value is not None}


INSTRUCTIONS = """Thinking Patterns MCP Server - sequential thinking with tool guidance.

You (the LLM) do ALL reasoning. These tools TRACK the sequence and RECOMMEND tools.

1. sequential_thinking(thought, thought_number, total_thoughts, next_thought_needed, ...)
   - Pass session_id to keep history and branches across calls
   - Revise with is_revision + revises_thought
   - Branch with branch_from_thought + branch_id
   - Returns stage (initial/middle/final), current_step plan, recommended_tools

2. Apply whichever tool sequential_thinking recommends:
   - mental_model(model_name, problem, steps?, reasoning?, conclusion?)
   - debugging_approach(approach_name, issue, steps?, findings?, resolution?)
   - decision_framework(decision_statement, options, analysis_type, stage, ...)
   - scientific_method(stage, inquiry_id, iteration, next_stage_needed, ...)
   - metacognitive_monitoring(task, stage, overall_confidence, ...)
   - collaborative_reasoning(topic, personas, stage, active_persona_id, ...)
   - structured_argumentation(claim, conclusion, argument_type, confidence, ...)
   - visual_reasoning(operation, diagram_id, diagram_type, iteration, ...)
   - stochastic_algorithm(algorithm, problem, parameters?)
3. session_status(session_id?) - server stats or one session's history
4. clear_session(session_id) - forget a session

Sessions idle for longer than the configured timeout are evicted.
"""


def create_server(
    store: ThoughtSessionStore | None = None,
    config: Config | None = None,
) -> FastMCP:
    """Build the MCP server around an explicitly owned session store.

    Args:
        store: Session store; one is created from config if omitted.
        config: Configuration; the global config if omitted.

    Returns:
        Configured FastMCP server.

    """
    config = config or get_config()
    if store is None:
        store = ThoughtSessionStore(
            timeout=config.session.timeout,
            cleanup_interval=config.session.cleanup_interval,
        )
    registry: ToolRegistry = create_default_registry(store)

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[None]:
        if config.session.cleanup_enabled:
            store.start_cleanup_task()
        try:
            yield
        finally:
            store.stop_cleanup_task()

    mcp = FastMCP(name=config.server.name, instructions=INSTRUCTIONS, lifespan=lifespan)

    def _run(tool_name: str, raw: dict[str, Any]) -> str:
        try:
            return _json(registry.process(tool_name, raw))
        except ToolNotFoundError as e:
            return _json(ToolExecutionError(tool_name, str(e)).to_dict())

    @mcp.tool
    async def sequential_thinking(
        thought: str,
        thought_number: int,
        total_thoughts: int,
        next_thought_needed: bool,
        is_revision: bool | None = None,
        revises_thought: int | None = None,
        branch_from_thought: int | None = None,
        branch_id: str | None = None,
        needs_more_thoughts: bool | None = None,
        session_id: str | None = None,
        available_tools: list[str] | None = None,
        problem_domain: str | None = None,
        current_step: dict[str, Any] | None = None,
        ctx: Context | None = None,
    ) -> str:
        """Record one thought of a sequence and get guidance for the next step.

        Args:
            thought: The current thinking step
            thought_number: 1-based position of this thought
            total_thoughts: Current estimate of thoughts needed (can change)
            next_thought_needed: Whether another thought follows
            is_revision: Whether this thought revises earlier thinking
            revises_thought: Which thought is being reconsidered
            branch_from_thought: Thought number this branch diverges from
            branch_id: Identifier of the branch
            needs_more_thoughts: The estimate was too low, more thoughts are needed
            session_id: Keep history under this session
            available_tools: Restrict recommendations to these tools
            problem_domain: Domain hint (technical, strategic, research, design, analysis)
            current_step: Caller-supplied plan for this step (step_description,
                recommended_tools, expected_outcome, next_step_conditions)

        Returns:
            JSON with stage, current_step plan, recommended_tools and completion state

        """
        result = _run(
            "sequential_thinking",
            _drop_none(
                thought=thought,
                thought_number=thought_number,
                total_thoughts=total_thoughts,
                next_thought_needed=next_thought_needed,
                is_revision=is_revision,
                revises_thought=revises_thought,
                branch_from_thought=branch_from_thought,
                branch_id=branch_id,
                needs_more_thoughts=needs_more_thoughts,
                session_id=session_id,
                available_tools=available_tools,
                problem_domain=problem_domain,
                current_step=current_step,
            ),
        )
        if ctx:
            await ctx.debug(f"Thought {thought_number}/{total_thoughts} recorded")
        return result

    @mcp.tool
    async def mental_model(
        model_name: str,
        problem: str,
        steps: list[str] | None = None,
        reasoning: str | None = None,
        conclusion: str | None = None,
    ) -> str:
        """Apply a mental model (first principles, opportunity cost, ...) to a problem.

        Returns:
            JSON summary of the applied model

        """
        return _run(
            "mental_model",
            _drop_none(
                model_name=model_name,
                problem=problem,
                steps=steps,
                reasoning=reasoning,
                conclusion=conclusion,
            ),
        )

    @mcp.tool
    async def debugging_approach(
        approach_name: str,
        issue: str,
        steps: list[str] | None = None,
        findings: str | None = None,
        resolution: str | None = None,
    ) -> str:
        """Apply a systematic debugging approach (binary search, cause elimination, ...).

        Returns:
            JSON summary of the applied approach

        """
        return _run(
            "debugging_approach",
            _drop_none(
                approach_name=approach_name,
                issue=issue,
                steps=steps,
                findings=findings,
                resolution=resolution,
            ),
        )

    @mcp.tool
    async def decision_framework(
        decision_statement: str,
        options: list[dict[str, Any]],
        analysis_type: str,
        stage: str,
        decision_id: str,
        iteration: int,
        next_stage_needed: bool,
        criteria: list[dict[str, Any]] | None = None,
        stakeholders: list[str] | None = None,
        constraints: list[str] | None = None,
        time_horizon: str | None = None,
        risk_tolerance: str | None = None,
        recommendation: str | None = None,
    ) -> str:
        """Work through a structured decision analysis.

        Args:
            decision_statement: The decision being made
            options: Options as {name, description, id?}
            analysis_type: expected-utility, multi-criteria, maximin, minimax-regret or satisficing
            stage: problem-definition, options, criteria, evaluation, analysis or recommendation
            decision_id: Identifier tying stages of one decision together
            iteration: Iteration counter
            next_stage_needed: Whether another stage follows
            criteria: Criteria as {name, description, weight, evaluation_method, id?}
            stakeholders: Affected parties
            constraints: Hard limits on acceptable options
            time_horizon: Period the decision applies to
            risk_tolerance: risk-averse, risk-neutral or risk-seeking
            recommendation: The recommended option, once reached

        Returns:
            JSON summary of the decision state

        """
        return _run(
            "decision_framework",
            _drop_none(
                decision_statement=decision_statement,
                options=options,
                analysis_type=analysis_type,
                stage=stage,
                decision_id=decision_id,
                iteration=iteration,
                next_stage_needed=next_stage_needed,
                criteria=criteria,
                stakeholders=stakeholders,
                constraints=constraints,
                time_horizon=time_horizon,
                risk_tolerance=risk_tolerance,
                recommendation=recommendation,
            ),
        )

    @mcp.tool
    async def scientific_method(
        stage: str,
        inquiry_id: str,
        iteration: int,
        next_stage_needed: bool,
        observation: str | None = None,
        question: str | None = None,
        hypothesis: dict[str, Any] | None = None,
        experiment: dict[str, Any] | None = None,
        analysis: str | None = None,
        conclusion: str | None = None,
    ) -> str:
        """Move an inquiry through observation, hypothesis, experiment and conclusion.

        Args:
            stage: observation, question, hypothesis, experiment, analysis, conclusion or iteration
            inquiry_id: Identifier tying stages of one inquiry together
            iteration: Iteration counter
            next_stage_needed: Whether another stage follows
            hypothesis: {statement, variables, assumptions, hypothesis_id, confidence,
                domain, iteration, status}
            experiment: {design, methodology, predictions, experiment_id, hypothesis_id,
                control_measures, results?}

        Returns:
            JSON summary of which stages have content

        """
        return _run(
            "scientific_method",
            _drop_none(
                stage=stage,
                inquiry_id=inquiry_id,
                iteration=iteration,
                next_stage_needed=next_stage_needed,
                observation=observation,
                question=question,
                hypothesis=hypothesis,
                experiment=experiment,
                analysis=analysis,
                conclusion=conclusion,
            ),
        )

    @mcp.tool
    async def metacognitive_monitoring(
        task: str,
        stage: str,
        overall_confidence: float,
        recommended_approach: str,
        monitoring_id: str,
        iteration: int,
        next_assessment_needed: bool,
        uncertainty_areas: list[str] | None = None,
        knowledge_assessment: dict[str, Any] | None = None,
        claims: list[dict[str, Any]] | None = None,
        reasoning_steps: list[dict[str, Any]] | None = None,
    ) -> str:
        """Assess confidence, knowledge boundaries and reasoning quality for a task.

        Returns:
            JSON summary of the assessment

        """
        return _run(
            "metacognitive_monitoring",
            _drop_none(
                task=task,
                stage=stage,
                overall_confidence=overall_confidence,
                recommended_approach=recommended_approach,
                monitoring_id=monitoring_id,
                iteration=iteration,
                next_assessment_needed=next_assessment_needed,
                uncertainty_areas=uncertainty_areas,
                knowledge_assessment=knowledge_assessment,
                claims=claims,
                reasoning_steps=reasoning_steps,
            ),
        )

    @mcp.tool
    async def collaborative_reasoning(
        topic: str,
        personas: list[dict[str, Any]],
        stage: str,
        active_persona_id: str,
        session_id: str,
        iteration: int,
        next_contribution_needed: bool,
        contributions: list[dict[str, Any]] | None = None,
        next_persona_id: str | None = None,
        consensus_points: list[str] | None = None,
        key_insights: list[str] | None = None,
        open_questions: list[str] | None = None,
        final_recommendation: str | None = None,
    ) -> str:
        """Simulate a discussion between expert personas.

        Returns:
            JSON summary of the discussion state

        """
        return _run(
            "collaborative_reasoning",
            _drop_none(
                topic=topic,
                personas=personas,
                stage=stage,
                active_persona_id=active_persona_id,
                session_id=session_id,
                iteration=iteration,
                next_contribution_needed=next_contribution_needed,
                contributions=contributions,
                next_persona_id=next_persona_id,
                consensus_points=consensus_points,
                key_insights=key_insights,
                open_questions=open_questions,
                final_recommendation=final_recommendation,
            ),
        )

    @mcp.tool
    async def structured_argumentation(
        claim: str,
        conclusion: str,
        argument_type: str,
        confidence: float,
        next_argument_needed: bool,
        premises: list[str] | None = None,
        argument_id: str | None = None,
        responds_to: str | None = None,
        supports: list[str] | None = None,
        contradicts: list[str] | None = None,
        strengths: list[str] | None = None,
        weaknesses: list[str] | None = None,
    ) -> str:
        """Record one argument (thesis, antithesis, synthesis, objection or rebuttal).

        Returns:
            JSON summary of the argument

        """
        return _run(
            "structured_argumentation",
            _drop_none(
                claim=claim,
                conclusion=conclusion,
                argument_type=argument_type,
                confidence=confidence,
                next_argument_needed=next_argument_needed,
                premises=premises,
                argument_id=argument_id,
                responds_to=responds_to,
                supports=supports,
                contradicts=contradicts,
                strengths=strengths,
                weaknesses=weaknesses,
            ),
        )

    @mcp.tool
    async def visual_reasoning(
        operation: str,
        diagram_id: str,
        diagram_type: str,
        iteration: int,
        next_operation_needed: bool,
        elements: list[dict[str, Any]] | None = None,
        transformation_type: str | None = None,
        observation: str | None = None,
        insight: str | None = None,
        hypothesis: str | None = None,
    ) -> str:
        """Create, transform or observe a diagram.

        Returns:
            JSON summary of the diagram operation

        """
        return _run(
            "visual_reasoning",
            _drop_none(
                operation=operation,
                diagram_id=diagram_id,
                diagram_type=diagram_type,
                iteration=iteration,
                next_operation_needed=next_operation_needed,
                elements=elements,
                transformation_type=transformation_type,
                observation=observation,
                insight=insight,
                hypothesis=hypothesis,
            ),
        )

    @mcp.tool
    async def stochastic_algorithm(
        algorithm: str,
        problem: str,
        parameters: dict[str, Any] | None = None,
        result: str | None = None,
    ) -> str:
        """Apply a probabilistic algorithm (mdp, mcts, bandit, bayesian, hmm) to a problem.

        Returns:
            JSON summary with a one-line result for known algorithms

        """
        return _run(
            "stochastic_algorithm",
            _drop_none(algorithm=algorithm, problem=problem, parameters=parameters, result=result),
        )

    @mcp.tool
    async def session_status(session_id: str | None = None) -> str:
        """Get server status or a specific session's history.

        Args:
            session_id: Optional session ID to inspect

        Returns:
            JSON with server info and session counts, or the session's thoughts and branches

        """
        try:
            if session_id:
                session = store.get_session(session_id)
                if session is None:
                    error = ToolExecutionError(
                        "session_status", f"Session not found: {session_id}"
                    )
                    return _json(error.to_dict())
                return _json(
                    {
                        **session.to_dict(),
                        "thought_history": [
                            record.model_dump(mode="json", exclude={"current_step"})
                            for record in store.get_thought_history(session_id)
                        ],
                        "branches": {
                            branch_id: [
                                record.model_dump(mode="json", exclude={"current_step"})
                                for record in records
                            ]
                            for branch_id, records in store.get_branches(session_id).items()
                        },
                    }
                )

            return _json(
                {
                    "server": {
                        "name": config.server.name,
                        "transport": config.server.transport,
                        "tools": registry.names() + ["session_status", "clear_session"],
                        "version": __version__,
                    },
                    "sessions": {
                        "total": store.session_count(),
                        "timeout_minutes": config.session.timeout_minutes,
                        "sessions": store.get_session_info(),
                    },
                    "cleanup": {
                        "interval_minutes": config.session.cleanup_interval_minutes,
                        "task_running": store.cleanup_running,
                    },
                    "timestamp": datetime.now(UTC).isoformat(),
                }
            )
        except Exception as e:
            error = ToolExecutionError("session_status", str(e))
            logger.error(f"Status check failed: {e}")
            return _json(error.to_dict())

    @mcp.tool
    async def clear_session(session_id: str) -> str:
        """Forget a session's thought history and branches.

        Args:
            session_id: Session to clear

        Returns:
            JSON confirming whether the session existed

        """
        existed = store.session_exists(session_id)
        store.clear_session(session_id)
        return _json({"session_id": session_id, "cleared": existed, "status": "success"})

    return mcp


_config = get_config()
store = ThoughtSessionStore(
    timeout=_config.session.timeout,
    cleanup_interval=_config.session.cleanup_interval,
)
mcp = create_server(store, _config)


def main() -> None:
    """Run the Thinking Patterns MCP server."""
    config = get_config()
    configure_logging(config.logging.level, config.logging.format, config.logging.file)
    logger.info(f"Starting {config.server.name} (transport: {config.server.transport})")

    try:
        if config.server.transport == "stdio":
            mcp.run(transport="stdio")
        elif config.server.transport == "http":
            mcp.run(transport="streamable-http", host=config.server.host, port=config.server.port)
        elif config.server.transport == "sse":
            mcp.run(transport="sse", host=config.server.host, port=config.server.port)
        else:
            logger.warning(
                f"Unknown transport '{config.server.transport}', falling back to stdio"
            )
            mcp.run(transport="stdio")
    finally:
        store.close()


if __name__ == "__main__":
    main()
