"""Heuristic tool recommendation for sequential thinking.

Combines two rule tables into one ranked list:

    stage table   - what usually helps at the start, middle or end of a sequence
    domain table  - which tools suit the problem's domain, boosted when the
                    tool also fits the thought's intent

Only tools listed in ``ToolContext.available_tools`` are ever returned.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from .content_analysis import ContentAnalysis, analyze_thought
from .stage_rules import complexity_bucket, determine_stage, estimate_duration
from .thought_types import (
    CurrentStep,
    ProblemDomain,
    ThoughtIntent,
    ThoughtStage,
    ToolContext,
    ToolRecommendation,
)

MAX_RECOMMENDATIONS = 5

TOOL_DESCRIPTIONS: dict[str, str] = {
    "mental_model": (
        "Structured thinking frameworks like first principles, opportunity cost analysis, "
        "and systematic problem decomposition"
    ),
    "debugging_approach": (
        "Systematic debugging methods including binary search, divide and conquer, "
        "and cause elimination"
    ),
    "stochastic_algorithm": (
        "Probabilistic decision-making tools including MDPs, Monte Carlo methods, "
        "and Bayesian optimization"
    ),
    "collaborative_reasoning": (
        "Multi-perspective problem solving with diverse viewpoints and stakeholder analysis"
    ),
    "decision_framework": (
        "Structured decision analysis with criteria evaluation and outcome modeling"
    ),
    "metacognitive_monitoring": "Self-assessment of reasoning quality and knowledge gaps",
    "scientific_method": "Formal hypothesis testing and experimental validation",
    "structured_argumentation": "Dialectical reasoning and systematic argument analysis",
    "visual_reasoning": "Diagram-based thinking and spatial problem solving",
}

KNOWN_TOOLS: tuple[str, ...] = tuple(TOOL_DESCRIPTIONS)

DOMAIN_TOOLS: dict[ProblemDomain, tuple[str, ...]] = {
    ProblemDomain.TECHNICAL: ("debugging_approach", "scientific_method", "mental_model"),
    ProblemDomain.STRATEGIC: (
        "decision_framework",
        "collaborative_reasoning",
        "stochastic_algorithm",
    ),
    ProblemDomain.RESEARCH: ("scientific_method", "metacognitive_monitoring", "mental_model"),
    ProblemDomain.DESIGN: (
        "visual_reasoning",
        "collaborative_reasoning",
        "structured_argumentation",
    ),
    ProblemDomain.ANALYSIS: ("mental_model", "debugging_approach", "metacognitive_monitoring"),
}

TOOL_INTENTS: dict[str, frozenset[ThoughtIntent]] = {
    "debugging_approach": frozenset({ThoughtIntent.PROBLEM_IDENTIFICATION}),
    "scientific_method": frozenset({ThoughtIntent.ANALYSIS, ThoughtIntent.EVALUATION}),
    "decision_framework": frozenset({ThoughtIntent.DECISION_MAKING}),
    "mental_model": frozenset({ThoughtIntent.EXPLORATION, ThoughtIntent.PROBLEM_IDENTIFICATION}),
    "collaborative_reasoning": frozenset({ThoughtIntent.PLANNING, ThoughtIntent.DECISION_MAKING}),
}

DOMAIN_BASE_CONFIDENCE = 0.6
DOMAIN_RANK_PENALTY = 0.1
INTENT_BOOST = 0.2
MERGE_BONUS = 0.1


@dataclass(frozen=True, slots=True)
class StagePhrases:
    """Fixed plan wording for one stage."""

    description: str
    expected_outcome: str
    next_step_conditions: tuple[str, ...]


STAGE_PHRASES: dict[ThoughtStage, StagePhrases] = {
    ThoughtStage.INITIAL: StagePhrases(
        description="Initial problem analysis and framework establishment",
        expected_outcome="Clear problem definition and analytical framework",
        next_step_conditions=(
            "Problem scope clearly defined",
            "Key variables identified",
            "Analysis approach selected",
        ),
    ),
    ThoughtStage.MIDDLE: StagePhrases(
        description="Deep analysis and systematic investigation",
        expected_outcome="Detailed analysis results and validated insights",
        next_step_conditions=(
            "Sufficient data gathered",
            "Analysis methods validated",
            "Initial hypotheses tested",
        ),
    ),
    ThoughtStage.FINAL: StagePhrases(
        description="Solution synthesis and decision formulation",
        expected_outcome="Concrete solution or decision with supporting rationale",
        next_step_conditions=(
            "All options evaluated",
            "Decision criteria met",
            "Implementation plan outlined",
        ),
    ),
}


def stage_recommendations(
    stage: ThoughtStage, analysis: ContentAnalysis
) -> list[ToolRecommendation]:
    """Recommendations from the fixed per-stage table."""
    recommendations: list[ToolRecommendation] = []

    if stage == ThoughtStage.INITIAL:
        recommendations.append(
            ToolRecommendation(
                tool_name="mental_model",
                confidence=0.8,
                rationale=(
                    "Mental models help structure initial problem understanding "
                    "and break down complex issues"
                ),
                priority=1,
                alternative_tools=["debugging_approach"],
            )
        )
        if analysis.intent == ThoughtIntent.PROBLEM_IDENTIFICATION:
            recommendations.append(
                ToolRecommendation(
                    tool_name="debugging_approach",
                    confidence=0.7,
                    rationale=(
                        "Debugging approaches provide systematic methods for "
                        "identifying root causes"
                    ),
                    priority=2,
                )
            )

    elif stage == ThoughtStage.MIDDLE:
        if analysis.intent == ThoughtIntent.ANALYSIS:
            recommendations.append(
                ToolRecommendation(
                    tool_name="scientific_method",
                    confidence=0.8,
                    rationale=(
                        "Scientific method provides rigorous analysis framework for "
                        "mid-stage investigation"
                    ),
                    priority=1,
                )
            )
        recommendations.append(
            ToolRecommendation(
                tool_name="metacognitive_monitoring",
                confidence=0.6,
                rationale="Monitor reasoning quality and identify knowledge gaps during analysis",
                priority=3,
            )
        )

    elif stage == ThoughtStage.FINAL:
        recommendations.append(
            ToolRecommendation(
                tool_name="decision_framework",
                confidence=0.9,
                rationale="Decision frameworks help evaluate options and make final choices",
                priority=1,
            )
        )
        if analysis.domain == ProblemDomain.STRATEGIC:
            recommendations.append(
                ToolRecommendation(
                    tool_name="collaborative_reasoning",
                    confidence=0.7,
                    rationale=(
                        "Multiple perspectives validate final decisions and identify blind spots"
                    ),
                    priority=2,
                )
            )

    else:  # pragma: no cover - ThoughtStage is exhaustive
        raise ValueError(f"Unknown thinking stage: {stage!r}")

    return recommendations


def tool_matches_intent(tool_name: str, intent: ThoughtIntent) -> bool:
    """Whether a tool is associated with the given intent."""
    return intent in TOOL_INTENTS.get(tool_name, frozenset())


def domain_rationale(tool_name: str, domain: str) -> str:
    """Rationale for a domain-table recommendation."""
    description = TOOL_DESCRIPTIONS.get(tool_name, "Tool for systematic analysis")
    return f"{description}. Particularly effective for {domain} domain problems"


def resolve_domain(domain: str | ProblemDomain | None) -> ProblemDomain | None:
    """Map a domain name onto the table's domains; unknown names give None."""
    if isinstance(domain, ProblemDomain):
        return domain
    if not domain:
        return None
    try:
        return ProblemDomain(domain.strip().lower())
    except ValueError:
        return None


def domain_recommendations(
    domain: str | ProblemDomain | None, analysis: ContentAnalysis
) -> list[ToolRecommendation]:
    """Recommendations from the fixed domain table. Unknown domains yield []."""
    resolved = resolve_domain(domain)
    if resolved is None:
        return []

    recommendations: list[ToolRecommendation] = []
    for position, tool_name in enumerate(DOMAIN_TOOLS.get(resolved, ())):
        confidence = DOMAIN_BASE_CONFIDENCE - DOMAIN_RANK_PENALTY * position
        if tool_matches_intent(tool_name, analysis.intent):
            confidence += INTENT_BOOST
        recommendations.append(
            ToolRecommendation(
                tool_name=tool_name,
                confidence=round(min(confidence, 1.0), 3),
                rationale=domain_rationale(tool_name, resolved.value),
                priority=position + 1,
            )
        )
    return recommendations


def combine_recommendations(
    stage_recs: list[ToolRecommendation],
    domain_recs: list[ToolRecommendation],
    available_tools: list[str],
) -> list[ToolRecommendation]:
    """Merge stage and domain recommendations, keeping only available tools.

    Stage recommendations are inserted first. A domain recommendation for a
    tool already present averages the two confidences, adds a small bonus
    (capped at 1.0) and appends its rationale.
    """
    available = set(available_tools)
    combined: dict[str, ToolRecommendation] = {}

    for rec in stage_recs:
        if rec.tool_name in available:
            combined[rec.tool_name] = rec

    for rec in domain_recs:
        if rec.tool_name not in available:
            continue
        existing = combined.get(rec.tool_name)
        if existing is None:
            combined[rec.tool_name] = rec
            continue
        merged = min((existing.confidence + rec.confidence) / 2 + MERGE_BONUS, 1.0)
        combined[rec.tool_name] = existing.model_copy(
            update={
                "confidence": round(merged, 3),
                "rationale": f"{existing.rationale}; {rec.rationale}",
            }
        )

    return list(combined.values())


class ToolRecommendationEngine:
    """Recommends reasoning tools for a thought at a given sequence position.

    Stateless; one instance can serve any number of sessions.

    Example:
        engine = ToolRecommendationEngine()
        context = ToolContext(available_tools=["mental_model", "debugging_approach"])
        recs = engine.generate_recommendations("I have a problem", 1, 3, context)
        recs[0].tool_name  # "mental_model"
    """

    def __init__(self, max_recommendations: int = MAX_RECOMMENDATIONS) -> None:
        self.max_recommendations = max_recommendations

    def generate_recommendations(
        self,
        thought: str,
        thought_number: int,
        total_thoughts: int,
        context: ToolContext,
        *,
        analysis: ContentAnalysis | None = None,
    ) -> list[ToolRecommendation]:
        """Rank tool recommendations for a thought.

        Args:
            thought: Thought text.
            thought_number: 1-based position of the thought.
            total_thoughts: Estimated sequence length.
            context: Available tools and optional domain hint.
            analysis: Precomputed analysis of ``thought``; computed if omitted.

        Returns:
            At most ``max_recommendations`` recommendations, sorted by
            descending confidence (ties keep insertion order).

        """
        if analysis is None:
            analysis = analyze_thought(thought)
        stage = determine_stage(thought_number, total_thoughts)

        domain = context.problem_domain or analysis.domain.value
        combined = combine_recommendations(
            stage_recommendations(stage, analysis),
            domain_recommendations(domain, analysis),
            context.available_tools,
        )
        ranked = sorted(combined, key=lambda rec: rec.confidence, reverse=True)

        logger.debug(
            f"Recommendations for thought {thought_number}/{total_thoughts} "
            f"(stage={stage.value}, intent={analysis.intent.value}, domain={domain}): "
            f"{[rec.tool_name for rec in ranked[: self.max_recommendations]]}"
        )
        return ranked[: self.max_recommendations]

    def generate_current_step(
        self,
        thought: str,
        thought_number: int,
        total_thoughts: int,
        context: ToolContext,
    ) -> CurrentStep:
        """Synthesize a plan for the current step.

        Returns:
            CurrentStep with stage wording, ranked tools, complexity bucket
            and a duration estimate.

        """
        analysis = analyze_thought(thought)
        recommendations = self.generate_recommendations(
            thought, thought_number, total_thoughts, context, analysis=analysis
        )
        phrases = STAGE_PHRASES[determine_stage(thought_number, total_thoughts)]
        level = complexity_bucket(analysis.complexity)

        return CurrentStep(
            step_description=f"{phrases.description} (Step {thought_number}/{total_thoughts})",
            recommended_tools=recommendations,
            expected_outcome=phrases.expected_outcome,
            next_step_conditions=list(phrases.next_step_conditions),
            step_number=thought_number,
            complexity_level=level,
            estimated_duration=estimate_duration(level, len(recommendations)),
        )
