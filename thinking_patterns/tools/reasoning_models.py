"""Structured reasoning tools that summarize a caller's worked framework.

The calling model does the reasoning; these tools record the shape of it
(which framework, how many steps, whether it reached a conclusion).
Every tool name here matches an entry in the recommendation catalog, so
whatever the engine recommends can be dispatched.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Literal

import orjson
from pydantic import BaseModel, ConfigDict, Field

from .sequential_thinking import FRAMEWORK_NAME


def _stamp(result: dict[str, Any]) -> dict[str, Any]:
    """Add the fields shared by every successful summary."""
    return {
        **result,
        "status": "success",
        "timestamp": datetime.now(UTC).isoformat(),
        "framework": FRAMEWORK_NAME,
    }


# --- Mental model / debugging approach ---


class MentalModelInput(BaseModel):
    """A mental model applied to a problem."""

    model_name: str = Field(min_length=1, description="e.g. first_principles, opportunity_cost")
    problem: str = Field(min_length=1)
    steps: list[str] = Field(default_factory=list)
    reasoning: str | None = None
    conclusion: str | None = None


class DebuggingApproachInput(BaseModel):
    """A debugging approach applied to an issue."""

    approach_name: str = Field(min_length=1, description="e.g. binary_search, cause_elimination")
    issue: str = Field(min_length=1)
    steps: list[str] = Field(default_factory=list)
    findings: str | None = None
    resolution: str | None = None


class MentalModelTool:
    name = "mental_model"
    description = (
        "Tool for creating and analyzing mental models to understand complex problems "
        "and systems."
    )
    input_model = MentalModelInput

    def handle(self, validated: MentalModelInput) -> dict[str, Any]:
        return _stamp(
            {
                "model_name": validated.model_name,
                "problem": validated.problem,
                "has_steps": bool(validated.steps),
                "has_conclusion": bool(validated.conclusion),
                "step_count": len(validated.steps),
            }
        )


class DebuggingApproachTool:
    name = "debugging_approach"
    description = "Systematic debugging methodologies for troubleshooting and problem resolution."
    input_model = DebuggingApproachInput

    def handle(self, validated: DebuggingApproachInput) -> dict[str, Any]:
        return _stamp(
            {
                "approach_name": validated.approach_name,
                "issue": validated.issue,
                "has_steps": bool(validated.steps),
                "has_findings": bool(validated.findings),
                "has_resolution": bool(validated.resolution),
                "step_count": len(validated.steps),
            }
        )


# --- Decision framework ---


class DecisionOption(BaseModel):
    name: str
    description: str
    id: str | None = None


class DecisionCriterion(BaseModel):
    name: str
    description: str
    weight: float = Field(ge=0.0, le=1.0)
    evaluation_method: Literal["quantitative", "qualitative", "boolean"]
    id: str | None = None


class DecisionFrameworkInput(BaseModel):
    """A structured decision analysis at one stage of its iteration."""

    decision_statement: str = Field(min_length=1)
    options: list[DecisionOption]
    criteria: list[DecisionCriterion] = Field(default_factory=list)
    stakeholders: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    time_horizon: str | None = None
    risk_tolerance: Literal["risk-averse", "risk-neutral", "risk-seeking"] | None = None
    analysis_type: Literal[
        "expected-utility", "multi-criteria", "maximin", "minimax-regret", "satisficing"
    ]
    stage: Literal[
        "problem-definition", "options", "criteria", "evaluation", "analysis", "recommendation"
    ]
    recommendation: str | None = None
    decision_id: str
    iteration: int = Field(ge=0)
    next_stage_needed: bool


class DecisionFrameworkTool:
    name = "decision_framework"
    description = (
        "Structured decision analysis with options, weighted criteria and "
        "outcome evaluation."
    )
    input_model = DecisionFrameworkInput

    def handle(self, validated: DecisionFrameworkInput) -> dict[str, Any]:
        return _stamp(
            {
                "decision_statement": validated.decision_statement,
                "decision_id": validated.decision_id,
                "analysis_type": validated.analysis_type,
                "stage": validated.stage,
                "iteration": validated.iteration,
                "next_stage_needed": validated.next_stage_needed,
                "option_count": len(validated.options),
                "criteria_count": len(validated.criteria),
                "has_recommendation": bool(validated.recommendation),
            }
        )


# --- Scientific method ---


class Variable(BaseModel):
    name: str
    type: Literal["independent", "dependent", "controlled", "confounding"]
    operationalization: str | None = None


class Hypothesis(BaseModel):
    statement: str
    variables: list[Variable] = Field(default_factory=list)
    assumptions: list[str] = Field(default_factory=list)
    hypothesis_id: str
    confidence: float = Field(ge=0.0, le=1.0)
    domain: str
    iteration: int = Field(ge=0)
    status: Literal["proposed", "testing", "supported", "refuted", "refined"]


class Prediction(BaseModel):
    """If/then/else prediction; accepts the short keys as aliases."""

    model_config = ConfigDict(populate_by_name=True)

    condition: str = Field(alias="if")
    expected: str = Field(alias="then")
    otherwise: str | None = Field(default=None, alias="else")


class Experiment(BaseModel):
    design: str
    methodology: str
    predictions: list[Prediction] = Field(default_factory=list)
    experiment_id: str
    hypothesis_id: str
    control_measures: list[str] = Field(default_factory=list)
    results: str | None = None
    outcome_matched: bool | None = None


class ScientificMethodInput(BaseModel):
    """One stage of a hypothesis-driven inquiry."""

    stage: Literal[
        "observation",
        "question",
        "hypothesis",
        "experiment",
        "analysis",
        "conclusion",
        "iteration",
    ]
    observation: str | None = None
    question: str | None = None
    hypothesis: Hypothesis | None = None
    experiment: Experiment | None = None
    analysis: str | None = None
    conclusion: str | None = None
    inquiry_id: str
    iteration: int = Field(ge=0)
    next_stage_needed: bool


class ScientificMethodTool:
    name = "scientific_method"
    description = "Formal hypothesis testing and experimental validation of ideas."
    input_model = ScientificMethodInput

    def handle(self, validated: ScientificMethodInput) -> dict[str, Any]:
        return _stamp(
            {
                "inquiry_id": validated.inquiry_id,
                "stage": validated.stage,
                "iteration": validated.iteration,
                "next_stage_needed": validated.next_stage_needed,
                "has_observation": bool(validated.observation),
                "has_question": bool(validated.question),
                "has_hypothesis": validated.hypothesis is not None,
                "has_experiment": validated.experiment is not None,
                "has_analysis": bool(validated.analysis),
                "has_conclusion": bool(validated.conclusion),
            }
        )


# --- Metacognitive monitoring ---


class KnowledgeAssessment(BaseModel):
    domain: str
    knowledge_level: Literal["expert", "proficient", "familiar", "basic", "minimal", "none"]
    confidence_score: float = Field(ge=0.0, le=1.0)
    supporting_evidence: str
    known_limitations: list[str] = Field(default_factory=list)


class ClaimAssessment(BaseModel):
    claim: str
    status: Literal["fact", "inference", "speculation", "uncertain"]
    confidence_score: float = Field(ge=0.0, le=1.0)
    evidence_basis: str


class ReasoningAssessment(BaseModel):
    step: str
    potential_biases: list[str] = Field(default_factory=list)
    assumptions: list[str] = Field(default_factory=list)
    logical_validity: float = Field(ge=0.0, le=1.0)
    inference_strength: float = Field(ge=0.0, le=1.0)


class MetacognitiveMonitoringInput(BaseModel):
    """Self-assessment of knowledge, claims and reasoning quality."""

    task: str = Field(min_length=1)
    stage: Literal[
        "knowledge-assessment", "planning", "execution", "monitoring", "evaluation", "reflection"
    ]
    knowledge_assessment: KnowledgeAssessment | None = None
    claims: list[ClaimAssessment] = Field(default_factory=list)
    reasoning_steps: list[ReasoningAssessment] = Field(default_factory=list)
    overall_confidence: float = Field(ge=0.0, le=1.0)
    uncertainty_areas: list[str] = Field(default_factory=list)
    recommended_approach: str
    monitoring_id: str
    iteration: int = Field(ge=0)
    next_assessment_needed: bool


class MetacognitiveMonitoringTool:
    name = "metacognitive_monitoring"
    description = "Self-assessment of reasoning quality, confidence and knowledge gaps."
    input_model = MetacognitiveMonitoringInput

    def handle(self, validated: MetacognitiveMonitoringInput) -> dict[str, Any]:
        return _stamp(
            {
                "task": validated.task,
                "monitoring_id": validated.monitoring_id,
                "stage": validated.stage,
                "iteration": validated.iteration,
                "overall_confidence": validated.overall_confidence,
                "next_assessment_needed": validated.next_assessment_needed,
                "uncertainty_area_count": len(validated.uncertainty_areas),
                "has_knowledge_assessment": validated.knowledge_assessment is not None,
                "claim_count": len(validated.claims),
                "reasoning_step_count": len(validated.reasoning_steps),
            }
        )


# --- Collaborative reasoning ---

ContributionType = Literal[
    "observation", "question", "insight", "concern", "suggestion", "challenge", "synthesis"
]


class Persona(BaseModel):
    id: str
    name: str
    expertise: list[str] = Field(default_factory=list)
    background: str = ""
    perspective: str = ""
    biases: list[str] = Field(default_factory=list)


class Contribution(BaseModel):
    persona_id: str
    content: str
    type: ContributionType
    confidence: float = Field(ge=0.0, le=1.0)


class CollaborativeReasoningInput(BaseModel):
    """A multi-persona discussion at one stage."""

    topic: str = Field(min_length=1)
    personas: list[Persona]
    contributions: list[Contribution] = Field(default_factory=list)
    stage: Literal[
        "problem-definition", "ideation", "critique", "integration", "decision", "reflection"
    ]
    active_persona_id: str
    next_persona_id: str | None = None
    consensus_points: list[str] = Field(default_factory=list)
    key_insights: list[str] = Field(default_factory=list)
    open_questions: list[str] = Field(default_factory=list)
    final_recommendation: str | None = None
    session_id: str
    iteration: int = Field(ge=0)
    next_contribution_needed: bool


class CollaborativeReasoningTool:
    name = "collaborative_reasoning"
    description = "Multi-perspective problem solving with simulated expert personas."
    input_model = CollaborativeReasoningInput

    def handle(self, validated: CollaborativeReasoningInput) -> dict[str, Any]:
        return _stamp(
            {
                "topic": validated.topic,
                "session_id": validated.session_id,
                "stage": validated.stage,
                "active_persona_id": validated.active_persona_id,
                "iteration": validated.iteration,
                "next_contribution_needed": validated.next_contribution_needed,
                "persona_count": len(validated.personas),
                "contribution_count": len(validated.contributions),
                "consensus_point_count": len(validated.consensus_points),
            }
        )


# --- Structured argumentation ---

ArgumentType = Literal["thesis", "antithesis", "synthesis", "objection", "rebuttal"]


class StructuredArgumentationInput(BaseModel):
    """One argument in a dialectical exchange."""

    claim: str = Field(min_length=1)
    premises: list[str] = Field(default_factory=list)
    conclusion: str
    argument_id: str | None = None
    argument_type: ArgumentType
    confidence: float = Field(ge=0.0, le=1.0)
    responds_to: str | None = None
    supports: list[str] = Field(default_factory=list)
    contradicts: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    next_argument_needed: bool


class StructuredArgumentationTool:
    name = "structured_argumentation"
    description = "Dialectical reasoning through theses, objections, rebuttals and syntheses."
    input_model = StructuredArgumentationInput

    def handle(self, validated: StructuredArgumentationInput) -> dict[str, Any]:
        return _stamp(
            {
                "claim": validated.claim,
                "argument_id": validated.argument_id,
                "argument_type": validated.argument_type,
                "confidence": validated.confidence,
                "next_argument_needed": validated.next_argument_needed,
                "premise_count": len(validated.premises),
                "has_conclusion": bool(validated.conclusion),
                "strength_count": len(validated.strengths),
                "weakness_count": len(validated.weaknesses),
            }
        )


# --- Visual reasoning ---


class VisualElement(BaseModel):
    id: str
    type: Literal["node", "edge", "container", "annotation"]
    label: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)
    source: str | None = None
    target: str | None = None
    contains: list[str] = Field(default_factory=list)


class VisualReasoningInput(BaseModel):
    """One operation on a diagram used for spatial reasoning."""

    operation: Literal["create", "update", "delete", "transform", "observe"]
    elements: list[VisualElement] = Field(default_factory=list)
    transformation_type: Literal["rotate", "move", "resize", "recolor", "regroup"] | None = None
    diagram_id: str
    diagram_type: Literal[
        "graph", "flowchart", "stateDiagram", "conceptMap", "treeDiagram", "custom"
    ]
    iteration: int = Field(ge=0)
    observation: str | None = None
    insight: str | None = None
    hypothesis: str | None = None
    next_operation_needed: bool


class VisualReasoningTool:
    name = "visual_reasoning"
    description = (
        "Diagram-based thinking: build and transform graphs, flowcharts and concept maps."
    )
    input_model = VisualReasoningInput

    def handle(self, validated: VisualReasoningInput) -> dict[str, Any]:
        return _stamp(
            {
                "diagram_id": validated.diagram_id,
                "diagram_type": validated.diagram_type,
                "operation": validated.operation,
                "iteration": validated.iteration,
                "next_operation_needed": validated.next_operation_needed,
                "element_count": len(validated.elements),
                "has_observation": bool(validated.observation),
                "has_insight": bool(validated.insight),
                "has_hypothesis": bool(validated.hypothesis),
                "transformation_type": validated.transformation_type,
            }
        )


# --- Stochastic algorithms ---


class StochasticAlgorithmInput(BaseModel):
    """A probabilistic algorithm applied to a decision problem."""

    algorithm: str = Field(min_length=1, description="e.g. mdp, mcts, bandit, bayesian, hmm")
    problem: str = Field(min_length=1)
    parameters: dict[str, Any] = Field(default_factory=dict)
    result: str | None = None


def _mdp(problem: str, params: dict[str, Any]) -> str:
    states = params.get("states") or 100
    gamma = params.get("gamma") or 0.9
    return (
        f'MDP analysis for "{problem}": Optimized policy over {states} states with '
        f"discount factor {gamma}. Converged to optimal value function."
    )


def _mcts(problem: str, params: dict[str, Any]) -> str:
    simulations = params.get("simulations") or 1000
    exploration = params.get("exploration_constant") or 1.4
    return (
        f'MCTS for "{problem}": Performed {simulations} simulations with exploration '
        f"constant {exploration}. Best action sequence identified."
    )


def _bandit(problem: str, params: dict[str, Any]) -> str:
    arms = params.get("arms") or 10
    epsilon = params.get("epsilon") or 0.1
    return (
        f'Multi-armed bandit for "{problem}": Balanced exploration/exploitation across '
        f"{arms} arms with epsilon={epsilon}. Optimal arm identified."
    )


def _bayesian(problem: str, params: dict[str, Any]) -> str:
    iterations = params.get("iterations") or 100
    acquisition = params.get("acquisition_function") or "expected_improvement"
    return (
        f'Bayesian optimization for "{problem}": {iterations} iterations using '
        f"{acquisition}. Global optimum approximated."
    )


def _hmm(problem: str, params: dict[str, Any]) -> str:
    hidden_states = params.get("hidden_states") or 5
    observations = params.get("observations") or 20
    return (
        f'HMM analysis for "{problem}": Inferred {hidden_states} hidden states from '
        f"{observations} observations. State sequence decoded."
    )


ALGORITHM_SUMMARIES: dict[str, Callable[[str, dict[str, Any]], str]] = {
    "mdp": _mdp,
    "markov decision process": _mdp,
    "mcts": _mcts,
    "monte carlo tree search": _mcts,
    "bandit": _bandit,
    "multi-armed bandit": _bandit,
    "bayesian": _bayesian,
    "bayesian optimization": _bayesian,
    "hmm": _hmm,
    "hidden markov model": _hmm,
}


def summarize_algorithm(algorithm: str, problem: str, parameters: dict[str, Any]) -> str:
    """One-line summary of applying a known algorithm, or a generic echo."""
    summary = ALGORITHM_SUMMARIES.get(algorithm.strip().lower())
    if summary is None:
        params = orjson.dumps(parameters, default=str).decode("utf-8")
        return f"Applied {algorithm} to problem: {problem}. Parameters: {params}"
    return summary(problem, parameters)


class StochasticAlgorithmTool:
    name = "stochastic_algorithm"
    description = (
        "Probabilistic decision-making: MDPs, Monte Carlo tree search, bandits, "
        "Bayesian optimization and hidden Markov models."
    )
    input_model = StochasticAlgorithmInput

    def handle(self, validated: StochasticAlgorithmInput) -> dict[str, Any]:
        result = validated.result or summarize_algorithm(
            validated.algorithm, validated.problem, validated.parameters
        )
        return _stamp(
            {
                "algorithm": validated.algorithm,
                "problem": validated.problem,
                "has_result": bool(result),
                "parameter_count": len(validated.parameters),
                "result": result,
            }
        )


STRUCTURED_TOOLS: tuple[type, ...] = (
    MentalModelTool,
    DebuggingApproachTool,
    StochasticAlgorithmTool,
    CollaborativeReasoningTool,
    DecisionFrameworkTool,
    MetacognitiveMonitoringTool,
    ScientificMethodTool,
    StructuredArgumentationTool,
    VisualReasoningTool,
)
