"""Thinking Patterns tools - analysis, recommendation and sequence tracking."""

from .content_analysis import ContentAnalysis, analyze_thought
from .reasoning_models import (
    STRUCTURED_TOOLS,
    CollaborativeReasoningTool,
    DebuggingApproachTool,
    DecisionFrameworkTool,
    MentalModelTool,
    MetacognitiveMonitoringTool,
    ScientificMethodTool,
    StochasticAlgorithmTool,
    StructuredArgumentationTool,
    VisualReasoningTool,
)
from .recommendation_engine import KNOWN_TOOLS, ToolRecommendationEngine
from .registry import ReasoningTool, ToolRegistry, create_default_registry
from .sequential_thinking import SequentialThinkingInput, SequentialThinkingTool
from .session_store import ThoughtSession, ThoughtSessionStore
from .stage_rules import determine_stage
from .thought_types import (
    CompletionStatus,
    ComplexityLevel,
    CurrentStep,
    ProblemDomain,
    ThoughtIntent,
    ThoughtRecord,
    ThoughtStage,
    ToolContext,
    ToolRecommendation,
)

__all__ = [
    # Analysis
    "ContentAnalysis",
    "analyze_thought",
    "determine_stage",
    # Recommendation
    "KNOWN_TOOLS",
    "ToolRecommendationEngine",
    # Tracking
    "SequentialThinkingInput",
    "SequentialThinkingTool",
    "ThoughtSession",
    "ThoughtSessionStore",
    # Structured reasoning
    "STRUCTURED_TOOLS",
    "CollaborativeReasoningTool",
    "DebuggingApproachTool",
    "DecisionFrameworkTool",
    "MentalModelTool",
    "MetacognitiveMonitoringTool",
    "ScientificMethodTool",
    "StochasticAlgorithmTool",
    "StructuredArgumentationTool",
    "VisualReasoningTool",
    # Registry
    "ReasoningTool",
    "ToolRegistry",
    "create_default_registry",
    # Types
    "CompletionStatus",
    "ComplexityLevel",
    "CurrentStep",
    "ProblemDomain",
    "ThoughtIntent",
    "ThoughtRecord",
    "ThoughtStage",
    "ToolContext",
    "ToolRecommendation",
]
