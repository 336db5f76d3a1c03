"""Type definitions for sequential thinking and tool recommendation.

This module contains the Pydantic models and enums shared by the content
analyzer, recommendation engine, sequence tracker and session store.
Separated from logic for clean imports and testability.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ThoughtStage(str, Enum):
    """Coarse position of a thought within its sequence."""

    INITIAL = "initial"
    MIDDLE = "middle"
    FINAL = "final"


class ThoughtIntent(str, Enum):
    """Intent classified from a thought's keywords."""

    PROBLEM_IDENTIFICATION = "problem-identification"
    ANALYSIS = "analysis"
    DECISION_MAKING = "decision-making"
    PLANNING = "planning"
    EVALUATION = "evaluation"
    EXPLORATION = "exploration"


class ProblemDomain(str, Enum):
    """Problem domains known to the recommendation tables.

    The analyzer only ever infers technical, strategic, research or general;
    design and analysis are reachable through a caller-supplied domain hint.
    """

    TECHNICAL = "technical"
    STRATEGIC = "strategic"
    RESEARCH = "research"
    DESIGN = "design"
    ANALYSIS = "analysis"
    GENERAL = "general"


class ComplexityLevel(str, Enum):
    """Bucketed complexity of a step."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CompletionStatus(str, Enum):
    """Where a sequence stands after the current thought."""

    MORE_THOUGHTS_NEEDED = "more thoughts needed"
    NEXT_THOUGHT_NEEDED = "next thought needed"
    SEQUENCE_COMPLETE = "sequence complete"


# --- Recommendation Models ---


class ToolRecommendation(BaseModel):
    """A scored suggestion of which reasoning tool to apply next."""

    tool_name: str
    confidence: float = Field(ge=0.0, le=1.0)
    rationale: str
    priority: int
    alternative_tools: list[str] | None = None


class CurrentStep(BaseModel):
    """Plan for the current step, derived from a recommendation pass."""

    step_description: str
    recommended_tools: list[ToolRecommendation] = Field(default_factory=list)
    expected_outcome: str
    next_step_conditions: list[str] = Field(default_factory=list)
    step_number: int | None = None
    complexity_level: ComplexityLevel | None = None
    estimated_duration: str | None = None


class ToolContext(BaseModel):
    """Caller-supplied context for a recommendation pass. Read-only to the engine."""

    model_config = ConfigDict(frozen=True)

    available_tools: list[str] = Field(default_factory=list)
    user_preferences: dict[str, Any] = Field(default_factory=dict)
    session_history: list[str] = Field(default_factory=list)
    problem_domain: str | None = None

    @field_validator("available_tools")
    @classmethod
    def _dedupe_tools(cls, tools: list[str]) -> list[str]:
        return list(dict.fromkeys(tools))


# --- Thought Record ---


class ThoughtRecord(BaseModel):
    """One unit in a numbered, possibly branching or revising sequence.

    Revision and branch indices are not checked against ``thought_number``
    or against session history.
    """

    model_config = ConfigDict(frozen=True)

    thought: str = Field(min_length=1, description="The current thinking step")
    thought_number: int = Field(ge=1, description="1-based position in the sequence")
    total_thoughts: int = Field(ge=1, description="Current estimate of thoughts needed")
    next_thought_needed: bool = Field(description="Whether another thought follows")
    is_revision: bool | None = None
    revises_thought: int | None = Field(default=None, ge=1)
    branch_from_thought: int | None = Field(default=None, ge=1)
    branch_id: str | None = None
    needs_more_thoughts: bool | None = None
    current_step: CurrentStep | None = None

    @property
    def is_branch(self) -> bool:
        """Whether this record starts or continues a named branch."""
        return self.branch_from_thought is not None and bool(self.branch_id)
