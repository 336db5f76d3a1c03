"""Pure stage and progress rules for thought sequences.

The recommendation engine and the sequence tracker both classify a
thought's stage; they must agree, so this module is the only place the
rule lives.

Stage rule, in priority order:
    1. total == 1                  -> final
    2. number == 1 and total > 1   -> initial
    3. number == total             -> final
    4. total == 2                  -> initial if number == 1 else final
    5. progress = number / total:  <= 0.33 initial, >= 0.67 final, else middle
"""

from __future__ import annotations

from .thought_types import CompletionStatus, ComplexityLevel, ThoughtRecord, ThoughtStage

INITIAL_PROGRESS_LIMIT = 0.33
FINAL_PROGRESS_LIMIT = 0.67

LOW_COMPLEXITY_LIMIT = 0.4
MEDIUM_COMPLEXITY_LIMIT = 0.7

BASE_STEP_MINUTES = 5
COMPLEXITY_MULTIPLIERS: dict[ComplexityLevel, float] = {
    ComplexityLevel.LOW: 1.0,
    ComplexityLevel.MEDIUM: 1.5,
    ComplexityLevel.HIGH: 2.5,
}
PER_TOOL_FACTOR = 0.3

# (upper bound in minutes, exclusive; label)
DURATION_BANDS: tuple[tuple[float, str], ...] = (
    (10, "5-10 minutes"),
    (30, "15-30 minutes"),
    (60, "30-60 minutes"),
)
LONGEST_DURATION = "1+ hours"


def determine_stage(thought_number: int, total_thoughts: int) -> ThoughtStage:
    """Classify a thought as initial, middle or final.

    Args:
        thought_number: 1-based position of the thought.
        total_thoughts: Estimated sequence length.

    Returns:
        The thought's stage.

    Example:
        >>> determine_stage(1, 1)
        <ThoughtStage.FINAL: 'final'>
        >>> determine_stage(2, 3)
        <ThoughtStage.MIDDLE: 'middle'>

    """
    if total_thoughts == 1:
        return ThoughtStage.FINAL
    if thought_number == 1 and total_thoughts > 1:
        return ThoughtStage.INITIAL
    if thought_number == total_thoughts:
        return ThoughtStage.FINAL

    if total_thoughts == 2:
        return ThoughtStage.INITIAL if thought_number == 1 else ThoughtStage.FINAL

    progress = thought_number / total_thoughts
    if progress <= INITIAL_PROGRESS_LIMIT:
        return ThoughtStage.INITIAL
    if progress >= FINAL_PROGRESS_LIMIT:
        return ThoughtStage.FINAL
    return ThoughtStage.MIDDLE


def complexity_bucket(score: float) -> ComplexityLevel:
    """Bucket an analyzer complexity score."""
    if score < LOW_COMPLEXITY_LIMIT:
        return ComplexityLevel.LOW
    if score < MEDIUM_COMPLEXITY_LIMIT:
        return ComplexityLevel.MEDIUM
    return ComplexityLevel.HIGH


def estimate_minutes(level: ComplexityLevel, tool_count: int) -> float:
    """Estimated minutes for a step of the given complexity and tool count."""
    return BASE_STEP_MINUTES * COMPLEXITY_MULTIPLIERS[level] * (1 + PER_TOOL_FACTOR * tool_count)


def estimate_duration(level: ComplexityLevel, tool_count: int) -> str:
    """Bucket the estimated minutes into a duration band.

    Example:
        >>> estimate_duration(ComplexityLevel.LOW, 0)
        '5-10 minutes'

    """
    minutes = estimate_minutes(level, tool_count)
    for upper, label in DURATION_BANDS:
        if minutes < upper:
            return label
    return LONGEST_DURATION


def completion_status(record: ThoughtRecord) -> CompletionStatus:
    """Report whether the sequence continues.

    ``needs_more_thoughts`` takes precedence over ``next_thought_needed``.
    """
    if record.needs_more_thoughts:
        return CompletionStatus.MORE_THOUGHTS_NEEDED
    if record.next_thought_needed:
        return CompletionStatus.NEXT_THOUGHT_NEEDED
    return CompletionStatus.SEQUENCE_COMPLETE


def completion_percentage(thought_number: int, total_thoughts: int) -> int:
    """Percentage of the estimated sequence reached, capped at 100."""
    return min(round(thought_number / total_thoughts * 100), 100)
