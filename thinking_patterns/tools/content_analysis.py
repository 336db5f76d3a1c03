"""Keyword-based analysis of a single thought.

Maps thought text to keywords, intent, a complexity score and a domain
using fixed rule tables. Pure and deterministic: no state, no errors.
"""

from __future__ import annotations

from dataclasses import dataclass

from .thought_types import ProblemDomain, ThoughtIntent

# Keyword groups, matched as lowercase substrings of the thought.
KEYWORD_GROUPS: dict[str, tuple[str, ...]] = {
    "problem": ("problem", "issue", "challenge", "difficulty", "error", "bug", "debug"),
    "analysis": ("analyze", "examine", "investigate", "research", "study"),
    "decision": ("decide", "choose", "select", "option", "alternative"),
    "planning": ("plan", "strategy", "approach", "method", "process"),
    "evaluation": ("evaluate", "assess", "measure", "test", "validate"),
}

# Priority ordered: the first intent with a matching trigger wins.
INTENT_TRIGGERS: tuple[tuple[ThoughtIntent, frozenset[str]], ...] = (
    (ThoughtIntent.PROBLEM_IDENTIFICATION, frozenset({"problem", "issue", "challenge"})),
    (ThoughtIntent.ANALYSIS, frozenset({"analyze", "examine", "research"})),
    (ThoughtIntent.DECISION_MAKING, frozenset({"decide", "choose", "select"})),
    (ThoughtIntent.PLANNING, frozenset({"plan", "strategy", "approach"})),
    (ThoughtIntent.EVALUATION, frozenset({"evaluate", "assess", "test"})),
)

TECHNICAL_TERMS: tuple[str, ...] = (
    "algorithm",
    "system",
    "architecture",
    "implementation",
    "optimization",
)

# Priority ordered, checked against the extracted keyword set.
DOMAIN_INDICATORS: tuple[tuple[ProblemDomain, frozenset[str]], ...] = (
    (
        ProblemDomain.TECHNICAL,
        frozenset({"bug", "error", "system", "algorithm", "implementation"}),
    ),
    (
        ProblemDomain.STRATEGIC,
        frozenset({"strategy", "plan", "decision", "option", "business"}),
    ),
    (ProblemDomain.RESEARCH, frozenset({"research", "study", "investigate", "analyze"})),
)

BASE_COMPLEXITY = 0.5
LONG_TEXT_CHARS = 200
VERY_LONG_TEXT_CHARS = 500
LENGTH_BONUS = 0.2
KEYWORD_BONUS = 0.1
MAX_KEYWORD_BONUS = 0.3
TECHNICAL_BONUS = 0.2


@dataclass(frozen=True, slots=True)
class ContentAnalysis:
    """Result of analyzing one thought."""

    keywords: frozenset[str]
    intent: ThoughtIntent
    complexity: float
    domain: ProblemDomain

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "keywords": sorted(self.keywords),
            "intent": self.intent.value,
            "complexity": self.complexity,
            "domain": self.domain.value,
        }


def extract_keywords(text: str) -> frozenset[str]:
    """Return every table keyword that occurs in the text (case-insensitive)."""
    lowered = text.lower()
    return frozenset(
        keyword
        for group in KEYWORD_GROUPS.values()
        for keyword in group
        if keyword in lowered
    )


def classify_intent(keywords: frozenset[str]) -> ThoughtIntent:
    """Pick the highest-priority intent whose triggers intersect the keywords."""
    for intent, triggers in INTENT_TRIGGERS:
        if keywords & triggers:
            return intent
    return ThoughtIntent.EXPLORATION


def score_complexity(text: str, keywords: frozenset[str]) -> float:
    """Crude linear complexity heuristic clamped to [0, 1].

    Example:
        >>> score_complexity("", frozenset())
        0.5

    """
    score = BASE_COMPLEXITY
    if len(text) > LONG_TEXT_CHARS:
        score += LENGTH_BONUS
    if len(text) > VERY_LONG_TEXT_CHARS:
        score += LENGTH_BONUS
    score += min(KEYWORD_BONUS * len(keywords), MAX_KEYWORD_BONUS)

    lowered = text.lower()
    if any(term in lowered for term in TECHNICAL_TERMS):
        score += TECHNICAL_BONUS

    return round(max(0.0, min(score, 1.0)), 3)


def infer_domain(keywords: frozenset[str]) -> ProblemDomain:
    """Infer the problem domain from the keyword set."""
    for domain, indicators in DOMAIN_INDICATORS:
        if keywords & indicators:
            return domain
    return ProblemDomain.GENERAL


def analyze_thought(text: str) -> ContentAnalysis:
    """Analyze a thought's text.

    Args:
        text: Free-text thought. May be empty.

    Returns:
        ContentAnalysis with keywords, intent, complexity and domain.

    Example:
        >>> analyze_thought("I have a problem with the system").intent
        <ThoughtIntent.PROBLEM_IDENTIFICATION: 'problem-identification'>

    """
    keywords = extract_keywords(text)
    return ContentAnalysis(
        keywords=keywords,
        intent=classify_intent(keywords),
        complexity=score_complexity(text, keywords),
        domain=infer_domain(keywords),
    )
