"""pytest configuration and fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from thinking_patterns.tools.recommendation_engine import KNOWN_TOOLS, ToolRecommendationEngine
from thinking_patterns.tools.sequential_thinking import SequentialThinkingTool
from thinking_patterns.tools.session_store import ThoughtSessionStore
from thinking_patterns.tools.thought_types import ThoughtRecord, ToolContext


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep local .env overrides out of the tests."""
    for key in (
        "SERVER_NAME",
        "SERVER_TRANSPORT",
        "SESSION_TIMEOUT_MINUTES",
        "SESSION_CLEANUP_INTERVAL_MINUTES",
        "SESSION_CLEANUP_ENABLED",
        "LOG_LEVEL",
        "LOG_FORMAT",
        "LOG_FILE",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def clock() -> ManualClock:
    """Provide a manually advanced clock."""
    return ManualClock()


@pytest.fixture
def store(clock: ManualClock) -> ThoughtSessionStore:
    """Provide a session store driven by the manual clock."""
    return ThoughtSessionStore(
        timeout=timedelta(minutes=60),
        cleanup_interval=timedelta(minutes=15),
        clock=clock,
    )


@pytest.fixture
def engine() -> ToolRecommendationEngine:
    """Provide a recommendation engine."""
    return ToolRecommendationEngine()


@pytest.fixture
def tracker(store: ThoughtSessionStore) -> SequentialThinkingTool:
    """Provide a sequential thinking tool backed by the test store."""
    return SequentialThinkingTool(store=store)


@pytest.fixture
def all_tools_context() -> ToolContext:
    """Context offering every known reasoning tool."""
    return ToolContext(available_tools=list(KNOWN_TOOLS))


@pytest.fixture
def make_record():
    """Factory for thought records with sensible defaults."""

    def _make(
        thought: str = "I have a problem with the system",
        thought_number: int = 1,
        total_thoughts: int = 3,
        next_thought_needed: bool = True,
        **kwargs,
    ) -> ThoughtRecord:
        return ThoughtRecord(
            thought=thought,
            thought_number=thought_number,
            total_thoughts=total_thoughts,
            next_thought_needed=next_thought_needed,
            **kwargs,
        )

    return _make
