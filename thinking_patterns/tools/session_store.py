"""In-memory store of per-session thought history and branches.

Sessions live for the lifetime of the process and are evicted after an idle
timeout. Every read through `get_session` refreshes the idle timer, so a
session that is being looked at never expires. Missing sessions are
represented as None or empty collections; nothing here raises for them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from loguru import logger

from thinking_patterns.utils.session import SessionManager

from .thought_types import ThoughtRecord

DEFAULT_SESSION_TIMEOUT = timedelta(hours=1)
DEFAULT_CLEANUP_INTERVAL = timedelta(minutes=15)


@dataclass
class ThoughtSession:
    """One caller's thought history and named branches."""

    session_id: str
    created_at: datetime
    last_accessed_at: datetime
    thought_history: list[ThoughtRecord] = field(default_factory=list)
    branches: dict[str, list[ThoughtRecord]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Summary for status responses."""
        return {
            "session_id": self.session_id,
            "thought_count": len(self.thought_history),
            "branch_count": len(self.branches),
            "branches": {bid: len(records) for bid, records in self.branches.items()},
            "created_at": self.created_at.isoformat(),
            "last_accessed_at": self.last_accessed_at.isoformat(),
        }


class ThoughtSessionStore(SessionManager[ThoughtSession]):
    """Keyed store of thought sessions with idle-timeout eviction.

    Construct one per server (or per test) and pass it to whatever needs
    multi-turn continuity. Eviction runs either on demand via
    `cleanup_expired_sessions()` or from the background task started with
    `start_cleanup_task()`.

    Example:
        store = ThoughtSessionStore()
        store.add_thought("abc", record)
        store.get_thought_history("abc")  # [record]
    """

    def __init__(
        self,
        *,
        timeout: timedelta = DEFAULT_SESSION_TIMEOUT,
        cleanup_interval: timedelta = DEFAULT_CLEANUP_INTERVAL,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(clock=clock)
        self.timeout = timeout
        self.cleanup_interval = cleanup_interval
        self._cleanup_task: asyncio.Task[None] | None = None

    # --- Session lifecycle ---

    def create_session(self, session_id: str) -> ThoughtSession:
        """Create a session with empty history.

        Idempotent: an existing session is returned as is (with its access
        time refreshed) rather than reset. Use clear_session to start over.
        """
        with self.locked():
            existing = self.get_session(session_id)
            if existing is not None:
                return existing
            now = self._now()
            session = ThoughtSession(session_id=session_id, created_at=now, last_accessed_at=now)
            self._register_session(session_id, session)
        logger.debug(f"Created session {session_id}")
        return session

    def get_session(self, session_id: str) -> ThoughtSession | None:
        """Get a session and refresh its last access time."""
        with self.locked():
            session = self._lookup(session_id)
            if session is not None:
                session.last_accessed_at = self._now()
            return session

    def clear_session(self, session_id: str) -> None:
        """Remove a session. Unknown IDs are ignored."""
        if self._remove_session(session_id) is not None:
            logger.debug(f"Cleared session {session_id}")

    # --- History ---

    def add_thought(self, session_id: str, thought: ThoughtRecord) -> None:
        """Append a thought to the session history, creating the session if needed."""
        with self.locked():
            self.create_session(session_id).thought_history.append(thought)

    def add_branch(self, session_id: str, branch_id: str, thought: ThoughtRecord) -> None:
        """Append a thought to a named branch, creating session and branch if needed."""
        with self.locked():
            session = self.create_session(session_id)
            session.branches.setdefault(branch_id, []).append(thought)

    def get_thought_history(self, session_id: str) -> list[ThoughtRecord]:
        """Copy of the session's thought history ([] for unknown sessions)."""
        with self.locked():
            session = self.get_session(session_id)
            return list(session.thought_history) if session else []

    def get_branches(self, session_id: str) -> dict[str, list[ThoughtRecord]]:
        """Copy of the session's branches ({} for unknown sessions)."""
        with self.locked():
            session = self.get_session(session_id)
            if session is None:
                return {}
            return {bid: list(records) for bid, records in session.branches.items()}

    # --- Eviction ---

    def cleanup_expired_sessions(self, *, now: datetime | None = None) -> list[str]:
        """Evict sessions idle for longer than the timeout.

        Safe to call at any time; returns an empty list if nothing expired.

        Returns:
            IDs of the evicted sessions.

        """
        expired = self.cleanup_stale(self.timeout, now=now)
        for session_id in expired:
            logger.debug(f"Cleaned up expired session: {session_id}")
        if expired:
            logger.info(f"Cleaned up {len(expired)} expired sessions")
        return expired

    async def _cleanup_loop(self) -> None:
        interval = self.cleanup_interval.total_seconds()
        logger.info(
            f"Session cleanup task started (timeout={self.timeout}, interval={self.cleanup_interval})"
        )
        while True:
            try:
                await asyncio.sleep(interval)
                self.cleanup_expired_sessions()
            except asyncio.CancelledError:
                logger.info("Session cleanup task cancelled")
                raise
            except Exception as e:
                logger.error(f"Error in cleanup task: {e}")

    def start_cleanup_task(self) -> asyncio.Task[None]:
        """Start the periodic sweep on the running event loop.

        Raises:
            RuntimeError: If called with no running event loop.

        """
        if self._cleanup_task is None or self._cleanup_task.done():
            loop = asyncio.get_running_loop()
            self._cleanup_task = loop.create_task(self._cleanup_loop())
        return self._cleanup_task

    def stop_cleanup_task(self) -> None:
        """Cancel the periodic sweep if it is running."""
        if self._cleanup_task is not None and not self._cleanup_task.done():
            self._cleanup_task.cancel()
        self._cleanup_task = None

    @property
    def cleanup_running(self) -> bool:
        """Whether the periodic sweep is active."""
        return self._cleanup_task is not None and not self._cleanup_task.done()

    def close(self) -> None:
        """Stop the sweep and drop every session."""
        self.stop_cleanup_task()
        count = self._clear_sessions()
        logger.debug(f"Session store closed ({count} sessions dropped)")

    # --- Monitoring ---

    def get_session_info(self) -> list[dict[str, Any]]:
        """Per-session summary without refreshing access times."""
        with self.locked() as sessions:
            return [
                {
                    "session_id": session_id,
                    "thought_count": len(session.thought_history),
                    "branch_count": len(session.branches),
                    "last_accessed_at": session.last_accessed_at.isoformat(),
                }
                for session_id, session in sessions.items()
            ]
