"""Session manager base class.

Provides lock-guarded session storage shared by the stateful tools.
Missing sessions are reported as ``None`` rather than raised.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Generator
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Generic, Protocol, TypeVar, runtime_checkable


@runtime_checkable
class HasLastAccessedAt(Protocol):
    """Protocol for objects with a last_accessed_at timestamp."""

    last_accessed_at: datetime


T = TypeVar("T")


class SessionManager(Generic[T]):
    """Thread-safe base class for session management.

    Provides:
    - Session storage guarded by a single RLock per instance
    - `locked()` context manager for bulk operations
    - Idle-time based eviction via `cleanup_stale()`

    Usage:
        class MyManager(SessionManager[MyState]):
            def touch(self, session_id: str) -> None:
                with self.locked():
                    state = self._lookup(session_id)
                    if state is not None:
                        state.last_accessed_at = self._now()
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        """Initialize session manager with empty sessions and lock.

        Args:
            clock: Source of "now"; defaults to ``datetime.now``.

        """
        self._sessions: dict[str, T] = {}
        self._lock = threading.RLock()
        self._clock = clock or datetime.now

    def _now(self) -> datetime:
        return self._clock()

    def _lookup(self, session_id: str) -> T | None:
        """Get session by ID, or None.

        Note:
            This method does NOT acquire the lock. Caller must hold lock
            or use the `locked()` context manager.

        """
        return self._sessions.get(session_id)

    @contextmanager
    def locked(self) -> Generator[dict[str, T], None, None]:
        """Context manager for operations on all sessions.

        Acquires lock and yields the sessions dict for bulk operations.

        Example:
            with self.locked() as sessions:
                for sid, state in sessions.items():
                    ...

        """
        with self._lock:
            yield self._sessions

    def session_exists(self, session_id: str) -> bool:
        """Check if session exists without refreshing its access time."""
        with self._lock:
            return session_id in self._sessions

    def session_count(self) -> int:
        """Get number of live sessions."""
        with self._lock:
            return len(self._sessions)

    def _register_session(self, session_id: str, state: T) -> None:
        with self._lock:
            self._sessions[session_id] = state

    def _remove_session(self, session_id: str) -> T | None:
        with self._lock:
            return self._sessions.pop(session_id, None)

    def _clear_sessions(self) -> int:
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
            return count

    def cleanup_stale(
        self,
        max_idle: timedelta,
        *,
        now: datetime | None = None,
        predicate: Callable[[T], bool] | None = None,
    ) -> list[str]:
        """Remove sessions idle for longer than max_idle.

        A session is stale when ``now - last_accessed_at > max_idle``.
        The whole sweep runs under the lock, so request-driven mutations
        never interleave with it.

        Args:
            max_idle: Maximum idle time before a session is evicted.
            now: Reference time (defaults to the manager's clock).
            predicate: Optional additional filter. If provided, only
                sessions where `predicate(state)` returns True are
                eligible for removal.

        Returns:
            List of removed session IDs.

        Raises:
            TypeError: If a session state has no `last_accessed_at` attribute.

        """
        if now is None:
            now = self._now()

        with self._lock:
            stale_ids: list[str] = []
            for session_id, state in self._sessions.items():
                if not isinstance(state, HasLastAccessedAt):
                    raise TypeError(
                        f"Session state {type(state).__name__} must have "
                        "'last_accessed_at' attribute"
                    )
                idle = now - state.last_accessed_at
                if idle > max_idle and (predicate is None or predicate(state)):
                    stale_ids.append(session_id)

            for session_id in stale_ids:
                del self._sessions[session_id]

        return stale_ids
