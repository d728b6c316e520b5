"""Generation tokens for board precomputation.

A client session that starts a new precomputation supersedes every earlier
one. In-flight work is not cancelled; instead the finished result is tagged
stale when a newer generation has started, and the caller drops it.
"""

import itertools
from typing import Optional


class GenerationGuard:
    """Monotonic per-session generation counter."""

    def __init__(self, max_sessions: int = 10000):
        self._counter = itertools.count(1)
        self._current: dict[str, int] = {}
        self._max_sessions = max_sessions

    def begin(self, session_id: Optional[str]) -> int:
        """Start a new generation for the session and return its token."""
        token = next(self._counter)
        if session_id:
            if session_id not in self._current and len(self._current) >= self._max_sessions:
                # Oldest session first (dicts keep insertion order)
                self._current.pop(next(iter(self._current)))
            self._current[session_id] = token
        return token

    def is_current(self, session_id: Optional[str], token: int) -> bool:
        """True unless a newer generation was started for the same session."""
        if not session_id:
            return True
        return self._current.get(session_id, token) == token
