"""Unit tests for GenerationGuard (stale precompute detection)."""

from boxtobox.board.guard import GenerationGuard


class TestGenerationGuard:

    def test_latest_generation_is_current(self):
        guard = GenerationGuard()
        first = guard.begin("session-a")
        second = guard.begin("session-a")

        assert second > first
        assert guard.is_current("session-a", second)
        assert not guard.is_current("session-a", first)

    def test_sessions_are_independent(self):
        guard = GenerationGuard()
        a = guard.begin("session-a")
        guard.begin("session-b")
        assert guard.is_current("session-a", a)

    def test_no_session_is_always_current(self):
        guard = GenerationGuard()
        token = guard.begin(None)
        guard.begin(None)
        assert guard.is_current(None, token)

    def test_evicts_oldest_session(self):
        guard = GenerationGuard(max_sessions=2)
        a = guard.begin("a")
        guard.begin("b")
        guard.begin("c")
        # Evicted sessions are unknown, hence never reported stale
        assert guard.is_current("a", a)
        assert len(guard._current) == 2
