"""
Tests for the session store.

Tests:
- get/put/delete by key
- One session per key
- TTL eviction of idle and finished sessions
"""

from ..bots import Difficulty
from ..engine_core import Move, Player
from ..session import Session, SessionState, SessionStore


def make_session(key, now, seed=5):
    return Session(
        key=key,
        seed=seed,
        difficulty=Difficulty.from_seed(seed),
        last_reply=Move.game_start_reply((1, 2, 3), seed),
        created_at=now,
        updated_at=now,
    )


class TestSessionStore:
    """Tests for keyed access."""

    def test_put_and_get(self, store, clock):
        session = make_session("10.0.0.1:5000", clock())
        store.put(session)
        assert store.get("10.0.0.1:5000") is session
        assert "10.0.0.1:5000" in store
        assert len(store) == 1

    def test_put_replaces_existing(self, store, clock):
        store.put(make_session("a:1", clock(), seed=4))
        store.put(make_session("a:1", clock(), seed=7))
        assert len(store) == 1
        assert store.get("a:1").seed == 7

    def test_get_missing(self, store):
        assert store.get("nobody:1") is None

    def test_delete(self, store, clock):
        store.put(make_session("a:1", clock()))
        assert store.delete("a:1")
        assert not store.delete("a:1")
        assert store.get("a:1") is None

    def test_list_active_sessions(self, store, clock):
        store.put(make_session("a:1", clock()))
        finished = make_session("b:2", clock())
        finished.finish(Player.CLIENT, clock())
        store.put(finished)

        assert store.list_active_sessions() == ["a:1"]
        assert sorted(store.keys()) == ["a:1", "b:2"]


class TestEviction:
    """Tests for idle expiry."""

    def test_idle_in_play_session_expires(self, store, clock):
        store.put(make_session("a:1", clock()))
        clock.advance(299)
        assert store.evict_expired() == []
        clock.advance(2)
        assert store.evict_expired() == ["a:1"]
        assert len(store) == 0

    def test_finished_session_expires_sooner(self, store, clock):
        session = make_session("a:1", clock())
        session.finish(Player.SERVER, clock())
        store.put(session)
        store.put(make_session("b:2", clock()))

        clock.advance(31)
        assert store.evict_expired() == ["a:1"]
        assert store.get("b:2") is not None

    def test_activity_resets_idle_time(self, store, clock):
        session = make_session("a:1", clock())
        store.put(session)
        clock.advance(200)
        session.advance(Move(board=(0, 2, 3), pile=0, amount=1), clock())
        clock.advance(200)
        assert store.evict_expired() == []


class TestSession:
    def test_finish(self, clock):
        session = make_session("a:1", clock())
        assert session.is_active()
        session.finish(Player.CLIENT, clock())
        assert session.state == SessionState.FINISHED
        assert session.winner == Player.CLIENT
        assert not session.is_active()
