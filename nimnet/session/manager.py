"""
Session Store - Keyed, expiring store of server-side game sessions.

Sessions are keyed by the client's network identity ("host:port"). There is
at most one session per key; a new GameStart replaces the old one.

LIFECYCLE:
1. Client sends GameStart -> session created IN_PLAY (replacing any old one)
2. Each accepted move overwrites the session's last reply
3. Board runs out -> session FINISHED, still answers duplicates
4. Idle past its TTL -> session evicted

The store owns a reentrant lock. Single calls take it on their own; a
read-modify-write on a session takes it for the whole sequence with
`store.locked()`, so readers on other threads (the HTTP API) see a
consistent mapping while the datagram loop mutates it.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator
import threading
import time

from ..bots.policy import Difficulty
from ..engine_core.move import Move, Player

DEFAULT_SESSION_TTL = 300.0
DEFAULT_FINISHED_TTL = 30.0


class SessionState(Enum):
    """State of a server-side session."""
    IN_PLAY = "in_play"
    FINISHED = "finished"


@dataclass
class Session:
    """
    One client's game, as the server sees it.

    `last_reply` is the last move the server issued (or, once the client
    has won, the resignation the server recorded without sending).
    """
    key: str
    seed: int
    difficulty: Difficulty
    last_reply: Move
    created_at: float
    updated_at: float

    state: SessionState = SessionState.IN_PLAY
    winner: Player | None = None
    turns: int = 0

    def is_active(self) -> bool:
        """Check if the game is still being played."""
        return self.state == SessionState.IN_PLAY

    def advance(self, reply: Move, now: float):
        """Store the server's newest reply."""
        self.last_reply = reply
        self.turns += 1
        self.updated_at = now

    def finish(self, winner: Player, now: float):
        self.state = SessionState.FINISHED
        self.winner = winner
        self.updated_at = now

    def idle_for(self, now: float) -> float:
        return now - self.updated_at


class SessionStore:
    """
    Get/put/delete store for sessions, with TTL eviction.

    In-play sessions expire after `session_ttl` seconds without traffic,
    finished ones after `finished_ttl`.
    """

    def __init__(
        self,
        session_ttl: float = DEFAULT_SESSION_TTL,
        finished_ttl: float = DEFAULT_FINISHED_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self.session_ttl = session_ttl
        self.finished_ttl = finished_ttl
        self.clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.RLock()

    @contextmanager
    def locked(self) -> Iterator[SessionStore]:
        """
        Hold the store lock for a read-modify-write sequence.

        Sessions are mutated in place, so a get/update/put on one thread
        must not interleave with a delete or a read on another:

            with store.locked():
                session = store.get(key)
                ...
                store.put(session)
        """
        with self._lock:
            yield self

    def get(self, key: str) -> Session | None:
        """Get a session by client key."""
        with self._lock:
            return self._sessions.get(key)

    def put(self, session: Session):
        """Insert or replace the session for `session.key`."""
        with self._lock:
            self._sessions[session.key] = session

    def delete(self, key: str) -> bool:
        """Remove a session. Returns whether one existed."""
        with self._lock:
            return self._sessions.pop(key, None) is not None

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def list_sessions(self) -> list[Session]:
        with self._lock:
            return list(self._sessions.values())

    def list_active_sessions(self) -> list[str]:
        """List keys of sessions still in play."""
        with self._lock:
            return [
                key for key, session in self._sessions.items()
                if session.is_active()
            ]

    def evict_expired(self, now: float | None = None) -> list[str]:
        """
        Remove sessions idle past their TTL.

        Returns:
            Keys of the evicted sessions
        """
        if now is None:
            now = self.clock()

        with self._lock:
            expired = [
                key for key, session in self._sessions.items()
                if session.idle_for(now) > self._ttl_for(session)
            ]
            for key in expired:
                del self._sessions[key]
        return expired

    def _ttl_for(self, session: Session) -> float:
        if session.is_active():
            return self.session_ttl
        return self.finished_ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._sessions

    def __iter__(self) -> Iterator[Session]:
        return iter(self.list_sessions())
