"""
Session Module - Per-client game state on the server, game driver on the client.

A server session represents one client's game:
- Created (or replaced) when that client sends a GameStart
- Holds the last reply the server sent and the opponent difficulty
- Marked finished when the board runs out
- Evicted after it has been idle for too long

Sessions are EPHEMERAL: nothing outlives the server process.
"""

from .manager import SessionStore, Session, SessionState
from .handler import RequestHandler, HandlerStats
from .game_loop import ClientGame, GameResult, LoopState

__all__ = [
    "SessionStore",
    "Session",
    "SessionState",
    "RequestHandler",
    "HandlerStats",
    "ClientGame",
    "GameResult",
    "LoopState",
]
