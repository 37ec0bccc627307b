"""
Pydantic Schemas for the inspection API.

Error Codes:
- SESSION_NOT_FOUND: No session exists for the given client key
"""

from __future__ import annotations
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..session.manager import Session


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"


class SessionStatus(str, Enum):
    IN_PLAY = "in_play"
    FINISHED = "finished"


class SessionResponse(BaseModel):
    """One client's session."""
    key: str = Field(description="Client network identity, host:port")
    status: SessionStatus
    seed: int
    difficulty: str = Field(description="naive or optimal")
    board: Optional[list[int]] = Field(None, description="Board in the server's last reply")
    last_move_row: int
    last_move_count: int
    turns: int = 0
    winner: Optional[str] = None
    created_at: float
    updated_at: float

    @classmethod
    def from_session(cls, session: Session) -> SessionResponse:
        reply = session.last_reply
        return cls(
            key=session.key,
            status=SessionStatus(session.state.value),
            seed=session.seed,
            difficulty=session.difficulty.name.lower(),
            board=list(reply.board) if reply.board is not None else None,
            last_move_row=reply.pile,
            last_move_count=reply.amount,
            turns=session.turns,
            winner=session.winner.value if session.winner else None,
            created_at=session.created_at,
            updated_at=session.updated_at,
        )


class SessionListResponse(BaseModel):
    sessions: list[SessionResponse] = Field(default_factory=list)
    count: int = 0


class EndSessionResponse(BaseModel):
    success: bool
    key: str


class HealthResponse(BaseModel):
    """Server health and datagram counters."""
    status: str = "ok"
    version: str
    sessions: int = 0
    active_sessions: int = 0
    stats: dict[str, int] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    error: str
    error_code: ErrorCode
