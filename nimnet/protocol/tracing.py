"""
Tracing - Named, structured events recorded by both sides.

The tracing facility itself is an external collaborator. The core only
calls `Tracer.record(event)`, which returns nothing and must not raise.

Events:
- Server: ClientMoveReceive, ServerMove
- Client: GameStart, ClientMove, ServerMoveReceive, GameComplete
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional
import logging

from pydantic import BaseModel

from ..engine_core.move import Move

logger = logging.getLogger("nimnet.trace")


class TraceEvent(BaseModel):
    """Base for all trace events."""

    @property
    def name(self) -> str:
        return self.__class__.__name__


class GameStart(TraceEvent):
    seed: int


class MoveEvent(TraceEvent):
    """An event that carries a whole move."""
    game_state: Optional[list[int]] = None
    move_row: int
    move_count: int

    @classmethod
    def from_move(cls, move: Move):
        return cls(
            game_state=list(move.board) if move.board is not None else None,
            move_row=move.pile,
            move_count=move.amount,
        )


class ClientMove(MoveEvent):
    """Client is sending a move (including every retry)."""


class ServerMoveReceive(MoveEvent):
    """Client decoded a reply from the server."""


class ClientMoveReceive(MoveEvent):
    """Server decoded a move from a client."""


class ServerMove(MoveEvent):
    """Server issued a reply."""


class GameComplete(TraceEvent):
    winner: str


class Tracer(ABC):
    """Sink for trace events."""

    @abstractmethod
    def record(self, event: TraceEvent) -> None:
        """Record one event. Best effort, never raises into the caller."""

    def close(self) -> None:
        pass


class LoggingTracer(Tracer):
    """Writes each event as one structured line on the `nimnet.trace` logger."""

    def __init__(self, identity: str, level: int = logging.INFO):
        self.identity = identity
        self.level = level

    def record(self, event: TraceEvent) -> None:
        logger.log(self.level, "[%s] %s %s", self.identity, event.name, event.model_dump_json())


class RecordingTracer(Tracer):
    """Keeps events in memory."""

    def __init__(self):
        self.events: list[TraceEvent] = []

    def record(self, event: TraceEvent) -> None:
        self.events.append(event)

    def names(self) -> list[str]:
        return [event.name for event in self.events]

    def of_type(self, event_type: type[TraceEvent]) -> list[TraceEvent]:
        return [event for event in self.events if isinstance(event, event_type)]


class NullTracer(Tracer):
    def record(self, event: TraceEvent) -> None:
        pass
