"""
Protocol module - What goes on the wire and what gets traced.

Provides:
- StateMoveMessage: pydantic wire model for a move
- encode/decode: bytes <-> Move
- Trace events and Tracer sinks
"""

from .codec import StateMoveMessage, encode, decode
from .tracing import (
    TraceEvent,
    GameStart,
    ClientMove,
    ClientMoveReceive,
    ServerMove,
    ServerMoveReceive,
    GameComplete,
    Tracer,
    LoggingTracer,
    RecordingTracer,
    NullTracer,
)

__all__ = [
    "StateMoveMessage",
    "encode",
    "decode",
    "TraceEvent",
    "GameStart",
    "ClientMove",
    "ClientMoveReceive",
    "ServerMove",
    "ServerMoveReceive",
    "GameComplete",
    "Tracer",
    "LoggingTracer",
    "RecordingTracer",
    "NullTracer",
]
