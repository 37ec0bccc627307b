"""
API module - HTTP inspection of a running server's sessions.

Provides:
- FastAPI app factory (create_app)
- Pydantic response schemas

The API is read-mostly: it lists and shows sessions and can abandon one.
Game play itself only ever happens over datagrams.
"""

from .app import create_app, serve_in_thread
from .schemas import (
    ErrorCode,
    ErrorResponse,
    HealthResponse,
    SessionResponse,
    SessionListResponse,
    EndSessionResponse,
)

__all__ = [
    "create_app",
    "serve_in_thread",
    "ErrorCode",
    "ErrorResponse",
    "HealthResponse",
    "SessionResponse",
    "SessionListResponse",
    "EndSessionResponse",
]
