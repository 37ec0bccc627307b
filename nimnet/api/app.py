"""
FastAPI Application - HTTP inspection API for the datagram server.

Endpoints:
    GET    /api/v1/health          Server health and counters
    GET    /api/v1/sessions        List sessions
    GET    /api/v1/sessions/{key}  Get one session
    DELETE /api/v1/sessions/{key}  Abandon a session

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Union
import logging
import threading

from fastapi import FastAPI
from fastapi.responses import JSONResponse
import uvicorn

from .. import __version__
from ..config import parse_address
from ..session.handler import RequestHandler
from .schemas import (
    EndSessionResponse,
    ErrorCode,
    ErrorResponse,
    HealthResponse,
    SessionListResponse,
    SessionResponse,
)

logger = logging.getLogger(__name__)


def create_app(handler: RequestHandler) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        handler: The request handler whose store and counters are exposed

    Returns:
        FastAPI application instance
    """
    store = handler.store

    app = FastAPI(
        title="Nimnet Server API",
        description="Inspect the sessions of a running Nim datagram server.",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(error=message, error_code=error_code).model_dump(mode="json"),
        )

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="Server health and counters",
    )
    async def health() -> HealthResponse:
        return HealthResponse(
            version=__version__,
            sessions=len(store),
            active_sessions=len(store.list_active_sessions()),
            stats=handler.stats.as_dict(),
        )

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List sessions",
    )
    async def list_sessions() -> SessionListResponse:
        with store.locked():
            sessions = [SessionResponse.from_session(s) for s in store.list_sessions()]
        sessions.sort(key=lambda s: s.key)
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{key}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get one session",
    )
    async def get_session(key: str) -> Union[SessionResponse, JSONResponse]:
        with store.locked():
            session = store.get(key)
            response = SessionResponse.from_session(session) if session is not None else None
        if response is None:
            return make_error_response(
                ErrorCode.SESSION_NOT_FOUND,
                f"No session for {key}",
                status_code=404,
            )
        return response

    @app.delete(
        "/api/v1/sessions/{key}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="Abandon a session",
    )
    async def end_session(key: str) -> EndSessionResponse:
        success = store.delete(key)
        if success:
            logger.info("Session for %s abandoned via API", key)
        return EndSessionResponse(success=success, key=key)

    return app


def serve_in_thread(handler: RequestHandler, address: str) -> threading.Thread:
    """Run the API with uvicorn on a daemon thread."""
    host, port = parse_address(address)
    server = uvicorn.Server(uvicorn.Config(
        create_app(handler),
        host=host,
        port=port,
        log_level="warning",
    ))
    thread = threading.Thread(target=server.run, name="nimnet-api", daemon=True)
    thread.start()
    logger.info("Inspection API listening on http://%s:%d/api/docs", host, port)
    return thread
