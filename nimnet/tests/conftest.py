"""
Pytest fixtures for Nimnet tests.
"""

import pytest

from ..engine_core import generate_board
from ..protocol.tracing import RecordingTracer
from ..session import RequestHandler, SessionStore
from ..transport import LoopbackTransport


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tracer() -> RecordingTracer:
    return RecordingTracer()


@pytest.fixture
def store(clock) -> SessionStore:
    return SessionStore(session_ttl=300.0, finished_ttl=30.0, clock=clock)


@pytest.fixture
def handler(store, tracer, clock) -> RequestHandler:
    """Handler with a recording tracer and a fake clock."""
    return RequestHandler(store=store, tracer=tracer, sweep_interval=10.0, clock=clock)


@pytest.fixture
def loopback(handler) -> LoopbackTransport:
    return LoopbackTransport(handler)


@pytest.fixture
def seeded_boards():
    """Generated boards for a spread of seeds, including negative ones."""
    return [generate_board(seed) for seed in range(-20, 20)]
