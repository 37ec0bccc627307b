"""
Loopback Transport - Client transport that calls a RequestHandler in-process.

Faults are scripted by send/reply index so tests can reproduce exact
loss, duplication and corruption patterns:

    transport = LoopbackTransport(handler, drop_requests={1}, duplicate_replies={0})
"""

from __future__ import annotations
from collections import deque
from typing import Iterable

from ..errors import TransportTimeout
from ..session.handler import RequestHandler
from .base import Transport


class LoopbackTransport(Transport):
    """
    In-process transport.

    Args:
        handler: Server-side handler that answers each request
        key: Client identity presented to the handler
        drop_requests: Indices of sends that never reach the handler
        drop_replies: Indices of handler replies that are lost
        duplicate_replies: Indices of handler replies delivered twice
        corrupt_replies: Indices of handler replies whose bytes are mangled
    """

    def __init__(
        self,
        handler: RequestHandler,
        key: str = "127.0.0.1:40000",
        drop_requests: Iterable[int] = (),
        drop_replies: Iterable[int] = (),
        duplicate_replies: Iterable[int] = (),
        corrupt_replies: Iterable[int] = (),
    ):
        self.handler = handler
        self.key = key
        self.drop_requests = set(drop_requests)
        self.drop_replies = set(drop_replies)
        self.duplicate_replies = set(duplicate_replies)
        self.corrupt_replies = set(corrupt_replies)

        self.sent: list[bytes] = []
        self.replies: list[bytes] = []
        self._inbox: deque[bytes] = deque()

    def send(self, data: bytes) -> None:
        index = len(self.sent)
        self.sent.append(data)
        if index in self.drop_requests:
            return

        reply = self.handler.handle(data, self.key)
        if reply is None:
            return

        reply_index = len(self.replies)
        self.replies.append(reply)
        if reply_index in self.drop_replies:
            return
        if reply_index in self.corrupt_replies:
            reply = reply[: len(reply) // 2]
        self._inbox.append(reply)
        if reply_index in self.duplicate_replies:
            self._inbox.append(reply)

    def receive(self, timeout: float) -> bytes:
        if not self._inbox:
            raise TransportTimeout(f"no reply within {timeout}s")
        return self._inbox.popleft()

    def inject(self, data: bytes):
        """Queue a datagram as if the server had sent it."""
        self._inbox.append(data)
