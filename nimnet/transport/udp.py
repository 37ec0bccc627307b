"""
UDP Transport - Datagram sockets for both sides.

Server: one socket, one thread, one datagram at a time. Sessions are keyed
by the datagram's source address and replies go back to that address.
Send and receive failures are logged and the loop carries on.

Client: a connected socket; receive() waits at most `timeout` seconds.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import logging
import random
import socket
import threading
import time

from ..errors import TransportError, TransportTimeout
from ..session.handler import RequestHandler
from .base import Transport

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 1024
DEFAULT_POLL_INTERVAL = 0.5

Address = tuple[str, int]


def address_key(address: Address) -> str:
    """Session key for a peer address."""
    return f"{address[0]}:{address[1]}"


@dataclass
class NetworkConditions:
    """
    Fault injection for server sends.

    Each reply is dropped with probability `loss_rate`, otherwise sent twice
    with probability `duplicate_rate`, after sleeping `delay` seconds.
    """
    loss_rate: float = 0.0
    duplicate_rate: float = 0.0
    delay: float = 0.0
    seed: Optional[int] = None

    def __post_init__(self):
        for name in ("loss_rate", "duplicate_rate"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if self.delay < 0:
            raise ValueError(f"delay must not be negative, got {self.delay}")
        self._rng = random.Random(self.seed)

    @property
    def enabled(self) -> bool:
        return bool(self.loss_rate or self.duplicate_rate or self.delay)

    def copies(self) -> int:
        """How many copies of the next datagram to actually send."""
        if self._rng.random() < self.loss_rate:
            return 0
        if self._rng.random() < self.duplicate_rate:
            return 2
        return 1


class UDPServer:
    """
    Single-threaded datagram server around a RequestHandler.

    Usage:
        with UDPServer(("0.0.0.0", 8080), handler) as server:
            server.serve_forever()
    """

    def __init__(
        self,
        address: Address,
        handler: RequestHandler,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        conditions: NetworkConditions | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.requested_address = address
        self.handler = handler
        self.buffer_size = buffer_size
        self.conditions = conditions
        self.poll_interval = poll_interval
        self.address: Address | None = None
        self._sock: socket.socket | None = None
        self._stop = threading.Event()

    def bind(self) -> Address:
        """Open and bind the socket. Returns the bound address."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind(self.requested_address)
        except OSError:
            sock.close()
            raise
        sock.settimeout(self.poll_interval)
        self._sock = sock
        self.address = sock.getsockname()
        logger.info("Listening for datagrams on %s", address_key(self.address))
        return self.address

    def serve_forever(self):
        """Receive and answer datagrams until shutdown() is called."""
        if self._sock is None:
            self.bind()

        self._stop.clear()
        while not self._stop.is_set():
            try:
                data, peer = self._sock.recvfrom(self.buffer_size)
            except socket.timeout:
                continue
            except OSError as e:
                if self._stop.is_set():
                    break
                logger.warning("Error receiving datagram: %s", e)
                continue
            self.process(data, peer)

        logger.info("Datagram server stopped")

    def process(self, data: bytes, peer: Address):
        reply = self.handler.handle(data, address_key(peer))
        if reply is not None:
            self._send(reply, peer)

    def _send(self, data: bytes, peer: Address):
        copies = 1
        if self.conditions is not None and self.conditions.enabled:
            copies = self.conditions.copies()
            if self.conditions.delay:
                time.sleep(self.conditions.delay)

        for _ in range(copies):
            try:
                self._sock.sendto(data, peer)
            except OSError as e:
                logger.warning("Error sending reply to %s: %s", address_key(peer), e)

    def shutdown(self):
        self._stop.set()

    def close(self):
        self.shutdown()
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self):
        if self._sock is None:
            self.bind()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class UDPClientTransport(Transport):
    """Connected datagram socket to the server."""

    def __init__(
        self,
        server_address: Address,
        local_address: Address = ("0.0.0.0", 0),
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        self.server_address = server_address
        self.buffer_size = buffer_size
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            self._sock.bind(local_address)
            self._sock.connect(server_address)
        except OSError:
            self._sock.close()
            raise

    @property
    def local_address(self) -> Address:
        return self._sock.getsockname()

    def send(self, data: bytes) -> None:
        try:
            self._sock.send(data)
        except OSError as e:
            raise TransportError(f"send to {address_key(self.server_address)} failed: {e}") from e

    def receive(self, timeout: float) -> bytes:
        self._sock.settimeout(timeout)
        try:
            return self._sock.recv(self.buffer_size)
        except socket.timeout:
            raise TransportTimeout(f"no reply within {timeout}s") from None
        except OSError as e:
            raise TransportError(f"receive failed: {e}") from e

    def close(self) -> None:
        self._sock.close()
