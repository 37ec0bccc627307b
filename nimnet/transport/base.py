"""
Transport interface used by the client game loop.

Sends are fire-and-forget: delivery is never confirmed, the caller retries
after a receive times out.
"""

from __future__ import annotations
from abc import ABC, abstractmethod


class Transport(ABC):
    """A datagram channel to a single server."""

    @abstractmethod
    def send(self, data: bytes) -> None:
        """
        Send one datagram.

        Raises:
            TransportError: if the datagram could not be handed to the network
        """

    @abstractmethod
    def receive(self, timeout: float) -> bytes:
        """
        Wait up to `timeout` seconds for one datagram.

        Raises:
            TransportTimeout: if nothing arrived in time
            TransportError: on any other receive failure
        """

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
