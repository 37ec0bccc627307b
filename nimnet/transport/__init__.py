"""
Transport module - Moving datagrams between client and server.

Provides:
- Transport: client-side send/receive-with-timeout interface
- UDPClientTransport / UDPServer: real datagram sockets
- NetworkConditions: optional loss/duplication/delay on server sends
- LoopbackTransport: in-process transport wired straight to a RequestHandler
"""

from .base import Transport
from .udp import UDPClientTransport, UDPServer, NetworkConditions
from .loopback import LoopbackTransport

__all__ = [
    "Transport",
    "UDPClientTransport",
    "UDPServer",
    "NetworkConditions",
    "LoopbackTransport",
]
