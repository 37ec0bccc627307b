"""
Nimnet - Nim over an unreliable datagram transport.

A server that keeps per-client game sessions and answers every move,
and a client that drives one game to completion. Provides:
- Board model and move legality checks
- Naive and optimal (nim-sum) move strategies
- A keyed session store with expiry
- Loss, duplicate and timeout tolerant request/response exchange
"""

__version__ = "0.1.0"
