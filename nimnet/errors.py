"""
Error types shared across the package.

Protocol violations (illegal moves, stale replies) are NOT errors: they are
reported as booleans by the validators and handled as no-ops. Exceptions are
reserved for conditions the caller has to act on.
"""


class NimError(Exception):
    """Base class for all nimnet errors."""


class DecodeError(NimError):
    """A datagram could not be decoded into a move."""


class ConfigError(NimError):
    """Configuration could not be loaded or is invalid."""


class StrategyError(NimError):
    """A strategy reached a state that correct play never produces."""


class TransportError(NimError):
    """Sending or receiving a datagram failed."""


class TransportTimeout(TransportError):
    """No datagram arrived before the receive deadline."""


class ServerUnreachableError(NimError):
    """The client gave up after too many unanswered sends."""
