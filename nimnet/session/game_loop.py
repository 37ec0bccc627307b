"""
Client Game Loop - Drives one game against the server.

States:
    INIT -> AWAIT_START -> MY_TURN -> AWAIT_SERVER_REPLY -> MY_TURN ...
                                   `-> WON / LOST

- Every wait is bounded by `timeout`. On timeout, corrupt bytes, or a reply
  that is not a legal successor of what was sent, the SAME message is sent
  again. No new move is computed until a valid reply arrives.
- Whoever is asked to move from an empty board loses. The client stops as
  soon as its own move empties the board (sending it once, not waiting for
  a reply), or as soon as the server hands it an empty board.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TYPE_CHECKING
import logging

from ..bots.policy import MovePolicy, OptimalPolicy
from ..engine_core.board import is_empty, validate_move
from ..engine_core.move import Board, Move, Player, SEED_MIN, SEED_MAX
from ..errors import DecodeError, ServerUnreachableError, TransportError, TransportTimeout
from ..protocol.codec import decode, encode
from ..protocol.tracing import (
    ClientMove,
    GameComplete,
    GameStart,
    NullTracer,
    ServerMoveReceive,
    Tracer,
)

if TYPE_CHECKING:
    from ..transport.base import Transport

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 1.0


class LoopState(Enum):
    """State of the client game loop."""
    INIT = "init"
    AWAIT_START = "await_start"
    MY_TURN = "my_turn"
    AWAIT_SERVER_REPLY = "await_server_reply"
    WON = "won"
    LOST = "lost"


@dataclass
class GameResult:
    """Outcome of a finished game."""
    winner: Player
    seed: int
    final_board: Board
    moves_sent: int
    retries: int

    @property
    def client_won(self) -> bool:
        return self.winner == Player.CLIENT


class ClientGame:
    """
    One client game.

    Usage:
        with UDPClientTransport(server_address) as transport:
            result = ClientGame(transport, seed=5).run()
    """

    def __init__(
        self,
        transport: Transport,
        seed: int,
        policy: MovePolicy | None = None,
        tracer: Tracer | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: Optional[int] = None,
    ):
        if not SEED_MIN <= seed <= SEED_MAX:
            raise ValueError(f"seed must be in [{SEED_MIN}, {SEED_MAX}], got {seed}")
        if max_attempts is not None and max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self.transport = transport
        self.seed = seed
        self.policy = policy or OptimalPolicy()
        self.tracer = tracer or NullTracer()
        self.timeout = timeout
        self.max_attempts = max_attempts

        self.state = LoopState.INIT
        self.board: Board | None = None
        self.moves_sent = 0
        self.retries = 0

    def run(self) -> GameResult:
        """
        Play the game to the end.

        Raises:
            ServerUnreachableError: if max_attempts consecutive sends go unanswered
        """
        self.tracer.record(GameStart(seed=self.seed))

        self.state = LoopState.AWAIT_START
        start = self._exchange(Move.game_start(self.seed), self._is_start_reply)
        self.board = start.board
        logger.info("Game started with seed %d: %s", self.seed, list(self.board))

        while True:
            self.state = LoopState.MY_TURN
            if is_empty(self.board):
                return self._complete(Player.SERVER)

            move = self.policy.select_move(self.board)
            if is_empty(move.board):
                self._send(move)
                self.board = move.board
                return self._complete(Player.CLIENT)

            self.state = LoopState.AWAIT_SERVER_REPLY
            reply = self._exchange(move, lambda reply: validate_move(reply, move))
            self.board = reply.board

    def _is_start_reply(self, reply: Move) -> bool:
        return reply.is_game_start_reply and reply.amount == self.seed

    def _exchange(self, move: Move, accept: Callable[[Move], bool]) -> Move:
        """Send `move` until a reply passes `accept`."""
        attempts = 0
        while True:
            self._send(move)
            attempts += 1

            try:
                reply = self._receive()
            except TransportTimeout:
                logger.warning("Timed out waiting for reply to %s", move)
            except DecodeError as e:
                logger.warning("Discarding corrupt reply: %s", e)
            except TransportError as e:
                logger.warning("Receive failed: %s", e)
            else:
                if accept(reply):
                    return reply
                logger.warning("Discarding invalid or duplicate reply %s to %s", reply, move)

            if self.max_attempts is not None and attempts >= self.max_attempts:
                raise ServerUnreachableError(
                    f"no valid reply to {move} after {attempts} attempts"
                )
            self.retries += 1

    def _send(self, move: Move):
        self.tracer.record(ClientMove.from_move(move))
        self.moves_sent += 1
        try:
            self.transport.send(encode(move))
        except TransportError as e:
            # Treated like a lost datagram: the receive will time out.
            logger.warning("Send failed: %s", e)

    def _receive(self) -> Move:
        reply = decode(self.transport.receive(self.timeout))
        self.tracer.record(ServerMoveReceive.from_move(reply))
        return reply

    def _complete(self, winner: Player) -> GameResult:
        self.state = LoopState.WON if winner == Player.CLIENT else LoopState.LOST
        self.tracer.record(GameComplete(winner=winner.value))
        logger.info("Game over, winner: %s", winner.value)
        return GameResult(
            winner=winner,
            seed=self.seed,
            final_board=self.board,
            moves_sent=self.moves_sent,
            retries=self.retries,
        )
