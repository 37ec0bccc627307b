"""
Request Handler - The server's per-datagram decision procedure.

For each inbound datagram:
1. Decode it. Corrupt bytes are dropped without a reply.
2. GameStart -> generate the board from the seed, pick the difficulty from
   the seed's low bit, (re)create the session, reply with the GameStart echo.
3. Any other move without a session is dropped.
4. Otherwise validate the move against the session's last reply:
   - illegal: re-send the last reply unchanged
   - legal: compute the counter-move, store it, send it

Every decoded inbound move is traced as ClientMoveReceive and every reply
as ServerMove. A reply is only ever sent to the datagram's source.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Callable
import logging
import time

from ..bots.policy import Difficulty, policy_for_difficulty, play
from ..engine_core.board import generate_board, is_empty, validate_move
from ..engine_core.move import Move, Player
from ..errors import DecodeError
from ..protocol.codec import decode, encode
from ..protocol.tracing import ClientMoveReceive, NullTracer, ServerMove, Tracer
from .manager import Session, SessionStore

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL = 10.0


@dataclass
class HandlerStats:
    """Counters for every way a datagram can be handled."""
    datagrams: int = 0
    decode_errors: int = 0
    dropped: int = 0
    rejected: int = 0
    accepted: int = 0
    games_started: int = 0
    games_finished: int = 0
    evicted: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class RequestHandler:
    """
    Applies inbound moves to the session store and computes replies.

    Usage:
        handler = RequestHandler()
        reply = handler.handle(datagram, "10.0.0.7:51234")
        if reply is not None:
            sock.sendto(reply, addr)
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        tracer: Tracer | None = None,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store if store is not None else SessionStore(clock=clock)
        self.tracer = tracer or NullTracer()
        self.sweep_interval = sweep_interval
        self.clock = clock
        self.stats = HandlerStats()
        self._last_sweep = clock()

    def handle(self, data: bytes, key: str) -> bytes | None:
        """
        Handle one datagram from the client identified by `key`.

        Returns:
            Encoded reply, or None if nothing should be sent
        """
        self.stats.datagrams += 1
        self._maybe_sweep()

        try:
            move = decode(data)
        except DecodeError as e:
            self.stats.decode_errors += 1
            logger.debug("Dropping undecodable datagram from %s: %s", key, e)
            return None

        self.tracer.record(ClientMoveReceive.from_move(move))

        reply = self.process(move, key)
        if reply is None:
            return None

        self.tracer.record(ServerMove.from_move(reply))
        return encode(reply)

    def process(self, move: Move, key: str) -> Move | None:
        """
        Apply a decoded move and return the reply to send, if any.

        The lookup, validation and update of the client's session happen
        under the store lock, so a concurrent delete either lands before
        the lookup or after the update.
        """
        with self.store.locked():
            return self._process(move, key)

    def _process(self, move: Move, key: str) -> Move | None:
        if move.is_game_start:
            return self._start_game(move.amount, key)

        session = self.store.get(key)
        if session is None:
            self.stats.dropped += 1
            logger.info("Dropping %s from %s: no game in progress", move, key)
            return None

        if not validate_move(move, session.last_reply):
            if session.last_reply.is_resignation:
                # Client already won; there is no board left to re-send.
                self.stats.dropped += 1
                return None
            self.stats.rejected += 1
            logger.info("Rejected %s from %s, re-sending last reply", move, key)
            return session.last_reply

        self.stats.accepted += 1
        return self._advance(session, move)

    def _start_game(self, seed: int, key: str) -> Move:
        now = self.clock()
        previous = self.store.get(key)
        if previous is not None and previous.is_active():
            logger.info("Abandoning game in progress for %s", key)

        reply = Move.game_start_reply(generate_board(seed), seed)
        difficulty = Difficulty.from_seed(seed)
        self.store.put(Session(
            key=key,
            seed=seed,
            difficulty=difficulty,
            last_reply=reply,
            created_at=now,
            updated_at=now,
        ))
        self.stats.games_started += 1
        logger.info(
            "New game for %s: seed=%d difficulty=%s board=%s",
            key, seed, difficulty.name.lower(), list(reply.board),
        )
        return reply

    def _advance(self, session: Session, move: Move) -> Move | None:
        now = self.clock()
        reply = play(move.board, policy_for_difficulty(session.difficulty))
        session.advance(reply, now)

        if reply.is_resignation:
            # The client emptied the board: it won. Resignation stays internal.
            self._finish(session, Player.CLIENT, now)
            return None

        if is_empty(reply.board):
            self._finish(session, Player.SERVER, now)
        else:
            self.store.put(session)
        return reply

    def _finish(self, session: Session, winner: Player, now: float):
        session.finish(winner, now)
        self.store.put(session)
        self.stats.games_finished += 1
        logger.info("Game for %s over after %d turns, winner: %s", session.key, session.turns, winner.value)

    def _maybe_sweep(self):
        now = self.clock()
        if now - self._last_sweep < self.sweep_interval:
            return
        self._last_sweep = now
        evicted = self.store.evict_expired(now)
        if evicted:
            self.stats.evicted += len(evicted)
            logger.info("Evicted %d idle sessions", len(evicted))
