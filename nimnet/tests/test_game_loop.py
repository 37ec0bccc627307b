"""
Tests for the client game loop.

Tests:
- Full games against an in-process server
- Retry on lost, duplicated and corrupt datagrams
- Win/loss detection
- Giving up after max_attempts
"""

from collections import deque

import pytest

from ..bots import NaivePolicy
from ..engine_core import Move, Player, is_empty, nim_sum
from ..errors import ServerUnreachableError, TransportTimeout
from ..protocol import decode, encode
from ..protocol.tracing import GameComplete, RecordingTracer
from ..session import ClientGame, LoopState, SessionState
from ..transport import LoopbackTransport, Transport


class ScriptedTransport(Transport):
    """Answers each send with whatever `respond` returns (None = lost)."""

    def __init__(self, respond):
        self.respond = respond
        self.sent: list[Move] = []
        self._inbox: deque[bytes] = deque()

    def send(self, data: bytes) -> None:
        move = decode(data)
        self.sent.append(move)
        for reply in self.respond(move, len(self.sent) - 1):
            self._inbox.append(reply if isinstance(reply, bytes) else encode(reply))

    def receive(self, timeout: float) -> bytes:
        if not self._inbox:
            raise TransportTimeout("nothing queued")
        return self._inbox.popleft()


class TestFullGame:
    """Games against the real handler over the loopback transport."""

    @pytest.mark.parametrize("seed", [5, 6, -7, 100])
    def test_optimal_client_wins(self, handler, seed):
        """The generated board has a nonzero nim-sum, so the first mover wins."""
        transport = LoopbackTransport(handler)
        result = ClientGame(transport, seed=seed).run()

        assert result.winner == Player.CLIENT
        assert result.client_won
        assert is_empty(result.final_board)
        assert result.retries == 0

        session = handler.store.get(transport.key)
        assert session.state == SessionState.FINISHED
        assert session.winner == Player.CLIENT

    def test_naive_client_game_terminates(self, handler):
        transport = LoopbackTransport(handler)
        game = ClientGame(transport, seed=5, policy=NaivePolicy())

        result = game.run()

        assert is_empty(result.final_board)
        assert game.state in (LoopState.WON, LoopState.LOST)
        assert handler.store.get(transport.key).winner == result.winner

    def test_survives_lossy_network(self, handler):
        transport = LoopbackTransport(
            handler,
            drop_requests={0, 3},
            drop_replies={1},
            duplicate_replies={2, 4},
            corrupt_replies={3},
        )
        result = ClientGame(transport, seed=5).run()

        assert result.winner == Player.CLIENT
        assert result.retries > 0
        assert result.moves_sent == len(transport.sent)

    def test_retries_resend_identical_bytes(self, handler):
        """A timed-out GameStart is resent unchanged."""
        transport = LoopbackTransport(handler, drop_requests={0, 1})
        ClientGame(transport, seed=9).run()
        assert transport.sent[0] == transport.sent[1] == transport.sent[2]


class TestWinLoss:
    """Terminal board detection with a scripted server."""

    def test_server_emptying_board_is_a_loss(self, tracer):
        def respond(move, index):
            if move.is_game_start:
                return [Move.game_start_reply((1, 1, 0), move.amount)]
            return [Move(board=(0, 0, 0), pile=1, amount=1)]

        transport = ScriptedTransport(respond)
        game = ClientGame(transport, seed=3, tracer=tracer)
        result = game.run()

        assert result.winner == Player.SERVER
        assert game.state == LoopState.LOST
        assert tracer.of_type(GameComplete)[0].winner == "server"

    def test_winning_move_sent_once_without_waiting(self):
        def respond(move, index):
            if move.is_game_start:
                return [Move.game_start_reply((0, 3), move.amount)]
            return []

        transport = ScriptedTransport(respond)
        game = ClientGame(transport, seed=3)
        result = game.run()

        assert result.winner == Player.CLIENT
        assert game.state == LoopState.WON
        assert transport.sent[-1] == Move(board=(0, 0), pile=1, amount=3)
        assert len(transport.sent) == 2

    def test_empty_start_board_is_a_loss(self):
        """Asked to move from an empty board, the client loses."""
        transport = ScriptedTransport(lambda move, index: [Move.game_start_reply((0, 0, 0), move.amount)])
        assert ClientGame(transport, seed=1).run().winner == Player.SERVER


class TestReplyValidation:
    """Invalid replies are treated like timeouts."""

    def test_start_echo_with_wrong_seed_ignored(self):
        def respond(move, index):
            if move.is_game_start and index == 0:
                return [Move.game_start_reply((1, 2, 4), 99)]
            if move.is_game_start:
                return [Move.game_start_reply((0, 0, 4), move.amount)]
            return []

        transport = ScriptedTransport(respond)
        result = ClientGame(transport, seed=2).run()

        assert result.retries == 1
        assert result.winner == Player.CLIENT

    def test_illegal_reply_triggers_resend_of_same_move(self):
        replies = {
            1: [Move(board=(0, 0, 0), pile=0, amount=9)],       # wrong amount
            2: [b"\x00\x01 corrupt"],
            3: [Move(board=(0, 1, 0), pile=2, amount=2)],       # legal
        }

        def respond(move, index):
            if move.is_game_start:
                return [Move.game_start_reply((0, 2, 2), move.amount)]
            return replies.get(index, [])

        transport = ScriptedTransport(respond)
        result = ClientGame(transport, seed=4, policy=NaivePolicy()).run()

        first_move = Move(board=(0, 1, 2), pile=1, amount=1)
        assert transport.sent[1:4] == [first_move] * 3
        assert result.retries == 2

    def test_gives_up_after_max_attempts(self):
        transport = ScriptedTransport(lambda move, index: [])
        game = ClientGame(transport, seed=1, max_attempts=3)

        with pytest.raises(ServerUnreachableError):
            game.run()
        assert len(transport.sent) == 3
        assert game.state == LoopState.AWAIT_START


class TestClientTracing:
    def test_event_sequence(self, handler):
        """Client-side events only; the server traces to its own sink."""
        client_tracer = RecordingTracer()
        ClientGame(LoopbackTransport(handler), seed=5, tracer=client_tracer).run()
        names = client_tracer.names()

        assert names[0] == "GameStart"
        assert names[1] == "ClientMove"
        assert names[2] == "ServerMoveReceive"
        assert names[-1] == "GameComplete"
        assert names.count("GameComplete") == 1


class TestArguments:
    @pytest.mark.parametrize("seed", [-129, 128, 1000])
    def test_seed_must_fit_in_a_byte(self, loopback, seed):
        with pytest.raises(ValueError):
            ClientGame(loopback, seed=seed)

    def test_max_attempts_must_be_positive(self, loopback):
        with pytest.raises(ValueError):
            ClientGame(loopback, seed=1, max_attempts=0)

    def test_default_policy_restores_zero_nim_sum(self, handler):
        transport = LoopbackTransport(handler)
        game = ClientGame(transport, seed=5)
        board = (3, 4, 5)
        assert nim_sum(game.policy.select_move(board).board) == 0
