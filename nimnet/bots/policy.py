"""
Move Policy - Interface for move selection.

A MovePolicy takes a board and returns the move to make from it. Policies
are pure: they never touch session state, the caller applies the result.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from enum import IntEnum

from ..engine_core.board import is_empty, nim_sum, take
from ..engine_core.move import Board, Move
from ..errors import StrategyError


class Difficulty(IntEnum):
    """Server opponent strength, chosen once per session."""
    NAIVE = 0
    OPTIMAL = 1

    @classmethod
    def from_seed(cls, seed: int) -> Difficulty:
        """The low bit of the start seed picks the difficulty."""
        return cls(seed & 1)


class MovePolicy(ABC):
    """
    Abstract base class for move policies.

    Implementations must only be called on a board with at least one
    nonempty pile.
    """

    @abstractmethod
    def select_move(self, board: Board) -> Move:
        """
        Select the next move.

        Args:
            board: Board to move from (not empty)

        Returns:
            Move carrying the resulting board, pile index and amount
        """

    def get_name(self) -> str:
        """Get the policy's name/identifier."""
        return self.__class__.__name__


class NaivePolicy(MovePolicy):
    """Take exactly one token from the first pile that has any."""

    def select_move(self, board: Board) -> Move:
        for index, count in enumerate(board):
            if count > 0:
                return Move(board=take(board, index, 1), pile=index, amount=1)
        raise StrategyError(f"no move to make on empty board {list(board)}")


class OptimalPolicy(MovePolicy):
    """
    Winning nim strategy: leave the opponent a zero nim-sum.

    From a zero nim-sum position every move loses against correct play,
    so the fallback policy (naive by default) is used there.
    """

    def __init__(self, fallback: MovePolicy | None = None):
        self.fallback = fallback or NaivePolicy()

    def select_move(self, board: Board) -> Move:
        total = nim_sum(board)
        if total == 0:
            return self.fallback.select_move(board)

        for index, count in enumerate(board):
            target = count ^ total
            if target <= count:
                return Move(
                    board=take(board, index, count - target),
                    pile=index,
                    amount=count - target,
                )

        # A nonzero nim-sum always has a pile carrying its highest bit.
        raise StrategyError(f"no pile reduces nim-sum {total} on {list(board)}")


POLICIES: dict[str, type[MovePolicy]] = {
    "naive": NaivePolicy,
    "optimal": OptimalPolicy,
}


def policy_for_difficulty(difficulty: Difficulty) -> MovePolicy:
    """Build the server-side policy for a session difficulty."""
    if difficulty == Difficulty.OPTIMAL:
        return OptimalPolicy()
    return NaivePolicy()


def play(board: Board, policy: MovePolicy) -> Move:
    """
    Compute the reply to a board.

    An empty board yields the resignation sentinel instead of an error.
    """
    if is_empty(board):
        return Move.resign()
    return policy.select_move(board)
