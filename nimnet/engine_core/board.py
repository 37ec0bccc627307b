"""
Board - The array-of-piles game state and the pure functions over it.

A board is a tuple of non-negative pile counts. Its length is fixed for the
whole game and counts only ever decrease.
"""

from __future__ import annotations
from functools import reduce
from operator import xor
from typing import Iterable
import random

from .move import Board, Move

MIN_PILES = 3
MAX_PILES = 16
MIN_PILE_SIZE = 1
MAX_PILE_SIZE = 10


def is_empty(board: Iterable[int]) -> bool:
    """True iff every pile is zero (the terminal board)."""
    return all(count == 0 for count in board)


def nim_sum(board: Iterable[int]) -> int:
    """Bitwise XOR of all pile counts."""
    return reduce(xor, board, 0)


def take(board: Board, pile: int, amount: int) -> Board:
    """Return a new board with `amount` removed from `pile`."""
    piles = list(board)
    piles[pile] -= amount
    return tuple(piles)


def generate_board(seed: int) -> Board:
    """
    Generate the starting board for a seed.

    The same seed always yields the same board. The generator is seeded
    with the seed's byte value (`seed & 0xFF`) because `random.Random`
    seeds from abs(seed), which would give 5 and -5 the same board.

    The last pile is nudged by one when needed so the nim-sum is nonzero,
    which leaves the first mover (the client) with a winning line.
    """
    rng = random.Random(seed & 0xFF)
    num_piles = rng.randint(MIN_PILES, MAX_PILES)
    piles = [rng.randint(MIN_PILE_SIZE, MAX_PILE_SIZE) for _ in range(num_piles)]

    if nim_sum(piles) == 0:
        if piles[-1] < MAX_PILE_SIZE:
            piles[-1] += 1
        else:
            piles[-1] -= 1

    return tuple(piles)


def validate_move(proposed: Move, previous: Move) -> bool:
    """
    Check that `proposed` is a legal successor of `previous`.

    Legal means: both carry a board of the same length, the declared pile
    is in range, the amount is positive and no larger than that pile was,
    the declared pile shrank by exactly the amount, and no other pile
    changed. Used by the server against its last reply and by the client
    against the move it just sent.
    """
    before = previous.board
    after = proposed.board
    if before is None or after is None:
        return False
    if len(before) != len(after):
        return False

    pile = proposed.pile
    if pile < 0 or pile >= len(after):
        return False

    amount = proposed.amount
    if amount <= 0 or amount > before[pile]:
        return False

    for index, (old, new) in enumerate(zip(before, after)):
        expected = old - amount if index == pile else old
        if new != expected:
            return False

    return True
