"""
Engine Core - Board model and the move record.

Everything here is pure: boards are tuples, moves are frozen dataclasses,
and no function mutates its input.
"""

from .move import Move, Player, Board, GAME_START_ROW, RESIGN_ROW
from .board import (
    is_empty,
    nim_sum,
    take,
    generate_board,
    validate_move,
)

__all__ = [
    "Move",
    "Player",
    "Board",
    "GAME_START_ROW",
    "RESIGN_ROW",
    "is_empty",
    "nim_sum",
    "take",
    "generate_board",
    "validate_move",
]
