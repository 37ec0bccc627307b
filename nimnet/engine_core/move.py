"""
Move - The record exchanged between client and server.

A move carries three fields:
- board: the board AFTER the move (None for the sentinels below)
- pile: index of the pile that changed
- amount: how many tokens were removed from that pile

Two sentinel shapes exist:
- GameStart: board=None, pile=-1, amount=<seed>. The server answers with a
  GameStart echo that carries the generated board and the same pile/seed.
- Resignation: board=None, pile=-2, amount=-2. Produced when a strategy is
  asked to move from an empty board.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

Board = Tuple[int, ...]

GAME_START_ROW = -1
RESIGN_ROW = -2
RESIGN_COUNT = -2

SEED_MIN = -128
SEED_MAX = 127


class Player(str, Enum):
    """The two sides of a game."""
    CLIENT = "client"
    SERVER = "server"


@dataclass(frozen=True)
class Move:
    """A single protocol message, in either direction."""
    board: Optional[Board]
    pile: int
    amount: int

    def __post_init__(self):
        if self.board is not None and not isinstance(self.board, tuple):
            object.__setattr__(self, "board", tuple(self.board))

    @classmethod
    def game_start(cls, seed: int) -> Move:
        """Factory for the GameStart sentinel sent by a client."""
        return cls(board=None, pile=GAME_START_ROW, amount=seed)

    @classmethod
    def game_start_reply(cls, board: Board, seed: int) -> Move:
        """Factory for the server's answer to a GameStart."""
        return cls(board=tuple(board), pile=GAME_START_ROW, amount=seed)

    @classmethod
    def resign(cls) -> Move:
        """Factory for the resignation sentinel."""
        return cls(board=None, pile=RESIGN_ROW, amount=RESIGN_COUNT)

    @property
    def is_game_start(self) -> bool:
        return self.board is None and self.pile == GAME_START_ROW

    @property
    def is_game_start_reply(self) -> bool:
        return self.board is not None and self.pile == GAME_START_ROW

    @property
    def is_resignation(self) -> bool:
        return (
            self.board is None
            and self.pile == RESIGN_ROW
            and self.amount == RESIGN_COUNT
        )

    def __str__(self) -> str:
        if self.is_game_start:
            return f"GameStart(seed={self.amount})"
        if self.is_resignation:
            return "Resign"
        return f"Move(board={list(self.board or ())}, pile={self.pile}, amount={self.amount})"
