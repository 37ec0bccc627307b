"""
Wire Codec - Pydantic model for the datagram payload.

Payloads are compact JSON objects with three fields:

    {"game_state": [3, 0, 7] | null, "move_row": -1, "move_count": 5}

- `null` marks an absent board, `[]` a present-but-empty one
- move_row and move_count round-trip signed 8-bit values exactly
- Field order is fixed by the model, so equal moves encode to equal bytes

Anything that does not validate is a DecodeError. Decode errors are never
reported to the peer; the datagram is just dropped.
"""

from __future__ import annotations
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..engine_core.move import Move, SEED_MIN, SEED_MAX
from ..errors import DecodeError

PileCount = Annotated[int, Field(ge=0, le=255)]
SmallInt = Annotated[int, Field(ge=SEED_MIN, le=SEED_MAX)]


class StateMoveMessage(BaseModel):
    """A move as it travels on the wire."""
    game_state: Optional[list[PileCount]] = Field(
        description="Board after the move, null for the sentinels"
    )
    move_row: SmallInt = Field(description="Pile index, -1 for start, -2 for resignation")
    move_count: SmallInt = Field(description="Amount removed, or the seed when move_row is -1")

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    @classmethod
    def from_move(cls, move: Move) -> StateMoveMessage:
        return cls(
            game_state=list(move.board) if move.board is not None else None,
            move_row=move.pile,
            move_count=move.amount,
        )

    def to_move(self) -> Move:
        return Move(
            board=tuple(self.game_state) if self.game_state is not None else None,
            pile=self.move_row,
            amount=self.move_count,
        )


def encode(move: Move) -> bytes:
    """Encode a move for the wire."""
    return StateMoveMessage.from_move(move).model_dump_json().encode("utf-8")


def decode(data: bytes) -> Move:
    """
    Decode a datagram payload.

    Raises:
        DecodeError: if the payload is not a well-formed move
    """
    try:
        message = StateMoveMessage.model_validate_json(data)
    except ValidationError as e:
        raise DecodeError(f"malformed move ({e.error_count()} errors)") from e
    return message.to_move()
