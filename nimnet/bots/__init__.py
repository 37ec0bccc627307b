"""
Bots module - Move selection for either side of the game.

Provides:
- MovePolicy: Interface for move selection
- NaivePolicy: Take one token from the first nonempty pile
- OptimalPolicy: Restore the nim-sum to zero
- Difficulty: Per-session opponent strength, derived from the start seed
"""

from .policy import (
    MovePolicy,
    NaivePolicy,
    OptimalPolicy,
    Difficulty,
    POLICIES,
    policy_for_difficulty,
    play,
)

__all__ = [
    "MovePolicy",
    "NaivePolicy",
    "OptimalPolicy",
    "Difficulty",
    "POLICIES",
    "policy_for_difficulty",
    "play",
]
