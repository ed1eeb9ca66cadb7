"""
Puzzle rating updates.

A standard Elo update where the puzzle plays the role of the opponent. The
function is pure: reading the solver's previous rating and storing the new one
is the caller's job.
"""

from __future__ import annotations

import math
from typing import NamedTuple

DEFAULT_K_FACTOR = 32
DEFAULT_RATING_FLOOR = 100


class RatingChange(NamedTuple):
    """Result of a rating update."""

    new_rating: int
    delta: int


def expected_score(current_rating: int, puzzle_rating: int) -> float:
    """Probability that a solver at current_rating solves a puzzle at puzzle_rating."""
    return 1 / (1 + math.pow(10, (puzzle_rating - current_rating) / 400))


def _round_half_up(value: float) -> int:
    # Halves round towards +infinity, not to the nearest even integer
    return math.floor(value + 0.5)


def update(
    current_rating: int,
    puzzle_rating: int,
    solved: bool,
    k_factor: int = DEFAULT_K_FACTOR,
    floor: int = DEFAULT_RATING_FLOOR,
) -> RatingChange:
    """
    Compute a solver's new rating after one puzzle attempt.

    Args:
        current_rating: Solver rating before the attempt
        puzzle_rating: Rating of the attempted puzzle
        solved: Whether the solver solved it
        k_factor: Maximum rating change per attempt
        floor: Lowest rating a solver can drop to

    Returns:
        RatingChange with the new rating and the change actually applied
    """
    actual = 1.0 if solved else 0.0
    delta = _round_half_up(k_factor * (actual - expected_score(current_rating, puzzle_rating)))
    new_rating = max(floor, current_rating + delta)
    return RatingChange(new_rating=new_rating, delta=new_rating - current_rating)
