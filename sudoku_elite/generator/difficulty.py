"""Difficulty tiers and their target given-cell ranges."""

from __future__ import annotations

from enum import Enum


class Difficulty(str, Enum):
    """Puzzle difficulty, rated only by how many cells are pre-filled."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"

    @property
    def given_range(self) -> tuple[int, int]:
        """Inclusive (min, max) number of given cells."""
        return GIVEN_RANGES[self]

    @property
    def min_givens(self) -> int:
        return GIVEN_RANGES[self][0]

    @property
    def max_givens(self) -> int:
        return GIVEN_RANGES[self][1]


GIVEN_RANGES: dict[Difficulty, tuple[int, int]] = {
    Difficulty.EASY: (40, 45),
    Difficulty.MEDIUM: (30, 39),
    Difficulty.HARD: (22, 29),
    Difficulty.EXPERT: (17, 21),
}
