"""Solver module exports."""

from .backtracking import (
    SudokuSolver,
    count_solutions,
    has_conflict,
    is_valid_grid,
    is_valid_placement,
    solve,
)

__all__ = [
    "SudokuSolver",
    "count_solutions",
    "has_conflict",
    "is_valid_grid",
    "is_valid_placement",
    "solve",
]
