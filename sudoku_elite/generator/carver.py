"""Carve uniquely solvable puzzles out of full grids."""

from __future__ import annotations

import copy
import logging
import random
import time
from dataclasses import dataclass

from ..solver.backtracking import Coord, Grid, SudokuSolver
from .difficulty import Difficulty
from .grid import generate_full

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Puzzle:
    """A freshly carved puzzle together with its unique solution."""

    puzzle: Grid
    solution: Grid
    givens: frozenset[Coord]
    difficulty: Difficulty

    @property
    def given_count(self) -> int:
        return len(self.givens)


def carve(
    solution: Grid, difficulty: Difficulty, rng: random.Random | None = None
) -> tuple[Grid, Grid]:
    """
    Remove cells from a full grid while the remaining puzzle stays unique.

    Cells are tried once each in a random order. A removal is kept only when
    the puzzle still has exactly one completion; the loop stops as soon as
    ``81 - difficulty.min_givens`` cells are gone. Greedy removal can stall
    above the target, in which case the puzzle simply keeps more givens.

    Args:
        solution: Full, valid 9x9 grid (left untouched)
        difficulty: Tier whose minimum given count is the removal target
        rng: Random source; a fresh ``random.Random()`` when omitted

    Returns:
        Tuple of (puzzle, solution)
    """
    rng = rng or random.Random()
    start = time.perf_counter()

    puzzle = copy.deepcopy(solution)
    to_remove = 81 - difficulty.min_givens

    cells: list[Coord] = [(r, c) for r in range(9) for c in range(9)]
    rng.shuffle(cells)

    solver = SudokuSolver()
    removed = 0
    for row, col in cells:
        if removed >= to_remove:
            break
        value = puzzle[row][col]
        puzzle[row][col] = 0
        if solver.count_solutions(puzzle, max_count=2) == 1:
            removed += 1
        else:
            puzzle[row][col] = value

    givens = 81 - removed
    _LOGGER.debug(
        "Carved %s puzzle: givens=%d target=%d shortfall=%d in %.1f ms",
        difficulty.value,
        givens,
        difficulty.min_givens,
        to_remove - removed,
        (time.perf_counter() - start) * 1000.0,
    )
    return puzzle, copy.deepcopy(solution)


def create_puzzle(
    difficulty: Difficulty, rng: random.Random | None = None
) -> Puzzle:
    """Generate a full grid and carve a puzzle from it."""
    rng = rng or random.Random()
    solution = generate_full(rng)
    puzzle, solution = carve(solution, difficulty, rng)
    givens = frozenset(
        (r, c) for r in range(9) for c in range(9) if puzzle[r][c] != 0
    )
    return Puzzle(
        puzzle=puzzle, solution=solution, givens=givens, difficulty=difficulty
    )
