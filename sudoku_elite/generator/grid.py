"""Random full-grid generation by randomized backtracking."""

from __future__ import annotations

import logging
import random
import time

from ..solver.backtracking import (
    Coord,
    Grid,
    _fewest_candidates_first,
    _Masks,
    _peers_still_open,
)

_LOGGER = logging.getLogger(__name__)

DIGITS = (1, 2, 3, 4, 5, 6, 7, 8, 9)


def generate_full(rng: random.Random | None = None) -> Grid:
    """
    Build a random, completely filled and rule-valid 9x9 grid.

    The 81 cells are shuffled once. At every depth the unfilled cell with the
    fewest legal digits is filled next, the shuffled order breaking ties, and
    each visit tries a freshly shuffled permutation of 1-9. An empty board is
    always completable, so the search never exhausts at the top level.

    Args:
        rng: Random source; a fresh ``random.Random()`` when omitted

    Returns:
        Full 9x9 grid
    """
    rng = rng or random.Random()
    start = time.perf_counter()

    grid = [[0] * 9 for _ in range(9)]
    order: list[Coord] = [(r, c) for r in range(9) for c in range(9)]
    rng.shuffle(order)
    masks = _Masks(grid)

    if not _fill(grid, masks, order, 0, rng):
        raise RuntimeError("Failed to fill an empty grid")

    _LOGGER.debug(
        "Generated full grid in %.1f ms", (time.perf_counter() - start) * 1000.0
    )
    return grid


def _fill(
    grid: Grid, masks: _Masks, order: list[Coord], idx: int, rng: random.Random
) -> bool:
    if idx >= len(order):
        return True

    row, col = _fewest_candidates_first(masks, order, idx)
    nums = list(DIGITS)
    rng.shuffle(nums)
    free = masks.free(row, col)

    for num in nums:
        if not free & (1 << num):
            continue
        grid[row][col] = num
        masks.set(row, col, num)
        # Skip the subtree when a later cell already has no legal digit.
        if _peers_still_open(grid, masks, row, col):
            if _fill(grid, masks, order, idx + 1, rng):
                return True
        masks.clear(row, col, num)
        grid[row][col] = 0

    return False
