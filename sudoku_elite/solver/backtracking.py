"""Sudoku placement rules and backtracking solution counting."""

from typing import Optional, List, Tuple
import copy


Grid = List[List[int]]
Coord = Tuple[int, int]

ALL_DIGITS = 0b1111111110  # bits 1..9


def box_index(row: int, col: int) -> int:
    """Index (0-8) of the 3x3 box containing (row, col)."""
    return (row // 3) * 3 + col // 3


def peers(row: int, col: int) -> List[Coord]:
    """All cells sharing a row, column or box with (row, col), excluding itself."""
    cells = set()
    for i in range(9):
        cells.add((row, i))
        cells.add((i, col))
    box_row = (row // 3) * 3
    box_col = (col // 3) * 3
    for r in range(box_row, box_row + 3):
        for c in range(box_col, box_col + 3):
            cells.add((r, c))
    cells.discard((row, col))
    return sorted(cells)


_PEERS = [[peers(r, c) for c in range(9)] for r in range(9)]


def is_valid_placement(grid: Grid, row: int, col: int, value: int) -> bool:
    """
    Check if placing value at (row, col) breaks no row, column or box rule.

    The cell itself is not inspected, so the check also answers whether a
    digit already sitting at (row, col) clashes with another cell.

    Args:
        grid: Current grid state
        row: Row index
        col: Column index
        value: Digit to place (1-9)

    Returns:
        True if no other cell in the same unit holds value, False otherwise
    """
    # Check row and column
    for i in range(9):
        if i != col and grid[row][i] == value:
            return False
        if i != row and grid[i][col] == value:
            return False

    # Check 3x3 box
    box_row = (row // 3) * 3
    box_col = (col // 3) * 3

    for r in range(box_row, box_row + 3):
        for c in range(box_col, box_col + 3):
            if (r != row or c != col) and grid[r][c] == value:
                return False

    return True


def has_conflict(grid: Grid, row: int, col: int) -> bool:
    """True when the digit at (row, col) is repeated in its row, column or box."""
    value = grid[row][col]
    if value == 0:
        return False
    return not is_valid_placement(grid, row, col, value)


def is_complete(grid: Grid) -> bool:
    """True when no cell is empty."""
    return all(cell != 0 for row in grid for cell in row)


def is_solved_grid(grid: Grid) -> bool:
    """True when every row, column and box is a permutation of 1-9."""
    full = set(range(1, 10))
    for i in range(9):
        if set(grid[i]) != full:
            return False
        if {grid[r][i] for r in range(9)} != full:
            return False
        box_row = (i // 3) * 3
        box_col = (i % 3) * 3
        box = {
            grid[r][c]
            for r in range(box_row, box_row + 3)
            for c in range(box_col, box_col + 3)
        }
        if box != full:
            return False
    return True


class _Masks:
    """Used-digit bitmasks per row, column and box.

    Incremental form of ``is_valid_placement``: digit d is legal at (r, c)
    exactly when bit d is clear in all three masks.
    """

    __slots__ = ("rows", "cols", "boxes")

    def __init__(self, grid: Grid):
        self.rows = [0] * 9
        self.cols = [0] * 9
        self.boxes = [0] * 9
        for r in range(9):
            for c in range(9):
                if grid[r][c]:
                    self.set(r, c, grid[r][c])

    def free(self, row: int, col: int) -> int:
        used = self.rows[row] | self.cols[col] | self.boxes[box_index(row, col)]
        return ALL_DIGITS & ~used

    def set(self, row: int, col: int, value: int) -> None:
        bit = 1 << value
        self.rows[row] |= bit
        self.cols[col] |= bit
        self.boxes[box_index(row, col)] |= bit

    def clear(self, row: int, col: int, value: int) -> None:
        bit = ~(1 << value)
        self.rows[row] &= bit
        self.cols[col] &= bit
        self.boxes[box_index(row, col)] &= bit


def _peers_still_open(grid: Grid, masks: _Masks, row: int, col: int) -> bool:
    """False if placing at (row, col) left some empty peer without a legal digit."""
    for r, c in _PEERS[row][col]:
        if grid[r][c] == 0 and not masks.free(r, c):
            return False
    return True


def _fewest_candidates_first(masks: _Masks, cells: List[Coord], start: int) -> Coord:
    """
    Swap the cell in cells[start:] with the fewest legal digits into cells[start].

    Ties keep list order. Only the suffix is reordered, so cells[start:] still
    holds exactly the unfilled cells afterwards.
    """
    best = start
    best_count = 10
    for i in range(start, len(cells)):
        r, c = cells[i]
        count = bin(masks.free(r, c)).count("1")
        if count < best_count:
            best, best_count = i, count
            if count <= 1:
                break
    cells[start], cells[best] = cells[best], cells[start]
    return cells[start]


class SudokuSolver:
    """Solves Sudoku puzzles using backtracking."""

    def __init__(self):
        self.solutions_count = 0

    def solve(self, grid: Grid) -> Optional[Grid]:
        """
        Solve a Sudoku puzzle.

        Args:
            grid: 9x9 list of lists with 0 for empty cells

        Returns:
            Solved 9x9 grid if solution exists, None otherwise
        """
        self.solutions_count = 0
        grid_copy = copy.deepcopy(grid)
        if not self._is_consistent_grid(grid_copy):
            return None
        masks = _Masks(grid_copy)
        empties = self._collect_empty_cells(grid_copy)
        if self._solve_recursive(grid_copy, masks, empties, 0):
            return grid_copy
        return None

    def _solve_recursive(
        self, grid: Grid, masks: _Masks, empties: List[Coord], depth: int
    ) -> bool:
        """Recursively solve the puzzle using backtracking."""
        if depth == len(empties):
            return True

        row, col = self._next_cell(masks, empties, depth)
        free = masks.free(row, col)

        for num in range(1, 10):
            if free & (1 << num):
                grid[row][col] = num
                masks.set(row, col, num)

                if _peers_still_open(grid, masks, row, col):
                    if self._solve_recursive(grid, masks, empties, depth + 1):
                        return True

                masks.clear(row, col, num)
                grid[row][col] = 0

        return False

    def count_solutions(self, grid: Grid, max_count: int = 2) -> int:
        """
        Count number of solutions (up to max_count).

        The caller's grid is never modified. A grid whose filled cells already
        break a rule has no solutions.

        Args:
            grid: 9x9 grid to solve
            max_count: Stop counting after finding this many solutions

        Returns:
            Number of solutions found, capped at max_count
        """
        if max_count < 1:
            raise ValueError(f"max_count must be at least 1, got {max_count}")

        self.solutions_count = 0
        grid_copy = copy.deepcopy(grid)
        if not self._is_consistent_grid(grid_copy):
            return 0
        masks = _Masks(grid_copy)
        empties = self._collect_empty_cells(grid_copy)
        self._count_solutions_recursive(grid_copy, masks, empties, 0, max_count)
        return self.solutions_count

    def _count_solutions_recursive(
        self,
        grid: Grid,
        masks: _Masks,
        empties: List[Coord],
        depth: int,
        max_count: int,
    ) -> bool:
        """Recursively count solutions; returns True once max_count is reached."""
        if depth == len(empties):
            self.solutions_count += 1
            return self.solutions_count >= max_count

        row, col = self._next_cell(masks, empties, depth)
        free = masks.free(row, col)

        for num in range(1, 10):
            if free & (1 << num):
                grid[row][col] = num
                masks.set(row, col, num)
                stop = False
                if _peers_still_open(grid, masks, row, col):
                    stop = self._count_solutions_recursive(
                        grid, masks, empties, depth + 1, max_count
                    )
                masks.clear(row, col, num)
                grid[row][col] = 0
                if stop:
                    return True

        return False

    def _collect_empty_cells(self, grid: Grid) -> List[Coord]:
        """Empty cells in row-major order."""
        return [(r, c) for r in range(9) for c in range(9) if grid[r][c] == 0]

    def _next_cell(self, masks: _Masks, empties: List[Coord], depth: int) -> Coord:
        """
        Pick the unfilled cell with the fewest legal digits and move it to depth.

        Ties keep collection order, so the visiting order is fully determined
        by the grid contents.
        """
        return _fewest_candidates_first(masks, empties, depth)

    def _is_consistent_grid(self, grid: Grid) -> bool:
        """Check existing non-zero givens are mutually consistent."""
        for r in range(9):
            for c in range(9):
                if has_conflict(grid, r, c):
                    return False
        return True


def solve(grid: Grid) -> Optional[Grid]:
    """Convenience function to solve a Sudoku grid."""
    solver = SudokuSolver()
    return solver.solve(grid)


def count_solutions(grid: Grid, limit: int) -> int:
    """
    Count completions of grid, stopping as soon as limit are found.

    ``count_solutions(g, 1) >= 1`` means g is solvable and
    ``count_solutions(g, 2) == 1`` means its solution is unique.
    """
    return SudokuSolver().count_solutions(grid, max_count=limit)


def is_valid_grid(grid: Grid) -> bool:
    """
    Validate that a grid has correct structure and initial values.

    Args:
        grid: 9x9 grid to validate

    Returns:
        True if grid is valid, False otherwise
    """
    if not isinstance(grid, list) or len(grid) != 9:
        return False

    for row in grid:
        if not isinstance(row, list) or len(row) != 9:
            return False
        for cell in row:
            if not isinstance(cell, int) or cell < 0 or cell > 9:
                return False

    # Check no duplicate values in rows, cols, boxes
    solver = SudokuSolver()
    return solver._is_consistent_grid(grid)
