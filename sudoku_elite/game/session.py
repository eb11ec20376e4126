"""Play session: grid, notes, selection, history, hints and completion."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..generator.carver import Puzzle, create_puzzle
from ..generator.difficulty import Difficulty
from ..solver.backtracking import (
    Coord,
    Grid,
    count_solutions,
    has_conflict,
    is_complete,
    is_valid_placement,
    peers,
)
from .history import DEFAULT_HISTORY_LIMIT, History, HistoryEntry

_LOGGER = logging.getLogger(__name__)

ALL_CANDIDATES = frozenset(range(1, 10))


class SessionStatus(str, Enum):
    GENERATING = "generating"
    READY = "ready"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    SOLVED = "solved"


@dataclass(frozen=True)
class CompletionEvent:
    """Emitted once per session when the puzzle is solved."""

    difficulty: Difficulty
    elapsed_seconds: float
    solved_successfully: bool


CompletionListener = Callable[[CompletionEvent], None]
# Called with the session's difficulty each time the board fills up wrongly.
WrongFillListener = Callable[[Difficulty], None]


def _check_coord(coord: Coord) -> Coord:
    row, col = coord
    if not (0 <= row <= 8 and 0 <= col <= 8):
        raise ValueError(f"Cell out of range: {coord}")
    return row, col


def _check_digit(value: int) -> int:
    if not 1 <= value <= 9:
        raise ValueError(f"Digit must be in 1-9, got {value}")
    return value


def _check_grid(grid: Grid, name: str) -> Grid:
    if len(grid) != 9 or any(len(row) != 9 for row in grid):
        raise ValueError(f"{name} must be a 9x9 grid")
    if any(not 0 <= cell <= 9 for row in grid for cell in row):
        raise ValueError(f"{name} cells must be in 0-9")
    return [list(row) for row in grid]


class GameSession:
    """
    One player's Sudoku session.

    Player mistakes (writing a given, undoing past the start, moving after the
    puzzle is solved or while paused) are ignored rather than raised. Only
    malformed arguments, such as coordinates outside the board, raise
    ``ValueError``.

    Args:
        puzzle: Carved puzzle to play
        rng: Random source used for hints and later ``new_game`` calls
        history_limit: Maximum number of undo snapshots kept
        clock: Monotonic time source in seconds
    """

    def __init__(
        self,
        puzzle: Puzzle,
        *,
        rng: random.Random | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._rng = rng or random.Random()
        self._history_limit = history_limit
        self._clock = clock
        self._listeners: list[CompletionListener] = []
        self._wrong_fill_listeners: list[WrongFillListener] = []
        self._load(puzzle)

    @classmethod
    def create(
        cls, difficulty: Difficulty, *, rng: random.Random | None = None, **kwargs
    ) -> "GameSession":
        """Generate a new puzzle at difficulty and open a session on it."""
        rng = rng or random.Random()
        return cls(create_puzzle(difficulty, rng), rng=rng, **kwargs)

    @classmethod
    def from_grids(
        cls,
        puzzle: Grid,
        solution: Grid,
        difficulty: Difficulty = Difficulty.EASY,
        **kwargs,
    ) -> "GameSession":
        """Open a session on an existing puzzle; non-zero cells become givens."""
        puzzle = _check_grid(puzzle, "puzzle")
        solution = _check_grid(solution, "solution")
        givens = frozenset(
            (r, c) for r in range(9) for c in range(9) if puzzle[r][c] != 0
        )
        return cls(
            Puzzle(
                puzzle=puzzle,
                solution=solution,
                givens=givens,
                difficulty=difficulty,
            ),
            **kwargs,
        )

    def _load(self, puzzle: Puzzle) -> None:
        self.difficulty = puzzle.difficulty
        self._solution: Grid = [list(row) for row in puzzle.solution]
        self._grid: Grid = [list(row) for row in puzzle.puzzle]
        self._givens = frozenset(puzzle.givens)
        self._notes: dict[Coord, set[int]] = {}
        self.selected: Optional[Coord] = None
        self.note_mode = False
        self.moves = 0
        self._history = History(
            HistoryEntry.capture(self._grid, self._notes), limit=self._history_limit
        )
        self._elapsed = 0.0
        self._started_at: Optional[float] = self._clock()
        self._status_before_pause = SessionStatus.READY
        self._completion_emitted = False
        self.status = SessionStatus.READY

    def new_game(
        self,
        difficulty: Difficulty | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Discard the current game and history and start a fresh puzzle."""
        difficulty = difficulty or self.difficulty
        if rng is not None:
            self._rng = rng
        self.status = SessionStatus.GENERATING
        self.load(create_puzzle(difficulty, self._rng))

    def load(self, puzzle: Puzzle, rng: random.Random | None = None) -> None:
        """
        Replace the current game with an already generated puzzle.

        Notes, history, moves and the clock start over. Completion and
        wrong-fill listeners stay attached.
        """
        if rng is not None:
            self._rng = rng
        self._load(puzzle)
        _LOGGER.info(
            "New %s game with %d givens", puzzle.difficulty.value, puzzle.given_count
        )

    # -- state exposed to the presentation layer -----------------------------

    @property
    def grid(self) -> Grid:
        return [list(row) for row in self._grid]

    @property
    def givens(self) -> frozenset[Coord]:
        return self._givens

    @property
    def notes(self) -> dict[Coord, set[int]]:
        return {coord: set(digits) for coord, digits in self._notes.items()}

    @property
    def solved(self) -> bool:
        return self.status is SessionStatus.SOLVED

    @property
    def paused(self) -> bool:
        return self.status is SessionStatus.PAUSED

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo and not self.solved

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo and not self.solved

    @property
    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return self._elapsed
        return self._elapsed + (self._clock() - self._started_at)

    def value(self, coord: Coord) -> int:
        row, col = _check_coord(coord)
        return self._grid[row][col]

    def is_given(self, coord: Coord) -> bool:
        return _check_coord(coord) in self._givens

    def has_conflict(self, coord: Coord) -> bool:
        """Whether the digit at coord repeats in its row, column or box."""
        row, col = _check_coord(coord)
        return has_conflict(self._grid, row, col)

    def conflicts(self) -> set[Coord]:
        return {
            (r, c) for r in range(9) for c in range(9) if has_conflict(self._grid, r, c)
        }

    def is_solvable(self) -> bool:
        return count_solutions(self._grid, 1) >= 1

    def number_counts(self) -> list[int]:
        """How many times each digit 1-9 is on the board."""
        counts = [0] * 9
        for row in self._grid:
            for cell in row:
                if cell:
                    counts[cell - 1] += 1
        return counts

    def add_completion_listener(self, listener: CompletionListener) -> None:
        self._listeners.append(listener)

    def add_wrong_fill_listener(self, listener: WrongFillListener) -> None:
        """Be told when every cell is filled but the board is not the solution."""
        self._wrong_fill_listeners.append(listener)

    # -- player actions -------------------------------------------------------

    def _accepts_input(self) -> bool:
        return self.status in (SessionStatus.READY, SessionStatus.IN_PROGRESS)

    def select_cell(self, coord: Coord) -> None:
        coord = _check_coord(coord)
        if not self._accepts_input():
            return
        self.selected = coord

    def toggle_note_mode(self) -> bool:
        self.note_mode = not self.note_mode
        return self.note_mode

    def enter_digit(self, coord: Coord, value: int) -> None:
        """Write value at coord, or toggle it as a note while in note mode."""
        coord = _check_coord(coord)
        value = _check_digit(value)
        if not self._accepts_input() or coord in self._givens:
            return

        if self.note_mode:
            self._toggle_note(coord, value)
        else:
            self._place(coord, value)

    def clear_cell(self, coord: Coord) -> None:
        row, col = _check_coord(coord)
        if not self._accepts_input() or (row, col) in self._givens:
            return
        self._grid[row][col] = 0
        self._notes.pop((row, col), None)
        self.moves += 1
        self._commit()

    def undo(self) -> None:
        if not self._accepts_input():
            return
        entry = self._history.undo()
        if entry is not None:
            self._restore(entry)

    def redo(self) -> None:
        if not self._accepts_input():
            return
        entry = self._history.redo()
        if entry is not None:
            self._restore(entry)

    def hint(self) -> Optional[Coord]:
        """Fill one random empty cell with its solution digit and return it."""
        if not self._accepts_input():
            return None
        empty = [
            (r, c)
            for r in range(9)
            for c in range(9)
            if self._grid[r][c] == 0 and self._solution[r][c] != 0
        ]
        if not empty:
            return None
        coord = self._rng.choice(empty)
        self.selected = coord
        self._place(coord, self._solution[coord[0]][coord[1]])
        return coord

    def eliminate_candidates(self) -> None:
        """Reduce every empty cell's notes to the digits still legal there."""
        if not self._accepts_input():
            return
        notes: dict[Coord, set[int]] = {}
        for r in range(9):
            for c in range(9):
                if self._grid[r][c] != 0:
                    continue
                current = self._notes.get((r, c), ALL_CANDIDATES)
                legal = {n for n in current if is_valid_placement(self._grid, r, c, n)}
                if legal:
                    notes[(r, c)] = legal
        self._notes = notes
        self._commit()

    def pause(self) -> None:
        if not self._accepts_input():
            return
        self._stop_clock()
        self._status_before_pause = self.status
        self.status = SessionStatus.PAUSED

    def resume(self) -> None:
        if self.status is not SessionStatus.PAUSED:
            return
        self._started_at = self._clock()
        self.status = self._status_before_pause

    # -- internals ------------------------------------------------------------

    def _toggle_note(self, coord: Coord, value: int) -> None:
        row, col = coord
        if self._grid[row][col] != 0:
            return
        digits = self._notes.setdefault(coord, set())
        digits ^= {value}
        if not digits:
            del self._notes[coord]
        self._commit()

    def _place(self, coord: Coord, value: int) -> None:
        row, col = coord
        self._grid[row][col] = value
        self._notes.pop(coord, None)
        for peer in peers(row, col):
            digits = self._notes.get(peer)
            if digits and value in digits:
                digits.discard(value)
                if not digits:
                    del self._notes[peer]
        self.moves += 1
        self._commit()
        self._check_completion()

    def _commit(self) -> None:
        self._history.commit(HistoryEntry.capture(self._grid, self._notes))
        if self.status is SessionStatus.READY:
            self.status = SessionStatus.IN_PROGRESS

    def _restore(self, entry: HistoryEntry) -> None:
        self._grid = entry.grid_copy()
        self._notes = entry.notes_copy()

    def _stop_clock(self) -> None:
        if self._started_at is not None:
            self._elapsed += self._clock() - self._started_at
            self._started_at = None

    def _check_completion(self) -> None:
        if not is_complete(self._grid):
            return
        if self._grid != self._solution:
            # Full but wrong: stays open until the player clears cells.
            _LOGGER.debug("Grid is full but does not match the solution")
            for listener in self._wrong_fill_listeners:
                listener(self.difficulty)
            return

        self._stop_clock()
        self.status = SessionStatus.SOLVED
        _LOGGER.info(
            "Solved %s puzzle in %.1fs with %d moves",
            self.difficulty.value,
            self._elapsed,
            self.moves,
        )
        if self._completion_emitted:
            return
        self._completion_emitted = True
        event = CompletionEvent(
            difficulty=self.difficulty,
            elapsed_seconds=self._elapsed,
            solved_successfully=True,
        )
        for listener in self._listeners:
            listener(event)
