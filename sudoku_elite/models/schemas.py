"""Pydantic models for API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..generator.difficulty import Difficulty


class SudokuGrid(BaseModel):
    """A Sudoku grid."""

    cells: list[list[int]] = Field(description="9x9 grid (0 for empty cells)")

    class Config:
        json_schema_extra = {
            "example": [
                [5, 3, 0, 0, 7, 0, 0, 0, 0],
                [6, 0, 0, 1, 9, 5, 0, 0, 0],
                [0, 9, 8, 0, 0, 0, 0, 6, 0],
                [8, 0, 0, 0, 6, 0, 0, 0, 3],
                [4, 0, 0, 8, 0, 3, 0, 0, 1],
                [7, 0, 0, 0, 2, 0, 0, 0, 6],
                [0, 6, 0, 0, 0, 0, 2, 8, 0],
                [0, 0, 0, 4, 1, 9, 0, 0, 5],
                [0, 0, 0, 0, 8, 0, 0, 7, 9],
            ]
        }


class SolveRequest(BaseModel):
    """Request to solve a Sudoku grid."""

    grid: SudokuGrid = Field(description="The Sudoku puzzle to solve")


class SolveResponse(BaseModel):
    """Response from solving a Sudoku."""

    success: bool = Field(description="Whether the puzzle was solved")
    original: list[list[int]] = Field(description="Original grid")
    solved: list[list[int]] | None = Field(description="Solved grid (if successful)")
    message: str = Field(description="Status message")


class NewGameRequest(BaseModel):
    """Request to start a game."""

    difficulty: Difficulty | None = Field(
        default=None, description="Difficulty tier (easy, or the current one on restart)"
    )
    seed: int | None = Field(
        default=None, description="Random seed for a reproducible puzzle"
    )


class CellRequest(BaseModel):
    """A cell addressed by row and column."""

    row: int = Field(ge=0, le=8, description="Row index (0-8)")
    col: int = Field(ge=0, le=8, description="Column index (0-8)")


class DigitRequest(CellRequest):
    """A digit to write (or toggle as a note) at a cell."""

    value: int = Field(ge=1, le=9, description="Digit (1-9)")


class CellNotes(BaseModel):
    """Candidate digits noted for an empty cell."""

    row: int
    col: int
    digits: list[int]


class GameStateResponse(BaseModel):
    """Everything the board view needs to render a session."""

    game_id: str = Field(description="Session identifier")
    difficulty: Difficulty
    status: str = Field(description="Session status")
    grid: list[list[int]] = Field(description="Play grid (0 for empty cells)")
    givens: list[list[bool]] = Field(description="Pre-filled cell flags")
    conflicts: list[list[bool]] = Field(description="Cells clashing with a peer")
    notes: list[CellNotes] = Field(default_factory=list)
    selected: list[int] | None = Field(default=None, description="[row, col]")
    note_mode: bool
    paused: bool
    solved: bool
    solvable: bool = Field(description="Whether the play grid can still be completed")
    can_undo: bool
    can_redo: bool
    moves: int
    elapsed_seconds: float
    number_counts: list[int] = Field(description="Occurrences of digits 1-9")
    hint: list[int] | None = Field(
        default=None, description="Cell filled by the last hint request"
    )


class DifficultyStatsResponse(BaseModel):
    """Completion stats for one difficulty."""

    completed: int
    average_time: float
    best_time: float | None


class StatsResponse(BaseModel):
    """Persisted completion statistics."""

    games_completed: int
    streak: int
    by_difficulty: dict[Difficulty, DifficultyStatsResponse]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status")
    active_games: int = Field(description="Sessions held in memory")
    stats_persistent: bool = Field(description="Whether stats are written to disk")
