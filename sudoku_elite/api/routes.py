"""API routes for the Sudoku game service."""

from __future__ import annotations

import logging
import os
import random
import uuid
from collections import OrderedDict
from typing import Callable, TypeVar

from fastapi import APIRouter, HTTPException
from starlette.concurrency import run_in_threadpool

from ..game.session import CompletionEvent, GameSession
from ..generator.carver import create_puzzle
from ..generator.difficulty import Difficulty
from ..models.schemas import (
    CellNotes,
    CellRequest,
    DifficultyStatsResponse,
    DigitRequest,
    GameStateResponse,
    HealthResponse,
    NewGameRequest,
    SolveRequest,
    SolveResponse,
    StatsResponse,
)
from ..solver.backtracking import SudokuSolver, is_valid_grid
from ..stats.store import StatsStore

router = APIRouter()
_SESSIONS: OrderedDict[str, GameSession] = OrderedDict()
_STATS_STORE: StatsStore | None = None
_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T", int, float)


def _env(name: str, default: _T) -> _T:
    """Read an environment variable, converting to the same type as *default*."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return type(default)(raw)
    except (TypeError, ValueError):
        _LOGGER.warning("Ignoring invalid %s=%r, using %r", name, raw, default)
        return default


def _stats_path() -> str | None:
    path = os.getenv("SUDOKU_STATS_PATH", "data/stats.json").strip()
    return path or None


def _get_stats_store() -> tuple[StatsStore | None, str | None]:
    global _STATS_STORE

    if _STATS_STORE is not None:
        return _STATS_STORE, None

    path = _stats_path()
    try:
        store = StatsStore(path)
        if store.path is not None:
            store.path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return None, f"stats path {path!r} is not usable: {e}"

    _STATS_STORE = store
    return _STATS_STORE, None


def _record_completion(event: CompletionEvent) -> None:
    store, error = _get_stats_store()
    if store is None:
        _LOGGER.error("Dropping completion event: %s", error)
        return
    if store.record(event):
        _LOGGER.info(
            "New best time for %s: %.1fs",
            event.difficulty.value,
            event.elapsed_seconds,
        )


def _reset_streak(difficulty: Difficulty) -> None:
    store, error = _get_stats_store()
    if store is None:
        _LOGGER.error("Cannot reset streak: %s", error)
        return
    _LOGGER.info("Wrong %s board filled in, resetting streak", difficulty.value)
    store.reset_streak()


def _register(session: GameSession) -> str:
    game_id = uuid.uuid4().hex
    session.add_completion_listener(_record_completion)
    session.add_wrong_fill_listener(_reset_streak)
    _SESSIONS[game_id] = session

    max_sessions = max(1, _env("SUDOKU_MAX_SESSIONS", 64))
    while len(_SESSIONS) > max_sessions:
        evicted, _ = _SESSIONS.popitem(last=False)
        _LOGGER.info("Evicted idle game %s", evicted)
    return game_id


def _get_session(game_id: str) -> GameSession:
    session = _SESSIONS.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Game {game_id} not found")
    _SESSIONS.move_to_end(game_id)
    return session


def _state(
    game_id: str, session: GameSession, hint: tuple[int, int] | None = None
) -> GameStateResponse:
    """Snapshot a session for the board view."""
    givens = session.givens
    conflicts = session.conflicts()
    return GameStateResponse(
        game_id=game_id,
        difficulty=session.difficulty,
        status=session.status.value,
        grid=session.grid,
        givens=[[(r, c) in givens for c in range(9)] for r in range(9)],
        conflicts=[[(r, c) in conflicts for c in range(9)] for r in range(9)],
        notes=[
            CellNotes(row=r, col=c, digits=sorted(digits))
            for (r, c), digits in sorted(session.notes.items())
        ],
        selected=list(session.selected) if session.selected else None,
        note_mode=session.note_mode,
        paused=session.paused,
        solved=session.solved,
        solvable=session.is_solvable(),
        can_undo=session.can_undo,
        can_redo=session.can_redo,
        moves=session.moves,
        elapsed_seconds=round(session.elapsed_seconds, 3),
        number_counts=session.number_counts(),
        hint=list(hint) if hint else None,
    )


def _apply(game_id: str, action: Callable[[GameSession], object]) -> GameStateResponse:
    session = _get_session(game_id)
    action(session)
    return _state(game_id, session)


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    store, _ = _get_stats_store()

    return HealthResponse(
        status="healthy",
        active_games=len(_SESSIONS),
        stats_persistent=store is not None and store.path is not None,
    )


@router.post("/api/v1/sudoku:solve", response_model=SolveResponse, tags=["Sudoku"])
async def solve_sudoku(request: SolveRequest):
    """
    Solve a Sudoku puzzle from a JSON grid.

    Expected JSON format:
    {
        "grid": {
            "cells": [[row1], [row2], ...]
        }
    }
    Where each row is a list of 9 integers (0 for empty).
    """
    try:
        grid = request.grid.cells

        # Validate grid format
        if not is_valid_grid(grid):
            return SolveResponse(
                success=False,
                original=grid,
                solved=None,
                message="Invalid Sudoku grid format",
            )

        solver = SudokuSolver()
        solution_count = await run_in_threadpool(solver.count_solutions, grid, 2)
        if solution_count == 0:
            return SolveResponse(
                success=False,
                original=grid,
                solved=None,
                message="Puzzle has no solution",
            )
        if solution_count > 1:
            return SolveResponse(
                success=False,
                original=grid,
                solved=None,
                message="Puzzle has multiple solutions",
            )

        solved = await run_in_threadpool(solver.solve, grid)
        return SolveResponse(
            success=True,
            original=grid,
            solved=solved,
            message="Puzzle solved successfully",
        )

    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/v1/games", response_model=GameStateResponse, tags=["Games"])
async def create_game(request: NewGameRequest):
    """Generate a puzzle and open a new game session."""
    difficulty = request.difficulty or Difficulty.EASY
    rng = random.Random(request.seed)
    session = await run_in_threadpool(
        GameSession.create,
        difficulty,
        rng=rng,
        history_limit=max(1, _env("SUDOKU_HISTORY_LIMIT", 50)),
    )
    game_id = _register(session)
    _LOGGER.info(
        "Created %s game %s with %d givens",
        difficulty.value,
        game_id,
        len(session.givens),
    )
    return _state(game_id, session)


@router.get("/api/v1/games/{game_id}", response_model=GameStateResponse, tags=["Games"])
async def get_game(game_id: str):
    """Current state of a game."""
    return _state(game_id, _get_session(game_id))


@router.delete("/api/v1/games/{game_id}", status_code=204, tags=["Games"])
async def delete_game(game_id: str):
    """Abandon a game and free its session."""
    _get_session(game_id)
    del _SESSIONS[game_id]


@router.post(
    "/api/v1/games/{game_id}:newGame", response_model=GameStateResponse, tags=["Games"]
)
async def restart_game(game_id: str, request: NewGameRequest):
    """Replace the game's puzzle with a new one, discarding its history."""
    session = _get_session(game_id)
    difficulty = request.difficulty or session.difficulty
    rng = random.Random(request.seed)
    # Only generation leaves the event loop; the session swaps in one step.
    puzzle = await run_in_threadpool(create_puzzle, difficulty, rng)
    session = _get_session(game_id)
    session.load(puzzle, rng=rng)
    return _state(game_id, session)


@router.post(
    "/api/v1/games/{game_id}:select", response_model=GameStateResponse, tags=["Games"]
)
async def select_cell(game_id: str, request: CellRequest):
    return _apply(game_id, lambda s: s.select_cell((request.row, request.col)))


@router.post(
    "/api/v1/games/{game_id}:enterDigit",
    response_model=GameStateResponse,
    tags=["Games"],
)
async def enter_digit(game_id: str, request: DigitRequest):
    """Write a digit, or toggle it as a note when note mode is on."""
    return _apply(
        game_id, lambda s: s.enter_digit((request.row, request.col), request.value)
    )


@router.post(
    "/api/v1/games/{game_id}:clear", response_model=GameStateResponse, tags=["Games"]
)
async def clear_cell(game_id: str, request: CellRequest):
    return _apply(game_id, lambda s: s.clear_cell((request.row, request.col)))


@router.post(
    "/api/v1/games/{game_id}:undo", response_model=GameStateResponse, tags=["Games"]
)
async def undo(game_id: str):
    return _apply(game_id, GameSession.undo)


@router.post(
    "/api/v1/games/{game_id}:redo", response_model=GameStateResponse, tags=["Games"]
)
async def redo(game_id: str):
    return _apply(game_id, GameSession.redo)


@router.post(
    "/api/v1/games/{game_id}:hint", response_model=GameStateResponse, tags=["Games"]
)
async def hint(game_id: str):
    """Reveal one empty cell; ``hint`` is null when nothing was revealed."""
    session = _get_session(game_id)
    coord = session.hint()
    return _state(game_id, session, hint=coord)


@router.post(
    "/api/v1/games/{game_id}:toggleNotes",
    response_model=GameStateResponse,
    tags=["Games"],
)
async def toggle_notes(game_id: str):
    return _apply(game_id, GameSession.toggle_note_mode)


@router.post(
    "/api/v1/games/{game_id}:eliminateCandidates",
    response_model=GameStateResponse,
    tags=["Games"],
)
async def eliminate_candidates(game_id: str):
    return _apply(game_id, GameSession.eliminate_candidates)


@router.post(
    "/api/v1/games/{game_id}:pause", response_model=GameStateResponse, tags=["Games"]
)
async def pause(game_id: str):
    return _apply(game_id, GameSession.pause)


@router.post(
    "/api/v1/games/{game_id}:resume", response_model=GameStateResponse, tags=["Games"]
)
async def resume(game_id: str):
    return _apply(game_id, GameSession.resume)


@router.get("/api/v1/stats", response_model=StatsResponse, tags=["Stats"])
async def get_stats():
    """Persisted completion statistics."""
    store, error = _get_stats_store()
    if store is None:
        raise HTTPException(status_code=503, detail=error)

    stats = store.stats
    return StatsResponse(
        games_completed=stats.games_completed,
        streak=stats.streak,
        by_difficulty={
            difficulty: DifficultyStatsResponse(
                completed=len(entry.times),
                average_time=entry.average_time,
                best_time=entry.best_time,
            )
            for difficulty, entry in stats.by_difficulty.items()
        },
    )
