"""Tests for the game session: moves, notes, history, hints and completion."""

import copy
import random

import pytest

from sudoku_elite.game.session import CompletionEvent, GameSession, SessionStatus
from sudoku_elite.generator.carver import Puzzle
from sudoku_elite.generator.difficulty import Difficulty


@pytest.fixture
def session(puzzle, solution, clock):
    return GameSession.from_grids(
        puzzle, solution, Difficulty.EASY, rng=random.Random(0), clock=clock
    )


def _record_events(session: GameSession) -> list[CompletionEvent]:
    events: list[CompletionEvent] = []
    session.add_completion_listener(events.append)
    return events


class TestMoves:
    """Tests for entering and clearing digits."""

    def test_enter_digit_writes_value(self, session):
        session.enter_digit((0, 2), 4)

        assert session.value((0, 2)) == 4
        assert session.moves == 1
        assert session.status is SessionStatus.IN_PROGRESS

    def test_starts_ready(self, session):
        assert session.status is SessionStatus.READY
        assert session.moves == 0
        assert session.can_undo is False

    def test_given_cells_never_change(self, session, puzzle):
        for r in range(9):
            for c in range(9):
                if puzzle[r][c]:
                    session.enter_digit((r, c), 1 if puzzle[r][c] != 1 else 2)
                    session.clear_cell((r, c))

        assert session.grid == puzzle
        assert session.moves == 0
        assert session.can_undo is False

    def test_conflicting_digit_is_allowed_but_flagged(self, session):
        session.enter_digit((0, 2), 5)  # row 0 already holds 5 at (0, 0)

        assert session.value((0, 2)) == 5
        assert session.has_conflict((0, 2)) is True
        assert session.has_conflict((0, 0)) is True
        assert session.conflicts() == {(0, 0), (0, 2)}
        assert session.is_solvable() is False

    def test_correct_digit_keeps_puzzle_solvable(self, session):
        session.enter_digit((0, 2), 4)

        assert session.has_conflict((0, 2)) is False
        assert session.is_solvable() is True

    def test_clear_cell_removes_value_and_notes(self, session):
        session.enter_digit((0, 2), 4)
        session.toggle_note_mode()
        session.enter_digit((0, 3), 6)
        session.toggle_note_mode()

        session.clear_cell((0, 2))
        session.clear_cell((0, 3))

        assert session.value((0, 2)) == 0
        assert (0, 3) not in session.notes
        assert session.moves == 3

    def test_entering_digit_eliminates_it_from_peer_notes(self, session):
        session.toggle_note_mode()
        session.enter_digit((0, 3), 4)  # same row
        session.enter_digit((0, 3), 6)
        session.enter_digit((1, 2), 4)  # same column and box
        session.enter_digit((4, 4), 4)  # unrelated cell
        session.toggle_note_mode()

        session.enter_digit((0, 2), 4)

        notes = session.notes
        assert notes[(0, 3)] == {6}
        assert (1, 2) not in notes
        assert notes[(4, 4)] == {4}

    def test_number_counts(self, session, puzzle):
        counts = session.number_counts()

        assert sum(counts) == sum(1 for row in puzzle for v in row if v)
        assert counts[4] == sum(row.count(5) for row in puzzle)

    def test_bad_arguments_raise(self, session):
        with pytest.raises(ValueError):
            session.enter_digit((9, 0), 1)
        with pytest.raises(ValueError):
            session.enter_digit((0, 2), 0)
        with pytest.raises(ValueError):
            session.select_cell((0, -1))

    def test_from_grids_rejects_malformed_grid(self, puzzle, solution):
        with pytest.raises(ValueError):
            GameSession.from_grids(puzzle[:8], solution)


class TestNotes:
    """Tests for note mode and candidate elimination."""

    def test_note_mode_toggles_digits(self, session):
        assert session.toggle_note_mode() is True

        session.enter_digit((0, 2), 1)
        session.enter_digit((0, 2), 4)
        assert session.notes[(0, 2)] == {1, 4}
        assert session.value((0, 2)) == 0

        session.enter_digit((0, 2), 1)
        session.enter_digit((0, 2), 4)
        assert (0, 2) not in session.notes

    def test_note_changes_are_undoable_but_not_moves(self, session):
        session.toggle_note_mode()
        session.enter_digit((0, 2), 1)

        assert session.moves == 0
        assert session.can_undo is True

        session.undo()
        assert session.notes == {}

    def test_notes_ignored_on_filled_cells(self, session):
        session.enter_digit((0, 2), 4)
        session.toggle_note_mode()

        session.enter_digit((0, 2), 1)

        assert (0, 2) not in session.notes

    def test_eliminate_candidates_fills_legal_digits(self, session):
        session.eliminate_candidates()

        notes = session.notes
        assert notes[(0, 2)] == {1, 2, 4}
        assert all(session.value(coord) == 0 for coord in notes)

    def test_eliminate_candidates_intersects_existing_notes(self, session):
        session.toggle_note_mode()
        session.enter_digit((0, 2), 4)
        session.enter_digit((0, 2), 5)

        session.eliminate_candidates()

        assert session.notes[(0, 2)] == {4}

    def test_eliminate_candidates_drops_cells_without_candidates(self, solution):
        grid = [[0] * 9 for _ in range(9)]
        grid[0] = [0, 1, 2, 3, 4, 5, 6, 7, 8]
        grid[1][0] = 9
        session = GameSession.from_grids(grid, solution)

        session.toggle_note_mode()
        session.enter_digit((0, 0), 9)
        session.eliminate_candidates()

        notes = session.notes
        assert (0, 0) not in notes
        assert notes[(1, 1)] == {3, 4, 5, 6, 7, 8}
        assert all(digits for digits in notes.values())


class TestHistory:
    """Tests for undo and redo through the session."""

    def test_enter_then_undo_restores_grid_and_notes(self, session):
        session.toggle_note_mode()
        session.enter_digit((0, 3), 4)
        session.enter_digit((0, 3), 6)
        session.toggle_note_mode()
        grid_before = session.grid
        notes_before = session.notes

        session.enter_digit((0, 2), 4)
        session.undo()

        assert session.grid == grid_before
        assert session.notes == notes_before

    def test_k_moves_k_undos_then_k_redos(self, session, puzzle, solution):
        cells = [(0, 2), (0, 3), (1, 1), (2, 0), (4, 4)]
        for r, c in cells:
            session.enter_digit((r, c), solution[r][c])
        final_grid = session.grid

        for _ in cells:
            session.undo()
        assert session.grid == puzzle
        assert session.can_undo is False

        for _ in cells:
            session.redo()
        assert session.grid == final_grid
        assert session.can_redo is False

    def test_undo_and_redo_are_noops_at_the_boundaries(self, session, puzzle):
        session.undo()
        assert session.grid == puzzle

        session.enter_digit((0, 2), 4)
        session.redo()
        assert session.value((0, 2)) == 4

    def test_new_move_discards_redo(self, session):
        session.enter_digit((0, 2), 4)
        session.undo()

        session.enter_digit((0, 3), 6)

        assert session.can_redo is False
        assert session.value((0, 2)) == 0

    def test_history_is_bounded(self, puzzle, solution):
        session = GameSession.from_grids(puzzle, solution, history_limit=3)
        for col in (2, 3, 5, 6, 7):
            session.enter_digit((0, col), solution[0][col])

        undos = 0
        while session.can_undo:
            session.undo()
            undos += 1

        assert undos == 2
        assert session.value((0, 5)) == solution[0][5]
        assert session.value((0, 6)) == 0


class TestCompletion:
    """Tests for solved detection and the completion event."""

    def test_exact_solution_solves_and_emits_once(self, one_empty_puzzle, solution, clock):
        session = GameSession.from_grids(
            one_empty_puzzle, solution, Difficulty.HARD, clock=clock
        )
        events = _record_events(session)
        clock.advance(42.0)

        session.enter_digit((4, 4), 5)

        assert session.solved is True
        assert session.status is SessionStatus.SOLVED
        assert events == [
            CompletionEvent(
                difficulty=Difficulty.HARD,
                elapsed_seconds=42.0,
                solved_successfully=True,
            )
        ]

        session.clear_cell((4, 4))
        session.enter_digit((4, 4), 5)
        session.undo()
        assert session.value((4, 4)) == 5
        assert len(events) == 1

    def test_solved_session_ignores_input(self, one_empty_puzzle, solution):
        session = GameSession.from_grids(one_empty_puzzle, solution)
        session.enter_digit((4, 4), 5)
        grid = session.grid

        session.select_cell((0, 0))
        session.undo()
        session.redo()
        session.eliminate_candidates()

        assert session.hint() is None
        assert session.grid == grid
        assert session.notes == {}
        assert session.can_undo is False

    def test_other_valid_completion_does_not_solve(self, solution):
        # Rows 0 and 1 share a band, so the row-swapped grid is also valid.
        puzzle = copy.deepcopy(solution)
        puzzle[0] = [0] * 9
        puzzle[1] = [0] * 9
        session = GameSession.from_grids(puzzle, solution)
        events = _record_events(session)

        for col in range(9):
            session.enter_digit((0, col), solution[1][col])
            session.enter_digit((1, col), solution[0][col])

        assert all(v != 0 for row in session.grid for v in row)
        assert session.conflicts() == set()
        assert session.solved is False
        assert session.status is SessionStatus.IN_PROGRESS
        assert session.hint() is None
        assert events == []

        for col in range(9):
            session.clear_cell((0, col))
            session.clear_cell((1, col))
        for col in range(9):
            session.enter_digit((0, col), solution[0][col])
            session.enter_digit((1, col), solution[1][col])

        assert session.solved is True
        assert len(events) == 1

    def test_wrong_fill_notifies_without_completion_event(self, solution):
        puzzle = copy.deepcopy(solution)
        puzzle[0] = [0] * 9
        puzzle[1] = [0] * 9
        session = GameSession.from_grids(puzzle, solution, Difficulty.MEDIUM)
        events = _record_events(session)
        wrong_fills: list[Difficulty] = []
        session.add_wrong_fill_listener(wrong_fills.append)

        for col in range(9):
            session.enter_digit((0, col), solution[1][col])
            session.enter_digit((1, col), solution[0][col])

        assert wrong_fills == [Difficulty.MEDIUM]
        assert events == []
        assert session.solved is False


class TestHint:
    """Tests for hints."""

    def test_hint_fills_solution_digit(self, session, solution, puzzle):
        coord = session.hint()

        assert coord is not None
        r, c = coord
        assert puzzle[r][c] == 0
        assert session.value(coord) == solution[r][c]
        assert session.selected == coord
        assert session.moves == 1
        assert session.can_undo is True

    def test_hint_eliminates_peer_notes_and_ignores_note_mode(
        self, one_empty_puzzle, solution
    ):
        grid = copy.deepcopy(one_empty_puzzle)
        grid[4][5] = 0
        session = GameSession.from_grids(grid, solution, rng=random.Random(3))
        session.toggle_note_mode()
        session.enter_digit((4, 4), 5)
        session.enter_digit((4, 5), 5)
        session.enter_digit((4, 5), 3)

        coord = session.hint()

        other = (4, 5) if coord == (4, 4) else (4, 4)
        assert session.value(coord) == solution[coord[0]][coord[1]]
        assert session.value(other) == 0
        if coord == (4, 4):
            assert session.notes[(4, 5)] == {3}
        else:
            assert session.notes[(4, 4)] == {5}

    def test_hint_can_finish_the_puzzle(self, one_empty_puzzle, solution):
        session = GameSession.from_grids(one_empty_puzzle, solution)
        events = _record_events(session)

        assert session.hint() == (4, 4)
        assert session.solved is True
        assert len(events) == 1

    def test_hints_are_reproducible_with_seeded_rng(self, puzzle, solution):
        first = GameSession.from_grids(puzzle, solution, rng=random.Random(9))
        second = GameSession.from_grids(puzzle, solution, rng=random.Random(9))

        assert [first.hint() for _ in range(5)] == [second.hint() for _ in range(5)]


class TestPauseAndClock:
    """Tests for pausing and elapsed time."""

    def test_elapsed_time_stops_while_paused(self, session, clock):
        clock.advance(10)
        session.pause()
        clock.advance(100)

        assert session.paused is True
        assert session.elapsed_seconds == 10

        session.resume()
        clock.advance(5)
        assert session.elapsed_seconds == 15
        assert session.status is SessionStatus.READY

    def test_input_ignored_while_paused(self, session, puzzle):
        session.enter_digit((0, 2), 4)
        session.pause()

        session.enter_digit((0, 3), 6)
        session.clear_cell((0, 2))
        session.undo()
        session.select_cell((5, 5))

        assert session.hint() is None
        assert session.value((0, 2)) == 4
        assert session.value((0, 3)) == 0
        assert session.selected is None

        session.resume()
        assert session.status is SessionStatus.IN_PROGRESS
        session.undo()
        assert session.grid == puzzle


class TestNewGame:
    """Tests for starting over."""

    def test_new_game_resets_everything(self, session):
        session.enter_digit((0, 2), 4)
        session.select_cell((0, 2))
        session.toggle_note_mode()

        session.new_game(Difficulty.EASY, rng=random.Random(12))

        assert session.status is SessionStatus.READY
        assert session.moves == 0
        assert session.notes == {}
        assert session.selected is None
        assert session.note_mode is False
        assert session.can_undo is False
        assert len(session.givens) >= Difficulty.EASY.min_givens
        assert session.is_solvable() is True

    def test_new_game_after_solve_reopens_session(self, one_empty_puzzle, solution):
        session = GameSession.from_grids(one_empty_puzzle, solution)
        events = _record_events(session)
        session.enter_digit((4, 4), 5)

        session.new_game(Difficulty.EASY, rng=random.Random(1))

        assert session.solved is False
        assert len(events) == 1

    def test_load_swaps_in_a_prepared_puzzle(self, session, one_empty_puzzle, solution):
        session.enter_digit((0, 2), 4)
        events = _record_events(session)
        prepared = GameSession.from_grids(
            one_empty_puzzle, solution, Difficulty.HARD
        )

        session.load(
            Puzzle(
                puzzle=one_empty_puzzle,
                solution=solution,
                givens=prepared.givens,
                difficulty=Difficulty.HARD,
            )
        )

        assert session.difficulty is Difficulty.HARD
        assert session.moves == 0
        assert session.can_undo is False
        session.enter_digit((4, 4), 5)
        assert session.solved is True
        assert len(events) == 1

    def test_create_generates_puzzle(self):
        session = GameSession.create(Difficulty.MEDIUM, rng=random.Random(6))

        assert session.difficulty is Difficulty.MEDIUM
        assert len(session.givens) >= Difficulty.MEDIUM.min_givens
        assert all(session.is_given(coord) for coord in session.givens)
