"""Bounded undo/redo history of (grid, notes) snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from ..solver.backtracking import Coord, Grid

DEFAULT_HISTORY_LIMIT = 50


@dataclass(frozen=True)
class HistoryEntry:
    """Immutable snapshot of the play grid and the notes."""

    grid: tuple[tuple[int, ...], ...]
    notes: Mapping[Coord, frozenset[int]]

    @classmethod
    def capture(cls, grid: Grid, notes: Mapping[Coord, set[int]]) -> "HistoryEntry":
        return cls(
            grid=tuple(tuple(row) for row in grid),
            notes={coord: frozenset(digits) for coord, digits in notes.items()},
        )

    def grid_copy(self) -> Grid:
        return [list(row) for row in self.grid]

    def notes_copy(self) -> dict[Coord, set[int]]:
        return {coord: set(digits) for coord, digits in self.notes.items()}


class History:
    """
    Snapshot list with a cursor.

    Committing drops every entry after the cursor, appends the new snapshot
    and evicts the oldest entry once ``limit`` is exceeded. The cursor always
    points at the snapshot matching the live state.
    """

    def __init__(self, initial: HistoryEntry, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError(f"History limit must be at least 1, got {limit}")
        self.limit = limit
        self._entries: list[HistoryEntry] = [initial]
        self._index = 0

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> HistoryEntry:
        return self._entries[self._index]

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def commit(self, entry: HistoryEntry) -> None:
        del self._entries[self._index + 1 :]
        self._entries.append(entry)
        if len(self._entries) > self.limit:
            del self._entries[0]
        self._index = len(self._entries) - 1

    def undo(self) -> HistoryEntry | None:
        """Step back one snapshot; None when already at the oldest."""
        if not self.can_undo:
            return None
        self._index -= 1
        return self._entries[self._index]

    def redo(self) -> HistoryEntry | None:
        """Step forward one snapshot; None when already at the newest."""
        if not self.can_redo:
            return None
        self._index += 1
        return self._entries[self._index]
