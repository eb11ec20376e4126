"""JSON-backed completion statistics, best times and win streak."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from ..game.session import CompletionEvent
from ..generator.difficulty import Difficulty

_LOGGER = logging.getLogger(__name__)


class DifficultyStats(BaseModel):
    """Completion times for one difficulty."""

    times: list[float] = Field(default_factory=list)
    average_time: float = 0.0
    best_time: Optional[float] = None


class GameStats(BaseModel):
    """Everything persisted across sessions."""

    games_completed: int = 0
    streak: int = 0
    by_difficulty: dict[Difficulty, DifficultyStats] = Field(
        default_factory=lambda: {d: DifficultyStats() for d in Difficulty}
    )


class StatsStore:
    """
    Record completion events and persist them as JSON.

    A missing or unreadable file yields empty stats; write failures are logged
    and the in-memory stats stay authoritative. ``path=None`` keeps stats in
    memory only.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None):
        self.path = Path(path) if path else None
        self.stats = self.load()

    def load(self) -> GameStats:
        if self.path is None or not self.path.exists():
            return GameStats()

        try:
            stats = GameStats.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            _LOGGER.warning("Failed to load stats from %s: %s, using defaults", self.path, e)
            return GameStats()

        for difficulty in Difficulty:
            stats.by_difficulty.setdefault(difficulty, DifficultyStats())
        return stats

    def save(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(self.stats.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            _LOGGER.error("Failed to save stats to %s: %s", self.path, e)

    def record(self, event: CompletionEvent) -> bool:
        """
        Fold a completion event into the stats and save them.

        Returns:
            True when the event set a new best time for its difficulty
        """
        if not event.solved_successfully:
            self.reset_streak()
            return False

        entry = self.stats.by_difficulty.setdefault(event.difficulty, DifficultyStats())
        seconds = round(event.elapsed_seconds, 3)

        self.stats.games_completed += 1
        self.stats.streak += 1
        entry.times.append(seconds)
        entry.average_time = sum(entry.times) / len(entry.times)

        new_best = entry.best_time is None or seconds < entry.best_time
        if new_best:
            entry.best_time = seconds

        self.save()
        _LOGGER.debug(
            "Recorded %s completion in %.1fs (best=%s)",
            event.difficulty.value,
            seconds,
            entry.best_time,
        )
        return new_best

    def reset_streak(self) -> None:
        """Break the win streak, e.g. after a board was filled in wrongly."""
        if self.stats.streak == 0:
            return
        self.stats.streak = 0
        self.save()
        _LOGGER.debug("Win streak reset")
