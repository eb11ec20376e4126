"""Completion statistics exports."""

from .store import DifficultyStats, GameStats, StatsStore

__all__ = ["DifficultyStats", "GameStats", "StatsStore"]
