"""Game session exports."""

from .history import History, HistoryEntry
from .session import CompletionEvent, GameSession, SessionStatus

__all__ = [
    "CompletionEvent",
    "GameSession",
    "History",
    "HistoryEntry",
    "SessionStatus",
]
