"""Sudoku Elite puzzle engine and game service."""

__version__ = "1.0.0"
