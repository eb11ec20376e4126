"""Puzzle generation exports."""

from .carver import Puzzle, carve, create_puzzle
from .difficulty import Difficulty
from .grid import generate_full

__all__ = ["Difficulty", "Puzzle", "carve", "create_puzzle", "generate_full"]
