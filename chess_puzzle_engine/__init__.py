"""
Chess Puzzle Engine - Tactical puzzle training in the terminal.

This package selects puzzles from a fixed corpus under rating, theme,
difficulty and length filters, validates solver moves against each puzzle's
solution line, and tracks a skill rating across several training modes.
"""

__version__ = "0.3.0"
__author__ = "Chess Puzzle Engine Team"
__license__ = "MIT"

# Core imports
from .core.models import Config, ModeStats, MoveResult, Puzzle, RatingRecord, SelectionFilters, SessionState
from .core.index import PuzzleIndex
from .core.selector import PuzzleSelector
from .core.session import PuzzleSession
from .core.rules import ChessRulesAdapter
from .cli import main

__all__ = [
    "Config",
    "ModeStats",
    "MoveResult",
    "Puzzle",
    "RatingRecord",
    "SelectionFilters",
    "SessionState",
    "PuzzleIndex",
    "PuzzleSelector",
    "PuzzleSession",
    "ChessRulesAdapter",
    "main",
]
