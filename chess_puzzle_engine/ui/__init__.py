"""
UI package for Chess Puzzle Engine.

This package contains the Rich terminal components used to draw puzzle
positions, run status and summaries.
"""

from .dashboard import Dashboard
from .board import BoardColors, PuzzleBoardRenderer, format_line

__all__ = [
    "Dashboard",
    "BoardColors",
    "PuzzleBoardRenderer",
    "format_line",
]
