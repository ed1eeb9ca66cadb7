"""
Exception hierarchy for the Chess Puzzle Engine.

Every failure the engine surfaces to callers derives from PuzzleEngineError.
Filter misses and wrong moves are not errors; only corpus emptiness and
broken solution lines propagate.
"""

from __future__ import annotations

from typing import Optional


class PuzzleEngineError(Exception):
    """Base exception for puzzle engine errors."""
    pass


class IllegalMoveError(PuzzleEngineError):
    """Raised by a rules adapter when a move cannot be applied to a position."""

    def __init__(self, position: str, move: str, message: str = ""):
        self.position = position
        self.move = move
        super().__init__(message or f"Illegal move {move} in position {position}")


class PuzzleUnusable(PuzzleEngineError):
    """A puzzle's setup move or solution line cannot be applied."""

    def __init__(self, puzzle_id: str, message: str = ""):
        self.puzzle_id = puzzle_id
        super().__init__(message or f"Puzzle {puzzle_id} is unusable")


class InternalConsistencyError(PuzzleUnusable):
    """An expected solution move was rejected by the rules adapter mid-session."""

    def __init__(self, puzzle_id: str, move: str, move_index: int):
        self.move = move
        self.move_index = move_index
        super().__init__(
            puzzle_id,
            f"Puzzle {puzzle_id}: solution move {move} at index {move_index} was rejected",
        )


class PuzzleNotFound(PuzzleEngineError):
    """No puzzle could be selected (empty corpus, or a strict selection miss)."""
    pass


class SessionClosedError(PuzzleEngineError):
    """A session was mutated after its controller had read the outcome."""
    pass


class CorpusError(PuzzleEngineError):
    """A corpus file could not be read or has an unsupported format."""

    def __init__(self, path: str, message: str, line: Optional[int] = None):
        self.path = path
        self.line = line
        location = f"{path}:{line}" if line is not None else path
        super().__init__(f"{location}: {message}")
