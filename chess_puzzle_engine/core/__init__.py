"""
Core package for Chess Puzzle Engine.

This package contains the puzzle engine proper: data models, the corpus index
and selector, the puzzle session state machine, the rating rule and the mode
controllers built on top of them.
"""

from .models import (
    AttemptRecord,
    Config,
    ModeStats,
    MoveResult,
    Puzzle,
    RatingRecord,
    SelectionFilters,
    SessionState,
)

from .errors import (
    CorpusError,
    IllegalMoveError,
    InternalConsistencyError,
    PuzzleEngineError,
    PuzzleNotFound,
    PuzzleUnusable,
    SessionClosedError,
)

from .rules import ChessRulesAdapter, RulesAdapter
from .corpus import load_corpus, load_sample_corpus
from .index import PuzzleIndex
from .selector import PuzzleSelector
from .session import PuzzleSession
from .rating import RatingChange, expected_score, update as update_rating

from .modes import (
    CuratedSet,
    ModeController,
    RatedLadder,
    RushMode,
    SurvivalMode,
    ThemedDrill,
)

__all__ = [
    # Data models
    "AttemptRecord",
    "Config",
    "ModeStats",
    "MoveResult",
    "Puzzle",
    "RatingRecord",
    "SelectionFilters",
    "SessionState",

    # Errors
    "CorpusError",
    "IllegalMoveError",
    "InternalConsistencyError",
    "PuzzleEngineError",
    "PuzzleNotFound",
    "PuzzleUnusable",
    "SessionClosedError",

    # Engine components
    "ChessRulesAdapter",
    "RulesAdapter",
    "load_corpus",
    "load_sample_corpus",
    "PuzzleIndex",
    "PuzzleSelector",
    "PuzzleSession",
    "RatingChange",
    "expected_score",
    "update_rating",

    # Modes
    "CuratedSet",
    "ModeController",
    "RatedLadder",
    "RushMode",
    "SurvivalMode",
    "ThemedDrill",
]
