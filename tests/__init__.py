"""
Test package for Chess Puzzle Engine.

This package contains unit tests for the puzzle engine: corpus loading and
indexing, selection, the puzzle session state machine, rating updates, mode
controllers and the command-line front end.
"""

# Import test modules for easier discovery
from . import test_models
from . import test_rules
from . import test_rating
from . import test_index
from . import test_selector
from . import test_session
from . import test_modes
from . import test_corpus
from . import test_cli

__all__ = [
    "test_models",
    "test_rules",
    "test_rating",
    "test_index",
    "test_selector",
    "test_session",
    "test_modes",
    "test_corpus",
    "test_cli",
]
