"""
Core data models for the Chess Puzzle Engine.

This module defines the fundamental data structures used throughout the engine
for representing puzzles, selection filters, move outcomes, ratings, per-mode
statistics and configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

if TYPE_CHECKING:
    from .rating import RatingChange


# Difficulty tiers: name -> inclusive rating band
DIFFICULTY_TIERS: Dict[str, Tuple[int, int]] = {
    "beginner": (800, 1199),
    "intermediate": (1200, 1599),
    "advanced": (1600, 1999),
    "expert": (2000, 2400),
}

# Solution-length categories: name -> inclusive move-count band (None = unbounded)
LENGTH_CATEGORIES: Dict[str, Tuple[int, Optional[int]]] = {
    "oneMove": (1, 2),
    "short": (3, 4),
    "long": (5, 6),
    "veryLong": (7, None),
}

RATING_BUCKET_SIZE = 100
MIN_RATING_BUCKET = 800
MAX_RATING_BUCKET = 2400


class SessionState(str, Enum):
    """Lifecycle states of a puzzle session."""

    PLAYING = "playing"
    SOLVED = "solved"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionState.PLAYING


def rating_bucket(rating: int) -> int:
    """Return the clamped 100-point bucket a rating falls into."""
    bucket = (rating // RATING_BUCKET_SIZE) * RATING_BUCKET_SIZE
    return max(MIN_RATING_BUCKET, min(MAX_RATING_BUCKET, bucket))


def difficulty_tier_for(rating: int) -> Optional[str]:
    """Return the difficulty tier containing a rating, or None if outside every band."""
    for tier, (low, high) in DIFFICULTY_TIERS.items():
        if low <= rating <= high:
            return tier
    return None


def length_category_for(move_count: int) -> Optional[str]:
    """Return the length category for a solution of the given size."""
    for category, (low, high) in LENGTH_CATEGORIES.items():
        if move_count >= low and (high is None or move_count <= high):
            return category
    return None


@dataclass(frozen=True)
class Puzzle:
    """
    A single tactical puzzle: a starting position plus a forced solution line.

    moves[0] is the opponent's setup move, played automatically before the
    solver's first turn; later moves alternate solver / opponent.
    """

    id: str
    fen: str
    moves: Tuple[str, ...]
    rating: int
    themes: Tuple[str, ...] = ()

    # Lichess corpus metadata
    popularity: Optional[int] = None
    plays: Optional[int] = None
    game_url: Optional[str] = None
    opening_tags: Tuple[str, ...] = ()

    def __post_init__(self):
        # Accept lists from callers but store tuples so the puzzle stays hashable
        object.__setattr__(self, "moves", tuple(move.lower() for move in self.moves))
        object.__setattr__(self, "themes", tuple(self.themes))
        object.__setattr__(self, "opening_tags", tuple(self.opening_tags))

    @property
    def theme_keys(self) -> FrozenSet[str]:
        """Lowercased theme tags."""
        return frozenset(theme.lower() for theme in self.themes if theme)

    @property
    def solver_move_count(self) -> int:
        """Number of moves the solver has to find."""
        return len(self.moves) // 2

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: Dict[str, Any] = {
            "id": self.id,
            "fen": self.fen,
            "moves": list(self.moves),
            "rating": self.rating,
            "themes": list(self.themes),
        }
        if self.popularity is not None:
            data["popularity"] = self.popularity
        if self.plays is not None:
            data["plays"] = self.plays
        if self.game_url:
            data["game_url"] = self.game_url
        if self.opening_tags:
            data["opening_tags"] = list(self.opening_tags)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Puzzle:
        """
        Create a Puzzle from a dictionary.

        Moves and themes may be given as lists or as space-separated strings.
        """
        moves = data.get("moves", ())
        if isinstance(moves, str):
            moves = moves.split()
        themes = data.get("themes", ())
        if isinstance(themes, str):
            themes = themes.split()
        opening_tags = data.get("opening_tags", ())
        if isinstance(opening_tags, str):
            opening_tags = opening_tags.split()

        return cls(
            id=str(data["id"]),
            fen=data["fen"],
            moves=tuple(moves),
            rating=int(data["rating"]),
            themes=tuple(themes),
            popularity=data.get("popularity"),
            plays=data.get("plays"),
            game_url=data.get("game_url"),
            opening_tags=tuple(opening_tags),
        )


@dataclass(frozen=True)
class SelectionFilters:
    """Filter dimensions accepted by the puzzle selector."""

    rating_center: Optional[int] = None
    rating_range: int = 200
    themes: FrozenSet[str] = frozenset()
    difficulty_tier: Optional[str] = None
    length_category: Optional[str] = None
    exclude: FrozenSet[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "themes", frozenset(self.themes))
        object.__setattr__(self, "exclude", frozenset(self.exclude))
        if self.rating_range < 0:
            raise ValueError("rating_range cannot be negative")

    @property
    def is_unfiltered(self) -> bool:
        """True if no filter dimension is specified."""
        return (
            self.rating_center is None
            and not self.themes
            and not self.difficulty_tier
            and not self.length_category
        )

    def excluding(self, ids: Iterable[str]) -> SelectionFilters:
        """Return a copy with additional ids excluded."""
        return replace(self, exclude=self.exclude | frozenset(ids))


@dataclass(frozen=True)
class MoveResult:
    """Outcome of a single move submission to a puzzle session."""

    accepted: bool
    state: SessionState
    last_opponent_reply: Optional[str] = None
    correct_move: Optional[str] = None  # expected move, reported on failure
    reason: Optional[str] = None        # why the input was rejected

    @property
    def is_solved(self) -> bool:
        return self.state is SessionState.SOLVED

    @property
    def is_failed(self) -> bool:
        return self.state is SessionState.FAILED


@dataclass
class RatingRecord:
    """A solver's current and peak rating. Storage is owned by the caller."""

    rating: int = 1200
    peak_rating: int = 1200

    def __post_init__(self):
        self.peak_rating = max(self.peak_rating, self.rating)

    def apply(self, change: RatingChange) -> None:
        """Apply a RatingChange, raising the peak if the new rating exceeds it."""
        self.rating = change.new_rating
        self.peak_rating = max(self.peak_rating, change.new_rating)


@dataclass
class AttemptRecord:
    """Record of one completed puzzle attempt inside a mode run."""

    puzzle_id: str
    puzzle_rating: int
    themes: Tuple[str, ...]
    solved: bool
    mode: str
    revealed: bool = False
    rating_before: Optional[int] = None
    rating_after: Optional[int] = None
    rating_delta: Optional[int] = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class ModeStats:
    """Statistics accumulated over a mode run."""

    attempts: List[AttemptRecord] = field(default_factory=list)
    solved: int = 0
    failed: int = 0
    streak: int = 0
    best_streak: int = 0

    @property
    def attempted(self) -> int:
        """Total number of completed attempts."""
        return len(self.attempts)

    @property
    def accuracy(self) -> float:
        """Solve percentage (0.0 to 1.0)."""
        if not self.attempts:
            return 0.0
        return self.solved / len(self.attempts)

    def add_attempt(self, attempt: AttemptRecord) -> None:
        """Add an attempt and update counters and streaks."""
        self.attempts.append(attempt)
        if attempt.solved:
            self.solved += 1
            self.streak += 1
            self.best_streak = max(self.best_streak, self.streak)
        else:
            self.failed += 1
            self.streak = 0

    def theme_breakdown(self) -> Dict[str, Tuple[int, int]]:
        """Map lowercase theme -> (solved, attempted)."""
        breakdown: Dict[str, Tuple[int, int]] = {}
        for attempt in self.attempts:
            for theme in {t.lower() for t in attempt.themes}:
                solved, total = breakdown.get(theme, (0, 0))
                breakdown[theme] = (solved + int(attempt.solved), total + 1)
        return breakdown


@dataclass
class Config:
    """Configuration settings for the puzzle engine and its modes."""

    # Rating settings
    initial_rating: int = 1200
    rating_range: int = 200
    k_factor: int = 32
    rating_floor: int = 100

    # Rush settings (seconds)
    rush_duration: float = 300.0
    rush_penalty: float = 5.0

    # Survival settings
    survival_lives: int = 3

    # Curated set settings
    curated_set_size: int = 30

    # Selection settings
    fallback_pool_size: int = 5
    max_unusable_retries: int = 5
    seed: Optional[int] = None

    # Session settings
    show_correction: bool = True

    # Corpus settings
    corpus_path: Optional[str] = None
    validate_corpus: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            field.name: getattr(self, field.name)
            for field in self.__dataclass_fields__.values()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Config:
        """Create config from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    @classmethod
    def from_env(cls, prefix: str = "PUZZLE_", environ: Optional[Dict[str, str]] = None) -> Config:
        """
        Create config from environment variables.

        Each field maps to PREFIX + FIELD_NAME in upper case, e.g. PUZZLE_K_FACTOR.
        Values are converted to the type of the field's default.
        """
        environ = os.environ if environ is None else environ
        defaults = cls()
        values: Dict[str, Any] = {}

        for name in cls.__dataclass_fields__:
            raw = environ.get(f"{prefix}{name.upper()}")
            if raw is None:
                continue

            default = getattr(defaults, name)
            if isinstance(default, bool):
                values[name] = raw.strip().lower() in ("1", "true", "yes", "on")
            elif isinstance(default, int):
                values[name] = int(raw)
            elif isinstance(default, float):
                values[name] = float(raw)
            elif name == "seed":
                values[name] = int(raw)
            else:
                values[name] = raw

        return cls.from_dict(values)
