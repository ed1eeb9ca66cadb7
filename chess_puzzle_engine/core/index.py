"""
Puzzle corpus index.

Builds the four lookup mappings used by the selector (rating bucket, theme,
difficulty tier, solution length) in a single pass over a static collection of
puzzles. Puzzles are referenced by their integer position in the index, so the
lookups are cheap frozensets that can be intersected directly.

The index never mutates after build() returns and can be shared by any number
of sessions without locking.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from .errors import IllegalMoveError
from .models import (
    DIFFICULTY_TIERS,
    LENGTH_CATEGORIES,
    MAX_RATING_BUCKET,
    MIN_RATING_BUCKET,
    RATING_BUCKET_SIZE,
    Puzzle,
    difficulty_tier_for,
    length_category_for,
    rating_bucket,
)
from .rules import RulesAdapter

logger = logging.getLogger(__name__)

_EMPTY: FrozenSet[int] = frozenset()

# Case-insensitive lookup of the camelCase length category names
_LENGTH_KEYS = {name.lower(): name for name in LENGTH_CATEGORIES}


class PuzzleIndex:
    """
    Read-only multi-dimensional index over a puzzle corpus.

    Use PuzzleIndex.build() to construct one; the constructor takes the
    already-computed mappings.
    """

    def __init__(
        self,
        puzzles: Tuple[Puzzle, ...],
        by_rating: Dict[int, FrozenSet[int]],
        by_theme: Dict[str, FrozenSet[int]],
        by_difficulty: Dict[str, FrozenSet[int]],
        by_length: Dict[str, FrozenSet[int]],
        unusable_ids: FrozenSet[str] = frozenset(),
    ):
        self._puzzles = puzzles
        self._by_rating = by_rating
        self._by_theme = by_theme
        self._by_difficulty = by_difficulty
        self._by_length = by_length
        self._by_id = {puzzle.id: ref for ref, puzzle in enumerate(puzzles)}
        self._all_refs: FrozenSet[int] = frozenset(range(len(puzzles)))
        self.unusable_ids = unusable_ids

    @classmethod
    def build(cls, puzzles: Iterable[Puzzle], rules: Optional[RulesAdapter] = None) -> PuzzleIndex:
        """
        Build an index in a single deterministic pass.

        Malformed puzzles are not rejected; they are only left out of the
        buckets they do not cleanly belong to. When a rules adapter is given,
        each solution line is replayed and puzzles whose line cannot be applied
        are skipped entirely.

        Args:
            puzzles: The corpus
            rules: Optional rules adapter used to validate solution lines

        Returns:
            The built index
        """
        kept: List[Puzzle] = []
        unusable: Set[str] = set()
        seen_ids: Set[str] = set()

        by_rating: Dict[int, Set[int]] = {
            bucket: set() for bucket in range(MIN_RATING_BUCKET, MAX_RATING_BUCKET + 1, RATING_BUCKET_SIZE)
        }
        by_theme: Dict[str, Set[int]] = defaultdict(set)
        by_difficulty: Dict[str, Set[int]] = {tier: set() for tier in DIFFICULTY_TIERS}
        by_length: Dict[str, Set[int]] = {category: set() for category in LENGTH_CATEGORIES}

        for puzzle in puzzles:
            if puzzle.id in seen_ids:
                logger.warning(f"Duplicate puzzle id {puzzle.id}, keeping the first occurrence")
                continue
            seen_ids.add(puzzle.id)

            if rules is not None and not _solution_applies(puzzle, rules):
                unusable.add(puzzle.id)
                continue

            ref = len(kept)
            kept.append(puzzle)

            if isinstance(puzzle.rating, int):
                by_rating[rating_bucket(puzzle.rating)].add(ref)
                tier = difficulty_tier_for(puzzle.rating)
                if tier is not None:
                    by_difficulty[tier].add(ref)

            for theme in puzzle.theme_keys:
                by_theme[theme].add(ref)

            category = length_category_for(len(puzzle.moves))
            if category is not None:
                by_length[category].add(ref)

        if unusable:
            logger.warning(f"Skipped {len(unusable)} unusable puzzles: {', '.join(sorted(unusable)[:10])}")

        index = cls(
            puzzles=tuple(kept),
            by_rating={k: frozenset(v) for k, v in by_rating.items()},
            by_theme={k: frozenset(v) for k, v in by_theme.items()},
            by_difficulty={k: frozenset(v) for k, v in by_difficulty.items()},
            by_length={k: frozenset(v) for k, v in by_length.items()},
            unusable_ids=frozenset(unusable),
        )

        logger.info(
            f"Puzzle index built: total={len(kept)}, themes={len(index._by_theme)}, "
            f"difficulties=" + ", ".join(f"{k}: {len(v)}" for k, v in index._by_difficulty.items())
        )
        return index

    # ------------------------------------------------------------------
    # Basic access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._puzzles)

    @property
    def puzzles(self) -> Tuple[Puzzle, ...]:
        return self._puzzles

    @property
    def all_refs(self) -> FrozenSet[int]:
        """References of every indexed puzzle."""
        return self._all_refs

    def get(self, ref: int) -> Puzzle:
        """Resolve a reference to its puzzle."""
        return self._puzzles[ref]

    def get_by_id(self, puzzle_id: str) -> Optional[Puzzle]:
        ref = self._by_id.get(puzzle_id)
        return None if ref is None else self._puzzles[ref]

    def ref_of(self, puzzle_id: str) -> Optional[int]:
        return self._by_id.get(puzzle_id)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def by_rating_bucket(self, bucket: int) -> FrozenSet[int]:
        """Refs in a 100-point rating bucket (bucket values are clamped like ratings)."""
        return self._by_rating.get(rating_bucket(bucket), _EMPTY)

    def by_theme(self, theme: str) -> FrozenSet[int]:
        return self._by_theme.get(theme.lower(), _EMPTY)

    def by_difficulty(self, tier: str) -> FrozenSet[int]:
        return self._by_difficulty.get(tier.lower(), _EMPTY)

    def by_length(self, category: str) -> FrozenSet[int]:
        name = _LENGTH_KEYS.get(category.lower())
        return self._by_length.get(name, _EMPTY) if name else _EMPTY

    def rating_window(self, center: int, rating_range: int) -> FrozenSet[int]:
        """
        Refs whose rating lies within [center - range, center + range].

        Walks the covering rating buckets, then filters on exact rating.
        """
        low = center - rating_range
        high = center + rating_range
        candidates: Set[int] = set()

        bucket = (low // RATING_BUCKET_SIZE) * RATING_BUCKET_SIZE
        while bucket <= high:
            candidates |= self.by_rating_bucket(bucket)
            if bucket >= MAX_RATING_BUCKET:
                break
            bucket += RATING_BUCKET_SIZE

        return frozenset(ref for ref in candidates if low <= self._puzzles[ref].rating <= high)

    def is_difficulty(self, tier: str) -> bool:
        return tier.lower() in self._by_difficulty

    def is_length_category(self, category: str) -> bool:
        return category.lower() in _LENGTH_KEYS

    def resolve_theme(self, theme: str) -> Optional[str]:
        """
        Map a requested theme onto an indexed one.

        Exact (case-insensitive) matches win; otherwise the first indexed theme,
        in sorted order, that contains the request or is contained by it.
        """
        key = theme.lower().strip()
        if not key:
            return None
        if key in self._by_theme:
            return key
        for indexed in sorted(self._by_theme):
            if key in indexed or indexed in key:
                return indexed
        return None

    # ------------------------------------------------------------------
    # Catalogue and statistics
    # ------------------------------------------------------------------

    def available_themes(self) -> List[str]:
        return sorted(self._by_theme)

    def available_difficulties(self) -> List[str]:
        return list(DIFFICULTY_TIERS)

    def available_lengths(self) -> List[str]:
        return list(LENGTH_CATEGORIES)

    def stats(self) -> Dict[str, object]:
        """Summary of the pool: totals per tier, length and rating bucket, and top themes."""
        top_themes: Sequence[Tuple[str, FrozenSet[int]]] = sorted(
            self._by_theme.items(), key=lambda item: (-len(item[1]), item[0])
        )[:15]
        return {
            "total": len(self._puzzles),
            "unusable": len(self.unusable_ids),
            "by_difficulty": {k: len(v) for k, v in self._by_difficulty.items()},
            "by_length": {k: len(v) for k, v in self._by_length.items()},
            "by_rating": {k: len(v) for k, v in sorted(self._by_rating.items()) if v},
            "theme_count": len(self._by_theme),
            "top_themes": [{"theme": theme, "count": len(refs)} for theme, refs in top_themes],
        }


def _solution_applies(puzzle: Puzzle, rules: RulesAdapter) -> bool:
    """Replay a puzzle's solution line, logging and returning False if any move fails."""
    try:
        rules.replay(puzzle.fen, puzzle.moves)
    except IllegalMoveError as e:
        logger.warning(f"Puzzle {puzzle.id} has an invalid solution line: {e}")
        return False
    return True
