"""
Puzzle selection over a corpus index.

The selector turns a SelectionFilters value into a single puzzle: it fetches
one reference set per requested dimension, intersects them smallest-first,
drops excluded ids and picks uniformly at random. When nothing matches it falls
back to the closest-rated puzzle (or any puzzle), so a filter miss is never
fatal. Only an empty corpus raises PuzzleNotFound.
"""

from __future__ import annotations

import logging
import random
from typing import FrozenSet, List, Optional, Set

from .errors import PuzzleNotFound
from .index import PuzzleIndex
from .models import Puzzle, SelectionFilters

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_POOL = 5


def intersect(*ref_sets: FrozenSet[int]) -> FrozenSet[int]:
    """Intersect reference sets, starting from the smallest."""
    if not ref_sets:
        return frozenset()

    ordered = sorted(ref_sets, key=len)
    result = set(ordered[0])
    for refs in ordered[1:]:
        if not result:
            break
        result &= refs
    return frozenset(result)


class PuzzleSelector:
    """
    Selects puzzles from a PuzzleIndex.

    The selector keeps no selection history of its own; callers that want to
    avoid an immediate repeat pass the previous puzzle id explicitly.
    """

    def __init__(
        self,
        index: PuzzleIndex,
        rng: Optional[random.Random] = None,
        fallback_pool_size: int = DEFAULT_FALLBACK_POOL,
    ):
        """
        Initialize the selector.

        Args:
            index: The corpus index to select from
            rng: Random source (a fresh random.Random if None)
            fallback_pool_size: How many closest-rated puzzles the rating fallback picks among
        """
        self.index = index
        self.rng = rng or random.Random()
        self.fallback_pool_size = max(1, fallback_pool_size)

    def candidates(self, filters: Optional[SelectionFilters] = None) -> List[int]:
        """
        Return the sorted references matching every specified filter dimension.

        Excluded ids are removed. Unknown tier or length names are ignored.
        """
        filters = filters or SelectionFilters()
        if filters.is_unfiltered:
            refs = self.index.all_refs
        else:
            dimensions = self._dimensions(filters)
            refs = intersect(*dimensions) if dimensions else self.index.all_refs

        if filters.exclude:
            refs = frozenset(ref for ref in refs if self.index.get(ref).id not in filters.exclude)

        return sorted(refs)

    def _dimensions(self, filters: SelectionFilters) -> List[FrozenSet[int]]:
        """One reference set per filter dimension the index knows about."""
        dimensions: List[FrozenSet[int]] = []

        if filters.rating_center is not None:
            dimensions.append(self.index.rating_window(filters.rating_center, filters.rating_range))

        for theme in sorted(filters.themes):
            dimensions.append(self.index.by_theme(theme))

        if filters.difficulty_tier:
            if self.index.is_difficulty(filters.difficulty_tier):
                dimensions.append(self.index.by_difficulty(filters.difficulty_tier))
            else:
                logger.warning(f"Unknown difficulty tier '{filters.difficulty_tier}', ignoring")

        if filters.length_category:
            if self.index.is_length_category(filters.length_category):
                dimensions.append(self.index.by_length(filters.length_category))
            else:
                logger.warning(f"Unknown length category '{filters.length_category}', ignoring")

        return dimensions

    def select(
        self,
        filters: Optional[SelectionFilters] = None,
        previous: Optional[str] = None,
        strict: bool = False,
    ) -> Puzzle:
        """
        Select one puzzle matching the filters.

        Args:
            filters: Filter dimensions (None selects from the whole corpus)
            previous: Id of the immediately preceding selection, avoided when possible
            strict: Raise PuzzleNotFound instead of falling back on a miss

        Returns:
            The selected puzzle

        Raises:
            PuzzleNotFound: If the corpus is empty, or nothing matches in strict mode
        """
        if len(self.index) == 0:
            raise PuzzleNotFound("Puzzle corpus is empty")

        filters = filters or SelectionFilters()
        refs = self.candidates(filters)

        if refs:
            return self._pick(refs, previous)

        if strict:
            raise PuzzleNotFound(f"No puzzle matches filters {filters}")

        logger.debug(f"No puzzle matches {filters}, falling back")
        return self._fallback(filters, previous)

    def select_batch(self, n: int, filters: Optional[SelectionFilters] = None) -> List[Puzzle]:
        """
        Select up to n distinct puzzles matching the filters.

        Stops early, returning fewer than n, once the filtered pool is exhausted.
        """
        filters = filters or SelectionFilters()
        chosen: List[Puzzle] = []
        used: Set[str] = set()

        while len(chosen) < n:
            try:
                puzzle = self.select(filters.excluding(used), strict=True)
            except PuzzleNotFound:
                break

            if puzzle.id in used:
                break

            used.add(puzzle.id)
            chosen.append(puzzle)

        if len(chosen) < n:
            logger.debug(f"Batch selection returned {len(chosen)}/{n} puzzles for {filters}")
        return chosen

    def _pick(self, refs: List[int], previous: Optional[str]) -> Puzzle:
        """Pick uniformly at random, skipping the previous puzzle when there is a choice."""
        if previous is not None and len(refs) > 1:
            previous_ref = self.index.ref_of(previous)
            if previous_ref is not None:
                refs = [ref for ref in refs if ref != previous_ref]
        return self.index.get(self.rng.choice(refs))

    def _fallback(self, filters: SelectionFilters, previous: Optional[str]) -> Puzzle:
        """
        Choose a puzzle when the filters match nothing.

        With a rating center, the closest-rated puzzles are preferred; ties are
        broken randomly among the closest few, skipping the previous puzzle when
        there is a choice. Excluded ids are avoided while any other puzzle exists.
        """
        pool = [ref for ref in sorted(self.index.all_refs) if self.index.get(ref).id not in filters.exclude]
        if not pool:
            pool = sorted(self.index.all_refs)

        if filters.rating_center is None:
            return self._pick(pool, previous)

        center = filters.rating_center
        pool.sort(key=lambda ref: abs(self.index.get(ref).rating - center))
        closest = pool[: self.fallback_pool_size]
        puzzle = self._pick(closest, previous)
        logger.debug(f"Rating fallback for {center}: chose {puzzle.id} rated {puzzle.rating}")
        return puzzle
