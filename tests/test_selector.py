"""
Unit tests for puzzle selection.
"""

import random
import unittest

from chess_puzzle_engine.core.errors import PuzzleNotFound
from chess_puzzle_engine.core.index import PuzzleIndex
from chess_puzzle_engine.core.models import SelectionFilters
from chess_puzzle_engine.core.selector import PuzzleSelector, intersect

from tests.fixtures import GOOD_PUZZLES, make_puzzle


class IntersectTests(unittest.TestCase):

    def test_intersect(self):
        self.assertEqual(intersect(frozenset({1, 2, 3}), frozenset({2, 3}), frozenset({3, 4})), frozenset({3}))
        self.assertEqual(intersect(frozenset({1}), frozenset()), frozenset())
        self.assertEqual(intersect(), frozenset())


class SelectorTests(unittest.TestCase):
    """Test PuzzleSelector against a small corpus."""

    def setUp(self):
        self.index = PuzzleIndex.build(GOOD_PUZZLES)
        self.selector = PuzzleSelector(self.index, rng=random.Random(1234))

    def candidate_ids(self, filters):
        return {self.index.get(ref).id for ref in self.selector.candidates(filters)}

    def test_unfiltered_candidates_are_everything(self):
        self.assertEqual(len(self.selector.candidates()), len(GOOD_PUZZLES))

    def test_theme_and_tier_intersection(self):
        filters = SelectionFilters(themes={"opening"}, difficulty_tier="intermediate")
        self.assertEqual(self.candidate_ids(filters), {"qgd", "opengame"})

    def test_multiple_themes_must_all_match(self):
        filters = SelectionFilters(themes={"mateIn1", "endgame"})
        self.assertEqual(self.candidate_ids(filters), {"backrank"})

    def test_rating_window_and_length(self):
        filters = SelectionFilters(rating_center=1000, rating_range=150, length_category="oneMove")
        self.assertEqual(self.candidate_ids(filters), {"fool", "backrank", "promo"})

    def test_unknown_tier_is_ignored(self):
        filters = SelectionFilters(themes={"opening"}, difficulty_tier="grandmaster")
        self.assertEqual(self.candidate_ids(filters), {"fool", "qgd", "ruy", "opengame"})

    def test_exclusion(self):
        filters = SelectionFilters(themes={"mateIn1"}, exclude={"fool"})
        self.assertEqual(self.candidate_ids(filters), {"backrank"})

    def test_select_respects_filters(self):
        filters = SelectionFilters(themes={"opening"})
        for _ in range(20):
            self.assertIn("opening", self.selector.select(filters).theme_keys)

    def test_previous_is_avoided(self):
        filters = SelectionFilters(themes={"mateIn1"})
        previous = None
        for _ in range(20):
            puzzle = self.selector.select(filters, previous=previous)
            self.assertNotEqual(puzzle.id, previous)
            previous = puzzle.id

    def test_previous_allowed_when_only_choice(self):
        filters = SelectionFilters(themes={"fork"})
        self.assertEqual(self.selector.select(filters, previous="knightfork").id, "knightfork")

    def test_miss_falls_back_to_closest_rating(self):
        selector = PuzzleSelector(self.index, rng=random.Random(0), fallback_pool_size=1)
        filters = SelectionFilters(rating_center=1650, rating_range=10, themes={"opening"})
        self.assertEqual(selector.select(filters).id, "knightfork")

    def test_fallback_pool(self):
        filters = SelectionFilters(rating_center=950, rating_range=0)
        for _ in range(20):
            self.assertIn(self.selector.select(filters).id, {"fool", "backrank", "promo", "opengame", "qgd"})

    def test_rating_fallback_avoids_previous(self):
        puzzles = [make_puzzle(f"r{i}", rating=2000 + i) for i in range(5)]
        selector = PuzzleSelector(PuzzleIndex.build(puzzles), rng=random.Random(1))
        filters = SelectionFilters(rating_center=1000, rating_range=50)

        previous = None
        for _ in range(50):
            puzzle = selector.select(filters, previous=previous)
            self.assertNotEqual(puzzle.id, previous)
            previous = puzzle.id

    def test_fallback_without_rating(self):
        puzzle = self.selector.select(SelectionFilters(themes={"zugzwang"}))
        self.assertIn(puzzle, GOOD_PUZZLES)

    def test_fallback_avoids_excluded(self):
        selector = PuzzleSelector(self.index, rng=random.Random(0), fallback_pool_size=1)
        filters = SelectionFilters(rating_center=900, rating_range=0, themes={"zugzwang"}, exclude={"fool"})
        self.assertEqual(selector.select(filters).id, "backrank")

    def test_strict_miss_raises(self):
        with self.assertRaises(PuzzleNotFound):
            self.selector.select(SelectionFilters(themes={"zugzwang"}), strict=True)

    def test_empty_corpus_raises(self):
        selector = PuzzleSelector(PuzzleIndex.build([]))
        with self.assertRaises(PuzzleNotFound):
            selector.select()

    def test_seeded_selection_is_reproducible(self):
        first = PuzzleSelector(self.index, rng=random.Random(99))
        second = PuzzleSelector(self.index, rng=random.Random(99))
        self.assertEqual(
            [first.select().id for _ in range(10)],
            [second.select().id for _ in range(10)],
        )


class IntersectionScenarioTests(unittest.TestCase):
    """Theme and tier filters over a mixed corpus."""

    def test_fork_advanced_returns_only_matches(self):
        puzzles = [
            make_puzzle("fork-1650", rating=1650, themes=("fork", "middlegame")),
            make_puzzle("fork-1800", rating=1800, themes=("fork",)),
            make_puzzle("fork-1990", rating=1990, themes=("Fork", "endgame")),
            make_puzzle("fork-1100", rating=1100, themes=("fork",)),
            make_puzzle("fork-2100", rating=2100, themes=("fork",)),
            make_puzzle("pin-1700", rating=1700, themes=("pin",)),
            make_puzzle("skewer-1900", rating=1900, themes=("skewer",)),
        ]
        index = PuzzleIndex.build(puzzles)
        selector = PuzzleSelector(index, rng=random.Random(7))
        filters = SelectionFilters(themes={"fork"}, difficulty_tier="advanced")

        matching = {index.get(ref).id for ref in selector.candidates(filters)}
        self.assertEqual(matching, {"fork-1650", "fork-1800", "fork-1990"})
        for _ in range(20):
            self.assertIn(selector.select(filters).id, matching)


class SelectBatchTests(unittest.TestCase):
    """Test batch selection."""

    def setUp(self):
        puzzles = [make_puzzle(f"p{i}", rating=1000 + 10 * i, themes=("fork",)) for i in range(10)]
        puzzles += [make_puzzle("pin1", themes=("pin",))]
        self.index = PuzzleIndex.build(puzzles)
        self.selector = PuzzleSelector(self.index, rng=random.Random(5))

    def test_batch_is_distinct(self):
        batch = self.selector.select_batch(6, SelectionFilters(themes={"fork"}))
        self.assertEqual(len(batch), 6)
        self.assertEqual(len({puzzle.id for puzzle in batch}), 6)
        self.assertTrue(all("fork" in puzzle.theme_keys for puzzle in batch))

    def test_batch_stops_when_exhausted(self):
        batch = self.selector.select_batch(5, SelectionFilters(themes={"pin"}))
        self.assertEqual([puzzle.id for puzzle in batch], ["pin1"])

    def test_batch_respects_exclusion(self):
        excluded = {f"p{i}" for i in range(8)}
        batch = self.selector.select_batch(5, SelectionFilters(themes={"fork"}, exclude=excluded))
        self.assertEqual({puzzle.id for puzzle in batch}, {"p8", "p9"})

    def test_batch_with_no_matches(self):
        self.assertEqual(self.selector.select_batch(3, SelectionFilters(themes={"zugzwang"})), [])


if __name__ == "__main__":
    unittest.main()
