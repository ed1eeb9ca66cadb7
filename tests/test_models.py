"""
Unit tests for core data models.

Tests bucket and tier helpers, puzzle parsing, selection filters, statistics
accumulation and configuration loading.
"""

import unittest

from chess_puzzle_engine.core.models import (
    AttemptRecord,
    Config,
    ModeStats,
    Puzzle,
    RatingRecord,
    SelectionFilters,
    SessionState,
    difficulty_tier_for,
    length_category_for,
    rating_bucket,
)
from chess_puzzle_engine.core.rating import RatingChange


class HelperTests(unittest.TestCase):
    """Test bucket, tier and length helpers."""

    def test_rating_bucket_clamps(self):
        self.assertEqual(rating_bucket(1234), 1200)
        self.assertEqual(rating_bucket(1299), 1200)
        self.assertEqual(rating_bucket(750), 800)
        self.assertEqual(rating_bucket(2550), 2400)

    def test_difficulty_tier_boundaries(self):
        self.assertIsNone(difficulty_tier_for(799))
        self.assertEqual(difficulty_tier_for(800), "beginner")
        self.assertEqual(difficulty_tier_for(1199), "beginner")
        self.assertEqual(difficulty_tier_for(1200), "intermediate")
        self.assertEqual(difficulty_tier_for(1999), "advanced")
        self.assertEqual(difficulty_tier_for(2400), "expert")
        self.assertIsNone(difficulty_tier_for(2401))

    def test_length_categories(self):
        self.assertIsNone(length_category_for(0))
        self.assertEqual(length_category_for(1), "oneMove")
        self.assertEqual(length_category_for(2), "oneMove")
        self.assertEqual(length_category_for(3), "short")
        self.assertEqual(length_category_for(6), "long")
        self.assertEqual(length_category_for(7), "veryLong")
        self.assertEqual(length_category_for(20), "veryLong")

    def test_session_state_terminal(self):
        self.assertFalse(SessionState.PLAYING.is_terminal)
        self.assertTrue(SessionState.SOLVED.is_terminal)
        self.assertTrue(SessionState.FAILED.is_terminal)


class PuzzleTests(unittest.TestCase):
    """Test Puzzle construction and serialization."""

    def test_from_dict_accepts_space_separated_fields(self):
        puzzle = Puzzle.from_dict({
            "id": "00008",
            "fen": "r6k/pp2r2p/4Rp1Q/3p4/8/1N1P2R1/PqP2bPP/7K b - - 0 24",
            "moves": "f2g3 e6e7 b2b1 b3c1 b1c1 h6c1",
            "rating": "1913",
            "themes": "crushing hangingPiece long middlegame",
        })
        self.assertEqual(puzzle.moves[0], "f2g3")
        self.assertEqual(len(puzzle.moves), 6)
        self.assertEqual(puzzle.rating, 1913)
        self.assertIn("hangingPiece", puzzle.themes)
        self.assertEqual(puzzle.solver_move_count, 3)

    def test_lists_are_stored_as_tuples(self):
        puzzle = Puzzle(id="p1", fen="8/8/8/8/8/8/8/8 w - - 0 1", moves=["a1a2", "a2a3"], rating=1000, themes=["Fork"])
        self.assertIsInstance(puzzle.moves, tuple)
        self.assertIsInstance(puzzle.themes, tuple)
        self.assertEqual(puzzle.theme_keys, frozenset({"fork"}))
        hash(puzzle)

    def test_moves_are_lowercased(self):
        puzzle = Puzzle.from_dict({"id": "p3", "fen": "k7/4P3/8/8/8/8/8/4K3 b - - 0 1", "moves": "a8b7 E7E8Q", "rating": 1100})
        self.assertEqual(puzzle.moves, ("a8b7", "e7e8q"))

    def test_to_dict_round_trip(self):
        puzzle = Puzzle(id="p2", fen="8/8/8/8/8/8/8/8 w - - 0 1", moves=("a1a2",), rating=1500,
                        themes=("pin",), popularity=95, plays=1200)
        data = puzzle.to_dict()
        self.assertEqual(data["popularity"], 95)
        self.assertNotIn("game_url", data)
        self.assertEqual(Puzzle.from_dict(data), puzzle)

    def test_from_dict_requires_id(self):
        with self.assertRaises(KeyError):
            Puzzle.from_dict({"fen": "8/8/8/8/8/8/8/8 w - - 0 1", "moves": "", "rating": 1000})


class SelectionFiltersTests(unittest.TestCase):
    """Test SelectionFilters."""

    def test_defaults_are_unfiltered(self):
        filters = SelectionFilters()
        self.assertTrue(filters.is_unfiltered)
        self.assertEqual(filters.rating_range, 200)

    def test_negative_range_rejected(self):
        with self.assertRaises(ValueError):
            SelectionFilters(rating_center=1500, rating_range=-1)

    def test_excluding_adds_ids(self):
        filters = SelectionFilters(themes={"fork"}, exclude={"a"})
        extended = filters.excluding(["b", "c"])
        self.assertEqual(extended.exclude, frozenset({"a", "b", "c"}))
        self.assertEqual(filters.exclude, frozenset({"a"}))
        self.assertEqual(extended.themes, frozenset({"fork"}))
        self.assertFalse(extended.is_unfiltered)


class StatsTests(unittest.TestCase):
    """Test rating records and mode statistics."""

    def _attempt(self, solved, themes=("fork",)):
        return AttemptRecord(puzzle_id="p", puzzle_rating=1500, themes=themes, solved=solved, mode="test")

    def test_rating_record_peak_only_rises(self):
        record = RatingRecord(rating=1200, peak_rating=1200)
        record.apply(RatingChange(new_rating=1216, delta=16))
        record.apply(RatingChange(new_rating=1190, delta=-26))
        self.assertEqual(record.rating, 1190)
        self.assertEqual(record.peak_rating, 1216)

    def test_streaks(self):
        stats = ModeStats()
        for solved in (True, True, False, True):
            stats.add_attempt(self._attempt(solved))

        self.assertEqual(stats.attempted, 4)
        self.assertEqual(stats.solved, 3)
        self.assertEqual(stats.failed, 1)
        self.assertEqual(stats.streak, 1)
        self.assertEqual(stats.best_streak, 2)
        self.assertAlmostEqual(stats.accuracy, 0.75)

    def test_theme_breakdown(self):
        stats = ModeStats()
        stats.add_attempt(self._attempt(True, ("Fork", "middlegame")))
        stats.add_attempt(self._attempt(False, ("fork",)))
        breakdown = stats.theme_breakdown()
        self.assertEqual(breakdown["fork"], (1, 2))
        self.assertEqual(breakdown["middlegame"], (1, 1))


class ConfigTests(unittest.TestCase):
    """Test Config loading."""

    def test_defaults(self):
        config = Config()
        self.assertEqual(config.k_factor, 32)
        self.assertEqual(config.rating_range, 200)
        self.assertEqual(config.rush_penalty, 5.0)
        self.assertEqual(config.survival_lives, 3)

    def test_from_env_converts_types(self):
        config = Config.from_env(environ={
            "PUZZLE_K_FACTOR": "40",
            "PUZZLE_RUSH_PENALTY": "2.5",
            "PUZZLE_SHOW_CORRECTION": "false",
            "PUZZLE_SEED": "7",
            "PUZZLE_CORPUS_PATH": "puzzles.csv",
            "UNRELATED": "x",
        })
        self.assertEqual(config.k_factor, 40)
        self.assertEqual(config.rush_penalty, 2.5)
        self.assertFalse(config.show_correction)
        self.assertEqual(config.seed, 7)
        self.assertEqual(config.corpus_path, "puzzles.csv")
        self.assertEqual(config.survival_lives, 3)

    def test_dict_round_trip_ignores_unknown_keys(self):
        data = Config(k_factor=20).to_dict()
        data["unknown"] = 1
        self.assertEqual(Config.from_dict(data).k_factor, 20)


if __name__ == "__main__":
    unittest.main()
