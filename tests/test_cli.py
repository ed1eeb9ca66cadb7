"""
Unit tests for the command-line interface.

The interactive loop is driven with scripted input and a Rich console that
writes to memory.
"""

import io
import random
import unittest

from rich.console import Console

from chess_puzzle_engine.cli import PuzzleTrainer, build_config, build_controller, create_argument_parser, main
from chess_puzzle_engine.core.index import PuzzleIndex
from chess_puzzle_engine.core.models import Config
from chess_puzzle_engine.core.modes import CuratedSet, RatedLadder, RushMode, SurvivalMode, ThemedDrill
from chess_puzzle_engine.core.rules import ChessRulesAdapter
from chess_puzzle_engine.core.selector import PuzzleSelector
from chess_puzzle_engine.ui.dashboard import Dashboard

from tests.fixtures import BROKEN_REPLY, FOOLS_MATE, GOOD_PUZZLES, KNIGHT_FORK


def scripted(*lines):
    """Return an input function that replays lines in order."""
    remaining = list(lines)

    def read(prompt):
        return remaining.pop(0)

    return read


class ArgumentParserTests(unittest.TestCase):
    """Test argument parsing and config overlay."""

    def setUp(self):
        self.parser = create_argument_parser()

    def test_defaults(self):
        args = self.parser.parse_args([])
        self.assertEqual(args.mode, "rated")
        self.assertIsNone(args.corpus)
        self.assertFalse(args.stats)

    def test_rush_minutes_choices(self):
        args = self.parser.parse_args(["--mode", "rush", "--minutes", "5"])
        self.assertEqual(args.minutes, 5)
        with self.assertRaises(SystemExit):
            self.parser.parse_args(["--minutes", "7"])

    def test_build_config_overlays_flags(self):
        args = self.parser.parse_args(["--seed", "3", "--rating", "1600", "--lives", "4", "--no-validate"])
        config = build_config(args, base=Config(k_factor=20))

        self.assertEqual(config.seed, 3)
        self.assertEqual(config.initial_rating, 1600)
        self.assertEqual(config.survival_lives, 4)
        self.assertFalse(config.validate_corpus)
        self.assertEqual(config.k_factor, 20)

    def test_themed_mode_requires_theme(self):
        with self.assertRaises(SystemExit):
            main(["--mode", "themed"])

    def test_build_controller(self):
        rules = ChessRulesAdapter()
        selector = PuzzleSelector(PuzzleIndex.build(GOOD_PUZZLES), rng=random.Random(0))
        expected = {
            "rated": RatedLadder,
            "rush": RushMode,
            "survival": SurvivalMode,
            "curated": CuratedSet,
        }
        for mode, cls in expected.items():
            args = self.parser.parse_args(["--mode", mode])
            self.assertIsInstance(build_controller(args, Config(), selector, rules), cls)

        args = self.parser.parse_args(["--mode", "themed", "--theme", "fork"])
        self.assertIsInstance(build_controller(args, Config(), selector, rules), ThemedDrill)

        args = self.parser.parse_args(["--mode", "rush", "--minutes", "3"])
        self.assertEqual(build_controller(args, Config(), selector, rules).duration, 180.0)


class PuzzleTrainerTests(unittest.TestCase):
    """Test the interactive loop."""

    def setUp(self):
        self.rules = ChessRulesAdapter()
        self.output = io.StringIO()
        self.dashboard = Dashboard(Console(file=self.output, width=120))

    def trainer(self, puzzles, *lines, lives=3):
        selector = PuzzleSelector(PuzzleIndex.build(puzzles), rng=random.Random(0))
        controller = SurvivalMode(selector, self.rules, lives=lives)
        return PuzzleTrainer(controller, self.dashboard, read_input=scripted(*lines))

    def test_solve_then_quit(self):
        trainer = self.trainer([FOOLS_MATE], "hint", "d8h4", "quit")
        trainer.run()

        stats = trainer.controller.stats
        self.assertEqual(stats.solved, 1)
        self.assertEqual(stats.attempted, 1)
        self.assertTrue(trainer.controller.is_finished)
        self.assertIn("Puzzle solved", self.output.getvalue())

    def test_wrong_moves_end_survival(self):
        trainer = self.trainer([FOOLS_MATE], "e7e6", "e7e5", lives=2)
        trainer.run()

        self.assertEqual(trainer.controller.lives, 0)
        self.assertEqual(trainer.controller.stats.failed, 2)
        self.assertIn("Wrong move", self.output.getvalue())

    def test_invalid_input_is_reported(self):
        trainer = self.trainer([FOOLS_MATE], "z9z9", "quit")
        trainer.run()
        self.assertEqual(trainer.controller.stats.attempted, 0)
        self.assertIn("unknown square", self.output.getvalue())

    def test_solution_and_restart(self):
        trainer = self.trainer([KNIGHT_FORK], "e7e8n", "restart", "solution", "quit")
        trainer.run()

        attempts = trainer.controller.stats.attempts
        self.assertEqual(len(attempts), 1)
        self.assertTrue(attempts[0].revealed)
        self.assertFalse(attempts[0].solved)

    def test_broken_puzzle_is_discarded(self):
        trainer = self.trainer([BROKEN_REPLY], "e7e5", "quit")
        trainer.run()

        self.assertEqual(trainer.controller.unusable_ids, {"badreply"})
        self.assertEqual(trainer.controller.stats.attempted, 0)
        self.assertIn("Broken puzzle", self.output.getvalue())

    def test_solution_on_broken_puzzle_is_discarded(self):
        trainer = self.trainer([BROKEN_REPLY], "solution", "quit")
        trainer.run()

        self.assertEqual(trainer.controller.unusable_ids, {"badreply"})
        self.assertEqual(trainer.controller.stats.attempted, 0)
        self.assertIn("Broken puzzle", self.output.getvalue())


class MainTests(unittest.TestCase):
    """Test informational commands end to end."""

    def test_stats_and_themes(self):
        self.assertEqual(main(["--stats"]), 0)
        self.assertEqual(main(["--list-themes"]), 0)

    def test_missing_corpus(self):
        self.assertEqual(main(["--corpus", "does-not-exist.json", "--stats"]), 1)


if __name__ == "__main__":
    unittest.main()
