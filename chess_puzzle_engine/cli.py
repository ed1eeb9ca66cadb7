"""
Command-line interface for the Chess Puzzle Engine.

This module provides the main entry point and argument parsing for the
terminal puzzle trainer: it loads and indexes a corpus, builds the requested
mode controller and runs the interactive solve loop.
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import Callable, Optional

from rich.console import Console
from rich.logging import RichHandler

from .core.corpus import load_corpus, load_sample_corpus
from .core.errors import CorpusError, InternalConsistencyError, PuzzleNotFound
from .core.index import PuzzleIndex
from .core.models import DIFFICULTY_TIERS, Config
from .core.modes import (
    RUSH_PRESETS,
    CuratedSet,
    ModeController,
    RatedLadder,
    RushMode,
    SurvivalMode,
    ThemedDrill,
)
from .core.rules import ChessRulesAdapter
from .core.selector import PuzzleSelector
from .core.session import PuzzleSession
from .ui.dashboard import Dashboard

MODES = ("rated", "rush", "survival", "themed", "curated")

QUIT_COMMANDS = ("quit", "q", "exit")


def setup_logging(verbose: bool = False) -> None:
    """Route log output to Rich when verbose, otherwise silence it."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if verbose:
        root_logger.addHandler(RichHandler(rich_tracebacks=True, show_path=False))
        root_logger.setLevel(logging.DEBUG)
    else:
        # Keep the board display clean
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.INFO)


setup_logging()
logger = logging.getLogger(__name__)

console = Console()


class PuzzleTrainer:
    """
    Interactive solve loop for one mode run.

    Reads UCI moves and commands from the solver, feeds them to the current
    puzzle session and hands finished sessions back to the mode controller.
    """

    def __init__(
        self,
        controller: ModeController,
        dashboard: Optional[Dashboard] = None,
        read_input: Optional[Callable[[str], str]] = None,
    ):
        self.controller = controller
        self.dashboard = dashboard or Dashboard(console)
        self.read_input = read_input or self.dashboard.console.input

    def run(self) -> None:
        """Play puzzles until the mode finishes or the solver quits."""
        while not self.controller.is_finished:
            session = self.controller.next_session()
            if session is None:
                break
            if not self.play_session(session):
                self.controller.stop()
                break

        self.dashboard.display_summary(self.controller)

    def play_session(self, session: PuzzleSession) -> bool:
        """
        Drive one session to its end.

        Returns:
            False if the solver asked to quit, True otherwise
        """
        hint_square: Optional[str] = None

        while True:
            self.dashboard.display_session(session, self.controller, hint_square)
            raw = self.read_input("Your move (uci, hint, solution, restart, quit): ")
            command = raw.strip().lower()

            if self.controller.is_finished:
                # Rush clock ran out while the solver was thinking
                session.close()
                self.dashboard.display_info("Time is up!", title="Rush")
                return True

            if command in QUIT_COMMANDS:
                session.close()
                return False

            if command == "hint":
                hint_square = session.hint()
                continue

            if command == "restart":
                session.restart()
                hint_square = None
                continue

            if command == "solution":
                fen = session.current_position
                try:
                    moves = session.reveal_solution()
                except InternalConsistencyError as e:
                    self._discard(session, e)
                    return True
                self.dashboard.display_solution(session, moves, fen)
                self._finish(session)
                return True

            try:
                result = session.submit_uci(command)
            except InternalConsistencyError as e:
                self._discard(session, e)
                return True

            self.dashboard.display_move_result(session, result)
            hint_square = None
            if session.is_terminal:
                self.dashboard.display_session(session)
                self._finish(session)
                return True

    def _finish(self, session: PuzzleSession) -> None:
        record = self.controller.complete(session)
        self.dashboard.display_attempt(record)

    def _discard(self, session: PuzzleSession, error: InternalConsistencyError) -> None:
        self.controller.discard(session)
        self.dashboard.display_error(str(error), title="Broken puzzle")


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the command-line argument parser."""
    parser = argparse.ArgumentParser(
        description="♞ Chess Puzzle Engine - Tactical puzzle training in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
🎯 Examples:
  # Rating-adaptive puzzles from the bundled sample corpus
  %(prog)s

  # Five minute rush on a Lichess export
  %(prog)s --corpus lichess_db_puzzle.csv --mode rush --minutes 5

  # Drill forks at intermediate level
  %(prog)s --mode themed --theme fork --difficulty intermediate

  # Corpus overview
  %(prog)s --corpus lichess_db_puzzle.csv --stats

Moves are entered in UCI notation, e.g. e2e4 or e7e8q.
""",
    )

    parser.add_argument("--corpus", help="Puzzle corpus file (.json or Lichess .csv); bundled sample if omitted")
    parser.add_argument("--mode", choices=MODES, default="rated", help="Training mode (default: rated)")
    parser.add_argument("--theme", help="Theme for themed drills, e.g. fork, pin, mateIn2")
    parser.add_argument("--difficulty", choices=list(DIFFICULTY_TIERS), help="Difficulty tier for rush, survival and themed")
    parser.add_argument("--minutes", type=int, choices=sorted(RUSH_PRESETS), help="Rush duration preset")
    parser.add_argument("--lives", type=int, help="Survival lives")
    parser.add_argument("--rating", type=int, help="Starting rating for the rated ladder")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible selection")

    info = parser.add_argument_group("information")
    info.add_argument("--stats", action="store_true", help="Show corpus statistics and exit")
    info.add_argument("--list-themes", action="store_true", help="List indexed themes and exit")

    parser.add_argument("--no-validate", action="store_true", help="Skip replaying solution lines when indexing")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show log output")

    return parser


def build_config(args: argparse.Namespace, base: Optional[Config] = None) -> Config:
    """Overlay command-line flags on an environment-derived config."""
    config = base or Config.from_env()
    if args.corpus:
        config.corpus_path = args.corpus
    if args.seed is not None:
        config.seed = args.seed
    if args.rating is not None:
        config.initial_rating = args.rating
    if args.lives is not None:
        config.survival_lives = args.lives
    if args.no_validate:
        config.validate_corpus = False
    return config


def build_index(config: Config, rules: ChessRulesAdapter) -> PuzzleIndex:
    puzzles = load_corpus(config.corpus_path) if config.corpus_path else load_sample_corpus()
    return PuzzleIndex.build(puzzles, rules=rules if config.validate_corpus else None)


def build_controller(
    args: argparse.Namespace,
    config: Config,
    selector: PuzzleSelector,
    rules: ChessRulesAdapter,
) -> ModeController:
    """Create the mode controller named on the command line."""
    if args.mode == "rush":
        if args.minutes:
            return RushMode.preset(args.minutes, selector, rules, config=config, difficulty_tier=args.difficulty)
        return RushMode(selector, rules, config=config, difficulty_tier=args.difficulty)
    if args.mode == "survival":
        return SurvivalMode(selector, rules, config=config, difficulty_tier=args.difficulty)
    if args.mode == "themed":
        return ThemedDrill(selector, rules, args.theme, config=config, difficulty_tier=args.difficulty)
    if args.mode == "curated":
        return CuratedSet(selector, rules, config=config)
    return RatedLadder(selector, rules, config=config)


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.mode == "themed" and not args.theme:
        parser.error("--mode themed requires --theme")

    setup_logging(args.verbose)
    dashboard = Dashboard(console)

    try:
        config = build_config(args)
        rules = ChessRulesAdapter()
        index = build_index(config, rules)

        if args.stats:
            dashboard.display_corpus_stats(index)
            return 0
        if args.list_themes:
            dashboard.display_themes(index)
            return 0

        selector = PuzzleSelector(index, rng=random.Random(config.seed), fallback_pool_size=config.fallback_pool_size)
        controller = build_controller(args, config, selector, rules)
        PuzzleTrainer(controller, dashboard).run()
        return 0

    except (CorpusError, PuzzleNotFound) as e:
        dashboard.display_error(str(e))
        return 1
    except ValueError as e:
        dashboard.display_error(f"Invalid configuration: {e}")
        return 1
    except (KeyboardInterrupt, EOFError):
        console.print("\n[bold yellow]Interrupted by user[/bold yellow]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
