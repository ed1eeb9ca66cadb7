"""
Terminal dashboard for puzzle runs.

Rich-based panels for the corpus overview, the live status of a mode run and
its final summary.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.index import PuzzleIndex
from ..core.models import AttemptRecord, MoveResult
from ..core.modes import CuratedSet, ModeController, RatedLadder, RushMode, SurvivalMode, ThemedDrill
from ..core.session import PuzzleSession
from .board import PuzzleBoardRenderer, format_line


class Dashboard:
    """
    Rich console front end for puzzle runs.

    Everything is printed, not live-updated: the solver types moves between
    renders, so each turn redraws the board once.
    """

    def __init__(self, console: Optional[Console] = None, renderer: Optional[PuzzleBoardRenderer] = None):
        self.console = console or Console()
        self.renderer = renderer or PuzzleBoardRenderer()

    # ------------------------------------------------------------------
    # Corpus
    # ------------------------------------------------------------------

    def display_corpus_stats(self, index: PuzzleIndex) -> None:
        """Show pool sizes per difficulty, length and rating bucket plus top themes."""
        stats = index.stats()

        tiers = Table(title="Difficulty", show_header=True, header_style="bold cyan")
        tiers.add_column("Tier", style="cyan")
        tiers.add_column("Puzzles", justify="right")
        for tier, count in stats["by_difficulty"].items():
            tiers.add_row(tier, str(count))

        lengths = Table(title="Length", show_header=True, header_style="bold cyan")
        lengths.add_column("Category", style="cyan")
        lengths.add_column("Puzzles", justify="right")
        for category, count in stats["by_length"].items():
            lengths.add_row(category, str(count))

        ratings = Table(title="Rating buckets", show_header=True, header_style="bold cyan")
        ratings.add_column("Bucket", style="cyan", justify="right")
        ratings.add_column("Puzzles", justify="right")
        for bucket, count in stats["by_rating"].items():
            ratings.add_row(f"{bucket}-{bucket + 99}", str(count))

        themes = Table(title="Top themes", show_header=True, header_style="bold cyan")
        themes.add_column("Theme", style="cyan")
        themes.add_column("Puzzles", justify="right")
        for entry in stats["top_themes"]:
            themes.add_row(entry["theme"], str(entry["count"]))

        summary = Text(
            f"{stats['total']} puzzles, {stats['theme_count']} themes, {stats['unusable']} unusable skipped",
            style="dim",
        )
        self.console.print(Panel(
            Group(summary, tiers, lengths, ratings, themes),
            title="📚 Puzzle Corpus",
            border_style="cyan",
            padding=(1, 2),
        ))

    def display_themes(self, index: PuzzleIndex) -> None:
        themes = index.available_themes()
        counts = [f"{theme} ({len(index.by_theme(theme))})" for theme in themes]
        self.console.print(Panel(", ".join(counts) or "No themes", title="🏷️ Themes", border_style="cyan"))

    # ------------------------------------------------------------------
    # Live run
    # ------------------------------------------------------------------

    def display_session(self, session: PuzzleSession, controller: Optional[ModeController] = None,
                        hint_square: Optional[str] = None) -> None:
        """Draw the board and, when given, the mode status line."""
        if controller is not None:
            self.console.print(Text(self.status_line(controller), style="bold"))
        self.console.print(self.renderer.render_session(session, hint_square=hint_square))

    def status_line(self, controller: ModeController) -> str:
        stats = controller.stats
        parts = [f"Mode: {controller.name}", f"Solved {stats.solved}/{stats.attempted}"]

        if isinstance(controller, RatedLadder):
            parts.append(f"Rating {controller.record.rating} (peak {controller.record.peak_rating})")
        elif isinstance(controller, RushMode):
            minutes, seconds = divmod(int(controller.remaining), 60)
            parts.append(f"Time {minutes}:{seconds:02d}")
        elif isinstance(controller, SurvivalMode):
            parts.append("Lives " + "❤️ " * controller.lives)
            parts.append(f"Streak {stats.streak}")
        elif isinstance(controller, ThemedDrill):
            parts.append(f"Theme {controller.theme}")
        elif isinstance(controller, CuratedSet):
            parts.append(f"Puzzle {min(controller.position, controller.total)}/{controller.total}")

        return " | ".join(parts)

    def display_move_result(self, session: PuzzleSession, result: MoveResult) -> None:
        if result.reason:
            self.console.print(Text(f"✗ {result.reason}", style="yellow"))
        elif result.is_failed:
            correct = format_line(self._position_before(session, result), [result.correct_move])
            self.console.print(Text(f"✗ Wrong move. The solution was {correct}", style="red"))
        elif result.is_solved:
            self.console.print(Text("✓ Puzzle solved!", style="bold green"))
        elif result.accepted:
            self.console.print(Text(f"✓ Correct. Opponent replied {result.last_opponent_reply}", style="green"))

    def _position_before(self, session: PuzzleSession, result: MoveResult) -> str:
        """Position in which the correct move was due."""
        # With correction shown, the correct move is already on the board
        if session.show_correction:
            return session.rules.replay(session.puzzle.fen, session.history[:-1])
        return session.current_position

    def display_attempt(self, record: AttemptRecord) -> None:
        outcome = "solved" if record.solved else ("revealed" if record.revealed else "failed")
        style = "green" if record.solved else "red"
        line = f"Puzzle {record.puzzle_id} ({record.puzzle_rating}) {outcome}"
        if record.rating_delta is not None:
            line += f" | rating {record.rating_after} ({record.rating_delta:+d})"
        self.console.print(Text(line, style=style))

    def display_solution(self, session: PuzzleSession, moves: List[str], fen: str) -> None:
        count = session.puzzle.solver_move_count
        self.console.print(Text(f"Solution ({count} to find): {format_line(fen, moves)}", style="cyan"))

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def display_summary(self, controller: ModeController) -> None:
        """Display the final summary of a run."""
        summary = controller.summary()
        stats = controller.stats

        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        for key, value in summary.items():
            if key == "accuracy":
                value = f"{value:.1%}"
            elif isinstance(value, float):
                value = f"{value:.1f}"
            table.add_row(key.replace("_", " ").title(), str(value))

        breakdown = self._theme_table(stats.theme_breakdown())
        self.console.print(Panel(
            Group(table, Text(""), breakdown) if breakdown else table,
            title=f"🎯 {controller.name.title()} Results",
            border_style="green",
            padding=(1, 2),
        ))

    def _theme_table(self, breakdown: Dict[str, tuple]) -> Optional[Table]:
        if not breakdown:
            return None
        table = Table(title="By theme", show_header=True, header_style="bold magenta")
        table.add_column("Theme", style="magenta")
        table.add_column("Solved", justify="right")
        table.add_column("Accuracy", justify="right")
        for theme, (solved, total) in sorted(breakdown.items(), key=lambda item: -item[1][1]):
            table.add_row(theme, f"{solved}/{total}", f"{solved / total:.0%}")
        return table

    def display_error(self, error: str, title: str = "Error") -> None:
        """Display an error message in a formatted panel."""
        self.console.print(Panel(Text(error, style="red"), title=f"❌ {title}", border_style="red", padding=(1, 2)))

    def display_info(self, message: str, title: str = "Info") -> None:
        """Display an info message in a formatted panel."""
        self.console.print(Panel(Text(message, style="blue"), title=f"ℹ️ {title}", border_style="blue", padding=(1, 2)))
