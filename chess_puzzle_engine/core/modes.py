"""
Mode controllers.

Each controller wraps a sequence of puzzle sessions and decides when to open
the next one and when the run is over. All of them drive the same
PuzzleSession state machine; only the continuation policy differs:

- RatedLadder: re-centers selection on the solver's rating after each attempt
- RushMode: fixed time budget, wrong answers cost seconds
- SurvivalMode: fixed number of lives, wrong answers cost a life
- ThemedDrill: a single theme (plus optional tier) for the whole run
- CuratedSet: a shuffled list assembled up front from per-theme quotas
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from . import rating as rating_rules
from .errors import InternalConsistencyError, PuzzleEngineError, PuzzleNotFound, PuzzleUnusable
from .models import AttemptRecord, Config, ModeStats, Puzzle, RatingRecord, SelectionFilters
from .rules import RulesAdapter
from .selector import PuzzleSelector
from .session import PuzzleSession

logger = logging.getLogger(__name__)

RUSH_PRESETS: Dict[int, float] = {3: 180.0, 5: 300.0, 10: 600.0}

DEFAULT_CURATED_PLAN: Tuple[Tuple[str, int], ...] = (
    ("mateIn1", 6),
    ("fork", 6),
    ("pin", 6),
    ("backRank", 6),
    ("hangingPiece", 6),
)


class ModeController:
    """
    Base class for every puzzle mode.

    A typical run looks like:

        while not controller.is_finished:
            session = controller.next_session()
            if session is None:
                break
            ... feed solver moves into session ...
            controller.complete(session)
    """

    name = "free"

    def __init__(self, selector: PuzzleSelector, rules: RulesAdapter, config: Optional[Config] = None):
        """
        Initialize the controller.

        Args:
            selector: Puzzle selector over the shared corpus index
            rules: Rules adapter handed to every session
            config: Engine configuration (defaults if None)
        """
        self.selector = selector
        self.rules = rules
        self.config = config or Config()
        self.stats = ModeStats()
        self.previous_id: Optional[str] = None
        self.unusable_ids: Set[str] = set()
        self.current: Optional[PuzzleSession] = None
        self._stopped = False

    # ------------------------------------------------------------------
    # Policy hooks
    # ------------------------------------------------------------------

    def filters(self) -> SelectionFilters:
        """Filters for the next selection."""
        return SelectionFilters()

    def _after_attempt(self, session: PuzzleSession, record: AttemptRecord) -> None:
        """Apply mode policy to a finished attempt."""

    @property
    def is_finished(self) -> bool:
        return self._stopped

    @property
    def unusable_retry_limit(self) -> int:
        return self.config.max_unusable_retries

    # ------------------------------------------------------------------
    # Run control
    # ------------------------------------------------------------------

    def next_session(self) -> Optional[PuzzleSession]:
        """
        Select the next puzzle and open a session on it.

        Puzzles that turn out to be unusable are excluded for the rest of the
        run and another one is selected, up to unusable_retry_limit times.

        Returns:
            The new session, or None if the run is finished

        Raises:
            PuzzleNotFound: If the corpus is empty or every retry hit an unusable puzzle
        """
        if self.is_finished:
            return None

        for _ in range(self.unusable_retry_limit + 1):
            puzzle = self._select()
            if puzzle is None:
                self.stop()
                return None

            try:
                session = PuzzleSession.open(puzzle, self.rules, show_correction=self.config.show_correction)
            except PuzzleUnusable as e:
                logger.warning(f"Skipping unusable puzzle {puzzle.id}: {e}")
                self.unusable_ids.add(puzzle.id)
                continue

            self.previous_id = puzzle.id
            self.current = session
            return session

        raise PuzzleNotFound(f"Gave up after {self.unusable_retry_limit} unusable puzzles")

    def _select(self) -> Optional[Puzzle]:
        return self.selector.select(self.filters().excluding(self.unusable_ids), previous=self.previous_id)

    def complete(self, session: PuzzleSession) -> AttemptRecord:
        """
        Record the terminal outcome of a session and close it.

        A puzzle whose solution was revealed counts as not solved.

        Raises:
            PuzzleEngineError: If the session is still being played
        """
        if not session.is_terminal:
            raise PuzzleEngineError(f"Session for puzzle {session.puzzle.id} is still playing")

        record = AttemptRecord(
            puzzle_id=session.puzzle.id,
            puzzle_rating=session.puzzle.rating,
            themes=session.puzzle.themes,
            solved=session.solved_by_solver,
            mode=self.name,
            revealed=session.revealed,
        )
        session.close()
        if self.current is session:
            self.current = None

        self._after_attempt(session, record)
        self.stats.add_attempt(record)
        logger.debug(f"{self.name}: puzzle {record.puzzle_id} {'solved' if record.solved else 'failed'}")
        return record

    def give_up(self, session: PuzzleSession) -> Optional[AttemptRecord]:
        """
        Reveal the rest of the solution and record the puzzle as unsolved.

        Returns:
            The attempt record, or None if the solution line turned out to be
            broken and the session was discarded instead
        """
        if not session.closed:
            try:
                session.reveal_solution()
            except InternalConsistencyError:
                self.discard(session)
                return None
        return self.complete(session)

    def discard(self, session: PuzzleSession) -> None:
        """
        Drop a session whose solution line turned out to be broken mid-play.

        The puzzle is excluded for the rest of the run and no attempt is recorded.
        """
        self.unusable_ids.add(session.puzzle.id)
        session.close()
        if self.current is session:
            self.current = None
        logger.warning(f"Discarded puzzle {session.puzzle.id} with an inconsistent solution line")

    def stop(self) -> None:
        """End the run early."""
        self._stopped = True

    def summary(self) -> Dict[str, object]:
        return {
            "mode": self.name,
            "attempted": self.stats.attempted,
            "solved": self.stats.solved,
            "failed": self.stats.failed,
            "accuracy": self.stats.accuracy,
            "best_streak": self.stats.best_streak,
        }


class RatedLadder(ModeController):
    """Rating-adaptive mode: every attempt updates the solver's rating."""

    name = "rated"

    def __init__(
        self,
        selector: PuzzleSelector,
        rules: RulesAdapter,
        config: Optional[Config] = None,
        record: Optional[RatingRecord] = None,
    ):
        super().__init__(selector, rules, config)
        self.record = record or RatingRecord(self.config.initial_rating, self.config.initial_rating)

    def filters(self) -> SelectionFilters:
        return SelectionFilters(rating_center=self.record.rating, rating_range=self.config.rating_range)

    def _after_attempt(self, session: PuzzleSession, record: AttemptRecord) -> None:
        change = rating_rules.update(
            self.record.rating,
            session.puzzle.rating,
            record.solved,
            k_factor=self.config.k_factor,
            floor=self.config.rating_floor,
        )
        record.rating_before = self.record.rating
        record.rating_after = change.new_rating
        record.rating_delta = change.delta
        self.record.apply(change)
        logger.info(f"Rating {record.rating_before} -> {change.new_rating} ({change.delta:+d})")

    def summary(self) -> Dict[str, object]:
        data = super().summary()
        data.update(rating=self.record.rating, peak_rating=self.record.peak_rating)
        return data


class RushMode(ModeController):
    """
    Timed mode: solve as many puzzles as possible before the clock runs out.

    The clock starts when the first session is opened. Each failed puzzle
    subtracts the configured penalty from the remaining time.
    """

    name = "rush"

    def __init__(
        self,
        selector: PuzzleSelector,
        rules: RulesAdapter,
        config: Optional[Config] = None,
        difficulty_tier: Optional[str] = None,
        duration: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(selector, rules, config)
        self.difficulty_tier = difficulty_tier
        self.duration = self.config.rush_duration if duration is None else duration
        self.penalty = self.config.rush_penalty
        self.clock = clock
        self.penalties = 0.0
        self._started_at: Optional[float] = None

    @classmethod
    def preset(cls, minutes: int, selector: PuzzleSelector, rules: RulesAdapter, **kwargs) -> RushMode:
        """Create a rush run with one of the 3, 5 or 10 minute presets."""
        if minutes not in RUSH_PRESETS:
            raise ValueError(f"No rush preset for {minutes} minutes, choose from {sorted(RUSH_PRESETS)}")
        return cls(selector, rules, duration=RUSH_PRESETS[minutes], **kwargs)

    @property
    def remaining(self) -> float:
        """Seconds left in the run, never negative."""
        if self._started_at is None:
            return max(0.0, self.duration - self.penalties)
        elapsed = self.clock() - self._started_at
        return max(0.0, self.duration - elapsed - self.penalties)

    @property
    def is_finished(self) -> bool:
        return self._stopped or self.remaining <= 0

    def filters(self) -> SelectionFilters:
        return SelectionFilters(difficulty_tier=self.difficulty_tier)

    def next_session(self) -> Optional[PuzzleSession]:
        if self._started_at is None and not self._stopped:
            self._started_at = self.clock()
        return super().next_session()

    def _after_attempt(self, session: PuzzleSession, record: AttemptRecord) -> None:
        if not record.solved:
            self.penalties += self.penalty
            logger.debug(f"Rush penalty applied, {self.remaining:.1f}s remaining")

    def summary(self) -> Dict[str, object]:
        data = super().summary()
        data.update(score=self.stats.solved, remaining=self.remaining)
        return data


class SurvivalMode(ModeController):
    """Lives-based mode: the run ends when every life is lost."""

    name = "survival"

    def __init__(
        self,
        selector: PuzzleSelector,
        rules: RulesAdapter,
        config: Optional[Config] = None,
        difficulty_tier: Optional[str] = None,
        lives: Optional[int] = None,
    ):
        super().__init__(selector, rules, config)
        self.difficulty_tier = difficulty_tier
        self.lives = self.config.survival_lives if lives is None else lives
        if self.lives < 1:
            raise ValueError("Survival needs at least one life")

    @property
    def is_finished(self) -> bool:
        return self._stopped or self.lives <= 0

    def filters(self) -> SelectionFilters:
        return SelectionFilters(difficulty_tier=self.difficulty_tier)

    def _after_attempt(self, session: PuzzleSession, record: AttemptRecord) -> None:
        if not record.solved:
            self.lives -= 1
            logger.debug(f"Survival life lost, {self.lives} remaining")

    def summary(self) -> Dict[str, object]:
        data = super().summary()
        data.update(lives=self.lives, streak=self.stats.streak)
        return data


class ThemedDrill(ModeController):
    """Practice a single theme, optionally within one difficulty tier."""

    name = "themed"

    def __init__(
        self,
        selector: PuzzleSelector,
        rules: RulesAdapter,
        theme: str,
        config: Optional[Config] = None,
        difficulty_tier: Optional[str] = None,
    ):
        super().__init__(selector, rules, config)
        resolved = selector.index.resolve_theme(theme)
        if resolved is None:
            raise PuzzleNotFound(f"No puzzles for theme '{theme}'")
        if resolved != theme.lower():
            logger.info(f"Theme '{theme}' resolved to '{resolved}'")
        self.theme = resolved
        self.difficulty_tier = difficulty_tier

    def filters(self) -> SelectionFilters:
        return SelectionFilters(themes=frozenset([self.theme]), difficulty_tier=self.difficulty_tier)


class CuratedSet(ModeController):
    """
    A fixed, shuffled set of puzzles built from per-theme quotas.

    The set is assembled once at construction and iterated exactly once.
    Unusable puzzles are skipped rather than replaced.
    """

    name = "curated"

    def __init__(
        self,
        selector: PuzzleSelector,
        rules: RulesAdapter,
        config: Optional[Config] = None,
        plan: Sequence[Tuple[str, int]] = DEFAULT_CURATED_PLAN,
    ):
        super().__init__(selector, rules, config)
        self.plan = list(plan)
        self.puzzles = self._assemble()
        self.position = 0

    def _assemble(self) -> List[Puzzle]:
        chosen: List[Puzzle] = []
        used: Set[str] = set()

        for theme, count in self.plan:
            resolved = self.selector.index.resolve_theme(theme)
            if resolved is None:
                logger.warning(f"Curated plan theme '{theme}' has no puzzles, skipping")
                continue

            batch = self.selector.select_batch(count, SelectionFilters(themes=frozenset([resolved]), exclude=used))
            if len(batch) < count:
                logger.info(f"Theme '{resolved}' supplied {len(batch)}/{count} puzzles")
            for puzzle in batch:
                used.add(puzzle.id)
                chosen.append(puzzle)

        self.selector.rng.shuffle(chosen)
        chosen = chosen[: self.config.curated_set_size]
        logger.info(f"Curated set assembled with {len(chosen)} puzzles")
        return chosen

    @property
    def total(self) -> int:
        return len(self.puzzles)

    @property
    def is_finished(self) -> bool:
        return self._stopped or self.position >= len(self.puzzles)

    @property
    def unusable_retry_limit(self) -> int:
        # Every remaining puzzle may be tried before the set counts as exhausted
        return len(self.puzzles)

    def _select(self) -> Optional[Puzzle]:
        while self.position < len(self.puzzles):
            puzzle = self.puzzles[self.position]
            self.position += 1
            if puzzle.id not in self.unusable_ids:
                return puzzle
        return None

    def summary(self) -> Dict[str, object]:
        data = super().summary()
        data.update(total=self.total)
        return data
