"""
Puzzle session state machine.

A PuzzleSession wraps one puzzle for one solver. Opening it plays the setup
move; each submitted move is checked against the precomputed solution line
and, when correct, the opponent's forced reply is applied in the same call so
the solver never gets two consecutive moves.

States: PLAYING -> SOLVED | FAILED. Every mode (rush, survival, rated ladder,
themed drill, curated set) drives this one class.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .errors import IllegalMoveError, InternalConsistencyError, PuzzleUnusable, SessionClosedError
from .models import MoveResult, Puzzle, SessionState
from .rules import RulesAdapter, is_square_name, split_uci

logger = logging.getLogger(__name__)

_PROMOTION_LETTERS = ("q", "r", "b", "n")


class PuzzleSession:
    """
    One solver's attempt at one puzzle.

    Not thread-safe: callers serialize moves per session, which is natural
    since a single solver interacts with one board at a time.
    """

    def __init__(self, puzzle: Puzzle, rules: RulesAdapter, show_correction: bool = True):
        """
        Initialize the session and play the setup move.

        Prefer PuzzleSession.open(), which reads better at call sites.

        Args:
            puzzle: The puzzle to present
            rules: Rules adapter used to apply every move
            show_correction: Apply the expected move after a wrong submission

        Raises:
            PuzzleUnusable: If the setup move cannot be applied
        """
        self.puzzle = puzzle
        self.rules = rules
        self.show_correction = show_correction
        self._closed = False

        self.current_position: str = puzzle.fen
        self.next_solution_index: int = 0
        self.state: SessionState = SessionState.PLAYING
        self.orientation: str = ""
        self.history: List[str] = []
        self.last_move: Optional[str] = None
        self.revealed: bool = False
        self.mistakes: int = 0

        self._initialize()

    @classmethod
    def open(cls, puzzle: Puzzle, rules: RulesAdapter, show_correction: bool = True) -> PuzzleSession:
        """Open a session on a puzzle. Raises PuzzleUnusable for corrupt puzzles."""
        return cls(puzzle, rules, show_correction=show_correction)

    def _initialize(self) -> None:
        """Reset to the just-opened state: starting position plus the setup move."""
        moves = self.puzzle.moves
        if len(moves) < 2:
            raise PuzzleUnusable(self.puzzle.id, f"Puzzle {self.puzzle.id} has no solver move")

        try:
            position = self.rules.apply_uci(self.puzzle.fen, moves[0])
        except IllegalMoveError as e:
            raise PuzzleUnusable(
                self.puzzle.id,
                f"Puzzle {self.puzzle.id}: setup move {moves[0]} cannot be applied",
            ) from e

        self.current_position = position
        self.next_solution_index = 1
        self.state = SessionState.PLAYING
        self.orientation = self.rules.turn_of(position)
        self.history = [moves[0]]
        self.last_move = moves[0]
        self.revealed = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def solved_by_solver(self) -> bool:
        """True if the solver reached the end of the line without revealing it."""
        return self.state is SessionState.SOLVED and not self.revealed

    @property
    def expected_move(self) -> Optional[str]:
        """The solution move due next, or None at the end of the line."""
        if self.next_solution_index < len(self.puzzle.moves):
            return self.puzzle.moves[self.next_solution_index]
        return None

    @property
    def remaining_solver_moves(self) -> int:
        remaining = len(self.puzzle.moves) - self.next_solution_index
        return (remaining + 1) // 2

    def hint(self) -> Optional[str]:
        """Return the square the expected piece moves from, while playing."""
        if self.state is not SessionState.PLAYING or self.expected_move is None:
            return None
        return self.expected_move[:2]

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def submit_move(self, from_square: str, to_square: str, promotion: Optional[str] = None) -> MoveResult:
        """
        Check a solver move against the solution line.

        Args:
            from_square: Square the piece moves from, e.g. "e7"
            to_square: Square the piece moves to, e.g. "e8"
            promotion: Optional promotion piece letter (q, r, b, n)

        Returns:
            MoveResult. Invalid input is rejected with accepted=False and no
            state change; a wrong move returns accepted=False with state FAILED.

        Raises:
            InternalConsistencyError: If an expected solution move is rejected
        """
        if self._closed:
            return self._reject("session closed")
        if self.state is not SessionState.PLAYING:
            return self._reject(f"session is {self.state.value}")
        if not from_square or not to_square:
            return self._reject("empty square")

        from_square = from_square.strip().lower()
        to_square = to_square.strip().lower()
        if not (is_square_name(from_square) and is_square_name(to_square)):
            return self._reject("unknown square")
        if from_square == to_square:
            return self._reject("from and to squares are equal")

        if promotion:
            promotion = promotion.strip().lower()
            if promotion not in _PROMOTION_LETTERS:
                return self._reject(f"invalid promotion piece '{promotion}'")

        expected = self.expected_move
        if expected is None:
            return self._reject("solution line exhausted")

        attempted = from_square + to_square
        if self.rules.is_promotion(self.current_position, from_square, to_square):
            _, _, expected_piece = split_uci(expected)
            played = attempted + (promotion or expected_piece or "q")
            matched = expected in (attempted, played)
        else:
            played = expected
            matched = attempted == expected[:4]

        if not matched:
            return self._fail(expected)

        self._advance(played)
        if self.next_solution_index >= len(self.puzzle.moves):
            self.state = SessionState.SOLVED
            logger.debug(f"Puzzle {self.puzzle.id} solved")
            return MoveResult(accepted=True, state=self.state)

        reply = self.puzzle.moves[self.next_solution_index]
        self._advance(reply)
        if self.next_solution_index >= len(self.puzzle.moves):
            self.state = SessionState.SOLVED
            logger.debug(f"Puzzle {self.puzzle.id} solved on forced reply {reply}")

        return MoveResult(accepted=True, state=self.state, last_opponent_reply=reply)

    def submit_uci(self, move: str) -> MoveResult:
        """Submit a move in UCI notation, e.g. "e7e8q"."""
        move = (move or "").strip()
        if len(move) < 4:
            return self._reject("malformed move")
        from_square, to_square, promotion = split_uci(move)
        return self.submit_move(from_square, to_square, promotion)

    def reveal_solution(self) -> List[str]:
        """
        Play out the rest of the solution line and force SOLVED.

        Used for "give up" and "show solution". The session is marked as
        revealed so callers do not count it as solved by the solver.

        Returns:
            The moves that were replayed
        """
        self._ensure_open()
        replayed: List[str] = []
        while self.next_solution_index < len(self.puzzle.moves):
            move = self.puzzle.moves[self.next_solution_index]
            self._advance(move)
            replayed.append(move)

        self.state = SessionState.SOLVED
        self.revealed = True
        return replayed

    def restart(self) -> None:
        """Reset the session to its just-opened state on the same puzzle."""
        self._ensure_open()
        self._initialize()

    def close(self) -> None:
        """Mark the session as read by its owner; no further mutation is allowed."""
        self._closed = True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _advance(self, move: str) -> None:
        """Apply a solution move and move the cursor past it."""
        try:
            self.current_position = self.rules.apply_uci(self.current_position, move)
        except IllegalMoveError as e:
            index = self.next_solution_index
            self.state = SessionState.FAILED
            logger.error(f"Puzzle {self.puzzle.id}: solution move {move} at index {index} rejected: {e}")
            raise InternalConsistencyError(self.puzzle.id, move, index) from e

        self.history.append(move)
        self.last_move = move
        self.next_solution_index += 1

    def _fail(self, expected: str) -> MoveResult:
        self.state = SessionState.FAILED
        self.mistakes += 1
        logger.debug(f"Puzzle {self.puzzle.id}: wrong move, expected {expected}")
        if self.show_correction:
            self._advance(expected)
        return MoveResult(accepted=False, state=self.state, correct_move=expected)

    def _reject(self, reason: str) -> MoveResult:
        return MoveResult(accepted=False, state=self.state, reason=reason)

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError(f"Session for puzzle {self.puzzle.id} is closed")
