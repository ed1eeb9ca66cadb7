"""
Chess rules adapter for the Chess Puzzle Engine.

The engine never generates legal moves itself. It consumes a small capability
interface: apply a move to a position (or reject it) and report whose turn it
is. ChessRulesAdapter implements that interface on top of python-chess, with
positions represented as FEN strings so they stay immutable and hashable.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Tuple

import chess

from .errors import IllegalMoveError

logger = logging.getLogger(__name__)

WHITE = "white"
BLACK = "black"

_PROMOTION_PIECES = {
    "q": chess.QUEEN,
    "r": chess.ROOK,
    "b": chess.BISHOP,
    "n": chess.KNIGHT,
}


def split_uci(move: str) -> Tuple[str, str, Optional[str]]:
    """Split a UCI move string into (from, to, promotion)."""
    move = move.strip()
    promotion = move[4].lower() if len(move) > 4 else None
    return move[:2], move[2:4], promotion


def is_square_name(square: str) -> bool:
    """True if the string names a board square, e.g. 'e4'."""
    return square in chess.SQUARE_NAMES


class RulesAdapter(ABC):
    """Capability interface consumed by puzzle sessions and the corpus index."""

    @abstractmethod
    def apply_move(self, position: str, from_square: str, to_square: str,
                   promotion: Optional[str] = None) -> str:
        """
        Apply a move to a position.

        Returns:
            The resulting position

        Raises:
            IllegalMoveError: If the move cannot be applied
        """

    @abstractmethod
    def turn_of(self, position: str) -> str:
        """Return the side to move in a position ("white" or "black")."""

    @abstractmethod
    def is_promotion(self, position: str, from_square: str, to_square: str) -> bool:
        """True if the piece on from_square is a pawn moving to its last rank."""

    def apply_uci(self, position: str, move: str) -> str:
        """Apply a move given in UCI notation."""
        from_square, to_square, promotion = split_uci(move)
        return self.apply_move(position, from_square, to_square, promotion)

    def replay(self, position: str, moves: Iterable[str]) -> str:
        """Apply a sequence of UCI moves, returning the final position."""
        for move in moves:
            position = self.apply_uci(position, move)
        return position


class ChessRulesAdapter(RulesAdapter):
    """
    Rules adapter backed by python-chess.

    Positions are FEN strings. Every call parses a fresh chess.Board, so a
    single adapter instance can be shared by any number of sessions.
    """

    def _board(self, position: str) -> chess.Board:
        try:
            return chess.Board(position)
        except ValueError as e:
            raise IllegalMoveError(position, "", f"Invalid FEN: {position} - {e}") from e

    def apply_move(self, position: str, from_square: str, to_square: str,
                   promotion: Optional[str] = None) -> str:
        board = self._board(position)
        uci = f"{from_square}{to_square}{promotion or ''}"

        try:
            move = chess.Move(
                chess.parse_square(from_square),
                chess.parse_square(to_square),
                promotion=_PROMOTION_PIECES[promotion.lower()] if promotion else None,
            )
        except (ValueError, KeyError) as e:
            raise IllegalMoveError(position, uci, f"Malformed move {uci}: {e}") from e

        if move not in board.legal_moves:
            logger.debug(f"Rejected move {uci} in position {position}")
            raise IllegalMoveError(position, uci)

        board.push(move)
        return board.fen()

    def turn_of(self, position: str) -> str:
        board = self._board(position)
        return WHITE if board.turn == chess.WHITE else BLACK

    def is_promotion(self, position: str, from_square: str, to_square: str) -> bool:
        if not (is_square_name(from_square) and is_square_name(to_square)):
            return False

        board = self._board(position)
        piece = board.piece_at(chess.parse_square(from_square))
        if piece is None or piece.piece_type != chess.PAWN:
            return False

        last_rank = 7 if piece.color == chess.WHITE else 0
        return chess.square_rank(chess.parse_square(to_square)) == last_rank
