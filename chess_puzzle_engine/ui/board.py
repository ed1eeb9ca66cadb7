"""
Chess board rendering for puzzle sessions.

Draws the current puzzle position with Unicode pieces from the solver's side
of the board, highlighting the last move played and, on request, the square
of a hint.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

import chess
from rich.align import Align
from rich.box import ROUNDED
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.models import SessionState
from ..core.session import PuzzleSession


@dataclass
class BoardColors:
    """Color scheme for chess board rendering."""
    white_square: str = "white"
    black_square: str = "grey23"
    white_piece: str = "bright_white"
    black_piece: str = "grey0"
    highlight_last_move: str = "green"
    highlight_hint: str = "yellow"
    border: str = "cyan"
    coordinates: str = "dim white"


STATE_BORDERS = {
    SessionState.PLAYING: "cyan",
    SessionState.SOLVED: "green",
    SessionState.FAILED: "red",
}


class PuzzleBoardRenderer:
    """
    Renders puzzle positions as Rich panels.

    The board is oriented towards the side the solver plays, which is the
    side to move right after the setup move.
    """

    UNICODE_PIECES = {
        chess.PAWN: {"white": "♙", "black": "♟"},
        chess.ROOK: {"white": "♖", "black": "♜"},
        chess.KNIGHT: {"white": "♘", "black": "♞"},
        chess.BISHOP: {"white": "♗", "black": "♝"},
        chess.QUEEN: {"white": "♕", "black": "♛"},
        chess.KING: {"white": "♔", "black": "♚"},
    }

    LETTER_PIECES = {
        chess.PAWN: {"white": "P", "black": "p"},
        chess.ROOK: {"white": "R", "black": "r"},
        chess.KNIGHT: {"white": "N", "black": "n"},
        chess.BISHOP: {"white": "B", "black": "b"},
        chess.QUEEN: {"white": "Q", "black": "q"},
        chess.KING: {"white": "K", "black": "k"},
    }

    def __init__(self, colors: Optional[BoardColors] = None, use_letters: bool = False, show_coordinates: bool = True):
        self.colors = colors or BoardColors()
        self.pieces = self.LETTER_PIECES if use_letters else self.UNICODE_PIECES
        self.show_coordinates = show_coordinates

    def render_session(self, session: PuzzleSession, hint_square: Optional[str] = None) -> Panel:
        """Render a session's current position, oriented for the solver."""
        board = chess.Board(session.current_position)
        last_move = chess.Move.from_uci(session.last_move) if session.last_move else None
        hints = {chess.parse_square(hint_square)} if hint_square else set()

        title = f"Puzzle {session.puzzle.id} ({session.puzzle.rating}) | You play {session.orientation.title()}"
        subtitle = self._status_line(board, session)

        return self.render_board(
            board,
            flip=session.orientation == "black",
            last_move=last_move,
            hint_squares=hints,
            title=title,
            subtitle=subtitle,
            border_style=STATE_BORDERS[session.state],
        )

    def render_board(
        self,
        board: chess.Board,
        flip: bool = False,
        last_move: Optional[chess.Move] = None,
        hint_squares: Optional[Set[chess.Square]] = None,
        title: Optional[str] = None,
        subtitle: Optional[str] = None,
        border_style: Optional[str] = None,
    ) -> Panel:
        """
        Render a chess position as a Rich Panel.

        Args:
            board: Chess position to render
            flip: If True, display from black's perspective
            last_move: Last move to highlight
            hint_squares: Squares to highlight as hints
            title: Panel title
            subtitle: Panel subtitle
            border_style: Border color (theme default if None)

        Returns:
            Rich Panel containing the rendered board
        """
        hint_squares = hint_squares or set()
        move_squares: Set[chess.Square] = set()
        if last_move:
            move_squares = {last_move.from_square, last_move.to_square}

        table = Table.grid(padding=0)
        if self.show_coordinates:
            table.add_column(justify="center", width=2)
        for _ in range(8):
            table.add_column(justify="center", width=3)

        files = "abcdefgh"[::-1] if flip else "abcdefgh"
        ranks = range(1, 9) if flip else range(8, 0, -1)

        for rank in ranks:
            row: List[Text] = []
            if self.show_coordinates:
                row.append(Text(str(rank), style=self.colors.coordinates))
            for file_char in files:
                square = chess.parse_square(f"{file_char}{rank}")
                row.append(self._render_square(board, square, move_squares, hint_squares))
            table.add_row(*row)

        if self.show_coordinates:
            table.add_row(Text("  "), *[Text(f) for f in files], style=self.colors.coordinates)

        return Panel(
            Align.center(table),
            title=title,
            subtitle=subtitle,
            border_style=border_style or self.colors.border,
            box=ROUNDED,
            padding=(0, 1),
        )

    def _render_square(
        self,
        board: chess.Board,
        square: chess.Square,
        move_squares: Set[chess.Square],
        hint_squares: Set[chess.Square],
    ) -> Text:
        """Render a single square with piece and background."""
        piece = board.piece_at(square)
        is_light_square = (chess.square_file(square) + chess.square_rank(square)) % 2 == 1

        if square in hint_squares:
            bg_color = self.colors.highlight_hint
        elif square in move_squares:
            bg_color = self.colors.highlight_last_move
        elif is_light_square:
            bg_color = self.colors.white_square
        else:
            bg_color = self.colors.black_square

        if piece:
            color_key = "white" if piece.color == chess.WHITE else "black"
            piece_char = self.pieces[piece.piece_type][color_key]
            piece_color = self.colors.white_piece if piece.color == chess.WHITE else self.colors.black_piece
        else:
            piece_char = " "
            piece_color = "white"

        return Text(f" {piece_char} ", style=f"{piece_color} on {bg_color}")

    def _status_line(self, board: chess.Board, session: PuzzleSession) -> str:
        if session.state is SessionState.SOLVED:
            return "Solved (revealed)" if session.revealed else "Solved!"
        if session.state is SessionState.FAILED:
            return "Failed"
        parts = [f"{session.remaining_solver_moves} move(s) to find"]
        if board.is_check():
            parts.append("Check!")
        return " | ".join(parts)


def format_line(fen: str, moves: Iterable[str]) -> str:
    """
    Format UCI moves played from a position as numbered SAN, e.g. "1. e4 e5 2. Nf3".

    Moves that cannot be applied are shown in UCI form and end the replay.
    """
    board = chess.Board(fen)
    parts: List[str] = []
    uci_moves = list(moves)

    for i, uci in enumerate(uci_moves):
        move = chess.Move.from_uci(uci)
        if move not in board.legal_moves:
            parts.extend(uci_moves[i:])
            break
        if board.turn == chess.WHITE:
            parts.append(f"{board.fullmove_number}.")
        elif i == 0:
            parts.append(f"{board.fullmove_number}...")
        parts.append(board.san(move))
        board.push(move)

    return " ".join(parts)
