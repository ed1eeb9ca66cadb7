"""
Shared puzzle fixtures for the test suite.

Every position and solution line here is legal under python-chess.
"""

from chess_puzzle_engine.core.models import Puzzle

STARTPOS = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

FOOLS_MATE = Puzzle(
    id="fool",
    fen="rnbqkbnr/pppp1ppp/8/4p3/8/5P2/PPPPP1PP/RNBQKBNR w KQkq - 0 2",
    moves=("g2g4", "d8h4"),
    rating=900,
    themes=("mateIn1", "opening"),
)

BACK_RANK = Puzzle(
    id="backrank",
    fen="6k1/p4ppp/8/8/8/8/5PPP/3R2K1 b - - 0 1",
    moves=("a7a6", "d1d8"),
    rating=1000,
    themes=("backRank", "mateIn1", "endgame"),
)

PROMOTION = Puzzle(
    id="promo",
    fen="k7/4P3/8/8/8/8/8/4K3 b - - 0 1",
    moves=("a8b7", "e7e8q"),
    rating=1100,
    themes=("promotion", "endgame"),
)

KNIGHT_FORK = Puzzle(
    id="knightfork",
    fen="8/4P1k1/8/8/8/8/K7/3q4 b - - 0 1",
    moves=("d1d6", "e7e8n", "g7f7", "e8d6"),
    rating=1700,
    themes=("fork", "promotion", "underPromotion"),
)

QGD = Puzzle(
    id="qgd",
    fen=STARTPOS,
    moves=("d2d4", "d7d5", "c2c4", "e7e6", "b1c3", "g8f6"),
    rating=1500,
    themes=("opening",),
)

RUY_LOPEZ = Puzzle(
    id="ruy",
    fen=STARTPOS,
    moves=("e2e4", "e7e5", "g1f3", "b8c6", "f1b5", "a7a6", "b5a4", "g8f6"),
    rating=2100,
    themes=("opening", "long"),
)

OPEN_GAME = Puzzle(
    id="opengame",
    fen=STARTPOS,
    moves=("e2e4", "e7e5", "g1f3"),
    rating=1200,
    themes=("opening",),
)

# The setup move cannot be played
ILLEGAL_SETUP = Puzzle(
    id="badsetup",
    fen=STARTPOS,
    moves=("e2e5", "e7e5"),
    rating=1200,
    themes=("opening",),
)

# The opponent's reply is illegal
BROKEN_REPLY = Puzzle(
    id="badreply",
    fen=STARTPOS,
    moves=("e2e4", "e7e5", "e1e3"),
    rating=1250,
    themes=("opening",),
)

GOOD_PUZZLES = [FOOLS_MATE, BACK_RANK, PROMOTION, KNIGHT_FORK, QGD, RUY_LOPEZ, OPEN_GAME]


def make_puzzle(puzzle_id, rating=1200, themes=("opening",), moves=("e2e4", "e7e5"), fen=STARTPOS):
    """Build a legal two-move puzzle with the given metadata."""
    return Puzzle(id=puzzle_id, fen=fen, moves=tuple(moves), rating=rating, themes=tuple(themes))
