#!/usr/bin/env python3
"""
Chess Puzzle Engine - Main Entry Point

Tactical chess puzzle training in the terminal. This wrapper loads a .env file
(for PUZZLE_* settings) and runs the CLI from the chess_puzzle_engine package.

Quick Examples:
    # Rated puzzles from the bundled sample corpus
    python main.py

    # Five minute rush on a Lichess puzzle export
    python main.py --corpus lichess_db_puzzle.csv --mode rush --minutes 5

    # Survival with a harder K-factor set through the environment
    export PUZZLE_K_FACTOR=40
    python main.py --mode survival --lives 5

Installation:
    pip install -e .
    # The Lichess puzzle database is available at https://database.lichess.org/#puzzles
"""

import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Add the project root to the Python path so we can import our package
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from chess_puzzle_engine.cli import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
