#!/usr/bin/env python3
"""
Example configuration file for Chess Puzzle Engine.

Every policy knob lives on the Config dataclass. Settings can be supplied in
three ways, later ones winning:

1. Config defaults
2. PUZZLE_* environment variables (or a .env file next to main.py)
3. Command-line flags

Copy the snippets below into your own scripts, or use them as a reference
for the environment variables.
"""

from chess_puzzle_engine.core.models import Config

# =============================================================================
# Environment Variables
# =============================================================================

# Each Config field maps to PUZZLE_<FIELD_NAME>:
#
#   PUZZLE_INITIAL_RATING=1200      starting rating for the rated ladder
#   PUZZLE_RATING_RANGE=200         selection window around the rating (+/-)
#   PUZZLE_K_FACTOR=32              Elo K-factor
#   PUZZLE_RATING_FLOOR=100         lowest reachable rating
#   PUZZLE_RUSH_DURATION=300        rush budget in seconds
#   PUZZLE_RUSH_PENALTY=5           seconds lost per failed rush puzzle
#   PUZZLE_SURVIVAL_LIVES=3         survival lives
#   PUZZLE_CURATED_SET_SIZE=30      maximum curated set length
#   PUZZLE_FALLBACK_POOL_SIZE=5     closest-rated puzzles picked among on a miss
#   PUZZLE_MAX_UNUSABLE_RETRIES=5   reselections after unusable puzzles
#   PUZZLE_SEED=42                  fixed random seed
#   PUZZLE_SHOW_CORRECTION=true     play the right move after a wrong one
#   PUZZLE_CORPUS_PATH=puzzles.csv  corpus file
#   PUZZLE_VALIDATE_CORPUS=true     replay solution lines while indexing

# =============================================================================
# Preset Configurations
# =============================================================================

# Default settings
DEFAULT_CONFIG = Config()

# Gentle ladder for new players
BEGINNER_CONFIG = Config(
    initial_rating=900,
    rating_range=150,
    k_factor=40,
    survival_lives=5,
)

# Fast-moving ratings and a harsh rush
COMPETITIVE_CONFIG = Config(
    initial_rating=1500,
    k_factor=24,
    rush_penalty=10.0,
    survival_lives=1,
)

# Reproducible runs on a Lichess export, e.g. for demos
DEMO_CONFIG = Config(
    corpus_path="lichess_db_puzzle.csv",
    seed=42,
    curated_set_size=10,
)

# Rush presets (minutes -> seconds)
RUSH_PRESETS = {
    3: 180.0,
    5: 300.0,
    10: 600.0,
}


if __name__ == "__main__":
    config = Config.from_env()
    for key, value in config.to_dict().items():
        print(f"{key:24} {value}")
