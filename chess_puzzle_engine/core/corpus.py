"""
Puzzle corpus loading.

Reads a static puzzle collection once at startup. Two formats are supported:

- JSON: a list of {id, fen, moves, rating, themes} objects (or an object with a
  "puzzles" list), moves and themes given as lists or space-separated strings.
- Lichess CSV export: PuzzleId,FEN,Moves,Rating,RatingDeviation,Popularity,
  NbPlays,Themes,GameUrl,OpeningTags.

Malformed records are skipped with a warning; only an unreadable file or an
unknown format raises CorpusError.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .errors import CorpusError
from .models import Puzzle

logger = logging.getLogger(__name__)

SAMPLE_CORPUS_PATH = Path(__file__).resolve().parent.parent / "data" / "sample_puzzles.json"

LICHESS_CSV_FIELDS = [
    "PuzzleId", "FEN", "Moves", "Rating", "RatingDeviation",
    "Popularity", "NbPlays", "Themes", "GameUrl", "OpeningTags",
]


def load_corpus(path: Union[str, Path]) -> List[Puzzle]:
    """
    Load a puzzle corpus from a JSON or Lichess CSV file.

    Args:
        path: Path to a .json or .csv file

    Returns:
        List of puzzles in file order

    Raises:
        CorpusError: If the file cannot be read or its format is unsupported
    """
    path = Path(path)
    if not path.exists():
        raise CorpusError(str(path), "file not found")

    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            puzzles = _load_json(path)
        elif suffix == ".csv":
            puzzles = _load_csv(path)
        else:
            raise CorpusError(str(path), f"unsupported corpus format '{suffix}'")
    except OSError as e:
        raise CorpusError(str(path), f"cannot read file: {e}") from e

    logger.info(f"Loaded {len(puzzles)} puzzles from {path}")
    return puzzles


def load_sample_corpus() -> List[Puzzle]:
    """Load the small puzzle collection bundled with the package."""
    return load_corpus(SAMPLE_CORPUS_PATH)


def puzzles_from_records(records: Iterable[Dict[str, Any]], source: str = "<records>") -> List[Puzzle]:
    """Convert raw dictionaries to puzzles, skipping malformed ones."""
    puzzles: List[Puzzle] = []
    for number, record in enumerate(records, start=1):
        puzzle = _parse_record(record, source, number)
        if puzzle is not None:
            puzzles.append(puzzle)
    return puzzles


def _load_json(path: Path) -> List[Puzzle]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CorpusError(str(path), f"invalid JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("puzzles")
    if not isinstance(data, list):
        raise CorpusError(str(path), "JSON corpus must be a list of puzzles")

    return puzzles_from_records(data, source=str(path))


def _load_csv(path: Path) -> List[Puzzle]:
    puzzles: List[Puzzle] = []
    with open(path, newline="", encoding="utf-8") as f:
        first_line = f.readline()
        f.seek(0)
        has_header = first_line.startswith("PuzzleId")
        reader = csv.DictReader(f, fieldnames=None if has_header else LICHESS_CSV_FIELDS)

        for row in reader:
            line = reader.line_num
            record = {
                "id": row.get("PuzzleId"),
                "fen": row.get("FEN"),
                "moves": row.get("Moves") or "",
                "rating": row.get("Rating"),
                "themes": row.get("Themes") or "",
                "popularity": _optional_int(row.get("Popularity")),
                "plays": _optional_int(row.get("NbPlays")),
                "game_url": row.get("GameUrl") or None,
                "opening_tags": row.get("OpeningTags") or "",
            }
            puzzle = _parse_record(record, str(path), line)
            if puzzle is not None:
                puzzles.append(puzzle)

    return puzzles


def _parse_record(record: Any, source: str, number: int) -> Optional[Puzzle]:
    if not isinstance(record, dict):
        logger.warning(f"{source}:{number}: skipping non-object puzzle record")
        return None

    if not record.get("id") or not record.get("fen"):
        logger.warning(f"{source}:{number}: skipping puzzle without id or fen")
        return None

    try:
        return Puzzle.from_dict(record)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"{source}:{number}: skipping malformed puzzle {record.get('id')}: {e}")
        return None


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None
