"""JSON export of the whole game collection."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterable

from perfectscrabble.core.errors import ExportError, ScrabbleError
from perfectscrabble.core.store import GameStore, StoredGame
from perfectscrabble.turns import iso_timestamp

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "perfect-scrabble-games"


def export_filename(day: date) -> str:
    return f"{EXPORT_PREFIX}-{day.isoformat()}.json"


def game_to_export(game: StoredGame) -> dict:
    return {
        "id": game.id,
        "turns": [t.to_record() for t in game.turns],
        "timestamp": iso_timestamp(game.timestamp),
    }


def encode_games(games: Iterable[StoredGame]) -> str:
    """Pretty-printed JSON array of {id, turns, timestamp}."""
    return json.dumps([game_to_export(g) for g in games], indent=2)


def export_collection(
    store: GameStore,
    directory: Path | str,
    today: date | None = None,
) -> Path:
    """Read every stored game and write the export file into ``directory``.

    Returns the written path. Raises ExportError on any failure.
    """
    today = today or datetime.now(timezone.utc).date()
    path = Path(directory) / export_filename(today)
    try:
        games = store.all_games()
        payload = encode_games(games)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload + "\n")
    except (ScrabbleError, OSError) as exc:
        logger.error("Error exporting games: %s", exc)
        raise ExportError("Failed to export games. Please try again.") from exc

    logger.info("Exported %d games to %s", len(games), path)
    return path
