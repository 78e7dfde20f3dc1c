"""Turn records — the unit of a perfect game.

A turn is one bingo placed on the board. Turns are stored with
camelCase keys so persisted documents and JSON exports stay
readable by the existing collection:

    {"id": 3, "row": 7, "col": 4, "direction": "vertical",
     "bingo": "RETAINS", "score": 74,
     "overlap": {"tile": "T", "index": 2},
     "blanks": {"tile": "S", "indices": [6]}}

``tileBag`` and ``tilesLeft`` only exist during live play and are never
persisted.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

import jsonschema

from perfectscrabble.board import Direction
from perfectscrabble.core.errors import ValidationError

TURNS_PER_GAME = 14

EPHEMERAL_KEYS = ("tileBag", "tilesLeft")

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "game_record.json"
_schema_cache: dict | None = None


class Player(Enum):
    A = "A"
    B = "B"


def player_of(turn_id: int) -> Player:
    """Odd turn ids belong to player A, even ids to player B."""
    return Player.A if turn_id % 2 == 1 else Player.B


@dataclass(frozen=True)
class Overlap:
    """An existing board tile reused at ``index`` within the new word."""

    tile: str
    index: int


@dataclass(frozen=True)
class Blanks:
    """Word indices played with a blank, and the letter the blank represents."""

    tile: str
    indices: tuple[int, ...]


@dataclass(frozen=True)
class Turn:
    """One word placement."""

    id: int
    row: int
    col: int
    direction: Direction
    bingo: str
    score: int
    overlap: Overlap | None = None
    blanks: Blanks | None = None
    # Live play only
    tile_bag: tuple[str, ...] | None = field(default=None, compare=False)
    tiles_left: int | None = field(default=None, compare=False)

    @property
    def player(self) -> Player:
        return player_of(self.id)

    @classmethod
    def from_record(cls, record: dict) -> Turn:
        """Build a Turn from a stored or exported record."""
        try:
            overlap_raw = record.get("overlap")
            blanks_raw = record.get("blanks")
            tile_bag = record.get("tileBag")
            return cls(
                id=int(record["id"]),
                row=int(record["row"]),
                col=int(record["col"]),
                direction=Direction.parse(record["direction"]),
                bingo=str(record["bingo"]).upper(),
                score=int(record.get("score", 0)),
                overlap=Overlap(
                    tile=str(overlap_raw["tile"]).upper(),
                    index=int(overlap_raw["index"]),
                ) if overlap_raw else None,
                blanks=Blanks(
                    tile=str(blanks_raw["tile"]).upper(),
                    indices=tuple(int(i) for i in blanks_raw["indices"]),
                ) if blanks_raw else None,
                tile_bag=tuple(tile_bag) if tile_bag is not None else None,
                tiles_left=record.get("tilesLeft"),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ValidationError(f"Malformed turn record {record!r}: {exc}") from exc

    def to_record(self, include_ephemeral: bool = False) -> dict[str, Any]:
        """Serialize to the stored record shape."""
        record: dict[str, Any] = {
            "id": self.id,
            "row": self.row,
            "col": self.col,
            "direction": self.direction.value,
            "bingo": self.bingo,
            "score": self.score,
            "overlap": (
                {"tile": self.overlap.tile, "index": self.overlap.index}
                if self.overlap else None
            ),
            "blanks": (
                {"tile": self.blanks.tile, "indices": list(self.blanks.indices)}
                if self.blanks else None
            ),
        }
        if include_ephemeral:
            record["tileBag"] = list(self.tile_bag) if self.tile_bag is not None else None
            record["tilesLeft"] = self.tiles_left
        return record


def sort_turns(turns: Iterable[Turn]) -> list[Turn]:
    """Turns in ascending id order. Duplicate ids are rejected."""
    ordered = sorted(turns, key=lambda t: t.id)
    for prev, cur in zip(ordered, ordered[1:]):
        if prev.id == cur.id:
            raise ValidationError(f"Duplicate turn id {cur.id}")
    return ordered


def strip_ephemeral(record: dict) -> dict:
    """Copy of a turn record without the live-play fields."""
    return {k: v for k, v in record.items() if k not in EPHEMERAL_KEYS}


def is_complete(turns: list) -> bool:
    return len(turns) == TURNS_PER_GAME


def load_schema(path: Path = _SCHEMA_PATH) -> dict:
    """Load a JSON Schema file and return as dict."""
    with open(path) as f:
        return json.load(f)


def game_record_schema() -> dict:
    global _schema_cache
    if _schema_cache is None:
        _schema_cache = load_schema()
    return _schema_cache


def validate_game_record(data: Any) -> None:
    """Check ``data`` against the persisted game-record schema.

    Raises ValidationError carrying the schema message on mismatch.
    """
    try:
        jsonschema.validate(data, game_record_schema())
    except jsonschema.ValidationError as e:
        raise ValidationError(e.message) from e

    ids = [t["id"] for t in data["turns"]]
    if ids != list(range(1, TURNS_PER_GAME + 1)):
        raise ValidationError(
            f"Turn ids must run 1..{TURNS_PER_GAME} in order, got {ids}"
        )


def iso_timestamp(ts: datetime | None) -> str | None:
    """ISO-8601 UTC with millisecond precision, e.g. 2025-03-01T18:04:05.123Z."""
    if ts is None:
        return None
    ts = ts.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def turns_from_records(records: Iterable[dict]) -> list[Turn]:
    return [Turn.from_record(r) for r in records]
