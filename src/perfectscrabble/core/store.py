"""GameStore — the perfect-game collection in MongoDB.

Games are written once (by the write endpoint) and read two ways:
newest-first pages with a start-after cursor, or a full unordered scan.
pymongo errors are wrapped in ExternalServiceError at this seam.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from perfectscrabble.core.errors import ExternalServiceError, ValidationError
from perfectscrabble.turns import Turn, sort_turns, turns_from_records

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "perfect-scrabble-games"
DEFAULT_DB_NAME = "perfectscrabble"

# Newest first; _id breaks ties between identical timestamps
_RECENCY_SORT = [("timestamp", DESCENDING), ("_id", DESCENDING)]


def get_db(uri: str | None = None, db_name: str = DEFAULT_DB_NAME):
    """Connect and return a pymongo Database handle.

    Falls back to PSG_MONGO_URI env var if no uri provided.
    """
    from pymongo import MongoClient

    if uri is None:
        uri = os.environ.get("PSG_MONGO_URI")
    if not uri:
        raise ValueError("No MongoDB URI provided and PSG_MONGO_URI not set")
    client = MongoClient(uri)
    return client[db_name]


@dataclass(frozen=True)
class StoredGame:
    """A persisted game as read back from the store."""

    id: str
    turns: list[Turn]
    timestamp: datetime | None


@dataclass(frozen=True)
class PageCursor:
    """Opaque position of the last record on a page."""

    timestamp: Any
    doc_id: Any


@dataclass(frozen=True)
class Page:
    games: list[StoredGame]
    cursor: PageCursor | None
    has_more: bool


def to_datetime(value: Any) -> datetime | None:
    """Coerce a stored timestamp (datetime or ISO string) to an aware datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    if dt.tzinfo is None:
        # BSON datetimes come back naive UTC
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def game_from_doc(doc: dict) -> StoredGame:
    try:
        return StoredGame(
            id=str(doc["_id"]),
            turns=sort_turns(turns_from_records(doc.get("turns") or [])),
            timestamp=to_datetime(doc.get("timestamp")),
        )
    except (KeyError, ValueError) as exc:
        raise ValidationError(f"Malformed game document: {exc}") from exc


class GameStore:
    """Reads and writes the perfect-game collection.

    Takes a pymongo Database (see ``get_db``). Index creation is attempted
    once on construction; failure is logged, not raised.
    """

    def __init__(
        self,
        db,
        collection: str = DEFAULT_COLLECTION,
        *,
        ensure_indexes: bool = True,
    ) -> None:
        self._db = db
        self._collection_name = collection
        if ensure_indexes:
            self._ensure_indexes()

    @property
    def collection_name(self) -> str:
        return self._collection_name

    @property
    def _games(self):
        return self._db[self._collection_name]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def recent_page(self, limit: int, after: PageCursor | None = None) -> Page:
        """One page of games, newest first, strictly after ``after``.

        ``has_more`` is False once a page comes back short.
        """
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        query: dict = {}
        if after is not None:
            query = {
                "$or": [
                    {"timestamp": {"$lt": after.timestamp}},
                    {"timestamp": after.timestamp, "_id": {"$lt": after.doc_id}},
                ]
            }

        try:
            docs = list(self._games.find(query).sort(_RECENCY_SORT).limit(limit))
        except PyMongoError as exc:
            raise ExternalServiceError(f"Failed to read games page: {exc}") from exc

        has_more = len(docs) == limit
        cursor = None
        if docs:
            last = docs[-1]
            cursor = PageCursor(timestamp=last.get("timestamp"), doc_id=last["_id"])

        return Page(games=self._parse_docs(docs), cursor=cursor, has_more=has_more)

    def all_games(self) -> list[StoredGame]:
        """Every game in the collection, in retrieval order."""
        try:
            docs = list(self._games.find({}))
        except PyMongoError as exc:
            raise ExternalServiceError(f"Failed to read games: {exc}") from exc
        return self._parse_docs(docs)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert_game(
        self,
        data: dict,
        user_id: str,
        timestamp: datetime | None = None,
    ) -> str:
        """Append a game document and return its id.

        The server timestamp replaces any timestamp in ``data``.
        """
        doc = {
            "userId": user_id,
            **data,
            "timestamp": timestamp or datetime.now(timezone.utc),
        }
        try:
            result = self._games.insert_one(doc)
        except PyMongoError as exc:
            raise ExternalServiceError(f"Failed to insert game: {exc}") from exc
        return str(result.inserted_id)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _parse_docs(self, docs: list[dict]) -> list[StoredGame]:
        games: list[StoredGame] = []
        for doc in docs:
            try:
                games.append(game_from_doc(doc))
            except ValidationError as exc:
                logger.warning("Skipping game %s: %s", doc.get("_id"), exc)
        return games

    def _ensure_indexes(self) -> None:
        try:
            self._games.create_index(_RECENCY_SORT)
            self._games.create_index("userId")
        except PyMongoError as exc:
            logger.warning("Failed to create indexes: %s", exc)
