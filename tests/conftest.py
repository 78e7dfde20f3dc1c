"""Shared test fixtures for perfectscrabble."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from perfectscrabble.board import Direction
from perfectscrabble.turns import Blanks, Overlap, Turn


# ------------------------------------------------------------------
# In-memory stand-in for the pymongo collection API used by GameStore
# ------------------------------------------------------------------


def _matches(doc: dict, query: dict) -> bool:
    for key, cond in query.items():
        if key == "$or":
            if not any(_matches(doc, sub) for sub in cond):
                return False
        elif isinstance(cond, dict):
            for op, value in cond.items():
                if op == "$lt" and not doc.get(key) < value:
                    return False
        elif doc.get(key) != cond:
            return False
    return True


class FakeCursor:
    def __init__(self, docs):
        self._docs = list(docs)

    def sort(self, keys):
        # Stable sorts applied least-significant key first
        for key, direction in reversed(keys):
            self._docs.sort(key=lambda d: d[key], reverse=direction < 0)
        return self

    def limit(self, n):
        self._docs = self._docs[:n]
        return self

    def __iter__(self):
        return iter(self._docs)


class FakeCollection:
    def __init__(self):
        self.docs: list[dict] = []
        self.find_calls: list[dict] = []
        self.indexes: list = []
        self._next_id = 0

    def insert_one(self, doc):
        doc = dict(doc)
        if "_id" not in doc:
            self._next_id += 1
            doc["_id"] = self._next_id
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    def find(self, query=None):
        query = query or {}
        self.find_calls.append(query)
        return FakeCursor(d for d in self.docs if _matches(d, query))

    def create_index(self, keys, **kwargs):
        self.indexes.append(keys)
        return "idx"


class FakeDB(dict):
    def __getitem__(self, name):
        return self.setdefault(name, FakeCollection())


@pytest.fixture
def fake_db():
    return FakeDB()


# ------------------------------------------------------------------
# Turn and game builders
# ------------------------------------------------------------------


def _build_turn(
    id: int,
    row: int = 7,
    col: int = 7,
    direction: Direction = Direction.HORIZONTAL,
    bingo: str = "CAT",
    score: int = 10,
    overlap: Overlap | None = None,
    blanks: Blanks | None = None,
    **kwargs,
) -> Turn:
    return Turn(
        id=id, row=row, col=col, direction=direction, bingo=bingo,
        score=score, overlap=overlap, blanks=blanks, **kwargs,
    )


def _build_perfect_game(scores: list[int] | None = None) -> list[Turn]:
    """14 non-conflicting turns, one per row."""
    scores = scores or [60 + i for i in range(14)]
    return [
        _build_turn(i + 1, row=i, col=0, bingo="RETAINS", score=scores[i],
                    tile_bag=("A", "B"), tiles_left=2)
        for i in range(14)
    ]


def _build_game_doc(turn_scores: list[int], timestamp: datetime, **extra) -> dict:
    """A stored game document with one turn per score."""
    turns = [
        {"id": i + 1, "row": i, "col": 0, "direction": "horizontal",
         "bingo": "RETAINS", "score": s, "overlap": None, "blanks": None}
        for i, s in enumerate(turn_scores)
    ]
    doc = {"userId": "user-1", "turns": turns, "timestamp": timestamp}
    doc.update(extra)
    return doc


BASE_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _seed_games(collection: FakeCollection, count: int) -> None:
    """Insert ``count`` games, one minute apart, scores rising with age."""
    for i in range(count):
        collection.insert_one(_build_game_doc([i], BASE_TIME + timedelta(minutes=i)))


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def make_turn():
    """Factory: make_turn(id, row=7, col=7, direction=..., bingo="CAT", ...)."""
    return _build_turn


@pytest.fixture
def perfect_game():
    """Factory: perfect_game(scores=None) -> 14 turns."""
    return _build_perfect_game


@pytest.fixture
def game_doc():
    """Factory: game_doc(turn_scores, timestamp, **extra) -> stored document."""
    return _build_game_doc


@pytest.fixture
def seed_games():
    """Factory: seed_games(collection, count)."""
    return _seed_games
