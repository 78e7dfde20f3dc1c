"""CollectionBrowser — paginated, sortable view over stored games.

Two sort modes:

- ``SortMode.TIMESTAMP``: newest first, ``page_size`` games per fetch,
  ``load_more()`` continues after the last game seen. A short page means
  there is nothing more to load.
- ``SortMode.TOTAL_SCORE``: the whole collection in one read, sorted by
  total score descending. Python's sort is stable, so games with equal
  totals stay in retrieval order. No pagination.

State machine::

    IDLE -> LOADING -> LOADED | ERRORED
    LOADED -> LOADING_MORE -> LOADED (appended) | ERRORED

Every query is tagged with a generation number. Switching sort mode
starts a new generation, and results from an older generation are
dropped when they arrive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from perfectscrabble.board import Grid
from perfectscrabble.core.errors import ScrabbleError
from perfectscrabble.core.store import GameStore, PageCursor, StoredGame
from perfectscrabble.replay import replay_lenient
from perfectscrabble.scoring import ScoreSummary, aggregate_scores

logger = logging.getLogger(__name__)

PAGE_SIZE = 5
LOAD_ERROR_MESSAGE = "Failed to load games."


class SortMode(Enum):
    TIMESTAMP = "timestamp"
    TOTAL_SCORE = "totalScore"


class BrowserState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    LOADING_MORE = "loading_more"
    ERRORED = "errored"


@dataclass(frozen=True)
class GameView:
    """A stored game with its scores and final board, ready to render."""

    game: StoredGame
    scores: ScoreSummary
    board: Grid
    replay_failed_at: int | None = None

    @classmethod
    def from_game(cls, game: StoredGame) -> GameView:
        board, failed = replay_lenient(game.turns)
        return cls(
            game=game,
            scores=aggregate_scores(game.turns),
            board=board,
            replay_failed_at=failed.id if failed else None,
        )


@dataclass(frozen=True)
class PendingQuery:
    generation: int
    mode: SortMode
    append: bool
    cursor: PageCursor | None


@dataclass(frozen=True)
class QueryResult:
    games: list[StoredGame]
    cursor: PageCursor | None
    has_more: bool


class CollectionBrowser:
    """Browsing session over a GameStore."""

    def __init__(
        self,
        store: GameStore,
        page_size: int = PAGE_SIZE,
        sort: SortMode = SortMode.TIMESTAMP,
    ) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")
        self._store = store
        self._page_size = page_size
        self._sort = sort
        self._state = BrowserState.IDLE
        self._games: list[GameView] = []
        self._cursor: PageCursor | None = None
        self._has_more = True
        self._error: str | None = None
        self._generation = 0

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> BrowserState:
        return self._state

    @property
    def sort(self) -> SortMode:
        return self._sort

    @property
    def games(self) -> list[GameView]:
        return list(self._games)

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def can_load_more(self) -> bool:
        return (
            self._state is BrowserState.LOADED
            and self._sort is SortMode.TIMESTAMP
            and self._has_more
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def load(self) -> None:
        """(Re)load from the first page in the current sort mode."""
        pending = self.start_load()
        self.resolve(pending, *self._run(pending))

    def load_more(self) -> None:
        """Append the next page. No-op unless ``can_load_more``."""
        pending = self.start_load_more()
        if pending is None:
            return
        self.resolve(pending, *self._run(pending))

    def set_sort(self, mode: SortMode) -> None:
        """Switch sort mode, clearing results and cursor, then reload."""
        self._sort = mode
        self.load()

    # ------------------------------------------------------------------
    # Split query lifecycle: start -> fetch -> resolve
    # ------------------------------------------------------------------

    def start_load(self) -> PendingQuery:
        self._generation += 1
        self._state = BrowserState.LOADING
        self._games = []
        self._cursor = None
        self._has_more = True
        self._error = None
        return PendingQuery(self._generation, self._sort, append=False, cursor=None)

    def start_load_more(self) -> PendingQuery | None:
        if not self.can_load_more:
            return None
        self._state = BrowserState.LOADING_MORE
        return PendingQuery(self._generation, self._sort, append=True, cursor=self._cursor)

    def fetch(self, pending: PendingQuery) -> QueryResult:
        """Run the store query for ``pending``. May raise ScrabbleError."""
        if pending.mode is SortMode.TOTAL_SCORE:
            games = self._store.all_games()
            views = [(aggregate_scores(g.turns).total, g) for g in games]
            views.sort(key=lambda pair: pair[0], reverse=True)
            return QueryResult(games=[g for _, g in views], cursor=None, has_more=False)

        page = self._store.recent_page(self._page_size, after=pending.cursor)
        return QueryResult(games=page.games, cursor=page.cursor, has_more=page.has_more)

    def resolve(
        self,
        pending: PendingQuery,
        result: QueryResult | None,
        error: Exception | None = None,
    ) -> bool:
        """Apply a finished query. Returns False if it was stale and dropped."""
        if pending.generation != self._generation:
            logger.debug(
                "Dropping stale %s result (generation %d, current %d)",
                pending.mode.value, pending.generation, self._generation,
            )
            return False

        if error is not None or result is None:
            logger.error("Error fetching games: %s", error)
            self._error = LOAD_ERROR_MESSAGE
            self._state = BrowserState.ERRORED
            return True

        views = []
        for game in result.games:
            try:
                views.append(GameView.from_game(game))
            except ScrabbleError as exc:
                logger.warning("Skipping game %s: %s", game.id, exc)
        if pending.append:
            self._games.extend(views)
        else:
            self._games = views
        self._has_more = result.has_more
        if result.cursor is not None:
            self._cursor = result.cursor
        self._state = BrowserState.LOADED
        return True

    def _run(self, pending: PendingQuery) -> tuple[QueryResult | None, Exception | None]:
        try:
            return self.fetch(pending), None
        except ScrabbleError as exc:
            return None, exc
