"""Turn replay — rebuild a board from a turn history.

Turns are always applied in ascending id order, whatever order the
caller passes them in. Each step depends only on the previous grid, so
a replay can be restarted from scratch or resumed from any prefix.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from perfectscrabble.board import Grid, copy_grid, empty_grid, place_word
from perfectscrabble.core.errors import PlacementError
from perfectscrabble.turns import Turn, sort_turns

logger = logging.getLogger(__name__)


def iter_boards(
    turns: Iterable[Turn],
    start: Grid | None = None,
) -> Iterator[tuple[Turn, Grid]]:
    """Yield (turn, grid after that turn) for each turn by ascending id."""
    grid = copy_grid(start) if start is not None else empty_grid()
    for turn in sort_turns(turns):
        grid = place_word(grid, turn)
        yield turn, grid


def replay(turns: Iterable[Turn], start: Grid | None = None) -> Grid:
    """Board after applying every turn. Raises PlacementError on a bad turn."""
    grid = copy_grid(start) if start is not None else empty_grid()
    for _, grid in iter_boards(turns, start):
        pass
    return grid


def board_at(turns: Iterable[Turn], k: int) -> Grid:
    """Board after the first ``k`` turns by id."""
    if k < 0:
        raise ValueError(f"k must be >= 0, got {k}")
    return replay(sort_turns(turns)[:k])


def replay_lenient(turns: Iterable[Turn]) -> tuple[Grid, Turn | None]:
    """Replay as far as possible.

    Returns (grid, failed_turn). Used when rendering stored games, where
    one bad record should not hide the rest of the board.
    """
    grid = empty_grid()
    for turn in sort_turns(turns):
        try:
            grid = place_word(grid, turn)
        except PlacementError as exc:
            logger.warning("Stopping replay at turn %d: %s", turn.id, exc)
            return grid, turn
    return grid, None
