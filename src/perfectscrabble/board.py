"""Scrabble board — 15×15 grid of letters and the word placement rule."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from perfectscrabble.core.errors import PlacementError

if TYPE_CHECKING:
    from perfectscrabble.turns import Blanks

BOARD_SIZE = 15
CENTER = (7, 7)
EMPTY = ""

Grid = list[list[str]]


class Direction(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @classmethod
    def parse(cls, value: str | Direction) -> Direction:
        """Accept ``horizontal``/``vertical`` and the ``across``/``down`` aliases."""
        if isinstance(value, Direction):
            return value
        key = str(value).strip().lower()
        if key in ("horizontal", "across", "h"):
            return cls.HORIZONTAL
        if key in ("vertical", "down", "v"):
            return cls.VERTICAL
        raise ValueError(f"Unknown direction: {value!r}")

    @property
    def step(self) -> tuple[int, int]:
        """(d_row, d_col) unit vector."""
        return (0, 1) if self is Direction.HORIZONTAL else (1, 0)


# Premium square positions --------------------------------------------------
# Only used for rendering; scores arrive from the external scorer.

_TW_POSITIONS = [
    (0, 0), (0, 7), (0, 14),
    (7, 0), (7, 14),
    (14, 0), (14, 7), (14, 14),
]

_DW_POSITIONS = [
    (1, 1), (2, 2), (3, 3), (4, 4),
    (1, 13), (2, 12), (3, 11), (4, 10),
    (10, 4), (11, 3), (12, 2), (13, 1),
    (10, 10), (11, 11), (12, 12), (13, 13),
    (7, 7),
]

_TL_POSITIONS = [
    (1, 5), (1, 9),
    (5, 1), (5, 5), (5, 9), (5, 13),
    (9, 1), (9, 5), (9, 9), (9, 13),
    (13, 5), (13, 9),
]

_DL_POSITIONS = [
    (0, 3), (0, 11),
    (2, 6), (2, 8),
    (3, 0), (3, 7), (3, 14),
    (6, 2), (6, 6), (6, 8), (6, 12),
    (7, 3), (7, 11),
    (8, 2), (8, 6), (8, 8), (8, 12),
    (11, 0), (11, 7), (11, 14),
    (12, 6), (12, 8),
    (14, 3), (14, 11),
]

PREMIUM_SQUARES: dict[tuple[int, int], str] = {}
for _pos in _TW_POSITIONS:
    PREMIUM_SQUARES[_pos] = "TW"
for _pos in _DW_POSITIONS:
    PREMIUM_SQUARES[_pos] = "DW"
for _pos in _TL_POSITIONS:
    PREMIUM_SQUARES[_pos] = "TL"
for _pos in _DL_POSITIONS:
    PREMIUM_SQUARES[_pos] = "DL"


@dataclass(frozen=True)
class Placement:
    """Where and what to write. ``Turn`` carries the same attributes."""

    row: int
    col: int
    direction: Direction
    bingo: str
    blanks: Blanks | None = None


def empty_grid(size: int = BOARD_SIZE) -> Grid:
    """A fresh ``size``×``size`` grid of empty cells."""
    return [[EMPTY] * size for _ in range(size)]


def copy_grid(grid: Grid) -> Grid:
    return [list(row) for row in grid]


def is_empty(grid: Grid) -> bool:
    return all(cell == EMPTY for row in grid for cell in row)


def in_bounds(grid: Grid, row: int, col: int) -> bool:
    return 0 <= row < len(grid) and 0 <= col < len(grid[row])


def word_cells(placement) -> list[tuple[int, int]]:
    """Board coordinates covered by ``placement``, in word order."""
    d_row, d_col = Direction.parse(placement.direction).step
    return [
        (placement.row + i * d_row, placement.col + i * d_col)
        for i in range(len(placement.bingo))
    ]


def place_word(grid: Grid, placement) -> Grid:
    """Return a new grid with ``placement`` written onto ``grid``.

    Writes one letter per cell starting at (row, col) along the
    direction. Indices listed in ``placement.blanks`` are written with the
    letter the blank stands for. ``grid`` is not modified.

    Raises PlacementError if the word is empty, runs off the board, or
    would overwrite a different letter already on the board.
    """
    word = placement.bingo
    if not word:
        raise PlacementError("Cannot place an empty word")

    blanks = placement.blanks
    blank_indices = set(blanks.indices) if blanks else set()
    cells = word_cells(placement)

    new_grid = copy_grid(grid)
    for i, (r, c) in enumerate(cells):
        if not in_bounds(new_grid, r, c):
            raise PlacementError(
                f"{word!r} at ({placement.row}, {placement.col}) runs off "
                f"the board at ({r}, {c})"
            )
        letter = blanks.tile if i in blank_indices else word[i]
        letter = letter.upper()

        existing = new_grid[r][c]
        if existing != EMPTY and existing != letter:
            raise PlacementError(
                f"{word!r} conflicts with {existing!r} at ({r}, {c})"
            )
        new_grid[r][c] = letter

    return new_grid


def to_ascii(grid: Grid) -> str:
    """Render the grid as ASCII with premium squares on empty cells."""
    size = len(grid)
    col_hdr = "     " + "".join(f"{_col_label(c):>3s}" for c in range(size))
    lines = [col_hdr]

    for r in range(size):
        cells: list[str] = []
        for c in range(size):
            letter = grid[r][c]
            if letter != EMPTY:
                cells.append(f"  {letter}")
                continue
            premium = PREMIUM_SQUARES.get((r, c))
            if premium == "TW":
                cells.append(" 3W")
            elif premium == "DW":
                cells.append(" 2W")
            elif premium == "TL":
                cells.append(" 3L")
            elif premium == "DL":
                cells.append(" 2L")
            else:
                cells.append("  .")
        lines.append(f" {r + 1:2d} " + "".join(cells))

    return "\n".join(lines)


def _col_label(col: int) -> str:
    """Columns are lettered A.. on the printed board."""
    return chr(ord("A") + col)
