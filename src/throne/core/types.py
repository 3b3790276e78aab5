"""Cell type alias and coordinate helpers.

Board layout (row-major, row 0 at the top)::

    (0,0) (0,1) ... (0,4)    <- Black home row, White back row
    ...
    (4,0) (4,1) ... (4,4)    <- White home row, Black back row

Cell names use files ``a``-``e`` for columns and ranks ``1``-``5``
counted from the bottom, so ``(4, 0)`` is ``a1`` and ``(0, 4)`` is ``e5``.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TypeAlias

BOARD_SIZE = 5

Cell: TypeAlias = tuple[int, int]  # (row, col)


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def all_cells() -> Iterator[Cell]:
    """Every cell in row-major order."""
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            yield (row, col)


def chebyshev(a: Cell, b: Cell) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def cell_name(cell: Cell) -> str:
    """Human-readable name, e.g. (4, 0) -> 'a1'."""
    row, col = cell
    return chr(ord("a") + col) + str(BOARD_SIZE - row)


def parse_cell(name: str) -> Cell:
    """Parse a cell name, e.g. 'c5' -> (0, 2)."""
    if len(name) != 2 or name[0] not in "abcde" or name[1] not in "12345":
        raise ValueError(f"Invalid cell name: {name!r}")
    return (BOARD_SIZE - int(name[1]), ord(name[0]) - ord("a"))
