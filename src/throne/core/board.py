"""Board - piece placement on the 5x5 grid."""

from __future__ import annotations

from throne.core.enums import PieceKind, Side
from throne.core.piece import Piece
from throne.core.types import BOARD_SIZE, Cell, all_cells, in_bounds

_CELL_COUNT = BOARD_SIZE * BOARD_SIZE

_HOME_ROW: tuple[PieceKind, ...] = (
    PieceKind.SOLDIER,
    PieceKind.TOWER,
    PieceKind.KING,
    PieceKind.CHAMPION,
    PieceKind.SOLDIER,
)


def _index(cell: Cell) -> int:
    row, col = cell
    if not in_bounds(row, col):
        raise IndexError(f"Cell out of range: {cell!r}")
    return row * BOARD_SIZE + col


class Board:
    """Mutable 25-cell grid of optional pieces.

    No rule validation happens here; the rule engine is the only writer
    and guarantees legality.
    """

    __slots__ = ("_cells",)

    def __init__(self) -> None:
        self._cells: list[Piece | None] = [None] * _CELL_COUNT

    # -- Element access -----------------------------------------------------

    def __getitem__(self, cell: Cell) -> Piece | None:
        return self._cells[_index(cell)]

    def __setitem__(self, cell: Cell, piece: Piece | None) -> None:
        self._cells[_index(cell)] = piece

    def is_empty(self, cell: Cell) -> bool:
        return self[cell] is None

    # -- Query helpers ------------------------------------------------------

    def pieces(self, side: Side, kind: PieceKind) -> list[Cell]:
        """Cells holding *side*'s *kind*, in row-major order."""
        target = Piece(kind, side)
        return [cell for cell in all_cells() if self[cell] == target]

    def find_first(self, side: Side, kind: PieceKind) -> Cell | None:
        """Row-major first cell holding *side*'s *kind*."""
        found = self.pieces(side, kind)
        return found[0] if found else None

    def has_piece(self, side: Side, kind: PieceKind) -> bool:
        return self.find_first(side, kind) is not None

    def occupied_by(self, side: Side) -> list[Cell]:
        """All cells holding a piece of *side*."""
        result: list[Cell] = []
        for cell in all_cells():
            piece = self[cell]
            if piece is not None and piece.owner == side:
                result.append(cell)
        return result

    def king_cell(self, side: Side) -> Cell | None:
        return self.find_first(side, PieceKind.KING)

    # -- Mutation / copying -------------------------------------------------

    def copy(self) -> Board:
        b = Board()
        b._cells = self._cells.copy()
        return b

    def clear(self) -> None:
        self._cells = [None] * _CELL_COUNT

    # -- Factory ------------------------------------------------------------

    @classmethod
    def initial(cls) -> Board:
        """Starting layout: Black on row 0, White on row 4."""
        b = cls()
        last = BOARD_SIZE - 1
        for col, kind in enumerate(_HOME_ROW):
            b[(last, col)] = Piece(kind, Side.WHITE)
        # Black mirrors White across the centre point.
        for col, kind in enumerate(reversed(_HOME_ROW)):
            b[(0, col)] = Piece(kind, Side.BLACK)
        return b

    # -- Dunder helpers -----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        rows: list[str] = []
        for row in range(BOARD_SIZE):
            cells = []
            for col in range(BOARD_SIZE):
                p = self[(row, col)]
                cells.append(str(p) if p else ".")
            rows.append(f"{BOARD_SIZE - row} {' '.join(cells)}")
        rows.append("  a b c d e")
        return "\n".join(rows)
