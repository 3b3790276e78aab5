"""Legal destination generation per piece kind."""

from __future__ import annotations

from collections.abc import Iterable

from throne.core.board import Board
from throne.core.enums import PieceKind, Side
from throne.core.piece import Piece
from throne.core.types import Cell, all_cells, in_bounds

KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)

ORTHOGONAL_DIRS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
DIAGONAL_DIRS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
CHAMPION_DIRS: tuple[tuple[int, int], ...] = ORTHOGONAL_DIRS + DIAGONAL_DIRS

CHAMPION_RANGE = 2
TOWER_RANGE = 3


# -- Precomputed lookup tables ---------------------------------------------


def _build_targets(
    offsets: tuple[tuple[int, int], ...],
) -> dict[Cell, tuple[Cell, ...]]:
    targets: dict[Cell, tuple[Cell, ...]] = {}
    for row, col in all_cells():
        targets[(row, col)] = tuple(
            (row + dr, col + dc) for dr, dc in offsets if in_bounds(row + dr, col + dc)
        )
    return targets


def _build_rays(
    directions: tuple[tuple[int, int], ...],
    max_steps: int,
) -> dict[Cell, tuple[tuple[Cell, ...], ...]]:
    """Rays clipped to the board edge and to *max_steps*."""
    rays_per_cell: dict[Cell, tuple[tuple[Cell, ...], ...]] = {}
    for row, col in all_cells():
        cell_rays: list[tuple[Cell, ...]] = []
        for dr, dc in directions:
            ray: list[Cell] = []
            for step in range(1, max_steps + 1):
                r, c = row + dr * step, col + dc * step
                if not in_bounds(r, c):
                    break
                ray.append((r, c))
            cell_rays.append(tuple(ray))
        rays_per_cell[(row, col)] = tuple(cell_rays)
    return rays_per_cell


_ADJACENT = _build_targets(KING_OFFSETS)
_CHAMPION_RAYS = _build_rays(CHAMPION_DIRS, CHAMPION_RANGE)
_TOWER_RAYS = _build_rays(ORTHOGONAL_DIRS, TOWER_RANGE)


def adjacent_cells(cell: Cell) -> tuple[Cell, ...]:
    """In-bounds cells at Chebyshev distance 1 from *cell*."""
    return _ADJACENT[cell]


class MoveGenerator:
    """Computes legal destinations for a piece on a :class:`Board`.

    *immune_sides* lists the sides whose King cannot currently be
    captured. An immune King still blocks rays.
    """

    __slots__ = ("_board", "_immune")

    def __init__(self, board: Board, immune_sides: Iterable[Side] = ()) -> None:
        self._board = board
        self._immune = frozenset(immune_sides)

    # -- Public API ---------------------------------------------------------

    def legal_moves(self, cell: Cell, piece: Piece) -> frozenset[Cell]:
        """Destinations for *piece* standing on *cell*."""
        moves: set[Cell] = set()
        kind = piece.kind
        if kind == PieceKind.KING:
            self._gen_steps(piece.owner, _ADJACENT[cell], moves)
        elif kind == PieceKind.CHAMPION:
            self._gen_rays(piece.owner, _CHAMPION_RAYS[cell], moves)
        elif kind == PieceKind.TOWER:
            self._gen_rays(piece.owner, _TOWER_RAYS[cell], moves)
        else:
            self._gen_soldier(cell, piece.owner, moves)
        return frozenset(moves)

    def all_legal_moves(self, side: Side) -> dict[Cell, frozenset[Cell]]:
        """Origin -> destinations for every piece of *side* that can move."""
        result: dict[Cell, frozenset[Cell]] = {}
        for cell in self._board.occupied_by(side):
            piece = self._board[cell]
            if piece is None:
                continue
            moves = self.legal_moves(cell, piece)
            if moves:
                result[cell] = moves
        return result

    # -- Destination admission ----------------------------------------------

    def _admit(self, side: Side, cell: Cell, moves: set[Cell]) -> bool:
        """Add *cell* if it is a legal destination.

        Returns True only when the cell is empty, i.e. a ray may continue
        past it. Occupied cells always end a ray, whether admitted as a
        capture or rejected.
        """
        target = self._board[cell]
        if target is None:
            moves.add(cell)
            return True
        if target.owner == side:
            return False
        if target.kind == PieceKind.KING and target.owner in self._immune:
            return False
        moves.add(cell)
        return False

    # -- Piece-specific generators (private) -------------------------------

    def _gen_steps(self, side: Side, targets: tuple[Cell, ...], moves: set[Cell]) -> None:
        for to_cell in targets:
            self._admit(side, to_cell, moves)

    def _gen_rays(
        self,
        side: Side,
        rays: tuple[tuple[Cell, ...], ...],
        moves: set[Cell],
    ) -> None:
        for ray in rays:
            for to_cell in ray:
                if not self._admit(side, to_cell, moves):
                    break

    def _gen_soldier(self, cell: Cell, side: Side, moves: set[Cell]) -> None:
        row, col = cell
        for r, c in ((row + side.forward, col), (row, col - 1), (row, col + 1)):
            if in_bounds(r, c):
                self._admit(side, (r, c), moves)
