"""MatchState — the immutable snapshot of a match.

The snapshot is what the presentation layer renders and what the relay
forwards between peers. Every rule transition builds a new one; the
``board`` inside a snapshot must be treated as read-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from throne.core.board import Board
from throne.core.enums import Side
from throne.core.piece import Piece
from throne.core.types import Cell


@dataclass(frozen=True, slots=True)
class SideFlags:
    """One-shot modifiers for a single side, reset only at match start."""

    sacrifice_used: bool = False
    king_immune: bool = False
    champion_double_move: bool = False


@dataclass(frozen=True, slots=True)
class MatchState:
    """Full match state: board, side to move, modifiers, outcome."""

    board: Board = field(default_factory=Board.initial)
    side_to_move: Side = Side.WHITE
    white: SideFlags = field(default_factory=SideFlags)
    black: SideFlags = field(default_factory=SideFlags)
    instant_kill_armed: bool = False
    game_over: bool = False
    winner: Side | None = None

    @classmethod
    def initial(cls) -> MatchState:
        return cls()

    # ── Query helpers ────────────────────────────────────────────────────

    def flags(self, side: Side) -> SideFlags:
        return self.white if side == Side.WHITE else self.black

    def is_king_immune(self, side: Side) -> bool:
        return self.flags(side).king_immune

    def immune_sides(self) -> frozenset[Side]:
        return frozenset(side for side in Side if self.flags(side).king_immune)

    # ── Functional updates ───────────────────────────────────────────────

    def with_flags(self, side: Side, **changes: bool) -> MatchState:
        """Copy with *side*'s flags updated."""
        updated = replace(self.flags(side), **changes)
        if side == Side.WHITE:
            return replace(self, white=updated)
        return replace(self, black=updated)


@dataclass(frozen=True, slots=True)
class Selection:
    """Currently selected piece and its cached legal destinations.

    Presentation state only; never part of the transmitted snapshot.
    """

    cell: Cell
    piece: Piece
    legal_moves: frozenset[Cell]

    def allows(self, cell: Cell) -> bool:
        return cell in self.legal_moves
