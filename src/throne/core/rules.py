"""Rule transitions: moves, captures, sacrifices, instant kill, win checks.

Every function here is pure. It takes a :class:`MatchState`, returns a
:class:`Transition` holding a *new* state, and raises a
:class:`RuleViolation` without touching its input when the action is
illegal.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from throne.core.enums import PieceKind, SacrificeEffect, Side, TransitionKind
from throne.core.errors import (
    ActionAfterGameOver,
    IllegalDestination,
    IllegalSelection,
    InstantKillTargetInvalid,
    SacrificeUnavailable,
)
from throne.core.move_generator import MoveGenerator, adjacent_cells
from throne.core.state import MatchState, Selection
from throne.core.types import Cell, cell_name

# Piece removed by each sacrifice.
SACRIFICE_COST: dict[SacrificeEffect, PieceKind] = {
    SacrificeEffect.DOUBLE_MOVE: PieceKind.SOLDIER,
    SacrificeEffect.KING_SHIELD: PieceKind.TOWER,
    SacrificeEffect.INSTANT_KILL: PieceKind.CHAMPION,
}

# Pieces that must be on the board for the sacrifice to be offered.
SACRIFICE_REQUIRES: dict[SacrificeEffect, tuple[PieceKind, ...]] = {
    SacrificeEffect.DOUBLE_MOVE: (PieceKind.SOLDIER, PieceKind.CHAMPION),
    SacrificeEffect.KING_SHIELD: (PieceKind.TOWER,),
    SacrificeEffect.INSTANT_KILL: (PieceKind.CHAMPION,),
}


@dataclass(frozen=True, slots=True)
class Transition:
    """Result of a successful rule operation."""

    state: MatchState
    kind: TransitionKind
    selection: Selection | None = None

    @property
    def ends_turn(self) -> bool:
        return self.kind == TransitionKind.TURN_ENDED


class Rules:
    """Static rule set operating on :class:`MatchState` snapshots."""

    # ── Queries ──────────────────────────────────────────────────────────

    @staticmethod
    def legal_moves(state: MatchState, cell: Cell) -> frozenset[Cell]:
        """Destinations for whatever piece stands on *cell*."""
        piece = state.board[cell]
        if piece is None:
            return frozenset()
        gen = MoveGenerator(state.board, state.immune_sides())
        return gen.legal_moves(cell, piece)

    @staticmethod
    def available_sacrifices(state: MatchState) -> frozenset[SacrificeEffect]:
        """Effects the side to move may buy right now."""
        side = state.side_to_move
        if state.game_over or state.instant_kill_armed:
            return frozenset()
        if state.flags(side).sacrifice_used:
            return frozenset()
        board = state.board
        return frozenset(
            effect
            for effect, kinds in SACRIFICE_REQUIRES.items()
            if all(board.has_piece(side, kind) for kind in kinds)
        )

    @staticmethod
    def instant_kill_targets(state: MatchState) -> frozenset[Cell]:
        """Enemy cells adjacent to at least one own piece, while armed."""
        if state.game_over or not state.instant_kill_armed:
            return frozenset()
        side = state.side_to_move
        board = state.board
        targets: set[Cell] = set()
        for cell in board.occupied_by(side.opposite):
            for near in adjacent_cells(cell):
                neighbour = board[near]
                if neighbour is not None and neighbour.owner == side:
                    targets.add(cell)
                    break
        return frozenset(targets)

    # ── Selection ────────────────────────────────────────────────────────

    @staticmethod
    def select_cell(state: MatchState, cell: Cell) -> Selection:
        Rules.ensure_running(state)
        if state.instant_kill_armed:
            raise IllegalSelection("Instant kill is armed: pick an adjacent enemy")
        piece = state.board[cell]
        if piece is None or piece.owner != state.side_to_move:
            raise IllegalSelection(
                f"No {state.side_to_move} piece on {cell_name(cell)}"
            )
        return Selection(cell, piece, Rules.legal_moves(state, cell))

    # ── Moves ────────────────────────────────────────────────────────────

    @staticmethod
    def attempt_move(state: MatchState, selection: Selection, to: Cell) -> Transition:
        """Move the selected piece to *to* and resolve the consequences."""
        Rules.ensure_running(state)
        side = state.side_to_move
        piece = selection.piece
        if state.instant_kill_armed:
            raise IllegalDestination("Instant kill is armed: no regular moves")
        if piece.owner != side or state.board[selection.cell] != piece:
            raise IllegalDestination("Selection does not match the board")
        if not selection.allows(to):
            raise IllegalDestination(f"{cell_name(to)} is not a legal destination")

        board = state.board.copy()
        captured = board[to]
        board[to] = piece
        board[selection.cell] = None
        moved = replace(state, board=board)

        # King capture is checked before anything else.
        if captured is not None and captured.kind == PieceKind.KING:
            return Rules._win(moved, side)

        if piece.kind == PieceKind.KING and to[0] == side.back_row:
            return Rules._win(moved, side)

        if piece.kind == PieceKind.CHAMPION and state.flags(side).champion_double_move:
            bonus = moved.with_flags(side, champion_double_move=False)
            reselected = Selection(to, piece, Rules.legal_moves(bonus, to))
            return Transition(bonus, TransitionKind.BONUS_MOVE, reselected)

        return Transition(Rules._end_turn(moved), TransitionKind.TURN_ENDED)

    # ── Sacrifices ───────────────────────────────────────────────────────

    @staticmethod
    def apply_sacrifice(state: MatchState, effect: SacrificeEffect) -> Transition:
        """Spend the side's single sacrifice on *effect*."""
        Rules.ensure_running(state)
        side = state.side_to_move
        if state.flags(side).sacrifice_used:
            raise SacrificeUnavailable(f"{side} has already used its sacrifice")
        if state.instant_kill_armed:
            raise SacrificeUnavailable("Instant kill is armed")
        if effect not in Rules.available_sacrifices(state):
            missing = ", ".join(k.name.lower() for k in SACRIFICE_REQUIRES[effect])
            raise SacrificeUnavailable(f"{effect.value} requires: {missing}")

        board = state.board.copy()
        victim = board.find_first(side, SACRIFICE_COST[effect])
        if victim is None:
            raise SacrificeUnavailable(f"No piece left to pay for {effect.value}")
        board[victim] = None
        result = replace(state, board=board).with_flags(side, sacrifice_used=True)

        if effect == SacrificeEffect.DOUBLE_MOVE:
            result = result.with_flags(side, champion_double_move=True)
        elif effect == SacrificeEffect.KING_SHIELD:
            result = result.with_flags(side, king_immune=True)
        else:
            result = replace(result, instant_kill_armed=True)
        return Transition(result, TransitionKind.SACRIFICE)

    @staticmethod
    def resolve_instant_kill(state: MatchState, target: Cell) -> Transition:
        """Remove the enemy on *target* while instant kill is armed."""
        Rules.ensure_running(state)
        if not state.instant_kill_armed:
            raise InstantKillTargetInvalid("Instant kill is not armed")
        if target not in Rules.instant_kill_targets(state):
            raise InstantKillTargetInvalid(
                f"{cell_name(target)} is not an enemy adjacent to your pieces"
            )

        victim = state.board[target]
        board = state.board.copy()
        board[target] = None
        result = replace(state, board=board)
        if victim is not None and victim.kind == PieceKind.KING:
            return Rules._win(result, state.side_to_move)

        result = replace(result, instant_kill_armed=False)
        return Transition(Rules._end_turn(result), TransitionKind.TURN_ENDED)

    @staticmethod
    def ensure_running(state: MatchState) -> None:
        """Raise :class:`ActionAfterGameOver` once the match is decided."""
        if state.game_over:
            raise ActionAfterGameOver(f"Match already won by {state.winner}")

    # ── Internal ─────────────────────────────────────────────────────────

    @staticmethod
    def _end_turn(state: MatchState) -> MatchState:
        """Pass the turn; the incoming side's shield expires now."""
        incoming: Side = state.side_to_move.opposite
        return replace(state, side_to_move=incoming).with_flags(
            incoming, king_immune=False
        )

    @staticmethod
    def _win(state: MatchState, side: Side) -> Transition:
        return Transition(
            replace(state, game_over=True, winner=side), TransitionKind.GAME_OVER
        )
