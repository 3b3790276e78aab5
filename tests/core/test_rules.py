"""Tests for Rules: moves, win conditions, sacrifices, instant kill."""

import pytest

from throne.core.enums import PieceKind, SacrificeEffect, Side, TransitionKind
from throne.core.errors import (
    ActionAfterGameOver,
    IllegalDestination,
    IllegalSelection,
    InstantKillTargetInvalid,
    SacrificeUnavailable,
)
from throne.core.notation import state_from_layout
from throne.core.rules import Rules, Transition
from throne.core.state import MatchState


def _move(state: MatchState, frm: tuple[int, int], to: tuple[int, int]) -> Transition:
    return Rules.attempt_move(state, Rules.select_cell(state, frm), to)


class TestSelect:
    def test_own_piece(self) -> None:
        sel = Rules.select_cell(MatchState.initial(), (4, 0))
        assert sel.cell == (4, 0)
        assert sel.piece.kind == PieceKind.SOLDIER
        assert sel.legal_moves == {(3, 0)}

    def test_empty_cell_rejected(self) -> None:
        with pytest.raises(IllegalSelection):
            Rules.select_cell(MatchState.initial(), (2, 2))

    def test_enemy_piece_rejected(self) -> None:
        with pytest.raises(IllegalSelection):
            Rules.select_cell(MatchState.initial(), (0, 0))


class TestMove:
    def test_soldier_advance_ends_turn(self) -> None:
        state = MatchState.initial()
        result = _move(state, (4, 0), (3, 0))
        assert result.kind == TransitionKind.TURN_ENDED
        assert result.ends_turn
        assert result.state.board[(3, 0)] is not None
        assert result.state.board[(4, 0)] is None
        assert result.state.side_to_move == Side.BLACK

    def test_input_state_untouched(self) -> None:
        state = MatchState.initial()
        _move(state, (4, 0), (3, 0))
        assert state.board[(4, 0)] is not None
        assert state.side_to_move == Side.WHITE

    def test_illegal_destination(self) -> None:
        state = MatchState.initial()
        sel = Rules.select_cell(state, (4, 0))
        with pytest.raises(IllegalDestination):
            Rules.attempt_move(state, sel, (2, 0))

    def test_stale_selection_rejected(self) -> None:
        state = MatchState.initial()
        sel = Rules.select_cell(state, (4, 0))
        moved = Rules.attempt_move(state, sel, (3, 0)).state
        with pytest.raises(IllegalDestination):
            Rules.attempt_move(moved, sel, (3, 0))

    def test_capture_removes_enemy(self) -> None:
        state = state_from_layout("k4/5/s4/5/T3K")
        result = _move(state, (4, 0), (2, 0))
        assert result.kind == TransitionKind.TURN_ENDED
        piece = result.state.board[(2, 0)]
        assert piece is not None and piece.owner == Side.WHITE


class TestWinConditions:
    def test_king_capture(self) -> None:
        state = state_from_layout("2k2/5/2C2/5/2K2")
        result = _move(state, (2, 2), (0, 2))
        assert result.kind == TransitionKind.GAME_OVER
        assert result.state.game_over
        assert result.state.winner == Side.WHITE

    def test_white_king_reaches_back_row(self) -> None:
        state = state_from_layout("4k/K4/5/5/5")
        result = _move(state, (1, 0), (0, 0))
        assert result.state.winner == Side.WHITE

    def test_black_king_reaches_back_row(self) -> None:
        state = state_from_layout("5/5/5/k4/4K", side_to_move=Side.BLACK)
        result = _move(state, (3, 0), (4, 0))
        assert result.kind == TransitionKind.GAME_OVER
        assert result.state.winner == Side.BLACK

    def test_side_to_move_frozen_after_win(self) -> None:
        state = state_from_layout("2k2/5/2C2/5/2K2")
        result = _move(state, (2, 2), (0, 2))
        assert result.state.side_to_move == Side.WHITE

    def test_actions_rejected_after_game_over(self) -> None:
        state = _move(state_from_layout("2k2/5/2C2/5/2K2"), (2, 2), (0, 2)).state
        with pytest.raises(ActionAfterGameOver):
            Rules.select_cell(state, (4, 2))
        with pytest.raises(ActionAfterGameOver):
            Rules.apply_sacrifice(state, SacrificeEffect.KING_SHIELD)


class TestSacrificeAvailability:
    def test_all_offered_at_start(self) -> None:
        assert Rules.available_sacrifices(MatchState.initial()) == set(SacrificeEffect)

    def test_double_move_needs_champion(self) -> None:
        state = state_from_layout("2k2/5/5/5/STK1S")
        available = Rules.available_sacrifices(state)
        assert SacrificeEffect.DOUBLE_MOVE not in available
        assert SacrificeEffect.INSTANT_KILL not in available
        assert SacrificeEffect.KING_SHIELD in available

    def test_shield_needs_tower(self) -> None:
        state = state_from_layout("2k2/5/5/5/S1KCS")
        with pytest.raises(SacrificeUnavailable):
            Rules.apply_sacrifice(state, SacrificeEffect.KING_SHIELD)

    def test_only_once_per_match(self) -> None:
        state = Rules.apply_sacrifice(
            MatchState.initial(), SacrificeEffect.KING_SHIELD
        ).state
        assert Rules.available_sacrifices(state) == frozenset()
        with pytest.raises(SacrificeUnavailable):
            Rules.apply_sacrifice(state, SacrificeEffect.DOUBLE_MOVE)

    def test_opponent_keeps_its_sacrifice(self) -> None:
        state = Rules.apply_sacrifice(
            MatchState.initial(), SacrificeEffect.KING_SHIELD
        ).state
        state = _move(state, (4, 0), (3, 0)).state
        assert Rules.available_sacrifices(state) == set(SacrificeEffect)


class TestSacrificeCosts:
    def test_shield_removes_tower_and_keeps_turn(self) -> None:
        result = Rules.apply_sacrifice(MatchState.initial(), SacrificeEffect.KING_SHIELD)
        assert result.kind == TransitionKind.SACRIFICE
        assert not result.ends_turn
        assert result.state.board[(4, 1)] is None
        assert result.state.side_to_move == Side.WHITE
        assert result.state.white.sacrifice_used
        assert result.state.white.king_immune

    def test_double_move_removes_first_soldier(self) -> None:
        result = Rules.apply_sacrifice(MatchState.initial(), SacrificeEffect.DOUBLE_MOVE)
        assert result.state.board[(4, 0)] is None
        assert result.state.board[(4, 4)] is not None
        assert result.state.white.champion_double_move

    def test_instant_kill_removes_champion_and_arms(self) -> None:
        result = Rules.apply_sacrifice(MatchState.initial(), SacrificeEffect.INSTANT_KILL)
        assert result.state.board[(4, 3)] is None
        assert result.state.instant_kill_armed


class TestKingShield:
    LAYOUT = "2k2/5/5/2c2/STK2"

    def test_shield_lasts_through_opponent_turn(self) -> None:
        state = state_from_layout(self.LAYOUT)
        assert (4, 2) in Rules.legal_moves(state, (3, 2))

        state = Rules.apply_sacrifice(state, SacrificeEffect.KING_SHIELD).state
        state = _move(state, (4, 0), (3, 0)).state
        assert state.side_to_move == Side.BLACK
        assert state.white.king_immune
        assert (4, 2) not in Rules.legal_moves(state, (3, 2))

    def test_shield_expires_when_turn_returns(self) -> None:
        state = state_from_layout(self.LAYOUT)
        state = Rules.apply_sacrifice(state, SacrificeEffect.KING_SHIELD).state
        state = _move(state, (4, 0), (3, 0)).state
        state = _move(state, (3, 2), (2, 2)).state
        assert state.side_to_move == Side.WHITE
        assert not state.white.king_immune


class TestDoubleMove:
    def test_champion_moves_twice(self) -> None:
        state = Rules.apply_sacrifice(
            MatchState.initial(), SacrificeEffect.DOUBLE_MOVE
        ).state
        first = _move(state, (4, 3), (3, 3))
        assert first.kind == TransitionKind.BONUS_MOVE
        assert first.state.side_to_move == Side.WHITE
        assert not first.state.white.champion_double_move
        assert first.selection is not None and first.selection.cell == (3, 3)

        second = Rules.attempt_move(first.state, first.selection, (1, 3))
        assert second.kind == TransitionKind.TURN_ENDED
        assert second.state.side_to_move == Side.BLACK

    def test_pending_when_another_piece_moves(self) -> None:
        state = Rules.apply_sacrifice(
            MatchState.initial(), SacrificeEffect.DOUBLE_MOVE
        ).state
        result = _move(state, (4, 4), (3, 4))
        assert result.kind == TransitionKind.TURN_ENDED
        assert result.state.white.champion_double_move

    def test_bonus_move_can_capture_the_king(self) -> None:
        state = Rules.apply_sacrifice(
            state_from_layout("2k2/5/5/5/S1K1C"), SacrificeEffect.DOUBLE_MOVE
        ).state
        first = _move(state, (4, 4), (2, 4))
        assert first.kind == TransitionKind.BONUS_MOVE
        assert first.selection is not None
        assert (0, 2) in first.selection.legal_moves

        second = Rules.attempt_move(first.state, first.selection, (0, 2))
        assert second.kind == TransitionKind.GAME_OVER
        assert second.state.game_over
        assert second.state.winner == Side.WHITE
        assert second.state.board[(0, 2)] is not None
        assert second.state.board[(0, 2)].kind == PieceKind.CHAMPION


class TestInstantKill:
    LAYOUT = "2k2/5/5/1s3/STKC1"

    def _armed(self) -> MatchState:
        state = state_from_layout(self.LAYOUT)
        return Rules.apply_sacrifice(state, SacrificeEffect.INSTANT_KILL).state

    def test_targets_adjacent_enemies_only(self) -> None:
        assert Rules.instant_kill_targets(self._armed()) == {(3, 1)}

    def test_no_targets_when_not_armed(self) -> None:
        assert Rules.instant_kill_targets(state_from_layout(self.LAYOUT)) == frozenset()

    def test_resolve_removes_and_ends_turn(self) -> None:
        result = Rules.resolve_instant_kill(self._armed(), (3, 1))
        assert result.kind == TransitionKind.TURN_ENDED
        assert result.state.board[(3, 1)] is None
        assert not result.state.instant_kill_armed
        assert result.state.side_to_move == Side.BLACK

    def test_far_target_rejected(self) -> None:
        with pytest.raises(InstantKillTargetInvalid):
            Rules.resolve_instant_kill(self._armed(), (0, 2))

    def test_not_armed_rejected(self) -> None:
        with pytest.raises(InstantKillTargetInvalid):
            Rules.resolve_instant_kill(state_from_layout(self.LAYOUT), (3, 1))

    def test_moves_blocked_while_armed(self) -> None:
        armed = self._armed()
        with pytest.raises(IllegalSelection):
            Rules.select_cell(armed, (4, 0))
        sel = Rules.select_cell(state_from_layout(self.LAYOUT), (4, 0))
        with pytest.raises(IllegalDestination):
            Rules.attempt_move(armed, sel, (3, 0))

    def test_killing_the_king_wins(self) -> None:
        state = state_from_layout("5/5/5/2k2/2KC1")
        state = Rules.apply_sacrifice(state, SacrificeEffect.INSTANT_KILL).state
        result = Rules.resolve_instant_kill(state, (3, 2))
        assert result.kind == TransitionKind.GAME_OVER
        assert result.state.winner == Side.WHITE
