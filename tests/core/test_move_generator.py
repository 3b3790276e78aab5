"""Tests for MoveGenerator — per-kind destinations, blocking, immunity."""

import pytest

from throne.core.board import Board
from throne.core.enums import Side
from throne.core.move_generator import MoveGenerator, adjacent_cells
from throne.core.notation import board_from_layout


def _moves(
    layout: str, cell: tuple[int, int], immune: tuple[Side, ...] = ()
) -> frozenset[tuple[int, int]]:
    board = board_from_layout(layout)
    piece = board[cell]
    assert piece is not None
    return MoveGenerator(board, immune).legal_moves(cell, piece)


class TestStartingPosition:
    def test_white_soldiers(self) -> None:
        board = Board.initial()
        gen = MoveGenerator(board)
        assert gen.legal_moves((4, 0), board[(4, 0)]) == {(3, 0)}
        assert gen.legal_moves((4, 4), board[(4, 4)]) == {(3, 4)}

    def test_white_king(self) -> None:
        board = Board.initial()
        moves = MoveGenerator(board).legal_moves((4, 2), board[(4, 2)])
        assert moves == {(3, 1), (3, 2), (3, 3)}

    def test_white_champion(self) -> None:
        board = Board.initial()
        moves = MoveGenerator(board).legal_moves((4, 3), board[(4, 3)])
        assert moves == {(3, 3), (2, 3), (3, 2), (2, 1), (3, 4)}

    def test_white_tower(self) -> None:
        board = Board.initial()
        moves = MoveGenerator(board).legal_moves((4, 1), board[(4, 1)])
        assert moves == {(3, 1), (2, 1), (1, 1)}

    def test_black_soldier_moves_down(self) -> None:
        board = Board.initial()
        assert MoveGenerator(board).legal_moves((0, 0), board[(0, 0)]) == {(1, 0)}

    def test_every_white_piece_can_move(self) -> None:
        moves = MoveGenerator(Board.initial()).all_legal_moves(Side.WHITE)
        assert sorted(moves) == [(4, c) for c in range(5)]


class TestSoldier:
    def test_forward_and_sideways_only(self) -> None:
        assert _moves("5/5/2S2/5/5", (2, 2)) == {(1, 2), (2, 1), (2, 3)}

    def test_black_forward_is_down(self) -> None:
        assert _moves("5/5/2s2/5/5", (2, 2)) == {(3, 2), (2, 1), (2, 3)}

    def test_blocked_by_own_captures_enemy(self) -> None:
        assert _moves("5/2S2/1TSs1/5/5", (2, 2)) == {(2, 3)}

    def test_no_forward_move_on_far_row(self) -> None:
        assert _moves("S4/5/5/5/5", (0, 0)) == {(0, 1)}


class TestSliders:
    def test_champion_reaches_two_in_every_direction(self) -> None:
        moves = _moves("5/5/2C2/5/5", (2, 2))
        assert len(moves) == 16
        assert (0, 0) in moves
        assert (0, 1) not in moves

    def test_champion_cannot_jump(self) -> None:
        moves = _moves("5/5/2C2/2S2/5", (2, 2))
        assert (3, 2) not in moves
        assert (4, 2) not in moves

    def test_tower_stops_at_capture_and_range(self) -> None:
        moves = _moves("5/5/s4/5/T4", (4, 0))
        assert moves == {(3, 0), (2, 0), (4, 1), (4, 2), (4, 3)}

    def test_tower_has_no_diagonals(self) -> None:
        assert (1, 1) not in _moves("5/5/2T2/5/5", (2, 2))


class TestKingImmunity:
    def test_enemy_king_capturable_by_default(self) -> None:
        assert (3, 2) in _moves("5/5/5/2k2/2T2", (4, 2))

    def test_immune_king_is_not_a_destination(self) -> None:
        moves = _moves("5/5/5/2k2/2T2", (4, 2), immune=(Side.BLACK,))
        assert (3, 2) not in moves

    def test_immune_king_still_blocks_the_ray(self) -> None:
        moves = _moves("5/5/5/2k2/2T2", (4, 2), immune=(Side.BLACK,))
        assert (2, 2) not in moves
        assert (1, 2) not in moves

    def test_own_immunity_does_not_protect_enemy(self) -> None:
        assert (3, 2) in _moves("5/5/5/2k2/2T2", (4, 2), immune=(Side.WHITE,))


class TestAdjacentCells:
    @pytest.mark.parametrize(
        ("cell", "count"), [((0, 0), 3), ((0, 2), 5), ((2, 2), 8)]
    )
    def test_counts(self, cell: tuple[int, int], count: int) -> None:
        assert len(adjacent_cells(cell)) == count
