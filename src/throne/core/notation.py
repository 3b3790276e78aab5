"""Board layout notation and the MatchState wire codec.

Layout strings list rows top to bottom (row 0 first) separated by ``/``;
letters are pieces (uppercase = white) and digits are runs of empty
cells, e.g. :data:`STARTING_LAYOUT`.

The dict form produced by :func:`state_to_dict` is the snapshot peers
exchange through the relay.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from throne.core.board import Board
from throne.core.enums import PieceKind, Side
from throne.core.errors import SnapshotFormatError
from throne.core.piece import Piece
from throne.core.state import MatchState, SideFlags
from throne.core.types import BOARD_SIZE

STARTING_LAYOUT = "sckts/5/5/5/STKCS"


# ── Layout notation ─────────────────────────────────────────────────────────


def board_from_layout(layout: str) -> Board:
    """Parse a layout string into a :class:`Board`."""
    rows = layout.strip().split("/")
    if len(rows) != BOARD_SIZE:
        raise ValueError(f"Invalid layout (need {BOARD_SIZE} rows): {layout!r}")
    board = Board()
    for row, row_text in enumerate(rows):
        col = 0
        for ch in row_text:
            if ch.isdigit():
                step = int(ch)
                if not (1 <= step <= BOARD_SIZE):
                    raise ValueError(f"Invalid layout digit {ch!r}: {layout!r}")
                col += step
            else:
                if col >= BOARD_SIZE:
                    raise ValueError(f"Invalid layout row width: {layout!r}")
                board[(row, col)] = Piece.from_char(ch)
                col += 1
            if col > BOARD_SIZE:
                raise ValueError(f"Invalid layout row width: {layout!r}")
        if col != BOARD_SIZE:
            raise ValueError(f"Invalid layout row width: {layout!r}")
    return board


def board_to_layout(board: Board) -> str:
    rows: list[str] = []
    for row in range(BOARD_SIZE):
        empty = 0
        text = ""
        for col in range(BOARD_SIZE):
            piece = board[(row, col)]
            if piece is None:
                empty += 1
                continue
            if empty:
                text += str(empty)
                empty = 0
            text += str(piece)
        if empty:
            text += str(empty)
        rows.append(text)
    return "/".join(rows)


def state_from_layout(layout: str, side_to_move: Side = Side.WHITE) -> MatchState:
    """Fresh-modifier state on a custom board; handy for set-ups and tests."""
    return MatchState(board=board_from_layout(layout), side_to_move=side_to_move)


# ── Wire snapshot ───────────────────────────────────────────────────────────


def state_to_dict(state: MatchState) -> dict[str, Any]:
    """Serialise *state* to the JSON-ready snapshot shape."""
    board_rows: list[list[dict[str, str] | None]] = []
    for row in range(BOARD_SIZE):
        cells: list[dict[str, str] | None] = []
        for col in range(BOARD_SIZE):
            piece = state.board[(row, col)]
            cells.append(
                None
                if piece is None
                else {"type": piece.kind.letter, "player": str(piece.owner)}
            )
        board_rows.append(cells)

    def per_side(attr: str) -> dict[str, bool]:
        return {str(side): getattr(state.flags(side), attr) for side in Side}

    return {
        "board": board_rows,
        "currentPlayer": str(state.side_to_move),
        "sacrificeUsed": per_side("sacrifice_used"),
        "kingImmune": per_side("king_immune"),
        "championDoubleMove": per_side("champion_double_move"),
        "instantKillMode": state.instant_kill_armed,
        "gameOver": state.game_over,
        "winner": None if state.winner is None else str(state.winner),
    }


def state_from_dict(data: Mapping[str, Any]) -> MatchState:
    """Decode a snapshot; raises :class:`SnapshotFormatError` if malformed."""
    try:
        board = _board_from_rows(data["board"])
        side_to_move = Side.parse(data["currentPlayer"])
        flags = {
            side: SideFlags(
                sacrifice_used=_flag(data["sacrificeUsed"], side),
                king_immune=_flag(data["kingImmune"], side),
                champion_double_move=_flag(data["championDoubleMove"], side),
            )
            for side in Side
        }
        winner_text = data.get("winner")
        winner = None if winner_text is None else Side.parse(winner_text)
        return MatchState(
            board=board,
            side_to_move=side_to_move,
            white=flags[Side.WHITE],
            black=flags[Side.BLACK],
            instant_kill_armed=_bool(data["instantKillMode"]),
            game_over=_bool(data["gameOver"]),
            winner=winner,
        )
    except SnapshotFormatError:
        raise
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        raise SnapshotFormatError(f"Malformed snapshot: {exc}") from exc


def _board_from_rows(rows: Any) -> Board:
    if not isinstance(rows, list) or len(rows) != BOARD_SIZE:
        raise SnapshotFormatError(f"Board must have {BOARD_SIZE} rows")
    board = Board()
    for row, cells in enumerate(rows):
        if not isinstance(cells, list) or len(cells) != BOARD_SIZE:
            raise SnapshotFormatError(f"Row {row} must have {BOARD_SIZE} cells")
        for col, cell in enumerate(cells):
            if cell is None:
                continue
            board[(row, col)] = Piece(
                PieceKind.from_letter(cell["type"]), Side.parse(cell["player"])
            )
    return board


def _flag(pair: Mapping[str, Any], side: Side) -> bool:
    return _bool(pair[str(side)])


def _bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise SnapshotFormatError(f"Expected a boolean, got {value!r}")
    return value
