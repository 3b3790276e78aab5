"""Core domain layer — pure Throne rules with zero external dependencies.

Quick start::

    from throne.core import RuleEngine, SacrificeEffect

    engine = RuleEngine()
    engine.select_cell((4, 0))
    engine.attempt_move((3, 0))
    engine.request_sacrifice(SacrificeEffect.KING_SHIELD)
"""

from throne.core.board import Board
from throne.core.engine import RuleEngine
from throne.core.enums import PieceKind, SacrificeEffect, Side, TransitionKind
from throne.core.errors import (
    ActionAfterGameOver,
    IllegalDestination,
    IllegalSelection,
    InstantKillTargetInvalid,
    RuleViolation,
    SacrificeUnavailable,
    SnapshotFormatError,
)
from throne.core.move_generator import MoveGenerator, adjacent_cells
from throne.core.notation import (
    STARTING_LAYOUT,
    board_from_layout,
    board_to_layout,
    state_from_dict,
    state_from_layout,
    state_to_dict,
)
from throne.core.piece import Piece
from throne.core.rules import Rules, Transition
from throne.core.state import MatchState, Selection, SideFlags
from throne.core.types import BOARD_SIZE, Cell, cell_name, parse_cell

__all__ = [
    # Enums
    "PieceKind",
    "SacrificeEffect",
    "Side",
    "TransitionKind",
    # Types / helpers
    "BOARD_SIZE",
    "Cell",
    "adjacent_cells",
    "cell_name",
    "parse_cell",
    # Domain objects
    "Board",
    "MatchState",
    "MoveGenerator",
    "Piece",
    "RuleEngine",
    "Rules",
    "Selection",
    "SideFlags",
    "Transition",
    # Errors
    "ActionAfterGameOver",
    "IllegalDestination",
    "IllegalSelection",
    "InstantKillTargetInvalid",
    "RuleViolation",
    "SacrificeUnavailable",
    "SnapshotFormatError",
    # Notation
    "STARTING_LAYOUT",
    "board_from_layout",
    "board_to_layout",
    "state_from_dict",
    "state_from_layout",
    "state_to_dict",
]
