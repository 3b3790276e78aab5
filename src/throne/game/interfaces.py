"""Abstract interfaces for the game layer.

Shells (desktop window, network session, tests) depend on these, not on
the concrete controller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import IntEnum, auto
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from throne.core.enums import SacrificeEffect
    from throne.core.state import MatchState
    from throne.core.types import Cell


# ── Game phase FSM states ────────────────────────────────────────────────────


class GamePhase(IntEnum):
    """Finite-state-machine states of a match, as seen by a shell."""

    NOT_STARTED = auto()
    AWAITING_SELECTION = auto()
    PIECE_SELECTED = auto()
    INSTANT_KILL_ARMED = auto()
    GAME_OVER = auto()


# (message type, payload) -> None; the transport to the relay.
SendCallback = Callable[[str, dict[str, Any]], None]


# ── Abstract interfaces ─────────────────────────────────────────────────────


class IGameController(ABC):
    """Interface for the match orchestrator."""

    @abstractmethod
    def new_game(self, state: MatchState | None = None) -> None:
        """Set up a fresh match, optionally from a prepared state."""

    @abstractmethod
    def click(self, cell: Cell) -> bool:
        """Forward a board click. Returns True if the state changed."""

    @abstractmethod
    def request_sacrifice(self, effect: SacrificeEffect) -> bool:
        """Spend the side's sacrifice. Returns True on success."""

    @abstractmethod
    def reset_match(self) -> None:
        """Abandon the current match and start over."""
