"""RuleEngine — the stateful wrapper shells talk to.

Holds the current :class:`MatchState` plus the presentation-only
:class:`Selection` and routes every action through :class:`Rules`.
"""

from __future__ import annotations

import logging

from throne.core.enums import SacrificeEffect, TransitionKind
from throne.core.errors import IllegalDestination, RuleViolation
from throne.core.rules import Rules, Transition
from throne.core.state import MatchState, Selection
from throne.core.types import Cell, cell_name

_LOGGER = logging.getLogger(__name__)


class RuleEngine:
    """Single-threaded state machine for one match.

    Each operation either returns a :class:`Transition` and adopts its
    state, or raises a :class:`RuleViolation` leaving the match as it was.
    """

    __slots__ = ("_state", "_selection")

    def __init__(self, state: MatchState | None = None) -> None:
        self._state = state if state is not None else MatchState.initial()
        self._selection: Selection | None = None

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def selection(self) -> Selection | None:
        return self._selection

    # ── Operations ───────────────────────────────────────────────────────

    def select_cell(self, cell: Cell) -> Transition:
        try:
            selection = Rules.select_cell(self._state, cell)
        except RuleViolation as exc:
            self._selection = None
            _LOGGER.debug("Selection rejected at %s: %s", cell_name(cell), exc)
            raise
        self._selection = selection
        return Transition(self._state, TransitionKind.SELECTED, selection)

    def attempt_move(self, to: Cell) -> Transition:
        Rules.ensure_running(self._state)
        if self._selection is None:
            raise IllegalDestination("No piece selected")
        transition = Rules.attempt_move(self._state, self._selection, to)
        _LOGGER.debug(
            "%s %s %s -> %s (%s)",
            self._state.side_to_move,
            self._selection.piece.kind.name.lower(),
            cell_name(self._selection.cell),
            cell_name(to),
            transition.kind.name,
        )
        return self._adopt(transition)

    def request_sacrifice(self, effect: SacrificeEffect) -> Transition:
        transition = Rules.apply_sacrifice(self._state, effect)
        _LOGGER.debug("%s sacrificed for %s", self._state.side_to_move, effect.value)
        return self._adopt(transition)

    apply_sacrifice = request_sacrifice

    def resolve_instant_kill(self, target: Cell) -> Transition:
        transition = Rules.resolve_instant_kill(self._state, target)
        _LOGGER.debug(
            "%s instant-killed %s", self._state.side_to_move, cell_name(target)
        )
        return self._adopt(transition)

    def click(self, cell: Cell) -> Transition:
        """Interpret a cell click the way the board UI does."""
        if self._state.instant_kill_armed and not self._state.game_over:
            return self.resolve_instant_kill(cell)
        if self._selection is not None and self._selection.allows(cell):
            return self.attempt_move(cell)
        return self.select_cell(cell)

    def clear_selection(self) -> None:
        self._selection = None

    def reset_match(self) -> Transition:
        self._state = MatchState.initial()
        self._selection = None
        _LOGGER.debug("Match reset")
        return Transition(self._state, TransitionKind.RESET)

    def load_state(self, state: MatchState) -> None:
        """Replace the match verbatim, e.g. with a peer's snapshot."""
        self._state = state
        self._selection = None

    # ── Queries ──────────────────────────────────────────────────────────

    def legal_moves(self, cell: Cell) -> frozenset[Cell]:
        return Rules.legal_moves(self._state, cell)

    def available_sacrifices(self) -> frozenset[SacrificeEffect]:
        return Rules.available_sacrifices(self._state)

    def instant_kill_targets(self) -> frozenset[Cell]:
        return Rules.instant_kill_targets(self._state)

    # ── Internal ─────────────────────────────────────────────────────────

    def _adopt(self, transition: Transition) -> Transition:
        self._state = transition.state
        self._selection = transition.selection
        return transition
