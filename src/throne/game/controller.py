"""GameController — the central orchestrator of a local match.

Wraps a :class:`RuleEngine`, turns rule violations into boolean results,
and emits events via simple callbacks so the UI / tests can subscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from throne.core.engine import RuleEngine
from throne.core.enums import SacrificeEffect, Side, TransitionKind
from throne.core.errors import RuleViolation
from throne.core.rules import Transition
from throne.core.state import MatchState, Selection
from throne.core.types import Cell
from throne.game.interfaces import GamePhase, IGameController

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

StateCallback = Callable[[MatchState, TransitionKind], None]
RejectedCallback = Callable[[RuleViolation], None]
GameOverCallback = Callable[[Side], None]  # winner
PhaseCallback = Callable[[GamePhase], None]


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_state: list[StateCallback] = field(default_factory=list)
    on_rejected: list[RejectedCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)


# ── Controller ───────────────────────────────────────────────────────────────


class GameController(IGameController):
    """Orchestrates a single-device match: forwards intents to the engine,
    reports rejections, notifies listeners.

    Thread-safety: call from a single thread (the UI thread).
    """

    def __init__(self) -> None:
        self._engine = RuleEngine()
        self._phase = GamePhase.NOT_STARTED
        self.events = GameEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def state(self) -> MatchState:
        return self._engine.state

    @property
    def selection(self) -> Selection | None:
        return self._engine.selection

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def is_game_over(self) -> bool:
        return self._engine.state.game_over

    def available_sacrifices(self) -> frozenset[SacrificeEffect]:
        if self._phase == GamePhase.NOT_STARTED:
            return frozenset()
        return self._engine.available_sacrifices()

    def instant_kill_targets(self) -> frozenset[Cell]:
        return self._engine.instant_kill_targets()

    # ── IGameController impl ─────────────────────────────────────────────

    def new_game(self, state: MatchState | None = None) -> None:
        """Start a fresh match, or continue from a prepared *state*."""
        transition = self._engine.reset_match()
        if state is not None:
            self._engine.load_state(state)
            transition = Transition(state, TransitionKind.RESET)
        self._publish(transition)

    def reset_match(self) -> None:
        self.new_game()

    def click(self, cell: Cell) -> bool:
        return self._run(lambda: self._engine.click(cell))

    def select_cell(self, cell: Cell) -> bool:
        return self._run(lambda: self._engine.select_cell(cell))

    def attempt_move(self, cell: Cell) -> bool:
        return self._run(lambda: self._engine.attempt_move(cell))

    def request_sacrifice(self, effect: SacrificeEffect) -> bool:
        return self._run(lambda: self._engine.request_sacrifice(effect))

    def resolve_instant_kill(self, cell: Cell) -> bool:
        return self._run(lambda: self._engine.resolve_instant_kill(cell))

    # ── Internal helpers ─────────────────────────────────────────────────

    def _can_act(self) -> bool:
        return self._phase != GamePhase.NOT_STARTED

    def _run(self, action: Callable[[], Transition]) -> bool:
        if not self._can_act():
            return False
        try:
            transition = action()
        except RuleViolation as exc:
            _LOGGER.debug("Rejected: %s", exc)
            self._sync_phase()
            self._emit_rejected(exc)
            return False
        self._publish(transition)
        self._on_local_transition(transition)
        return True

    def _on_local_transition(self, transition: Transition) -> None:
        """Hook for subclasses; called after a player action succeeded."""

    def _publish(self, transition: Transition) -> None:
        """Notify listeners of an adopted transition."""
        self._emit_state(transition.state, transition.kind)
        self._sync_phase()
        winner = transition.state.winner
        if transition.kind == TransitionKind.GAME_OVER and winner is not None:
            _LOGGER.info("Game over: %s wins", winner)
            self._emit_game_over(winner)

    def _sync_phase(self) -> None:
        state = self._engine.state
        if state.game_over:
            phase = GamePhase.GAME_OVER
        elif state.instant_kill_armed:
            phase = GamePhase.INSTANT_KILL_ARMED
        elif self._engine.selection is not None:
            phase = GamePhase.PIECE_SELECTED
        else:
            phase = GamePhase.AWAITING_SELECTION
        if phase != self._phase:
            self._phase = phase
            self._emit_phase(phase)

    def _emit_state(self, state: MatchState, kind: TransitionKind) -> None:
        for cb in self.events.on_state:
            cb(state, kind)

    def _emit_rejected(self, violation: RuleViolation) -> None:
        for cb in self.events.on_rejected:
            cb(violation)

    def _emit_game_over(self, winner: Side) -> None:
        for cb in self.events.on_game_over:
            cb(winner)

    def _emit_phase(self, phase: GamePhase) -> None:
        for cb in self.events.on_phase_changed:
            cb(phase)
