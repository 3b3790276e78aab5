"""NetworkSession — a controller bound to one side of a relayed match.

The peer whose turn it is runs the rules locally and ships the resulting
snapshot through the relay; the other peer adopts that snapshot as-is.
Outgoing messages go through a ``send(message_type, payload)`` callable
so the session stays transport-agnostic.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from throne.core.enums import Side, TransitionKind
from throne.core.errors import IllegalSelection
from throne.core.notation import state_from_dict, state_to_dict
from throne.core.rules import Transition
from throne.core.state import MatchState
from throne.game.controller import GameController
from throne.game.interfaces import SendCallback

_LOGGER = logging.getLogger(__name__)

NoticeCallback = Callable[[str], None]


class NetworkSession(GameController):
    """Online match from the point of view of *local_side*."""

    def __init__(self, local_side: Side, send: SendCallback) -> None:
        super().__init__()
        self._local_side = local_side
        self._send = send
        self.on_notice: list[NoticeCallback] = []

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def local_side(self) -> Side:
        return self._local_side

    @property
    def is_my_turn(self) -> bool:
        return self.state.side_to_move == self._local_side

    # ── Outgoing ─────────────────────────────────────────────────────────

    def reset_match(self) -> None:
        """Online matches restart through the rematch handshake."""
        self._send("request-rematch", {})

    def accept_rematch(self) -> None:
        self._send("accept-rematch", {})

    def _can_act(self) -> bool:
        if not super()._can_act():
            return False
        if self.is_game_over:
            # Let the engine report ActionAfterGameOver.
            return True
        if not self.is_my_turn:
            self._emit_rejected(IllegalSelection("Waiting for the opponent"))
            return False
        return True

    def _on_local_transition(self, transition: Transition) -> None:
        kind = transition.kind
        snapshot = state_to_dict(transition.state)
        if kind in (TransitionKind.TURN_ENDED, TransitionKind.BONUS_MOVE):
            self._send("move", {"gameState": snapshot})
        elif kind == TransitionKind.SACRIFICE:
            self._send("sacrifice", {"gameState": snapshot})
        elif kind == TransitionKind.GAME_OVER:
            winner = transition.state.winner
            self._send(
                "game-over",
                {"winner": None if winner is None else str(winner), "gameState": snapshot},
            )

    # ── Incoming ─────────────────────────────────────────────────────────

    def handle_message(self, message_type: str, payload: Mapping[str, Any]) -> bool:
        """Apply a relay message. Returns True if it was understood."""
        try:
            if message_type in ("opponent-move", "opponent-sacrifice", "game-ended"):
                self.receive_snapshot(payload["gameState"])
                if message_type == "opponent-sacrifice":
                    self._notice("Opponent used sacrifice!")
                elif self.is_my_turn and not self.is_game_over:
                    self._notice("Your turn!")
                return True
            if message_type == "rematch-start":
                self.start_rematch(
                    Side.parse(payload["playerColor"]), payload["gameState"]
                )
                self._notice("Rematch started! Colors swapped.")
                return True
        except (KeyError, ValueError) as exc:
            _LOGGER.warning("Ignoring malformed %s message: %s", message_type, exc)
            return False
        notices = {
            "opponent-joined": "Opponent joined!",
            "opponent-disconnected": "Opponent disconnected!",
            "opponent-reconnected": "Opponent reconnected!",
            "rematch-requested": "Opponent wants a rematch!",
        }
        if message_type in notices:
            self._notice(notices[message_type])
            return True
        if message_type == "error":
            self._notice(str(payload.get("message", "Relay error")))
            return True
        return False

    def receive_snapshot(self, snapshot: Mapping[str, Any]) -> MatchState:
        """Replace the local match with the peer's snapshot, verbatim."""
        state = state_from_dict(snapshot)
        self._adopt_remote(state)
        return state

    def start_rematch(self, side: Side, snapshot: Mapping[str, Any]) -> None:
        state = state_from_dict(snapshot)
        self._local_side = side
        self._adopt_remote(state)

    # ── Internal ─────────────────────────────────────────────────────────

    def _adopt_remote(self, state: MatchState) -> None:
        self._engine.load_state(state)
        kind = TransitionKind.GAME_OVER if state.game_over else TransitionKind.SYNCED
        self._publish(Transition(state, kind))

    def _notice(self, text: str) -> None:
        for cb in self.on_notice:
            cb(text)

