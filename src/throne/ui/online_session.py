"""Online match orchestration for the main UI thread."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from throne.core.enums import Side
from throne.core.notation import state_from_dict
from throne.game.network import NetworkSession
from throne.ui.relay_client import RelayClient

_LOGGER = logging.getLogger(__name__)


class OnlineSession:
    """Owns the relay link, the room seat and the :class:`NetworkSession`.

    The window hands in callbacks for swapping its controller and for user
    feedback; everything relay-specific (room code, rejoin token, pending
    rematch offers) stays here.
    """

    __slots__ = (
        "_client",
        "_activate",
        "_deactivate",
        "_set_status",
        "_warn",
        "_on_changed",
        "_session",
        "_url",
        "_room_code",
        "_token",
        "_waiting_for_opponent",
        "_rematch_offered",
    )

    def __init__(
        self,
        *,
        client: RelayClient,
        activate: Callable[[NetworkSession], None],
        deactivate: Callable[[], None],
        set_status: Callable[[str], None],
        warn: Callable[[str], None],
        on_changed: Callable[[], None],
    ) -> None:
        self._client = client
        self._activate = activate
        self._deactivate = deactivate
        self._set_status = set_status
        self._warn = warn
        self._on_changed = on_changed

        self._session: NetworkSession | None = None
        self._url: str | None = None
        self._room_code: str | None = None
        self._token: str | None = None
        self._waiting_for_opponent = False
        self._rematch_offered = False

        client.message_received.connect(self._on_message)
        client.connection_changed.connect(self._on_connection_changed)
        client.error_occurred.connect(self._on_error)

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def session(self) -> NetworkSession | None:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def room_code(self) -> str | None:
        return self._room_code

    @property
    def local_side(self) -> Side | None:
        return None if self._session is None else self._session.local_side

    @property
    def waiting_for_opponent(self) -> bool:
        return self._waiting_for_opponent

    @property
    def rematch_offered(self) -> bool:
        return self._rematch_offered

    @property
    def is_connected(self) -> bool:
        return self._client.is_connected

    @property
    def can_reconnect(self) -> bool:
        return (
            self._session is not None
            and self._token is not None
            and not self._client.is_connected
        )

    # ── Lobby ────────────────────────────────────────────────────────────

    def host(self, url: str) -> None:
        """Open a room on the relay at *url* and wait for an opponent."""
        self._connect(url)
        self._client.send("create-room", {})
        self._set_status("Creating room...")

    def join(self, url: str, room_code: str) -> None:
        self._connect(url)
        self._client.send("join-room", {"roomCode": room_code})
        self._set_status(f"Joining room {room_code.upper()}...")

    def reconnect(self) -> None:
        """Reclaim our seat after the link dropped."""
        if not self.can_reconnect or self._url is None:
            return
        assert self._session is not None and self._token is not None
        self._client.open(self._url)
        self._client.send(
            "rejoin-room",
            {
                "roomCode": self._room_code,
                "side": str(self._session.local_side),
                "token": self._token,
            },
        )
        self._set_status(f"Reconnecting to room {self._room_code}...")

    def rematch(self) -> None:
        """Accept the opponent's offer, or offer a rematch ourselves."""
        if self._session is None:
            return
        if self._rematch_offered:
            self._session.accept_rematch()
            self._set_status("Rematch accepted")
        else:
            self._session.reset_match()
            self._set_status("Rematch requested: waiting for the opponent")

    def leave(self) -> None:
        """Close the link and hand the board back to local play."""
        self._client.close()
        was_active = self._session is not None
        self._reset()
        if was_active:
            _LOGGER.info("Left online match")
            self._deactivate()

    # ── Relay messages ───────────────────────────────────────────────────

    def _on_message(self, message_type: str, payload: Mapping[str, Any]) -> None:
        if message_type in ("room-created", "room-joined"):
            self._take_seat(message_type, payload)
        elif message_type == "error" and self._session is None:
            self._client.close()
            self._warn(str(payload.get("message", "Relay error")))
        elif self._session is not None:
            if message_type == "opponent-joined":
                self._waiting_for_opponent = False
            elif message_type == "rematch-requested":
                self._rematch_offered = True
            elif message_type == "rematch-start":
                self._rematch_offered = False
                token = payload.get("token")
                if isinstance(token, str):
                    self._token = token
            if not self._session.handle_message(message_type, payload):
                _LOGGER.debug("Unhandled relay message: %s", message_type)
        else:
            _LOGGER.debug("Relay message outside a match: %s", message_type)
        self._on_changed()

    def _take_seat(self, message_type: str, payload: Mapping[str, Any]) -> None:
        try:
            side = Side.parse(str(payload["playerColor"]))
            room_code = str(payload["roomCode"])
            token = str(payload["token"])
            snapshot = payload["gameState"]
            state_from_dict(snapshot)
        except (KeyError, ValueError) as exc:
            _LOGGER.warning("Malformed %s reply: %s", message_type, exc)
            self.leave()
            self._warn("Unexpected reply from the relay")
            return

        if self._session is not None and self._room_code == room_code:
            # Rejoined our own seat: resync the board only.
            self._token = token
            self._session.receive_snapshot(snapshot)
            self._set_status(f"Reconnected to room {room_code}")
            return

        session = NetworkSession(side, self._client.send)
        session.on_notice.append(self._set_status)
        self._session = session
        self._room_code = room_code
        self._token = token
        self._waiting_for_opponent = message_type == "room-created"
        self._rematch_offered = False
        self._activate(session)
        session.receive_snapshot(snapshot)
        _LOGGER.info("Seated in room %s as %s", room_code, side)
        if self._waiting_for_opponent:
            self._set_status(
                f"Room {room_code} created: share the code with your opponent"
            )
        else:
            self._set_status(f"Joined room {room_code} as {str(side).capitalize()}")

    def _on_connection_changed(self, connected: bool) -> None:
        if not connected and self._session is not None:
            self._set_status("Lost connection to the relay")
        self._on_changed()

    def _on_error(self, text: str) -> None:
        if self._session is None:
            self._client.close()
            self._warn(f"Could not reach the relay: {text}")
        else:
            self._set_status(f"Relay error: {text}")
        self._on_changed()

    # ── Internal ─────────────────────────────────────────────────────────

    def _connect(self, url: str) -> None:
        if self._session is not None:
            self.leave()
        self._client.close()
        self._url = url
        self._client.open(url)

    def _reset(self) -> None:
        self._session = None
        self._room_code = None
        self._token = None
        self._waiting_for_opponent = False
        self._rematch_offered = False
