"""Room registry — seats, turn-ownership checks and disconnect grace.

Transport-free: peers are opaque ids and every method returns what
should be delivered to whom, so the websocket server stays a thin shell.
The registry never runs the rules; a submitted snapshot is stored and
forwarded as long as it comes from the side whose turn it was.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field, replace
from typing import Any

from throne.core.enums import Side
from throne.core.notation import state_from_dict, state_to_dict
from throne.core.state import MatchState

_LOGGER = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"  # no 0/O, 1/I
ROOM_CODE_LENGTH = 4
DEFAULT_GRACE_SECONDS = 30.0


# ── Errors ──────────────────────────────────────────────────────────────────


class RelayError(Exception):
    """Base class for user-visible, non-fatal relay errors."""


class InvalidRoomCode(RelayError):
    pass


class RoomNotFound(RelayError):
    pass


class RoomFull(RelayError):
    pass


class SeatUnavailable(RelayError):
    pass


# ── Helpers ─────────────────────────────────────────────────────────────────


def generate_room_code() -> str:
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def normalize_room_code(code: str) -> str:
    """Upper-case and validate a human-entered code."""
    normalized = code.strip().upper()
    if len(normalized) != ROOM_CODE_LENGTH or any(
        ch not in ROOM_CODE_ALPHABET for ch in normalized
    ):
        raise InvalidRoomCode(
            f"Please enter a {ROOM_CODE_LENGTH}-character room code"
        )
    return normalized


@dataclass
class Seat:
    """One side of a room. ``peer`` is None while the player is away."""

    token: str
    peer: str | None = None
    vacated_at: float | None = None


@dataclass
class Room:
    code: str
    seats: dict[Side, Seat]
    state: MatchState = field(default_factory=MatchState.initial)
    rematch_requested_by: Side | None = None

    def side_of(self, peer: str) -> Side | None:
        for side, seat in self.seats.items():
            if seat.peer == peer:
                return side
        return None

    def peer_of(self, side: Side) -> str | None:
        seat = self.seats.get(side)
        return None if seat is None else seat.peer

    def is_abandoned(self) -> bool:
        return all(seat.peer is None for seat in self.seats.values())


@dataclass(frozen=True)
class Delivery:
    """A message the transport must send to *peer*."""

    peer: str
    message: dict[str, Any]


# ── Registry ────────────────────────────────────────────────────────────────


class RoomRegistry:
    """In-memory rooms keyed by code. Not thread-safe; callers serialise."""

    def __init__(self, grace_period_seconds: float = DEFAULT_GRACE_SECONDS) -> None:
        self._rooms: dict[str, Room] = {}
        self._peer_rooms: dict[str, str] = {}
        self.grace_period_seconds = grace_period_seconds

    # ── Lookup ───────────────────────────────────────────────────────────

    def get(self, code: str) -> Room:
        normalized = normalize_room_code(code)
        room = self._rooms.get(normalized)
        if room is None:
            raise RoomNotFound("Room not found")
        return room

    def room_of(self, peer: str) -> Room | None:
        code = self._peer_rooms.get(peer)
        return None if code is None else self._rooms.get(code)

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code: object) -> bool:
        return code in self._rooms

    # ── Lifecycle ────────────────────────────────────────────────────────

    def create_room(self, peer: str) -> tuple[Room, Side, str]:
        """Open a room with *peer* seated as White."""
        self._ensure_unseated(peer)
        code = generate_room_code()
        while code in self._rooms:
            code = generate_room_code()
        white = Seat(token=secrets.token_hex(8), peer=peer)
        room = Room(code=code, seats={Side.WHITE: white})
        self._rooms[code] = room
        self._peer_rooms[peer] = code
        _LOGGER.info("Room created: %s by %s", code, peer)
        return room, Side.WHITE, white.token

    def join_room(self, code: str, peer: str) -> tuple[Room, Side, list[Delivery]]:
        """Seat *peer* as Black; the creator is told an opponent arrived."""
        self._ensure_unseated(peer)
        room = self.get(code)
        if Side.BLACK in room.seats:
            raise RoomFull("Room is full")
        room.seats[Side.BLACK] = Seat(token=secrets.token_hex(8), peer=peer)
        self._peer_rooms[peer] = room.code
        _LOGGER.info("Player %s joined room %s as black", peer, room.code)
        return room, Side.BLACK, self._to_opponent(room, Side.BLACK, "opponent-joined")

    def rejoin_room(
        self, code: str, side: Side, token: str, peer: str
    ) -> tuple[Room, list[Delivery]]:
        """Reclaim a vacated seat within the grace period."""
        self._ensure_unseated(peer)
        room = self.get(code)
        seat = room.seats.get(side)
        if seat is None or not secrets.compare_digest(seat.token, token):
            raise SeatUnavailable("Seat not found")
        if seat.peer is not None:
            raise SeatUnavailable("Seat is already taken")
        seat.peer = peer
        seat.vacated_at = None
        self._peer_rooms[peer] = room.code
        _LOGGER.info("Player %s rejoined room %s as %s", peer, room.code, side)
        return room, self._to_opponent(room, side, "opponent-reconnected")

    def disconnect(self, peer: str, now: float) -> list[Delivery]:
        """Vacate *peer*'s seat; the room survives for the grace period."""
        code = self._peer_rooms.pop(peer, None)
        room = None if code is None else self._rooms.get(code)
        if room is None:
            return []
        side = room.side_of(peer)
        if side is None:
            return []
        seat = room.seats[side]
        seat.peer = None
        seat.vacated_at = now
        _LOGGER.info("Player %s left room %s", peer, room.code)
        return self._to_opponent(room, side, "opponent-disconnected")

    def purge_expired(self, now: float) -> list[str]:
        """Delete rooms whose every seat has been vacant past the grace period."""
        expired: list[str] = []
        for code, room in list(self._rooms.items()):
            if not room.is_abandoned():
                continue
            vacated = [s.vacated_at for s in room.seats.values() if s.vacated_at is not None]
            if vacated and now - max(vacated) >= self.grace_period_seconds:
                del self._rooms[code]
                expired.append(code)
                _LOGGER.info("Room %s deleted", code)
        return expired

    # ── Match traffic ────────────────────────────────────────────────────

    def submit_state(
        self, peer: str, snapshot: dict[str, Any], *, event: str
    ) -> list[Delivery]:
        """Store and forward a mover's snapshot.

        Out-of-turn submissions are dropped without an error, matching the
        relay's role as a dumb forwarder. Raises ``SnapshotFormatError``
        for an undecodable snapshot.
        """
        room, side = self._seated(peer)
        if room is None or side is None:
            return []
        if room.state.game_over:
            return []
        if room.state.side_to_move != side:
            _LOGGER.warning(
                "Dropped out-of-turn %s from %s in room %s", event, peer, room.code
            )
            return []
        room.state = state_from_dict(snapshot)
        return self._to_opponent(
            room, side, event, gameState=state_to_dict(room.state)
        )

    def record_game_over(
        self, peer: str, winner: str | None, snapshot: dict[str, Any] | None
    ) -> list[Delivery]:
        room, side = self._seated(peer)
        if room is None or side is None:
            return []
        if room.state.game_over:
            _LOGGER.warning("Dropped repeated game-over from %s", peer)
            return []
        if room.state.side_to_move != side:
            _LOGGER.warning("Dropped out-of-turn game-over from %s", peer)
            return []
        state = room.state if snapshot is None else state_from_dict(snapshot)
        winner_side = None if winner is None else Side.parse(winner)
        room.state = replace(state, game_over=True, winner=winner_side)
        _LOGGER.info("Room %s: %s wins", room.code, winner_side)
        return self._to_opponent(
            room,
            side,
            "game-ended",
            winner=winner,
            gameState=state_to_dict(room.state),
        )

    def request_rematch(self, peer: str) -> list[Delivery]:
        room, side = self._seated(peer)
        if room is None or side is None:
            return []
        room.rematch_requested_by = side
        return self._to_opponent(room, side, "rematch-requested")

    def accept_rematch(self, peer: str) -> list[Delivery]:
        """Swap seats, reset the match and tell both players their colour."""
        room, side = self._seated(peer)
        if room is None or side is None:
            return []
        if room.rematch_requested_by is None or room.rematch_requested_by == side:
            return []
        if Side.BLACK not in room.seats:
            return []
        room.seats = {
            Side.WHITE: room.seats[Side.BLACK],
            Side.BLACK: room.seats[Side.WHITE],
        }
        room.state = MatchState.initial()
        room.rematch_requested_by = None
        _LOGGER.info("Room %s: rematch started, colours swapped", room.code)
        snapshot = state_to_dict(room.state)
        deliveries: list[Delivery] = []
        for seat_side, seat in room.seats.items():
            if seat.peer is not None:
                deliveries.append(
                    Delivery(
                        seat.peer,
                        {
                            "type": "rematch-start",
                            "playerColor": str(seat_side),
                            "token": seat.token,
                            "gameState": snapshot,
                        },
                    )
                )
        return deliveries

    # ── Internal ─────────────────────────────────────────────────────────

    def _ensure_unseated(self, peer: str) -> None:
        if peer in self._peer_rooms:
            raise SeatUnavailable("You are already in a room")

    def _seated(self, peer: str) -> tuple[Room | None, Side | None]:
        room = self.room_of(peer)
        if room is None:
            return None, None
        return room, room.side_of(peer)

    def _to_opponent(
        self, room: Room, side: Side, message_type: str, **payload: Any
    ) -> list[Delivery]:
        opponent = room.peer_of(side.opposite)
        if opponent is None:
            return []
        return [Delivery(opponent, {"type": message_type, **payload})]
