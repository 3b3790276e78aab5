"""FastAPI websocket relay forwarding match snapshots between two peers."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from collections.abc import Callable
from typing import Any, Literal

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ConfigDict, ValidationError

from throne import __version__
from throne.core.enums import Side
from throne.core.errors import SnapshotFormatError
from throne.core.notation import state_to_dict
from throne.relay.config import RelaySettings
from throne.relay.rooms import Delivery, RelayError, RoomRegistry

_LOGGER = logging.getLogger(__name__)


# ── Client messages ─────────────────────────────────────────────────────────


class _Message(BaseModel):
    model_config = ConfigDict(extra="ignore")


class CreateRoomMessage(_Message):
    type: Literal["create-room"]


class JoinRoomMessage(_Message):
    type: Literal["join-room"]
    roomCode: str


class RejoinRoomMessage(_Message):
    type: Literal["rejoin-room"]
    roomCode: str
    side: Literal["white", "black"]
    token: str


class StateMessage(_Message):
    type: Literal["move", "sacrifice"]
    gameState: dict[str, Any]


class GameOverMessage(_Message):
    type: Literal["game-over"]
    winner: Literal["white", "black"] | None = None
    gameState: dict[str, Any] | None = None


class RematchMessage(_Message):
    type: Literal["request-rematch", "accept-rematch"]


_MESSAGE_MODELS: dict[str, type[_Message]] = {
    "create-room": CreateRoomMessage,
    "join-room": JoinRoomMessage,
    "rejoin-room": RejoinRoomMessage,
    "move": StateMessage,
    "sacrifice": StateMessage,
    "game-over": GameOverMessage,
    "request-rematch": RematchMessage,
    "accept-rematch": RematchMessage,
}

_FORWARDED_EVENT = {"move": "opponent-move", "sacrifice": "opponent-sacrifice"}


def parse_client_message(data: Any) -> _Message:
    """Validate a decoded JSON message; raises ValueError if unusable."""
    if not isinstance(data, dict):
        raise ValueError("Message must be a JSON object")
    model = _MESSAGE_MODELS.get(str(data.get("type")))
    if model is None:
        raise ValueError(f"Unknown message type: {data.get('type')!r}")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid {data['type']} message") from exc


# ── Hub ─────────────────────────────────────────────────────────────────────


class RelayHub:
    """Connected peers plus the room registry, serialised by one lock."""

    def __init__(
        self,
        registry: RoomRegistry,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.registry = registry
        self.connections: dict[str, WebSocket] = {}
        self._clock = clock
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Future[None]] = set()

    async def connect(self, websocket: WebSocket) -> str:
        peer = uuid.uuid4().hex
        self.connections[peer] = websocket
        _LOGGER.info("Player connected: %s", peer)
        return peer

    async def disconnect(self, peer: str) -> None:
        self.connections.pop(peer, None)
        _LOGGER.info("Player disconnected: %s", peer)
        async with self._lock:
            deliveries = self.registry.disconnect(peer, self._clock())
        await self._deliver(deliveries)
        asyncio.get_running_loop().call_later(
            self.registry.grace_period_seconds, self._schedule_purge
        )

    async def handle(self, peer: str, raw: str) -> None:
        """Process one text frame from *peer*."""
        try:
            message = parse_client_message(json.loads(raw))
        except ValueError as exc:
            await self._reply(peer, _error(str(exc)))
            return

        try:
            async with self._lock:
                replies, deliveries = self._dispatch(peer, message)
        except RelayError as exc:
            await self._reply(peer, _error(str(exc)))
            return
        except SnapshotFormatError as exc:
            _LOGGER.warning("Rejected snapshot from %s: %s", peer, exc)
            await self._reply(peer, _error("Malformed game state"))
            return

        for reply in replies:
            await self._reply(peer, reply)
        await self._deliver(deliveries)

    # ── Internal ─────────────────────────────────────────────────────────

    def _dispatch(
        self, peer: str, message: _Message
    ) -> tuple[list[dict[str, Any]], list[Delivery]]:
        registry = self.registry
        if isinstance(message, CreateRoomMessage):
            registry.purge_expired(self._clock())
            room, side, token = registry.create_room(peer)
            return [_seated("room-created", room.code, side, token, room.state)], []
        if isinstance(message, JoinRoomMessage):
            room, side, deliveries = registry.join_room(message.roomCode, peer)
            token = room.seats[side].token
            return [_seated("room-joined", room.code, side, token, room.state)], deliveries
        if isinstance(message, RejoinRoomMessage):
            side = Side.parse(message.side)
            room, deliveries = registry.rejoin_room(
                message.roomCode, side, message.token, peer
            )
            return [
                _seated("room-joined", room.code, side, message.token, room.state)
            ], deliveries
        if isinstance(message, StateMessage):
            event = _FORWARDED_EVENT[message.type]
            return [], registry.submit_state(peer, message.gameState, event=event)
        if isinstance(message, GameOverMessage):
            return [], registry.record_game_over(peer, message.winner, message.gameState)
        if isinstance(message, RematchMessage):
            if message.type == "request-rematch":
                return [], registry.request_rematch(peer)
            return [], registry.accept_rematch(peer)
        return [_error("Unsupported message")], []

    def _schedule_purge(self) -> None:
        task = asyncio.ensure_future(self._purge())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _purge(self) -> None:
        async with self._lock:
            self.registry.purge_expired(self._clock())

    async def _reply(self, peer: str, message: dict[str, Any]) -> None:
        await self._deliver([Delivery(peer, message)])

    async def _deliver(self, deliveries: list[Delivery]) -> None:
        for delivery in deliveries:
            websocket = self.connections.get(delivery.peer)
            if websocket is None:
                continue
            try:
                await websocket.send_json(delivery.message)
            except RuntimeError:
                _LOGGER.debug("Could not deliver to %s", delivery.peer)


def _seated(
    message_type: str, code: str, side: Side, token: str, state: Any
) -> dict[str, Any]:
    return {
        "type": message_type,
        "roomCode": code,
        "playerColor": str(side),
        "token": token,
        "gameState": state_to_dict(state),
    }


def _error(text: str) -> dict[str, Any]:
    return {"type": "error", "message": text}


# ── Application ─────────────────────────────────────────────────────────────


def create_app(settings: RelaySettings | None = None) -> FastAPI:
    """Build the relay application with its own registry."""
    settings = settings or RelaySettings()
    hub = RelayHub(RoomRegistry(settings.grace_period_seconds))

    app = FastAPI(
        title="Throne relay",
        description="Forwards Throne match snapshots between two players",
        version=__version__,
    )
    app.state.hub = hub

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "rooms": len(hub.registry)}

    @app.get("/api/room/{room_code}")
    def inspect_room(room_code: str) -> dict[str, Any]:
        try:
            room = hub.registry.get(room_code)
        except RelayError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {
            "roomCode": room.code,
            "available": Side.BLACK not in room.seats,
            "players": sum(seat.peer is not None for seat in room.seats.values()),
        }

    @app.websocket("/ws")
    async def relay(websocket: WebSocket) -> None:
        await websocket.accept()
        peer = await hub.connect(websocket)
        try:
            while True:
                raw = await websocket.receive_text()
                await hub.handle(peer, raw)
        except WebSocketDisconnect:
            pass
        finally:
            await hub.disconnect(peer)

    return app
