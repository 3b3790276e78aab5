"""Relay layer — room bookkeeping and the websocket server.

Quick start::

    import uvicorn
    from throne.relay import RelaySettings, create_app

    settings = RelaySettings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
"""

from throne.relay.config import RelaySettings, configure_logging
from throne.relay.rooms import (
    ROOM_CODE_ALPHABET,
    ROOM_CODE_LENGTH,
    Delivery,
    InvalidRoomCode,
    RelayError,
    Room,
    RoomFull,
    RoomNotFound,
    RoomRegistry,
    Seat,
    SeatUnavailable,
    generate_room_code,
    normalize_room_code,
)
from throne.relay.server import RelayHub, create_app, parse_client_message

__all__ = [
    # Config
    "RelaySettings",
    "configure_logging",
    # Rooms
    "ROOM_CODE_ALPHABET",
    "ROOM_CODE_LENGTH",
    "Delivery",
    "Room",
    "RoomRegistry",
    "Seat",
    "generate_room_code",
    "normalize_room_code",
    # Errors
    "InvalidRoomCode",
    "RelayError",
    "RoomFull",
    "RoomNotFound",
    "SeatUnavailable",
    # Server
    "RelayHub",
    "create_app",
    "parse_client_message",
]
