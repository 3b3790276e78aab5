"""Tests for online play: relay client framing, lobby dialog, window flow."""

from __future__ import annotations

import json
from typing import Any

import pytest
from PyQt6.QtWidgets import QMessageBox

from throne.core.engine import RuleEngine
from throne.core.enums import Side
from throne.core.notation import state_to_dict
from throne.core.state import MatchState
from throne.game.controller import GameController
from throne.game.network import NetworkSession
from throne.ui.dialogs.online_dialog import OnlineGameDialog
from throne.ui.main_window import MainWindow
from throne.ui.relay_client import RelayClient

RELAY_URL = "ws://relay.test/ws"


class _RecordingRelayClient(RelayClient):
    """RelayClient whose socket traffic is captured instead of sent."""

    def __init__(self) -> None:
        super().__init__()
        self.opened: list[str] = []
        self.sent: list[dict[str, Any]] = []
        self.close_count = 0

    def open(self, url: str) -> None:
        self._outbox.clear()
        self.opened.append(url)

    def close(self) -> None:
        self.close_count += 1
        super().close()

    def _write(self, text: str) -> None:
        self.sent.append(json.loads(text))

    def deliver(self, message_type: str, **fields: Any) -> None:
        self._on_text_message(json.dumps({"type": message_type, **fields}))


def _initial_snapshot() -> dict[str, Any]:
    return state_to_dict(MatchState.initial())


def _after_black_reply() -> dict[str, Any]:
    engine = RuleEngine()
    engine.click((4, 0))
    engine.click((3, 0))
    engine.click((0, 0))
    engine.click((1, 0))
    return state_to_dict(engine.state)


@pytest.fixture()
def client(qapp: object) -> _RecordingRelayClient:
    return _RecordingRelayClient()


@pytest.fixture()
def window(
    monkeypatch: pytest.MonkeyPatch, client: _RecordingRelayClient
) -> MainWindow:
    shown: list[str] = []
    warnings: list[str] = []
    monkeypatch.setattr(
        QMessageBox, "information", lambda _parent, _title, text: shown.append(text)
    )
    monkeypatch.setattr(
        QMessageBox, "warning", lambda _parent, _title, text: warnings.append(text)
    )
    win = MainWindow(relay_client=client)
    win.shown_messages = shown  # type: ignore[attr-defined]
    win.warnings = warnings  # type: ignore[attr-defined]
    return win


def _host(window: MainWindow, client: _RecordingRelayClient) -> None:
    window.online.host(RELAY_URL)
    client._on_connected()
    client.deliver(
        "room-created",
        roomCode="ABCD",
        playerColor="white",
        token="t1",
        gameState=_initial_snapshot(),
    )


class TestRelayClient:
    def test_send_queues_until_connected(self, client: _RecordingRelayClient) -> None:
        changes: list[bool] = []
        client.connection_changed.connect(changes.append)
        client.send("join-room", {"roomCode": "ABCD"})
        assert client.sent == []
        assert len(client.pending_messages()) == 1

        client._on_connected()
        assert client.sent == [{"type": "join-room", "roomCode": "ABCD"}]
        assert client.pending_messages() == []
        assert changes == [True]

        client.send("request-rematch", {})
        assert client.sent[-1] == {"type": "request-rematch"}

    def test_frames_decoded(self, client: _RecordingRelayClient) -> None:
        received: list[tuple[str, dict[str, Any]]] = []
        client.message_received.connect(lambda t, p: received.append((t, p)))
        client._on_text_message('{"type": "error", "message": "Room is full"}')
        assert received == [("error", {"message": "Room is full"})]

    @pytest.mark.parametrize("frame", ["not json", "[1, 2]", '{"message": "x"}'])
    def test_bad_frames_ignored(
        self, client: _RecordingRelayClient, frame: str
    ) -> None:
        received: list[str] = []
        client.message_received.connect(lambda t, _p: received.append(t))
        client._on_text_message(frame)
        assert received == []

    def test_drop_reported_but_close_is_not(
        self, client: _RecordingRelayClient
    ) -> None:
        changes: list[bool] = []
        client.connection_changed.connect(changes.append)
        client._on_connected()
        client._on_disconnected()
        assert changes == [True, False]

        client._on_connected()
        client.close()
        client._on_disconnected()
        assert changes == [True, False, True]
        assert not client.is_connected


class TestOnlineDialog:
    def test_join_needs_four_characters(self, qapp: object) -> None:
        dlg = OnlineGameDialog(relay_url=RELAY_URL, joining=True)
        dlg._edit_code.setText("ab")
        dlg._on_accept()
        assert dlg.request is None
        assert "4-character room code" in dlg._error_label.text()

    def test_join_request_upper_cases_code(self, qapp: object) -> None:
        dlg = OnlineGameDialog(relay_url=RELAY_URL, joining=True)
        dlg._edit_code.setText("ab2c")
        dlg._on_accept()
        assert dlg.request is not None
        assert dlg.request.relay_url == RELAY_URL
        assert dlg.request.room_code == "AB2C"

    def test_relay_address_must_be_websocket(self, qapp: object) -> None:
        dlg = OnlineGameDialog(relay_url="http://relay.test", joining=False)
        dlg._on_accept()
        assert dlg.request is None
        assert "ws://" in dlg._error_label.text()

    def test_host_request_has_no_code(self, qapp: object) -> None:
        dlg = OnlineGameDialog(relay_url=RELAY_URL, joining=False)
        dlg._on_accept()
        assert dlg.request is not None
        assert dlg.request.room_code is None


class TestHosting:
    def test_create_room_sent_on_connect(
        self, window: MainWindow, client: _RecordingRelayClient
    ) -> None:
        window.online.host(RELAY_URL)
        assert client.opened == [RELAY_URL]
        assert client.sent == []
        client._on_connected()
        assert client.sent == [{"type": "create-room"}]

    def test_room_created_waits_for_opponent(
        self, window: MainWindow, client: _RecordingRelayClient
    ) -> None:
        _host(window, client)
        assert isinstance(window.controller, NetworkSession)
        assert window.controller.local_side == Side.WHITE
        assert "Room ABCD" in window._room_label.text()
        assert "waiting" in window._room_label.text()
        assert "share the code" in window._status_label.text()
        assert not window._board_view.board_scene.is_interactive()
        assert window._act_copy_code.isEnabled()
        assert not window._act_rematch.isEnabled()

    def test_moves_flow_through_the_relay(
        self, window: MainWindow, client: _RecordingRelayClient
    ) -> None:
        _host(window, client)
        client.deliver("opponent-joined")
        assert window._board_view.board_scene.is_interactive()
        assert window._status_label.text() == "Opponent joined!"

        window._on_cell_clicked(4, 0)
        window._on_cell_clicked(3, 0)
        assert client.sent[-1]["type"] == "move"
        assert client.sent[-1]["gameState"]["currentPlayer"] == "black"
        assert not any(b.isEnabled() for b in window._sacrifice_buttons.values())

        client.deliver("opponent-move", gameState=_after_black_reply())
        assert window.controller.state.side_to_move == Side.WHITE
        assert window._status_label.text() == "Your turn!"
        assert window._board_view.board_scene.piece_text((1, 0)) is not None
        assert any(b.isEnabled() for b in window._sacrifice_buttons.values())


class TestJoining:
    def test_join_as_black_flips_board(
        self, window: MainWindow, client: _RecordingRelayClient
    ) -> None:
        window.online.join(RELAY_URL, "abcd")
        client._on_connected()
        assert client.sent == [{"type": "join-room", "roomCode": "abcd"}]

        client.deliver(
            "room-joined",
            roomCode="ABCD",
            playerColor="black",
            token="t2",
            gameState=_initial_snapshot(),
        )
        assert window.controller.local_side == Side.BLACK  # type: ignore[attr-defined]
        assert window._board_view.board_scene.is_flipped()
        assert window._board_view.board_scene.is_interactive()

        window._on_cell_clicked(0, 0)
        assert window._status_label.text() == "Waiting for the opponent"
        assert client.sent == [{"type": "join-room", "roomCode": "abcd"}]

    def test_relay_error_before_seating_warns(
        self, window: MainWindow, client: _RecordingRelayClient
    ) -> None:
        window.online.join(RELAY_URL, "zzzz")
        client._on_connected()
        client.deliver("error", message="Room not found")
        assert window.warnings == ["Room not found"]  # type: ignore[attr-defined]
        assert type(window.controller) is GameController
        assert not client.is_connected

    def test_malformed_seat_reply_warns(
        self, window: MainWindow, client: _RecordingRelayClient
    ) -> None:
        window.online.join(RELAY_URL, "abcd")
        client._on_connected()
        client.deliver("room-joined", roomCode="ABCD", playerColor="black")
        assert window.warnings == [  # type: ignore[attr-defined]
            "Unexpected reply from the relay"
        ]
        assert not window.online.is_active


class TestMatchLifecycle:
    def test_rematch_offer_accepted(
        self, window: MainWindow, client: _RecordingRelayClient
    ) -> None:
        _host(window, client)
        client.deliver("opponent-joined")
        client.deliver("rematch-requested")
        assert window._act_rematch.text() == "Accept Rematch"

        window.online.rematch()
        assert client.sent[-1] == {"type": "accept-rematch"}

        client.deliver(
            "rematch-start",
            playerColor="black",
            token="t3",
            gameState=_initial_snapshot(),
        )
        assert window.online.local_side == Side.BLACK
        assert window._board_view.board_scene.is_flipped()
        assert window._act_rematch.text() == "Rematch"

    def test_rematch_requested_by_us(
        self, window: MainWindow, client: _RecordingRelayClient
    ) -> None:
        _host(window, client)
        client.deliver("opponent-joined")
        window.online.rematch()
        assert client.sent[-1] == {"type": "request-rematch"}
        assert "waiting for the opponent" in window._status_label.text()

    def test_new_game_leaves_online_match(
        self, window: MainWindow, client: _RecordingRelayClient
    ) -> None:
        _host(window, client)
        window._on_new_game()
        assert type(window.controller) is GameController
        assert not window.online.is_active
        assert window._room_label.isHidden()
        assert client.close_count >= 1
        assert window._turn_label.text() == "White to move"
        assert window._board_view.board_scene.is_interactive()

    def test_lost_connection_then_rejoin(
        self, window: MainWindow, client: _RecordingRelayClient
    ) -> None:
        _host(window, client)
        client.deliver("opponent-joined")
        session = window.controller

        client._on_disconnected()
        assert window._status_label.text() == "Lost connection to the relay"
        assert "offline" in window._room_label.text()
        assert window._act_reconnect.isEnabled()

        window.online.reconnect()
        assert client.opened == [RELAY_URL, RELAY_URL]
        client._on_connected()
        assert client.sent[-1] == {
            "type": "rejoin-room",
            "roomCode": "ABCD",
            "side": "white",
            "token": "t1",
        }

        client.deliver(
            "room-joined",
            roomCode="ABCD",
            playerColor="white",
            token="t1",
            gameState=_after_black_reply(),
        )
        assert window.controller is session
        assert window._status_label.text() == "Reconnected to room ABCD"
        assert window.controller.state.board[(1, 0)] is not None
        assert not window._act_reconnect.isEnabled()
