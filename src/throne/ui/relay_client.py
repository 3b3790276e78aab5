"""RelayClient — websocket link between the desktop shell and the relay."""

from __future__ import annotations

import json
import logging
from typing import Any

from PyQt6.QtCore import QObject, QUrl, pyqtSignal
from PyQt6.QtNetwork import QAbstractSocket
from PyQt6.QtWebSockets import QWebSocket

_LOGGER = logging.getLogger(__name__)


class RelayClient(QObject):
    """Speaks the relay's ``{"type": ..., ...}`` JSON frames over QWebSocket.

    Messages sent before the socket is open are queued and flushed once it
    connects, so callers can ``open()`` and ``send()`` back to back.

    Signals:
        message_received(str, dict): message type and the remaining fields.
        connection_changed(bool): the socket opened (True) or dropped (False).
        error_occurred(str): human-readable socket error.
    """

    message_received = pyqtSignal(str, dict)
    connection_changed = pyqtSignal(bool)
    error_occurred = pyqtSignal(str)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._socket = QWebSocket(parent=self)
        self._socket.connected.connect(self._on_connected)
        self._socket.disconnected.connect(self._on_disconnected)
        self._socket.textMessageReceived.connect(self._on_text_message)
        self._socket.errorOccurred.connect(self._on_error)
        self._connected = False
        self._outbox: list[str] = []

    @property
    def is_connected(self) -> bool:
        return self._connected

    def open(self, url: str) -> None:
        self._outbox.clear()
        _LOGGER.info("Connecting to relay %s", url)
        self._socket.open(QUrl(url))

    def close(self) -> None:
        """Drop the link without reporting it as a lost connection."""
        self._outbox.clear()
        self._connected = False
        self._socket.close()

    def send(self, message_type: str, payload: dict[str, Any]) -> None:
        text = json.dumps({"type": message_type, **payload})
        if self._connected:
            self._write(text)
        else:
            self._outbox.append(text)

    def pending_messages(self) -> list[str]:
        return list(self._outbox)

    # ── Socket slots ─────────────────────────────────────────────────────

    def _write(self, text: str) -> None:
        self._socket.sendTextMessage(text)

    def _on_connected(self) -> None:
        self._connected = True
        _LOGGER.info("Relay connected")
        self.connection_changed.emit(True)
        outbox, self._outbox = self._outbox, []
        for text in outbox:
            self._write(text)

    def _on_disconnected(self) -> None:
        if not self._connected:
            return
        self._connected = False
        _LOGGER.info("Relay connection closed")
        self.connection_changed.emit(False)

    def _on_text_message(self, text: str) -> None:
        try:
            data = json.loads(text)
        except ValueError:
            _LOGGER.warning("Ignoring non-JSON frame from relay")
            return
        if not isinstance(data, dict) or not isinstance(data.get("type"), str):
            _LOGGER.warning("Ignoring untyped frame from relay")
            return
        message_type = data.pop("type")
        self.message_received.emit(message_type, data)

    def _on_error(self, _error: QAbstractSocket.SocketError) -> None:
        text = self._socket.errorString()
        _LOGGER.warning("Relay socket error: %s", text)
        self.error_occurred.emit(text)
