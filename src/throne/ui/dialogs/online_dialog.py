"""OnlineGameDialog — relay address and room code for an online match."""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QVBoxLayout,
    QWidget,
)

ROOM_CODE_LENGTH = 4


class _OnlineRequest:
    """Plain data returned by OnlineGameDialog."""

    __slots__ = ("relay_url", "room_code")

    def __init__(self, relay_url: str, room_code: str | None) -> None:
        self.relay_url = relay_url
        self.room_code = room_code


class OnlineGameDialog(QDialog):
    """Modal dialog for hosting (no code) or joining (with code) a room."""

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        relay_url: str,
        joining: bool,
    ) -> None:
        super().__init__(parent)
        self.setModal(True)
        self.setMinimumWidth(360)
        self.setWindowFlags(
            self.windowFlags() & ~Qt.WindowType.WindowContextHelpButtonHint
        )
        self.setWindowTitle("Join Online Game" if joining else "Host Online Game")

        self._joining = joining
        self._request: _OnlineRequest | None = None
        self._setup_ui(relay_url)

    def _setup_ui(self, relay_url: str) -> None:
        main = QVBoxLayout(self)
        form = QFormLayout()
        form.setSpacing(10)

        self._edit_url = QLineEdit(relay_url)
        form.addRow("Relay:", self._edit_url)

        self._edit_code = QLineEdit()
        self._edit_code.setMaxLength(ROOM_CODE_LENGTH)
        self._edit_code.setPlaceholderText("ABCD")
        if self._joining:
            form.addRow("Room code:", self._edit_code)
        else:
            self._edit_code.hide()
        main.addLayout(form)

        self._error_label = QLabel()
        self._error_label.setStyleSheet("color: #c0392b;")
        self._error_label.hide()
        main.addWidget(self._error_label)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        main.addWidget(buttons)

    @property
    def request(self) -> _OnlineRequest | None:
        return self._request

    def _on_accept(self) -> None:
        url = self._edit_url.text().strip()
        if not url.startswith(("ws://", "wss://")):
            self._show_error("Relay address must start with ws:// or wss://")
            return

        room_code: str | None = None
        if self._joining:
            room_code = self._edit_code.text().strip().upper()
            if len(room_code) != ROOM_CODE_LENGTH:
                self._show_error(
                    f"Please enter a {ROOM_CODE_LENGTH}-character room code"
                )
                return

        self._request = _OnlineRequest(url, room_code)
        self.accept()

    def _show_error(self, text: str) -> None:
        self._error_label.setText(text)
        self._error_label.show()

    @staticmethod
    def ask(
        parent: QWidget | None = None, *, relay_url: str, joining: bool
    ) -> _OnlineRequest | None:
        dlg = OnlineGameDialog(parent, relay_url=relay_url, joining=joining)
        if dlg.exec() == QDialog.DialogCode.Accepted:
            return dlg.request
        return None
