"""MainWindow — top-level window for local and relayed matches."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from PyQt6.QtGui import QAction, QCloseEvent
from PyQt6.QtWidgets import (
    QApplication,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from throne.core.enums import SacrificeEffect, Side, TransitionKind
from throne.core.errors import RuleViolation
from throne.core.state import MatchState
from throne.game.controller import GameController
from throne.game.interfaces import GamePhase
from throne.game.network import NetworkSession
from throne.ui.board.board_view import BoardView
from throne.ui.dialogs.online_dialog import OnlineGameDialog
from throne.ui.online_session import OnlineSession
from throne.ui.relay_client import RelayClient
from throne.ui.settings import BOARD_THEMES, AppSettings, apply_settings

TCallback = TypeVar("TCallback", bound=Callable[..., None])

SACRIFICE_LABELS: dict[SacrificeEffect, str] = {
    SacrificeEffect.DOUBLE_MOVE: "Double Move",
    SacrificeEffect.KING_SHIELD: "King Shield",
    SacrificeEffect.INSTANT_KILL: "Instant Kill",
}

SACRIFICE_HINTS: dict[SacrificeEffect, str] = {
    SacrificeEffect.DOUBLE_MOVE: "Sacrifice a Soldier: your Champion may move twice",
    SacrificeEffect.KING_SHIELD: "Sacrifice a Tower: your King cannot be captured "
    "during the opponent's next turn",
    SacrificeEffect.INSTANT_KILL: "Sacrifice your Champion: remove an enemy piece "
    "standing next to one of yours",
}


def _side_name(side: Side) -> str:
    return str(side).capitalize()


class MainWindow(QMainWindow):
    """Main application window for Throne."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        relay_client: RelayClient | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Throne")
        self.setMinimumSize(760, 560)
        self.resize(900, 620)

        self._controller: GameController = GameController()
        self._settings = settings or AppSettings()
        self._sacrifice_buttons: dict[SacrificeEffect, QPushButton] = {}
        self._side_labels: dict[Side, QLabel] = {}

        self._setup_ui()

        self._relay_client = relay_client or RelayClient(self)
        self._online = OnlineSession(
            client=self._relay_client,
            activate=self._activate_online,
            deactivate=self._deactivate_online,
            set_status=self._status_label.setText,
            warn=self._warn,
            on_changed=self._refresh,
        )

        self._setup_menu()
        self._connect_signals()
        self._connect_game_events()
        apply_settings(self._settings, self._board_view.board_scene)

        # Start with a fresh match
        self._start_new_game()

    @property
    def controller(self) -> GameController:
        return self._controller

    @property
    def online(self) -> OnlineSession:
        return self._online

    # ── UI setup ─────────────────────────────────────────────────────────

    def _setup_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        root = QHBoxLayout(central)
        root.setContentsMargins(6, 6, 6, 6)
        root.setSpacing(6)

        # Board (center)
        self._board_view = BoardView()
        root.addWidget(self._board_view, stretch=3)

        # Right panel
        right = QVBoxLayout()
        right.setSpacing(8)

        self._turn_label = QLabel()
        self._turn_label.setStyleSheet("font-size: 18px; font-weight: bold;")
        right.addWidget(self._turn_label)

        self._room_label = QLabel()
        self._room_label.setWordWrap(True)
        self._room_label.hide()
        right.addWidget(self._room_label)

        status_box = QGroupBox("Status")
        status_layout = QVBoxLayout(status_box)
        for side in Side:
            label = QLabel()
            label.setWordWrap(True)
            status_layout.addWidget(label)
            self._side_labels[side] = label
        right.addWidget(status_box)

        actions_box = QGroupBox("Sacrifices")
        actions_layout = QVBoxLayout(actions_box)
        for effect in SacrificeEffect:
            button = QPushButton(SACRIFICE_LABELS[effect])
            button.setToolTip(SACRIFICE_HINTS[effect])
            button.setMinimumHeight(36)
            actions_layout.addWidget(button)
            self._sacrifice_buttons[effect] = button
        right.addWidget(actions_box)

        right.addStretch(1)

        self._btn_new_game = QPushButton("New Game")
        self._btn_new_game.setMinimumHeight(36)
        right.addWidget(self._btn_new_game)

        right_widget = QWidget()
        right_widget.setLayout(right)
        right_widget.setFixedWidth(260)
        root.addWidget(right_widget)

        # Status bar
        self._status = QStatusBar()
        self.setStatusBar(self._status)
        self._status_label = QLabel("Ready")
        self._status.addWidget(self._status_label)

    def _setup_menu(self) -> None:
        menu_bar = self.menuBar()
        assert menu_bar is not None

        # Game menu
        self._menu_game = menu_bar.addMenu("&Game")
        assert self._menu_game is not None

        self._act_new_game = QAction("New Game", self)
        self._act_new_game.setShortcut("Ctrl+N")
        self._act_new_game.triggered.connect(self._on_new_game)
        self._menu_game.addAction(self._act_new_game)

        self._act_flip = QAction("Flip Board", self)
        self._act_flip.setShortcut("F")
        self._act_flip.triggered.connect(self._on_flip)
        self._menu_game.addAction(self._act_flip)

        self._menu_game.addSeparator()

        self._act_quit = QAction("Quit", self)
        self._act_quit.setShortcut("Ctrl+Q")
        self._act_quit.setMenuRole(QAction.MenuRole.QuitRole)
        self._act_quit.triggered.connect(self.close)
        self._menu_game.addAction(self._act_quit)

        # Online menu
        self._menu_online = menu_bar.addMenu("&Online")
        assert self._menu_online is not None

        self._act_host = QAction("Host Game...", self)
        self._act_host.triggered.connect(self._on_host_online)
        self._menu_online.addAction(self._act_host)

        self._act_join = QAction("Join Game...", self)
        self._act_join.setShortcut("Ctrl+J")
        self._act_join.triggered.connect(self._on_join_online)
        self._menu_online.addAction(self._act_join)

        self._act_copy_code = QAction("Copy Room Code", self)
        self._act_copy_code.triggered.connect(self._on_copy_room_code)
        self._menu_online.addAction(self._act_copy_code)

        self._menu_online.addSeparator()

        self._act_rematch = QAction("Rematch", self)
        self._act_rematch.triggered.connect(self._online.rematch)
        self._menu_online.addAction(self._act_rematch)

        self._act_reconnect = QAction("Reconnect", self)
        self._act_reconnect.triggered.connect(self._online.reconnect)
        self._menu_online.addAction(self._act_reconnect)

        self._act_leave = QAction("Leave Online Game", self)
        self._act_leave.triggered.connect(self._online.leave)
        self._menu_online.addAction(self._act_leave)

        # View menu
        self._menu_view = menu_bar.addMenu("&View")
        assert self._menu_view is not None

        self._act_coords = QAction("Show Coordinates", self)
        self._act_coords.setCheckable(True)
        self._act_coords.setChecked(self._settings.show_coordinates)
        self._act_coords.toggled.connect(self._on_toggle_coordinates)
        self._menu_view.addAction(self._act_coords)

        self._act_legal = QAction("Show Legal Moves", self)
        self._act_legal.setCheckable(True)
        self._act_legal.setChecked(self._settings.show_legal_moves)
        self._act_legal.toggled.connect(self._on_toggle_legal_moves)
        self._menu_view.addAction(self._act_legal)

        theme_menu = self._menu_view.addMenu("Board Theme")
        assert theme_menu is not None
        for name in BOARD_THEMES:
            action = QAction(name, self)
            action.triggered.connect(lambda _checked=False, n=name: self._on_theme(n))
            theme_menu.addAction(action)

    # ── Signal wiring ────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        """Connect Qt widget signals."""
        self._board_view.cell_clicked.connect(self._on_cell_clicked)
        self._btn_new_game.clicked.connect(self._on_new_game)
        for effect, button in self._sacrifice_buttons.items():
            button.clicked.connect(
                lambda _checked=False, e=effect: self._on_sacrifice(e)
            )

    def _connect_game_events(self) -> None:
        """Subscribe to GameController callbacks (idempotent)."""
        events = self._controller.events
        self._replace_callback(events.on_state, self._on_state)
        self._replace_callback(events.on_rejected, self._on_rejected)
        self._replace_callback(events.on_game_over, self._on_game_over)
        self._replace_callback(events.on_phase_changed, self._on_phase_changed)

    def _disconnect_game_events(self) -> None:
        """Detach this window from GameController callbacks."""
        events = self._controller.events
        self._remove_callback(events.on_state, self._on_state)
        self._remove_callback(events.on_rejected, self._on_rejected)
        self._remove_callback(events.on_game_over, self._on_game_over)
        self._remove_callback(events.on_phase_changed, self._on_phase_changed)

    @staticmethod
    def _replace_callback(callbacks: list[TCallback], callback: TCallback) -> None:
        callbacks[:] = [cb for cb in callbacks if cb != callback]
        callbacks.append(callback)

    @staticmethod
    def _remove_callback(callbacks: list[TCallback], callback: TCallback) -> None:
        callbacks[:] = [cb for cb in callbacks if cb != callback]

    def _set_controller(self, controller: GameController) -> None:
        self._disconnect_game_events()
        self._controller = controller
        self._connect_game_events()

    # ── Game lifecycle ───────────────────────────────────────────────────

    def _start_new_game(self) -> None:
        self._connect_game_events()
        self._controller.new_game()
        self._status_label.setText("New game: White to move")

    def _activate_online(self, session: NetworkSession) -> None:
        self._set_controller(session)

    def _deactivate_online(self) -> None:
        self._set_controller(GameController())
        self._start_new_game()

    def closeEvent(self, event: QCloseEvent | None) -> None:
        self._relay_client.close()
        self._disconnect_game_events()
        super().closeEvent(event)

    # ── User actions ─────────────────────────────────────────────────────

    def _on_cell_clicked(self, row: int, col: int) -> None:
        self._controller.click((row, col))

    def _on_sacrifice(self, effect: SacrificeEffect) -> None:
        self._controller.request_sacrifice(effect)

    def _on_new_game(self) -> None:
        if self._online.is_active:
            # Leaving hands the board back to a fresh local match.
            self._online.leave()
        else:
            self._start_new_game()

    def _on_host_online(self) -> None:
        request = OnlineGameDialog.ask(
            self, relay_url=self._settings.relay_url, joining=False
        )
        if request is None:
            return
        self._settings.relay_url = request.relay_url
        self._online.host(request.relay_url)

    def _on_join_online(self) -> None:
        request = OnlineGameDialog.ask(
            self, relay_url=self._settings.relay_url, joining=True
        )
        if request is None or request.room_code is None:
            return
        self._settings.relay_url = request.relay_url
        self._online.join(request.relay_url, request.room_code)

    def _on_copy_room_code(self) -> None:
        code = self._online.room_code
        if code is None:
            return
        clipboard = QApplication.clipboard()
        if clipboard is not None:
            clipboard.setText(code)
        self._status_label.setText("Code copied!")

    def _on_flip(self) -> None:
        self._settings.flipped = not self._settings.flipped
        self._sync_orientation()

    def _on_toggle_coordinates(self, checked: bool) -> None:
        self._settings.show_coordinates = checked
        self._board_view.board_scene.set_show_coordinates(checked)

    def _on_toggle_legal_moves(self, checked: bool) -> None:
        self._settings.show_legal_moves = checked
        self._board_view.board_scene.set_show_legal_moves(checked)

    def _on_theme(self, name: str) -> None:
        self._settings.board_theme = name
        apply_settings(self._settings, self._board_view.board_scene)
        self._sync_orientation()

    # ── Controller callbacks ─────────────────────────────────────────────

    def _on_state(self, state: MatchState, kind: TransitionKind) -> None:
        mover = _side_name(state.side_to_move)
        if kind == TransitionKind.SACRIFICE:
            if state.instant_kill_armed:
                self._status_label.setText(f"{mover}: choose an enemy piece to remove")
            else:
                self._status_label.setText(f"{mover} made a sacrifice")
        elif kind == TransitionKind.BONUS_MOVE:
            self._status_label.setText(f"{mover}: the Champion moves again")
        elif kind == TransitionKind.TURN_ENDED:
            self._status_label.setText(f"{mover} to move")
        self._refresh()

    def _on_rejected(self, violation: RuleViolation) -> None:
        self._status_label.setText(str(violation))
        self._refresh()

    def _on_game_over(self, winner: Side) -> None:
        text = f"{_side_name(winner)} wins!"
        self._status_label.setText(f"Game over: {text}")
        QMessageBox.information(self, "Game Over", text)

    def _on_phase_changed(self, _phase: GamePhase) -> None:
        self._refresh()

    # ── Helpers ──────────────────────────────────────────────────────────

    def _refresh(self) -> None:
        """Sync board, labels and buttons with the controller."""
        controller = self._controller
        state = controller.state
        scene = self._board_view.board_scene

        targets = (
            controller.instant_kill_targets()
            if state.instant_kill_armed and not state.game_over
            else frozenset()
        )
        scene.set_state(state, controller.selection, targets)
        scene.set_interactive(
            not state.game_over and not self._online.waiting_for_opponent
        )
        self._sync_orientation()

        if state.game_over:
            winner = state.winner
            self._turn_label.setText(
                "Game over" if winner is None else f"{_side_name(winner)} wins"
            )
        else:
            self._turn_label.setText(f"{_side_name(state.side_to_move)} to move")

        for side, label in self._side_labels.items():
            label.setText(self._side_status(state, side))

        available = controller.available_sacrifices()
        if isinstance(controller, NetworkSession) and not controller.is_my_turn:
            available = frozenset()
        for effect, button in self._sacrifice_buttons.items():
            button.setEnabled(effect in available)

        self._sync_online_ui()

    def _sync_online_ui(self) -> None:
        online = self._online
        side = online.local_side
        if online.room_code is not None and side is not None:
            text = f"Room {online.room_code}: you play {_side_name(side)}"
            if online.waiting_for_opponent:
                text += " (waiting for an opponent)"
            elif not online.is_connected:
                text += " (offline)"
            self._room_label.setText(text)
            self._room_label.show()
        else:
            self._room_label.clear()
            self._room_label.hide()

        active = online.is_active
        self._act_copy_code.setEnabled(online.room_code is not None)
        self._act_rematch.setEnabled(
            active and not online.waiting_for_opponent and online.is_connected
        )
        self._act_rematch.setText(
            "Accept Rematch" if online.rematch_offered else "Rematch"
        )
        self._act_reconnect.setEnabled(online.can_reconnect)
        self._act_leave.setEnabled(active)

    def _sync_orientation(self) -> None:
        """Keep the local player's home row at the bottom when online."""
        flipped = self._settings.flipped != (self._online.local_side == Side.BLACK)
        scene = self._board_view.board_scene
        if scene.is_flipped() != flipped:
            scene.set_flipped(flipped)

    def _warn(self, text: str) -> None:
        self._status_label.setText(text)
        QMessageBox.warning(self, "Online Game", text)

    @staticmethod
    def _side_status(state: MatchState, side: Side) -> str:
        flags = state.flags(side)
        parts = ["used" if flags.sacrifice_used else "available"]
        if flags.king_immune:
            parts.append("King shielded")
        if flags.champion_double_move:
            parts.append("Champion double move ready")
        return f"{_side_name(side)}: " + ", ".join(parts)
