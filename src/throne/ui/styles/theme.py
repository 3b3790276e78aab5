"""Visual theme constants and QSS styles for Throne."""

from __future__ import annotations

from dataclasses import dataclass

from PyQt6.QtGui import QColor


@dataclass(frozen=True)
class BoardTheme:
    """Colour scheme for the board and pieces."""

    light_cell: QColor
    dark_cell: QColor
    highlight_from: QColor  # selected piece origin
    highlight_to: QColor  # empty legal destinations
    highlight_capture: QColor  # legal destinations holding an enemy
    highlight_target: QColor  # instant-kill targets
    immune_ring: QColor  # outline around a shielded King
    white_piece: QColor
    black_piece: QColor
    coord_light: QColor  # coordinate text on dark cells
    coord_dark: QColor  # coordinate text on light cells

    @classmethod
    def default(cls) -> BoardTheme:
        return cls(
            light_cell=QColor(240, 217, 181),
            dark_cell=QColor(181, 136, 99),
            highlight_from=QColor(255, 255, 0, 100),
            highlight_to=QColor(0, 0, 0, 40),
            highlight_capture=QColor(255, 80, 0, 110),
            highlight_target=QColor(200, 0, 200, 120),
            immune_ring=QColor(70, 170, 255),
            white_piece=QColor(250, 250, 250),
            black_piece=QColor(20, 20, 20),
            coord_light=QColor(181, 136, 99),
            coord_dark=QColor(240, 217, 181),
        )

    @classmethod
    def slate(cls) -> BoardTheme:
        return cls(
            light_cell=QColor(224, 226, 231),
            dark_cell=QColor(101, 110, 122),
            highlight_from=QColor(255, 255, 0, 100),
            highlight_to=QColor(0, 0, 0, 40),
            highlight_capture=QColor(255, 80, 0, 110),
            highlight_target=QColor(200, 0, 200, 120),
            immune_ring=QColor(70, 170, 255),
            white_piece=QColor(250, 250, 250),
            black_piece=QColor(20, 20, 20),
            coord_light=QColor(101, 110, 122),
            coord_dark=QColor(224, 226, 231),
        )

    @classmethod
    def named(cls, name: str) -> BoardTheme:
        """Theme by settings name; unknown names fall back to Classic."""
        return {"Slate": cls.slate}.get(name, cls.default)()


# ── Application-wide QSS ────────────────────────────────────────────────────

APP_STYLE = """
QMainWindow {
    background: #2b2b2b;
}

QLabel {
    color: #e0e0e0;
    font-family: "Helvetica Neue", sans-serif;
}

QGroupBox {
    color: #e0e0e0;
    border: 1px solid #3c3c3c;
    border-radius: 4px;
    margin-top: 12px;
    padding: 6px;
}
QGroupBox::title {
    subcontrol-origin: margin;
    left: 8px;
}

QPushButton {
    background: #3c3c3c;
    color: #e0e0e0;
    border: 1px solid #555;
    border-radius: 4px;
    padding: 6px 14px;
    font-size: 13px;
}
QPushButton:hover {
    background: #505050;
}
QPushButton:pressed {
    background: #264f78;
}
QPushButton:disabled {
    color: #666;
    background: #2b2b2b;
}

QMenuBar {
    background: #2b2b2b;
    color: #e0e0e0;
}
QMenuBar::item:selected {
    background: #3c3c3c;
}
QMenu {
    background: #2b2b2b;
    color: #e0e0e0;
    border: 1px solid #3c3c3c;
}
QMenu::item:selected {
    background: #264f78;
}
"""
