"""User-configurable desktop settings and how they are applied."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from throne.ui.styles.theme import BoardTheme

if TYPE_CHECKING:
    from throne.ui.board.board_scene import BoardScene

BOARD_THEMES = ("Classic", "Slate")


@dataclass
class AppSettings:
    """All user-configurable settings."""

    # Board
    board_theme: str = "Classic"
    show_coordinates: bool = True
    show_legal_moves: bool = True
    flipped: bool = False

    # Online
    relay_url: str = "ws://localhost:3000/ws"


def apply_settings(settings: AppSettings, scene: BoardScene) -> None:
    scene.set_theme(BoardTheme.named(settings.board_theme))
    scene.set_show_coordinates(settings.show_coordinates)
    scene.set_show_legal_moves(settings.show_legal_moves)
    scene.set_flipped(settings.flipped)
