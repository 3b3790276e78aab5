"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass

from throne.core.enums import PieceKind, Side

_SYMBOLS: dict[PieceKind, str] = {
    PieceKind.KING: "♔",
    PieceKind.CHAMPION: "♕",
    PieceKind.TOWER: "♖",
    PieceKind.SOLDIER: "♙",
}


@dataclass(frozen=True, slots=True)
class Piece:
    """Immutable value object; a piece is identified only by its cell."""

    kind: PieceKind
    owner: Side

    # ── Serialisation ────────────────────────────────────────────────────

    def __str__(self) -> str:
        """Layout letter (uppercase = white, lowercase = black)."""
        letter = self.kind.letter
        return letter if self.owner == Side.WHITE else letter.lower()

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """Create a piece from a layout letter, e.g. 'c' -> black champion."""
        if len(char) != 1 or not char.isalpha():
            raise ValueError(f"Invalid piece character: {char!r}")
        kind = PieceKind.from_letter(char)
        return cls(kind, Side.WHITE if char.isupper() else Side.BLACK)

    @property
    def symbol(self) -> str:
        """Display glyph; colour is left to the renderer."""
        return _SYMBOLS[self.kind]
