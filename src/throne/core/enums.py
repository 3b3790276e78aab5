"""Core enumerations for the Throne domain."""

from __future__ import annotations

from enum import Enum, IntEnum


class Side(IntEnum):
    """Player side."""

    WHITE = 0
    BLACK = 1

    @property
    def opposite(self) -> Side:
        return Side(1 - self.value)

    @property
    def back_row(self) -> int:
        """Row farthest from this side's starting row."""
        return 0 if self == Side.WHITE else 4

    @property
    def forward(self) -> int:
        """Row delta of one step toward the opponent."""
        return -1 if self == Side.WHITE else 1

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, text: str) -> Side:
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"Invalid side: {text!r}") from None


class PieceKind(IntEnum):
    """Piece kinds."""

    KING = 1
    CHAMPION = 2
    TOWER = 3
    SOLDIER = 4

    @property
    def letter(self) -> str:
        return _LETTERS[self]

    @classmethod
    def from_letter(cls, letter: str) -> PieceKind:
        try:
            return _KINDS[letter.upper()]
        except KeyError:
            raise ValueError(f"Invalid piece letter: {letter!r}") from None


_LETTERS: dict[PieceKind, str] = {
    PieceKind.KING: "K",
    PieceKind.CHAMPION: "C",
    PieceKind.TOWER: "T",
    PieceKind.SOLDIER: "S",
}
_KINDS: dict[str, PieceKind] = {v: k for k, v in _LETTERS.items()}


class SacrificeEffect(str, Enum):
    """One-shot effects bought by sacrificing a piece."""

    DOUBLE_MOVE = "double-move"
    KING_SHIELD = "king-shield"
    INSTANT_KILL = "instant-kill"


class TransitionKind(IntEnum):
    """What a successful engine operation did to the match."""

    SELECTED = 0
    TURN_ENDED = 1
    BONUS_MOVE = 2  # double move: same side keeps the turn
    SACRIFICE = 3
    GAME_OVER = 4
    RESET = 5
    SYNCED = 6  # state replaced by a peer snapshot
