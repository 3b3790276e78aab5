"""BoardScene — QGraphicsScene that draws the 5x5 board and pieces."""

from __future__ import annotations

from PyQt6.QtCore import QObject, QPointF, Qt, pyqtSignal
from PyQt6.QtGui import QBrush, QColor, QFont, QPen
from PyQt6.QtWidgets import (
    QGraphicsEllipseItem,
    QGraphicsRectItem,
    QGraphicsScene,
    QGraphicsSceneMouseEvent,
    QGraphicsSimpleTextItem,
)

from throne.core.enums import PieceKind, Side
from throne.core.state import MatchState, Selection
from throne.core.types import BOARD_SIZE, Cell, all_cells, cell_name
from throne.ui.styles.theme import BoardTheme


class BoardScene(QGraphicsScene):
    """Renders a :class:`MatchState` and reports clicked cells.

    The scene holds no rules; it draws whatever snapshot, selection and
    instant-kill targets it is given.

    Signals:
        cell_clicked(int, int): row and column of a clicked cell.
    """

    cell_clicked = pyqtSignal(int, int)

    TILE = 96  # px per cell

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._theme = BoardTheme.default()
        self._state: MatchState | None = None
        self._selection: Selection | None = None
        self._targets: frozenset[Cell] = frozenset()
        self._flipped = False
        self._interactive = True
        self._show_coordinates = True
        self._show_legal_moves = True

        # Visual layers
        self._cell_items: dict[Cell, QGraphicsRectItem] = {}
        self._coord_items: list[QGraphicsSimpleTextItem] = []
        self._highlight_items: list[QGraphicsRectItem] = []
        self._piece_items: dict[Cell, QGraphicsSimpleTextItem] = {}
        self._marker_items: list[QGraphicsEllipseItem] = []

        self._draw_board()

    # ── Public API ───────────────────────────────────────────────────────

    def set_state(
        self,
        state: MatchState,
        selection: Selection | None = None,
        targets: frozenset[Cell] = frozenset(),
    ) -> None:
        """Show *state*; *targets* are highlighted as instant-kill victims."""
        self._state = state
        self._selection = selection
        self._targets = targets
        self._sync_pieces()
        self._sync_highlights()

    def set_interactive(self, interactive: bool) -> None:
        self._interactive = interactive

    def is_interactive(self) -> bool:
        return self._interactive

    def set_flipped(self, flipped: bool) -> None:
        """Flip the board so Black's home row is at the bottom."""
        self._flipped = flipped
        self._redraw()

    def is_flipped(self) -> bool:
        return self._flipped

    def set_theme(self, theme: BoardTheme) -> None:
        self._theme = theme
        self._redraw()

    def set_show_coordinates(self, visible: bool) -> None:
        """Show or hide file/rank labels."""
        self._show_coordinates = visible
        for item in self._coord_items:
            item.setVisible(visible)

    def set_show_legal_moves(self, visible: bool) -> None:
        self._show_legal_moves = visible
        self._sync_highlights()

    def piece_text(self, cell: Cell) -> str | None:
        """Glyph drawn on *cell*, or None if it is empty."""
        item = self._piece_items.get(cell)
        return None if item is None else item.text()

    # ── Board drawing ────────────────────────────────────────────────────

    def _redraw(self) -> None:
        self._draw_board()
        self._sync_pieces()
        self._sync_highlights()

    def _draw_board(self) -> None:
        """Draw or redraw the 25 cells and coordinates."""
        for cell_item in self._cell_items.values():
            self.removeItem(cell_item)
        self._cell_items.clear()
        self._clear_items(self._coord_items)

        t = self.TILE
        font = QFont("Helvetica Neue", max(9, t // 8))

        for row, col in all_cells():
            vr, vc = self._visual_coords((row, col))
            is_light = (row + col) % 2 == 0
            color = self._theme.light_cell if is_light else self._theme.dark_cell
            rect = QGraphicsRectItem(vc * t, vr * t, t, t)
            rect.setBrush(QBrush(color))
            rect.setPen(QPen(Qt.PenStyle.NoPen))
            rect.setZValue(0)
            self.addItem(rect)
            self._cell_items[(row, col)] = rect

            label = cell_name((row, col))
            coord_color = self._theme.coord_dark if is_light else self._theme.coord_light
            # Rank digit on the left edge, file letter on the bottom edge.
            if vc == 0:
                self._add_coord(label[1], vc * t + 2, vr * t + 1, font, coord_color)
            if vr == BOARD_SIZE - 1:
                self._add_coord(label[0], vc * t + t - 12, vr * t + t - 16, font, coord_color)

        self.setSceneRect(0, 0, BOARD_SIZE * t, BOARD_SIZE * t)

    def _add_coord(
        self, text: str, x: float, y: float, font: QFont, color: QColor
    ) -> None:
        txt = QGraphicsSimpleTextItem(text)
        txt.setFont(font)
        txt.setBrush(QBrush(color))
        txt.setPos(x, y)
        txt.setZValue(0.3)
        txt.setVisible(self._show_coordinates)
        self.addItem(txt)
        self._coord_items.append(txt)

    # ── Piece synchronisation ────────────────────────────────────────────

    def _sync_pieces(self) -> None:
        """Re-create all piece glyphs and King markers from the state."""
        for item in self._piece_items.values():
            self.removeItem(item)
        self._piece_items.clear()
        self._clear_items(self._marker_items)

        if self._state is None:
            return

        t = self.TILE
        font = QFont("DejaVu Sans", int(t * 0.55))
        for cell in all_cells():
            piece = self._state.board[cell]
            if piece is None:
                continue
            item = QGraphicsSimpleTextItem(piece.symbol)
            item.setFont(font)
            white = piece.owner == Side.WHITE
            item.setBrush(
                QBrush(self._theme.white_piece if white else self._theme.black_piece)
            )
            item.setPen(QPen(self._theme.black_piece if white else self._theme.white_piece))
            item.setToolTip(f"{piece.owner} {piece.kind.name.lower()}")
            vr, vc = self._visual_coords(cell)
            bounds = item.boundingRect()
            item.setPos(
                vc * t + (t - bounds.width()) / 2,
                vr * t + (t - bounds.height()) / 2,
            )
            item.setZValue(1)
            self.addItem(item)
            self._piece_items[cell] = item

            if piece.kind == PieceKind.KING and self._state.is_king_immune(piece.owner):
                ring = QGraphicsEllipseItem(vc * t + 4, vr * t + 4, t - 8, t - 8)
                ring.setPen(QPen(self._theme.immune_ring, 4))
                ring.setBrush(QBrush(Qt.BrushStyle.NoBrush))
                ring.setZValue(0.9)
                self.addItem(ring)
                self._marker_items.append(ring)

    # ── Highlights ───────────────────────────────────────────────────────

    def _sync_highlights(self) -> None:
        self._clear_items(self._highlight_items)
        if self._state is None:
            return

        selection = self._selection
        if selection is not None:
            self._highlight_items.append(
                self._make_highlight(selection.cell, self._theme.highlight_from)
            )
            if self._show_legal_moves:
                for cell in sorted(selection.legal_moves):
                    occupied = self._state.board[cell] is not None
                    color = (
                        self._theme.highlight_capture
                        if occupied
                        else self._theme.highlight_to
                    )
                    self._highlight_items.append(self._make_highlight(cell, color))

        for cell in sorted(self._targets):
            self._highlight_items.append(
                self._make_highlight(cell, self._theme.highlight_target)
            )

    def highlighted_cells(self) -> list[Cell]:
        """Cells currently carrying an overlay, in drawing order."""
        cells = (self._pos_to_cell(item.rect().center()) for item in self._highlight_items)
        return [cell for cell in cells if cell is not None]

    def _clear_items(self, items: list) -> None:
        for item in items:
            self.removeItem(item)
        items.clear()

    # ── Mouse interaction ────────────────────────────────────────────────

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent | None) -> None:
        if not self._interactive or self._state is None or event is None:
            return super().mousePressEvent(event)

        cell = self._pos_to_cell(event.scenePos())
        if cell is not None:
            self.cell_clicked.emit(*cell)
            event.accept()
            return
        super().mousePressEvent(event)

    # ── Coordinate helpers ───────────────────────────────────────────────

    def _visual_coords(self, cell: Cell) -> tuple[int, int]:
        """Board cell → visual (row, column)."""
        row, col = cell
        if self._flipped:
            return BOARD_SIZE - 1 - row, BOARD_SIZE - 1 - col
        return row, col

    def _pos_to_cell(self, pos: QPointF) -> Cell | None:
        """Scene position → board cell."""
        t = self.TILE
        vc = int(pos.x() // t)
        vr = int(pos.y() // t)
        if not (0 <= vc < BOARD_SIZE and 0 <= vr < BOARD_SIZE):
            return None
        if self._flipped:
            return BOARD_SIZE - 1 - vr, BOARD_SIZE - 1 - vc
        return vr, vc

    def _make_highlight(self, cell: Cell, color: QColor) -> QGraphicsRectItem:
        """Create a coloured overlay rectangle on a cell."""
        t = self.TILE
        vr, vc = self._visual_coords(cell)
        rect = QGraphicsRectItem(vc * t, vr * t, t, t)
        rect.setBrush(QBrush(color))
        rect.setPen(QPen(Qt.PenStyle.NoPen))
        rect.setZValue(0.8)
        self.addItem(rect)
        return rect
