"""Grid tiles for the Q-learning visualization."""

from typing import Literal, Optional

import numpy as np
from PySide6.QtWidgets import QGraphicsRectItem, QGraphicsTextItem
from PySide6.QtGui import QBrush, QPen, QColor, QFont

from ..domain.types import ACTION_ARROWS, Action

TileKind = Literal["empty", "start", "goal", "agent", "path"]


class GridTile(QGraphicsRectItem):
    """Graphics item representing a single grid cell."""

    def __init__(self, x: int, y: int, size: float):
        super().__init__(0, 0, size, size)
        self.grid_x = x
        self.grid_y = y
        self.size = size
        self.kind: TileKind = "empty"
        self.show_q_values = False
        self._q_values: Optional[np.ndarray] = None

        self.setPos(x * size, y * size)

        # Best-action arrow (center)
        self._arrow_text = QGraphicsTextItem(parent=self)
        self._arrow_text.setFont(QFont("Arial", max(int(size * 0.35), 6)))
        self._arrow_text.setVisible(False)

        self.update_appearance()

    def set_kind(self, kind: TileKind):
        if kind != self.kind:
            self.kind = kind
            self.update_appearance()

    def set_q_values(self, q_values: Optional[np.ndarray]):
        self._q_values = q_values
        if self.show_q_values:
            self.update_appearance()

    def set_show_q_values(self, show: bool):
        """Enable or disable Q-value display."""
        self.show_q_values = show
        self.update_appearance()

    def update_appearance(self):
        """Update tile appearance based on its kind and values."""
        brush_color, pen_color = self._get_colors()
        self.setBrush(QBrush(brush_color))
        self.setPen(QPen(pen_color, 1))
        self._update_arrow_display()

    def _get_colors(self) -> tuple[QColor, QColor]:
        color_map = {
            "empty": (QColor(240, 240, 240), QColor(180, 180, 180)),
            "start": (QColor(200, 200, 255), QColor(150, 150, 200)),
            "goal": (QColor(100, 220, 100), QColor(50, 170, 50)),
            "agent": (QColor(230, 60, 60), QColor(180, 30, 30)),
            "path": (QColor(255, 220, 120), QColor(200, 170, 70)),
        }

        # Shade empty tiles by their best value
        if self.kind == "empty" and self.show_q_values and self._q_values is not None:
            max_q = float(self._q_values.max())
            if max_q != 0.0:
                alpha = int(255 * min(abs(max_q) / 10.0, 1.0))
                if max_q > 0:
                    return (QColor(120, 220, 120, alpha), QColor(100, 200, 100))
                return (QColor(230, 120, 120, alpha), QColor(200, 100, 100))

        return color_map.get(self.kind, color_map["empty"])

    def _update_arrow_display(self):
        visible = (self.show_q_values and self._q_values is not None
                   and self.kind in ("empty", "start", "path") and np.any(self._q_values != 0.0))
        if not visible:
            self._arrow_text.setVisible(False)
            return

        action = Action(int(np.argmax(self._q_values)))
        self._arrow_text.setPlainText(ACTION_ARROWS[action])
        rect = self._arrow_text.boundingRect()
        self._arrow_text.setPos((self.size - rect.width()) / 2, (self.size - rect.height()) / 2)
        self._arrow_text.setVisible(True)
