# widgets.py
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QFontMetrics
from PySide6.QtWidgets import QLabel, QSizePolicy


class ElideLabel(QLabel):
    """QLabel that shortens its text with an ellipsis instead of growing."""

    def __init__(self, text: str = "", parent=None) -> None:
        super().__init__(parent)
        self._full = ""
        self.setSizePolicy(QSizePolicy.Ignored, QSizePolicy.Preferred)
        self.setMinimumWidth(60)
        self.set_full_text(text)

    def set_full_text(self, text: str) -> None:
        if text == self._full:
            return
        self._full = text
        self.setToolTip(text)
        self._elide()

    def full_text(self) -> str:
        return self._full

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._elide()

    def _elide(self) -> None:
        fm = QFontMetrics(self.font())
        w = max(10, self.width() - 4)
        super().setText(fm.elidedText(self._full, Qt.ElideRight, w))


class StatusPill(QLabel):
    _COLORS = {
        "ok": ("#233a2c", "#2f6b45", "#cfeedd"),
        "pending": ("#3a3424", "#7a6231", "#f3e6c8"),
        "error": ("#3a2424", "#7a3131", "#f3c8c8"),
        "muted": ("#2a2a30", "#5a5a66", "#a8a8b4"),
    }

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setAlignment(Qt.AlignCenter)
        self.setFixedWidth(78)
        self._state = ""
        self.set_state("ok", "Live")

    def state(self) -> str:
        return self._state

    def set_state(self, state: str, text: str, tip: Optional[str] = None) -> None:
        self.setText(text)
        self.setToolTip(tip or "")
        if state == self._state:
            return
        self._state = state

        bg, bd, fg = self._COLORS.get(state, ("#2a2a30", "#3a3a42", "#d6d6d6"))
        self.setStyleSheet(
            f"""
            QLabel {{
                background: {bg};
                border: 1px solid {bd};
                border-radius: 10px;
                padding: 3px 6px;
                color: {fg};
                font-weight: 600;
            }}
            """
        )
