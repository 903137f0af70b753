# rows.py
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QWidget, QHBoxLayout, QLabel, QSlider, QSizePolicy

from state_store import Target
from widgets import ElideLabel, StatusPill


class VolumeRow(QWidget):
    volume_requested = Signal(object, float)  # target, 0..1

    def __init__(self, target: Target, title: str) -> None:
        super().__init__()
        self.setObjectName("RowCard")
        self.target = target

        self.title = ElideLabel(title)
        self.title.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)

        self.slider = QSlider(Qt.Horizontal)
        self.slider.setRange(0, 100)
        self.slider.setPageStep(5)
        self.slider.setMinimumWidth(180)

        self.pct = QLabel("0%")
        self.pct.setFixedWidth(44)
        self.pct.setAlignment(Qt.AlignRight | Qt.AlignVCenter)

        self.status = StatusPill()

        self._syncing = False
        self._muted = False
        self._sending = 0
        self._error: Optional[str] = None

        row = QHBoxLayout()
        row.setContentsMargins(10, 8, 10, 8)
        row.setSpacing(10)
        row.addWidget(self.title, 2)
        row.addWidget(self.slider, 3)
        row.addWidget(self.pct, 0, Qt.AlignVCenter)
        row.addWidget(self.status, 0, Qt.AlignVCenter)
        self.setLayout(row)

        self.slider.valueChanged.connect(self._on_value_changed)
        self.slider.sliderReleased.connect(self._emit_request)
        self._sync_ui()

    def _on_value_changed(self, v: int) -> None:
        self.pct.setText(f"{v}%")
        if self._syncing or self.slider.isSliderDown():
            return
        self._emit_request()

    def _emit_request(self) -> None:
        self._error = None
        self.volume_requested.emit(self.target, self.slider.value() / 100.0)

    def sync(self, title: str, volume: float, muted: bool = False) -> None:
        self.title.set_full_text(title)
        self._muted = muted
        if not self.slider.isSliderDown():
            v = int(round(volume * 100))
            if v != self.slider.value():
                self._syncing = True
                try:
                    self.slider.setValue(v)
                finally:
                    self._syncing = False
        self._sync_ui()

    def mark_sending(self) -> None:
        self._sending += 1
        self._sync_ui()

    def mark_done(self, error: Optional[str] = None) -> None:
        self._sending = max(0, self._sending - 1)
        self._error = error
        self._sync_ui()

    def _sync_ui(self) -> None:
        if self._error is not None:
            self.status.set_state("error", "Error", self._error)
        elif self._sending:
            self.status.set_state("pending", "Sending", "Waiting for the sound server.")
        elif self._muted:
            self.status.set_state("muted", "Muted", "Output is muted; the level is kept.")
        else:
            self.status.set_state("ok", "Live")
