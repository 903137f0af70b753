# main_window.py
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Optional

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QFrame,
)

from backend import PipeWireVolumeBackend
from commander import VolumeCommander
from errors import CommandError
from models import StreamRecord
from poller import Poller
from rows import VolumeRow
from state_store import SYSTEM, AudioStateStore, Target

log = logging.getLogger(__name__)

APP_NAME = "SinkMix"
REDRAW_MS = 150
SERVER_PENDING = "connecting..."


def stream_title(r: StreamRecord) -> str:
    return f"{r.display_name}  (id {r.id})"


class MainWindow(QMainWindow):
    command_done = Signal(object, object)  # target, error message or None
    server_label_ready = Signal(str)

    def __init__(
        self,
        backend: PipeWireVolumeBackend,
        store: AudioStateStore,
        poller: Poller,
        commander: VolumeCommander,
    ) -> None:
        super().__init__()
        self.backend = backend
        self.store = store
        self.poller = poller
        self.commander = commander

        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sinkmix-cmd")
        self._stream_rows: Dict[int, VolumeRow] = {}
        self._seen_version = -1

        self.setWindowTitle(APP_NAME)
        self.resize(720, 460)

        root = QWidget()
        v = QVBoxLayout()
        v.setContentsMargins(14, 14, 14, 14)
        v.setSpacing(12)
        root.setLayout(v)
        self.setCentralWidget(root)

        v.addLayout(self._build_header())
        v.addWidget(self._build_system_panel())
        v.addWidget(self._build_streams_panel(), 1)

        self.command_done.connect(self._on_command_done)
        self._wire_timers()
        self._redraw()

    def _build_header(self) -> QHBoxLayout:
        header = QHBoxLayout()
        header.setSpacing(10)

        title = QLabel(APP_NAME)
        title.setObjectName("Title")

        # filled in from the worker pool, pulsectl can block on a slow server
        self.server = QLabel(SERVER_PENDING)
        self.server.setStyleSheet("color: #aeb3bc;")
        self.server_label_ready.connect(self.server.setText)
        self._pool.submit(self.backend.server_label).add_done_callback(self._server_label_done)

        refresh_btn = QPushButton("Refresh")
        refresh_btn.setObjectName("Primary")
        refresh_btn.clicked.connect(self.poller.request_refresh)

        header.addWidget(title)
        header.addSpacing(8)
        header.addWidget(QLabel("Server:"))
        header.addWidget(self.server, 2)
        header.addStretch(1)
        header.addWidget(refresh_btn)
        return header

    def _server_label_done(self, f: Future) -> None:
        if f.cancelled():
            return
        exc = f.exception()
        if exc is not None:
            log.warning("server label lookup failed: %s", exc)
            self.server_label_ready.emit(self.backend.FALLBACK_LABEL)
        else:
            self.server_label_ready.emit(f.result())

    def _panel(self, title: str) -> QFrame:
        frame = QFrame()
        frame.setObjectName("Panel")

        layout = QVBoxLayout()
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)
        frame.setLayout(layout)

        t = QLabel(title)
        f = QFont()
        f.setPointSize(12)
        f.setWeight(QFont.DemiBold)
        t.setFont(f)
        layout.addWidget(t)
        return frame

    def _build_system_panel(self) -> QFrame:
        frame = self._panel("System output")
        self.system_row = VolumeRow(SYSTEM, "Default sink")
        self.system_row.volume_requested.connect(self._on_volume_requested)
        frame.layout().addWidget(self.system_row)
        return frame

    def _build_streams_panel(self) -> QFrame:
        frame = self._panel("Applications")

        container = QWidget()
        self._streams_layout = QVBoxLayout()
        self._streams_layout.setContentsMargins(0, 0, 0, 0)
        self._streams_layout.setSpacing(8)
        container.setLayout(self._streams_layout)

        self.empty_hint = QLabel("No application is playing audio.")
        self.empty_hint.setStyleSheet("color: #aeb3bc;")
        self._streams_layout.addWidget(self.empty_hint)
        self._streams_layout.addStretch(1)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        scroll.setWidget(container)
        frame.layout().addWidget(scroll, 1)
        return frame

    def _wire_timers(self) -> None:
        self.timer = QTimer(self)
        self.timer.setInterval(REDRAW_MS)
        self.timer.timeout.connect(self._redraw)
        self.timer.start()

    # --- store -> widgets ------------------------------------------------

    def _redraw(self) -> None:
        err = self.poller.last_error
        if err is not None:
            self.statusBar().showMessage(f"Sound server not answering, showing last known state: {err}")
        elif self.statusBar().currentMessage().startswith("Sound server"):
            self.statusBar().clearMessage()

        view = self.store.view()
        if view.version == self._seen_version:
            return
        self._seen_version = view.version

        self.system_row.sync("Default sink", view.system.level, view.system.muted)
        self._sync_stream_rows(list(view.streams))

    def _sync_stream_rows(self, streams: List[StreamRecord]) -> None:
        live = {r.id for r in streams}
        for sid in [s for s in self._stream_rows if s not in live]:
            w = self._stream_rows.pop(sid)
            w.setParent(None)
            w.deleteLater()

        for i, r in enumerate(streams):
            row = self._stream_rows.get(r.id)
            if row is None:
                row = VolumeRow(r.id, stream_title(r))
                row.volume_requested.connect(self._on_volume_requested)
                self._stream_rows[r.id] = row
            if self._streams_layout.indexOf(row) != i:
                self._streams_layout.removeWidget(row)
                self._streams_layout.insertWidget(i, row)
            row.sync(stream_title(r), r.volume)

        self.empty_hint.setVisible(not streams)

    def _row_for(self, target: Target) -> Optional[VolumeRow]:
        if target == SYSTEM:
            return self.system_row
        return self._stream_rows.get(target)  # type: ignore[arg-type]

    # --- widgets -> commander --------------------------------------------

    def _send(self, target: Target, value: float) -> Optional[str]:
        try:
            if target == SYSTEM:
                self.commander.set_system_volume(value)
            else:
                self.commander.set_stream_volume(int(target), value)
        except CommandError as e:
            return str(e)
        return None

    def _on_volume_requested(self, target: Target, value: float) -> None:
        row = self._row_for(target)
        if row is not None:
            row.mark_sending()

        fut = self._pool.submit(self._send, target, value)

        def done(f: Future) -> None:
            exc = f.exception()
            if exc is not None:
                log.exception("volume command crashed", exc_info=exc)
                self.command_done.emit(target, str(exc))
            else:
                self.command_done.emit(target, f.result())

        fut.add_done_callback(done)

    def _on_command_done(self, target: Target, error: Optional[str]) -> None:
        row = self._row_for(target)
        if row is not None:
            row.mark_done(error)
        if error:
            self.statusBar().showMessage(error, 6000)
        self._redraw()

    def shutdown(self) -> None:
        self.timer.stop()
        self._pool.shutdown(wait=True, cancel_futures=True)

    def closeEvent(self, event) -> None:
        try:
            self.shutdown()
        except Exception:
            log.exception("error while closing window")
        super().closeEvent(event)
