# poller.py
from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Optional

from backend import PipeWireVolumeBackend
from errors import CommandTimeout, VolumeError
from models import AudioSnapshot
from state_store import AudioStateStore

log = logging.getLogger(__name__)

DEFAULT_INTERVAL = 1.0


class PollState(enum.Enum):
    IDLE = "idle"
    QUERYING = "querying"
    PARSING = "parsing"
    RECONCILING = "reconciling"


class Poller:
    """
    Background refresh of the store: query, parse, reconcile, once per interval.

    Only one cycle runs at a time. A cycle that is due while another is still
    running is skipped, and a failed cycle leaves the store as it was.
    """

    def __init__(
        self,
        backend: PipeWireVolumeBackend,
        store: AudioStateStore,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        if interval <= 0:
            raise ValueError("poll interval must be positive")
        self._backend = backend
        self._store = store
        self.interval = interval

        self._cycle_lock = threading.Lock()
        self._stop = threading.Event()
        self._wake = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.state = PollState.IDLE
        self.cycles = 0
        self.skipped = 0
        self.last_error: Optional[Exception] = None

    @property
    def budget(self) -> float:
        return max(self.interval, self._backend.timeout)

    def poll_once(self) -> bool:
        """Run one cycle. False if it was skipped or failed."""
        if not self._cycle_lock.acquire(blocking=False):
            self.skipped += 1
            log.debug("poll skipped: previous cycle still running")
            return False
        try:
            return self._cycle()
        except Exception as e:
            # Anything that is not a VolumeError is a bug, but it must not end the thread.
            if self.last_error is None or type(e) is not type(self.last_error):
                log.exception("poll cycle crashed, keeping last known state")
            else:
                log.debug("poll cycle still crashing: %s", e)
            self.last_error = e
            return False
        finally:
            self.state = PollState.IDLE
            self._cycle_lock.release()

    def _cycle(self) -> bool:
        started = time.monotonic()
        captured_at = self._store.now()
        try:
            self.state = PollState.QUERYING
            sys_text = self._backend.query_system_volume(timeout=self.budget)
            left = self.budget - (time.monotonic() - started)
            if left <= 0:
                raise CommandTimeout("poll cycle", self.budget)
            streams_text = self._backend.query_streams(timeout=left)

            self.state = PollState.PARSING
            system = self._backend.parse_system_volume(sys_text)
            parsed = self._backend.parse_streams(streams_text)
        except VolumeError as e:
            self._failed(e)
            return False

        for w in parsed.warnings:
            log.warning("stream listing: %s", w)

        self.state = PollState.RECONCILING
        self._store.reconcile(AudioSnapshot(system=system, streams=parsed.records, captured_at=captured_at))

        self.cycles += 1
        if self.last_error is not None:
            log.info("polling recovered after: %s", self.last_error)
            self.last_error = None
        return True

    def _failed(self, e: VolumeError) -> None:
        if self.last_error is None:
            log.warning("poll failed, keeping last known state: %s", e)
        else:
            log.debug("poll still failing: %s", e)
        self.last_error = e

    # --- thread ----------------------------------------------------------

    def _run(self) -> None:
        next_due = time.monotonic()
        while not self._stop.is_set():
            self._wake.clear()
            self.poll_once()

            next_due += self.interval
            now = time.monotonic()
            if now > next_due:
                missed = int((now - next_due) // self.interval) + 1
                self.skipped += missed
                log.debug("poll overran by %.3fs, dropping %d tick(s)", now - next_due, missed)
                next_due += missed * self.interval

            if self._wake.wait(next_due - now):
                next_due = time.monotonic()

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="sinkmix-poller", daemon=True)
        self._thread.start()
        log.info("poller started (every %.0f ms)", self.interval * 1000)

    def request_refresh(self) -> None:
        self._wake.set()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        self._wake.set()
        t = self._thread
        if t is not None:
            t.join(timeout if timeout is not None else self.budget + 1.0)
            if t.is_alive():
                log.warning("poller thread did not stop within timeout")
            else:
                log.info("poller stopped")
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
