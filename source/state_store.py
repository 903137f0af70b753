# state_store.py
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Union

from models import AudioSnapshot, StreamRecord, SystemVolume, clamp_volume

log = logging.getLogger(__name__)

SYSTEM = "system"

Target = Union[str, int]  # SYSTEM or a stream id


@dataclass(frozen=True)
class StoreView:
    system: SystemVolume
    streams: Tuple[StreamRecord, ...]
    version: int


class AudioStateStore:
    """
    The live model of the sink volume and the active streams.

    Writers (reconcile / apply_optimistic / rollback) take one lock. Readers
    get an immutable StoreView that is swapped in after each write, so a read
    never blocks and never sees half a merge.

    Recency rule: apply_optimistic stamps the entity with the store clock.
    reconcile() keeps the current record of any entity stamped at or after
    the snapshot's captured_at, because that snapshot was taken before the
    user's change. The snapshot value is still remembered as the confirmed
    value, which is what rollback() restores.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()

        self._system = SystemVolume(level=0.0)
        self._streams: Dict[int, StreamRecord] = {}

        self._confirmed_system = self._system
        self._confirmed_streams: Dict[int, StreamRecord] = {}
        self._stamps: Dict[Target, float] = {}

        self._version = 0
        self._view = StoreView(system=self._system, streams=(), version=0)

    def now(self) -> float:
        return self._clock()

    # --- reads -----------------------------------------------------------

    def view(self) -> StoreView:
        return self._view

    @property
    def version(self) -> int:
        return self._view.version

    def get_system(self) -> SystemVolume:
        return self._view.system

    def get_system_volume(self) -> float:
        return self._view.system.level

    def is_system_muted(self) -> bool:
        return self._view.system.muted

    def get_streams(self) -> Tuple[StreamRecord, ...]:
        return self._view.streams

    def get_stream(self, stream_id: int) -> Optional[StreamRecord]:
        for r in self._view.streams:
            if r.id == stream_id:
                return r
        return None

    # --- writes ----------------------------------------------------------

    def _publish(self) -> None:
        self._version += 1
        self._view = StoreView(
            system=self._system,
            streams=tuple(self._streams.values()),
            version=self._version,
        )

    def _is_newer(self, target: Target, captured_at: float) -> bool:
        st = self._stamps.get(target)
        return st is not None and st >= captured_at

    def reconcile(self, snapshot: AudioSnapshot) -> None:
        captured_at = snapshot.captured_at
        sys_vol = SystemVolume(level=clamp_volume(snapshot.system.level), muted=snapshot.system.muted)

        with self._lock:
            self._confirmed_system = sys_vol
            if self._is_newer(SYSTEM, captured_at):
                log.debug("system volume: keeping local change over older snapshot")
                self._system = SystemVolume(level=self._system.level, muted=sys_vol.muted)
            else:
                self._system = sys_vol
                self._stamps.pop(SYSTEM, None)

            streams: Dict[int, StreamRecord] = {}
            confirmed: Dict[int, StreamRecord] = {}
            for rec in snapshot.streams:
                if rec.id in streams:
                    continue
                rec = StreamRecord(id=rec.id, display_name=rec.display_name, volume=clamp_volume(rec.volume))
                confirmed[rec.id] = rec

                cur = self._streams.get(rec.id)
                if cur is not None and self._is_newer(rec.id, captured_at):
                    # pending local volume, everything else from the snapshot
                    streams[rec.id] = StreamRecord(id=rec.id, display_name=rec.display_name, volume=cur.volume)
                else:
                    streams[rec.id] = rec
                    self._stamps.pop(rec.id, None)

            added = streams.keys() - self._streams.keys()
            removed = self._streams.keys() - streams.keys()
            for sid in removed:
                self._stamps.pop(sid, None)

            self._streams = streams
            self._confirmed_streams = confirmed
            self._publish()

        if added or removed:
            log.debug("streams: +%s -%s", sorted(added), sorted(removed))

    def apply_optimistic(self, target: Target, volume: float) -> Optional[float]:
        """
        Show `volume` for `target` right away. Returns the stamp to pass to
        rollback(), or None if `target` is a stream the store does not know.
        """
        v = clamp_volume(volume)
        with self._lock:
            if target == SYSTEM:
                self._system = SystemVolume(level=v, muted=self._system.muted)
            else:
                cur = self._streams.get(target)  # type: ignore[arg-type]
                if cur is None:
                    return None
                self._streams[cur.id] = StreamRecord(id=cur.id, display_name=cur.display_name, volume=v)

            stamp = self._clock()
            self._stamps[target] = stamp
            self._publish()
            return stamp

    def rollback(self, target: Target, stamp: float) -> bool:
        """
        Undo the optimistic write identified by `stamp`. A newer write to the
        same target, or the stream going away, makes this a no-op.
        """
        with self._lock:
            if self._stamps.get(target) != stamp:
                return False

            if target == SYSTEM:
                self._system = self._confirmed_system
            else:
                prev = self._confirmed_streams.get(target)  # type: ignore[arg-type]
                if prev is None or target not in self._streams:
                    self._stamps.pop(target, None)
                    return False
                self._streams[prev.id] = prev

            del self._stamps[target]
            self._publish()
            return True
