# commander.py
from __future__ import annotations

import logging
from typing import Callable

from backend import PipeWireVolumeBackend
from errors import ControlFailed, ExecError, StaleTarget
from models import clamp_volume
from state_store import SYSTEM, AudioStateStore, Target

log = logging.getLogger(__name__)


class VolumeCommander:
    """
    Applies user volume changes: optimistic store write first, then the
    control command, rolling the store back if the command fails.

    Calls block on the external command; run them off the UI thread.
    """

    def __init__(self, backend: PipeWireVolumeBackend, store: AudioStateStore) -> None:
        self._backend = backend
        self._store = store

    def set_system_volume(self, value: float) -> float:
        v = clamp_volume(value)
        stamp = self._store.apply_optimistic(SYSTEM, v)
        self._push(SYSTEM, stamp, "system volume", lambda: self._backend.set_system_volume(v))
        return v

    def set_stream_volume(self, stream_id: int, value: float) -> float:
        v = clamp_volume(value)
        stamp = self._store.apply_optimistic(stream_id, v)
        if stamp is None:
            raise StaleTarget(stream_id)
        self._push(stream_id, stamp, f"stream {stream_id}", lambda: self._backend.set_stream_volume(stream_id, v))
        return v

    def _push(self, target: Target, stamp: float, what: str, send: Callable[[], None]) -> None:
        try:
            send()
        except ExecError as e:
            rolled = self._store.rollback(target, stamp)
            log.error("setting %s failed (%s): %s", what, "rolled back" if rolled else "superseded", e)
            raise ControlFailed(what, e) from e
