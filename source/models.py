# models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


UNKNOWN_NAME = "(unknown)"


def clamp_volume(v: float) -> float:
    v = float(v)
    if v != v:  # NaN
        return 0.0
    return max(0.0, min(1.0, v))


@dataclass(frozen=True)
class SystemVolume:
    level: float
    muted: bool = False


@dataclass(frozen=True)
class StreamRecord:
    id: int
    display_name: str
    volume: float   # 0.0 .. 1.0


@dataclass(frozen=True)
class ParsedStreams:
    records: Tuple[StreamRecord, ...]
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AudioSnapshot:
    system: SystemVolume
    streams: Tuple[StreamRecord, ...]
    captured_at: float  # time.monotonic() when the poll started querying
