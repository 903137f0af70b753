# pw_channels.py
from __future__ import annotations

import re
from typing import List, Sequence


REDUCE_FIRST = "first"
REDUCE_MEAN = "mean"
REDUCTION_POLICIES = (REDUCE_FIRST, REDUCE_MEAN)

_PERCENT = re.compile(r"(\d+(?:\.\d+)?)\s*%")


def parse_channel_volumes(text: str) -> List[float]:
    """
    Per-channel volumes of a pactl volume field as fractions, in listing order.

    Accepts the long form
        front-left: 45875 /  70% / -9.29 dB,   front-right: 45875 /  70% / -9.29 dB
    and the short form
        70% / 70%
    Only the percentages count; raw values and dB are ignored. Fractions are
    not clamped here.
    """
    return [float(pct) / 100.0 for pct in _PERCENT.findall(text or "")]


def reduce_channels(values: Sequence[float], policy: str = REDUCE_FIRST) -> float:
    """
    Collapse per-channel volumes into the one scalar a slider shows.

    "first" keeps the first listed channel, which matches what pactl prints
    first and what the mixer shows for a balanced stream. "mean" averages all
    channels. Either way the value is lossy for unbalanced streams: setting it
    back applies the same level to every channel.
    """
    if not values:
        raise ValueError("no channel volumes to reduce")
    if policy == REDUCE_FIRST:
        return float(values[0])
    if policy == REDUCE_MEAN:
        return sum(values) / len(values)
    raise ValueError(f"unknown channel reduction policy: {policy!r}")
