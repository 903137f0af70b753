# pw_parse.py
from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from errors import ParseError
from models import UNKNOWN_NAME, ParsedStreams, StreamRecord, SystemVolume, clamp_volume
from pw_channels import REDUCE_FIRST, parse_channel_volumes, reduce_channels


_NUMBER = re.compile(r"(?<![\w.])([-+]?(?:\d+\.\d*|\.\d+|\d+))(\s*%)?")
_MUTED = re.compile(r"\[\s*muted\s*\]", re.IGNORECASE)
_HEADER = re.compile(r"^Sink Input\s*#\s*(\S*)\s*$")
_PROP = re.compile(r"^([A-Za-z0-9_.\-]+)\s*=\s*(.*)$")

_NAME_KEYS = ("application.name", "application.process.binary", "media.name")


def parse_system_volume(text: str) -> SystemVolume:
    """
    Parse `wpctl get-volume` style output, e.g. "Volume: 0.45 [MUTED]".

    The first numeric token wins. "45%" is a percentage, a bare "0.45" is a
    fraction. Values are clamped to [0, 1].
    """
    m = _NUMBER.search(text or "")
    if m is None:
        raise ParseError(f"no volume value in {(text or '').strip()!r}")

    v = float(m.group(1))
    if m.group(2):
        v /= 100.0

    return SystemVolume(level=clamp_volume(v), muted=bool(_MUTED.search(text)))


def _split_blocks(text: str) -> List[Tuple[str, List[str]]]:
    blocks: List[Tuple[str, List[str]]] = []
    stray = False

    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        m = _HEADER.match(line)
        if m:
            blocks.append((m.group(1), []))
        elif blocks:
            blocks[-1][1].append(line)
        else:
            stray = True

    if not blocks and stray:
        raise ParseError("stream listing has no 'Sink Input #' blocks")
    return blocks


def _block_fields(lines: List[str]) -> Tuple[Optional[str], Dict[str, str]]:
    volume: Optional[str] = None
    props: Dict[str, str] = {}
    for line in lines:
        if line.startswith("Volume:"):
            if volume is None:
                volume = line[len("Volume:"):].strip()
            continue
        m = _PROP.match(line)
        if m:
            props[m.group(1)] = m.group(2).strip().strip('"')
    return volume, props


def _display_name(props: Dict[str, str]) -> str:
    for k in _NAME_KEYS:
        v = (props.get(k) or "").strip()
        if v:
            return v
    return UNKNOWN_NAME


def parse_streams(text: str, reduction: str = REDUCE_FIRST) -> ParsedStreams:
    """
    Parse `pactl list sink-inputs` output into stream records.

    A block that cannot be used (bad id, duplicate id, no volume) is skipped
    and explained in `warnings`; the other blocks still come through.
    """
    records: List[StreamRecord] = []
    warnings: List[str] = []
    seen = set()

    for raw_id, lines in _split_blocks(text or ""):
        try:
            sid = int(raw_id)
        except ValueError:
            warnings.append(f"skipped block with invalid id {raw_id!r}")
            continue

        if sid in seen:
            warnings.append(f"skipped duplicate block for stream {sid}")
            continue
        seen.add(sid)

        volume_field, props = _block_fields(lines)
        chans = parse_channel_volumes(volume_field or "")
        if not chans:
            warnings.append(f"skipped stream {sid}: no volume field")
            continue

        records.append(
            StreamRecord(
                id=sid,
                display_name=_display_name(props),
                volume=clamp_volume(reduce_channels(chans, reduction)),
            )
        )

    return ParsedStreams(records=tuple(records), warnings=tuple(warnings))
