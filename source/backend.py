# backend.py
from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from typing import Any, List, Optional

import pw_cli
from models import ParsedStreams, SystemVolume, clamp_volume
from pw_channels import REDUCE_FIRST
from pw_parse import parse_streams, parse_system_volume

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandSet:
    system_get: str = "wpctl get-volume @DEFAULT_AUDIO_SINK@"
    system_set: str = "wpctl set-volume @DEFAULT_AUDIO_SINK@ {volume}"
    streams_list: str = "pactl list sink-inputs"
    stream_set: str = "pactl set-sink-input-volume {id} {volume}"


def volume_arg(v: float) -> str:
    pct = round(clamp_volume(v) * 100.0, 2)
    return f"{pct:g}%"


def expand(template: str, **values: Any) -> List[str]:
    """Split a configured command line and fill {volume}/{id} per argument."""
    parts = shlex.split(template)
    if not parts:
        raise ValueError("empty command line")
    return [p.format(**values) for p in parts]


class PipeWireVolumeBackend:
    FALLBACK_LABEL = "PipeWire (wpctl / pactl)"

    def __init__(
        self,
        commands: CommandSet = CommandSet(),
        timeout: float = pw_cli.DEFAULT_TIMEOUT,
        reduction: str = REDUCE_FIRST,
        pulse_client_name: str = "sinkmix-gui",
    ) -> None:
        self.commands = commands
        self.timeout = timeout
        self.reduction = reduction
        self._pulse_client_name = pulse_client_name
        self._pulse: Any = None

    def _exec(self, argv: List[str], timeout: Optional[float]) -> str:
        t = self.timeout if timeout is None else min(self.timeout, timeout)
        return pw_cli.run(argv[0], argv[1:], timeout=t)

    # queries: raw text, so the poller can time and parse them separately

    def query_system_volume(self, timeout: Optional[float] = None) -> str:
        return self._exec(expand(self.commands.system_get), timeout)

    def query_streams(self, timeout: Optional[float] = None) -> str:
        return self._exec(expand(self.commands.streams_list), timeout)

    def parse_system_volume(self, text: str) -> SystemVolume:
        return parse_system_volume(text)

    def parse_streams(self, text: str) -> ParsedStreams:
        return parse_streams(text, self.reduction)

    # control

    def set_system_volume(self, v: float) -> None:
        self._exec(expand(self.commands.system_set, volume=volume_arg(v)), None)

    def set_stream_volume(self, stream_id: int, v: float) -> None:
        self._exec(expand(self.commands.stream_set, id=int(stream_id), volume=volume_arg(v)), None)

    # server identity (pipewire-pulse answers the Pulse protocol)

    def _pulse_connect(self) -> Any:
        if self._pulse is None:
            import pulsectl

            self._pulse = pulsectl.Pulse(self._pulse_client_name)
        return self._pulse

    def server_label(self) -> str:
        try:
            info = self._pulse_connect().server_info()
        except Exception as e:
            log.debug("pulse server info unavailable: %s", e)
            self.close()
            return self.FALLBACK_LABEL
        name = (getattr(info, "server_name", "") or "").strip()
        ver = (getattr(info, "server_version", "") or "").strip()
        return f"{name} {ver}".strip() or self.FALLBACK_LABEL

    def close(self) -> None:
        if self._pulse is not None:
            try:
                self._pulse.close()
            except Exception:
                pass
        self._pulse = None
