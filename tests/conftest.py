"""Shared pytest fixtures for the SinkMix test suite."""

import sys
from pathlib import Path

import pytest

# Modules are flat files under source/
SOURCE_DIR = Path(__file__).parent.parent / "source"
if str(SOURCE_DIR) not in sys.path:
    sys.path.insert(0, str(SOURCE_DIR))

from models import AudioSnapshot, StreamRecord, SystemVolume  # noqa: E402


class FakeClock:
    def __init__(self, start: float = 100.0) -> None:
        self.t = start

    def __call__(self) -> float:
        return self.t

    def tick(self, dt: float = 1.0) -> float:
        self.t += dt
        return self.t


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def snapshot(captured_at: float, system: float = 0.5, muted: bool = False, **streams: float) -> AudioSnapshot:
    """snapshot(10.0, system=0.4, s1=0.5) -> stream id 1 named "app1" at 0.5"""
    recs = tuple(
        StreamRecord(id=int(k[1:]), display_name=f"app{k[1:]}", volume=v) for k, v in streams.items()
    )
    return AudioSnapshot(system=SystemVolume(level=system, muted=muted), streams=recs, captured_at=captured_at)


SINK_INPUTS = """\
Sink Input #42
	Driver: PipeWire
	Owner Module: n/a
	Client: 41
	Sink: 55
	Sample Specification: float32le 2ch 48000Hz
	Channel Map: front-left,front-right
	Format: pcm, format.sample_format = "\\"float32le\\""  format.rate = "48000"
	Corked: no
	Mute: no
	Volume: front-left: 45875 /  70% / -9.29 dB,   front-right: 45875 /  70% / -9.29 dB
	        balance 0.00
	Buffer Latency: 0 usec
	Sink Latency: 0 usec
	Resample method: PipeWire
	Properties:
		media.name = "Playback"
		application.name = "Firefox"
		application.process.id = "1234"
		application.process.binary = "firefox"

Sink Input #57
	Driver: PipeWire
	Sink: 55
	Mute: no
	Volume: front-left: 32768 /  50% / -18.06 dB,   front-right: 65536 / 100% / 0.00 dB
	        balance 0.50
	Properties:
		media.name = "music"
		application.name = "media-player"
"""


@pytest.fixture
def sink_inputs_text() -> str:
    return SINK_INPUTS


class FakeCli:
    """Stands in for pw_cli.run; answers by command-line prefix."""

    def __init__(self) -> None:
        self.responses = {}
        self.calls = []

    def on(self, prefix: str, result) -> None:
        self.responses[prefix] = result

    def __call__(self, command, args=(), timeout=2.0):
        line = " ".join([command, *args])
        self.calls.append((line, timeout))
        for prefix in sorted(self.responses, key=len, reverse=True):
            if line.startswith(prefix):
                result = self.responses[prefix]
                if isinstance(result, BaseException):
                    raise result
                if callable(result):
                    return result()
                return result
        return ""

    def lines(self):
        return [c for c, _ in self.calls]


@pytest.fixture
def fake_cli(monkeypatch) -> FakeCli:
    import pw_cli

    cli = FakeCli()
    monkeypatch.setattr(pw_cli, "run", cli)
    return cli
