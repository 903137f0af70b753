from __future__ import annotations

import pytest

import main
from conftest import SINK_INPUTS
from errors import CommandNotFound


@pytest.fixture(autouse=True)
def xdg(tmp_path, monkeypatch):
    monkeypatch.setattr("store_config.platform.system", lambda: "Linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))


def test_dump_prints_one_poll(fake_cli, capsys) -> None:
    fake_cli.on("wpctl get-volume", "Volume: 0.33 [MUTED]\n")
    fake_cli.on("pactl list sink-inputs", SINK_INPUTS)

    assert main.main(["--dump"]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out[0] == "system   33.0% [muted]"
    assert out[1].startswith("42") and out[1].endswith("Firefox")
    assert "70.0%" in out[1]
    assert out[2].endswith("media-player")


def test_dump_reports_failure(fake_cli, capsys) -> None:
    fake_cli.on("wpctl", CommandNotFound("wpctl"))

    assert main.main(["--dump"]) == 1
    assert "poll failed" in capsys.readouterr().err


def test_arg_parser() -> None:
    args = main.build_arg_parser().parse_args(["--interval-ms", "250", "--log-level", "DEBUG"])
    assert args.interval_ms == 250
    assert args.log_level == "DEBUG"
    assert args.dump is False
