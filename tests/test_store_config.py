from __future__ import annotations

import configparser

import pytest

from backend import CommandSet
from store_config import DEFAULT_CONFIG_TEXT, ConfigStore, Settings, settings_from_config, user_config_dir


@pytest.fixture
def xdg(tmp_path, monkeypatch):
    monkeypatch.setattr("store_config.platform.system", lambda: "Linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    return tmp_path


def cfg_from(text: str) -> configparser.ConfigParser:
    cfg = configparser.ConfigParser(interpolation=None)
    cfg.read_string(text)
    return cfg


def test_config_dir_follows_xdg(xdg) -> None:
    assert user_config_dir("SinkMix") == xdg / "SinkMix"


def test_first_load_writes_defaults(xdg) -> None:
    store = ConfigStore()

    settings = store.load_settings()

    assert store.file_path == xdg / "SinkMix" / "sinkmix.cfg"
    assert store.file_path.read_text(encoding="utf-8") == DEFAULT_CONFIG_TEXT
    assert settings == Settings()


def test_default_text_matches_default_settings() -> None:
    assert settings_from_config(cfg_from(DEFAULT_CONFIG_TEXT)) == Settings()


def test_values_are_read(xdg) -> None:
    store = ConfigStore()
    store.dir_path.mkdir(parents=True)
    store.file_path.write_text(
        "[Poll]\ninterval_ms = 500\ncommand_timeout_ms = 1500\n"
        "[Volume]\nchannel_reduction = MEAN\n"
        "[Commands]\nsystem_get = pamixer --get-volume-human\n"
        "[Logging]\nlevel = debug\n",
        encoding="utf-8",
    )

    s = store.load_settings()

    assert s.interval == 0.5
    assert s.command_timeout == 1.5
    assert s.channel_reduction == "mean"
    assert s.log_level == "DEBUG"
    assert s.commands.system_get == "pamixer --get-volume-human"
    assert s.commands.stream_set == CommandSet().stream_set


def test_bad_values_fall_back_to_defaults(caplog) -> None:
    s = settings_from_config(
        cfg_from(
            "[Poll]\ninterval_ms = fast\ncommand_timeout_ms = 5\n"
            "[Volume]\nchannel_reduction = loudest\n"
            "[Commands]\nstream_set = pactl set-sink-input-volume {stream} {volume}\n"
            "[Logging]\nlevel = chatty\n"
        )
    )

    assert s == Settings()
    assert "interval_ms" in caplog.text
    assert "command_timeout_ms" in caplog.text
    assert "channel_reduction" in caplog.text
    assert "stream_set" in caplog.text
    assert "level" in caplog.text


def test_missing_sections_are_fine() -> None:
    assert settings_from_config(cfg_from("")) == Settings()


def test_unreadable_file_uses_defaults(xdg) -> None:
    store = ConfigStore()
    store.dir_path.mkdir(parents=True)
    store.file_path.write_text("interval_ms = 10\n[Poll\n", encoding="utf-8")

    assert store.load_settings() == Settings()
