# store_config.py
from __future__ import annotations

import configparser
import logging
import os
import platform
from dataclasses import dataclass, fields
from pathlib import Path

from backend import CommandSet, expand
from pw_channels import REDUCE_FIRST, REDUCTION_POLICIES

log = logging.getLogger(__name__)


DEFAULT_CONFIG_TEXT = """\
[Poll]
interval_ms = 1000
command_timeout_ms = 2000

[Volume]
# first | mean
channel_reduction = first

[Commands]
system_get = wpctl get-volume @DEFAULT_AUDIO_SINK@
system_set = wpctl set-volume @DEFAULT_AUDIO_SINK@ {volume}
streams_list = pactl list sink-inputs
stream_set = pactl set-sink-input-volume {id} {volume}

[Logging]
level = INFO
"""

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _windows_appdata_dir() -> Path:
    appdata = os.environ.get("APPDATA")
    if appdata:
        return Path(appdata)
    return Path.home() / "AppData" / "Roaming"


def _linux_xdg_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def user_config_dir(app_name: str) -> Path:
    sysname = (platform.system() or "").lower()
    if sysname.startswith("windows"):
        return _windows_appdata_dir() / app_name
    if sysname.startswith("linux"):
        return _linux_xdg_config_dir() / app_name
    return Path.home() / ".config" / app_name


@dataclass(frozen=True)
class Settings:
    interval: float = 1.0
    command_timeout: float = 2.0
    channel_reduction: str = REDUCE_FIRST
    commands: CommandSet = CommandSet()
    log_level: str = "INFO"


def _ms(cfg: configparser.ConfigParser, section: str, key: str, default: float, lo: int, hi: int) -> float:
    raw = cfg.get(section, key, fallback="").strip()
    if not raw:
        return default
    try:
        ms = int(raw)
    except ValueError:
        log.warning("config [%s] %s: %r is not an integer, using %d", section, key, raw, int(default * 1000))
        return default
    if not lo <= ms <= hi:
        log.warning("config [%s] %s: %d outside %d..%d, using %d", section, key, ms, lo, hi, int(default * 1000))
        return default
    return ms / 1000.0


def _commands(cfg: configparser.ConfigParser) -> CommandSet:
    defaults = CommandSet()
    out = {}
    for f in fields(CommandSet):
        default = getattr(defaults, f.name)
        raw = cfg.get("Commands", f.name, fallback="").strip()
        if not raw:
            out[f.name] = default
            continue
        try:
            expand(raw, id=0, volume="0%")
        except (ValueError, KeyError, IndexError) as e:
            log.warning("config [Commands] %s: %r is not usable (%s), using default", f.name, raw, e)
            out[f.name] = default
            continue
        out[f.name] = raw
    return CommandSet(**out)


def settings_from_config(cfg: configparser.ConfigParser) -> Settings:
    d = Settings()

    reduction = cfg.get("Volume", "channel_reduction", fallback="").strip().lower() or d.channel_reduction
    if reduction not in REDUCTION_POLICIES:
        log.warning("config [Volume] channel_reduction: %r unknown, using %r", reduction, d.channel_reduction)
        reduction = d.channel_reduction

    level = cfg.get("Logging", "level", fallback="").strip().upper() or d.log_level
    if level not in LOG_LEVELS:
        log.warning("config [Logging] level: %r unknown, using %s", level, d.log_level)
        level = d.log_level

    return Settings(
        interval=_ms(cfg, "Poll", "interval_ms", d.interval, 50, 60_000),
        command_timeout=_ms(cfg, "Poll", "command_timeout_ms", d.command_timeout, 100, 30_000),
        channel_reduction=reduction,
        commands=_commands(cfg),
        log_level=level,
    )


@dataclass(frozen=True)
class ConfigStore:
    app_name: str = "SinkMix"
    filename: str = "sinkmix.cfg"

    @property
    def dir_path(self) -> Path:
        return user_config_dir(self.app_name)

    @property
    def file_path(self) -> Path:
        return self.dir_path / self.filename

    def ensure_exists(self) -> None:
        self.dir_path.mkdir(parents=True, exist_ok=True)
        if not self.file_path.exists():
            self.file_path.write_text(DEFAULT_CONFIG_TEXT, encoding="utf-8")

    def load(self) -> configparser.ConfigParser:
        cfg = configparser.ConfigParser(interpolation=None)
        try:
            self.ensure_exists()
            cfg.read(self.file_path, encoding="utf-8")
        except (OSError, configparser.Error) as e:
            log.warning("cannot read %s, using defaults: %s", self.file_path, e)
            cfg = configparser.ConfigParser(interpolation=None)
            cfg.read_string(DEFAULT_CONFIG_TEXT)
        return cfg

    def load_settings(self) -> Settings:
        return settings_from_config(self.load())
