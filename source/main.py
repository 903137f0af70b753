# main.py
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from backend import PipeWireVolumeBackend
from commander import VolumeCommander
from poller import Poller
from state_store import AudioStateStore
from store_config import LOG_LEVELS, ConfigStore, Settings

log = logging.getLogger("sinkmix")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="sinkmix", description="Per-application volume control for PipeWire.")
    p.add_argument("--interval-ms", type=int, help="poll interval (overrides the config file)")
    p.add_argument("--log-level", choices=LOG_LEVELS, help="logging level (overrides the config file)")
    p.add_argument("--dump", action="store_true", help="poll once, print the volumes and exit")
    return p


def dump(store: AudioStateStore, poller: Poller) -> int:
    if not poller.poll_once():
        print(f"poll failed: {poller.last_error}", file=sys.stderr)
        return 1
    muted = " [muted]" if store.is_system_muted() else ""
    print(f"system  {store.get_system_volume() * 100:5.1f}%{muted}")
    for r in store.get_streams():
        print(f"{r.id:<7} {r.volume * 100:5.1f}%  {r.display_name}")
    return 0


def run_gui(backend: PipeWireVolumeBackend, store: AudioStateStore, poller: Poller) -> int:
    from PySide6.QtWidgets import QApplication

    from main_window import MainWindow
    from theme import apply_dark_theme

    app = QApplication(sys.argv)
    apply_dark_theme(app)

    win = MainWindow(backend, store, poller, VolumeCommander(backend, store))
    win.show()
    poller.start()
    try:
        return app.exec()
    finally:
        win.shutdown()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    settings: Settings = ConfigStore().load_settings()

    logging.basicConfig(
        level=args.log_level or settings.log_level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    interval = settings.interval
    if args.interval_ms is not None:
        if args.interval_ms < 50:
            log.warning("--interval-ms %d too small, using 50", args.interval_ms)
        interval = max(50, args.interval_ms) / 1000.0

    backend = PipeWireVolumeBackend(
        commands=settings.commands,
        timeout=settings.command_timeout,
        reduction=settings.channel_reduction,
    )
    store = AudioStateStore()
    poller = Poller(backend, store, interval=interval)

    try:
        if args.dump:
            return dump(store, poller)
        return run_gui(backend, store, poller)
    finally:
        poller.stop()
        backend.close()


if __name__ == "__main__":
    sys.exit(main())
