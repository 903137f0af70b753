# pw_cli.py
from __future__ import annotations

import logging
import subprocess
from typing import Sequence

from errors import CommandFailed, CommandNotFound, CommandTimeout

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 2.0


def _run(cmd: Sequence[str], timeout: float) -> subprocess.CompletedProcess[str]:
    # Stream names come from clients and are not always valid UTF-8.
    return subprocess.run(list(cmd), capture_output=True, text=True, errors="replace", timeout=timeout)


def run(command: str, args: Sequence[str] = (), timeout: float = DEFAULT_TIMEOUT) -> str:
    """
    Run `command args...` and return its stdout.

    Raises CommandNotFound, CommandFailed or CommandTimeout. On timeout
    subprocess.run kills and reaps the child before we see the exception.
    """
    cmd = [command, *args]
    log.debug("exec %s (timeout %.2fs)", " ".join(cmd), timeout)
    try:
        p = _run(cmd, timeout)
    except subprocess.TimeoutExpired as e:
        raise CommandTimeout(command, timeout) from e
    except FileNotFoundError as e:
        raise CommandNotFound(command) from e
    except OSError as e:
        # PermissionError and friends: the binary is there but cannot be run.
        raise CommandNotFound(command, e.strerror or str(e)) from e

    if p.returncode != 0:
        msg = (p.stderr or p.stdout or "").strip()
        raise CommandFailed(command, p.returncode, msg)

    return p.stdout or ""
