# errors.py
from __future__ import annotations

from typing import Optional


class VolumeError(RuntimeError):
    pass


class ExecError(VolumeError):
    """An external command could not be run to a successful finish."""

    def __init__(self, command: str, message: str) -> None:
        super().__init__(f"{command}: {message}")
        self.command = command


class CommandNotFound(ExecError):
    def __init__(self, command: str, reason: str = "") -> None:
        super().__init__(command, f"cannot be run: {reason}" if reason else "not found in PATH")


class CommandFailed(ExecError):
    def __init__(self, command: str, returncode: int, stderr: str = "") -> None:
        msg = f"exited with status {returncode}"
        if stderr:
            msg = f"{msg}: {stderr}"
        super().__init__(command, msg)
        self.returncode = returncode
        self.stderr = stderr


class CommandTimeout(ExecError):
    def __init__(self, command: str, timeout: float) -> None:
        super().__init__(command, f"no result after {timeout:.2f}s")
        self.timeout = timeout


class ParseError(VolumeError):
    pass


class CommandError(VolumeError):
    pass


class StaleTarget(CommandError):
    def __init__(self, stream_id: int) -> None:
        super().__init__(f"stream {stream_id} no longer exists")
        self.stream_id = stream_id


class ControlFailed(CommandError):
    def __init__(self, target: str, exec_error: Optional[ExecError]) -> None:
        super().__init__(f"could not set volume of {target}: {exec_error}")
        self.exec_error = exec_error
