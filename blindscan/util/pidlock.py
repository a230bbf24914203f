"""Single-instance guard built on an advisory lock over a PID file."""

from __future__ import annotations

import fcntl
import os
from typing import Optional


class PidLockError(RuntimeError):
    """Raised when the PID file cannot be created, locked or written."""

    def __init__(self, path: str, reason: str, *, held: bool = False):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.held = held


class PidLock:
    """Exclusive, non-blocking flock on ``path`` holding our PID.

    Use as a context manager. A second process trying to take the same lock
    fails immediately with ``PidLockError(held=True)``.
    """

    def __init__(self, path: str, mode: int = 0o664):
        self.path = path
        self.mode = mode
        self._fd: Optional[int] = None

    @property
    def locked(self) -> bool:
        return self._fd is not None

    def acquire(self) -> None:
        try:
            fd = os.open(self.path, os.O_RDWR | os.O_CREAT, self.mode)
        except OSError as exc:
            raise PidLockError(self.path, f"cannot open: {exc.strerror or exc}") from exc
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as exc:
            os.close(fd)
            raise PidLockError(self.path, "already locked by another process", held=True) from exc
        try:
            os.ftruncate(fd, 0)
            os.write(fd, f"{os.getpid()}\n".encode("ascii"))
        except OSError as exc:
            fcntl.flock(fd, fcntl.LOCK_UN)
            os.close(fd)
            raise PidLockError(self.path, f"cannot write pid: {exc.strerror or exc}") from exc
        self._fd = fd

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._fd = None

    def __enter__(self) -> "PidLock":
        self.acquire()
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()
