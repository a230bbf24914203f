"""Whole-message reads and writes against driver-backed procfs files.

The blind-scan driver treats every read or write as one protocol message, so
each call opens the file, moves a single buffer and closes it again.
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Union

BUFSIZ = 8192


class DeviceFileError(RuntimeError):
    """A device file could not be opened or no bytes were transferred."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class Direction(Enum):
    READ = "read"
    WRITE = "write"


def transfer(path: str, buffer: Union[bytearray, bytes], direction: Direction) -> int:
    """Move ``buffer`` to or from ``path`` and return the number of bytes moved.

    For reads, ``buffer`` must be a writable bytearray whose length is the
    maximum message size. The loop stops once the full count has moved, when
    the file reports end of data, or on the first error that is not an
    interrupted system call. Raises DeviceFileError if the file cannot be
    opened or nothing was transferred at all.
    """
    try:
        fd = os.open(path, os.O_RDWR)
    except OSError as exc:
        raise DeviceFileError(path, f"open failed: {exc.strerror or exc}") from exc

    view = memoryview(buffer)
    count = len(view)
    done = 0
    error: OSError | None = None
    try:
        while done < count:
            try:
                if direction is Direction.READ:
                    n = os.readv(fd, [view[done:]])
                else:
                    n = os.write(fd, view[done:])
            except InterruptedError:
                continue
            except OSError as exc:
                error = exc
                break
            if n <= 0:
                break
            done += n
    finally:
        os.close(fd)

    if done == 0 and count > 0:
        if error is not None:
            raise DeviceFileError(path, f"{direction.value} failed: {error.strerror or error}") from error
        raise DeviceFileError(path, f"{direction.value} moved no data")
    return done


def read_text(path: str, size: int = BUFSIZ) -> str:
    """Read one message from ``path`` and decode it as ASCII text."""
    buf = bytearray(size)
    n = transfer(path, buf, Direction.READ)
    return bytes(buf[:n]).decode("ascii", errors="replace")


def write_text(path: str, text: str) -> int:
    """Write ``text`` to ``path`` as one message."""
    return transfer(path, text.encode("ascii"), Direction.WRITE)


def is_accessible(path: str) -> bool:
    """True if the file exists and may be both read and written."""
    return os.access(path, os.R_OK | os.W_OK)


__all__ = [
    "BUFSIZ",
    "DeviceFileError",
    "Direction",
    "transfer",
    "read_text",
    "write_text",
    "is_accessible",
]
