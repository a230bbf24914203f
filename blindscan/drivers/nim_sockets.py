"""Resolve a NIM slot to its frontend device id via /proc/bus/nim_sockets.

The topology file lists each tuner socket as a header line followed by
indented attribute lines, e.g.::

    NIM Socket 0:
        Type: DVB-S2
        Name: BCM4506 (internal)
        Frontend_Device: 0
        I2C_Device: 2

Only the socket header and the Frontend_Device attribute matter here.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, Optional

from blindscan.config import nim_sockets_path
from blindscan.util.logging import get_logger

logger = get_logger(__name__)

SOCKET_COUNT = 4

DeviceMap = Dict[int, Optional[int]]

_SOCKET_RE = re.compile(r"^NIM Socket\s+(-?\d+)")
_FRONTEND_RE = re.compile(r"^\s+Frontend_Device:\s*(-?\d+)")


def parse_nim_sockets(lines: Iterable[str]) -> DeviceMap:
    """Build the slot -> frontend id map from topology lines.

    The parser tracks a single piece of state, the socket whose header was
    seen last. An assignment line before any valid header is ignored, as are
    headers naming a socket outside 0..SOCKET_COUNT-1.
    """
    device_map: DeviceMap = {slot: None for slot in range(SOCKET_COUNT)}
    current: Optional[int] = None

    for line in lines:
        header = _SOCKET_RE.match(line)
        if header:
            socket = int(header.group(1))
            current = socket if socket in device_map else None
            if current is None:
                logger.debug("Ignoring out-of-range NIM socket %d", socket)
            continue

        assignment = _FRONTEND_RE.match(line)
        if assignment:
            if current is None:
                logger.debug("Ignoring Frontend_Device line without a socket header: %r", line.rstrip())
                continue
            device_map[current] = int(assignment.group(1))

    return device_map


def resolve_frontend(slot: int, path: Optional[str] = None) -> Optional[int]:
    """Return the frontend id assigned to ``slot``, or None if there is none.

    The topology file is read afresh on every call. A missing or unreadable
    file yields None.
    """
    path = path or nim_sockets_path()
    try:
        with open(path, encoding="utf-8", errors="replace") as fh:
            device_map = parse_nim_sockets(fh)
    except OSError as exc:
        logger.info("Cannot read NIM topology %s: %s", path, exc)
        return None

    fe_id = device_map.get(slot)
    logger.debug("NIM topology %s -> %s", path, device_map, extra={"slot": slot})
    return fe_id
