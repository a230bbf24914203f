"""
Configuration constants and environment parsing for blindscan.

All BLINDSCAN_* environment variables are parsed here and exported as
module-level constants. Other modules import from here rather than reading
os.environ directly.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum


def _float_env(name: str, default: float) -> float:
    """Parse a non-negative float from environment, returning default on missing/invalid."""
    val = os.getenv(name)
    if not val:
        return default
    try:
        return max(0.0, float(val))
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Filesystem locations
# ---------------------------------------------------------------------------
PROC_ROOT: str = os.getenv("BLINDSCAN_PROC_ROOT", "/proc")
"""Root of the procfs tree exposing nim_sockets and the frontend control files."""

PID_FILE: str = os.getenv("BLINDSCAN_PID_FILE", "/var/run/blindscan.pid")
"""PID file locked for the lifetime of a run."""


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------
SETTLE_SECONDS: float = _float_env("BLINDSCAN_SETTLE_SECONDS", 5.0)
"""Delay between taking the lock and touching the tuner."""

POLL_INTERVAL_SECONDS: float = _float_env("BLINDSCAN_POLL_INTERVAL_SECONDS", 0.1)
"""Sleep between two reads of the control file while the driver is scanning."""


# ---------------------------------------------------------------------------
# Derived paths
# ---------------------------------------------------------------------------
def nim_sockets_path(proc_root: str = PROC_ROOT) -> str:
    return os.path.join(proc_root, "bus", "nim_sockets")


def frontend_dir(fe_id: int, proc_root: str = PROC_ROOT) -> str:
    return os.path.join(proc_root, "stb", "frontend", str(fe_id))


# ---------------------------------------------------------------------------
# Run configuration
# ---------------------------------------------------------------------------
class Polarity(Enum):
    HORIZONTAL = "HORIZONTAL"
    VERTICAL = "VERTICAL"


class Band(Enum):
    KU = "ku"
    C = "c"


class LocalOscillator(Enum):
    LOW = "low"
    HIGH = "high"


@dataclass(frozen=True)
class RunConfig:
    """Receive-side settings that shape how candidates are reported."""

    polarity: Polarity = Polarity.HORIZONTAL
    band: Band = Band.KU
    lo: LocalOscillator = LocalOscillator.LOW

    @classmethod
    def from_flags(cls, *, vertical: bool = False, cband: bool = False, high: bool = False) -> "RunConfig":
        return cls(
            polarity=Polarity.VERTICAL if vertical else Polarity.HORIZONTAL,
            band=Band.C if cband else Band.KU,
            lo=LocalOscillator.HIGH if high else LocalOscillator.LOW,
        )
