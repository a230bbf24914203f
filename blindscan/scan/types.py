"""Dataclasses shared by the scan session, candidate reader and formatter."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from enum import Enum
from typing import List, Optional, Sequence

DEACTIVATE_MESSAGE = "0 0 0 0 0"

_INT_TOKEN = re.compile(r"[+-]?[0-9]+")


def parse_int_fields(tokens: Sequence[str]) -> Optional[List[int]]:
    """Convert decimal tokens to ints, or None if any token is not a plain decimal.

    Python-only spellings such as ``1_000`` or full-width digits are rejected.
    """
    if not all(_INT_TOKEN.fullmatch(t) for t in tokens):
        return None
    return [int(t) for t in tokens]


@dataclass(frozen=True)
class ScanRequest:
    """Frequency and symbol-rate window handed to the driver (MHz, MS/s)."""

    start_mhz: int = 950
    stop_mhz: int = 1950
    symbolrate_min: int = 2
    symbolrate_max: int = 45

    def control_message(self) -> str:
        return f"1 {self.start_mhz} {self.stop_mhz} {self.symbolrate_min} {self.symbolrate_max}"


@dataclass(frozen=True)
class ScanStatus:
    active: bool
    candidate_count: int
    progress: int


@dataclass(frozen=True)
class TransponderCandidate:
    """One record from the info file, fields in driver order."""

    index: int
    frequency: int
    symbol_rate: int
    delivery_system: int
    inversion: int
    pilot: int
    fec_inner: int
    modulation: int
    rolloff: int
    pls_mode: int
    is_id: int
    pls_code: int
    t2mi_plp_id: int
    t2mi_pid: int

    @classmethod
    def field_count(cls) -> int:
        return len(fields(cls))

    @property
    def has_t2mi(self) -> bool:
        return self.t2mi_plp_id != -1


@dataclass(frozen=True)
class CanonicalResult:
    polarity: str
    frequency: int
    symbol_rate: int
    delivery_system: str
    inversion: str
    pilot: str
    fec: str
    modulation: str
    rolloff: str
    pls_mode: int
    stream_id: int
    pls_code: int
    t2mi_plp_id: Optional[int] = None
    t2mi_pid: Optional[int] = None


class ScanOutcome(Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    UNAVAILABLE = "unavailable"


@dataclass
class ScanReport:
    """Summary of one session, returned to the runner."""

    outcome: ScanOutcome
    candidate_count: int = 0
    emitted: int = 0
    dropped: int = 0
