"""Unit conversion and label lookup for discovered transponders.

Raw driver values are intermediate frequencies and symbol rates in kHz-scale
units. Enumeration codes follow linux/dvb/frontend.h. Unknown codes map to a
fixed default label instead of failing.
"""

from __future__ import annotations

from typing import Dict, List, Mapping

from blindscan.config import Band, LocalOscillator, RunConfig
from blindscan.scan.types import CanonicalResult, TransponderCandidate

C_BAND_LO = 5_150_000
KU_LOW_LO = 9_750_000
KU_HIGH_LO = 10_600_000

SYS_DVBS = 5

INVERSION_LABELS: Dict[int, str] = {
    0: "INVERSION_OFF",
    1: "INVERSION_ON",
}
INVERSION_DEFAULT = "INVERSION_AUTO"

PILOT_LABELS: Dict[int, str] = {
    0: "PILOT_ON",
    1: "PILOT_OFF",
}
PILOT_DEFAULT = "PILOT_AUTO"

FEC_LABELS: Dict[int, str] = {
    1: "FEC_1_2",
    2: "FEC_2_3",
    3: "FEC_3_4",
    4: "FEC_4_5",
    5: "FEC_5_6",
    6: "FEC_6_7",
    7: "FEC_7_8",
    8: "FEC_8_9",
    10: "FEC_3_5",
    11: "FEC_9_10",
    12: "FEC_2_5",
}
FEC_DEFAULT = "FEC_AUTO"

MODULATION_LABELS: Dict[int, str] = {
    9: "8PSK",
    10: "16APSK",
    11: "32APSK",
}
MODULATION_DEFAULT = "QPSK"

ROLLOFF_LABELS: Dict[int, str] = {
    1: "ROLLOFF_20",
    2: "ROLLOFF_25",
}
ROLLOFF_DEFAULT = "ROLLOFF_35"


def _label(table: Mapping[int, str], code: int, default: str) -> str:
    return table.get(code, default)


def round_to_1000(value: int) -> int:
    """Round half-up to the nearest multiple of 1000."""
    return ((value + 500) // 1000) * 1000


def to_rf_frequency(rounded: int, band: Band, lo: LocalOscillator) -> int:
    """Translate a rounded IF reading into the downlink frequency.

    C-band uses an inverting LNB, so the IF is subtracted from its LO.
    """
    if band is Band.C:
        return C_BAND_LO - rounded
    if lo is LocalOscillator.HIGH:
        return rounded + KU_HIGH_LO
    return rounded + KU_LOW_LO


def delivery_system_label(code: int) -> str:
    return "DVB-S" if code == SYS_DVBS else "DVB-S2"


def canonicalize(candidate: TransponderCandidate, config: RunConfig) -> CanonicalResult:
    t2mi = candidate.has_t2mi
    return CanonicalResult(
        polarity=config.polarity.value,
        frequency=to_rf_frequency(round_to_1000(candidate.frequency), config.band, config.lo),
        symbol_rate=round_to_1000(candidate.symbol_rate),
        delivery_system=delivery_system_label(candidate.delivery_system),
        inversion=_label(INVERSION_LABELS, candidate.inversion, INVERSION_DEFAULT),
        pilot=_label(PILOT_LABELS, candidate.pilot, PILOT_DEFAULT),
        fec=_label(FEC_LABELS, candidate.fec_inner, FEC_DEFAULT),
        modulation=_label(MODULATION_LABELS, candidate.modulation, MODULATION_DEFAULT),
        rolloff=_label(ROLLOFF_LABELS, candidate.rolloff, ROLLOFF_DEFAULT),
        pls_mode=candidate.pls_mode,
        stream_id=candidate.is_id,
        pls_code=candidate.pls_code,
        t2mi_plp_id=candidate.t2mi_plp_id if t2mi else None,
        t2mi_pid=candidate.t2mi_pid if t2mi else None,
    )


def format_line(result: CanonicalResult) -> str:
    """Render the newline-terminated ``OK ...`` line for one result."""
    parts: List[object] = [
        "OK",
        result.polarity,
        result.frequency,
        result.symbol_rate,
        result.delivery_system,
        result.inversion,
        result.pilot,
        result.fec,
        result.modulation,
        result.rolloff,
        result.pls_mode,
        result.stream_id,
        result.pls_code,
    ]
    if result.t2mi_plp_id is not None:
        parts.extend([result.t2mi_plp_id, result.t2mi_pid])
    return " ".join(str(p) for p in parts) + "\n"
