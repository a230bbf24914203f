"""Duration parsing for CLI arguments such as --settle."""

from __future__ import annotations

import argparse
from typing import Any, Optional

_MULTIPLIERS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration_to_seconds(spec: Optional[Any]) -> Optional[float]:
    """Parse '5', '500ms', '2s' or '1m' into seconds.

    Bare numbers are seconds. Negative values are rejected.
    """

    if spec is None:
        return None
    if isinstance(spec, (int, float)):
        value = float(spec)
        unit = "s"
    else:
        text = str(spec).strip().lower()
        if not text:
            return None
        unit = "s"
        value_part = text
        for suffix in sorted(_MULTIPLIERS, key=len, reverse=True):
            if text.endswith(suffix):
                unit = suffix
                value_part = text[: -len(suffix)]
                break
        else:
            if text[-1].isalpha():
                raise argparse.ArgumentTypeError(f"Unsupported duration suffix in '{spec}'")
        try:
            value = float(value_part)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"Invalid duration '{spec}'") from exc
    if value < 0:
        raise argparse.ArgumentTypeError(f"Duration must not be negative: '{spec}'")
    return value * _MULTIPLIERS[unit]
