"""Indexed retrieval and strict parsing of bs_info records."""

from __future__ import annotations

from typing import Callable, Optional

from blindscan.drivers.devfile import DeviceFileError, read_text, write_text
from blindscan.scan.types import TransponderCandidate, parse_int_fields
from blindscan.util.logging import get_logger

logger = get_logger(__name__)

FIELD_COUNT = TransponderCandidate.field_count()


def parse_candidate(text: str, requested_index: int) -> Optional[TransponderCandidate]:
    """Parse one info record, or return None if it is not a valid answer.

    A valid record has exactly FIELD_COUNT integer fields and reports the
    index that was asked for. Anything else is dropped whole.
    """
    parts = text.split()
    if len(parts) != FIELD_COUNT:
        logger.debug(
            "Dropping record with %d fields (want %d): %r",
            len(parts),
            FIELD_COUNT,
            text.strip(),
            extra={"index": requested_index},
        )
        return None
    values = parse_int_fields(parts)
    if values is None:
        logger.debug("Dropping non-numeric record: %r", text.strip(), extra={"index": requested_index})
        return None

    candidate = TransponderCandidate(*values)
    if candidate.index != requested_index:
        logger.debug(
            "Dropping record for index %d while reading index %d",
            candidate.index,
            requested_index,
            extra={"index": requested_index},
        )
        return None
    return candidate


def read_candidate(
    info_path: str,
    requested_index: int,
    *,
    reader: Callable[[str], str] = read_text,
    writer: Callable[[str, str], int] = write_text,
) -> Optional[TransponderCandidate]:
    """Select record ``requested_index`` in the info file and read it back."""
    try:
        writer(info_path, str(requested_index))
        text = reader(info_path)
    except DeviceFileError as exc:
        logger.debug("Info transfer failed: %s", exc, extra={"index": requested_index})
        return None
    return parse_candidate(text, requested_index)
