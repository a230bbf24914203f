"""Blind-scan session: submit a request, poll the driver, walk the results.

One session drives one frontend through two procfs files:

- ``bs_ctrl``: write ``"1 start stop min max"`` to start, ``"0 0 0 0 0"`` to
  stop. Reading returns ``"active count progress ..."``.
- ``bs_info``: write a record index, then read that record back.
"""

from __future__ import annotations

import os
import time
from enum import Enum
from typing import Callable, Iterator, Optional

from blindscan.config import POLL_INTERVAL_SECONDS, PROC_ROOT, frontend_dir
from blindscan.drivers.devfile import DeviceFileError, is_accessible, read_text, write_text
from blindscan.scan.cancel import CancelToken
from blindscan.scan.candidates import read_candidate
from blindscan.scan.types import (
    DEACTIVATE_MESSAGE,
    ScanOutcome,
    ScanReport,
    ScanRequest,
    ScanStatus,
    TransponderCandidate,
    parse_int_fields,
)
from blindscan.util.logging import get_logger
from blindscan.util.scan_logger import ScanLogger

logger = get_logger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    REQUESTED = "requested"
    POLLING = "polling"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    UNAVAILABLE = "unavailable"


_TERMINAL_OUTCOMES = {
    SessionState.COMPLETED: ScanOutcome.COMPLETED,
    SessionState.CANCELLED: ScanOutcome.CANCELLED,
    SessionState.UNAVAILABLE: ScanOutcome.UNAVAILABLE,
}


def parse_status(text: str) -> Optional[ScanStatus]:
    """Parse the leading ``active count progress`` triple of a bs_ctrl read.

    Extra trailing fields are ignored. Returns None when the first three
    tokens are missing or not integers.
    """
    parts = text.split()
    if len(parts) < 3:
        return None
    values = parse_int_fields(parts[:3])
    if values is None:
        return None
    active, count, progress = values
    return ScanStatus(active=active != 0, candidate_count=max(count, 0), progress=progress)


class ScanSession:
    """State machine for one blind scan on one frontend."""

    def __init__(
        self,
        fe_id: int,
        request: ScanRequest,
        *,
        token: Optional[CancelToken] = None,
        proc_root: str = PROC_ROOT,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        reader: Callable[[str], str] = read_text,
        writer: Callable[[str, str], int] = write_text,
        accessible: Callable[[str], bool] = is_accessible,
        sleeper: Callable[[float], None] = time.sleep,
        scan_logger: Optional[ScanLogger] = None,
    ):
        self.fe_id = fe_id
        self.request = request
        self.token = token or CancelToken()
        self.poll_interval = poll_interval
        self.ctrl_path = os.path.join(frontend_dir(fe_id, proc_root), "bs_ctrl")
        self.info_path = os.path.join(frontend_dir(fe_id, proc_root), "bs_info")
        self._reader = reader
        self._writer = writer
        self._accessible = accessible
        self._sleep = sleeper
        self.scan_logger = scan_logger or ScanLogger(None)
        self.state = SessionState.IDLE
        self.reported_count = 0
        self.dropped = 0

    def available(self) -> bool:
        return self._accessible(self.ctrl_path) and self._accessible(self.info_path)

    def submit(self) -> bool:
        """Write the scan request. Returns False and marks the session unavailable on failure."""
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"cannot submit from state {self.state.value}")
        if not self.available():
            logger.info("Frontend %d has no blind-scan interface", self.fe_id, extra={"frontend_id": self.fe_id})
            self.state = SessionState.UNAVAILABLE
            return False
        message = self.request.control_message()
        try:
            self._writer(self.ctrl_path, message)
        except DeviceFileError as exc:
            logger.warning("Scan request rejected: %s", exc, extra={"frontend_id": self.fe_id})
            self.state = SessionState.UNAVAILABLE
            return False
        self.state = SessionState.REQUESTED
        self.scan_logger.log("scan_request", frontend_id=self.fe_id, message=message)
        logger.info(
            "Blind scan requested: %d-%d MHz, %d-%d MS/s",
            self.request.start_mhz,
            self.request.stop_mhz,
            self.request.symbolrate_min,
            self.request.symbolrate_max,
            extra={"frontend_id": self.fe_id},
        )
        return True

    def cancel(self) -> None:
        """Tell the driver to stop scanning. Errors are logged, not raised."""
        try:
            self._writer(self.ctrl_path, DEACTIVATE_MESSAGE)
        except DeviceFileError as exc:
            logger.warning("Failed to deactivate blind scan: %s", exc, extra={"frontend_id": self.fe_id})
        self.state = SessionState.CANCELLED
        logger.info("Blind scan cancelled", extra={"frontend_id": self.fe_id})

    def poll(self) -> SessionState:
        """Poll bs_ctrl until the driver finishes, the token fires, or a read fails."""
        if self.state not in (SessionState.REQUESTED, SessionState.POLLING):
            raise RuntimeError(f"cannot poll from state {self.state.value}")
        self.state = SessionState.POLLING
        last_progress: Optional[int] = None
        while True:
            if self.token.cancelled:
                self.cancel()
                return self.state
            try:
                text = self._reader(self.ctrl_path)
            except DeviceFileError as exc:
                logger.warning("Status read failed: %s", exc, extra={"frontend_id": self.fe_id})
                self.state = SessionState.UNAVAILABLE
                return self.state

            status = parse_status(text)
            if status is None:
                logger.debug("Unparsable status %r, still waiting", text.strip())
            else:
                if status.progress != last_progress:
                    last_progress = status.progress
                    logger.debug("Scan progress %d%%", status.progress, extra={"frontend_id": self.fe_id})
                    self.scan_logger.log("scan_progress", frontend_id=self.fe_id, progress=status.progress)
                if not status.active:
                    self.state = SessionState.COMPLETED
                    self.reported_count = status.candidate_count
                    logger.info(
                        "Blind scan finished with %d candidates",
                        status.candidate_count,
                        extra={"frontend_id": self.fe_id},
                    )
                    return self.state
            self._sleep(self.poll_interval)

    def candidates(self) -> Iterator[TransponderCandidate]:
        """Yield every valid record in index order.

        Invalid or unreadable records are counted in ``dropped`` and skipped.
        A cancel between two records stops the driver and ends iteration.
        """
        if self.state is not SessionState.COMPLETED:
            return
        for index in range(self.reported_count):
            if self.token.cancelled:
                self.cancel()
                return
            candidate = read_candidate(self.info_path, index, reader=self._reader, writer=self._writer)
            if candidate is None:
                self.dropped += 1
                self.scan_logger.log("candidate_dropped", frontend_id=self.fe_id, index=index)
                continue
            yield candidate

    def run(self, on_candidate: Callable[[TransponderCandidate], None]) -> ScanReport:
        """Drive the session end to end, handing each valid record to ``on_candidate``."""
        started = time.monotonic()
        emitted = 0
        if self.submit() and self.poll() is SessionState.COMPLETED:
            for candidate in self.candidates():
                on_candidate(candidate)
                emitted += 1

        report = ScanReport(
            outcome=_TERMINAL_OUTCOMES[self.state],
            candidate_count=self.reported_count,
            emitted=emitted,
            dropped=self.dropped,
        )
        duration_ms = int((time.monotonic() - started) * 1000)
        self.scan_logger.log(
            "scan_end",
            frontend_id=self.fe_id,
            outcome=report.outcome.value,
            candidates=report.candidate_count,
            emitted=report.emitted,
            dropped=report.dropped,
            duration_ms=duration_ms,
        )
        logger.debug(
            "Session ended: %s",
            report.outcome.value,
            extra={"frontend_id": self.fe_id, "duration_ms": duration_ms},
        )
        return report
