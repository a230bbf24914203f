import io
import os
from typing import Dict, List, Tuple

import pytest

from blindscan.config import RunConfig
from blindscan.drivers.devfile import DeviceFileError
from blindscan.io.formatting import canonicalize
from blindscan.io.sink import LineSink
from blindscan.scan.cancel import CancelToken
from blindscan.scan.session import ScanSession, SessionState, parse_status
from blindscan.scan.types import ScanOutcome, ScanRequest


def _record(index: int, frequency: int = 1_199_640) -> str:
    return f"{index} {frequency} 27499700 6 2 2 3 9 1 0 -1 0 -1 0\n"


class FakeDriver:
    """Scripted bs_ctrl/bs_info pair; the last status repeats once the script runs out."""

    def __init__(self, statuses: List[str], records: Dict[int, str]):
        self.statuses = list(statuses)
        self.records = records
        self.writes: List[Tuple[str, str]] = []
        self.info_reads = 0
        self.selected = None

    def write(self, path: str, text: str) -> int:
        self.writes.append((os.path.basename(path), text))
        if path.endswith("bs_info"):
            self.selected = int(text)
        return len(text)

    def read(self, path: str) -> str:
        if path.endswith("bs_ctrl"):
            if len(self.statuses) > 1:
                return self.statuses.pop(0)
            return self.statuses[0]
        self.info_reads += 1
        record = self.records.get(self.selected)
        if record is None:
            raise DeviceFileError(path, "read moved no data")
        return record


def _session(driver: FakeDriver, token=None, sleeps=None, accessible=True) -> ScanSession:
    return ScanSession(
        0,
        ScanRequest(),
        token=token,
        proc_root="/proc",
        reader=driver.read,
        writer=driver.write,
        accessible=lambda path: accessible,
        sleeper=(sleeps.append if sleeps is not None else (lambda s: None)),
    )


def test_parse_status_uses_leading_triple() -> None:
    status = parse_status("0 2 100 17 extra\n")
    assert status is not None
    assert (status.active, status.candidate_count, status.progress) == (False, 2, 100)


def test_parse_status_rejects_short_or_garbage_lines() -> None:
    assert parse_status("1 0") is None
    assert parse_status("busy 0 10") is None
    assert parse_status("0 1_0 100") is None


def test_session_paths_follow_frontend_id() -> None:
    session = ScanSession(3, ScanRequest(), proc_root="/tmp/proc")
    assert session.ctrl_path == "/tmp/proc/stb/frontend/3/bs_ctrl"
    assert session.info_path == "/tmp/proc/stb/frontend/3/bs_info"


def test_end_to_end_emits_lines_in_index_order() -> None:
    driver = FakeDriver(["1 0 10", "1 0 55", "0 2 100"], {0: _record(0), 1: _record(1, 1_500_400)})
    sleeps: List[float] = []
    out = io.StringIO()
    sink = LineSink(out)
    session = _session(driver, sleeps=sleeps)

    report = session.run(lambda c: sink.emit(canonicalize(c, RunConfig())))

    assert report.outcome is ScanOutcome.COMPLETED
    assert report.candidate_count == 2
    assert report.emitted == 2
    assert sleeps == [0.1, 0.1]
    lines = out.getvalue().splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("OK HORIZONTAL 10950000 27500000 ")
    assert lines[1].startswith("OK HORIZONTAL 11250000 27500000 ")
    assert driver.writes[0] == ("bs_ctrl", "1 950 1950 2 45")
    assert driver.writes[1:] == [("bs_info", "0"), ("bs_info", "1")]


def test_cancel_before_first_poll_deactivates_without_info_reads() -> None:
    driver = FakeDriver(["0 2 100"], {0: _record(0), 1: _record(1)})
    token = CancelToken()
    token.cancel()
    session = _session(driver, token=token)

    report = session.run(lambda c: None)

    assert report.outcome is ScanOutcome.CANCELLED
    assert driver.writes == [("bs_ctrl", "1 950 1950 2 45"), ("bs_ctrl", "0 0 0 0 0")]
    assert driver.info_reads == 0


def test_cancel_between_candidates_stops_the_driver() -> None:
    driver = FakeDriver(["0 3 100"], {0: _record(0), 1: _record(1), 2: _record(2)})
    token = CancelToken()
    seen = []

    def on_candidate(candidate) -> None:
        seen.append(candidate.index)
        token.cancel()

    report = _session(driver, token=token).run(on_candidate)

    assert report.outcome is ScanOutcome.CANCELLED
    assert seen == [0]
    assert driver.info_reads == 1
    assert driver.writes[-1] == ("bs_ctrl", "0 0 0 0 0")


def test_missing_interface_is_unavailable() -> None:
    driver = FakeDriver(["0 0 100"], {})
    session = _session(driver, accessible=False)
    report = session.run(lambda c: None)
    assert report.outcome is ScanOutcome.UNAVAILABLE
    assert driver.writes == []


def test_status_read_failure_aborts_session() -> None:
    driver = FakeDriver(["0 0 100"], {})

    def broken_read(path: str) -> str:
        raise DeviceFileError(path, "read moved no data")

    session = ScanSession(0, ScanRequest(), reader=broken_read, writer=driver.write, accessible=lambda p: True)
    report = session.run(lambda c: None)
    assert report.outcome is ScanOutcome.UNAVAILABLE
    assert session.state is SessionState.UNAVAILABLE


def test_malformed_status_counts_as_still_active() -> None:
    driver = FakeDriver(["", "scanning", "0 1 100"], {0: _record(0)})
    sleeps: List[float] = []
    report = _session(driver, sleeps=sleeps).run(lambda c: None)
    assert report.outcome is ScanOutcome.COMPLETED
    assert report.emitted == 1
    assert len(sleeps) == 2


def test_stale_and_unreadable_records_are_dropped() -> None:
    driver = FakeDriver(["0 3 100"], {0: _record(0), 1: _record(0)})
    emitted = []
    report = _session(driver).run(lambda c: emitted.append(c.index))
    assert emitted == [0]
    assert report.emitted == 1
    assert report.dropped == 2


def test_submit_twice_is_rejected() -> None:
    driver = FakeDriver(["0 0 100"], {})
    session = _session(driver)
    assert session.submit()
    with pytest.raises(RuntimeError):
        session.submit()
