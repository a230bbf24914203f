from blindscan.drivers.devfile import DeviceFileError
from blindscan.scan.candidates import parse_candidate, read_candidate

RECORD = "1 1199640 27499700 6 2 2 3 9 1 0 -1 0 -1 0"


def test_parse_valid_record() -> None:
    candidate = parse_candidate(RECORD + "\n", 1)
    assert candidate is not None
    assert candidate.index == 1
    assert candidate.frequency == 1_199_640
    assert candidate.t2mi_plp_id == -1
    assert not candidate.has_t2mi


def test_short_record_is_dropped() -> None:
    assert parse_candidate("1 1199640 27499700 6 2 2 3 9 1 0 -1 0 -1", 1) is None
    assert parse_candidate("", 0) is None


def test_long_record_is_dropped() -> None:
    assert parse_candidate(RECORD + " 7", 1) is None


def test_non_numeric_record_is_dropped() -> None:
    assert parse_candidate(RECORD.replace("27499700", "fast"), 1) is None


def test_index_mismatch_is_dropped() -> None:
    assert parse_candidate(RECORD, 0) is None


def test_read_candidate_selects_then_reads() -> None:
    calls = []

    def writer(path: str, text: str) -> int:
        calls.append(("write", path, text))
        return len(text)

    def reader(path: str) -> str:
        calls.append(("read", path))
        return RECORD

    candidate = read_candidate("/proc/stb/frontend/0/bs_info", 1, reader=reader, writer=writer)
    assert candidate is not None
    assert calls == [
        ("write", "/proc/stb/frontend/0/bs_info", "1"),
        ("read", "/proc/stb/frontend/0/bs_info"),
    ]


def test_read_candidate_transfer_failure_is_absent() -> None:
    def writer(path: str, text: str) -> int:
        raise DeviceFileError(path, "write moved no data")

    def reader(path: str) -> str:
        raise AssertionError("must not read after a failed select")

    assert read_candidate("bs_info", 0, reader=reader, writer=writer) is None


def test_python_only_integer_spellings_are_dropped() -> None:
    assert parse_candidate("0 1_199_640 27_499_700 6 2 2 3 9 1 0 -1 0 -1 0", 0) is None
    assert parse_candidate("0 １１９９６４０ 27499700 6 2 2 3 9 1 0 -1 0 -1 0", 0) is None


def test_explicit_sign_is_accepted() -> None:
    candidate = parse_candidate("+0 1199640 27499700 6 2 2 3 9 1 0 -1 0 -1 0", 0)
    assert candidate is not None
    assert candidate.index == 0
