import os

import pytest

from blindscan.util.pidlock import PidLock, PidLockError


def test_lock_writes_pid_and_releases(tmp_path) -> None:
    path = tmp_path / "blindscan.pid"
    with PidLock(str(path)) as lock:
        assert lock.locked
        assert path.read_text() == f"{os.getpid()}\n"
    assert not lock.locked


def test_second_holder_is_refused(tmp_path) -> None:
    path = str(tmp_path / "blindscan.pid")
    with PidLock(path):
        with pytest.raises(PidLockError) as info:
            PidLock(path).acquire()
    assert info.value.held


def test_lock_can_be_retaken_after_release(tmp_path) -> None:
    path = str(tmp_path / "blindscan.pid")
    with PidLock(path):
        pass
    with PidLock(path) as lock:
        assert lock.locked


def test_uncreatable_pid_file_is_not_reported_as_held(tmp_path) -> None:
    with pytest.raises(PidLockError) as info:
        PidLock(str(tmp_path / "missing-dir" / "blindscan.pid")).acquire()
    assert not info.value.held
