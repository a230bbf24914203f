"""High-level runner tying the lock, device resolution and scan session together."""

from __future__ import annotations

import argparse
import sys
import time
from typing import Callable, Optional, TextIO

from blindscan import config
from blindscan.config import RunConfig, nim_sockets_path
from blindscan.drivers.nim_sockets import resolve_frontend
from blindscan.io.formatting import canonicalize
from blindscan.io.sink import LineSink
from blindscan.scan.cancel import CancelToken, install_signal_handlers
from blindscan.scan.session import ScanSession
from blindscan.scan.types import ScanOutcome, ScanRequest, TransponderCandidate
from blindscan.util.exit_codes import ExitCode
from blindscan.util.logging import get_logger
from blindscan.util.pidlock import PidLock, PidLockError
from blindscan.util.scan_logger import ScanLogger

logger = get_logger(__name__)


class BlindscanRunner:
    """Bind CLI args to the singleton lock, the tuner and the result sink."""

    def __init__(
        self,
        args: argparse.Namespace,
        *,
        token: Optional[CancelToken] = None,
        stream: Optional[TextIO] = None,
        proc_root: Optional[str] = None,
        sleeper: Callable[[float], None] = time.sleep,
        install_signals: bool = True,
    ):
        self.args = args
        self.token = token or CancelToken()
        self.sink = LineSink(stream if stream is not None else sys.stdout)
        self.proc_root = proc_root or config.PROC_ROOT
        self.sleeper = sleeper
        self.install_signals = install_signals
        self.run_config = RunConfig.from_flags(vertical=args.vertical, cband=args.cband, high=args.high)
        self.scan_logger = ScanLogger.from_target(getattr(args, "jsonl", None))

    def _request(self) -> ScanRequest:
        return ScanRequest(
            start_mhz=int(self.args.start),
            stop_mhz=int(self.args.stop),
            symbolrate_min=int(self.args.symbolrate_min),
            symbolrate_max=int(self.args.symbolrate_max),
        )

    def _emit(self, candidate: TransponderCandidate) -> None:
        result = canonicalize(candidate, self.run_config)
        line = self.sink.emit(result)
        self.scan_logger.log("candidate", index=candidate.index, line=line.rstrip("\n"))

    def _scan(self) -> None:
        settle = float(getattr(self.args, "settle", 0.0) or 0.0)
        if settle > 0:
            logger.debug("Waiting %.1f s for the tuner to settle", settle)
            if self.token.sleep(settle, sleeper=self.sleeper):
                logger.info("Cancelled before scanning")
                return

        slot = int(self.args.slot)
        fe_id = resolve_frontend(slot, nim_sockets_path(self.proc_root))
        if fe_id is None:
            logger.info("No frontend assigned to NIM slot %d", slot, extra={"slot": slot})
            return
        logger.info(
            "NIM slot %d -> frontend %d (i2c %d)",
            slot,
            fe_id,
            int(self.args.i2c),
            extra={"slot": slot, "frontend_id": fe_id},
        )

        session = ScanSession(
            fe_id,
            self._request(),
            token=self.token,
            proc_root=self.proc_root,
            sleeper=self.sleeper,
            scan_logger=self.scan_logger,
        )
        report = session.run(self._emit)
        if report.outcome is not ScanOutcome.UNAVAILABLE:
            logger.info(
                "Printed %d of %d candidates (%d dropped, %s)",
                self.sink.count,
                report.candidate_count,
                report.dropped,
                report.outcome.value,
                extra={"frontend_id": fe_id},
            )

    def run(self) -> int:
        lock = PidLock(self.args.pid_file)
        try:
            lock.acquire()
        except PidLockError as exc:
            code = ExitCode.LOCK_HELD if exc.held else ExitCode.LOCK_ERROR
            logger.error("%s: %s", ExitCode.message(code), exc, extra={"error_type": "pid_lock"})
            return code

        try:
            if self.install_signals:
                install_signal_handlers(self.token)
            self._scan()
        finally:
            lock.release()
        return ExitCode.SUCCESS


def run_scan(args: argparse.Namespace) -> int:
    runner = BlindscanRunner(args)
    return runner.run()
