"""Cooperative cancellation driven by SIGINT/SIGTERM."""

from __future__ import annotations

import signal
import time
from typing import Callable, Iterable, Optional


class CancelToken:
    """Flag set asynchronously and checked by the scan loop at safe points.

    The signal handler only assigns attributes; all reactions happen in the
    code that polls ``cancelled``.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self.signum: Optional[int] = None

    def cancel(self, signum: Optional[int] = None) -> None:
        if self.signum is None:
            self.signum = signum
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def sleep(
        self,
        seconds: float,
        *,
        step: float = 0.1,
        sleeper: Callable[[float], None] = time.sleep,
    ) -> bool:
        """Sleep up to ``seconds`` in ``step`` slices. Returns True if cancelled."""
        remaining = seconds
        while remaining > 0 and not self._cancelled:
            chunk = min(step, remaining)
            sleeper(chunk)
            remaining -= chunk
        return self._cancelled


def install_signal_handlers(
    token: CancelToken,
    signals: Iterable[signal.Signals] = (signal.SIGINT, signal.SIGTERM),
) -> None:
    """Route the given signals to ``token``."""

    def _handler(signum, _frame):
        token.cancel(signum)

    for sig in signals:
        signal.signal(sig, _handler)
