"""Line-delimited JSON event log for a scan run."""

from __future__ import annotations

import json
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


class ScanLogger:
    """Append one JSON object per scan event to an optional target file.

    A logger created without a path records nothing, so callers never need
    to check whether --jsonl was given.
    """

    def __init__(self, log_path: Optional[Path] = None):
        self.log_path = log_path
        if self.log_path is not None:
            self._ensure_parent(self.log_path)
        self.run_id = f"run-{int(time.time() * 1000)}-pid{os.getpid()}"

    @staticmethod
    def _ensure_parent(path: Path) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass

    @classmethod
    def from_target(cls, target: Optional[str]) -> "ScanLogger":
        if not target:
            return cls(None)
        resolved = Path(target).expanduser()
        if not resolved.is_absolute():
            resolved = (Path.cwd() / resolved).absolute()
        return cls(resolved)

    def log(self, event: str, **fields: Any) -> None:
        if self.log_path is None:
            return
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "run_id": self.run_id,
            "event": event,
            **fields,
        }
        try:
            with self.log_path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(record) + "\n")
        except OSError:
            return
