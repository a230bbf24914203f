#!/usr/bin/env python3
"""blindscan CLI entrypoint (package module)."""

from __future__ import annotations

import argparse
import sys
from typing import Any, List, Optional

from blindscan import config
from blindscan.scan.runner import run_scan
from blindscan.util.duration import parse_duration_to_seconds
from blindscan.util.exit_codes import ExitCode
from blindscan.util.logging import configure_logging, get_logger, log_exception

SOCKET_SLOTS = range(4)

logger = get_logger(__name__)


def run(args: argparse.Namespace) -> int:
    """Configure logging and hand over to scan.runner."""
    configure_logging(level=args.log_level, json_file=args.log_json)
    return run_scan(args)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(
        prog="blindscan",
        description="Satellite blind scan through the tuner driver's bs_ctrl/bs_info interface",
        argument_default=argparse.SUPPRESS,
    )
    p.add_argument("-s", "--start", type=int, help="Scan start frequency in MHz (default 950)")
    p.add_argument("-e", "--stop", type=int, help="Scan stop frequency in MHz (default 1950)")
    p.add_argument("-n", "--min", dest="symbolrate_min", type=int, help="Minimum symbol rate to scan in MS/s (default 2)")
    p.add_argument("-x", "--max", dest="symbolrate_max", type=int, help="Maximum symbol rate to scan in MS/s (default 45)")
    p.add_argument("-V", "--vertical", action="store_true", help="Signal polarity is vertical")
    p.add_argument("-C", "--cband", action="store_true", help="Scan C-band")
    p.add_argument("-H", "--high", action="store_true", help="Scan Ku-band high")
    p.add_argument("-S", "--slot", type=int, help="NIM slot (0...3, default 0)")
    p.add_argument("-I", "--i2c", type=int, help="I2C device (0...3, default 0)")

    p.add_argument("--settle", type=parse_duration_to_seconds, help=f"Delay before touching the tuner, e.g. '5', '500ms' (default {config.SETTLE_SECONDS:g}s)")
    p.add_argument("--pid-file", dest="pid_file", type=str, help=f"Instance lock file (default {config.PID_FILE})")
    p.add_argument("--jsonl", type=str, help="Append scan events as line-delimited JSON to this path")
    p.add_argument("--log-level", dest="log_level", type=str, help="Log level for stderr (default from BLINDSCAN_LOG_LEVEL or INFO)")
    p.add_argument("--log-json", dest="log_json", type=str, help="Also write JSON log records to this path")

    args = p.parse_args(argv)

    _set_default(args, "start", 950)
    _set_default(args, "stop", 1950)
    _set_default(args, "symbolrate_min", 2)
    _set_default(args, "symbolrate_max", 45)
    _set_default(args, "vertical", False)
    _set_default(args, "cband", False)
    _set_default(args, "high", False)
    _set_default(args, "slot", 0)
    _set_default(args, "i2c", 0)
    _set_default(args, "settle", config.SETTLE_SECONDS)
    _set_default(args, "pid_file", config.PID_FILE)
    _set_default(args, "jsonl", None)
    _set_default(args, "log_level", None)
    _set_default(args, "log_json", None)

    for attr in ("start", "stop", "symbolrate_min", "symbolrate_max"):
        if getattr(args, attr) < 0:
            p.error(f"--{attr.replace('symbolrate_', '')} must be >= 0")
    if args.stop < args.start:
        p.error("--stop must be >= --start")
    if args.symbolrate_max < args.symbolrate_min:
        p.error("--max must be >= --min")
    if args.slot not in SOCKET_SLOTS:
        p.error("--slot must be between 0 and 3")
    if args.i2c not in SOCKET_SLOTS:
        p.error("--i2c must be between 0 and 3")
    if args.cband and args.high:
        print("[blindscan] --high has no effect on a C-band scan", file=sys.stderr)

    return args


def _set_default(args: argparse.Namespace, attr: str, value: Any) -> None:
    if not hasattr(args, attr):
        setattr(args, attr, value)


def main(argv: Optional[List[str]] = None) -> int:
    try:
        return run(parse_args(argv))
    except KeyboardInterrupt:
        return ExitCode.SUCCESS
    except Exception:
        log_exception(logger, "Blind scan aborted", error_type="runtime")
        return ExitCode.GENERAL_ERROR


if __name__ == "__main__":
    sys.exit(main())
