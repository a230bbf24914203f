"""Documented exit codes for the blindscan CLI.

Exit codes follow UNIX conventions:
- 0: Success (scan completed, was cancelled, or the tuner has no blind-scan support)
- 1: General/unspecified error
- 2: Invalid command-line arguments or usage
- 3-4: Singleton lock failures

Usage:
    from blindscan.util.exit_codes import ExitCode
    sys.exit(ExitCode.LOCK_HELD)
"""

from __future__ import annotations


class ExitCode:
    """Exit code constants for blindscan processes.

    Attributes:
        SUCCESS: Normal termination, including a cancelled scan.
        GENERAL_ERROR: Unspecified runtime error.
        INVALID_ARGS: Command-line argument validation failed.
        LOCK_HELD: Another blindscan instance holds the PID file lock.
        LOCK_ERROR: The PID file could not be created or written.
    """

    SUCCESS: int = 0
    GENERAL_ERROR: int = 1
    INVALID_ARGS: int = 2
    LOCK_HELD: int = 3
    LOCK_ERROR: int = 4

    @classmethod
    def message(cls, code: int) -> str:
        """Return a human-readable message for an exit code."""
        messages = {
            cls.SUCCESS: "Success",
            cls.GENERAL_ERROR: "General error",
            cls.INVALID_ARGS: "Invalid arguments",
            cls.LOCK_HELD: "Another blindscan instance is running",
            cls.LOCK_ERROR: "PID file could not be created",
        }
        return messages.get(code, f"Unknown exit code {code}")
