"""Output sink for result lines."""

from __future__ import annotations

import sys
from typing import Optional, TextIO

from blindscan.io.formatting import format_line
from blindscan.scan.types import CanonicalResult


class LineSink:
    """Write each result line to a stream and flush it straight away."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout
        self.count = 0

    def emit(self, result: CanonicalResult) -> str:
        line = format_line(result)
        self.stream.write(line)
        self.stream.flush()
        self.count += 1
        return line
