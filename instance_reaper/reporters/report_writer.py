"""
Report Writer Module
====================

Append-only plain-text report of a reap run.

The pipeline writes one line per expired instance (``<name> <id>``), one
line per recorded error, and one line when no service matches. Lines
may come from several stage threads; each line is written whole.

Example
-------
>>> import sys
>>> report = ReportWriter(sys.stdout)
>>> report.write_line("my-instance 6f1f2c3e-...")
"""

from __future__ import annotations

import sys
import threading
from typing import List, Optional, TextIO


class ReportWriter:
    """
    Thread-safe line writer over a text stream.

    Parameters
    ----------
    stream : TextIO, optional
        Destination of the report. Defaults to ``sys.stdout``.

    Attributes
    ----------
    lines : list of str
        Every line written so far, in write order.
    """

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.lines: List[str] = []
        self._lock = threading.Lock()

    def write_line(self, text: str) -> None:
        """Append one line to the report."""
        with self._lock:
            self.lines.append(text)
            self.stream.write(f"{text}\n")
            self.stream.flush()

    def __repr__(self) -> str:
        return f"ReportWriter(lines={len(self.lines)})"
