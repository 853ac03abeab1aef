"""A logger that prints, appends to a log file and keeps every line in memory."""

from __future__ import annotations

import sys
import threading
import time
import traceback
from os import PathLike
from pathlib import Path
from typing import TextIO

from .models import LogLine, LogSeverity


class Logger:
    """Collects log lines; writing never raises."""

    def __init__(
        self, log_path: str | PathLike | None = None, stream: TextIO | None = None
    ) -> None:
        self._log_path = Path(log_path) if log_path is not None else None
        self._stream = stream
        self._lines: list[LogLine] = []
        self._lock = threading.Lock()

    def _print(self, text: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        try:
            print(text, file=stream)
        except (OSError, ValueError):
            pass

    def log(self, severity: LogSeverity, message: str) -> LogLine:
        """Record ``message`` and return the stored line."""
        line = LogLine(severity, int(time.time()), message)
        text = str(line)
        self._print(text)
        if self._log_path is not None:
            try:
                with open(self._log_path, "a", encoding="utf-8") as log_file:
                    log_file.write(text)
                    log_file.write("\n")
            except OSError as error:
                self._print(f"Could not write log to file: {error}")
        with self._lock:
            self._lines.append(line)
        return line

    def trace(self, message: str) -> LogLine:
        return self.log(LogSeverity.TRACE, message)

    def debug(self, message: str) -> LogLine:
        return self.log(LogSeverity.DEBUG, message)

    def info(self, message: str) -> LogLine:
        return self.log(LogSeverity.INFO, message)

    def warn(self, message: str) -> LogLine:
        return self.log(LogSeverity.WARN, message)

    def error(self, message: str) -> LogLine:
        return self.log(LogSeverity.ERROR, message)

    def critical(self, message: str) -> LogLine:
        return self.log(LogSeverity.CRITICAL, message)

    def lines(self) -> list[LogLine]:
        """Return a copy of every line logged so far."""
        with self._lock:
            return list(self._lines)

    def install_excepthook(self) -> None:
        """Log uncaught exceptions as critical, then hand them to the previous hook."""
        previous = sys.excepthook

        def hook(exc_type, exc, tb):
            details = "".join(traceback.format_exception(exc_type, exc, tb))
            self.critical(f"{exc}\n{details}")
            previous(exc_type, exc, tb)

        sys.excepthook = hook