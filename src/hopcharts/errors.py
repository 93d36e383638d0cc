"""Errors raised while loading logs and writing pages.

Two kinds exist: I/O failures (``LogReadError``, ``PageWriteError``, both
``OSError`` subclasses) and shape failures (``LogParseError``). Both are fatal
to a render run; the script entry points catch ``HopchartsError`` and exit.
"""

from pathlib import Path
from typing import Optional


class HopchartsError(Exception):
    """Base class for all hopcharts failures."""


class LogReadError(HopchartsError, OSError):
    """Log file is missing, unreadable or not valid UTF-8."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot read {path}: {reason}")

    def __str__(self) -> str:
        return f"cannot read {self.path}: {self.reason}"


class PageWriteError(HopchartsError, OSError):
    """Rendered page could not be written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot write {path}: {reason}")

    def __str__(self) -> str:
        return f"cannot write {self.path}: {self.reason}"


class LogParseError(HopchartsError, ValueError):
    """Log content does not match the expected JSON shape."""

    def __init__(self, reason: str, path: Optional[Path] = None, field: Optional[str] = None):
        self.reason = reason
        self.path = path
        self.field = field
        super().__init__(str(self))

    def __str__(self) -> str:
        where = f"{self.path}: " if self.path else ""
        at = f"{self.field}: " if self.field else ""
        return f"{where}{at}{self.reason}"
