"""Log emitters

Components that report progress take a LogEmitter rather than writing to a
global logger, so hosts decide where messages go.
"""

import sys
from typing import List, Protocol, TextIO, Tuple


LEVELS = ("debug", "info", "warn", "error")


class LogEmitter(Protocol):
    """Destination for log messages"""

    def emit_log(self, level: str, message: str) -> None:
        """Emit a log message at the given level (debug, info, warn, error)"""
        ...


class StderrLogEmitter:
    """Writes `[LEVEL] message` lines to stderr"""

    def __init__(self, min_level: str = "info", stream: TextIO = None):
        if min_level not in LEVELS:
            raise ValueError(f"Unknown log level '{min_level}'")
        self.min_level = min_level
        self.stream = stream

    def emit_log(self, level: str, message: str) -> None:
        if LEVELS.index(level) < LEVELS.index(self.min_level):
            return
        print(f"[{level.upper()}] {message}", file=self.stream or sys.stderr)


class NullLogEmitter:
    """Discards every message"""

    def emit_log(self, level: str, message: str) -> None:
        pass


class RecordingLogEmitter:
    """Keeps messages in memory"""

    def __init__(self):
        self.entries: List[Tuple[str, str]] = []

    def emit_log(self, level: str, message: str) -> None:
        self.entries.append((level, message))

    def messages(self, level: str) -> List[str]:
        return [message for lvl, message in self.entries if lvl == level]
