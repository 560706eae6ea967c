"""
File read tracker: remembers the most recent read of each file so
surgical edits can be refused when made blind or against stale context.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class FileReadRecord:
    """Content and time of the latest read of one path."""
    path: str
    content: str
    timestamp: float


class FileReadTracker:
    """Last-write-wins map of path -> FileReadRecord."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._records: dict[str, FileReadRecord] = {}
        self._lock = threading.Lock()

    def record(self, path: str, content: str) -> FileReadRecord:
        entry = FileReadRecord(path=path, content=content, timestamp=self._clock())
        with self._lock:
            self._records[path] = entry
        return entry

    def lookup(self, path: str) -> Optional[FileReadRecord]:
        with self._lock:
            return self._records.get(path)

    def age(self, path: str) -> Optional[float]:
        """Seconds since *path* was last read, or None if never read."""
        entry = self.lookup(path)
        if entry is None:
            return None
        return self._clock() - entry.timestamp

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
