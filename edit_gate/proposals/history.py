"""
Edit history: append-only JSONL log of resolved proposals.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

HISTORY_FILE = "history.jsonl"


class HistoryLog:
    """One JSON record per resolved proposal, appended under a lock.

    Each record is written with a single ``write`` call on a file opened
    in append mode, so concurrent writers never interleave partial lines.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    def append(self, record: dict) -> bool:
        """Append *record*; returns False (and logs) if the write failed."""
        entry = {"logged_at": datetime.now(timezone.utc).isoformat()}
        entry.update(record)
        line = json.dumps(entry, ensure_ascii=False) + "\n"

        with self._lock:
            try:
                os.makedirs(os.path.dirname(os.path.abspath(self._path)), exist_ok=True)
                with open(self._path, "a", encoding="utf-8") as f:
                    f.write(line)
            except OSError as exc:
                logger.warning("[History] Could not save edit to history: %s", exc)
                return False
        return True

    def read(self, last_n: int | None = None) -> list[dict]:
        """Return logged records, oldest first; corrupt lines are skipped."""
        entries: list[dict] = []
        if not os.path.isfile(self._path):
            return entries
        with self._lock:
            try:
                with open(self._path, "r", encoding="utf-8") as f:
                    for line in f:
                        line = line.strip()
                        if not line:
                            continue
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
            except OSError as exc:
                logger.warning("[History] Could not read history: %s", exc)
        if last_n is not None:
            entries = entries[-last_n:]
        return entries

    def stats(self, last_n: int | None = None) -> dict:
        """Counts of logged records by terminal status."""
        entries = self.read(last_n)
        statuses = Counter(e.get("status", "unknown") for e in entries)
        return {
            "total": len(entries),
            "by_status": dict(statuses.most_common()),
        }
