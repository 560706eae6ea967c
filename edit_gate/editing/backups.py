"""
Backup store: snapshots of files taken before they are overwritten,
kept under dated subdirectories so rejected edits can be rolled back.
"""

from __future__ import annotations

import logging
import os
import shutil
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from .fileio import read_text, safe_write

logger = logging.getLogger(__name__)

_DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class Backup:
    """Immutable snapshot of one file's content."""
    path: str
    content: str
    timestamp: str

    def to_dict(self, include_content: bool = True) -> dict:
        data = {"path": self.path, "timestamp": self.timestamp}
        if include_content:
            data["content"] = self.content
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Backup":
        return cls(
            path=data["path"],
            content=data.get("content", ""),
            timestamp=data["timestamp"],
        )


class BackupStore:
    """Writes and reads backup snapshots under ``<root>/<YYYY-MM-DD>/``."""

    def __init__(
        self,
        root: str,
        retention_days: int = 30,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._root = root
        self._retention_days = retention_days
        self._clock = clock

    @property
    def root(self) -> str:
        return self._root

    def snapshot(self, path: str, content: str) -> Backup:
        """Create an in-memory Backup stamped with the current time."""
        now = datetime.fromtimestamp(self._clock(), timezone.utc)
        return Backup(path=path, content=content, timestamp=now.isoformat())

    def backup_path_for(self, path: str) -> str:
        """Return a fresh location for a backup of *path*.

        Named ``<basename>.backup.<timestamp>`` inside today's directory;
        a numeric suffix keeps same-instant backups apart.
        """
        now = datetime.fromtimestamp(self._clock(), timezone.utc)
        stamp = now.isoformat().replace(":", "-").replace(".", "-").replace("+", "_")
        directory = os.path.join(self._root, now.strftime(_DATE_FORMAT))
        candidate = os.path.join(
            directory, f"{os.path.basename(path)}.backup.{stamp}"
        )
        suffix = 1
        unique = candidate
        while os.path.exists(unique):
            unique = f"{candidate}.{suffix}"
            suffix += 1
        return unique

    def save(self, backup: Backup) -> str:
        """Persist *backup* and return the file it was written to."""
        self.cleanup_old_backups()
        backup_path = self.backup_path_for(backup.path)
        safe_write(backup_path, backup.content)
        logger.info("[Backup] Created %s", backup_path)
        return backup_path

    def load(self, backup_path: str) -> str:
        return read_text(backup_path)

    def cleanup_old_backups(self) -> list[str]:
        """Remove dated directories older than the retention window.

        Directory age is taken from its name, not its mtime. Returns the
        removed directory names. Failures are logged, never raised.
        """
        removed: list[str] = []
        if not os.path.isdir(self._root):
            return removed

        today = datetime.fromtimestamp(self._clock(), timezone.utc).date()
        cutoff = today - timedelta(days=self._retention_days)

        try:
            entries = sorted(os.listdir(self._root))
        except OSError as exc:
            logger.warning("[Backup] Cleanup failed: %s", exc)
            return removed

        for name in entries:
            dir_path = os.path.join(self._root, name)
            if not os.path.isdir(dir_path):
                continue
            try:
                dated = datetime.strptime(name, _DATE_FORMAT).date()
            except ValueError:
                continue
            if dated < cutoff:
                try:
                    shutil.rmtree(dir_path)
                    removed.append(name)
                    logger.debug("[Backup] Cleaned up old backup directory: %s", name)
                except OSError as exc:
                    logger.warning("[Backup] Could not remove %s: %s", dir_path, exc)
        return removed
