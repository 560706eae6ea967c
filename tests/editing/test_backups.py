"""Tests for backup snapshots, persistence and retention."""

import os
from datetime import datetime, timezone

from edit_gate.editing.backups import Backup, BackupStore
from edit_gate.editing.fileio import read_text, safe_write

# 2026-03-15 12:00:00 UTC
NOON = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc).timestamp()
DAY = 86400


class FakeClock:
    def __init__(self, now=NOON):
        self.now = now

    def __call__(self):
        return self.now


class TestBackupStore:
    def test_snapshot_is_in_memory(self, tmp_path):
        store = BackupStore(str(tmp_path / "backups"), clock=FakeClock())
        backup = store.snapshot("src/a.py", "content")
        assert backup.content == "content"
        assert backup.timestamp.startswith("2026-03-15T12:00:00")
        assert not (tmp_path / "backups").exists()

    def test_save_uses_dated_directory(self, tmp_path):
        store = BackupStore(str(tmp_path / "backups"), clock=FakeClock())
        path = store.save(store.snapshot("src/a.py", "original\r\n"))

        assert os.path.dirname(path) == str(tmp_path / "backups" / "2026-03-15")
        assert os.path.basename(path).startswith("a.py.backup.")
        assert store.load(path) == "original\r\n"

    def test_same_instant_backups_do_not_collide(self, tmp_path):
        store = BackupStore(str(tmp_path / "backups"), clock=FakeClock())
        first = store.save(store.snapshot("a.py", "one"))
        second = store.save(store.snapshot("a.py", "two"))
        assert first != second
        assert store.load(first) == "one"
        assert store.load(second) == "two"

    def test_cleanup_removes_expired_directories(self, tmp_path):
        clock = FakeClock()
        store = BackupStore(str(tmp_path / "backups"), retention_days=30, clock=clock)
        store.save(store.snapshot("old.py", "x"))
        (tmp_path / "backups" / "notes").mkdir()

        clock.now += 31 * DAY
        removed = store.cleanup_old_backups()

        assert removed == ["2026-03-15"]
        assert (tmp_path / "backups" / "notes").is_dir()

    def test_cleanup_keeps_recent_directories(self, tmp_path):
        clock = FakeClock()
        store = BackupStore(str(tmp_path / "backups"), retention_days=30, clock=clock)
        store.save(store.snapshot("a.py", "x"))
        clock.now += 10 * DAY
        assert store.cleanup_old_backups() == []

    def test_cleanup_without_root(self, tmp_path):
        store = BackupStore(str(tmp_path / "missing"))
        assert store.cleanup_old_backups() == []


class TestBackupSerialization:
    def test_round_trip(self):
        backup = Backup(path="a.py", content="x = 1\n", timestamp="2026-03-15T12:00:00+00:00")
        assert Backup.from_dict(backup.to_dict()) == backup

    def test_content_can_be_omitted(self):
        data = Backup("a.py", "secret", "t").to_dict(include_content=False)
        assert "content" not in data


class TestFileIO:
    def test_safe_write_creates_parents(self, tmp_path):
        target = tmp_path / "deep" / "dir" / "f.txt"
        safe_write(str(target), "hi")
        assert target.read_text() == "hi"
        assert not (tmp_path / "deep" / "dir" / "f.txt.editgate_tmp").exists()

    def test_line_endings_preserved(self, tmp_path):
        target = str(tmp_path / "crlf.txt")
        safe_write(target, "a\r\nb\r\n")
        assert read_text(target) == "a\r\nb\r\n"
        with open(target, "rb") as f:
            assert f.read() == b"a\r\nb\r\n"
