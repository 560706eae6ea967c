"""Tests for the file read tracker."""

from edit_gate.editing.read_tracker import FileReadTracker


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestFileReadTracker:
    def test_lookup_unknown_path(self):
        assert FileReadTracker().lookup("/w/a.txt") is None

    def test_record_and_lookup(self):
        clock = FakeClock(50.0)
        tracker = FileReadTracker(clock)
        tracker.record("/w/a.txt", "hello")

        record = tracker.lookup("/w/a.txt")
        assert record.content == "hello"
        assert record.timestamp == 50.0

    def test_last_write_wins(self):
        clock = FakeClock()
        tracker = FileReadTracker(clock)
        tracker.record("/w/a.txt", "one")
        clock.now += 5
        tracker.record("/w/a.txt", "two")

        record = tracker.lookup("/w/a.txt")
        assert record.content == "two"
        assert record.timestamp == clock.now
        assert len(tracker) == 1

    def test_age(self):
        clock = FakeClock()
        tracker = FileReadTracker(clock)
        assert tracker.age("/w/a.txt") is None
        tracker.record("/w/a.txt", "x")
        clock.now += 42
        assert tracker.age("/w/a.txt") == 42
