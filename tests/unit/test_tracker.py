"""Tests for TrendTracker recompute triggers."""

from datetime import datetime, timedelta, timezone

from pleva.diary import DiaryEntry, EntryStore, Region
from pleva.trends import TimeRange, TrendTracker

UTC = timezone.utc


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_tracker(now=datetime(2025, 3, 8, 12, 0, tzinfo=UTC)):
    store = EntryStore()
    clock = FakeClock(now)
    tracker = TrendTracker(store, TimeRange.WEEK, clock=clock, tz="UTC")
    calls = []
    tracker.subscribe(lambda time_range, points: calls.append((time_range, points)))
    return store, clock, tracker, calls


def test_select_range_recomputes_and_notifies():
    _, _, tracker, calls = make_tracker()

    points = tracker.select_range(TimeRange.YEAR)

    assert tracker.time_range is TimeRange.YEAR
    assert calls == [(TimeRange.YEAR, points)]
    assert len(points) == 13


def test_entries_changed_reads_fresh_snapshot():
    store, clock, tracker, calls = make_tracker()
    tracker.entries_changed()
    assert calls[-1][1][-1].average_value == 0.0

    store.add(DiaryEntry(timestamp=clock.now, region_counts={Region.FACE: 4}))
    points = tracker.entries_changed()

    assert points[-1].average_value == 4.0
    assert len(calls) == 2


def test_tick_only_recomputes_after_day_rollover():
    _, clock, tracker, calls = make_tracker()

    first = tracker.tick()
    assert first is not None

    clock.now += timedelta(hours=6)
    assert tracker.tick() is None

    clock.now += timedelta(hours=7)  # past midnight
    rolled = tracker.tick()

    assert rolled is not None
    assert rolled[-1].period_start == datetime(2025, 3, 9, tzinfo=UTC)
    assert len(calls) == 2


def test_series_does_not_notify():
    _, _, tracker, calls = make_tracker()

    assert len(tracker.series()) == 8
    assert calls == []
