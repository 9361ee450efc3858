"""Recompute triggers for trend views.

The engine itself is a pure function; ``TrendTracker`` decides when to call it.
A series is recomputed when the selected range changes, when the entry set
changes, or when the local day rolls over. Nothing is cached between calls:
every trigger aggregates a fresh snapshot from the source.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Callable

from ..core.time import get_current_time, local_date
from ..observability import get_logger
from .aggregator import TrendPoint, compute_trend
from .periods import TimeRange

if TYPE_CHECKING:
    from ..diary.store import EntrySource

__all__ = ["TrendListener", "TrendTracker"]

log = get_logger("trends")

TrendListener = Callable[[TimeRange, list[TrendPoint]], None]


class TrendTracker:
    """Recomputes a trend series on explicit triggers and notifies listeners.

    Example:
        >>> tracker = TrendTracker(store, TimeRange.WEEK)
        >>> tracker.subscribe(lambda time_range, points: chart.draw(points))
        >>> tracker.select_range(TimeRange.YEAR)
        >>> tracker.entries_changed()
        >>> tracker.tick()  # call periodically; recomputes after midnight
    """

    def __init__(
        self,
        source: EntrySource,
        time_range: TimeRange = TimeRange.WEEK,
        *,
        clock: Callable[[], datetime] = get_current_time,
        tz: str | None = None,
    ) -> None:
        self.source = source
        self.time_range = time_range
        self.clock = clock
        self.tz = tz
        self._listeners: list[TrendListener] = []
        self._day: date | None = None

    def subscribe(self, listener: TrendListener) -> None:
        self._listeners.append(listener)

    def series(self) -> list[TrendPoint]:
        """Compute the series for the current range and clock."""
        now = self.clock()
        self._day = local_date(now, self.tz)
        return compute_trend(self.source.fetch_entries(), self.time_range, now, self.tz)

    def select_range(self, time_range: TimeRange) -> list[TrendPoint]:
        self.time_range = time_range
        return self._recompute("range_changed")

    def entries_changed(self) -> list[TrendPoint]:
        return self._recompute("entries_changed")

    def tick(self) -> list[TrendPoint] | None:
        """Recompute if the local day changed since the last computation."""
        today = local_date(self.clock(), self.tz)
        if self._day is not None and today == self._day:
            return None
        return self._recompute("day_rollover")

    def _recompute(self, trigger: str) -> list[TrendPoint]:
        points = self.series()
        log.debug("Trend recomputed", trigger=trigger, range=self.time_range.label, points=len(points))
        for listener in self._listeners:
            listener(self.time_range, points)
        return points
