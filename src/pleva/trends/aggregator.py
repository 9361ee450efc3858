"""Trend series aggregation.

Entries are assigned to the latest period start at or before their timestamp
and each period is reduced to the average total lesion count. Periods without
entries report ``0.0`` so charts always have a baseline.
"""

from __future__ import annotations

from bisect import bisect_right
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterable, Sequence

from ..core.time import ensure_timezone, get_current_time
from ..diary.models import metric_value
from ..observability import get_logger
from .periods import TimeRange, TrendValidationError, generate_periods

if TYPE_CHECKING:
    from datetime import tzinfo

__all__ = [
    "DISPLAY_FLOOR",
    "TrendPoint",
    "aggregate",
    "assign_period",
    "compute_trend",
    "display_value",
]

log = get_logger("trends")

# Smallest value a chart draws, so empty periods stay visible on the axis.
DISPLAY_FLOOR = 0.1


@dataclass(frozen=True)
class TrendPoint:
    """Average total lesion count for one period.

    Attributes
    ----------
    period_start : datetime
        Start of the period (inclusive)
    average_value : float
        Mean of entry totals in the period, 0.0 when empty
    entry_count : int
        Number of entries assigned to the period
    """

    period_start: datetime
    average_value: float
    entry_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "period_start": self.period_start.isoformat(),
            "average_value": self.average_value,
            "entry_count": self.entry_count,
        }


def display_value(point: TrendPoint) -> float:
    """Value to plot for ``point``; rendering only, not part of the data."""
    return max(DISPLAY_FLOOR, point.average_value)


def _check_periods(periods: Sequence[datetime]) -> None:
    if not periods:
        raise TrendValidationError("periods must contain at least one period start")
    for earlier, later in zip(periods, periods[1:]):
        if not earlier < later:
            raise TrendValidationError(
                f"periods must be strictly ascending: {earlier.isoformat()} is not before {later.isoformat()}"
            )


def assign_period(timestamp: datetime, periods: Sequence[datetime]) -> int:
    """Index of the latest period start ``<= timestamp``.

    Falls back to the first period when the timestamp precedes every start.
    """
    return max(bisect_right(periods, timestamp) - 1, 0)


def aggregate(
    entries: Iterable[Any],
    periods: Sequence[datetime],
    window_start: datetime | None = None,
    tz: tzinfo | str | None = None,
) -> list[TrendPoint]:
    """Bucket entries into periods and average each bucket.

    Parameters
    ----------
    entries
        Entries with ``timestamp`` and ``region_counts``; never modified
    periods
        Strictly ascending period starts (see ``generate_periods``)
    window_start
        Window lower bound; entries before it are ignored (default: first period)
    tz
        Timezone for naive timestamps and period starts (default: diary timezone)

    Returns
    -------
    list[TrendPoint]
        One point per period, in period order

    Raises
    ------
    TrendValidationError
        If ``periods`` is empty or not strictly ascending
    """
    periods = [ensure_timezone(start, tz) for start in periods]
    _check_periods(periods)
    lower = ensure_timezone(window_start, tz) if window_start is not None else periods[0]

    totals: dict[int, list[int]] = defaultdict(list)
    skipped = 0
    for entry in entries:
        timestamp = ensure_timezone(entry.timestamp, tz)
        if timestamp < lower:
            skipped += 1
            continue
        totals[assign_period(timestamp, periods)].append(metric_value(entry))

    points = []
    for index, start in enumerate(periods):
        values = totals.get(index, [])
        average = sum(values) / len(values) if values else 0.0
        points.append(TrendPoint(period_start=start, average_value=float(average), entry_count=len(values)))

    log.debug(
        "Aggregated {periods} periods",
        periods=len(periods),
        skipped=skipped,
        counts=[point.entry_count for point in points],
    )
    return points


def compute_trend(
    entries: Iterable[Any],
    time_range: TimeRange,
    reference_now: datetime | None = None,
    tz: tzinfo | str | None = None,
) -> list[TrendPoint]:
    """Trend series for ``time_range`` ending today.

    Example
    -------
    >>> points = compute_trend(store.fetch_entries(), TimeRange.WEEK)
    >>> len(points)
    8
    """
    if reference_now is None:
        reference_now = get_current_time()

    periods = generate_periods(reference_now, time_range.lookback_days, time_range.granularity, tz)
    return aggregate(entries, periods, periods[0], tz)
