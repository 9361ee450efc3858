"""Period generation for trend series.

Periods are rolling buckets that start at ``today - lookback_days`` (local
midnight) and step forward one granularity unit at a time while the cursor is
not after today. All stepping happens on local wall-clock dates and is then
localized, so a DST change never moves a period start off midnight, and month
steps follow calendar month lengths (28-31 days, leap years included).
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING

import pytz

from ..core.time import TimeConfig, local_date

if TYPE_CHECKING:
    from datetime import tzinfo

__all__ = [
    "Granularity",
    "TimeRange",
    "TrendValidationError",
    "add_calendar_units",
    "generate_periods",
    "window_start",
]


class TrendValidationError(ValueError):
    """Raised when a caller passes inputs the trend engine cannot accept."""


class Granularity(str, Enum):
    """Unit length of one period."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class TimeRange(Enum):
    """Selectable chart ranges: (label, lookback days, granularity)."""

    WEEK = ("W", 7, Granularity.DAY)
    MONTH = ("M", 30, Granularity.DAY)
    SIX_MONTHS = ("6M", 180, Granularity.WEEK)
    YEAR = ("Y", 365, Granularity.MONTH)

    def __init__(self, label: str, lookback_days: int, granularity: Granularity) -> None:
        self.label = label
        self.lookback_days = lookback_days
        self.granularity = granularity

    @classmethod
    def from_label(cls, label: str) -> TimeRange:
        """Look up a range by its picker label ("W", "M", "6M", "Y") or name.

        Raises
        ------
        ValueError
            If no range matches
        """
        wanted = label.strip().upper()
        for time_range in cls:
            if wanted in (time_range.label, time_range.name):
                return time_range
        raise ValueError(f"Unknown time range: {label!r} (expected one of W, M, 6M, Y)")


def _zone(tz: tzinfo | str | None) -> tzinfo:
    if tz is None:
        return pytz.timezone(TimeConfig.get_default_timezone_name())
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def _localize(day: date, zone: tzinfo) -> datetime:
    midnight = datetime(day.year, day.month, day.day)
    if hasattr(zone, "localize"):
        return zone.localize(midnight)
    return midnight.replace(tzinfo=zone)


def add_calendar_units(day: date, granularity: Granularity, count: int = 1) -> date:
    """Add ``count`` calendar units to a date.

    Months clamp the day to the target month's length, so Jan 31 + 1 month is
    Feb 28 (or Feb 29 in a leap year).
    """
    if granularity is Granularity.DAY:
        return day + timedelta(days=count)
    if granularity is Granularity.WEEK:
        return day + timedelta(weeks=count)

    month_index = day.year * 12 + (day.month - 1) + count
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def window_start(
    reference_now: datetime,
    lookback_days: int,
    tz: tzinfo | str | None = None,
) -> datetime:
    """Lower bound of the window: local midnight ``lookback_days`` before today.

    Raises
    ------
    TrendValidationError
        If ``lookback_days`` is not positive
    """
    if lookback_days <= 0:
        raise TrendValidationError(f"lookback_days must be > 0, got {lookback_days}")
    zone = _zone(tz)
    first = local_date(reference_now, zone) - timedelta(days=lookback_days)
    return _localize(first, zone)


def generate_periods(
    reference_now: datetime,
    lookback_days: int,
    granularity: Granularity,
    tz: tzinfo | str | None = None,
) -> list[datetime]:
    """Generate ordered period starts covering the window.

    Parameters
    ----------
    reference_now
        "Now" for the caller; normalized to the start of its local day
    lookback_days
        Window length in days (must be > 0)
    granularity
        Period unit
    tz
        Timezone for day boundaries (default: diary timezone)

    Returns
    -------
    list[datetime]
        Non-empty, strictly ascending, timezone-aware period starts. The first
        is the window start; the last is not after today's midnight.

    Raises
    ------
    TrendValidationError
        If ``lookback_days`` is not positive

    Example
    -------
    >>> periods = generate_periods(datetime(2025, 3, 8, 15, 0), 7, Granularity.DAY, "UTC")
    >>> len(periods), periods[0].day, periods[-1].day
    (8, 1, 8)
    """
    zone = _zone(tz)
    first = window_start(reference_now, lookback_days, zone).date()
    today = local_date(reference_now, zone)

    days: list[date] = []
    cursor = first
    while cursor <= today:
        days.append(cursor)
        following = add_calendar_units(cursor, granularity)
        if following <= cursor:
            break
        cursor = following

    return [_localize(day, zone) for day in days]
