"""Time and timezone helpers shared by the diary and the trend engine.

Entries are persisted as ISO-8601 UTC with a `Z` suffix. Naive datetimes
are read in the configured diary timezone, and "today" always means the
local calendar day in that zone.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

__all__ = [
    "TimeConfig",
    "ensure_timezone",
    "format_utc_iso8601",
    "get_current_time",
    "get_default_timezone",
    "local_date",
    "parse_utc_iso8601",
    "resolve_timezone",
    "set_default_timezone",
    "start_of_local_day",
]


class TimeConfig:
    """Process-wide diary timezone; day boundaries are drawn in this zone."""

    _default_timezone = "UTC"

    @classmethod
    def get_default_timezone_name(cls) -> str:
        return cls._default_timezone

    @classmethod
    def set_default_timezone_name(cls, timezone_name: str) -> None:
        """Switch the diary timezone (IANA name, e.g. "Europe/Brussels").

        Raises
        ------
        ValueError
            If the name is not a known IANA zone
        """
        try:
            ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Invalid timezone: {timezone_name}") from exc

        cls._default_timezone = timezone_name


def get_default_timezone() -> ZoneInfo:
    """Get default timezone object."""
    return ZoneInfo(TimeConfig.get_default_timezone_name())


def set_default_timezone(timezone_name: str) -> None:
    """Set default timezone for the diary.

    Raises
    ------
    ValueError
        If timezone is invalid
    """
    TimeConfig.set_default_timezone_name(timezone_name)


def resolve_timezone(tz: tzinfo | str | None = None) -> tzinfo:
    """Turn a timezone name, object or None (diary default) into a tzinfo."""
    if tz is None:
        return get_default_timezone()
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def get_current_time(tz: ZoneInfo | str | None = None) -> datetime:
    """Get current time in specified timezone.

    Parameters
    ----------
    tz
        Timezone (ZoneInfo, timezone name string, or None for default)

    Returns
    -------
    datetime
        Current time in specified timezone
    """
    return datetime.now(resolve_timezone(tz))


def ensure_timezone(dt: datetime, tz: str | tzinfo | None = None) -> datetime:
    """Ensure datetime has timezone information.

    Parameters
    ----------
    dt
        Datetime (may be naive)
    tz
        Timezone to assume if dt is naive (default: diary timezone)

    Returns
    -------
    datetime
        Timezone-aware datetime
    """
    if dt.tzinfo is not None:
        return dt

    tz_obj: tzinfo = resolve_timezone(tz)
    # pytz zones must localize; replace() would pick their LMT offset.
    if hasattr(tz_obj, "localize"):
        return tz_obj.localize(dt)
    return dt.replace(tzinfo=tz_obj)


def local_date(dt: datetime, tz: str | tzinfo | None = None) -> date:
    """Calendar date of ``dt`` as seen on a wall clock in ``tz``."""
    zone = resolve_timezone(tz)
    return ensure_timezone(dt, zone).astimezone(zone).date()


def start_of_local_day(dt: datetime, tz: str | ZoneInfo | None = None) -> datetime:
    """Midnight (aware) of the local calendar day containing ``dt``.

    Two moments on the same calendar day map to the same value.
    """
    zone = resolve_timezone(tz)
    return datetime.combine(local_date(dt, zone), time.min, tzinfo=zone)


def format_utc_iso8601(dt: datetime) -> str:
    """Format datetime as ISO-8601 UTC string with a ``Z`` suffix.

    Naive datetimes are taken as UTC.

    Example
    -------
    >>> from datetime import datetime, timezone
    >>> format_utc_iso8601(datetime(2025, 3, 7, 9, 30, tzinfo=timezone.utc))
    '2025-03-07T09:30:00Z'
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return dt.isoformat().replace("+00:00", "Z")


def parse_utc_iso8601(iso_string: str) -> datetime:
    """Parse ISO-8601 string to UTC datetime.

    Raises
    ------
    ValueError
        If string is not valid ISO-8601

    Example
    -------
    >>> parse_utc_iso8601("2025-10-08T14:30:00+02:00").hour
    12
    """
    # Handle 'Z' suffix (Zulu time = UTC)
    iso_string = iso_string.replace("Z", "+00:00")

    dt = datetime.fromisoformat(iso_string)

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return dt
