"""Calendar-aware trend series over diary entries."""

from .aggregator import DISPLAY_FLOOR, TrendPoint, aggregate, assign_period, compute_trend, display_value
from .periods import (
    Granularity,
    TimeRange,
    TrendValidationError,
    add_calendar_units,
    generate_periods,
    window_start,
)
from .tracker import TrendTracker

__all__ = [
    # Periods
    "Granularity",
    "TimeRange",
    "TrendValidationError",
    "add_calendar_units",
    "generate_periods",
    "window_start",
    # Aggregation
    "DISPLAY_FLOOR",
    "TrendPoint",
    "aggregate",
    "assign_period",
    "compute_trend",
    "display_value",
    # Recompute triggers
    "TrendTracker",
]
