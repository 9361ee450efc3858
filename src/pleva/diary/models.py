"""Diary entry model.

An entry is one dated observation: severity, notes, photos, location and
lesion (papule) counts per body region.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from ..core.time import ensure_timezone, get_current_time

__all__ = [
    "DiaryEntry",
    "LEGACY_CHART_REGIONS",
    "Region",
    "SCHEMA_VERSION",
    "SEVERITY_LABELS",
    "metric_value",
    "normalize_region_counts",
    "severity_label",
]

# Version 2 added belly, left foot and right foot.
SCHEMA_VERSION = 2

SEVERITY_LABELS = {
    1: "Mild",
    2: "Mild-Moderate",
    3: "Moderate",
    4: "Moderate-Severe",
    5: "Severe",
}


class Region(str, Enum):
    """Body regions with a lesion count, in diary form order."""

    FACE = "face"
    NECK = "neck"
    CHEST = "chest"
    LEFT_ARM = "left_arm"
    RIGHT_ARM = "right_arm"
    BACK = "back"
    BUTTOCKS = "buttocks"
    LEFT_LEG = "left_leg"
    RIGHT_LEG = "right_leg"
    BELLY = "belly"
    LEFT_FOOT = "left_foot"
    RIGHT_FOOT = "right_foot"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def since_version(self) -> int:
        return 2 if self in _V2_REGIONS else 1


_V2_REGIONS = frozenset({Region.BELLY, Region.LEFT_FOOT, Region.RIGHT_FOOT})

# Known inconsistency: the first trend chart summed only these nine regions
# while entries already stored twelve. Kept for migration reports only;
# metric_value() always sums every region.
LEGACY_CHART_REGIONS: tuple[Region, ...] = tuple(r for r in Region if r not in _V2_REGIONS)


def normalize_region_counts(counts: Mapping[Region | str, int] | None) -> dict[Region, int]:
    """Return a full, ordered region map; missing regions count as zero.

    Raises
    ------
    ValueError
        On unknown region names or negative counts
    """
    given: dict[Region, int] = {}
    for key, value in (counts or {}).items():
        region = key if isinstance(key, Region) else Region(key)
        count = int(value)
        if count < 0:
            raise ValueError(f"Lesion count for {region.value} must be >= 0, got {count}")
        given[region] = count

    return {region: given.get(region, 0) for region in Region}


@dataclass
class DiaryEntry:
    """One dated diary record.

    Attributes
    ----------
    timestamp : datetime
        When the observation was made (timezone-aware)
    severity : int
        1 (mild) to 5 (severe)
    region_counts : dict[Region, int]
        Lesion counts for every region
    weekly_summary : str | None
        Last generated summary stored on this entry
    summary_date : datetime | None
        When that summary was generated
    id : str
        Stable identity, independent of timestamp
    """

    timestamp: datetime = field(default_factory=get_current_time)
    notes: str = ""
    severity: int = 1
    photos: list[bytes] = field(default_factory=list)
    location: str = ""
    weekly_summary: str | None = None
    summary_date: datetime | None = None
    region_counts: dict[Region, int] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        if not 1 <= self.severity <= 5:
            raise ValueError(f"Severity must be between 1 and 5, got {self.severity}")
        self.timestamp = ensure_timezone(self.timestamp)
        if self.summary_date is not None:
            self.summary_date = ensure_timezone(self.summary_date)
        self.region_counts = normalize_region_counts(self.region_counts)

    @property
    def metric_value(self) -> int:
        """Total lesion count across all regions."""
        return metric_value(self)

    def count(self, region: Region) -> int:
        return self.region_counts.get(region, 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "severity": self.severity,
            "location": self.location,
            "notes": self.notes,
            "photos": len(self.photos),
            "total": self.metric_value,
            "regions": {region.value: count for region, count in self.region_counts.items()},
        }


def metric_value(entry: Any) -> int:
    """Sum of per-region lesion counts for ``entry``.

    Computed on every call; counts may have been edited since last read.
    """
    return sum(entry.region_counts.values())


def severity_label(severity: int) -> str:
    return SEVERITY_LABELS.get(severity, "Unknown")
