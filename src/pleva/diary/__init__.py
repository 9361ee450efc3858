"""Diary entries, their store and import/export."""

from .models import LEGACY_CHART_REGIONS, SCHEMA_VERSION, DiaryEntry, Region, metric_value, severity_label
from .store import EntryNotFoundError, EntrySource, EntryStore, JsonEntryStore, StoreError

__all__ = [
    "DiaryEntry",
    "EntryNotFoundError",
    "EntrySource",
    "EntryStore",
    "JsonEntryStore",
    "LEGACY_CHART_REGIONS",
    "Region",
    "SCHEMA_VERSION",
    "StoreError",
    "metric_value",
    "severity_label",
]
