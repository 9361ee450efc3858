"""PLEVA diary: symptom entries and calendar-aware trend series."""

__version__ = "0.3.0"
