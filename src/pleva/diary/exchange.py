"""Import/export of diary entries.

Document layout (JSON, camelCase keys, ISO-8601 UTC dates, base64 photos)::

    {
      "version": 2,
      "exportDate": "2025-03-07T09:30:00Z",
      "entries": [
        {"timestamp": "...", "notes": "...", "severity": 2, "location": "",
         "weeklySummary": null, "summaryDate": null,
         "papulesFace": 3, ..., "papulesRightFoot": 0, "photos": ["..."]}
      ]
    }

Version 1 documents predate the belly/feet regions; those import as zero.

Duplicate detection is exact timestamp equality: an incoming record is
inserted only if no stored record (or record inserted earlier in the same
import) has the same timestamp.
"""

from __future__ import annotations

import base64
import binascii
import json
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from ..core.time import format_utc_iso8601, get_current_time, parse_utc_iso8601
from ..observability import get_logger, log_timing
from .models import SCHEMA_VERSION, DiaryEntry, Region
from .store import EntryStore, atomic_write

__all__ = [
    "ExchangeError",
    "ImportResult",
    "SUPPORTED_VERSIONS",
    "build_document",
    "entries_from_document",
    "export_to_file",
    "import_entries",
    "import_from_file",
    "region_key",
]

log = get_logger("diary")

SUPPORTED_VERSIONS = (1, 2)


class ExchangeError(Exception):
    """Raised for unreadable or unsupported exchange documents."""


@dataclass(frozen=True)
class ImportResult:
    """Outcome of merging an exchange document into a store."""

    imported: int
    duplicates: int
    photos: int

    @property
    def message(self) -> str:
        text = f"Imported {self.imported} new entries"
        if self.duplicates > 0:
            text += f" (skipped {self.duplicates} duplicates)"
        return text


def region_key(region: Region) -> str:
    """Document key for a region, e.g. ``papulesLeftArm``."""
    return "papules" + "".join(part.title() for part in region.value.split("_"))


def _entry_to_record(entry: DiaryEntry, include_id: bool = False) -> dict[str, Any]:
    record: dict[str, Any] = {"id": entry.id} if include_id else {}
    record.update({
        "timestamp": format_utc_iso8601(entry.timestamp),
        "notes": entry.notes,
        "severity": entry.severity,
        "location": entry.location,
        "weeklySummary": entry.weekly_summary,
        "summaryDate": format_utc_iso8601(entry.summary_date) if entry.summary_date else None,
    })
    for region in Region:
        record[region_key(region)] = entry.count(region)
    record["photos"] = [base64.b64encode(photo).decode("ascii") for photo in entry.photos]
    return record


def _record_to_entry(record: dict[str, Any], version: int) -> DiaryEntry:
    try:
        counts = {
            region: int(record.get(region_key(region), 0))
            for region in Region
            if region.since_version <= version
        }
        summary_date = record.get("summaryDate")
        identity = {"id": record["id"]} if record.get("id") else {}
        return DiaryEntry(
            **identity,
            timestamp=parse_utc_iso8601(record["timestamp"]),
            notes=record.get("notes", ""),
            severity=int(record.get("severity", 1)),
            location=record.get("location", ""),
            weekly_summary=record.get("weeklySummary"),
            summary_date=parse_utc_iso8601(summary_date) if summary_date else None,
            region_counts=counts,
            photos=[base64.b64decode(photo, validate=True) for photo in record.get("photos", [])],
        )
    except KeyError as exc:
        raise ExchangeError(f"Entry record missing field: {exc}") from exc
    except (TypeError, ValueError, binascii.Error) as exc:
        raise ExchangeError(f"Invalid entry record: {exc}") from exc


def build_document(
    entries: Iterable[DiaryEntry],
    *,
    dedupe: bool = True,
    include_ids: bool = False,
    export_date: datetime | None = None,
) -> dict[str, Any]:
    """Build an exchange document.

    With ``dedupe`` only the first entry per timestamp is kept. Entry ids are
    written only for the store's own file (``include_ids``); exports omit them.
    """
    records = []
    seen: set[datetime] = set()
    for entry in entries:
        if dedupe:
            if entry.timestamp in seen:
                continue
            seen.add(entry.timestamp)
        records.append(_entry_to_record(entry, include_ids))

    return {
        "version": SCHEMA_VERSION,
        "exportDate": format_utc_iso8601(export_date or get_current_time()),
        "entries": records,
    }


def entries_from_document(document: Any) -> list[DiaryEntry]:
    """Decode entries from a parsed exchange document.

    Raises
    ------
    ExchangeError
        If the document is malformed or its version unsupported
    """
    if not isinstance(document, dict) or not isinstance(document.get("entries"), list):
        raise ExchangeError("Not a diary export document")

    version = document.get("version")
    if version not in SUPPORTED_VERSIONS:
        raise ExchangeError(f"Unsupported export version: {version!r}")

    return [_record_to_entry(record, version) for record in document["entries"]]


def import_entries(store: EntryStore, document: Any) -> ImportResult:
    """Merge a document into ``store`` with timestamp-equality dedup.

    New entries are committed in one batch, so a failed write imports nothing.
    """
    incoming = entries_from_document(document)
    existing = store.timestamps()
    accepted: list[DiaryEntry] = []
    batch_ids: set[str] = set()

    for entry in incoming:
        if entry.timestamp in existing:
            continue
        if entry.id in store or entry.id in batch_ids:
            entry.id = uuid.uuid4().hex
        accepted.append(entry)
        batch_ids.add(entry.id)
        existing.add(entry.timestamp)

    store.add_many(accepted)

    result = ImportResult(
        imported=len(accepted),
        duplicates=len(incoming) - len(accepted),
        photos=sum(len(entry.photos) for entry in incoming),
    )
    log.info(result.message, imported=result.imported, duplicates=result.duplicates, photos=result.photos)
    return result


@log_timing(component="diary")
def export_to_file(store: EntryStore, path: Path | str) -> int:
    """Write the store's entries to ``path``; returns the number exported."""
    document = build_document(store.fetch_entries())
    atomic_write(Path(path), json.dumps(document, indent=2, ensure_ascii=False))
    count = len(document["entries"])
    log.info("Export successful", path=str(path), entries=count)
    return count


@log_timing(component="diary")
def import_from_file(store: EntryStore, path: Path | str) -> ImportResult:
    """Read an export file and merge it into ``store``.

    Raises
    ------
    ExchangeError
        If the file cannot be read or parsed
    """
    try:
        document = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ExchangeError(f"Cannot read {path}: {exc}") from exc
    return import_entries(store, document)
