"""Entry store: the queryable collection the trend engine reads from.

``EntryStore`` keeps entries in memory behind a lock and hands out copies, so
callers always aggregate over an immutable snapshot. ``JsonEntryStore`` adds
persistence in the export document format with atomic writes.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Protocol

from ..core.time import ensure_timezone, local_date
from ..observability import get_logger
from .models import DiaryEntry

__all__ = [
    "EntryNotFoundError",
    "EntrySource",
    "EntryStore",
    "JsonEntryStore",
    "StoreError",
]

log = get_logger("diary")


class StoreError(Exception):
    """Raised when the store cannot be read or written."""


class EntryNotFoundError(KeyError):
    """Raised when an entry id is unknown."""


class EntrySource(Protocol):
    """Anything that can produce a snapshot of diary entries."""

    def fetch_entries(self) -> list[DiaryEntry]:
        ...


_UPDATABLE_FIELDS = frozenset(
    {
        "timestamp",
        "notes",
        "severity",
        "photos",
        "location",
        "weekly_summary",
        "summary_date",
        "region_counts",
    }
)


class EntryStore:
    """In-memory entry collection with stable identity.

    Example:
        >>> store = EntryStore()
        >>> entry = store.add(DiaryEntry(severity=2, region_counts={Region.FACE: 3}))
        >>> store.update(entry.id, severity=3)
        >>> [e.severity for e in store.fetch_entries()]
        [3]
    """

    def __init__(self, entries: Iterable[DiaryEntry] | None = None) -> None:
        self._lock = threading.RLock()
        self._entries: dict[str, DiaryEntry] = {}
        for entry in entries or ():
            self._entries[entry.id] = copy.deepcopy(entry)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        with self._lock:
            return entry_id in self._entries

    def add(self, entry: DiaryEntry) -> DiaryEntry:
        return self.add_many([entry])[0]

    def add_many(self, entries: Iterable[DiaryEntry]) -> list[DiaryEntry]:
        """Add entries with a single commit; either all are stored or none.

        Raises
        ------
        StoreError
            If an id already exists (or repeats) or the commit fails
        """
        incoming = [copy.deepcopy(entry) for entry in entries]
        if not incoming:
            return []

        with self._lock:
            proposed = dict(self._entries)
            for entry in incoming:
                if entry.id in proposed:
                    raise StoreError(f"Entry already exists: {entry.id}")
                proposed[entry.id] = entry
            self._commit(proposed)

        log.debug("Entries added", count=len(incoming), entry_ids=[e.id for e in incoming])
        return [copy.deepcopy(entry) for entry in incoming]

    def get(self, entry_id: str) -> DiaryEntry:
        with self._lock:
            try:
                return copy.deepcopy(self._entries[entry_id])
            except KeyError:
                raise EntryNotFoundError(entry_id) from None

    def update(self, entry_id: str, **changes: Any) -> DiaryEntry:
        """Update fields of an entry, including its timestamp.

        Raises
        ------
        EntryNotFoundError
            If the entry does not exist
        ValueError
            On unknown fields or invalid values
        """
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        with self._lock:
            if entry_id not in self._entries:
                raise EntryNotFoundError(entry_id)
            current = self._entries[entry_id]
            values = {name: getattr(current, name) for name in _UPDATABLE_FIELDS}
            values.update(changes)
            updated = DiaryEntry(id=entry_id, **copy.deepcopy(values))
            proposed = dict(self._entries)
            proposed[entry_id] = updated
            self._commit(proposed)

        log.debug("Entry updated", entry_id=entry_id, fields=sorted(changes))
        return copy.deepcopy(updated)

    def delete(self, entry_id: str) -> None:
        with self._lock:
            if entry_id not in self._entries:
                raise EntryNotFoundError(entry_id)
            proposed = {key: entry for key, entry in self._entries.items() if key != entry_id}
            self._commit(proposed)
        log.debug("Entry deleted", entry_id=entry_id)

    def fetch_entries(self) -> list[DiaryEntry]:
        """Snapshot of all entries, newest first."""
        with self._lock:
            entries = [copy.deepcopy(e) for e in self._entries.values()]
        return sorted(entries, key=lambda e: e.timestamp, reverse=True)

    def timestamps(self) -> set[datetime]:
        with self._lock:
            return {e.timestamp for e in self._entries.values()}

    def entries_on(self, day: date, tz: Any = None) -> list[DiaryEntry]:
        """Entries whose timestamp falls on local calendar ``day``."""
        return [e for e in self.fetch_entries() if local_date(e.timestamp, tz) == day]

    def latest_since(self, start: datetime) -> DiaryEntry | None:
        """Most recent entry with ``timestamp >= start``."""
        start = ensure_timezone(start)
        entries = self.fetch_entries()
        if entries and entries[0].timestamp >= start:
            return entries[0]
        return None

    def _commit(self, proposed: dict[str, DiaryEntry]) -> None:
        """Persist ``proposed`` and only then make it the current state."""
        self._persist(proposed)
        self._entries = proposed

    def _persist(self, entries: dict[str, DiaryEntry]) -> None:
        """Hook called with the lock held before a new state is swapped in."""


class JsonEntryStore(EntryStore):
    """Entry store persisted as an export document on disk.

    A failed write leaves both the file and the in-memory state unchanged.

    Example:
        >>> store = JsonEntryStore(Path("data/diary.json"))
        >>> store.add(DiaryEntry(severity=2))
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> list[DiaryEntry]:
        from .exchange import ExchangeError, entries_from_document

        if not self.path.exists():
            return []
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
            return entries_from_document(document)
        except (OSError, json.JSONDecodeError, ExchangeError) as exc:
            raise StoreError(f"Cannot load diary from {self.path}: {exc}") from exc

    def _persist(self, entries: dict[str, DiaryEntry]) -> None:
        from .exchange import build_document

        document = build_document(list(entries.values()), dedupe=False, include_ids=True)
        atomic_write(self.path, json.dumps(document, indent=2, ensure_ascii=False))


def atomic_write(file_path: Path, content: str) -> None:
    """Atomic file write (temp file + fsync + rename).

    Raises
    ------
    StoreError
        If write fails
    """
    tmp_path: Path | None = None
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=file_path.parent,
            prefix=f".{file_path.name}.tmp",
            delete=False,
        ) as tmp_file:
            tmp_path = Path(tmp_file.name)
            tmp_file.write(content)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())

        tmp_path.replace(file_path)

    except OSError as exc:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise StoreError(f"Atomic write failed for {file_path}: {exc}") from exc
