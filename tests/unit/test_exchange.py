"""Tests for diary import/export documents."""

import base64
import json
from datetime import datetime, timezone

import pytest

from pleva.diary import DiaryEntry, EntryStore, JsonEntryStore, Region, StoreError
from pleva.diary import store as store_module
from pleva.diary.exchange import (
    ExchangeError,
    ImportResult,
    build_document,
    entries_from_document,
    export_to_file,
    import_entries,
    import_from_file,
    region_key,
)

UTC = timezone.utc
T1 = datetime(2025, 3, 1, 8, 0, tzinfo=UTC)
T2 = datetime(2025, 3, 2, 8, 0, tzinfo=UTC)


def test_region_keys():
    assert region_key(Region.FACE) == "papulesFace"
    assert region_key(Region.LEFT_ARM) == "papulesLeftArm"
    assert region_key(Region.RIGHT_FOOT) == "papulesRightFoot"


def test_build_document_layout():
    entry = DiaryEntry(
        timestamp=T1,
        severity=2,
        notes="itchy",
        region_counts={Region.CHEST: 4},
        photos=[b"img"],
        weekly_summary="Stable",
        summary_date=T2,
    )

    document = build_document([entry], export_date=T2)
    (record,) = document["entries"]

    assert document["version"] == 2
    assert document["exportDate"] == "2025-03-02T08:00:00Z"
    assert "id" not in record
    assert record["timestamp"] == "2025-03-01T08:00:00Z"
    assert record["papulesChest"] == 4
    assert record["papulesBelly"] == 0
    assert record["weeklySummary"] == "Stable"
    assert record["summaryDate"] == "2025-03-02T08:00:00Z"
    assert record["photos"] == [base64.b64encode(b"img").decode("ascii")]


def test_export_keeps_one_entry_per_timestamp():
    document = build_document([DiaryEntry(timestamp=T1), DiaryEntry(timestamp=T1), DiaryEntry(timestamp=T2)])

    assert len(document["entries"]) == 2


def test_version_1_document_imports_new_regions_as_zero():
    document = {
        "version": 1,
        "exportDate": "2025-03-05T00:00:00Z",
        "entries": [
            {
                "timestamp": "2025-03-01T08:00:00Z",
                "severity": 3,
                "papulesFace": 2,
                "papulesBelly": 9,
                "photos": [],
            }
        ],
    }

    (entry,) = entries_from_document(document)

    assert entry.count(Region.FACE) == 2
    assert entry.count(Region.BELLY) == 0
    assert entry.severity == 3
    assert entry.timestamp == T1


@pytest.mark.parametrize(
    "document,match",
    [
        ([], "Not a diary"),
        ({"version": 2}, "Not a diary"),
        ({"version": 7, "entries": []}, "Unsupported"),
        ({"version": 2, "entries": [{"severity": 1}]}, "missing field"),
        ({"version": 2, "entries": [{"timestamp": "yesterday"}]}, "Invalid entry"),
        ({"version": 2, "entries": [{"timestamp": "2025-03-01T08:00:00Z", "photos": ["%%%"]}]}, "Invalid entry"),
    ],
)
def test_bad_documents(document, match):
    with pytest.raises(ExchangeError, match=match):
        entries_from_document(document)


def test_import_skips_existing_timestamps():
    store = EntryStore([DiaryEntry(timestamp=T1, notes="mine")])
    document = build_document([DiaryEntry(timestamp=T1, notes="theirs"), DiaryEntry(timestamp=T2)])

    result = import_entries(store, document)

    assert result == ImportResult(imported=1, duplicates=1, photos=0)
    assert len(store) == 2
    assert [e.notes for e in store.fetch_entries() if e.timestamp == T1] == ["mine"]


def test_import_dedupes_within_document():
    store = EntryStore()
    document = build_document([DiaryEntry(timestamp=T1), DiaryEntry(timestamp=T1)], dedupe=False)

    result = import_entries(store, document)

    assert (result.imported, result.duplicates) == (1, 1)


def test_import_reassigns_colliding_ids():
    original = DiaryEntry(timestamp=T1)
    store = EntryStore([original])
    incoming = DiaryEntry(id=original.id, timestamp=T2)

    result = import_entries(store, build_document([incoming], include_ids=True))

    assert result.imported == 1
    assert len({e.id for e in store.fetch_entries()}) == 2


def test_import_reassigns_ids_repeated_within_document():
    shared = "a" * 32
    document = build_document(
        [DiaryEntry(id=shared, timestamp=T1), DiaryEntry(id=shared, timestamp=T2)], include_ids=True
    )
    store = EntryStore()

    result = import_entries(store, document)

    assert result.imported == 2
    assert len({e.id for e in store.fetch_entries()}) == 2


def test_import_commits_once(tmp_path, monkeypatch):
    writes = []
    real_write = store_module.atomic_write

    def counting_write(file_path, content):
        writes.append(file_path)
        real_write(file_path, content)

    monkeypatch.setattr(store_module, "atomic_write", counting_write)
    path = tmp_path / "diary.json"
    store = JsonEntryStore(path)
    document = build_document([DiaryEntry(timestamp=datetime(2025, 3, day, tzinfo=UTC)) for day in range(1, 11)])

    result = import_entries(store, document)

    assert result.imported == 10
    assert writes == [path]
    assert len(JsonEntryStore(path)) == 10


def test_failed_import_write_imports_nothing(tmp_path, monkeypatch):
    path = tmp_path / "diary.json"
    store = JsonEntryStore(path)
    store.add(DiaryEntry(timestamp=T1))
    before = path.read_text(encoding="utf-8")

    def failing_write(file_path, content):
        raise StoreError("disk full")

    monkeypatch.setattr(store_module, "atomic_write", failing_write)
    document = build_document([DiaryEntry(timestamp=T2), DiaryEntry(timestamp=datetime(2025, 3, 3, tzinfo=UTC))])

    with pytest.raises(StoreError, match="disk full"):
        import_entries(store, document)

    assert [e.timestamp for e in store.fetch_entries()] == [T1]
    assert path.read_text(encoding="utf-8") == before


def test_import_message():
    assert ImportResult(3, 0, 0).message == "Imported 3 new entries"
    assert ImportResult(3, 2, 0).message == "Imported 3 new entries (skipped 2 duplicates)"


def test_file_round_trip(tmp_path):
    source = EntryStore([DiaryEntry(timestamp=T1, region_counts={Region.LEFT_FOOT: 2}, photos=[b"a", b"b"])])
    path = tmp_path / "export.json"

    assert export_to_file(source, path) == 1
    target = EntryStore()
    result = import_from_file(target, path)

    assert result.imported == 1
    assert result.photos == 2
    (entry,) = target.fetch_entries()
    assert entry.count(Region.LEFT_FOOT) == 2
    assert json.loads(path.read_text(encoding="utf-8"))["version"] == 2


def test_import_unreadable_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("not json", encoding="utf-8")

    with pytest.raises(ExchangeError, match="Cannot read"):
        import_from_file(EntryStore(), path)
