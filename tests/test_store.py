"""Tests for vigil/store.py — read-through, upsert, replace, persistence."""

import json

import pytest

from vigil.edits import set_flag
from vigil.models import DayRecord
from vigil.store import JsonFilePersistence, MemoryPersistence, RecordStore, open_store


def test_get_absent_synthesizes_blank_without_writing(store, persistence):
    rec = store.get("2024-01-01")
    assert rec == DayRecord.blank("2024-01-01")
    assert "2024-01-01" not in store
    assert persistence.saves == 0


def test_get_normalizes_stored_value(store):
    store.replace_all({"2024-01-01": {"morning": {"breathMinutes": 5}}})
    rec = store.get("2024-01-01")
    assert rec.date == "2024-01-01"
    assert rec.morning.breath_minutes == 5
    assert rec.evening.rosary_decades == 0


def test_upsert_creates_record(store, persistence):
    rec = store.upsert("2024-01-01", set_flag("midday", "stillness", True))
    assert rec.midday.stillness is True
    assert store.raw("2024-01-01") == rec.to_dict()
    assert persistence.saves == 1


def test_upsert_preserves_other_keys(store, persistence):
    original = {
        "2024-01-01": {"notes": "legacy", "morning": {"breathMinutes": 900}},
        "2024-01-02": {"weird": [1, 2, 3]},
        "2024-01-03": None,
    }
    store.replace_all(json.loads(json.dumps(original)))
    store.upsert("2024-01-04", set_flag("evening", "examen", True))
    saved = json.loads(persistence.blob)
    for key, value in original.items():
        assert json.dumps(saved[key], sort_keys=True) == json.dumps(value, sort_keys=True)
    assert saved["2024-01-04"]["evening"]["examen"] is True


def test_upsert_normalizes_before_transform(store):
    store.replace_all({"2024-01-01": {"morning": "garbage"}})
    seen = []

    def transform(rec):
        seen.append(rec)
        return rec

    store.upsert("2024-01-01", transform)
    assert seen[0].morning.breath_minutes == 0
    assert store.raw("2024-01-01")["morning"] == {"consecration": False, "breathMinutes": 0, "jesusPrayerCount": 0}


def test_reset_clears_everything(store, persistence):
    store.upsert("2024-01-01", set_flag("morning", "consecration", True))
    store.reset()
    assert len(store) == 0
    assert json.loads(persistence.blob) == {}


def test_snapshot_is_a_copy(store):
    store.upsert("2024-01-01", set_flag("morning", "consecration", True))
    snap = store.snapshot()
    snap["2024-01-02"] = {}
    assert "2024-01-02" not in store


def test_corrupt_memory_state_loads_empty():
    store = RecordStore(MemoryPersistence("{not json"), clock=lambda: "2024-01-01").load()
    assert len(store) == 0


def test_non_object_state_loads_empty():
    store = RecordStore(MemoryPersistence("[1, 2]"), clock=lambda: "2024-01-01").load()
    assert len(store) == 0


def test_json_file_round_trip(tmp_path):
    path = tmp_path / "data" / "tracker.json"
    store = RecordStore(JsonFilePersistence(path), clock=lambda: "2024-01-01").load()
    store.upsert("2024-01-01", set_flag("weekly", "mass", True))

    reopened = RecordStore(JsonFilePersistence(path)).load()
    assert reopened.get("2024-01-01").weekly.mass is True


def test_json_file_corrupt_is_empty(tmp_path):
    path = tmp_path / "tracker.json"
    path.write_text("{\"2024-01-01\": ", encoding="utf-8")
    store = RecordStore(JsonFilePersistence(path)).load()
    assert len(store) == 0


def test_json_file_missing_is_empty(tmp_path):
    store = RecordStore(JsonFilePersistence(tmp_path / "nope.json")).load()
    assert len(store) == 0


def test_open_store_uses_workspace(workspace):
    store = open_store()
    assert len(store) == 3
    assert store.get("2024-03-05").evening.rosary_decades == 5


def test_json_file_not_utf8_is_empty(tmp_path):
    path = tmp_path / "tracker.json"
    path.write_bytes(b'{"2024-01-01": {"notes": "\xff\xfe"}}')
    store = RecordStore(JsonFilePersistence(path)).load()
    assert len(store) == 0


class FailingPersistence(MemoryPersistence):
    def save(self, data):
        raise OSError("No space left on device")


def test_failed_save_leaves_state_unchanged():
    persistence = FailingPersistence('{"2024-01-01": {"notes": "kept"}}')
    store = RecordStore(persistence, clock=lambda: "2024-01-01").load()
    with pytest.raises(OSError):
        store.upsert("2024-01-02", set_flag("morning", "consecration", True))
    with pytest.raises(OSError):
        store.reset()
    assert store.snapshot() == {"2024-01-01": {"notes": "kept"}}
    assert "2024-01-02" not in store
