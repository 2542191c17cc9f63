"""Shared test fixtures for Vigil tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from vigil.store import MemoryPersistence, RecordStore


TODAY = "2024-03-06"  # a Wednesday


def done_day(day: str, **morning) -> dict:
    """A raw record with one practice kept."""
    return {"date": day, "morning": {"consecration": True, **morning}}


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary workspace with a profile and a small store."""
    root = tmp_path / "workspace"
    (root / "data").mkdir(parents=True)

    (root / "profile.yaml").write_text(
        yaml.dump({"timezone": "UTC"}, default_flow_style=False), encoding="utf-8"
    )

    store = {
        "2024-03-04": done_day("2024-03-04"),
        "2024-03-05": {"date": "2024-03-05", "evening": {"rosaryDecades": 5}, "scripture": "Psalm 23"},
        "2024-03-06": {"date": "2024-03-06", "morning": {"breathMinutes": 20}},
    }
    (root / "data" / "tracker.json").write_text(json.dumps(store, indent=2), encoding="utf-8")

    monkeypatch.setenv("VIGIL_ROOT", str(root))
    return root


@pytest.fixture
def persistence() -> MemoryPersistence:
    return MemoryPersistence()


@pytest.fixture
def store(persistence: MemoryPersistence) -> RecordStore:
    """Empty memory-backed store with a fixed clock."""
    return RecordStore(persistence, clock=lambda: TODAY).load()
