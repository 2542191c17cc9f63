"""JSON and CSV export/import for Vigil.

The CSV header names, column order and 1/0 boolean encoding are a wire
format: previously exported files must keep round-tripping.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from vigil.errors import InvalidImport
from vigil.fileio import dump_json, write_text_atomic
from vigil.models import DayRecord
from vigil.store import RecordStore
from vigil.workspace import exports_dir

logger = logging.getLogger(__name__)

Store = dict[str, Any]

CSV_HEADER = [
    "Date",
    "Scripture",
    "Notes",
    "Consecration",
    "BreathMinutes",
    "JesusPrayerCount",
    "Stillness",
    "BodyBlessing",
    "Examen",
    "RosaryDecades",
    "NightSilence",
    "UrgesNoted",
    "Victories",
    "Lapses",
    "Mass",
    "Confession",
    "Fasting",
    "Accountability",
]


# ── JSON ──────────────────────────────────────────────────────


def to_json(store: Store) -> str:
    """Full store as a pretty-printed JSON object keyed by date."""
    return dump_json(store or {})


def from_json(text: str) -> Store:
    """Parse an imported backup. The object is returned as-is, not normalized."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise InvalidImport(f"Import is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidImport(f"Import must be a JSON object, got {type(data).__name__}")
    return data


def import_into(store: RecordStore, text: str) -> int:
    """Replace the whole store with an imported backup; returns the day count.

    On InvalidImport the store is left unchanged.
    """
    data = from_json(text)
    store.replace_all(data)
    logger.info("Imported %d day records", len(data))
    return len(data)


# ── CSV ───────────────────────────────────────────────────────


def csv_quote(value: Any) -> str:
    return '"' + ("" if value is None else str(value)).replace('"', '""') + '"'


def _flag(value: bool) -> str:
    return "1" if value else "0"


def _csv_row(rec: DayRecord) -> list[str]:
    return [
        rec.date,
        csv_quote(rec.scripture),
        csv_quote(rec.notes),
        _flag(rec.morning.consecration),
        str(rec.morning.breath_minutes),
        str(rec.morning.jesus_prayer_count),
        _flag(rec.midday.stillness),
        _flag(rec.midday.body_blessing),
        _flag(rec.evening.examen),
        str(rec.evening.rosary_decades),
        _flag(rec.evening.night_silence),
        str(rec.temptations.urges_noted),
        str(rec.temptations.victories),
        str(rec.temptations.lapses),
        _flag(rec.weekly.mass),
        _flag(rec.weekly.confession),
        _flag(rec.weekly.fasting),
        _flag(rec.weekly.accountability),
    ]


def to_csv(store: Store) -> str:
    """One header row, then one row per day in ascending date order."""
    rows = [",".join(CSV_HEADER)]
    for key in sorted(store):
        rec = DayRecord.from_dict(store[key], default_date=key)
        rows.append(",".join(_csv_row(rec)))
    return "\n".join(rows)


# ── Export files ──────────────────────────────────────────────

EXPORT_KINDS = {"json": to_json, "csv": to_csv}


def export_filename(kind: str, today: str) -> str:
    return f"vigil-export-{today}.{kind}"


def write_export(store: Store, kind: str, today: str, directory: Path | None = None) -> Path:
    """Write a JSON or CSV export into the workspace exports directory."""
    if kind not in EXPORT_KINDS:
        raise ValueError(f"Unknown export kind: {kind}")
    if directory is None:
        directory = exports_dir()
    path = directory / export_filename(kind, today)
    write_text_atomic(path, EXPORT_KINDS[kind](store) + "\n")
    logger.info("Exported %d day records to %s", len(store), path)
    return path
