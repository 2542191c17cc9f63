"""Field-level transforms for ``RecordStore.upsert``.

The store never range-checks writes. Collaborators build their edits here,
where counter writes are clamped to the bounds the check-in screens use.
"""

from __future__ import annotations

from typing import Any

from vigil.errors import OutOfRangeInput
from vigil.models import SECTIONS, DayRecord
from vigil.store import Transform


BOUNDS: dict[str, tuple[int, int]] = {
    "breathMinutes": (0, 600),
    "jesusPrayerCount": (0, 100000),
    "rosaryDecades": (0, 5),
    "urgesNoted": (0, 100000),
    "lapses": (0, 100000),
    "victories": (0, 100000),
}

FLAG_FIELDS: dict[str, tuple[str, ...]] = {
    "morning": ("consecration",),
    "midday": ("stillness", "bodyBlessing"),
    "evening": ("examen", "nightSilence"),
    "weekly": ("mass", "confession", "fasting", "accountability"),
}

COUNT_FIELDS: dict[str, tuple[str, ...]] = {
    "morning": ("breathMinutes", "jesusPrayerCount"),
    "evening": ("rosaryDecades",),
    "temptations": ("urgesNoted", "lapses", "victories"),
}

TEXT_FIELDS = ("scripture", "notes")


def clamp_value(field: str, value: int) -> int:
    """Clamp *value* into the field's bounds; unbounded fields only floor at 0."""
    low, high = BOUNDS.get(field, (0, None))
    value = max(low, int(value))
    return value if high is None else min(high, value)


def check_value(field: str, value: int) -> int:
    """Return *value* unchanged, or raise OutOfRangeInput."""
    low, high = BOUNDS.get(field, (0, None))
    if value < low or (high is not None and value > high):
        raise OutOfRangeInput(field, value, low, high)
    return value


def _require(section: str, field: str, table: dict[str, tuple[str, ...]]) -> None:
    if section not in SECTIONS:
        raise ValueError(f"Unknown section: {section}")
    if field not in table.get(section, ()):
        raise ValueError(f"Unknown field for {section}: {field}")


def _with_section(rec: DayRecord, section: str, field: str, value: Any) -> DayRecord:
    d = rec.to_dict()
    d[section] = {**d[section], field: value}
    return DayRecord.from_dict(d, default_date=rec.date)


def set_flag(section: str, field: str, value: bool) -> Transform:
    _require(section, field, FLAG_FIELDS)

    def apply(rec: DayRecord) -> DayRecord:
        return _with_section(rec, section, field, bool(value))

    return apply


def set_count(section: str, field: str, value: int) -> Transform:
    """Set a counter, clamped to its bounds."""
    _require(section, field, COUNT_FIELDS)
    clamped = clamp_value(field, value)

    def apply(rec: DayRecord) -> DayRecord:
        return _with_section(rec, section, field, clamped)

    return apply


def add_count(section: str, field: str, delta: int) -> Transform:
    """Increment a counter from its stored value, then clamp.

    The stored value may itself be out of range (imported legacy data);
    the increment builds on it as-is before the clamp.
    """
    _require(section, field, COUNT_FIELDS)

    def apply(rec: DayRecord) -> DayRecord:
        current = rec.to_dict()[section][field]
        return _with_section(rec, section, field, clamp_value(field, current + int(delta)))

    return apply


def set_text(field: str, value: str) -> Transform:
    if field not in TEXT_FIELDS:
        raise ValueError(f"Unknown text field: {field}")

    def apply(rec: DayRecord) -> DayRecord:
        d = rec.to_dict()
        d[field] = "" if value is None else str(value)
        return DayRecord.from_dict(d, default_date=rec.date)

    return apply


def add_breath_minutes(minutes: int) -> Transform:
    """Log a finished meditation timer session."""
    return add_count("morning", "breathMinutes", minutes)


def _payload_int(value: Any) -> int:
    try:
        return int(value)
    except OverflowError as e:
        raise ValueError(f"Number out of range: {value!r}") from e


def apply_edit(payload: dict[str, Any], strict: bool = False) -> Transform:
    """Build a transform from a ``{"section", "field", "value"}`` edit payload.

    Text fields omit ``section``. Counters accept ``"delta"`` instead of
    ``"value"``. With *strict*, out-of-range counter values raise
    OutOfRangeInput instead of being clamped.
    """
    field = str(payload.get("field", ""))
    section = payload.get("section")
    if section is None:
        return set_text(field, payload.get("value", ""))
    section = str(section)
    if field in FLAG_FIELDS.get(section, ()):
        return set_flag(section, field, bool(payload.get("value")))
    if "delta" in payload:
        return add_count(section, field, _payload_int(payload["delta"]))
    value = _payload_int(payload.get("value", 0))
    if strict:
        check_value(field, value)
    return set_count(section, field, value)
