"""Typed dataclasses for the Vigil data model.

Day records use from_dict/to_dict for JSON serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing, null or wrong-typed values use defaults,
so ``DayRecord.from_dict`` doubles as the record normalizer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from vigil.workspace import today_str


# ── Coercion helpers ──────────────────────────────────────────


def _section(d: Any, key: str) -> dict[str, Any]:
    value = d.get(key) if isinstance(d, dict) else None
    return value if isinstance(value, dict) else {}


def _as_bool(value: Any) -> bool:
    return False if value is None else bool(value)


def _as_int(value: Any) -> int:
    """Coerce to int without range checks; legacy out-of-range values survive."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _pick(d: dict[str, Any], camel: str, snake: str) -> Any:
    return d.get(camel, d.get(snake))


# ── Day record sections ───────────────────────────────────────


@dataclass
class Morning:
    consecration: bool = False
    breath_minutes: int = 0
    jesus_prayer_count: int = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Morning:
        return cls(
            consecration=_as_bool(d.get("consecration")),
            breath_minutes=_as_int(_pick(d, "breathMinutes", "breath_minutes")),
            jesus_prayer_count=_as_int(_pick(d, "jesusPrayerCount", "jesus_prayer_count")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "consecration": self.consecration,
            "breathMinutes": self.breath_minutes,
            "jesusPrayerCount": self.jesus_prayer_count,
        }


@dataclass
class Midday:
    stillness: bool = False
    body_blessing: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Midday:
        return cls(
            stillness=_as_bool(d.get("stillness")),
            body_blessing=_as_bool(_pick(d, "bodyBlessing", "body_blessing")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"stillness": self.stillness, "bodyBlessing": self.body_blessing}


@dataclass
class Evening:
    examen: bool = False
    rosary_decades: int = 0  # 0-5, clamped by callers
    night_silence: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Evening:
        return cls(
            examen=_as_bool(d.get("examen")),
            rosary_decades=_as_int(_pick(d, "rosaryDecades", "rosary_decades")),
            night_silence=_as_bool(_pick(d, "nightSilence", "night_silence")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "examen": self.examen,
            "rosaryDecades": self.rosary_decades,
            "nightSilence": self.night_silence,
        }


@dataclass
class Temptations:
    urges_noted: int = 0
    lapses: int = 0
    victories: int = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Temptations:
        return cls(
            urges_noted=_as_int(_pick(d, "urgesNoted", "urges_noted")),
            lapses=_as_int(d.get("lapses")),
            victories=_as_int(d.get("victories")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "urgesNoted": self.urges_noted,
            "lapses": self.lapses,
            "victories": self.victories,
        }


WEEKLY_ANCHORS: dict[str, str] = {
    "mass": "Sunday Mass",
    "confession": "Confession",
    "fasting": "Fasting / abstinence",
    "accountability": "Accountability check-in",
}


@dataclass
class Weekly:
    mass: bool = False
    confession: bool = False
    fasting: bool = False
    accountability: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Weekly:
        return cls(**{key: _as_bool(d.get(key)) for key in WEEKLY_ANCHORS})

    def to_dict(self) -> dict[str, Any]:
        return {key: getattr(self, key) for key in WEEKLY_ANCHORS}


SECTIONS = ("morning", "midday", "evening", "temptations", "weekly")


@dataclass
class DayRecord:
    """All observances logged for one calendar date (key ``YYYY-MM-DD``)."""

    date: str = ""
    scripture: str = ""
    notes: str = ""
    morning: Morning = field(default_factory=Morning)
    midday: Midday = field(default_factory=Midday)
    evening: Evening = field(default_factory=Evening)
    temptations: Temptations = field(default_factory=Temptations)
    weekly: Weekly = field(default_factory=Weekly)

    @classmethod
    def from_dict(cls, d: Any, default_date: str | None = None) -> DayRecord:
        """Normalize arbitrary input into a fully populated record.

        Never raises. A missing date falls back to *default_date*, then to
        today's date from the workspace clock.
        """
        raw = d if isinstance(d, dict) else {}
        day = _as_text(raw.get("date"))
        if not day:
            day = default_date if default_date is not None else today_str()
        return cls(
            date=day,
            scripture=_as_text(raw.get("scripture")),
            notes=_as_text(raw.get("notes")),
            morning=Morning.from_dict(_section(raw, "morning")),
            midday=Midday.from_dict(_section(raw, "midday")),
            evening=Evening.from_dict(_section(raw, "evening")),
            temptations=Temptations.from_dict(_section(raw, "temptations")),
            weekly=Weekly.from_dict(_section(raw, "weekly")),
        )

    @classmethod
    def blank(cls, day: str) -> DayRecord:
        return cls(date=day)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "scripture": self.scripture,
            "notes": self.notes,
            "morning": self.morning.to_dict(),
            "midday": self.midday.to_dict(),
            "evening": self.evening.to_dict(),
            "temptations": self.temptations.to_dict(),
            "weekly": self.weekly.to_dict(),
        }


def normalize_day(d: Any, default_date: str | None = None) -> dict[str, Any]:
    """Dict-in, dict-out form of ``DayRecord.from_dict``."""
    return DayRecord.from_dict(d, default_date).to_dict()


# ── Derived values ────────────────────────────────────────────


@dataclass
class Totals:
    breath_minutes: int = 0
    jesus_prayer_count: int = 0
    rosary_decades: int = 0
    victories: int = 0
    lapses: int = 0
    urges_noted: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "breathMinutes": self.breath_minutes,
            "jesusPrayerCount": self.jesus_prayer_count,
            "rosaryDecades": self.rosary_decades,
            "victories": self.victories,
            "lapses": self.lapses,
            "urgesNoted": self.urges_noted,
        }


@dataclass
class WeekSummary:
    start: str = ""
    end: str = ""
    breath_minutes: int = 0
    jesus_prayer_count: int = 0
    rosary_decades: int = 0
    anchors: dict[str, bool] = field(default_factory=dict)

    @property
    def completed_count(self) -> int:
        return sum(1 for done in self.anchors.values() if done)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "totals": {
                "breathMinutes": self.breath_minutes,
                "jesusPrayerCount": self.jesus_prayer_count,
                "rosaryDecades": self.rosary_decades,
            },
            "anchors": dict(self.anchors),
            "completedCount": self.completed_count,
            "totalAnchors": len(WEEKLY_ANCHORS),
        }


@dataclass
class MonthDot:
    date: str | None = None  # None for leading placeholders
    filled: bool = False

    @property
    def is_placeholder(self) -> bool:
        return self.date is None

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "filled": self.filled}


@dataclass
class MetricPoint:
    date: str = ""
    value: int = 0
    end: str | None = None  # weekly points only

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"date": self.date, "value": self.value}
        if self.end is not None:
            d["end"] = self.end
        return d


@dataclass
class MetricHighlights:
    total: int = 0
    max_value: int = 0
    max_date: str | None = None
    max_end: str | None = None  # weekly view only
    current_streak: int = 0
    longest_streak: int = 0
    unit: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "maxValue": self.max_value,
            "maxDate": self.max_date,
            "maxEnd": self.max_end,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "unit": self.unit,
        }


@dataclass
class MetricSummary:
    """Latest point and the trailing average (7 days or 4 weeks)."""

    last_value: int | None = None
    last_date: str | None = None
    average_value: float | None = None
    average_label: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "lastValue": self.last_value,
            "lastDate": self.last_date,
            "averageValue": self.average_value,
            "averageLabel": self.average_label,
        }
