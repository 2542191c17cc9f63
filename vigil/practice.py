"""Practice predicates and day summaries for Vigil."""

from __future__ import annotations

from typing import Any

from vigil.models import DayRecord


def _as_record(day: DayRecord | dict[str, Any] | None) -> DayRecord | None:
    if day is None:
        return None
    if isinstance(day, DayRecord):
        return day
    return DayRecord.from_dict(day, default_date="")


def any_practice_done(day: DayRecord | dict[str, Any] | None) -> bool:
    """True if at least one active practice was kept that day.

    Temptation counters and weekly anchors do not count.
    """
    rec = _as_record(day)
    if rec is None:
        return False
    return (
        rec.morning.consecration
        or rec.morning.breath_minutes > 0
        or rec.morning.jesus_prayer_count > 0
        or rec.midday.stillness
        or rec.midday.body_blessing
        or rec.evening.examen
        or rec.evening.rosary_decades > 0
        or rec.evening.night_silence
    )


def day_has_activity(day: DayRecord | dict[str, Any] | None) -> bool:
    """True if anything at all was logged: practices, text, counters or anchors."""
    rec = _as_record(day)
    if rec is None:
        return False
    if rec.scripture.strip() or rec.notes.strip():
        return True
    if any_practice_done(rec):
        return True
    t = rec.temptations
    if t.urges_noted > 0 or t.victories > 0 or t.lapses > 0:
        return True
    return any(rec.weekly.to_dict().values())


def summarize_day(day: DayRecord) -> str:
    """Build a one-line summary for the day."""
    kept = []
    if day.morning.consecration:
        kept.append("consecration")
    if day.morning.breath_minutes > 0:
        kept.append(f"{day.morning.breath_minutes} min breath prayer")
    if day.morning.jesus_prayer_count > 0:
        kept.append(f"{day.morning.jesus_prayer_count} Jesus Prayers")
    if day.midday.stillness:
        kept.append("stillness")
    if day.midday.body_blessing:
        kept.append("body blessing")
    if day.evening.examen:
        kept.append("examen")
    if day.evening.rosary_decades > 0:
        n = day.evening.rosary_decades
        kept.append(f"{n} rosary decade{'' if n == 1 else 's'}")
    if day.evening.night_silence:
        kept.append("night silence")

    parts = [", ".join(kept) if kept else "no practices logged"]
    t = day.temptations
    if t.victories or t.lapses:
        parts.append(f"victories {t.victories} / lapses {t.lapses}")
    if day.scripture.strip():
        parts.append(f"scripture: {day.scripture.strip()}")
    return f"{day.date}: " + "; ".join(parts)
