"""Aggregation engine for Vigil.

Pure functions over a store snapshot (``{date_key: raw_record}``). Nothing
here mutates its input; every derived value is recomputed from the full
history on each call.
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date, timedelta
from typing import Any, Callable, Sequence

from vigil.models import (
    WEEKLY_ANCHORS,
    DayRecord,
    MetricHighlights,
    MetricPoint,
    MetricSummary,
    MonthDot,
    Totals,
    WeekSummary,
)
from vigil.practice import any_practice_done, day_has_activity

Store = dict[str, Any]


# ── Date helpers ──────────────────────────────────────────────


def _as_date(d: str | date) -> date:
    """Parse a YYYY-MM-DD key; other ISO spellings (20240306, 2024-W10-3) are rejected."""
    if isinstance(d, date):
        return d
    parsed = date.fromisoformat(d)
    if parsed.isoformat() != d:
        raise ValueError(f"Not a YYYY-MM-DD date: {d!r}")
    return parsed


def _record(store: Store, key: str) -> DayRecord | None:
    """Normalized record for *key*, None when the key is absent."""
    if key not in store:
        return None
    return DayRecord.from_dict(store[key], default_date=key)


def week_range(any_date_in_week: str | date) -> list[str]:
    """Monday..Sunday date keys of the week containing the date."""
    d = _as_date(any_date_in_week)
    monday = d - timedelta(days=d.weekday())
    return [(monday + timedelta(days=i)).isoformat() for i in range(7)]


def _check_anchor(flag: str) -> None:
    if flag not in WEEKLY_ANCHORS:
        raise ValueError(f"Unknown weekly anchor: {flag}")


# ── Streaks ───────────────────────────────────────────────────


def streak(store: Store, today: str | date) -> int:
    """Consecutive practice days ending at *today*, inclusive.

    Walks backward one day at a time and stops at the first day that is
    absent or has no practice, which may be *today* itself.
    """
    d = _as_date(today)
    count = 0
    while any_practice_done(_record(store, d.isoformat())):
        count += 1
        d -= timedelta(days=1)
    return count


def longest_streak(store: Store) -> int:
    """Longest run of consecutive practice days anywhere in the history."""
    longest = 0
    current = 0
    prev: date | None = None
    for key in sorted(store):
        try:
            d = _as_date(key)
        except (TypeError, ValueError):
            continue
        if not any_practice_done(_record(store, key)):
            current = 0
            prev = None
            continue
        current = current + 1 if prev is not None and (d - prev).days == 1 else 1
        longest = max(longest, current)
        prev = d
    return longest


# ── Totals ────────────────────────────────────────────────────


def totals(store: Store) -> Totals:
    """Sum the counters across every record."""
    t = Totals()
    for key, raw in store.items():
        rec = DayRecord.from_dict(raw, default_date=key)
        t.breath_minutes += rec.morning.breath_minutes
        t.jesus_prayer_count += rec.morning.jesus_prayer_count
        t.rosary_decades += rec.evening.rosary_decades
        t.victories += rec.temptations.victories
        t.lapses += rec.temptations.lapses
        t.urges_noted += rec.temptations.urges_noted
    return t


def practice_counts(store: Store) -> dict[str, int]:
    """Number of days each boolean practice and weekly anchor was marked."""
    counts = {
        "morningConsecration": 0,
        "middayStillness": 0,
        "middayBodyBlessing": 0,
        "eveningExamen": 0,
        "eveningNightSilence": 0,
    }
    counts.update({f"weekly{key.capitalize()}": 0 for key in WEEKLY_ANCHORS})
    for key, raw in store.items():
        rec = DayRecord.from_dict(raw, default_date=key)
        counts["morningConsecration"] += rec.morning.consecration
        counts["middayStillness"] += rec.midday.stillness
        counts["middayBodyBlessing"] += rec.midday.body_blessing
        counts["eveningExamen"] += rec.evening.examen
        counts["eveningNightSilence"] += rec.evening.night_silence
        for anchor in WEEKLY_ANCHORS:
            counts[f"weekly{anchor.capitalize()}"] += getattr(rec.weekly, anchor)
    return counts


# ── Weekly anchors ────────────────────────────────────────────


def weekly_anchor_state(store: Store, week: Sequence[str], flag: str) -> bool:
    """True only if every day of *week* has the anchor set; missing days read False."""
    _check_anchor(flag)
    for key in week:
        rec = _record(store, key)
        if rec is None or not getattr(rec.weekly, flag):
            return False
    return True


def propagate_weekly_anchor(store: Store, week: Sequence[str], flag: str, value: bool) -> Store:
    """Return a new store with *flag* set to *value* on all days of *week*.

    Days outside the week keep their stored values untouched.
    """
    _check_anchor(flag)
    updated = dict(store)
    for key in week:
        rec = DayRecord.from_dict(store.get(key), default_date=key)
        setattr(rec.weekly, flag, bool(value))
        updated[key] = rec.to_dict()
    return updated


def week_summary(store: Store, any_date_in_week: str | date) -> WeekSummary:
    """Practice totals and anchor completion for one Monday-Sunday week."""
    week = week_range(any_date_in_week)
    summary = WeekSummary(start=week[0], end=week[-1])
    summary.anchors = {anchor: True for anchor in WEEKLY_ANCHORS}
    for key in week:
        rec = DayRecord.from_dict(store.get(key), default_date=key)
        summary.breath_minutes += rec.morning.breath_minutes
        summary.jesus_prayer_count += rec.morning.jesus_prayer_count
        summary.rosary_decades += rec.evening.rosary_decades
        for anchor in WEEKLY_ANCHORS:
            if not getattr(rec.weekly, anchor):
                summary.anchors[anchor] = False
    return summary


# ── Calendar ──────────────────────────────────────────────────


def month_dots(month_anchor_date: str | date, store: Store) -> list[MonthDot]:
    """Presence dots for the month, Monday-first.

    Leading placeholders (one per weekday column before the 1st) carry no
    date and are never filled.
    """
    d = _as_date(month_anchor_date)
    first = d.replace(day=1)
    lead, days = first.weekday(), monthrange(d.year, d.month)[1]
    dots = [MonthDot() for _ in range(lead)]
    for i in range(days):
        key = (first + timedelta(days=i)).isoformat()
        dots.append(MonthDot(date=key, filled=any_practice_done(_record(store, key))))
    return dots


# ── Recent entries ────────────────────────────────────────────


def recent_entries(store: Store, limit: int = 10) -> tuple[list[DayRecord], int]:
    """Newest-first records with any activity, plus the total match count."""
    entries: list[DayRecord] = []
    total = 0
    for key in sorted(store, reverse=True):
        if not store[key]:
            continue
        rec = DayRecord.from_dict(store[key], default_date=key)
        rec.date = key
        if not day_has_activity(rec):
            continue
        total += 1
        if limit <= 0 or len(entries) < limit:
            entries.append(rec)
    return entries, total


# ── Metric series ─────────────────────────────────────────────

METRICS: dict[str, tuple[str, str, Callable[[DayRecord], int]]] = {
    "breathMinutes": ("Breath meditation", "min", lambda r: r.morning.breath_minutes),
    "jesusPrayerCount": ("Jesus Prayer", "prayers", lambda r: r.morning.jesus_prayer_count),
    "rosaryDecades": ("Rosary", "decades", lambda r: r.evening.rosary_decades),
    "victories": ("Victories", "", lambda r: r.temptations.victories),
    "lapses": ("Lapses", "", lambda r: r.temptations.lapses),
    "urgesNoted": ("Urges noted", "", lambda r: r.temptations.urges_noted),
}


def metric_series(store: Store, metric: str) -> dict[str, list[MetricPoint]]:
    """Gap-free daily values between the first and last key, plus weekly sums.

    Weekly points are keyed by their Monday and carry the Sunday as ``end``.
    """
    if metric not in METRICS:
        raise ValueError(f"Unknown metric: {metric}")
    accessor = METRICS[metric][2]

    keys = []
    for key in store:
        try:
            keys.append(_as_date(key))
        except (TypeError, ValueError):
            continue
    if not keys:
        return {"daily": [], "weekly": []}

    daily: list[MetricPoint] = []
    cursor, last = min(keys), max(keys)
    while cursor <= last:
        key = cursor.isoformat()
        daily.append(MetricPoint(date=key, value=accessor(DayRecord.from_dict(store.get(key), default_date=key))))
        cursor += timedelta(days=1)

    weekly_map: dict[str, int] = {}
    for point in daily:
        start = week_range(point.date)[0]
        weekly_map[start] = weekly_map.get(start, 0) + point.value
    weekly = [
        MetricPoint(date=start, value=value, end=week_range(start)[-1])
        for start, value in sorted(weekly_map.items())
    ]
    return {"daily": daily, "weekly": weekly}


def _positive_streaks(points: list[MetricPoint]) -> tuple[int, int]:
    current = 0
    longest = 0
    prev: date | None = None
    for point in points:
        if point.value <= 0:
            current = 0
            prev = None
            continue
        d = date.fromisoformat(point.date)
        current = current + 1 if prev is not None and (d - prev).days == 1 else 1
        longest = max(longest, current)
        prev = d
    return current, longest


def metric_highlights(series: dict[str, list[MetricPoint]], metric: str, view: str = "daily") -> MetricHighlights:
    """Total, best point and positive-value streaks for a metric series."""
    if view not in ("daily", "weekly"):
        raise ValueError(f"Unknown view: {view}")
    unit = METRICS[metric][1] if metric in METRICS else ""
    points = series.get(view, [])
    if not points:
        return MetricHighlights(unit=unit)
    best = points[0]
    for point in points:
        if point.value > best.value:
            best = point
    current, longest = _positive_streaks(series.get("daily", []))
    return MetricHighlights(
        total=sum(p.value for p in points),
        max_value=best.value,
        max_date=best.date,
        max_end=best.end,
        current_streak=current,
        longest_streak=longest,
        unit=unit,
    )


def metric_summary(series: dict[str, list[MetricPoint]], view: str = "daily") -> MetricSummary:
    """Last value plus the average over the trailing 7 days or 4 weeks."""
    if view not in ("daily", "weekly"):
        raise ValueError(f"Unknown view: {view}")
    size, unit = (4, "week") if view == "weekly" else (7, "day")
    points = series.get(view, [])
    if not points:
        return MetricSummary(average_label=f"{size}-{unit} avg")
    window = points[-size:]
    return MetricSummary(
        last_value=points[-1].value,
        last_date=points[-1].date,
        average_value=sum(p.value for p in window) / len(window),
        average_label=f"{len(window)}-{unit} avg",
    )
