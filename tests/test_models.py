"""Tests for vigil/models.py — day record normalization."""

import pytest

from vigil.models import DayRecord, normalize_day


BLANK = {
    "date": "2024-01-01",
    "scripture": "",
    "notes": "",
    "morning": {"consecration": False, "breathMinutes": 0, "jesusPrayerCount": 0},
    "midday": {"stillness": False, "bodyBlessing": False},
    "evening": {"examen": False, "rosaryDecades": 0, "nightSilence": False},
    "temptations": {"urgesNoted": 0, "lapses": 0, "victories": 0},
    "weekly": {"mass": False, "confession": False, "fasting": False, "accountability": False},
}


def test_normalize_empty_dict():
    assert normalize_day({}, default_date="2024-01-01") == BLANK


@pytest.mark.parametrize("value", [None, [], "junk", 42, True])
def test_normalize_non_dict_input(value):
    assert normalize_day(value, default_date="2024-01-01") == BLANK


def test_normalize_partial_sections():
    d = normalize_day({"date": "2024-01-01", "morning": {"breathMinutes": 15}, "weekly": {"mass": True}})
    assert d["morning"] == {"consecration": False, "breathMinutes": 15, "jesusPrayerCount": 0}
    assert d["weekly"]["mass"] is True
    assert d["weekly"]["fasting"] is False
    assert d["evening"] == BLANK["evening"]


@pytest.mark.parametrize("section", ["morning", "midday", "evening", "temptations", "weekly"])
@pytest.mark.parametrize("value", [None, "text", 7, [1, 2], True])
def test_normalize_wrong_typed_sections(section, value):
    d = normalize_day({"date": "2024-01-01", section: value})
    assert d[section] == BLANK[section]


def test_normalize_null_fields_default():
    d = normalize_day({
        "date": "2024-01-01",
        "scripture": None,
        "morning": {"consecration": None, "breathMinutes": None},
        "evening": {"rosaryDecades": None},
    })
    assert d == BLANK


def test_normalize_wrong_typed_scalars():
    d = normalize_day({
        "date": "2024-01-01",
        "notes": 12,
        "morning": {"breathMinutes": "30", "jesusPrayerCount": "many"},
        "evening": {"rosaryDecades": 2.0},
        "temptations": {"lapses": {"x": 1}},
    })
    assert d["notes"] == "12"
    assert d["morning"]["breathMinutes"] == 30
    assert d["morning"]["jesusPrayerCount"] == 0
    assert d["evening"]["rosaryDecades"] == 2
    assert d["temptations"]["lapses"] == 0


def test_normalize_keeps_out_of_range_legacy_values():
    d = normalize_day({"date": "2024-01-01", "morning": {"breathMinutes": 900}, "evening": {"rosaryDecades": 9}})
    assert d["morning"]["breathMinutes"] == 900
    assert d["evening"]["rosaryDecades"] == 9


@pytest.mark.parametrize("raw", [
    {},
    {"date": "2024-02-29", "midday": {"stillness": 1}},
    {"morning": "bad", "evening": {"rosaryDecades": "3"}, "scripture": 5},
    {"weekly": {"mass": "yes", "fasting": 0}, "temptations": {"victories": 4.7}},
])
def test_normalize_is_idempotent(raw):
    once = normalize_day(raw, default_date="2024-01-01")
    assert normalize_day(once) == once
    assert DayRecord.from_dict(once) == DayRecord.from_dict(raw, default_date="2024-01-01")


def test_missing_date_defaults_to_clock(workspace):
    from vigil.workspace import today_str
    assert DayRecord.from_dict({}).date == today_str()


def test_stored_date_wins_over_default():
    assert DayRecord.from_dict({"date": "2023-12-31"}, default_date="2024-01-01").date == "2023-12-31"


def test_snake_case_keys_accepted():
    rec = DayRecord.from_dict({"date": "2024-01-01", "morning": {"breath_minutes": 8}})
    assert rec.morning.breath_minutes == 8
    assert rec.to_dict()["morning"]["breathMinutes"] == 8


def test_blank_record():
    rec = DayRecord.blank("2024-01-01")
    assert rec.to_dict() == BLANK
