"""Tests for ui/app.py — the local JSON HTTP surface."""

import json

import pytest
from fastapi.testclient import TestClient

from ui.app import app


@pytest.fixture
def client(workspace) -> TestClient:
    return TestClient(app)


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": "true"}


def test_get_day_normalizes(client):
    body = client.get("/api/day/2024-03-05").json()
    assert body["day"]["evening"]["rosaryDecades"] == 5
    assert body["day"]["morning"]["breathMinutes"] == 0
    assert body["summary"].startswith("2024-03-05: ")


def test_get_absent_day_is_blank(client, workspace):
    body = client.get("/api/day/2023-01-01").json()
    assert body["day"]["date"] == "2023-01-01"
    assert "2023-01-01" not in (workspace / "data" / "tracker.json").read_text(encoding="utf-8")


def test_invalid_date(client):
    assert client.get("/api/day/2024-13-40").status_code == 404


@pytest.mark.parametrize("day", ["20240306", "2024-W10-3", "2024-3-6"])
def test_non_canonical_date_rejected(client, workspace, day):
    resp = client.post(f"/api/day/{day}", json={"section": "morning", "field": "consecration", "value": True})
    assert resp.status_code == 404
    saved = json.loads((workspace / "data" / "tracker.json").read_text(encoding="utf-8"))
    assert sorted(saved) == ["2024-03-04", "2024-03-05", "2024-03-06"]


def test_edit_day_infinite_delta(client):
    resp = client.post(
        "/api/day/2024-03-06",
        content='{"section": "morning", "field": "breathMinutes", "delta": 1e999}',
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400


def test_edit_day_clamps(client):
    resp = client.post("/api/day/2024-03-05", json={"section": "morning", "field": "breathMinutes", "value": 900})
    assert resp.status_code == 200
    assert resp.json()["day"]["morning"]["breathMinutes"] == 600
    assert resp.json()["day"]["evening"]["rosaryDecades"] == 5


def test_edit_day_strict_rejects(client):
    resp = client.post(
        "/api/day/2024-03-05?strict=true",
        json={"section": "evening", "field": "rosaryDecades", "value": 7},
    )
    assert resp.status_code == 422


def test_edit_day_unknown_field(client):
    resp = client.post("/api/day/2024-03-05", json={"section": "morning", "field": "angelus", "value": 1})
    assert resp.status_code == 400


def test_weekly_toggle(client):
    resp = client.post("/api/weekly/fasting", json={"date": "2024-03-06", "value": True})
    body = resp.json()
    assert body["value"] is True
    assert body["week"][0] == "2024-03-04"
    summary = client.get("/api/summary", params={"day": "2024-03-06"}).json()
    assert summary["week"]["anchors"]["fasting"] is True


def test_weekly_unknown_flag(client):
    assert client.post("/api/weekly/sabbath", json={"value": True}).status_code == 404


def test_summary(client):
    body = client.get("/api/summary").json()
    assert len(body["today"]) == 10
    assert body["totals"]["breathMinutes"] == 20
    assert body["totals"]["rosaryDecades"] == 5
    assert body["longestStreak"] == 3
    assert body["daysTracked"] == 3


def test_month(client):
    dots = client.get("/api/month/2024-03-01").json()["dots"]
    assert dots[:4] == [{"date": None, "filled": False}] * 4
    filled = [d["date"] for d in dots if d["filled"]]
    assert filled == ["2024-03-04", "2024-03-05", "2024-03-06"]


def test_recent(client):
    body = client.get("/api/recent", params={"limit": 2}).json()
    assert body["totalMatching"] == 3
    assert [e["date"] for e in body["entries"]] == ["2024-03-06", "2024-03-05"]


def test_metric(client):
    body = client.get("/api/metrics/breathMinutes").json()
    assert body["highlights"]["total"] == 20
    assert body["summary"]["lastValue"] == 20
    assert body["summary"]["averageLabel"] == "3-day avg"
    weekly = client.get("/api/metrics/breathMinutes", params={"view": "weekly"}).json()
    assert weekly["highlights"]["maxEnd"] == "2024-03-10"
    assert client.get("/api/metrics/mood").status_code == 404


def test_export_csv(client):
    resp = client.get("/export.csv")
    assert resp.status_code == 200
    assert "attachment" in resp.headers["content-disposition"]
    lines = resp.text.split("\n")
    assert lines[0].startswith("Date,Scripture,Notes")
    assert [line[:10] for line in lines[1:]] == ["2024-03-04", "2024-03-05", "2024-03-06"]


def test_export_then_import_round_trip(client):
    exported = client.get("/export.json").text
    client.post("/api/reset")
    assert client.get("/api/summary").json()["daysTracked"] == 0
    resp = client.post("/api/import", content=exported)
    assert resp.json() == {"ok": True, "days": 3}
    assert client.get("/api/day/2024-03-05").json()["day"]["scripture"] == "Psalm 23"


def test_import_rejects_array(client):
    resp = client.post("/api/import", content="[1,2,3]")
    assert resp.status_code == 400
    assert client.get("/api/summary").json()["daysTracked"] == 3


def test_basic_auth(client, monkeypatch):
    monkeypatch.setenv("VIGIL_USERNAME", "me")
    monkeypatch.setenv("VIGIL_PASSWORD", "secret")
    assert client.get("/api/recent").status_code == 401
    assert client.get("/api/recent", auth=("me", "wrong")).status_code == 401
    assert client.get("/api/recent", auth=("me", "secret")).status_code == 200
