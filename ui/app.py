from __future__ import annotations

import os
import secrets
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from vigil import (
    WEEKLY_ANCHORS,
    InvalidImport,
    OutOfRangeInput,
    apply_edit,
    export_filename,
    import_into,
    longest_streak,
    metric_highlights,
    metric_series,
    metric_summary,
    month_dots,
    open_store,
    practice_counts,
    propagate_weekly_anchor,
    recent_entries,
    streak,
    summarize_day,
    to_csv,
    to_json,
    totals,
    week_range,
    week_summary,
    weekly_anchor_state,
)
from vigil.analytics import METRICS


app = FastAPI(title="Vigil", version="0.1.0")

security = HTTPBasic(auto_error=False)


# ── Auth ──────────────────────────────────────────────────────


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("VIGIL_USERNAME", "")
    expected_password = os.environ.get("VIGIL_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def _valid_date(day: str) -> str:
    try:
        week_range(day)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Invalid date: {day}")
    return day


# ── Endpoints ─────────────────────────────────────────────────


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/api/day/{day}")
def api_get_day(day: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    store = open_store()
    rec = store.get(_valid_date(day))
    return {"ok": True, "day": rec.to_dict(), "summary": summarize_day(rec)}


@app.post("/api/day/{day}")
def api_edit_day(
    day: str,
    payload: dict[str, Any] = Body(...),
    strict: bool = False,
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Apply one field edit: ``{"section": "morning", "field": "breathMinutes", "value": 10}``."""
    store = open_store()
    try:
        transform = apply_edit(payload, strict=strict)
    except OutOfRangeInput as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    rec = store.upsert(_valid_date(day), transform)
    return {"ok": True, "day": rec.to_dict(), "streak": streak(store.snapshot(), store.today())}


@app.post("/api/weekly/{flag}")
def api_toggle_weekly(
    flag: str,
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Set a weekly anchor for the whole week of ``payload["date"]`` (default today)."""
    if flag not in WEEKLY_ANCHORS:
        raise HTTPException(status_code=404, detail=f"Unknown weekly anchor: {flag}")
    store = open_store()
    week = week_range(_valid_date(str(payload.get("date") or store.today())))
    store.replace_all(propagate_weekly_anchor(store.snapshot(), week, flag, bool(payload.get("value"))))
    return {"ok": True, "week": week, "flag": flag, "value": weekly_anchor_state(store.snapshot(), week, flag)}


@app.get("/api/summary")
def api_summary(day: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    store = open_store()
    today = store.today()
    data = store.snapshot()
    return {
        "today": today,
        "streak": streak(data, today),
        "longestStreak": longest_streak(data),
        "totals": totals(data).to_dict(),
        "practiceCounts": practice_counts(data),
        "week": week_summary(data, _valid_date(day or today)).to_dict(),
        "daysTracked": len(data),
    }


@app.get("/api/month/{day}")
def api_month(day: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    store = open_store()
    return {"dots": [dot.to_dict() for dot in month_dots(_valid_date(day), store.snapshot())]}


@app.get("/api/recent")
def api_recent(limit: int = 10, username: str = Depends(get_current_user)) -> dict[str, Any]:
    store = open_store()
    entries, total = recent_entries(store.snapshot(), limit=limit)
    return {"entries": [e.to_dict() for e in entries], "totalMatching": total}


@app.get("/api/metrics/{metric}")
def api_metric(metric: str, view: str = "daily", username: str = Depends(get_current_user)) -> dict[str, Any]:
    if metric not in METRICS:
        raise HTTPException(status_code=404, detail=f"Unknown metric: {metric}")
    if view not in ("daily", "weekly"):
        raise HTTPException(status_code=400, detail=f"Unknown view: {view}")
    store = open_store()
    series = metric_series(store.snapshot(), metric)
    return {
        "metric": metric,
        "label": METRICS[metric][0],
        "points": [p.to_dict() for p in series[view]],
        "highlights": metric_highlights(series, metric, view).to_dict(),
        "summary": metric_summary(series, view).to_dict(),
    }


# ── Backup ────────────────────────────────────────────────────


@app.get("/export.json")
def export_json(username: str = Depends(get_current_user)) -> PlainTextResponse:
    store = open_store()
    filename = export_filename("json", store.today())
    return PlainTextResponse(
        to_json(store.snapshot()),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/export.csv")
def export_csv(username: str = Depends(get_current_user)) -> PlainTextResponse:
    store = open_store()
    filename = export_filename("csv", store.today())
    return PlainTextResponse(
        to_csv(store.snapshot()),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/api/import")
async def api_import(request: Request, username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Replace the store with a previously exported JSON backup (raw request body)."""
    text = (await request.body()).decode("utf-8", errors="replace")
    store = open_store()
    try:
        count = import_into(store, text)
    except InvalidImport as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "days": count}


@app.post("/api/reset")
def api_reset(username: str = Depends(get_current_user)) -> dict[str, Any]:
    store = open_store()
    store.reset()
    return {"ok": True}
