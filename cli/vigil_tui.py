#!/usr/bin/env python3
"""Vigil TUI — daily check-in screen powered by Textual."""

from __future__ import annotations

import sys
from datetime import date, timedelta

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Checkbox, Footer, Header, Input, Label, Static, TextArea

from vigil import (
    WEEKLY_ANCHORS,
    RecordStore,
    add_breath_minutes,
    month_dots,
    open_store,
    propagate_weekly_anchor,
    set_count,
    set_flag,
    set_text,
    streak,
    totals,
    week_range,
    weekly_anchor_state,
    workspace_root,
    write_export,
)


CSS = """
#main-layout { height: 1fr; }
#left-pane { width: 3fr; padding: 0 1; }
#right-pane { width: 2fr; padding: 0 1; border-left: solid $primary-darken-2; }
.section-title { text-style: bold; color: $accent; margin-top: 1; }
.count-row { height: 3; }
.count-row Label { width: 22; padding: 1 0; }
.count-row Input { width: 12; }
#notes-area { height: 8; }
"""

FLAGS = [
    ("morning", "consecration", "Consecration"),
    ("midday", "stillness", "Stillness pause"),
    ("midday", "bodyBlessing", "Body blessing"),
    ("evening", "examen", "Examen"),
    ("evening", "nightSilence", "Night silence"),
]

COUNTS = [
    ("morning", "breathMinutes", "Breath (min)"),
    ("morning", "jesusPrayerCount", "Jesus Prayer"),
    ("evening", "rosaryDecades", "Rosary decades"),
    ("temptations", "urgesNoted", "Urges noted"),
    ("temptations", "victories", "Victories"),
    ("temptations", "lapses", "Lapses"),
]


def render_month(day: str, data: dict) -> str:
    """Monday-first month grid: ● practiced, · not, blank for lead-in cells."""
    lines = [date.fromisoformat(day).strftime("%B %Y"), "Mo Tu We Th Fr Sa Su"]
    cells = []
    for dot in month_dots(day, data):
        if dot.is_placeholder:
            cells.append("  ")
        else:
            cells.append(" ●" if dot.filled else " ·")
    for i in range(0, len(cells), 7):
        lines.append(" ".join(cells[i:i + 7]))
    return "\n".join(lines)


class VigilApp(App):
    """Vigil — one screen per day: practices, counters, notes, weekly anchors."""

    TITLE = "Vigil"
    CSS = CSS
    AUTO_FOCUS = None

    BINDINGS = [
        Binding("[", "prev_day", "Prev day"),
        Binding("]", "next_day", "Next day"),
        Binding("t", "goto_today", "Today"),
        Binding("b", "log_breath", "+5 min breath"),
        Binding("x", "export", "Export"),
        Binding("escape", "blur_focus", "Back"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, store: RecordStore | None = None) -> None:
        super().__init__()
        self.store = store if store is not None else open_store()
        self.day = self.store.today()

    # ── Layout ─────────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        rec = self.store.get(self.day).to_dict()
        left = [Label("Practices", classes="section-title")]
        for section, field, label in FLAGS:
            left.append(Checkbox(label, rec[section][field], id=f"flag-{section}-{field}"))
        left.append(Label("Counters", classes="section-title"))
        for section, field, label in COUNTS:
            left.append(
                Horizontal(
                    Label(label),
                    Input(str(rec[section][field]), type="integer", id=f"count-{section}-{field}"),
                    classes="count-row",
                )
            )
        left.append(Label("Scripture", classes="section-title"))
        left.append(Input(rec["scripture"], placeholder="Passage", id="scripture-input"))
        left.append(Label("Notes", classes="section-title"))
        left.append(TextArea(rec["notes"], id="notes-area"))

        right = [Label("Weekly anchors", classes="section-title")]
        for key, label in WEEKLY_ANCHORS.items():
            right.append(Checkbox(label, False, id=f"anchor-{key}"))
        right += [
            Label("Progress", classes="section-title"),
            Static(id="stats"),
            Static(id="month"),
        ]

        yield Header()
        yield Horizontal(
            VerticalScroll(*left, id="left-pane"),
            Vertical(*right, id="right-pane"),
            id="main-layout",
        )
        yield Footer()

    def on_mount(self) -> None:
        self._load_day()

    def _load_day(self) -> None:
        """Push the current day's record into every widget."""
        rec = self.store.get(self.day).to_dict()
        for section, field, _label in FLAGS:
            self.query_one(f"#flag-{section}-{field}", Checkbox).value = rec[section][field]
        for section, field, _label in COUNTS:
            self.query_one(f"#count-{section}-{field}", Input).value = str(rec[section][field])
        self.query_one("#scripture-input", Input).value = rec["scripture"]
        notes = self.query_one("#notes-area", TextArea)
        if notes.text != rec["notes"]:
            notes.load_text(rec["notes"])
        self._refresh_derived()

    def _refresh_derived(self) -> None:
        data = self.store.snapshot()
        week = week_range(self.day)
        for key in WEEKLY_ANCHORS:
            self.query_one(f"#anchor-{key}", Checkbox).value = weekly_anchor_state(data, week, key)

        t = totals(data)
        current = streak(data, self.store.today())
        self.query_one("#stats", Static).update(
            "\n".join([
                f"Streak: {current} day{'' if current == 1 else 's'}",
                f"Breath: {t.breath_minutes} min",
                f"Jesus Prayer: {t.jesus_prayer_count}",
                f"Rosary decades: {t.rosary_decades}",
                f"Victories / lapses: {t.victories} / {t.lapses}",
            ])
        )
        self.query_one("#month", Static).update(render_month(self.day, data))
        self.sub_title = f"{self.day}  🔥 {current}"

    # ── Edits ──────────────────────────────────────────────────

    @on(Checkbox.Changed)
    def _on_checkbox(self, event: Checkbox.Changed) -> None:
        if event.value != event.checkbox.value:
            return  # stale, from an earlier day load
        widget_id = event.checkbox.id or ""
        if widget_id.startswith("anchor-"):
            key = widget_id.removeprefix("anchor-")
            data = self.store.snapshot()
            week = week_range(self.day)
            if weekly_anchor_state(data, week, key) != event.value:
                self.store.replace_all(propagate_weekly_anchor(data, week, key, event.value))
                self._refresh_derived()
            return
        _prefix, section, field = widget_id.split("-", 2)
        if self.store.get(self.day).to_dict()[section][field] != event.value:
            self.store.upsert(self.day, set_flag(section, field, event.value))
            self._refresh_derived()

    @on(Input.Changed)
    def _on_input(self, event: Input.Changed) -> None:
        if event.value != event.input.value:
            return
        widget_id = event.input.id or ""
        rec = self.store.get(self.day).to_dict()
        if widget_id == "scripture-input":
            if rec["scripture"] != event.value:
                self.store.upsert(self.day, set_text("scripture", event.value))
            return
        if not widget_id.startswith("count-"):
            return
        try:
            value = int(event.value)
        except ValueError:
            return
        _prefix, section, field = widget_id.split("-", 2)
        if rec[section][field] != value:
            self.store.upsert(self.day, set_count(section, field, value))
            self._refresh_derived()

    @on(TextArea.Changed, "#notes-area")
    def _on_notes(self, event: TextArea.Changed) -> None:
        if self.store.get(self.day).notes != event.text_area.text:
            self.store.upsert(self.day, set_text("notes", event.text_area.text))

    # ── Actions ────────────────────────────────────────────────

    def _shift_day(self, delta: int) -> None:
        self.day = (date.fromisoformat(self.day) + timedelta(days=delta)).isoformat()
        self._load_day()

    def action_prev_day(self) -> None:
        self._shift_day(-1)

    def action_next_day(self) -> None:
        self._shift_day(1)

    def action_goto_today(self) -> None:
        self.day = self.store.today()
        self._load_day()

    def action_log_breath(self) -> None:
        self.store.upsert(self.day, add_breath_minutes(5))
        self._load_day()
        self.notify("Logged 5 mindful minutes.", title="Breath prayer")

    def action_export(self) -> None:
        data = self.store.snapshot()
        today = self.store.today()
        try:
            paths = [write_export(data, kind, today) for kind in ("json", "csv")]
        except OSError as e:
            self.notify(f"Export failed: {e}", title="Export", severity="error")
            return
        self.notify("\n".join(str(p) for p in paths), title="Exported")

    def action_blur_focus(self) -> None:
        self.set_focus(None)


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    if not root.exists():
        print(f"Workspace not found: {root}")
        print("Set VIGIL_ROOT or create the directory first.")
        sys.exit(1)

    app = VigilApp()
    app.run()


if __name__ == "__main__":
    main()
