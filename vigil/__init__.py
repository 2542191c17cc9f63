"""Vigil core library: day record store and derivation engine.

Public API re-exports for convenient imports:
    from vigil import open_store, streak, totals, to_csv, ...
"""

# Workspace & paths
from vigil.workspace import (
    workspace_root,
    get_user_timezone,
    today_str,
    profile_path,
    store_path,
    exports_dir,
)

# Errors
from vigil.errors import (
    VigilError,
    CorruptPersistedState,
    InvalidImport,
    OutOfRangeInput,
)

# Models
from vigil.models import (
    WEEKLY_ANCHORS,
    DayRecord,
    Morning,
    Midday,
    Evening,
    Temptations,
    Weekly,
    Totals,
    WeekSummary,
    MonthDot,
    MetricPoint,
    MetricHighlights,
    MetricSummary,
    normalize_day,
)

# Store
from vigil.store import (
    Persistence,
    JsonFilePersistence,
    MemoryPersistence,
    RecordStore,
    open_store,
)

# Practice predicates
from vigil.practice import (
    any_practice_done,
    day_has_activity,
    summarize_day,
)

# Field edits
from vigil.edits import (
    clamp_value,
    check_value,
    set_flag,
    set_count,
    add_count,
    set_text,
    add_breath_minutes,
    apply_edit,
)

# Aggregation
from vigil.analytics import (
    METRICS,
    week_range,
    streak,
    longest_streak,
    totals,
    practice_counts,
    weekly_anchor_state,
    propagate_weekly_anchor,
    week_summary,
    month_dots,
    recent_entries,
    metric_series,
    metric_highlights,
    metric_summary,
)

# Serialization
from vigil.serialize import (
    CSV_HEADER,
    to_json,
    from_json,
    import_into,
    to_csv,
    export_filename,
    write_export,
)
