"""Workspace root, timezone, clock and path helpers for Vigil."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from vigil.fileio import read_yaml


def workspace_root() -> Path:
    """Get the workspace root directory (contains profile.yaml and data/)."""
    return Path(
        os.environ.get("VIGIL_ROOT", str(Path.home() / "vigil"))
    ).expanduser().resolve()


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get user's timezone from profile.yaml, defaulting to UTC."""
    if root is None:
        root = workspace_root()
    try:
        profile = read_yaml(profile_path(root))
        if profile and "timezone" in profile:
            return ZoneInfo(str(profile["timezone"]))
    except (OSError, ValueError, yaml.YAMLError, ZoneInfoNotFoundError):
        pass
    return ZoneInfo("UTC")


def today_str(root: Path | None = None) -> str:
    """Get today's date key (YYYY-MM-DD) in the user's timezone.

    This is the default clock; everything that needs "today" accepts an
    injected replacement.
    """
    tz = get_user_timezone(root)
    return datetime.now(tz).date().isoformat()


# ── Path helpers ──────────────────────────────────────────────

def profile_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "profile.yaml"


def store_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data" / "tracker.json"


def exports_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "exports"
