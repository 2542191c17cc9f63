"""Date-keyed record store for Vigil.

The whole mapping ``{date_key: raw_record}`` is the unit of persistence:
every mutation replaces the in-memory mapping and re-saves all of it.
Stored values are kept as written (imports are not normalized); reads
normalize lazily.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Protocol

from vigil.errors import CorruptPersistedState
from vigil.fileio import read_text, write_json_atomic
from vigil.models import DayRecord
from vigil.workspace import store_path, today_str

logger = logging.getLogger(__name__)

Store = dict[str, Any]
Clock = Callable[[], str]
Transform = Callable[[DayRecord], DayRecord]


# ── Persistence collaborators ─────────────────────────────────


class Persistence(Protocol):
    """Opaque blob storage for the whole store."""

    def load(self) -> Store | None:
        """Return the persisted mapping, None if nothing was saved yet.

        Raises CorruptPersistedState if the blob cannot be parsed.
        """
        ...

    def save(self, data: Store) -> None:
        """Persist the full mapping, replacing what was there."""
        ...


class JsonFilePersistence:
    """Single pretty-printed JSON object on disk, written atomically."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path if path is not None else store_path()

    def load(self) -> Store | None:
        try:
            text = read_text(self.path)
        except UnicodeDecodeError as e:
            raise CorruptPersistedState(f"{self.path}: not UTF-8 text: {e}") from e
        if not text.strip():
            return None
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptPersistedState(f"{self.path}: {e}") from e
        if not isinstance(data, dict):
            raise CorruptPersistedState(f"{self.path}: expected a JSON object, got {type(data).__name__}")
        return data

    def save(self, data: Store) -> None:
        write_json_atomic(self.path, data)


class MemoryPersistence:
    """In-process persistence; keeps a JSON string so saves are real copies."""

    def __init__(self, initial: str | None = None) -> None:
        self.blob = initial
        self.saves = 0

    def load(self) -> Store | None:
        if self.blob is None:
            return None
        try:
            data = json.loads(self.blob)
        except json.JSONDecodeError as e:
            raise CorruptPersistedState(str(e)) from e
        if not isinstance(data, dict):
            raise CorruptPersistedState(f"expected a JSON object, got {type(data).__name__}")
        return data

    def save(self, data: Store) -> None:
        self.blob = json.dumps(data)
        self.saves += 1


# ── Store ─────────────────────────────────────────────────────


class RecordStore:
    """Mapping from date key to day record with read-through normalization."""

    def __init__(self, persistence: Persistence, clock: Clock | None = None) -> None:
        self._persistence = persistence
        self._clock: Clock = clock or today_str
        self._data: Store = {}

    def load(self) -> RecordStore:
        """Read the persisted store once; corrupt state becomes an empty store."""
        try:
            data = self._persistence.load()
        except CorruptPersistedState as e:
            logger.warning("Persisted store is corrupt, starting empty: %s", e)
            data = None
        self._data = dict(data) if data else {}
        logger.debug("Loaded %d day records", len(self._data))
        return self

    def today(self) -> str:
        return self._clock()

    def __contains__(self, date_key: str) -> bool:
        return date_key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def snapshot(self) -> Store:
        """Shallow copy of the mapping for the pure aggregation functions."""
        return dict(self._data)

    def raw(self, date_key: str) -> Any:
        """Stored value as written, or None."""
        return self._data.get(date_key)

    def get(self, date_key: str) -> DayRecord:
        """Normalized record for *date_key*; a blank one if absent. Never writes."""
        return DayRecord.from_dict(self._data.get(date_key), default_date=date_key)

    def upsert(self, date_key: str, transform: Transform) -> DayRecord:
        """Normalize the current (or blank) record, transform it, store the result."""
        current = self.get(date_key)
        updated = transform(current)
        self._commit({**self._data, date_key: updated.to_dict()})
        return updated

    def replace_all(self, new_store: Store) -> None:
        """Wholesale replace. Entries are stored as given; reads normalize."""
        self._commit(dict(new_store))

    def reset(self) -> None:
        count = len(self._data)
        self._commit({})
        logger.info("Store reset, %d day records cleared", count)

    def _commit(self, data: Store) -> None:
        # In-memory state only advances once the save went through.
        self._persistence.save(data)
        self._data = data
        logger.debug("Saved %d day records", len(data))


def open_store(root: Path | None = None, clock: Clock | None = None) -> RecordStore:
    """Open and load the workspace's JSON-file store."""
    if clock is None:
        def clock() -> str:
            return today_str(root)
    return RecordStore(JsonFilePersistence(store_path(root)), clock=clock).load()
