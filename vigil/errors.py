"""Error taxonomy for Vigil.

Every error here is recoverable: callers degrade to an unchanged store or
an empty/blank fallback instead of terminating.
"""

from __future__ import annotations


class VigilError(Exception):
    """Base class for all Vigil errors."""


class CorruptPersistedState(VigilError):
    """Persisted store could not be parsed or is not a JSON object."""


class InvalidImport(VigilError, ValueError):
    """Imported payload is not a JSON object."""


class OutOfRangeInput(VigilError, ValueError):
    """A numeric field write falls outside its declared bounds."""

    def __init__(self, field: str, value: int, low: int, high: int) -> None:
        super().__init__(f"{field}={value} is outside [{low}, {high}]")
        self.field = field
        self.value = value
        self.low = low
        self.high = high
