"""
Exception types for ingestion and storage failures.
"""

from datetime import datetime
from pathlib import Path
from typing import Iterable


class BedwatchError(Exception):
    """Base class for bedwatch errors."""


class MissingColumnsError(BedwatchError):
    """Headers could not be mapped to the required building / bed count columns."""

    def __init__(self, missing_roles: Iterable[str]):
        self.missing_roles = tuple(missing_roles)
        super().__init__(
            f"Could not find required column(s): {', '.join(self.missing_roles)}"
        )


class DuplicateTimestampError(BedwatchError):
    """A snapshot with the same timestamp is already stored."""

    def __init__(self, timestamp: datetime):
        self.timestamp = timestamp
        super().__init__(f"Snapshot for {timestamp.isoformat()} already exists")


class StoreWriteError(BedwatchError):
    """The backing store could not be written."""

    def __init__(self, path: Path, cause: object):
        self.path = path
        self.cause = cause
        super().__init__(f"Storage write failed for {path}: {cause}")


class FetchError(BedwatchError):
    """No source URL returned a usable CSV."""
