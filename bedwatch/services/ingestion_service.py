"""
Ingestion service - parse an export and append it as a snapshot.
One entry point for both the upload endpoint and the scheduled fetch.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from ..api.store import SnapshotStore, get_store
from ..exceptions import DuplicateTimestampError, StoreWriteError
from ..logger import setup_logger
from ..models import Snapshot
from ..parsing import parse_csv
from ..parsing.timestamps import ingestion_time

logger = setup_logger(__name__)


class IngestStatus(Enum):
    """Outcome categories of one ingestion attempt."""
    IMPORTED = "imported"
    NO_FILE = "no_file"
    NO_ROWS = "no_rows"
    DUPLICATE = "duplicate"
    STORE_FAILED = "store_failed"


@dataclass
class IngestResult:
    """Result of one ingestion attempt."""
    status: IngestStatus
    message: str
    rows_imported: int = 0
    total_snapshots: int = 0
    timestamp: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        """Imported, or an idempotent no-op that an automated caller can ignore."""
        return self.status in (IngestStatus.IMPORTED, IngestStatus.DUPLICATE)

    def to_dict(self) -> dict:
        return {
            'status': self.status.value,
            'message': self.message,
            'rowsImported': self.rows_imported,
            'totalSnapshots': self.total_snapshots,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }


class IngestionService:
    """
    Turns raw export bytes into a stored snapshot.

    Usage:
        result = IngestionService().ingest(payload)
        if not result.ok:
            ...
    """

    def __init__(self, store: Optional[SnapshotStore] = None):
        self.store = store or get_store()

    def ingest(self, payload: Optional[Union[bytes, str]]) -> IngestResult:
        """
        Parse, normalize, timestamp and append one export.

        Args:
            payload: File contents (UTF-8 bytes or text); None when no file was sent

        Returns:
            IngestResult describing what happened
        """
        if payload is None:
            return IngestResult(IngestStatus.NO_FILE, "No file provided.")

        text = payload.decode('utf-8', errors='replace') if isinstance(payload, bytes) else payload
        parsed = parse_csv(text)

        if not parsed.rows:
            reason = parsed.error or "No rows found."
            logger.warning(f"No rows parsed from export: {reason}")
            return IngestResult(
                IngestStatus.NO_ROWS,
                "Could not parse any rows. Make sure the CSV has columns for building "
                f"and bed spaces (available/count). {reason}",
            )

        timestamp = parsed.last_updated
        if timestamp is None:
            timestamp = ingestion_time()
            logger.info(f"No usable last-updated value, using ingestion time {timestamp.isoformat()}")

        snapshot = Snapshot(timestamp=timestamp, rows=tuple(parsed.rows))

        try:
            history = self.store.append(snapshot)
        except DuplicateTimestampError as e:
            return IngestResult(
                IngestStatus.DUPLICATE,
                f"Duplicate, already have this snapshot: {e}. Skipping.",
                total_snapshots=len(self.store.load().snapshots),
                timestamp=timestamp,
            )
        except StoreWriteError as e:
            return IngestResult(
                IngestStatus.STORE_FAILED,
                f"Storage write failed, snapshot not saved: {e.cause}",
                timestamp=timestamp,
            )

        return IngestResult(
            IngestStatus.IMPORTED,
            f"{len(parsed.rows)} rows imported.",
            rows_imported=len(parsed.rows),
            total_snapshots=len(history.snapshots),
            timestamp=timestamp,
        )
