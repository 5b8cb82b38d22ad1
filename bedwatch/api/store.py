"""
Snapshot store backed by a single JSON document.
Handles loading the housing history and the append-only write path.
"""

import json
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from ..config import DATA_PATH, STORE_LOCK_TIMEOUT_SECONDS
from ..exceptions import DuplicateTimestampError, StoreWriteError
from ..logger import log_history_stats, setup_logger
from ..models import HousingHistory, Snapshot

logger = setup_logger(__name__)


class SnapshotStore:
    """
    Append-only, ordered collection of snapshots.

    `append` is the only write path. Readers get a fresh HousingHistory from
    `load` and never share state with the writer.
    """

    def __init__(self, path: Optional[Path] = None, lock_timeout: float = STORE_LOCK_TIMEOUT_SECONDS):
        self.path = Path(path) if path is not None else DATA_PATH
        self.lock_timeout = lock_timeout
        self._lock = threading.Lock()

    def load(self) -> HousingHistory:
        """
        Read the full history.

        Returns:
            HousingHistory; empty when the document is missing or unreadable
        """
        try:
            history = self._read()
        except ValueError as e:
            logger.warning(f"Could not read history at {self.path}, treating as empty: {e}")
            return HousingHistory()

        log_history_stats(history, logger)
        return history

    def _read(self) -> HousingHistory:
        """
        Read the document without hiding damage.

        Raises:
            ValueError: If the document exists but cannot be read or parsed
        """
        if not self.path.exists():
            logger.debug(f"No history at {self.path}, starting empty")
            return HousingHistory()

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return HousingHistory.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise ValueError(str(e)) from e

    def append(self, snapshot: Snapshot) -> HousingHistory:
        """
        Append a snapshot and persist the history.

        An existing document that cannot be read is left untouched.

        Args:
            snapshot: Snapshot to add

        Returns:
            The history after the append

        Raises:
            DuplicateTimestampError: If a snapshot with the same timestamp exists
            StoreWriteError: If the document is unreadable or could not be written
        """
        with self._exclusive():
            try:
                history = self._read()
            except ValueError as e:
                logger.error(f"Refusing to overwrite unreadable history at {self.path}: {e}")
                raise StoreWriteError(self.path, f"existing history is unreadable: {e}") from e

            if history.has_timestamp(snapshot.timestamp):
                logger.info(f"Snapshot for {snapshot.timestamp.isoformat()} already exists, skipping")
                raise DuplicateTimestampError(snapshot.timestamp)

            history.snapshots.append(snapshot)
            history.last_updated = snapshot.timestamp
            self._write(history)

        logger.info(
            f"Saved snapshot {snapshot.timestamp.isoformat()} ({len(snapshot.rows)} rows). "
            f"Total snapshots: {len(history.snapshots)}"
        )
        return history

    @contextmanager
    def _exclusive(self):
        """Hold the write lock, giving up after the configured timeout."""
        if not self._lock.acquire(timeout=self.lock_timeout):
            raise StoreWriteError(self.path, f"timed out after {self.lock_timeout}s waiting for write lock")
        try:
            yield
        finally:
            self._lock.release()

    def _write(self, history: HousingHistory):
        """Write the document to a temp file, fsync it, then swap it into place."""
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(history.to_dict(), f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to write history to {self.path}: {e}")
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError as cleanup_error:
                    logger.warning(f"Failed to remove temp file {tmp_path.name}: {cleanup_error}")
            raise StoreWriteError(self.path, e) from e


# Global singleton instance
_store: Optional[SnapshotStore] = None


def get_store() -> SnapshotStore:
    """
    Get the global SnapshotStore for the configured data path.

    Returns:
        SnapshotStore singleton
    """
    global _store
    if _store is None:
        _store = SnapshotStore()
    return _store
