"""
Unit tests for SnapshotStore
"""
import json
from datetime import timezone
from unittest.mock import MagicMock, patch

import pytest

from bedwatch.api.store import SnapshotStore
from bedwatch.exceptions import DuplicateTimestampError, StoreWriteError
from bedwatch.logger import log_history_stats
from bedwatch.models import HousingHistory


@pytest.mark.unit
class TestSnapshotStore:
    """Test SnapshotStore load/append."""

    def test_load_missing_file_is_empty(self, store):
        history = store.load()

        assert history.snapshots == []
        assert history.last_updated is None

    @pytest.mark.parametrize("content", ["", "{not json", "[]", '{"snapshots": [{"rows": []}]}', '"text"'])
    def test_load_corrupt_file_is_empty(self, store, content):
        store.path.parent.mkdir(parents=True, exist_ok=True)
        store.path.write_text(content, encoding="utf-8")

        assert store.load() == HousingHistory()

    def test_append_persists(self, store, make_snapshot):
        snapshot = make_snapshot(9, [("Hedrick", "Double", "Female", 10)])

        history = store.append(snapshot)

        assert history.snapshots == [snapshot]
        assert history.last_updated == snapshot.timestamp
        assert store.load() == history

    def test_append_keeps_insertion_order(self, store, make_snapshot):
        later = make_snapshot(15, [("Hedrick", "Double", "Female", 8)])
        earlier = make_snapshot(9, [("Hedrick", "Double", "Female", 10)])

        store.append(later)
        history = store.append(earlier)

        assert history.snapshots == [later, earlier]
        assert history.last_updated == earlier.timestamp

    def test_duplicate_timestamp_rejected(self, store, make_snapshot):
        store.append(make_snapshot(9, [("Hedrick", "Double", "Female", 10)]))
        before = store.path.read_text(encoding="utf-8")

        with pytest.raises(DuplicateTimestampError):
            store.append(make_snapshot(9, [("Hedrick", "Double", "Female", 99)]))

        assert store.path.read_text(encoding="utf-8") == before
        assert len(store.load().snapshots) == 1

    def test_duplicate_detected_across_offsets(self, store, make_snapshot):
        snapshot = make_snapshot(9, [("Hedrick", "Double", "Female", 10)])
        store.append(snapshot)
        same_instant = snapshot.timestamp.astimezone(timezone.utc)

        with pytest.raises(DuplicateTimestampError):
            store.append(type(snapshot)(timestamp=same_instant, rows=snapshot.rows))

    def test_document_layout_on_disk(self, store, make_snapshot):
        store.append(make_snapshot(9, [("Hedrick", "Double", "Female", 10)]))

        document = json.loads(store.path.read_text(encoding="utf-8"))

        assert document == {
            "snapshots": [{
                "timestamp": "2026-03-04T09:00:00-08:00",
                "rows": [{"building": "Hedrick", "roomType": "Double", "gender": "Female", "bedSpaces": 10}],
            }],
            "lastUpdated": "2026-03-04T09:00:00-08:00",
        }

    def test_append_refuses_to_overwrite_corrupt_history(self, store, make_snapshot):
        store.append(make_snapshot(9, [("Hedrick", "Double", "Female", 10)]))
        intact = store.path.read_text(encoding="utf-8")
        truncated = intact[:len(intact) // 2]
        store.path.write_text(truncated, encoding="utf-8")

        with pytest.raises(StoreWriteError) as exc_info:
            store.append(make_snapshot(12, [("Hedrick", "Double", "Female", 8)]))

        assert "unreadable" in str(exc_info.value)
        assert store.path.read_text(encoding="utf-8") == truncated
        assert store.load() == HousingHistory()

    def test_load_logs_history_stats(self, store, make_snapshot):
        store.append(make_snapshot(9, [("Hedrick", "Double", "Female", 10), ("Hedrick", "Double", "Male", 5)]))

        with patch("bedwatch.api.store.log_history_stats") as log_stats:
            history = store.load()

        log_stats.assert_called_once()
        assert log_stats.call_args.args[0] is history

    def test_write_failure_raises_and_keeps_old_state(self, store, make_snapshot):
        first = make_snapshot(9, [("Hedrick", "Double", "Female", 10)])
        store.append(first)

        with patch("bedwatch.api.store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StoreWriteError) as exc_info:
                store.append(make_snapshot(12, [("Hedrick", "Double", "Female", 8)]))

        assert "disk full" in str(exc_info.value)
        assert store.load().snapshots == [first]
        assert not store.path.with_suffix(".json.tmp").exists()

    def test_lock_timeout_raises(self, store, make_snapshot):
        store._lock.acquire()
        try:
            with pytest.raises(StoreWriteError):
                store.append(make_snapshot(9, [("Hedrick", "Double", "Female", 10)]))
        finally:
            store._lock.release()

    def test_default_path_from_config(self):
        from bedwatch.config import DATA_PATH

        assert SnapshotStore().path == DATA_PATH


@pytest.mark.unit
class TestHistoryStats:
    """Test the history summary logged on load."""

    def test_summary_includes_latest_bed_total(self, history):
        logger = MagicMock()

        log_history_stats(history, logger)

        message = logger.info.call_args.args[0]
        assert "3 snapshots" in message
        assert f"{history.chronological()[-1].total_beds} beds in latest" in message

    def test_empty_history(self):
        logger = MagicMock()

        log_history_stats(HousingHistory(), logger)

        assert "no snapshots" in logger.info.call_args.args[0]
