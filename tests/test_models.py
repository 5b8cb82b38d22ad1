"""
Unit tests for data models
"""
import json
from datetime import datetime, timezone

import pytest

from bedwatch.models import GroupKey, HousingHistory, Row, Snapshot
from bedwatch.models.housing import parse_iso


class TestRowModel:
    """Test Row data model."""

    def test_defaults(self):
        row = Row("Hedrick")

        assert row.room_type == "Unknown"
        assert row.gender == "All"
        assert row.bed_spaces == 0

    def test_empty_building_rejected(self):
        with pytest.raises(ValueError):
            Row("   ")

    def test_negative_beds_rejected(self):
        with pytest.raises(ValueError):
            Row("Hedrick", bed_spaces=-1)

    def test_row_is_immutable(self):
        row = Row("Hedrick", bed_spaces=3)
        with pytest.raises(AttributeError):
            row.bed_spaces = 4

    def test_key(self):
        assert Row("Hedrick", "Double", "Male", 2).key == GroupKey("Hedrick", "Double")

    def test_dict_keys(self):
        assert Row("Hedrick", "Double", "Male", 2).to_dict() == {
            "building": "Hedrick",
            "roomType": "Double",
            "gender": "Male",
            "bedSpaces": 2,
        }


class TestGroupKey:
    """Test GroupKey identity."""

    def test_delimiters_in_values_do_not_collide(self):
        assert GroupKey("A,B", "C") != GroupKey("A", "B,C")
        assert GroupKey('A"', "B") != GroupKey("A", '"B')

    def test_usable_as_dict_key(self):
        totals = {GroupKey("Hedrick", "Double"): 3}
        assert totals[GroupKey(building="Hedrick", room_type="Double")] == 3


class TestSnapshotModel:
    """Test Snapshot data model."""

    def test_naive_timestamp_rejected(self):
        with pytest.raises(ValueError):
            Snapshot(timestamp=datetime(2026, 3, 4, 12, 0))

    def test_rows_become_tuple(self):
        snapshot = Snapshot(datetime(2026, 3, 4, tzinfo=timezone.utc), [Row("Hedrick", bed_spaces=2)])
        assert isinstance(snapshot.rows, tuple)
        assert snapshot.total_beds == 2


class TestHousingHistory:
    """Test HousingHistory serialization."""

    def test_empty_document(self):
        assert HousingHistory().to_dict() == {"snapshots": [], "lastUpdated": None}

    def test_round_trip(self, history):
        document = json.loads(json.dumps(history.to_dict()))
        assert HousingHistory.from_dict(document) == history

    def test_document_layout(self, history):
        document = history.to_dict()

        assert set(document) == {"snapshots", "lastUpdated"}
        assert set(document["snapshots"][0]) == {"timestamp", "rows"}
        assert document["snapshots"][0]["timestamp"] == "2026-03-04T09:00:00-08:00"
        assert document["lastUpdated"] == "2026-03-04T12:00:00-08:00"

    def test_has_timestamp_compares_instants(self, history):
        same_instant = datetime(2026, 3, 4, 17, 0, tzinfo=timezone.utc)  # 09:00 -08:00
        assert history.has_timestamp(same_instant)

    def test_chronological(self, history):
        hours = [snapshot.timestamp.hour for snapshot in history.chronological()]
        assert hours == [9, 12, 15]

    def test_parse_iso_accepts_z_suffix(self):
        assert parse_iso("2026-03-04T17:00:00.000Z") == datetime(2026, 3, 4, 17, 0, tzinfo=timezone.utc)
