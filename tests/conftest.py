"""
Pytest configuration and fixtures
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

PST = timezone(timedelta(hours=-8))


@pytest.fixture
def sample_csv():
    """A realistic export with quoting, a blank separator line and a timestamp column."""
    return (
        'Residence Hall,Room Type,Gender,Beds Available,Last Updated\n'
        'Hedrick Hall,"Double, Deluxe",Female,10,"3/4/2026 2:15 PM"\n'
        'Hedrick Hall,"Double, Deluxe",Male,5,"3/4/2026 2:15 PM"\n'
        ',,,,\n'
        'Rieber Terrace,Triple,Female,7,"3/4/2026 2:15 PM"\n'
        'Rieber Terrace,Triple,Gender Inclusive,n/a,"3/4/2026 2:15 PM"\n'
    )


@pytest.fixture
def store(tmp_path):
    """Snapshot store backed by a temporary file."""
    from bedwatch.api.store import SnapshotStore

    return SnapshotStore(tmp_path / "data" / "housing.json", lock_timeout=0.5)


@pytest.fixture
def make_snapshot():
    """Build a snapshot from (building, room_type, gender, beds) tuples."""
    from bedwatch.models import Row, Snapshot

    def _make(hour: int, rows, day: int = 4):
        return Snapshot(
            timestamp=datetime(2026, 3, day, hour, 0, tzinfo=PST),
            rows=tuple(Row(building, room_type, gender, beds) for building, room_type, gender, beds in rows),
        )

    return _make


@pytest.fixture
def history(make_snapshot):
    """Three snapshots of two halls, appended out of chronological order."""
    from bedwatch.models import HousingHistory

    first = make_snapshot(9, [
        ("Hedrick", "Double", "Female", 20),
        ("Hedrick", "Double", "Male", 20),
        ("Rieber", "Triple", "Female", 12),
    ])
    second = make_snapshot(12, [
        ("Hedrick", "Double", "Female", 14),
        ("Hedrick", "Double", "Male", 16),
        ("Rieber", "Triple", "Female", 9),
    ])
    third = make_snapshot(15, [
        ("Hedrick", "Double", "Female", 10),
        ("Hedrick", "Double", "Male", 12),
        ("Rieber", "Triple", "Female", 9),
        ("Sproul", "Single", "Male", 4),
    ])
    # Insertion order differs from time order on purpose
    return HousingHistory(snapshots=[first, third, second], last_updated=second.timestamp)
