"""
Housing availability data models.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, NamedTuple, Optional, Tuple

from ..config import DEFAULT_GENDER, DEFAULT_ROOM_TYPE


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 string into an aware datetime (naive values are taken as UTC)."""
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class GroupKey(NamedTuple):
    """Identity of a (building, room type) aggregation bucket."""
    building: str
    room_type: str


@dataclass(frozen=True)
class Row:
    """
    One (building, room type, gender) bed count at a point in time.

    Attributes:
        building: Building / hall name
        room_type: Room type, "Unknown" when the export has none
        gender: Gender assignment, "All" when the export has none
        bed_spaces: Available bed spaces
    """
    building: str
    room_type: str = DEFAULT_ROOM_TYPE
    gender: str = DEFAULT_GENDER
    bed_spaces: int = 0

    def __post_init__(self):
        """Validate row data."""
        if not self.building or not self.building.strip():
            raise ValueError("Building cannot be empty")
        if self.bed_spaces < 0:
            raise ValueError("Bed spaces cannot be negative")

    @property
    def key(self) -> GroupKey:
        return GroupKey(self.building, self.room_type)

    def to_dict(self) -> dict:
        """Convert row to its persisted form."""
        return {
            'building': self.building,
            'roomType': self.room_type,
            'gender': self.gender,
            'bedSpaces': self.bed_spaces,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Row':
        """Create Row from its persisted form."""
        return cls(
            building=data['building'],
            room_type=data.get('roomType') or DEFAULT_ROOM_TYPE,
            gender=data.get('gender') or DEFAULT_GENDER,
            bed_spaces=int(data.get('bedSpaces', 0)),
        )


@dataclass(frozen=True)
class Snapshot:
    """One ingestion event: every row of a single export at one instant."""
    timestamp: datetime
    rows: Tuple[Row, ...] = ()

    def __post_init__(self):
        if self.timestamp.tzinfo is None:
            raise ValueError("Snapshot timestamp must be timezone-aware")
        # Accept any sequence, store a tuple
        object.__setattr__(self, 'rows', tuple(self.rows))

    @property
    def total_beds(self) -> int:
        return sum(row.bed_spaces for row in self.rows)

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp.isoformat(),
            'rows': [row.to_dict() for row in self.rows],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Snapshot':
        return cls(
            timestamp=parse_iso(data['timestamp']),
            rows=tuple(Row.from_dict(row) for row in data.get('rows', [])),
        )


@dataclass
class HousingHistory:
    """
    The persisted aggregate: every snapshot in insertion order.

    Attributes:
        snapshots: Snapshots in the order they were appended
        last_updated: Timestamp of the most recently appended snapshot
    """
    snapshots: List[Snapshot] = field(default_factory=list)
    last_updated: Optional[datetime] = None

    def has_timestamp(self, timestamp: datetime) -> bool:
        """Whether a snapshot with exactly this instant is already present."""
        return any(snapshot.timestamp == timestamp for snapshot in self.snapshots)

    def chronological(self) -> List[Snapshot]:
        """Snapshots sorted by timestamp (stable for equal instants)."""
        return sorted(self.snapshots, key=lambda snapshot: snapshot.timestamp)

    def to_dict(self) -> dict:
        """Convert history to the persisted JSON document."""
        return {
            'snapshots': [snapshot.to_dict() for snapshot in self.snapshots],
            'lastUpdated': self.last_updated.isoformat() if self.last_updated else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'HousingHistory':
        """Create HousingHistory from the persisted JSON document."""
        last_updated = data.get('lastUpdated')
        return cls(
            snapshots=[Snapshot.from_dict(snapshot) for snapshot in data.get('snapshots', [])],
            last_updated=parse_iso(last_updated) if last_updated else None,
        )
