"""
Aggregation service - grouped availability, change and baselines.
Turns per-room-per-gender rows into per-(building, room type) totals for the
dashboard, and builds trend series across the full history.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Sequence

import pandas as pd

from ..config import (
    ALL,
    FILL_BANDS,
    FILL_BAND_FLOOR,
    FILL_BAND_NO_BASELINE,
    GENDER_ORDER,
)
from ..logger import setup_logger
from ..models import GroupKey, HousingHistory, Row

logger = setup_logger(__name__)

ROW_COLUMNS = ['building', 'room_type', 'gender', 'bed_spaces']
SORT_FIELDS = ('building', 'room_type', 'total_beds', 'change')
NUMERIC_SORT_FIELDS = ('total_beds', 'change')


@dataclass(frozen=True)
class RowFilter:
    """
    Active dashboard filters. "All" leaves a field unconstrained.

    Attributes:
        gender: Exact gender to keep
        building: Exact building to keep
        room_type: Exact room type to keep
        search: Case-insensitive substring of building or room type
    """
    gender: str = ALL
    building: str = ALL
    room_type: str = ALL
    search: str = ''


@dataclass
class GroupedRow:
    """Availability of one (building, room type) bucket in the latest snapshot."""
    key: GroupKey
    building: str
    room_type: str
    total_beds: int
    by_gender: Dict[str, int] = field(default_factory=dict)
    change: Optional[int] = None
    initial: int = 0

    @property
    def fill_ratio(self) -> float:
        """Remaining share of the baseline beds."""
        if self.initial <= 0:
            return 1.0
        return self.total_beds / self.initial

    @property
    def fill_band(self) -> str:
        return fill_band(self.total_beds, self.initial)

    def to_dict(self) -> dict:
        return {
            'key': [self.key.building, self.key.room_type],
            'building': self.building,
            'roomType': self.room_type,
            'totalBeds': self.total_beds,
            'byGender': dict(self.by_gender),
            'change': self.change,
            'initial': self.initial,
            'fillRatio': round(self.fill_ratio, 4),
            'fillBand': self.fill_band,
        }


@dataclass
class TrendPoint:
    """Filtered bed total of one bucket at one snapshot."""
    timestamp: datetime
    total: int
    by_gender: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp.isoformat(),
            'total': self.total,
            'byGender': dict(self.by_gender),
        }


@dataclass
class FilterOptions:
    """Choices offered by the dashboard filters, each starting with "All"."""
    genders: List[str]
    buildings: List[str]
    room_types: List[str]

    def to_dict(self) -> dict:
        return {'genders': self.genders, 'buildings': self.buildings, 'roomTypes': self.room_types}


@dataclass
class AvailabilityView:
    """Everything the availability table needs for one filter/sort selection."""
    rows: List[GroupedRow]
    total_beds: int
    snapshot_count: int
    last_updated: Optional[datetime]
    options: FilterOptions
    sort_field: str
    ascending: bool

    def to_dict(self) -> dict:
        return {
            'rows': [row.to_dict() for row in self.rows],
            'totalBeds': self.total_beds,
            'snapshotCount': self.snapshot_count,
            'lastUpdated': self.last_updated.isoformat() if self.last_updated else None,
            'options': self.options.to_dict(),
            'sort': self.sort_field,
            'direction': 'asc' if self.ascending else 'desc',
        }


# ============================================================================
# Helpers
# ============================================================================

def rows_to_frame(rows: Sequence[Row]) -> pd.DataFrame:
    """Build a DataFrame with one line per Row."""
    if not rows:
        return pd.DataFrame(columns=ROW_COLUMNS).astype({'bed_spaces': 'int64'})
    return pd.DataFrame(
        [(row.building, row.room_type, row.gender, row.bed_spaces) for row in rows],
        columns=ROW_COLUMNS,
    )


def apply_filter(df: pd.DataFrame, row_filter: RowFilter) -> pd.DataFrame:
    """Keep only the rows passing every active filter."""
    if df.empty:
        return df

    if row_filter.gender != ALL:
        df = df[df['gender'] == row_filter.gender]
    if row_filter.building != ALL:
        df = df[df['building'] == row_filter.building]
    if row_filter.room_type != ALL:
        df = df[df['room_type'] == row_filter.room_type]
    if row_filter.search:
        needle = row_filter.search.lower()
        df = df[
            df['building'].str.lower().str.contains(needle, regex=False)
            | df['room_type'].str.lower().str.contains(needle, regex=False)
        ]
    return df


def group_totals(df: pd.DataFrame) -> Dict[GroupKey, int]:
    """Sum bed spaces per (building, room type), in first-appearance order."""
    if df.empty:
        return {}
    totals = df.groupby(['building', 'room_type'], sort=False)['bed_spaces'].sum()
    return {GroupKey(building, room_type): int(total) for (building, room_type), total in totals.items()}


def group_by_gender(df: pd.DataFrame) -> Dict[GroupKey, Dict[str, int]]:
    """Sum bed spaces per gender inside each (building, room type)."""
    if df.empty:
        return {}
    totals = df.groupby(['building', 'room_type', 'gender'], sort=False)['bed_spaces'].sum()
    result: Dict[GroupKey, Dict[str, int]] = {}
    for (building, room_type, gender), total in totals.items():
        result.setdefault(GroupKey(building, room_type), {})[gender] = int(total)
    return result


def sort_genders(genders: Sequence[str]) -> List[str]:
    """Known genders in display order, anything else alphabetically after them."""
    def rank(gender: str):
        if gender in GENDER_ORDER:
            return (0, GENDER_ORDER.index(gender), '')
        return (1, 0, gender)
    return sorted(genders, key=rank)


def default_direction(sort_field: str) -> bool:
    """Initial direction for a sort field: ascending for text, descending for numbers."""
    return sort_field not in NUMERIC_SORT_FIELDS


def sort_grouped_rows(rows: List[GroupedRow], sort_field: str = 'total_beds', ascending: bool = False) -> List[GroupedRow]:
    """
    Sort grouped rows by one field.

    Args:
        rows: Rows to sort
        sort_field: One of building, room_type, total_beds, change
        ascending: Sort direction

    Returns:
        New sorted list; a missing change sorts as 0
    """
    if sort_field not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field: {sort_field}")

    if sort_field == 'change':
        key = lambda row: row.change if row.change is not None else 0
    else:
        key = lambda row: getattr(row, sort_field)
    return sorted(rows, key=key, reverse=not ascending)


def fill_band(current: int, initial: int) -> str:
    """
    Band name for how much of the baseline availability is left.

    Args:
        current: Beds available now
        initial: Beds available in the baseline snapshot

    Returns:
        One of plenty, good, limited, scarce, critical
    """
    if current == 0:
        return FILL_BAND_FLOOR
    if initial <= 0:
        return FILL_BAND_NO_BASELINE

    ratio = current / initial
    for lower_bound, band in FILL_BANDS:
        if ratio > lower_bound:
            return band
    return FILL_BAND_FLOOR


def _round_half_up(value: float) -> int:
    """Round half up."""
    return int(math.floor(value + 0.5))


# ============================================================================
# Service
# ============================================================================

class AggregationService:
    """
    Derives the dashboard view model from a HousingHistory.

    Every method is a pure function of its arguments: nothing is cached, so
    results are safe to recompute whenever the history or filters change.
    """

    @staticmethod
    def select_snapshots(history: HousingHistory):
        """
        Pick latest, previous and baseline snapshots by timestamp.

        Returns:
            Tuple of (latest, previous, baseline); entries are None when missing
        """
        ordered = history.chronological()
        if not ordered:
            return None, None, None
        latest = ordered[-1]
        previous = ordered[-2] if len(ordered) > 1 else None
        return latest, previous, ordered[0]

    def baseline_totals(self, history: HousingHistory, gender: str = ALL) -> Dict[GroupKey, int]:
        """Per-bucket totals of the first snapshot under the gender filter only."""
        _, _, baseline = self.select_snapshots(history)
        if baseline is None:
            return {}
        df = apply_filter(rows_to_frame(baseline.rows), RowFilter(gender=gender))
        return group_totals(df)

    def group_rows(
        self,
        history: HousingHistory,
        row_filter: Optional[RowFilter] = None,
        sort_field: str = 'total_beds',
        ascending: bool = False,
    ) -> List[GroupedRow]:
        """
        Group the latest snapshot by (building, room type).

        Args:
            history: Full history
            row_filter: Active filters (defaults to none)
            sort_field: Field to sort on
            ascending: Sort direction

        Returns:
            Sorted GroupedRows with change from the previous snapshot
        """
        row_filter = row_filter or RowFilter()
        latest, previous, _ = self.select_snapshots(history)
        if latest is None:
            return []

        latest_df = apply_filter(rows_to_frame(latest.rows), row_filter)
        totals = group_totals(latest_df)
        by_gender = group_by_gender(latest_df)

        previous_totals: Optional[Dict[GroupKey, int]] = None
        if previous is not None:
            previous_totals = group_totals(apply_filter(rows_to_frame(previous.rows), row_filter))

        initial_totals = self.baseline_totals(history, row_filter.gender)

        grouped = []
        for key, total in totals.items():
            change = None
            if previous_totals is not None and key in previous_totals:
                change = total - previous_totals[key]
            grouped.append(GroupedRow(
                key=key,
                building=key.building,
                room_type=key.room_type,
                total_beds=total,
                by_gender=by_gender.get(key, {}),
                change=change,
                initial=initial_totals.get(key, total),
            ))

        logger.debug(f"Grouped {len(latest_df)} rows into {len(grouped)} buckets")
        return sort_grouped_rows(grouped, sort_field, ascending)

    def filter_options(self, history: HousingHistory) -> FilterOptions:
        """Filter choices from the latest snapshot."""
        latest, _, _ = self.select_snapshots(history)
        rows = latest.rows if latest is not None else ()
        return FilterOptions(
            genders=[ALL] + sort_genders(list(dict.fromkeys(row.gender for row in rows))),
            buildings=[ALL] + list(dict.fromkeys(row.building for row in rows)),
            room_types=[ALL] + list(dict.fromkeys(row.room_type for row in rows)),
        )

    def build_view(
        self,
        history: HousingHistory,
        row_filter: Optional[RowFilter] = None,
        sort_field: str = 'total_beds',
        ascending: Optional[bool] = None,
    ) -> AvailabilityView:
        """Assemble the availability table view model."""
        if ascending is None:
            ascending = default_direction(sort_field)
        rows = self.group_rows(history, row_filter, sort_field, ascending)
        return AvailabilityView(
            rows=rows,
            total_beds=sum(row.total_beds for row in rows),
            snapshot_count=len(history.snapshots),
            last_updated=history.last_updated,
            options=self.filter_options(history),
            sort_field=sort_field,
            ascending=ascending,
        )

    def trend_series(
        self,
        history: HousingHistory,
        key: GroupKey,
        gender: Optional[str] = None,
    ) -> Iterator[TrendPoint]:
        """
        Yield one point per snapshot, oldest first, for a single bucket.

        Args:
            history: Full history
            key: Bucket to follow
            gender: Only count this gender; None or "All" for every gender

        Yields:
            TrendPoint with the filtered total; per-gender totals only when unfiltered
        """
        if gender == ALL:
            gender = None

        for snapshot in history.chronological():
            total = 0
            by_gender: Dict[str, int] = {}
            for row in snapshot.rows:
                if row.key != key:
                    continue
                if gender is not None and row.gender != gender:
                    continue
                total += row.bed_spaces
                if gender is None:
                    by_gender[row.gender] = by_gender.get(row.gender, 0) + row.bed_spaces
            yield TrendPoint(timestamp=snapshot.timestamp, total=total, by_gender=by_gender)

    def trend_genders(self, history: HousingHistory, key: GroupKey) -> List[str]:
        """Genders ever seen for a bucket, in display order."""
        seen = {row.gender for snapshot in history.snapshots for row in snapshot.rows if row.key == key}
        return sort_genders(list(seen))

    @staticmethod
    def trend_summary(points: Sequence[TrendPoint]) -> Dict[str, int]:
        """
        Start, current and filled percentage of a trend.

        Returns:
            Dict with start, current and filled_pct (share of starting beds taken)
        """
        start = points[0].total if points else 0
        current = points[-1].total if points else 0
        filled_pct = _round_half_up((start - current) / start * 100) if start > 0 else 0
        return {'start': start, 'current': current, 'filled_pct': filled_pct}


# Global singleton instance
_aggregation_service = AggregationService()


def get_aggregation_service() -> AggregationService:
    """
    Get the global AggregationService instance.

    Returns:
        AggregationService singleton
    """
    return _aggregation_service
