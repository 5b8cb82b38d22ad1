"""
Conversion of split cells into canonical Row records.
"""

import re
from typing import Iterable, List, Optional, Sequence

from ..config import CSV_QUOTE, DEFAULT_GENDER, DEFAULT_ROOM_TYPE
from ..logger import setup_logger
from ..models import Row
from .schema import ColumnMapping

logger = setup_logger(__name__)

# Leading integer, e.g. "12", " 12 beds", "3.5" -> 3
_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


def cell_at(cells: Sequence[str], index: Optional[int]) -> str:
    """Cell value with quotes removed, '' for unresolved or missing columns."""
    if index is None or index >= len(cells):
        return ''
    return cells[index].replace(CSV_QUOTE, '').strip()


def parse_bed_count(value: str) -> int:
    """Parse a bed count; anything unusable counts as 0."""
    match = _LEADING_INT.match(value or '')
    if not match:
        return 0
    return max(int(match.group(1)), 0)


def normalize_row(cells: Sequence[str], mapping: ColumnMapping) -> Optional[Row]:
    """
    Build a Row from one data line.

    Args:
        cells: Split cells of the line
        mapping: Resolved column indices

    Returns:
        Row, or None when the line has no building (separator / blank line)
    """
    building = cell_at(cells, mapping.building)
    if not building:
        return None

    raw_beds = cell_at(cells, mapping.bed_spaces)
    bed_spaces = parse_bed_count(raw_beds)
    if raw_beds and not _LEADING_INT.match(raw_beds):
        logger.debug(f"Unusable bed count {raw_beds!r} for {building}, using 0")

    return Row(
        building=building,
        room_type=cell_at(cells, mapping.room_type) or DEFAULT_ROOM_TYPE,
        gender=cell_at(cells, mapping.gender) or DEFAULT_GENDER,
        bed_spaces=bed_spaces,
    )


def normalize_rows(lines: Iterable[Sequence[str]], mapping: ColumnMapping) -> List[Row]:
    """
    Normalize every data line, skipping lines without a building.

    Args:
        lines: Split cells per data line
        mapping: Resolved column indices

    Returns:
        Rows in source order
    """
    rows = []
    skipped = 0
    for cells in lines:
        row = normalize_row(cells, mapping)
        if row is None:
            skipped += 1
            continue
        rows.append(row)

    if skipped:
        logger.debug(f"Skipped {skipped} lines without a building")
    return rows
