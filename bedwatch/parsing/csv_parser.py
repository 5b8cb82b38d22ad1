"""
CSV parsing module for housing availability exports.
Shared by the upload endpoint and the scheduled fetch so both ingest identically.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..exceptions import MissingColumnsError
from ..logger import setup_logger
from ..models import Row
from .normalizer import cell_at, normalize_rows
from .schema import ColumnMapping, infer_columns
from .tabular import parse_table
from .timestamps import resolve_timestamp

logger = setup_logger(__name__)


@dataclass
class ParseResult:
    """
    Outcome of parsing one export.

    Attributes:
        rows: Normalized rows in source order
        last_updated: Timestamp taken from the export, if any
        mapping: Resolved columns (None when the headers could not be mapped)
        error: Human-readable reason when no rows could be produced
    """
    rows: List[Row] = field(default_factory=list)
    last_updated: Optional[datetime] = None
    mapping: Optional[ColumnMapping] = None
    error: Optional[str] = None


def find_last_updated(lines: List[List[str]], mapping: ColumnMapping) -> Optional[datetime]:
    """First resolvable updated-at value among lines that carry a building."""
    if mapping.updated_at is None:
        return None

    for cells in lines:
        if not cell_at(cells, mapping.building):
            continue
        value = cell_at(cells, mapping.updated_at)
        if value:
            resolved = resolve_timestamp(value)
            if resolved is not None:
                return resolved
    return None


def parse_csv(text: str) -> ParseResult:
    """
    Parse an availability export into rows and its last-updated time.

    Structural problems (too few lines, unmappable headers) never raise;
    they come back as an empty result with `error` set.

    Args:
        text: Decoded file contents

    Returns:
        ParseResult
    """
    table = parse_table(text)
    if table.is_empty:
        logger.warning("Export has fewer than two lines, nothing to parse")
        return ParseResult(error="File has no data rows.")

    try:
        mapping = infer_columns(table.headers)
    except MissingColumnsError as e:
        return ParseResult(error=str(e))

    rows = normalize_rows(table.rows, mapping)
    last_updated = find_last_updated(table.rows, mapping)

    logger.info(
        f"Parsed {len(rows)} rows from {len(table.rows)} data lines, "
        f"last updated: {last_updated.isoformat() if last_updated else 'not found'}"
    )
    if not rows:
        return ParseResult(mapping=mapping, error="No data rows with a building were found.")
    return ParseResult(rows=rows, last_updated=last_updated, mapping=mapping)
