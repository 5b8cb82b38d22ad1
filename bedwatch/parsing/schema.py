"""
Header-to-role inference for loosely structured availability exports.

Exports from the housing office change header names and column order between
releases ("Building" vs "Residence Hall", "Beds Available" vs "Spaces"), so
columns are located by keyword rather than by exact name.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..config import COLUMN_KEYWORDS, REQUIRED_ROLES, CSV_QUOTE
from ..exceptions import MissingColumnsError
from ..logger import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class ColumnMapping:
    """Column index for each logical role, None when the export lacks it."""
    building: int
    bed_spaces: int
    room_type: Optional[int] = None
    gender: Optional[int] = None
    updated_at: Optional[int] = None

    def describe(self, headers: Sequence[str]) -> Dict[str, Optional[str]]:
        """Map each role to the header it was resolved to."""
        return {
            role: headers[index] if index is not None else None
            for role, index in (
                ('building', self.building),
                ('room_type', self.room_type),
                ('gender', self.gender),
                ('bed_spaces', self.bed_spaces),
                ('updated_at', self.updated_at),
            )
        }


def normalize_header(header: str) -> str:
    """Lowercase, trim and drop quotes from a header cell."""
    return header.strip().lower().replace(CSV_QUOTE, '')


def find_column(headers: Sequence[str], keywords: List[str]) -> Optional[int]:
    """
    Find the column for one role.

    Keywords are tried in priority order; for each keyword the earliest
    header containing it wins.

    Args:
        headers: Normalized header cells
        keywords: Substrings to look for, highest priority first

    Returns:
        Column index, or None when no header matches
    """
    for keyword in keywords:
        for index, header in enumerate(headers):
            if keyword in header:
                return index
    return None


def infer_columns(headers: Sequence[str]) -> ColumnMapping:
    """
    Resolve every role to a column index.

    Args:
        headers: Raw header cells from the first line

    Returns:
        ColumnMapping

    Raises:
        MissingColumnsError: If the building or bed count column cannot be found
    """
    normalized = [normalize_header(header) for header in headers]
    resolved = {role: find_column(normalized, keywords) for role, keywords in COLUMN_KEYWORDS.items()}

    missing = [role for role in REQUIRED_ROLES if resolved[role] is None]
    if missing:
        logger.warning(f"Required columns not found in headers {list(headers)}: {missing}")
        raise MissingColumnsError(missing)

    mapping = ColumnMapping(**resolved)
    logger.info(f"Resolved columns: {mapping.describe(list(headers))}")
    return mapping
