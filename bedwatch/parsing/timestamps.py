"""
Resolution of the export's free-text "last updated" field.

The export writes local wall-clock time without a zone, e.g. "3/4/2026 2:15 PM".
The offset comes from a fixed transition rule (config.DST_RULE) rather than
the tz database, because the export only ever covers one transition.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..config import CSV_QUOTE, DST_RULE, DstRule
from ..logger import setup_logger

logger = setup_logger(__name__)

_LAST_UPDATED = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})\s+(\d{1,2}):(\d{2})(.*)$')


def offset_for(month: int, day: int, rule: DstRule = DST_RULE) -> timezone:
    """UTC offset in effect on a given month/day under the rule."""
    is_daylight = month > rule.start_month or (month == rule.start_month and day >= rule.start_day)
    hours = rule.daylight_offset_hours if is_daylight else rule.standard_offset_hours
    return timezone(timedelta(hours=hours))


def to_24_hour(hour: int, suffix: str) -> int:
    """Apply an AM/PM marker (possibly followed by other text) to a clock hour."""
    suffix = suffix.strip().upper()
    if 'PM' in suffix and hour < 12:
        return hour + 12
    if 'AM' in suffix and hour == 12:
        return 0
    return hour


def resolve_timestamp(raw: Optional[str], rule: DstRule = DST_RULE) -> Optional[datetime]:
    """
    Parse a "M/D/YYYY H:MM [AM|PM]" string into an aware datetime.

    Args:
        raw: Cell contents, quotes allowed
        rule: Daylight-saving transition to apply

    Returns:
        Timezone-aware datetime, or None when the text does not match
    """
    if not raw:
        return None

    cleaned = raw.replace(CSV_QUOTE, '').strip()
    match = _LAST_UPDATED.match(cleaned)
    if not match:
        logger.debug(f"Unrecognized last-updated value: '{cleaned}'")
        return None

    month, day, year, hour, minute = (int(part) for part in match.groups()[:5])
    hour = to_24_hour(hour, match.group(6))

    try:
        result = datetime(year, month, day, hour, minute, tzinfo=offset_for(month, day, rule))
    except ValueError:
        logger.debug(f"Impossible last-updated value: '{cleaned}'")
        return None

    logger.debug(f"Resolved last-updated '{cleaned}' to {result.isoformat()}")
    return result


def ingestion_time() -> datetime:
    """Wall-clock fallback for exports without a usable timestamp."""
    return datetime.now(timezone.utc)
