"""
Configuration constants for bedwatch.
Centralized configuration for storage, parsing heuristics, and behavior.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

# Storage
DATA_PATH = Path(
    os.environ.get(
        "BEDWATCH_DATA_PATH",
        str(Path(__file__).parent.parent / "data" / "housing.json"),
    )
)
STORE_LOCK_TIMEOUT_SECONDS = 5.0

# Column inference: role -> keywords in priority order
COLUMN_KEYWORDS: Dict[str, List[str]] = {
    'building': ['building', 'location', 'hall', 'residence'],
    'room_type': ['room type', 'roomtype', 'type', 'unit'],
    'gender': ['gender', 'sex', 'assignment'],
    'bed_spaces': ['bed', 'spaces', 'available', 'count'],
    'updated_at': ['last updated', 'lastupdated', 'updated'],
}
REQUIRED_ROLES = ('building', 'bed_spaces')

# Row defaults
DEFAULT_ROOM_TYPE = "Unknown"
DEFAULT_GENDER = "All"

# Delimited text
CSV_DELIMITER = ','
CSV_QUOTE = '"'


@dataclass(frozen=True)
class DstRule:
    """
    Fixed daylight-saving transition for the operating window.

    Dates on or after (start_month, start_day) use the daylight offset,
    earlier dates the standard offset. Update this when the window moves
    into a different year or season.
    """
    start_month: int
    start_day: int
    standard_offset_hours: int
    daylight_offset_hours: int


# 2026 US Pacific: PST (UTC-8) until March 8, PDT (UTC-7) from then on
DST_RULE = DstRule(start_month=3, start_day=8, standard_offset_hours=-8, daylight_offset_hours=-7)

# Filter sentinel and display order
ALL = "All"
GENDER_ORDER: List[str] = ['Female', 'Male', 'Gender Inclusive', 'Non-Binary']

# Fill bands by remaining share of baseline beds: (lower bound exclusive, band), checked top-down
FILL_BANDS = [
    (0.75, 'plenty'),
    (0.5, 'good'),
    (0.25, 'limited'),
    (0.1, 'scarce'),
]
FILL_BAND_FLOOR = 'critical'
FILL_BAND_NO_BASELINE = 'good'

# Upload API
ADMIN_PASSWORD = os.environ.get("BEDWATCH_ADMIN_PASSWORD", "")

# Scheduled fetch
SOURCE_URLS: List[str] = [
    url.strip()
    for url in os.environ.get(
        "BEDWATCH_SOURCE_URLS",
        "https://ucla.app.box.com/shared/static/0lsmybss0m99921jly29lqvgshyr74sb,"
        "https://ucla.app.box.com/index.php?rm=box_download_shared_file"
        "&shared_name=0lsmybss0m99921jly29lqvgshyr74sb&file_id=f_0",
    ).split(",")
    if url.strip()
]
FETCH_TIMEOUT_SECONDS = 30.0
FETCH_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

# Logging
LOG_LEVEL = os.environ.get("BEDWATCH_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
