"""
Logging configuration for bedwatch.

Every module logs through `setup_logger(__name__)`: the inferred column mapping
and skipped cells during parsing, snapshot saves, duplicate skips and store
failures, and fetch attempts per source URL. Output goes to stdout and to
logs/bedwatch.log.
"""

import logging
import sys
from pathlib import Path
from .config import LOG_LEVEL, LOG_FORMAT

# Log file path
LOG_DIR = Path(__file__).parent.parent / "logs"
LOG_DIR.mkdir(exist_ok=True)
LOG_FILE = LOG_DIR / "bedwatch.log"


def setup_logger(name: str) -> logging.Logger:
    """
    Set up a logger with both file and console handlers.

    Args:
        name: Name of the logger (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    # File handler - detailed logs
    file_handler = logging.FileHandler(LOG_FILE)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    # Console handler - INFO and above
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    return logger


def log_history_stats(history, logger: logging.Logger, name: str = "History"):
    """Log snapshot count, row count and latest bed total of a housing history."""
    if not history.snapshots:
        logger.info(f"{name}: no snapshots yet")
        return

    row_count = sum(len(snapshot.rows) for snapshot in history.snapshots)
    latest = history.chronological()[-1]
    logger.info(
        f"{name}: {len(history.snapshots)} snapshots, "
        f"{row_count} rows, "
        f"{latest.total_beds} beds in latest, "
        f"last updated: {history.last_updated.isoformat() if history.last_updated else 'never'}"
    )
