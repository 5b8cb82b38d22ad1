"""Bed-space availability tracking: export ingestion, snapshot history and aggregation."""

__version__ = "0.1.0"
