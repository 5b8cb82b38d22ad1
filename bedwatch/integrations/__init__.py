"""
Integrations package - Scheduled fetch of the source export.
"""

from .box_fetch import fetch_csv, fetch_snapshot

__all__ = ['fetch_csv', 'fetch_snapshot']
