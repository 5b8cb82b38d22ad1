"""
Models package - Data models and type definitions.
"""

from .housing import GroupKey, HousingHistory, Row, Snapshot

__all__ = ['GroupKey', 'HousingHistory', 'Row', 'Snapshot']
