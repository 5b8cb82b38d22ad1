"""
API package - Storage access and HTTP endpoints.
"""

from .store import SnapshotStore, get_store

__all__ = [
    'SnapshotStore',
    'get_store',
]
