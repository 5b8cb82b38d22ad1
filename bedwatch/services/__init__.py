"""
Services package - Business logic layer.
"""

from .aggregation_service import AggregationService, RowFilter
from .ingestion_service import IngestionService, IngestResult, IngestStatus

__all__ = ['AggregationService', 'RowFilter', 'IngestionService', 'IngestResult', 'IngestStatus']
