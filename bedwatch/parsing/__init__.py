"""Parsing package for export ingestion and timestamp handling."""

from .tabular import Table, parse_table, split_line
from .schema import ColumnMapping, infer_columns
from .normalizer import normalize_row, normalize_rows, parse_bed_count
from .timestamps import resolve_timestamp
from .csv_parser import ParseResult, parse_csv
