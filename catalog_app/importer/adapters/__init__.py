"""Importer adapter implementations."""

from __future__ import annotations

from .csv_rows import (
    CSVAdapterError,
    CSVHeaderError,
    CSVPreview,
    CSVRowReader,
    CSVStatistics,
    RawRow,
    read_csv_file,
)

__all__ = [
    "CSVAdapterError",
    "CSVHeaderError",
    "CSVPreview",
    "CSVRowReader",
    "CSVStatistics",
    "RawRow",
    "read_csv_file",
]
