"""CSV adapter for name imports.

Uploaded files carry arbitrary headers; the first row is taken as the header
and every later row is mapped positionally onto it. No header validation
happens here beyond requiring one: matching headers to catalog fields is the
column mapping's job.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator

RawRow = dict[str, str]


class CSVAdapterError(Exception):
    """Base exception for CSV adapter failures."""


class CSVHeaderError(CSVAdapterError):
    """Raised when the CSV has no usable header row."""

    def __init__(self, message: str = "CSV header row is missing or empty.") -> None:
        super().__init__(message)


@dataclass
class CSVStatistics:
    """Accumulated statistics from CSV parsing."""

    rows_processed: int = 0
    rows_skipped_blank: int = 0


@dataclass(frozen=True)
class CSVPreview:
    headers: tuple[str, ...]
    rows: tuple[RawRow, ...]
    total_rows: int


def _sanitize_header(header: str | None) -> str:
    return (header or "").lstrip("\ufeff").strip()


def _row_is_blank(row: RawRow) -> bool:
    return all(value.strip() == "" for value in row.values())


class CSVRowReader:
    """Streams CSV rows as ordered ``header -> value`` mappings."""

    def __init__(self, file_obj: IO[str], *, skip_blank_rows: bool = True) -> None:
        self._file_obj = file_obj
        self.skip_blank_rows = skip_blank_rows
        self._headers: tuple[str, ...] | None = None
        self.statistics = CSVStatistics()

    @property
    def headers(self) -> tuple[str, ...] | None:
        return self._headers

    def _prepare_reader(self) -> csv.DictReader:
        self._file_obj.seek(0)
        reader = csv.DictReader(self._file_obj, restval="")
        if not reader.fieldnames:
            raise CSVHeaderError()

        headers = tuple(_sanitize_header(header) for header in reader.fieldnames)
        if not any(headers):
            raise CSVHeaderError()
        reader.fieldnames = list(headers)
        self._headers = headers
        return reader

    def iter_rows(self) -> Iterator[RawRow]:
        reader = self._prepare_reader()
        self.statistics = CSVStatistics()
        for raw_row in reader:
            # Cells beyond the header land under the ``None`` key; drop them.
            row = {key: (value if value is not None else "") for key, value in raw_row.items() if key is not None}

            if self.skip_blank_rows and _row_is_blank(row):
                self.statistics.rows_skipped_blank += 1
                continue

            self.statistics.rows_processed += 1
            yield row

    def read_all(self) -> list[RawRow]:
        return list(self.iter_rows())

    def preview(self, limit: int = 10) -> CSVPreview:
        rows = self.read_all()
        return CSVPreview(
            headers=self._headers or (),
            rows=tuple(rows[: max(limit, 0)]),
            total_rows=len(rows),
        )


def read_csv_file(path: str | Path) -> list[RawRow]:
    """Read every non-blank row from a CSV file on disk."""

    with Path(path).open("r", encoding="utf-8-sig", newline="") as handle:
        return CSVRowReader(handle).read_all()
