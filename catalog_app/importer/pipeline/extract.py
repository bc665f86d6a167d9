"""
Row extraction: turn an arbitrary CSV row into a candidate name record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from catalog_app.importer.errors import ExtractionError
from catalog_app.importer.mapping import ColumnMapping

NAME_REQUIRED_ERROR = "Name is required"


@dataclass(frozen=True)
class CandidateRecord:
    """Normalized values pulled from one raw row, before classification and resolution."""

    name: str
    gender: str
    description: str
    religion_ref: str | None
    origin_ref: str | None


def lookup_column(row: Mapping[str, str | None], column: str | None) -> str | None:
    """
    Return the cell for ``column``, matching the header case-insensitively when
    the exact header is absent. ``None`` means the column is not present.
    """

    if not column:
        return None
    if column in row:
        return row[column]
    wanted = column.lower()
    for key, value in row.items():
        if key is not None and key.lower() == wanted:
            return value
    return None


def _trimmed(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _first_reference(row: Mapping[str, str | None], columns: Sequence[str]) -> str | None:
    for column in columns:
        value = _trimmed(lookup_column(row, column))
        if value:
            return value
    return None


def extract_candidate(row: Mapping[str, str | None], mapping: ColumnMapping) -> CandidateRecord:
    """
    Build a :class:`CandidateRecord` from ``row`` using ``mapping``.

    Raises:
        ExtractionError: when the mapped name cell is missing or blank.
    """

    name = _trimmed(lookup_column(row, mapping.name))
    if not name:
        raise ExtractionError(NAME_REQUIRED_ERROR)

    if mapping.gender_is_auto:
        gender = "unisex"
    else:
        gender = _trimmed(lookup_column(row, mapping.gender))

    description = _trimmed(lookup_column(row, mapping.description)) if mapping.description else ""

    return CandidateRecord(
        name=name,
        gender=gender,
        description=description,
        religion_ref=_first_reference(row, mapping.religion_columns),
        origin_ref=_first_reference(row, mapping.origin_columns),
    )
