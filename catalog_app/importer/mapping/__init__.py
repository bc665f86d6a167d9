"""Column mapping and import option parsing for name imports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from catalog_app.importer.contracts import GENDER_AUTO, reference_mapping_keys


def _clean_header(value: Any) -> str | None:
    if value is None:
        return None
    token = str(value).strip()
    return token or None


def _coerce_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    value_str = str(value).strip().lower()
    if value_str in {"1", "true", "yes", "on"}:
        return True
    if value_str in {"0", "false", "no", "off", ""}:
        return False
    return default


@dataclass(frozen=True)
class ColumnMapping:
    """
    Maps logical fields onto the headers present in the uploaded CSV.

    ``religion_columns`` and ``origin_columns`` hold every header supplied under
    the ``xId``/``x_id`` keys, in that order, so the first non-blank cell wins.
    """

    name: str | None
    gender: str | None = None
    description: str | None = None
    religion_columns: tuple[str, ...] = ()
    origin_columns: tuple[str, ...] = ()
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, payload: Mapping[str, Any] | None) -> "ColumnMapping":
        payload = dict(payload or {})

        def _columns(kind: str) -> tuple[str, ...]:
            headers = []
            for key in reference_mapping_keys(kind):
                header = _clean_header(payload.get(key))
                if header and header not in headers:
                    headers.append(header)
            return tuple(headers)

        return cls(
            name=_clean_header(payload.get("name")),
            gender=_clean_header(payload.get("gender")),
            description=_clean_header(payload.get("description")),
            religion_columns=_columns("religion"),
            origin_columns=_columns("origin"),
            raw=payload,
        )

    @property
    def gender_is_auto(self) -> bool:
        return (self.gender or "").lower() == GENDER_AUTO

    @property
    def has_gender_column(self) -> bool:
        return bool(self.gender) and not self.gender_is_auto

    def as_audit_dict(self) -> dict[str, Any]:
        """Mapping exactly as supplied, for the import job audit record."""

        return {str(key): value for key, value in self.raw.items()}


@dataclass(frozen=True)
class ImportOptions:
    """Duplicate-handling and gender options supplied with an import."""

    auto_detect_gender: bool = False
    skip_duplicates: bool = False
    update_duplicates: bool = False
    update_and_insert: bool = False

    @classmethod
    def coerce(cls, payload: Mapping[str, Any] | None) -> "ImportOptions":
        payload = payload or {}
        return cls(
            auto_detect_gender=_coerce_bool(payload.get("autoDetectGender", payload.get("auto_detect_gender"))),
            skip_duplicates=_coerce_bool(payload.get("skipDuplicates", payload.get("skip_duplicates"))),
            update_duplicates=_coerce_bool(payload.get("updateDuplicates", payload.get("update_duplicates"))),
            update_and_insert=_coerce_bool(payload.get("updateAndInsert", payload.get("update_and_insert"))),
        )

    @property
    def should_update_on_duplicate(self) -> bool:
        # Both flags trigger the same in-place update.
        return self.update_duplicates or self.update_and_insert

    def as_audit_dict(self) -> dict[str, bool]:
        return {
            "autoDetectGender": self.auto_detect_gender,
            "skipDuplicates": self.skip_duplicates,
            "updateDuplicates": self.update_duplicates,
            "updateAndInsert": self.update_and_insert,
        }


__all__ = ["ColumnMapping", "ImportOptions"]
