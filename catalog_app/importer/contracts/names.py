"""Target-field contract for name imports.

Describes the logical fields a column mapping may point at, which of them are
required, and the mapping keys accepted for each reference column. The
mapping-fields endpoint renders this contract for the upload UI.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

GENDER_AUTO = "auto"
GENDER_CHOICES: Tuple[str, ...] = ("male", "female", "unisex")


@dataclass(frozen=True)
class FieldSpec:
    """Metadata describing a logical import field."""

    name: str
    label: str
    field_type: str
    required: bool = False
    aliases: Tuple[str, ...] = ()

    def mapping_keys(self) -> Tuple[str, ...]:
        """Return the canonical mapping key plus aliases, in lookup order."""

        return (self.name, *self.aliases)


NAME_IMPORT_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec(name="name", label="Name", field_type="text", required=True),
    FieldSpec(name="gender", label="Gender", field_type="select", required=True),
    FieldSpec(name="description", label="Description", field_type="text"),
    FieldSpec(name="religionId", label="Religion", field_type="select", aliases=("religion_id",)),
    FieldSpec(name="originId", label="Origin", field_type="select", aliases=("origin_id",)),
)

_FIELDS_BY_NAME = {spec.name: spec for spec in NAME_IMPORT_FIELDS}


def get_name_field_specs() -> Tuple[FieldSpec, ...]:
    return NAME_IMPORT_FIELDS


def get_field_spec(name: str) -> FieldSpec:
    try:
        return _FIELDS_BY_NAME[name]
    except KeyError as exc:
        raise KeyError(f"Unknown import field '{name}'.") from exc


def reference_mapping_keys(kind: str) -> Tuple[str, ...]:
    """Mapping keys that may carry the column for a ``religion`` or ``origin`` reference."""

    return get_field_spec(f"{kind}Id").mapping_keys()
