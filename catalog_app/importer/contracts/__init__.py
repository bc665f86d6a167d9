"""Import contracts describing the target schema."""

from .names import (
    GENDER_AUTO,
    GENDER_CHOICES,
    NAME_IMPORT_FIELDS,
    FieldSpec,
    get_field_spec,
    get_name_field_specs,
    reference_mapping_keys,
)

__all__ = [
    "GENDER_AUTO",
    "GENDER_CHOICES",
    "NAME_IMPORT_FIELDS",
    "FieldSpec",
    "get_field_spec",
    "get_name_field_specs",
    "reference_mapping_keys",
]
