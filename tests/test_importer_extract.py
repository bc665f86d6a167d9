import pytest

from catalog_app.importer.errors import ExtractionError
from catalog_app.importer.mapping import ColumnMapping
from catalog_app.importer.pipeline.extract import extract_candidate, lookup_column


def test_lookup_prefers_exact_header_then_case_insensitive():
    row = {"name": "lower", "NAME": "upper"}

    assert lookup_column(row, "NAME") == "upper"
    assert lookup_column({"NAME": "upper"}, "Name") == "upper"
    assert lookup_column(row, "missing") is None
    assert lookup_column(row, None) is None


def test_extract_trims_values_and_defaults_description():
    mapping = ColumnMapping.coerce({"name": "Name", "gender": "Gender"})

    candidate = extract_candidate({"Name": "  Aarav ", "Gender": " Male "}, mapping)

    assert candidate.name == "Aarav"
    assert candidate.gender == "Male"
    assert candidate.description == ""
    assert candidate.religion_ref is None
    assert candidate.origin_ref is None


@pytest.mark.parametrize("value", ["", "   ", None])
def test_extract_rejects_blank_name(value):
    mapping = ColumnMapping.coerce({"name": "Name", "gender": "Gender"})

    with pytest.raises(ExtractionError) as excinfo:
        extract_candidate({"Name": value, "Gender": "M"}, mapping)

    assert excinfo.value.reason == "Name is required"


def test_extract_auto_gender_yields_unisex_placeholder():
    mapping = ColumnMapping.coerce({"name": "Name", "gender": "auto"})

    candidate = extract_candidate({"Name": "Olivia", "auto": "male"}, mapping)

    assert candidate.gender == "unisex"


def test_extract_reference_first_non_blank_column_wins():
    mapping = ColumnMapping.coerce(
        {"name": "Name", "gender": "Gender", "religionId": "ReligionId", "religion_id": "Religion"}
    )

    first = extract_candidate({"Name": "A", "Gender": "f", "ReligionId": " ", "Religion": "Hindu"}, mapping)
    second = extract_candidate({"Name": "B", "Gender": "f", "ReligionId": "3", "Religion": "Hindu"}, mapping)

    assert first.religion_ref == "Hindu"
    assert second.religion_ref == "3"


def test_extract_keeps_zero_reference_distinct_from_blank():
    mapping = ColumnMapping.coerce({"name": "Name", "gender": "Gender", "originId": "Origin"})

    candidate = extract_candidate({"Name": "A", "Gender": "f", "Origin": "0"}, mapping)

    assert candidate.origin_ref == "0"


def test_extract_coerces_non_string_cells():
    mapping = ColumnMapping.coerce({"name": "Name", "gender": "Gender", "religionId": "Religion"})

    candidate = extract_candidate({"Name": "Ada", "Gender": "f", "Religion": 7}, mapping)

    assert candidate.religion_ref == "7"
