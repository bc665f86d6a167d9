import pytest

from catalog_app.importer.mapping import ColumnMapping, ImportOptions
from catalog_app.importer.pipeline.extract import CandidateRecord
from catalog_app.importer.pipeline.gender import classify_gender, coerce_gender, detect_gender, normalize_gender
from catalog_app.models import Gender


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Male", Gender.MALE),
        ("m", Gender.MALE),
        ("BOY", Gender.MALE),
        ("masculine", Gender.MALE),
        ("Female", Gender.FEMALE),
        ("f", Gender.FEMALE),
        ("girl", Gender.FEMALE),
        ("feminine", Gender.FEMALE),
        ("both", Gender.UNISEX),
        ("neutral", Gender.UNISEX),
        ("x", Gender.UNISEX),
        ("", Gender.UNISEX),
        (None, Gender.UNISEX),
    ],
)
def test_normalize_gender(value, expected):
    assert normalize_gender(value) == expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("John", Gender.MALE),
        ("Emma", Gender.FEMALE),
        ("Kiran", Gender.FEMALE),
        ("kumari", Gender.FEMALE),
        ("Rajkumari", Gender.MALE),
        ("Sunrani", Gender.FEMALE),
        ("Zara", Gender.FEMALE),
        ("Orion", Gender.MALE),
        ("Sky", Gender.UNISEX),
        ("  ", Gender.UNISEX),
    ],
)
def test_detect_gender_precedence(name, expected):
    assert detect_gender(name) == expected


def _candidate(name="Emma", gender=""):
    return CandidateRecord(name=name, gender=gender, description="", religion_ref=None, origin_ref=None)


def test_auto_mapping_always_detects():
    mapping = ColumnMapping.coerce({"name": "Name", "gender": "auto"})

    assert classify_gender(_candidate("John", "unisex"), mapping, ImportOptions()) == Gender.MALE


def test_auto_detect_option_only_applies_without_gender_column():
    options = ImportOptions(auto_detect_gender=True)
    unmapped = ColumnMapping.coerce({"name": "Name"})
    mapped = ColumnMapping.coerce({"name": "Name", "gender": "Gender"})

    assert classify_gender(_candidate("John"), unmapped, options) == Gender.MALE
    assert classify_gender(_candidate("John", "female"), mapped, options) == Gender.FEMALE


def test_blank_mapped_gender_defaults_to_unisex():
    mapping = ColumnMapping.coerce({"name": "Name", "gender": "Gender"})

    assert classify_gender(_candidate("John", ""), mapping, ImportOptions()) == Gender.UNISEX


def test_coerce_gender_falls_back_to_unisex():
    assert coerce_gender(Gender.MALE) == Gender.MALE
    assert coerce_gender("FEMALE") == Gender.FEMALE
    assert coerce_gender("robot") == Gender.UNISEX


def test_no_gender_column_without_detection_is_unisex():
    mapping = ColumnMapping.coerce({"name": "Name"})

    assert classify_gender(_candidate("John"), mapping, ImportOptions()) == Gender.UNISEX
