from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError

from catalog_app.importer.pipeline.references import (
    CreationStatus,
    ReferenceResolver,
    parse_reference_id,
)
from catalog_app.models import Origin, Religion, db


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("12", 12),
        (" 7 ", 7),
        ("0", 0),
        ("-3", 0),
        ("1.5", 0),
        ("2147483647", 2147483647),
        ("2147483648", 0),
        ("99999999999999999999", 0),
        ("Hindu", None),
        ("12abc", None),
    ],
)
def test_parse_reference_id(raw, expected):
    assert parse_reference_id(raw) == expected


def test_blank_reference_resolves_to_none(load_context):
    resolver = ReferenceResolver("religion")

    assert resolver.resolve(None, load_context()) is None
    assert resolver.resolve("   ", load_context()) is None


def test_numeric_reference_resolves_active_id(make_religion, load_context):
    hindu = make_religion("Hindu")

    assert ReferenceResolver("religion").resolve(str(hindu.id), load_context()) == hindu.id


def test_numeric_reference_never_falls_back_to_name(make_religion, load_context):
    make_religion("42")

    resolved = ReferenceResolver("religion").resolve("999", load_context())

    assert resolved is None
    assert Religion.query.count() == 1


@pytest.mark.parametrize("raw", ["0", "-1", "2.5"])
def test_invalid_numeric_reference_resolves_to_none(raw, load_context):
    assert ReferenceResolver("origin").resolve(raw, load_context()) is None
    assert Origin.query.count() == 0


def test_inactive_numeric_id_is_not_reactivated(make_religion, load_context):
    retired = make_religion("Zoroastrian", is_active=False)

    resolved = ReferenceResolver("religion").resolve(str(retired.id), load_context())

    assert resolved is None
    db.session.refresh(retired)
    assert retired.is_active is False


def test_name_reference_matches_case_insensitively(make_origin, load_context):
    india = make_origin("India")

    assert ReferenceResolver("origin").resolve("  iNDIA ", load_context()) == india.id
    assert Origin.query.count() == 1


def test_name_reference_reactivates_inactive_entity(make_origin, load_context):
    persia = make_origin("Persia", is_active=False)
    context = load_context()

    resolved = ReferenceResolver("origin").resolve("persia", context)

    assert resolved == persia.id
    db.session.refresh(persia)
    assert persia.is_active is True
    assert "persia" not in context.origins.inactive


def test_unknown_name_is_created_once_per_run(admin_user, load_context):
    context = load_context(importer_id=admin_user.id)
    resolver = ReferenceResolver("religion")

    first = resolver.resolve("Jain", context)
    second = resolver.resolve("JAIN", context)

    assert first == second
    created = db.session.get(Religion, first)
    assert created.name == "Jain"
    assert created.is_active is True
    assert created.created_by_id == admin_user.id
    assert context.religions.created_count == 1
    assert context.new_references_created == 1


def test_overlong_name_is_not_created(load_context):
    context = load_context()

    assert ReferenceResolver("origin").resolve("x" * 51, context) is None
    assert Origin.query.count() == 0
    assert context.origins.created_count == 0


def test_store_requery_finds_row_added_after_cache_load(load_context, make_religion):
    context = load_context()
    sikh = make_religion("Sikh")

    assert ReferenceResolver("religion").resolve("sikh", context) == sikh.id
    assert context.religions.created_count == 0


def test_unique_violation_reuses_concurrent_row(load_context):
    context = load_context()
    resolver = ReferenceResolver("origin")
    real_find = resolver._find_by_key
    calls = {"count": 0}

    def _find_after_race(key):
        calls["count"] += 1
        if calls["count"] == 1:
            # First lookup misses; another writer inserts before our commit.
            db.session.add(Origin(name="Greece"))
            db.session.commit()
            return None
        return real_find(key)

    with patch.object(resolver, "_find_by_key", side_effect=_find_after_race):
        resolved = resolver.resolve("greece", context)

    existing = Origin.query.filter_by(name="Greece").one()
    assert resolved == existing.id
    assert context.origins.created_count == 0


def test_create_failure_reports_failed_result(load_context):
    resolver = ReferenceResolver("religion")

    with patch.object(db.session, "commit", side_effect=IntegrityError("INSERT", {}, Exception("boom"))):
        result = resolver._create("Bahai", created_by_id=None)

    assert result.status == CreationStatus.FAILED
    assert result.entity_id is None


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        ReferenceResolver("planet")


def test_store_requery_reactivates_inactive_row_added_after_cache_load(load_context, make_religion):
    context = load_context()
    jain = make_religion("Jain", is_active=False)

    resolved = ReferenceResolver("religion").resolve("JAIN", context)

    assert resolved == jain.id
    db.session.refresh(jain)
    assert jain.is_active is True
    assert context.religions.created_count == 0
    assert Religion.query.count() == 1


def test_unique_violation_reactivates_inactive_concurrent_row(load_context):
    context = load_context()
    resolver = ReferenceResolver("origin")
    real_find = resolver._find_by_key
    calls = {"count": 0}

    def _find_after_race(key):
        calls["count"] += 1
        if calls["count"] == 1:
            db.session.add(Origin(name="Persia", is_active=False))
            db.session.commit()
            return None
        return real_find(key)

    with patch.object(resolver, "_find_by_key", side_effect=_find_after_race):
        resolved = resolver.resolve("persia", context)

    existing = Origin.query.filter_by(name="Persia").one()
    assert resolved == existing.id
    assert existing.is_active is True
    assert Origin.query.count() == 1
    assert context.origins.created_count == 0


def test_created_reference_is_served_from_run_cache(load_context):
    context = load_context()
    resolver = ReferenceResolver("religion")

    created_id = resolver.resolve("Bahai", context)

    assert context.religions.created_this_run == {"bahai": created_id}
    assert "bahai" not in context.religions.by_name
    with patch.object(resolver, "_find_by_key") as find_by_key:
        assert resolver.resolve("BAHAI", context) == created_id
    find_by_key.assert_not_called()
    assert context.religions.created_count == 1
