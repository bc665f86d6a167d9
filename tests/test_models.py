import pytest
from sqlalchemy.exc import IntegrityError

from catalog_app.models import Gender, ImportJob, ImportJobStatus, Name, Religion, db


def _job(**overrides):
    values = {"filename": "names.csv", "total_rows": 2, "status": ImportJobStatus.PROCESSING, "column_mapping": {"name": "Name"}}
    values.update(overrides)
    job = ImportJob(**values)
    db.session.add(job)
    db.session.commit()
    return job


def test_reference_names_are_unique_ignoring_case(make_religion):
    make_religion("Hindu")

    db.session.add(Religion(name="HINDU"))
    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()


def test_names_are_unique_ignoring_case(make_name):
    make_name("Aarav", gender="male")

    db.session.add(Name(name="aarav", gender=Gender.MALE))
    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()


def test_name_defaults():
    record = Name(name="Ira")
    db.session.add(record)
    db.session.commit()

    assert record.gender == Gender.UNISEX
    assert record.description == ""
    assert record.religion_id is None


def test_import_job_mark_completed():
    job = _job()

    job.mark_completed(successful=1, failed=1, skipped=0, error_log=[{"row": 2, "name": "X", "error": "boom"}])
    db.session.commit()

    assert job.status == ImportJobStatus.COMPLETED
    assert job.completed_at is not None
    assert (job.successful_rows, job.failed_rows, job.skipped_rows) == (1, 1, 0)
    assert job.is_finalized


def test_import_job_mark_failed_records_detail():
    job = _job()

    job.mark_failed("database went away", successful=1)

    assert job.status == ImportJobStatus.FAILED
    assert job.error_log == [{"row": None, "name": None, "error": "database went away"}]
    assert job.successful_rows == 1


def test_import_job_finalizes_once():
    job = _job()
    job.mark_completed(successful=2, failed=0, skipped=0, error_log=[])

    with pytest.raises(RuntimeError):
        job.mark_failed("late failure")


def test_import_job_statuses():
    assert [status.value for status in ImportJobStatus] == ["pending", "processing", "completed", "failed"]
