from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from catalog_app.importer.pipeline.context import RunContext
from catalog_app.models import ImportJob, ImportJobStatus, db


@pytest.fixture
def load_context(app):
    """Build a fresh per-run context from whatever is currently stored."""

    def _load(*, importer_id: int | None = None) -> RunContext:
        return RunContext.load(db.session, importer_id=importer_id)

    return _load


@pytest.fixture
def job_factory(app):
    created: list[ImportJob] = []

    def _factory(
        *,
        filename: str = "names.csv",
        status: ImportJobStatus = ImportJobStatus.COMPLETED,
        created_offset_minutes: int = 0,
        total_rows: int = 3,
        successful_rows: int = 2,
        failed_rows: int = 1,
        skipped_rows: int = 0,
        imported_by=None,
    ) -> ImportJob:
        created_at = datetime.now(timezone.utc).replace(microsecond=0) - timedelta(minutes=created_offset_minutes)
        job = ImportJob(
            filename=filename,
            status=status,
            total_rows=total_rows,
            successful_rows=successful_rows,
            failed_rows=failed_rows,
            skipped_rows=skipped_rows,
            column_mapping={"name": "Name", "gender": "Gender"},
            import_options={"skipDuplicates": False},
            error_log=[{"row": 2, "name": "Dup", "error": "Name already exists"}] if failed_rows else [],
            imported_by_id=imported_by.id if imported_by else None,
            created_at=created_at,
            completed_at=created_at + timedelta(seconds=5),
        )
        db.session.add(job)
        db.session.commit()
        created.append(job)
        return job

    yield _factory
