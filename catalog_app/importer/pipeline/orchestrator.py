"""
Batch orchestrator for name imports.

``run_import`` validates its inputs, opens an :class:`ImportJob`, walks the rows
in fixed-size batches and finalizes the job exactly once. Any error raised
while processing a row becomes a failed outcome for that row, except a lost
connection (``OperationalError``). That, and any failure outside row
processing, aborts the run, marks the job failed and is re-raised as
:class:`ImportAbortedError`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Sequence

from flask import current_app, has_app_context
from sqlalchemy.exc import OperationalError

from catalog_app.importer.errors import ExtractionError, ImportAbortedError, ImportValidationError
from catalog_app.importer.mapping import ColumnMapping, ImportOptions
from catalog_app.importer.metrics import record_references_created, record_row_outcome, record_run
from catalog_app.models import IN_MEMORY_SOURCE_LABEL, ImportJob, ImportJobStatus, User, db

from .context import RunContext
from .extract import extract_candidate, lookup_column
from .gender import classify_gender
from .references import ReferenceResolver
from .writer import NameWriter, OutcomeStatus, ResolvedReferences, RowOutcome

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500
DEFAULT_BATCH_PAUSE_SECONDS = 0.01

NO_ROWS_ERROR = "No CSV data to process"
NAME_MAPPING_ERROR = "Name mapping is required"
GENDER_MAPPING_ERROR = "Gender mapping is required or enable auto-detection"


@dataclass
class ImportSummary:
    """Outcome of a finished import run."""

    import_id: int
    total_rows: int
    successful: list[RowOutcome] = field(default_factory=list)
    failed: list[RowOutcome] = field(default_factory=list)
    skipped: list[RowOutcome] = field(default_factory=list)
    new_religions_created: int = 0
    new_origins_created: int = 0

    @property
    def successful_count(self) -> int:
        return len(self.successful)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def new_references_created(self) -> int:
        return self.new_religions_created + self.new_origins_created

    def record(self, outcome: RowOutcome) -> None:
        if outcome.status == OutcomeStatus.SUCCESSFUL:
            self.successful.append(outcome)
        elif outcome.status == OutcomeStatus.SKIPPED:
            self.skipped.append(outcome)
        else:
            self.failed.append(outcome)

    def error_log(self) -> list[dict[str, Any]]:
        return [outcome.as_detail() for outcome in self.failed]

    def as_dict(self) -> dict[str, Any]:
        return {
            "import_id": self.import_id,
            "total_rows": self.total_rows,
            "successful_count": self.successful_count,
            "failed_count": self.failed_count,
            "skipped_count": self.skipped_count,
            "details": {
                "successful": [outcome.as_detail() for outcome in self.successful],
                "failed": [outcome.as_detail() for outcome in self.failed],
                "skipped": [outcome.as_detail() for outcome in self.skipped],
            },
            "new_references_created": self.new_references_created,
            "new_religions_created": self.new_religions_created,
            "new_origins_created": self.new_origins_created,
        }


def _config_value(key: str, default):
    if not has_app_context():
        return default
    return current_app.config.get(key, default)


def _iter_batches(rows: Sequence[Mapping[str, Any]], batch_size: int) -> Iterator[Sequence[Mapping[str, Any]]]:
    for start in range(0, len(rows), batch_size):
        yield rows[start : start + batch_size]


def validate_import_request(
    rows: Sequence[Mapping[str, Any]] | None,
    mapping: ColumnMapping,
    options: ImportOptions,
) -> None:
    """Raise :class:`ImportValidationError` when the run cannot start."""

    if not rows:
        raise ImportValidationError(NO_ROWS_ERROR)
    if not mapping.name:
        raise ImportValidationError(NAME_MAPPING_ERROR)
    if not mapping.gender and not options.auto_detect_gender:
        raise ImportValidationError(GENDER_MAPPING_ERROR)


def _resolve_importer_id(importer: User | int | None) -> int | None:
    if importer is None:
        return None
    candidate_id = importer.id if isinstance(importer, User) else importer
    try:
        candidate_id = int(candidate_id)
    except (TypeError, ValueError):
        return None
    if db.session.get(User, candidate_id) is None:
        logger.warning("Importer id %s not found; recording import without an importer", candidate_id)
        return None
    return candidate_id


def _process_row(
    row_number: int,
    row: Mapping[str, Any],
    *,
    mapping: ColumnMapping,
    options: ImportOptions,
    context: RunContext,
    religions: ReferenceResolver,
    origins: ReferenceResolver,
    writer: NameWriter,
) -> RowOutcome:
    try:
        candidate = extract_candidate(row, mapping)
    except ExtractionError as exc:
        raw_name = lookup_column(row, mapping.name)
        return RowOutcome.failed(row_number, (raw_name or "").strip() or None, exc.reason)

    try:
        gender = classify_gender(candidate, mapping, options)
        references = ResolvedReferences(
            religion_id=religions.resolve(candidate.religion_ref, context),
            origin_id=origins.resolve(candidate.origin_ref, context),
        )
        return writer.write(row_number, candidate, gender, references, options, context)
    except OperationalError:
        raise
    except Exception as exc:
        # Any other failure is confined to this row
        writer.session.rollback()
        logger.exception(
            "Unexpected error on row %s",
            row_number,
            extra={"import_job_id": context.import_job_id, "row": row_number, "imported_name": candidate.name},
        )
        return RowOutcome.failed(row_number, candidate.name, str(exc))


def run_import(
    rows: Sequence[Mapping[str, Any]],
    mapping: ColumnMapping | Mapping[str, Any],
    options: ImportOptions | Mapping[str, Any] | None = None,
    *,
    importer: User | int | None = None,
    source_label: str | None = None,
    batch_size: int | None = None,
    pause_seconds: float | None = None,
) -> ImportSummary:
    """
    Import ``rows`` into the name catalog.

    Args:
        rows: Raw CSV rows as ``header -> value`` mappings.
        mapping: Column mapping (coerced from a plain dict when needed).
        options: Duplicate-handling and gender options.
        importer: Authenticated user or user id; unknown ids are recorded as null.
        source_label: Filename stored on the job; defaults to the in-memory label.
        batch_size: Rows per batch; defaults to ``IMPORTER_BATCH_SIZE``.
        pause_seconds: Pause between batches; defaults to ``IMPORTER_BATCH_PAUSE_SECONDS``.

    Raises:
        ImportValidationError: inputs are unusable; no job is created.
        ImportAbortedError: the run aborted after the job was created.
    """

    if not isinstance(mapping, ColumnMapping):
        mapping = ColumnMapping.coerce(mapping)
    if not isinstance(options, ImportOptions):
        options = ImportOptions.coerce(options)
    validate_import_request(rows, mapping, options)

    rows = list(rows)
    batch_size = max(int(batch_size or _config_value("IMPORTER_BATCH_SIZE", DEFAULT_BATCH_SIZE)), 1)
    if pause_seconds is None:
        pause_seconds = float(_config_value("IMPORTER_BATCH_PAUSE_SECONDS", DEFAULT_BATCH_PAUSE_SECONDS))

    session = db.session
    importer_id = _resolve_importer_id(importer)

    job = ImportJob(
        filename=source_label or IN_MEMORY_SOURCE_LABEL,
        total_rows=len(rows),
        status=ImportJobStatus.PROCESSING,
        column_mapping=mapping.as_audit_dict(),
        import_options=options.as_audit_dict(),
        imported_by_id=importer_id,
    )
    session.add(job)
    session.commit()
    job_id = job.id

    started = time.monotonic()
    summary = ImportSummary(import_id=job_id, total_rows=len(rows))
    log_extra = {"import_job_id": job_id, "total_rows": len(rows), "batch_size": batch_size}
    logger.info("Starting name import %s", job_id, extra=log_extra)

    try:
        context = RunContext.load(session, import_job_id=job_id, importer_id=importer_id)
        religions = ReferenceResolver("religion", session)
        origins = ReferenceResolver("origin", session)
        writer = NameWriter(session)

        batch_count = (len(rows) + batch_size - 1) // batch_size
        for batch_index, batch in enumerate(_iter_batches(rows, batch_size)):
            offset = batch_index * batch_size
            for position, row in enumerate(batch, start=1):
                row_number = offset + position
                outcome = _process_row(
                    row_number,
                    row,
                    mapping=mapping,
                    options=options,
                    context=context,
                    religions=religions,
                    origins=origins,
                    writer=writer,
                )
                summary.record(outcome)
                record_row_outcome(outcome.status.value)
                if outcome.status == OutcomeStatus.FAILED:
                    logger.warning(
                        "Row %s failed: %s",
                        row_number,
                        outcome.message,
                        extra={"import_job_id": job_id, "row": row_number, "imported_name": outcome.name},
                    )

            logger.info(
                "Processed batch %s/%s for import %s",
                batch_index + 1,
                batch_count,
                job_id,
                extra={
                    **log_extra,
                    "successful": summary.successful_count,
                    "failed": summary.failed_count,
                    "skipped": summary.skipped_count,
                },
            )
            if batch_index + 1 < batch_count and pause_seconds > 0:
                time.sleep(pause_seconds)

        summary.new_religions_created = context.religions.created_count
        summary.new_origins_created = context.origins.created_count

        job = session.get(ImportJob, job_id)
        job.mark_completed(
            successful=summary.successful_count,
            failed=summary.failed_count,
            skipped=summary.skipped_count,
            error_log=summary.error_log(),
        )
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.exception("Name import %s aborted", job_id, extra=log_extra)
        _finalize_failed(job_id, exc, summary)
        record_run(status="failed", duration_seconds=time.monotonic() - started)
        raise ImportAbortedError(job_id, exc) from exc

    record_references_created("religion", summary.new_religions_created)
    record_references_created("origin", summary.new_origins_created)
    record_run(status="completed", duration_seconds=time.monotonic() - started)
    logger.info(
        "Completed name import %s",
        job_id,
        extra={
            **log_extra,
            "successful": summary.successful_count,
            "failed": summary.failed_count,
            "skipped": summary.skipped_count,
            "new_references_created": summary.new_references_created,
        },
    )
    return summary


def _finalize_failed(job_id: int, exc: Exception, summary: ImportSummary) -> None:
    session = db.session
    try:
        job = session.get(ImportJob, job_id)
        if job is None or job.is_finalized:
            return
        job.mark_failed(
            str(exc),
            successful=summary.successful_count,
            failed=summary.failed_count,
            skipped=summary.skipped_count,
        )
        session.commit()
    except Exception:  # pragma: no cover - store unreachable while recording the abort
        session.rollback()
        logger.exception("Could not record failure for import %s", job_id)
