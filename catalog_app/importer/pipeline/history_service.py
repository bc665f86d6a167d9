"""
Service helpers for listing and inspecting past name imports.

The history endpoints and the ``flask importer history`` command both go
through :class:`ImportHistoryService` so pagination rules live in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import Session, joinedload

from catalog_app.models import ImportJob, ImportJobStatus, db

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class HistoryFilters:
    """Pagination and optional status filter for history queries."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    status: ImportJobStatus | None = None

    @classmethod
    def coerce(
        cls,
        *,
        page: int | str | None = None,
        limit: int | str | None = None,
        status: str | ImportJobStatus | None = None,
        default_limit: int = DEFAULT_LIMIT,
    ) -> "HistoryFilters":
        """
        Coerce query-string input; unparseable values fall back to defaults.

        Raises:
            ValueError: for an unknown status value.
        """

        resolved_page = _coerce_positive_int(page, fallback=DEFAULT_PAGE)
        resolved_limit = min(_coerce_positive_int(limit, fallback=default_limit), MAX_LIMIT)
        return cls(page=resolved_page, limit=resolved_limit, status=_coerce_status(status))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(slots=True)
class ImportJobSummary:
    """Serialized view of an import job."""

    id: int
    filename: str
    status: str
    total_rows: int
    successful_rows: int
    failed_rows: int
    skipped_rows: int
    imported_by: str | None
    created_at: datetime | None
    completed_at: datetime | None
    column_mapping: dict[str, Any] | None = None
    import_options: dict[str, Any] | None = None
    error_log: list[dict[str, Any]] | None = None

    def as_dict(self, *, include_detail: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "filename": self.filename,
            "status": self.status,
            "totalRows": self.total_rows,
            "successfulRows": self.successful_rows,
            "failedRows": self.failed_rows,
            "skippedRows": self.skipped_rows,
            "importedBy": self.imported_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }
        if include_detail:
            payload["columnMapping"] = self.column_mapping or {}
            payload["importOptions"] = self.import_options or {}
            payload["errorLog"] = self.error_log or []
        return payload


@dataclass(slots=True)
class HistoryPage:
    items: list[ImportJobSummary]
    page: int
    limit: int
    total_items: int
    total_pages: int

    def pagination(self) -> dict[str, int]:
        return {
            "currentPage": self.page,
            "totalPages": self.total_pages,
            "totalItems": self.total_items,
        }


class ImportHistoryService:
    """Read-only queries over :class:`ImportJob` rows."""

    def __init__(self, session: Session | None = None) -> None:
        self.session: Session = session or db.session

    def list_imports(self, filters: HistoryFilters) -> HistoryPage:
        query = self._base_query()
        if filters.status is not None:
            query = query.filter(ImportJob.status == filters.status)

        total = query.count()
        if total == 0:
            return HistoryPage(items=[], page=filters.page, limit=filters.limit, total_items=0, total_pages=0)

        jobs = (
            query.order_by(ImportJob.created_at.desc(), ImportJob.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
            .all()
        )
        total_pages = (total + filters.limit - 1) // filters.limit
        return HistoryPage(
            items=[self.summarize(job) for job in jobs],
            page=filters.page,
            limit=filters.limit,
            total_items=total,
            total_pages=total_pages,
        )

    def get_import(self, import_id: int) -> ImportJob:
        job = self._base_query().filter(ImportJob.id == import_id).one_or_none()
        if job is None:
            raise NoResultFound(f"Import {import_id} not found.")
        return job

    def summarize(self, job: ImportJob) -> ImportJobSummary:
        return ImportJobSummary(
            id=job.id,
            filename=job.filename,
            status=job.status.value if job.status else "unknown",
            total_rows=job.total_rows or 0,
            successful_rows=job.successful_rows or 0,
            failed_rows=job.failed_rows or 0,
            skipped_rows=job.skipped_rows or 0,
            imported_by=job.imported_by.name if job.imported_by else None,
            created_at=job.created_at,
            completed_at=job.completed_at,
            column_mapping=job.column_mapping,
            import_options=job.import_options,
            error_log=job.error_log,
        )

    def _base_query(self):
        return self.session.query(ImportJob).options(joinedload(ImportJob.imported_by))


def _coerce_positive_int(candidate: int | str | None, *, fallback: int) -> int:
    if candidate in (None, ""):
        return fallback
    if isinstance(candidate, int):
        return candidate if candidate > 0 else fallback
    text = str(candidate).strip()
    if text.isdigit() and int(text) > 0:
        return int(text)
    return fallback


def _coerce_status(value: str | ImportJobStatus | None) -> ImportJobStatus | None:
    if value in (None, ""):
        return None
    if isinstance(value, ImportJobStatus):
        return value
    normalized = str(value).strip().lower()
    try:
        return ImportJobStatus(normalized)
    except ValueError:
        raise ValueError(f"Unsupported status filter '{value}'.") from None
