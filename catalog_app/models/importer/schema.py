"""
SQLAlchemy models for the CSV import audit trail.

One ``ImportJob`` row is written per pipeline invocation. The orchestrator is
the only writer; listing and deletion belong to outer layers.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Enum, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..base import BaseModel, db, utcnow

IN_MEMORY_SOURCE_LABEL = "in-memory-upload"


class ImportJobStatus(str, enum.Enum):
    """Lifecycle states for an import job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ImportJob(BaseModel):
    """Audit record describing a single CSV import."""

    __tablename__ = "csv_imports"

    id: Mapped[int] = mapped_column(primary_key=True)
    filename: Mapped[str] = mapped_column(db.String(255), nullable=False, default=IN_MEMORY_SOURCE_LABEL)
    total_rows: Mapped[int] = mapped_column(db.Integer, nullable=False, default=0)
    successful_rows: Mapped[int] = mapped_column(db.Integer, nullable=False, default=0)
    failed_rows: Mapped[int] = mapped_column(db.Integer, nullable=False, default=0)
    skipped_rows: Mapped[int] = mapped_column(db.Integer, nullable=False, default=0)
    status: Mapped[ImportJobStatus] = mapped_column(
        Enum(ImportJobStatus, name="csv_import_status_enum"),
        nullable=False,
        default=ImportJobStatus.PENDING,
        index=True,
    )
    column_mapping: Mapped[dict] = mapped_column(db.JSON, nullable=False)
    import_options: Mapped[dict | None] = mapped_column(db.JSON, nullable=True)
    error_log: Mapped[list | None] = mapped_column(db.JSON, nullable=True, default=list)
    imported_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(db.DateTime(timezone=True), nullable=True)

    imported_by = relationship("User", foreign_keys=[imported_by_id])

    __table_args__ = (Index("idx_csv_imports_status_created", "status", "created_at"),)

    def __repr__(self) -> str:
        return f"<ImportJob {self.id} {self.status.value if self.status else 'unknown'}>"

    @property
    def is_finalized(self) -> bool:
        return self.status in (ImportJobStatus.COMPLETED, ImportJobStatus.FAILED)

    def mark_completed(self, *, successful: int, failed: int, skipped: int, error_log: list) -> None:
        """Record final tallies. A job is finalized exactly once."""

        if self.is_finalized:
            raise RuntimeError(f"Import job {self.id} already finalized as {self.status.value}.")
        self.successful_rows = successful
        self.failed_rows = failed
        self.skipped_rows = skipped
        self.error_log = error_log
        self.status = ImportJobStatus.COMPLETED
        self.completed_at = utcnow()

    def mark_failed(self, detail: str, *, successful: int = 0, failed: int = 0, skipped: int = 0) -> None:
        if self.is_finalized:
            raise RuntimeError(f"Import job {self.id} already finalized as {self.status.value}.")
        self.successful_rows = successful
        self.failed_rows = failed
        self.skipped_rows = skipped
        self.error_log = [{"row": None, "name": None, "error": detail}]
        self.status = ImportJobStatus.FAILED
        self.completed_at = utcnow()
