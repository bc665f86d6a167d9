"""
Duplicate checking and persistence of a single imported name.

Every write is committed on its own, so rows already written survive if a
later row aborts the run.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from catalog_app.importer.mapping import ImportOptions
from catalog_app.models import Name, db
from catalog_app.models.catalog import Gender

from .context import RunContext
from .extract import CandidateRecord
from .gender import coerce_gender

logger = logging.getLogger(__name__)

DUPLICATE_SKIPPED_REASON = "Duplicate name"
DUPLICATE_REJECTED_ERROR = "Name already exists"


class OutcomeStatus(str, enum.Enum):
    SUCCESSFUL = "successful"
    FAILED = "failed"
    SKIPPED = "skipped"


class WriteAction(str, enum.Enum):
    INSERTED = "inserted"
    UPDATED = "updated"


@dataclass(frozen=True)
class RowOutcome:
    """Result for one row; ``row`` is the 1-based position in the input."""

    row: int
    name: str | None
    status: OutcomeStatus
    id: int | None = None
    action: WriteAction | None = None
    message: str | None = None

    @classmethod
    def successful(cls, row: int, name: str, *, id: int, action: WriteAction) -> "RowOutcome":
        return cls(row=row, name=name, status=OutcomeStatus.SUCCESSFUL, id=id, action=action)

    @classmethod
    def failed(cls, row: int, name: str | None, error: str) -> "RowOutcome":
        return cls(row=row, name=name, status=OutcomeStatus.FAILED, message=error)

    @classmethod
    def skipped(cls, row: int, name: str, reason: str) -> "RowOutcome":
        return cls(row=row, name=name, status=OutcomeStatus.SKIPPED, message=reason)

    def as_detail(self) -> dict[str, Any]:
        if self.status == OutcomeStatus.SUCCESSFUL:
            return {"row": self.row, "name": self.name, "id": self.id, "action": self.action.value}
        if self.status == OutcomeStatus.SKIPPED:
            return {"row": self.row, "name": self.name, "reason": self.message}
        return {"row": self.row, "name": self.name, "error": self.message}


@dataclass(frozen=True)
class ResolvedReferences:
    religion_id: int | None = None
    origin_id: int | None = None


def _error_message(exc: SQLAlchemyError) -> str:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


class NameWriter:
    """Insert or update one name, consulting the run's duplicate cache."""

    def __init__(self, session: Session | None = None) -> None:
        self.session: Session = session or db.session

    def write(
        self,
        row_number: int,
        candidate: CandidateRecord,
        gender: Gender | str,
        references: ResolvedReferences,
        options: ImportOptions,
        context: RunContext,
    ) -> RowOutcome:
        key = candidate.name.lower()
        gender_value = coerce_gender(gender)

        if key in context.existing_names:
            if options.skip_duplicates:
                return RowOutcome.skipped(row_number, candidate.name, DUPLICATE_SKIPPED_REASON)
            if options.should_update_on_duplicate:
                return self._update(row_number, candidate, gender_value, references)
            return RowOutcome.failed(row_number, candidate.name, DUPLICATE_REJECTED_ERROR)

        return self._insert(row_number, candidate, gender_value, references, context)

    def _insert(
        self,
        row_number: int,
        candidate: CandidateRecord,
        gender: Gender,
        references: ResolvedReferences,
        context: RunContext,
    ) -> RowOutcome:
        record = Name(
            name=candidate.name,
            description=candidate.description,
            gender=gender,
            religion_id=references.religion_id,
            origin_id=references.origin_id,
        )
        self.session.add(record)
        try:
            self.session.commit()
        except OperationalError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            self.session.rollback()
            message = _error_message(exc)
            logger.warning(
                "Insert failed for row %s",
                row_number,
                extra={"import_job_id": context.import_job_id, "imported_name": candidate.name, "error": message},
            )
            return RowOutcome.failed(row_number, candidate.name, message)

        context.existing_names.add(candidate.name.lower())
        logger.debug("Inserted name '%s' (id=%s)", candidate.name, record.id)
        return RowOutcome.successful(row_number, candidate.name, id=record.id, action=WriteAction.INSERTED)

    def _update(
        self,
        row_number: int,
        candidate: CandidateRecord,
        gender: Gender,
        references: ResolvedReferences,
    ) -> RowOutcome:
        try:
            record = (
                self.session.query(Name)
                .filter(func.lower(Name.name) == candidate.name.lower())
                .one_or_none()
            )
            if record is None:
                return RowOutcome.failed(row_number, candidate.name, "Update failed: name no longer exists")
            record.description = candidate.description
            record.religion_id = references.religion_id
            record.origin_id = references.origin_id
            record.gender = gender
            self.session.commit()
        except OperationalError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            self.session.rollback()
            return RowOutcome.failed(row_number, candidate.name, f"Update failed: {_error_message(exc)}")

        logger.debug("Updated name '%s' (id=%s)", candidate.name, record.id)
        return RowOutcome.successful(row_number, candidate.name, id=record.id, action=WriteAction.UPDATED)
