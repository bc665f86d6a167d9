"""Exception hierarchy shared by the import pipeline."""

from __future__ import annotations


class ImporterError(Exception):
    """Base exception for importer failures."""


class ImportValidationError(ImporterError):
    """Raised before any row is processed when the request cannot be imported."""


class ImportAbortedError(ImporterError):
    """Raised when an unrecoverable error stops a run after its job was created."""

    def __init__(self, import_id: int | None, cause: BaseException) -> None:
        super().__init__(f"Import {import_id} aborted: {cause}")
        self.import_id = import_id
        self.cause = cause


class ExtractionError(ImporterError):
    """Raised when a raw row cannot produce a candidate record."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
