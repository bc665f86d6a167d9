"""
Name import pipeline: extract, classify, resolve, write, orchestrate.
"""

from .context import ReferenceCache, RunContext
from .extract import CandidateRecord, extract_candidate
from .gender import classify_gender, coerce_gender, detect_gender, normalize_gender
from .history_service import HistoryFilters, HistoryPage, ImportHistoryService
from .orchestrator import ImportSummary, run_import, validate_import_request
from .references import CreationResult, CreationStatus, ReferenceResolver
from .writer import NameWriter, OutcomeStatus, ResolvedReferences, RowOutcome, WriteAction

__all__ = [
    "CandidateRecord",
    "CreationResult",
    "CreationStatus",
    "HistoryFilters",
    "HistoryPage",
    "ImportHistoryService",
    "ImportSummary",
    "NameWriter",
    "OutcomeStatus",
    "ReferenceCache",
    "ReferenceResolver",
    "ResolvedReferences",
    "RowOutcome",
    "RunContext",
    "WriteAction",
    "classify_gender",
    "coerce_gender",
    "detect_gender",
    "extract_candidate",
    "normalize_gender",
    "run_import",
    "validate_import_request",
]
