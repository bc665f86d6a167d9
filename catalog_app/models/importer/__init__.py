"""
Importer-specific SQLAlchemy models.
"""

from .schema import IN_MEMORY_SOURCE_LABEL, ImportJob, ImportJobStatus

__all__ = [
    "IN_MEMORY_SOURCE_LABEL",
    "ImportJob",
    "ImportJobStatus",
]
