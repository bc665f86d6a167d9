# catalog_app/models/__init__.py
"""
Database models package
"""

from .base import BaseModel, db
from .catalog import REFERENCE_NAME_MAX_LENGTH, Gender, Name, Origin, ReferenceEntityMixin, Religion
from .importer import IN_MEMORY_SOURCE_LABEL, ImportJob, ImportJobStatus
from .user import User, UserRole

__all__ = [
    "db",
    "BaseModel",
    "User",
    "UserRole",
    # Catalog models
    "Name",
    "Religion",
    "Origin",
    "ReferenceEntityMixin",
    "Gender",
    "REFERENCE_NAME_MAX_LENGTH",
    # Importer models
    "ImportJob",
    "ImportJobStatus",
    "IN_MEMORY_SOURCE_LABEL",
]
