"""
Resolve free-form religion/origin references to ids, creating or reactivating
rows as needed.

Resolution never raises for an unresolvable value; it degrades to ``None`` so
the name imports without that reference. Connection-level failures
(``OperationalError``) still propagate and abort the run.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from catalog_app.models import REFERENCE_NAME_MAX_LENGTH, db

from .context import REFERENCE_MODELS, ReferenceCache, RunContext, reference_key

logger = logging.getLogger(__name__)

_NUMERIC_PATTERN = re.compile(r"^[+-]?\d+(\.\d+)?$")
# Largest value a 32-bit INTEGER primary key can hold
MAX_REFERENCE_ID = 2**31 - 1


class CreationStatus(str, enum.Enum):
    CREATED = "created"
    FOUND_EXISTING = "found_existing"
    FAILED = "failed"


@dataclass(frozen=True)
class CreationResult:
    """Outcome of an attempt to insert a new reference row."""

    status: CreationStatus
    entity_id: int | None = None
    was_inactive: bool = False
    error: str | None = None

    @classmethod
    def created(cls, entity_id: int) -> "CreationResult":
        return cls(status=CreationStatus.CREATED, entity_id=entity_id)

    @classmethod
    def found_existing(cls, entity_id: int, *, was_inactive: bool) -> "CreationResult":
        return cls(status=CreationStatus.FOUND_EXISTING, entity_id=entity_id, was_inactive=was_inactive)

    @classmethod
    def failed(cls, error: str) -> "CreationResult":
        return cls(status=CreationStatus.FAILED, error=error)


def parse_reference_id(raw_ref: str) -> int | None:
    """
    Return the integer id for a numeric reference, ``0`` for numeric values
    outside the id range, or ``None`` when the value is not numeric at all.
    """

    token = raw_ref.strip()
    if not _NUMERIC_PATTERN.match(token):
        return None
    if "." in token:
        return 0
    value = int(token)
    return value if 0 < value <= MAX_REFERENCE_ID else 0


class ReferenceResolver:
    """Resolver for one reference kind (``religion`` or ``origin``)."""

    def __init__(self, kind: str, session: Session | None = None) -> None:
        if kind not in REFERENCE_MODELS:
            raise ValueError(f"Unsupported reference kind '{kind}'.")
        self.kind = kind
        self.model = REFERENCE_MODELS[kind]
        self.session: Session = session or db.session

    def resolve(self, raw_ref: str | None, context: RunContext) -> int | None:
        if raw_ref is None or not raw_ref.strip():
            return None

        reference_id = parse_reference_id(raw_ref)
        if reference_id is not None:
            return self._resolve_by_id(reference_id)

        return self._resolve_by_name(raw_ref.strip(), context.cache_for(self.kind), context)

    # ------------------------------------------------------------------
    # Resolution paths
    # ------------------------------------------------------------------

    def _resolve_by_id(self, reference_id: int) -> int | None:
        # Inactive ids are left unresolved; only the name path reactivates.
        if reference_id <= 0:
            return None
        found = (
            self.session.query(self.model.id)
            .filter(self.model.id == reference_id, self.model.is_active.is_(True))
            .scalar()
        )
        if found is None:
            logger.debug("%s id %s not found or inactive", self.kind, reference_id)
        return found

    def _resolve_by_name(self, name: str, cache: ReferenceCache, context: RunContext) -> int | None:
        key = reference_key(name)

        entity_id = cache.by_name.get(key)
        if entity_id is not None:
            if key in cache.inactive:
                self._reactivate(entity_id)
            cache.remember(key, entity_id)
            return entity_id

        entity_id = cache.created_this_run.get(key)
        if entity_id is not None:
            return entity_id

        existing = self._find_by_key(key)
        if existing is not None:
            if not existing.is_active:
                self._reactivate(existing.id)
            cache.remember(key, existing.id)
            return existing.id

        result = self._create(name, created_by_id=context.importer_id)
        if result.status == CreationStatus.CREATED:
            cache.remember(key, result.entity_id, created=True)
            logger.info("Created %s '%s' (id=%s) during import", self.kind, name, result.entity_id)
            return result.entity_id
        if result.status == CreationStatus.FOUND_EXISTING:
            if result.was_inactive:
                self._reactivate(result.entity_id)
            cache.remember(key, result.entity_id)
            return result.entity_id

        logger.warning("Could not create %s '%s': %s", self.kind, name, result.error)
        return None

    # ------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------

    def _find_by_key(self, key: str):
        return self.session.query(self.model).filter(func.lower(self.model.name) == key).first()

    def _reactivate(self, entity_id: int) -> None:
        entity = self.session.get(self.model, entity_id)
        if entity is None or entity.is_active:
            return
        entity.reactivate()
        self.session.commit()
        logger.info("Reactivated %s '%s' (id=%s) referenced by import", self.kind, entity.name, entity_id)

    def _create(self, name: str, *, created_by_id: int | None) -> CreationResult:
        if not name:
            return CreationResult.failed(f"{self.kind.capitalize()} name is empty.")
        if len(name) > REFERENCE_NAME_MAX_LENGTH:
            return CreationResult.failed(
                f"{self.kind.capitalize()} name exceeds {REFERENCE_NAME_MAX_LENGTH} characters."
            )

        entity = self.model(name=name, is_active=True, created_by_id=created_by_id)
        self.session.add(entity)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            existing = self._find_by_key(reference_key(name))
            if existing is not None:
                return CreationResult.found_existing(existing.id, was_inactive=not existing.is_active)
            return CreationResult.failed(str(exc.orig))
        except OperationalError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            self.session.rollback()
            return CreationResult.failed(str(exc))
        return CreationResult.created(entity.id)
