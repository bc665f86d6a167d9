"""
Per-run state threaded through the import pipeline.

Caches are loaded once when a run starts and mutated as rows are processed so
later rows observe earlier inserts, creations and reactivations. They are
accelerators only; the database stays the source of truth. Nothing here is
module-level, so concurrent runs each own an independent context.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import func
from sqlalchemy.orm import Session

from catalog_app.models import Name, Origin, Religion

REFERENCE_KINDS = ("religion", "origin")
REFERENCE_MODELS = {"religion": Religion, "origin": Origin}


def reference_key(value: str) -> str:
    return value.strip().lower()


@dataclass
class ReferenceCache:
    """Lookup state for one reference kind during a run."""

    kind: str
    by_name: dict[str, int] = field(default_factory=dict)
    inactive: set[str] = field(default_factory=set)
    created_this_run: dict[str, int] = field(default_factory=dict)
    created_count: int = 0

    @classmethod
    def load(cls, kind: str, session: Session) -> "ReferenceCache":
        model = REFERENCE_MODELS[kind]
        cache = cls(kind=kind)
        for entity_id, name, is_active in session.query(model.id, model.name, model.is_active):
            key = reference_key(name)
            cache.by_name[key] = entity_id
            if not is_active:
                cache.inactive.add(key)
        return cache

    def remember(self, key: str, entity_id: int, *, created: bool = False) -> None:
        """Record a resolved entity; rows created by this run are kept apart from preloaded ones."""
        if created:
            self.created_this_run[key] = entity_id
            self.created_count += 1
            return
        self.by_name[key] = entity_id
        self.inactive.discard(key)


@dataclass
class RunContext:
    """Everything a single import run needs to share between rows."""

    existing_names: set[str]
    religions: ReferenceCache
    origins: ReferenceCache
    import_job_id: int | None = None
    importer_id: int | None = None

    @classmethod
    def load(
        cls,
        session: Session,
        *,
        import_job_id: int | None = None,
        importer_id: int | None = None,
    ) -> "RunContext":
        existing_names = {name for (name,) in session.query(func.lower(Name.name))}
        return cls(
            existing_names=existing_names,
            religions=ReferenceCache.load("religion", session),
            origins=ReferenceCache.load("origin", session),
            import_job_id=import_job_id,
            importer_id=importer_id,
        )

    def cache_for(self, kind: str) -> ReferenceCache:
        if kind == "religion":
            return self.religions
        if kind == "origin":
            return self.origins
        raise KeyError(f"Unknown reference kind '{kind}'.")

    @property
    def new_references_created(self) -> int:
        return self.religions.created_count + self.origins.created_count
