"""Prometheus metrics helpers for the importer."""

from __future__ import annotations

from typing import Literal

from prometheus_client import Counter, Histogram

_rows_counter = Counter(
    "importer_name_rows_total",
    "Name import rows processed by outcome.",
    ["outcome"],
)
_runs_counter = Counter(
    "importer_name_runs_total",
    "Name import runs by terminal status.",
    ["status"],
)
_references_created_counter = Counter(
    "importer_references_created_total",
    "Religion/origin rows created while importing names.",
    ["kind"],
)
_run_duration = Histogram(
    "importer_name_run_duration_seconds",
    "Duration of a full name import run in seconds.",
    buckets=(0.1, 0.5, 1, 2, 5, 10, 30, 60, 120, 300),
)


def record_row_outcome(outcome: Literal["successful", "failed", "skipped"]) -> None:
    _rows_counter.labels(outcome=outcome).inc()


def record_references_created(kind: Literal["religion", "origin"], count: int) -> None:
    if count > 0:
        _references_created_counter.labels(kind=kind).inc(count)


def record_run(*, status: Literal["completed", "failed"], duration_seconds: float) -> None:
    """Capture the terminal status and duration of an import run."""

    _runs_counter.labels(status=status).inc()
    _run_duration.observe(duration_seconds)
