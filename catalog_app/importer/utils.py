"""
Importer-specific utilities for handling uploaded files and cleanup.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable
from uuid import uuid4

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

DEFAULT_UPLOAD_SUBDIR = "import_uploads"
CSV_EXTENSIONS: tuple[str, ...] = ("csv",)

_TOKEN_PATTERN = re.compile(r"^[0-9a-f]{32}\.csv$")


def _normalize_upload_dir(configured_path: str | None, instance_path: str) -> Path:
    if not configured_path:
        return Path(instance_path) / DEFAULT_UPLOAD_SUBDIR

    candidate = Path(configured_path)
    if candidate.is_absolute():
        return candidate

    return Path(instance_path) / candidate


def resolve_upload_directory(app) -> Path:
    """
    Determine and create (if necessary) the importer upload directory.
    """

    upload_dir = _normalize_upload_dir(app.config.get("IMPORTER_UPLOAD_DIR"), app.instance_path)
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir


def allowed_file(filename: str, allowed_extensions: Iterable[str] = CSV_EXTENSIONS) -> bool:
    """
    Validate the uploaded filename extension against the allowed set.
    """

    if not filename or "." not in filename:
        return False
    extension = filename.rsplit(".", 1)[1].lower()
    return extension in {ext.lower() for ext in allowed_extensions}


def persist_upload(file_storage: FileStorage, app) -> Path:
    """
    Persist the uploaded file under a UUID-based name and return its path.

    The file name doubles as the ``fileToken`` handed back for large datasets.
    """

    upload_dir = resolve_upload_directory(app)
    original_name = secure_filename(file_storage.filename or "")
    target_path = upload_dir / f"{uuid4().hex}.csv"
    file_storage.save(target_path)
    current_app.logger.debug("Importer upload %s persisted to %s", original_name or "<unnamed>", target_path)
    return target_path


def resolve_upload_token(token: str | None, app) -> Path | None:
    """
    Map a ``fileToken`` back onto a stored upload.

    Returns ``None`` for malformed tokens or files that no longer exist, so a
    token can never address anything outside the upload directory.
    """

    if not token or not _TOKEN_PATTERN.match(token):
        return None
    path = resolve_upload_directory(app) / token
    return path if path.is_file() else None


def cleanup_upload(path: Path) -> None:
    """
    Remove a stored upload, logging but ignoring filesystem errors.
    """

    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        current_app.logger.warning("Failed to remove importer upload %s: %s", path, exc)
