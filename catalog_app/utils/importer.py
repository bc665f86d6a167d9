"""
Utility helpers for importer configuration lookups.
"""

from __future__ import annotations

from flask import current_app

_FALSEY = {"0", "false", "no", "off"}


def _get_config(app=None):
    if app is not None:
        return app.config
    return current_app.config


def is_importer_enabled(app=None) -> bool:
    """Return True when the importer feature flag is enabled."""
    value = _get_config(app).get("IMPORTER_ENABLED", True)
    if isinstance(value, str):
        return value.strip().lower() not in _FALSEY
    return bool(value)


def get_max_upload_bytes(app=None) -> int:
    config = _get_config(app)
    return int(config.get("IMPORTER_MAX_UPLOAD_MB", 5)) * 1024 * 1024
