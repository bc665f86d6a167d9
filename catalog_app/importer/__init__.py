"""
Importer feature package.

Mounts the CSV import blueprint and CLI group when ``IMPORTER_ENABLED`` is set,
otherwise registers a stub CLI group explaining that the importer is off.
"""

from __future__ import annotations

from flask import Flask

from catalog_app.utils.importer import is_importer_enabled

from .cli import get_disabled_importer_group, importer_cli
from .pipeline.history_service import HistoryFilters, ImportHistoryService
from .pipeline.orchestrator import ImportSummary, run_import
from .views import importer_blueprint

IMPORTER_EXTENSION_KEY = "importer"

__all__ = [
    "init_importer",
    "IMPORTER_EXTENSION_KEY",
    "HistoryFilters",
    "ImportHistoryService",
    "ImportSummary",
    "run_import",
]


def _ensure_extension_state(app: Flask) -> dict:
    return app.extensions.setdefault(
        IMPORTER_EXTENSION_KEY,
        {
            "enabled": False,
            "batch_size": None,
            "upload_dir": None,
        },
    )


def _set_cli(app: Flask, enabled: bool) -> None:
    """Register the appropriate CLI group based on flag state."""
    command_name = importer_cli.name
    if command_name in app.cli.commands:
        app.cli.commands.pop(command_name)

    if enabled:
        app.cli.add_command(importer_cli)
    else:
        app.cli.add_command(get_disabled_importer_group())


def init_importer(app: Flask) -> None:
    """
    Conditionally mount the importer blueprint and CLI based on configuration.

    Records importer state inside ``app.extensions['importer']``.
    """
    enabled = is_importer_enabled(app)
    state = _ensure_extension_state(app)
    state.update(
        {
            "enabled": enabled,
            "batch_size": app.config.get("IMPORTER_BATCH_SIZE"),
            "upload_dir": app.config.get("IMPORTER_UPLOAD_DIR"),
        }
    )

    if not enabled:
        _set_cli(app, enabled=False)
        app.logger.info("Importer disabled via IMPORTER_ENABLED flag; skipping registration.")
        return

    if importer_blueprint.name not in app.blueprints and not getattr(app, "_got_first_request", False):
        app.register_blueprint(importer_blueprint)
    elif importer_blueprint.name not in app.blueprints:
        app.logger.warning(
            "Importer blueprint registration skipped because the app has already handled its first request."
        )
    _set_cli(app, enabled=True)
    app.logger.info("Importer enabled (batch size %s).", state["batch_size"])
