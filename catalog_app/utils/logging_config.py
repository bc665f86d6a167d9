"""
Logging setup for the catalog application.

Handlers are attached to ``app.logger`` and to the ``catalog_app`` package
logger, so module loggers created with ``logging.getLogger(__name__)`` share
the same console and rotating-file output.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

PACKAGE_LOGGER_NAME = "catalog_app"

_RESERVED_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per line, including any ``extra={...}`` fields."""

    def format(self, record):
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_ATTRS or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_formatter(log_format):
    if str(log_format).lower() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT)


def _resolve_level(level_name):
    level = logging.getLevelName(str(level_name).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(app):
    """Configure console/file handlers from the app's LOG_* settings."""
    config = app.config
    level = _resolve_level(config.get("LOG_LEVEL", "INFO"))
    formatter = _build_formatter(config.get("LOG_FORMAT", "text"))

    handlers = []
    if config.get("ENABLE_CONSOLE_LOGGING", True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    if config.get("ENABLE_FILE_LOGGING", False):
        log_dir = config.get("LOG_DIR", "logs")
        if not os.path.isabs(log_dir):
            log_dir = os.path.join(app.root_path, log_dir)
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "app.log"),
            maxBytes=int(config.get("LOG_FILE_MAX_BYTES", 10485760)),
            backupCount=int(config.get("LOG_FILE_BACKUP_COUNT", 10)),
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    for logger in (app.logger, package_logger):
        # Re-running setup (tests do) replaces handlers instead of stacking them
        for existing in list(logger.handlers):
            logger.removeHandler(existing)
            existing.close()
        for handler in handlers:
            logger.addHandler(handler)
        logger.setLevel(level)
    app.logger.propagate = False

    app.logger.info(
        "Logging configured",
        extra={"log_level": logging.getLevelName(level), "log_format": config.get("LOG_FORMAT", "text")},
    )
    return app.logger
