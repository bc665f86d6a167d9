# config/validation.py

"""
Startup validation of the environment for the catalog service.

Only production is checked; development and testing fall back to defaults.
"""

import os
import sys
from typing import List, Tuple

PLACEHOLDER_SECRET_KEYS = ("your-secret-key", "your_secret_key")

POSITIVE_INT_IMPORTER_KEYS = (
    "IMPORTER_BATCH_SIZE",
    "IMPORTER_MAX_UPLOAD_MB",
    "IMPORTER_LARGE_DATASET_ROWS",
    "IMPORTER_PREVIEW_ROWS",
    "IMPORTER_HISTORY_PAGE_SIZE",
)


def _importer_errors() -> List[str]:
    errors = []
    for key in POSITIVE_INT_IMPORTER_KEYS:
        raw = os.environ.get(key)
        if raw is not None and (not raw.strip().isdigit() or int(raw) < 1):
            errors.append(f"{key} must be a positive integer (got '{raw}').")

    raw_pause = os.environ.get("IMPORTER_BATCH_PAUSE_SECONDS")
    if raw_pause is not None:
        try:
            valid_pause = float(raw_pause) >= 0
        except ValueError:
            valid_pause = False
        if not valid_pause:
            errors.append(f"IMPORTER_BATCH_PAUSE_SECONDS must be a non-negative number (got '{raw_pause}').")
    return errors


def validate_environment(flask_env: str = None) -> Tuple[bool, List[str]]:
    """
    Validate required environment variables.

    Args:
        flask_env: development, production or testing; read from FLASK_ENV when None.

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    if flask_env is None:
        flask_env = os.environ.get("FLASK_ENV", "development")
    if flask_env != "production":
        return True, []

    errors = []
    secret_key = os.environ.get("SECRET_KEY", "")
    if not secret_key or secret_key in PLACEHOLDER_SECRET_KEYS:
        errors.append("SECRET_KEY is required in production and must not be a placeholder value.")
    if not os.environ.get("DATABASE_URL"):
        errors.append("DATABASE_URL is required in production (PostgreSQL connection string).")
    errors.extend(_importer_errors())

    return not errors, errors


def validate_and_exit(flask_env: str = None) -> None:
    """Print every validation error to stderr and exit(1) when any are found."""
    is_valid, errors = validate_environment(flask_env)
    if is_valid:
        return

    lines = ["Environment validation failed:"]
    lines.extend(f"  {index}. {error}" for index, error in enumerate(errors, 1))
    lines.append("Check your .env file or environment variables.")
    print("\n".join(lines), file=sys.stderr)
    sys.exit(1)
