# config/base.py
import os
import warnings
from datetime import timedelta

_FLASK_ENV = os.environ.get("FLASK_ENV", "development")
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_INSTANCE_DIR = os.path.join(_PROJECT_ROOT, "instance")

_DEV_SECRET_KEY = "dev-secret-key-change-in-production"


def _coerce_bool(value, default=False):
    """Convert environment-style truthy/falsey values to bool."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    value_str = str(value).strip().lower()
    if value_str in {"1", "true", "yes", "on"}:
        return True
    if value_str in {"0", "false", "no", "off"}:
        return False
    return default


def _coerce_int(value, default, *, minimum=None):
    """Parse an integer env value, falling back to ``default`` when invalid."""
    if value is None or str(value).strip() == "":
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        return default
    if minimum is not None and number < minimum:
        return default
    return number


def _coerce_float(value, default, *, minimum=0.0):
    if value is None or str(value).strip() == "":
        return default
    try:
        number = float(str(value).strip())
    except ValueError:
        return default
    if number < minimum:
        return default
    return number


def _resolve_secret_key(flask_env):
    secret_key = os.environ.get("SECRET_KEY")
    if secret_key:
        return secret_key
    if flask_env == "production":
        raise ValueError(
            "SECRET_KEY environment variable is required in production. "
            'Generate with: python -c "import secrets; print(secrets.token_hex(32))"'
        )
    if flask_env == "testing":
        return "test-secret-key-placeholder"
    warnings.warn(
        "SECRET_KEY not set; using the development default. Set SECRET_KEY before deploying.",
        UserWarning,
    )
    return _DEV_SECRET_KEY


def _sqlite_engine_options(uri):
    if not uri or not uri.startswith("sqlite"):
        return {}
    return {"connect_args": {"check_same_thread": False, "timeout": 5}}


class Config:
    SECRET_KEY = _resolve_secret_key(_FLASK_ENV)

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # Name importer
    IMPORTER_ENABLED = _coerce_bool(os.environ.get("IMPORTER_ENABLED"), default=True)
    IMPORTER_BATCH_SIZE = _coerce_int(os.environ.get("IMPORTER_BATCH_SIZE"), 500, minimum=1)
    IMPORTER_BATCH_PAUSE_SECONDS = _coerce_float(os.environ.get("IMPORTER_BATCH_PAUSE_SECONDS"), 0.01)
    IMPORTER_MAX_UPLOAD_MB = _coerce_int(os.environ.get("IMPORTER_MAX_UPLOAD_MB"), 5, minimum=1)
    IMPORTER_LARGE_DATASET_ROWS = _coerce_int(os.environ.get("IMPORTER_LARGE_DATASET_ROWS"), 1000, minimum=1)
    IMPORTER_PREVIEW_ROWS = _coerce_int(os.environ.get("IMPORTER_PREVIEW_ROWS"), 10, minimum=1)
    IMPORTER_UPLOAD_DIR = os.environ.get("IMPORTER_UPLOAD_DIR")
    IMPORTER_HISTORY_PAGE_SIZE = _coerce_int(os.environ.get("IMPORTER_HISTORY_PAGE_SIZE"), 10, minimum=1)

    # Whole CSVs also arrive as JSON bodies; keep headroom above the upload cap
    MAX_CONTENT_LENGTH = (IMPORTER_MAX_UPLOAD_MB + 5) * 1024 * 1024

    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"


class DevelopmentConfig(Config):
    DEBUG = True
    # SQLite URIs use forward slashes on every platform
    _default_uri = "sqlite:///" + os.path.join(_INSTANCE_DIR, "catalog_dev.db").replace("\\", "/")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", _default_uri)
    SQLALCHEMY_ECHO = _coerce_bool(os.environ.get("SQLALCHEMY_ECHO"), default=False)
    SQLALCHEMY_ENGINE_OPTIONS = _sqlite_engine_options(SQLALCHEMY_DATABASE_URI)

    if SQLALCHEMY_DATABASE_URI == _default_uri:
        os.makedirs(_INSTANCE_DIR, exist_ok=True)


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get("SECRET_KEY", "test-secret-key-for-testing-only")
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS = _sqlite_engine_options(SQLALCHEMY_DATABASE_URI)
    IMPORTER_BATCH_PAUSE_SECONDS = 0.0


class ProductionConfig(Config):
    DEBUG = False
    # Heroku-style URLs still use the legacy postgres:// scheme
    _uri = os.environ.get("DATABASE_URL")
    if _uri and _uri.startswith("postgres://"):
        _uri = _uri.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = _uri
    SQLALCHEMY_ECHO = False
    SESSION_COOKIE_SECURE = True
