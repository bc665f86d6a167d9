# app.py

import logging
import os
from http import HTTPStatus

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_login import LoginManager
from sqlalchemy import event

# .env has to be applied before config classes read os.environ
load_dotenv()

from config import DevelopmentConfig, ProductionConfig, TestingConfig  # noqa: E402
from config.monitoring import (  # noqa: E402
    DevelopmentMonitoringConfig,
    ProductionMonitoringConfig,
    TestingMonitoringConfig,
)
from config.validation import validate_and_exit  # noqa: E402
from catalog_app.importer import init_importer  # noqa: E402
from catalog_app.models import User, db  # noqa: E402
from catalog_app.utils.logging_config import setup_logging  # noqa: E402

logger = logging.getLogger(__name__)

CONFIG_BY_ENV = {
    "production": (ProductionConfig, ProductionMonitoringConfig),
    "testing": (TestingConfig, TestingMonitoringConfig),
    "development": (DevelopmentConfig, DevelopmentMonitoringConfig),
}

flask_env = os.environ.get("FLASK_ENV", "development")
if flask_env == "production":
    validate_and_exit(flask_env)

app = Flask(__name__)
for config_object in CONFIG_BY_ENV.get(flask_env, CONFIG_BY_ENV["development"]):
    app.config.from_object(config_object)

db.init_app(app)
login_manager = LoginManager(app)
setup_logging(app)


def _sqlite_catalog_pragmas(dbapi_connection, connection_record):  # pragma: no cover - driver hook
    cursor = dbapi_connection.cursor()
    try:
        # Per-row commits from concurrent imports wait up to 5s for the write lock
        cursor.execute("PRAGMA busy_timeout=5000")
        if not app.config.get("TESTING", False):
            cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


with app.app_context():
    if db.engine.url.get_backend_name() == "sqlite" and not event.contains(
        db.engine, "connect", _sqlite_catalog_pragmas
    ):
        event.listen(db.engine, "connect", _sqlite_catalog_pragmas)
    if not app.config.get("TESTING", False):
        db.create_all()


@login_manager.user_loader
def load_user(user_id):
    """Resolve the session identity; disabled accounts count as anonymous."""
    try:
        user = db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None
    if user is None or not user.is_active:
        return None
    return user


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"success": False, "error": "Authentication required."}), HTTPStatus.UNAUTHORIZED


init_importer(app)


@app.errorhandler(HTTPStatus.NOT_FOUND)
def not_found_error(error):
    return jsonify({"success": False, "error": "Not found"}), HTTPStatus.NOT_FOUND


@app.errorhandler(HTTPStatus.REQUEST_ENTITY_TOO_LARGE)
def payload_too_large(error):
    max_mb = app.config.get("IMPORTER_MAX_UPLOAD_MB")
    return (
        jsonify({"success": False, "error": f"File too large. Maximum upload size is {max_mb} MB."}),
        HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
    )


@app.errorhandler(HTTPStatus.INTERNAL_SERVER_ERROR)
def internal_error(error):
    db.session.rollback()
    logger.error("Unhandled error: %s", error)
    return jsonify({"success": False, "error": "Internal server error"}), HTTPStatus.INTERNAL_SERVER_ERROR


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
