# conftest.py

import os

import pytest

# Set testing environment BEFORE importing app so app.py picks TestingConfig
os.environ["FLASK_ENV"] = "testing"

from app import app as flask_app  # noqa: E402
from catalog_app.models import Gender, Name, Origin, Religion, User, UserRole, db  # noqa: E402


@pytest.fixture(scope="function")
def app(tmp_path):
    """Configure the shared Flask application against a clean database"""
    flask_app.config.update(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret-key-for-testing-only",
            "DEBUG": True,
            "ENABLE_FILE_LOGGING": False,
            "ENABLE_CONSOLE_LOGGING": False,
            "LOG_LEVEL": "DEBUG",
            "IMPORTER_ENABLED": True,
            "IMPORTER_BATCH_SIZE": 500,
            "IMPORTER_BATCH_PAUSE_SECONDS": 0.0,
            "IMPORTER_MAX_UPLOAD_MB": 5,
            "IMPORTER_LARGE_DATASET_ROWS": 1000,
            "IMPORTER_PREVIEW_ROWS": 10,
            "IMPORTER_HISTORY_PAGE_SIZE": 10,
            "IMPORTER_UPLOAD_DIR": str(tmp_path / "uploads"),
        }
    )

    from catalog_app.utils.logging_config import setup_logging

    setup_logging(flask_app)

    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture(autouse=True)
def app_context(app):
    """Automatically provide app context for all tests"""
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    """Create a test client for the Flask application"""
    return app.test_client()


@pytest.fixture
def runner(app):
    """Create a test CLI runner for the Flask application"""
    return app.test_cli_runner()


@pytest.fixture
def test_user(app):
    """Persisted non-admin user"""
    user = User(name="Test User", email="test@example.com", role=UserRole.USER, is_active=True)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin_user(app):
    """Persisted admin user"""
    user = User(name="Admin User", email="admin@example.com", role=UserRole.ADMIN, is_active=True)
    db.session.add(user)
    db.session.commit()
    return user


def _login(client, user):
    with client.session_transaction() as session:
        session["_user_id"] = str(user.id)
        session["_fresh"] = True


@pytest.fixture
def logged_in_user(client, test_user):
    """Client carrying a session for the non-admin user"""
    _login(client, test_user)
    return client, test_user


@pytest.fixture
def logged_in_admin(client, admin_user):
    """Client carrying a session for the admin user"""
    _login(client, admin_user)
    return client, admin_user


@pytest.fixture
def make_religion(app):
    def _make(name, *, is_active=True):
        religion = Religion(name=name, is_active=is_active)
        db.session.add(religion)
        db.session.commit()
        return religion

    return _make


@pytest.fixture
def make_origin(app):
    def _make(name, *, is_active=True):
        origin = Origin(name=name, is_active=is_active)
        db.session.add(origin)
        db.session.commit()
        return origin

    return _make


@pytest.fixture
def make_name(app):
    def _make(name, *, gender="unisex", description="", religion=None, origin=None):
        record = Name(
            name=name,
            gender=Gender(gender),
            description=description,
            religion_id=religion.id if religion else None,
            origin_id=origin.id if origin else None,
        )
        db.session.add(record)
        db.session.commit()
        return record

    return _make


def pytest_configure(config):
    """Register markers and pin the testing environment"""
    os.environ["FLASK_ENV"] = "testing"

    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
