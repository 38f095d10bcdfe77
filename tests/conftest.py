import os
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so 'app', 'config', and 'artsyhub' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import factories as test_factories
from tests.support import stubs as test_stubs


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path_factory):
    """Ensure a clean env for tests with per-test sqlite files."""
    db_dir = tmp_path_factory.mktemp("db")
    db_path = Path(db_dir) / "test.sqlite"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path.as_posix()}")
    monkeypatch.setenv("ARTSY_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("ARTSY_CLIENT_SECRET", "test-client-secret")
    monkeypatch.setenv("JWT_SECRET", "test-jwt-secret")
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
    yield db_path


@pytest.fixture
def artsy_stub():
    return test_stubs.StubArtsyClient()


@pytest.fixture
def app(_isolate_env, artsy_stub, tmp_path):
    import app as app_module

    application = app_module.create_app(
        {
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': f"sqlite:///{_isolate_env.as_posix()}",
            'ARTSY_TOKEN_FILE': str(tmp_path / "artsy_token.json"),
            'JWT_SECRET': "test-jwt-secret",
            'PREFETCH_ARTSY_TOKEN': False,
            'EXTENSIONS': {'artsy_client': artsy_stub},
        }
    )
    yield application


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def db_session(app_context):
    from artsyhub.database.db_manager import db

    test_factories.set_session(db.session)
    try:
        yield db.session
    finally:
        db.session.rollback()
        db.session.remove()
        test_factories.reset_session()


@pytest.fixture
def factories(db_session):
    yield test_factories


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    """Register a user through the API and return the JSON body."""

    def _register(email="ada@example.com", password="difference-engine", fullname="Ada Lovelace"):
        response = client.post(
            '/api/auth/register',
            json={'fullname': fullname, 'email': email, 'password': password},
        )
        assert response.status_code == 200, response.get_json()
        return response.get_json()

    return _register
