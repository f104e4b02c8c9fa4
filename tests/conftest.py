"""Test configuration and fixtures."""

import pytest

from api import create_app
from models import storage


@pytest.fixture
def app(tmp_path):
    """App wired to a throwaway SQLite file per test."""
    app = create_app("test", {"DATABASE_URL": f"sqlite:///{tmp_path / 'test.db'}"})
    yield app
    storage.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def manager(app):
    return app.extensions["session_manager"]


@pytest.fixture
def codec(app):
    return app.extensions["token_codec"]


@pytest.fixture
def mailer(app):
    return app.extensions["mailer"]


@pytest.fixture
def alice(manager):
    """Registered user alice@example.com / pw123."""
    return manager.register("alice@example.com", "pw123", name="Alice")


@pytest.fixture
def login_tokens(client, alice):
    """Log alice in over HTTP and return the response JSON."""
    resp = client.post("/login", json={"email": "alice@example.com", "password": "pw123"})
    assert resp.status_code == 200
    return resp.get_json()


@pytest.fixture
def auth_headers(login_tokens):
    return {"Authorization": f"Bearer {login_tokens['accessToken']}"}
