import os
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so 'app', 'config', and 'mixtape' import correctly
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
    monkeypatch.setenv("SPOTIPY_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("SPOTIPY_CLIENT_SECRET", "test-client-secret")
    yield


@pytest.fixture
def fake_http():
    """Transport double replacing ``requests`` for Spotify Web API calls."""
    return test_stubs.FakeHttp()


@pytest.fixture
def api_settings():
    from mixtape.settings import SpotifyApiSettings

    return SpotifyApiSettings(retry_after_cap_seconds=5, rate_limit_retries=1)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def api_client(api_settings, fake_http, sleeps):
    from mixtape.domain.mixtapes import SpotifyApiClient

    return SpotifyApiClient(api_settings, http=fake_http, sleep=sleeps.append)


@pytest.fixture
def app(tmp_path, fake_http):
    import app as app_module

    db_path = tmp_path / "app.sqlite"
    application = app_module.create_app(
        config_overrides={
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path.as_posix()}",
            # Test clients carry no stable client identifier
            "SESSION_PROTECTION": None,
            "STRUCTURED_LOGGING": False,
            "SPOTIFY_RETRY_AFTER_CAP_SECONDS": 0,
            "SPOTIPY_CLIENT_ID": "test-client-id",
            "SPOTIPY_CLIENT_SECRET": "test-client-secret",
            "SPOTIPY_REDIRECT_URI": "http://127.0.0.1:5000/api/auth/callback",
            "FRONTEND_URL": "/",
        },
        spotify_http=fake_http,
    )
    yield application


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def db_session(app_context):
    from mixtape.database.db_manager import db

    test_factories.set_session(db.session)
    try:
        yield db.session
    finally:
        try:
            db.session.rollback()
        except Exception:
            pass
        db.session.remove()
        test_factories.reset_session()


@pytest.fixture
def factories(db_session):
    yield test_factories


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(db_session, factories):
    account = factories.UserFactory(spotify_id="owner-1", access_token="token-abc")
    db_session.commit()
    return account


@pytest.fixture
def auth_client(app, user):
    """Test client whose session is logged in as ``user``."""
    from flask_login import FlaskLoginClient

    app.test_client_class = FlaskLoginClient
    return app.test_client(user=user)
