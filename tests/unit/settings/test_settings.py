import importlib
import os
from unittest.mock import patch

import pytest
from hypothesis import given, strategies as st


@pytest.fixture(autouse=True)
def _restore_config(monkeypatch):
    """Reload config modules against the original environment after each test."""
    yield
    monkeypatch.undo()
    import config as _config
    importlib.reload(_config)
    import mixtape.settings as settings
    importlib.reload(settings)


@pytest.mark.unit
def test_defaults_match_spotify_limits():
    from mixtape.settings import SpotifyApiSettings

    s = SpotifyApiSettings()
    assert s.api_base_url == "https://api.spotify.com/v1"
    assert s.max_items_per_request == 100
    assert s.request_timeout_seconds == 10.0
    assert s.default_playlist_page_size == 50
    assert s.playlist_url("abc") == "https://open.spotify.com/playlist/abc"


@pytest.mark.unit
@pytest.mark.parametrize(
    "field,value,expected",
    [
        ("max_items_per_request", 500, 100),
        ("max_items_per_request", 0, 1),
        ("max_items_per_request", "junk", 100),
        ("rate_limit_retries", -1, 0),
        ("rate_limit_retries", 10, 3),
        ("playlist_fetch_workers", 0, 1),
        ("playlist_fetch_workers", 64, 16),
        ("request_timeout_seconds", 0, 10.0),
        ("request_timeout_seconds", "2.5", 2.5),
        ("retry_after_cap_seconds", -3, 0.0),
        ("default_playlist_page_size", 1000, 100),
    ],
)
def test_values_are_clamped(field, value, expected):
    from mixtape.settings import SpotifyApiSettings

    assert getattr(SpotifyApiSettings(**{field: value}), field) == expected


@pytest.mark.unit
def test_base_urls_lose_trailing_slash():
    from mixtape.settings import SpotifyApiSettings

    s = SpotifyApiSettings(api_base_url="http://localhost:9000/v1/", web_base_url="http://web/")
    assert s.api_base_url == "http://localhost:9000/v1"
    assert s.playlist_url("p") == "http://web/playlist/p"


@pytest.mark.unit
def test_load_settings_uses_current_config(monkeypatch):
    monkeypatch.setenv("SPOTIFY_API_BASE_URL", "http://stub-spotify/v1")
    monkeypatch.setenv("SPOTIFY_REQUEST_TIMEOUT_SECONDS", "3")
    monkeypatch.setenv("SPOTIFY_MAX_ITEMS_PER_REQUEST", "40")
    monkeypatch.setenv("PLAYLIST_FETCH_WORKERS", "2")

    import config as _config
    importlib.reload(_config)
    import mixtape.settings as settings
    importlib.reload(settings)

    s = settings.load_spotify_api_settings()
    assert s.api_base_url == _config.Config.SPOTIFY_API_BASE_URL == "http://stub-spotify/v1"
    assert s.request_timeout_seconds == 3.0
    assert s.max_items_per_request == 40
    assert s.playlist_fetch_workers == 2

    overridden = settings.load_spotify_api_settings({"max_items_per_request": 7})
    assert overridden.max_items_per_request == 7


@pytest.mark.unit
@given(
    batch=st.integers(min_value=-50, max_value=500),
    workers=st.integers(min_value=-5, max_value=100),
)
def test_property_based_env_permutations(batch, workers):
    with patch.dict(os.environ, {
        "SPOTIFY_MAX_ITEMS_PER_REQUEST": str(batch),
        "PLAYLIST_FETCH_WORKERS": str(workers),
    }, clear=False):
        import config as _config
        importlib.reload(_config)
        import mixtape.settings as settings
        importlib.reload(settings)

        s = settings.load_spotify_api_settings()
        assert s.max_items_per_request == max(1, min(batch, 100))
        assert s.playlist_fetch_workers == max(1, min(workers, 16))


@pytest.mark.unit
@pytest.mark.parametrize(
    "value,expected",
    [
        ("1", True),
        ("true", True),
        ("TRUE", True),
        ("yes", True),
        ("on", True),
        ("0", False),
        ("false", False),
        ("no", False),
        ("off", False),
        ("", False),
    ],
)
def test_config_bool_parsing(monkeypatch, value, expected):
    monkeypatch.setenv("ENABLE_CONSOLE_LOGS", value)
    import config as _config
    importlib.reload(_config)
    assert _config.Config.ENABLE_CONSOLE_LOGS is expected


@pytest.mark.unit
def test_config_csv_lists(monkeypatch):
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", " http://a , ,http://b")
    monkeypatch.setenv("SPOTIFY_SCOPES", "playlist-modify-public")
    import config as _config
    importlib.reload(_config)
    assert _config.Config.CORS_ALLOWED_ORIGINS == ["http://a", "http://b"]
    assert _config.Config.SPOTIFY_SCOPES == ["playlist-modify-public"]


@pytest.mark.unit
def test_config_bad_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("SPOTIFY_RATE_LIMIT_RETRIES", "many")
    monkeypatch.setenv("SPOTIFY_REQUEST_TIMEOUT_SECONDS", "soon")
    import config as _config
    importlib.reload(_config)
    assert _config.Config.SPOTIFY_RATE_LIMIT_RETRIES == 1
    assert _config.Config.SPOTIFY_REQUEST_TIMEOUT_SECONDS == 10.0
