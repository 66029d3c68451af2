#!/usr/bin/env python
# config.py
import os
from typing import List

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'change-me-mixtape-secret'

    # Database (playlist ownership records + logged-in users)
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'mixtape', 'database', 'instance', 'mixtape.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Spotify OAuth application
    SPOTIPY_CLIENT_ID = os.environ.get('SPOTIPY_CLIENT_ID')
    SPOTIPY_CLIENT_SECRET = os.environ.get('SPOTIPY_CLIENT_SECRET')
    SPOTIPY_REDIRECT_URI = os.environ.get('SPOTIPY_REDIRECT_URI', 'http://127.0.0.1:5000/api/auth/callback')
    SPOTIFY_SCOPES = _get_csv_list(
        'SPOTIFY_SCOPES',
        'user-read-email,playlist-read-private,playlist-modify-public,playlist-modify-private',
    )
    # Where the browser lands after a successful login
    FRONTEND_URL = os.getenv('FRONTEND_URL', '/')

    # Spotify Web API
    SPOTIFY_API_BASE_URL = os.getenv('SPOTIFY_API_BASE_URL', 'https://api.spotify.com/v1')
    SPOTIFY_WEB_BASE_URL = os.getenv('SPOTIFY_WEB_BASE_URL', 'https://open.spotify.com')
    SPOTIFY_REQUEST_TIMEOUT_SECONDS = _get_float('SPOTIFY_REQUEST_TIMEOUT_SECONDS', 10.0)
    # Bulk endpoints (audio-features, add tracks) accept at most 100 items per call
    SPOTIFY_MAX_ITEMS_PER_REQUEST = _get_int('SPOTIFY_MAX_ITEMS_PER_REQUEST', 100)
    SPOTIFY_RATE_LIMIT_RETRIES = _get_int('SPOTIFY_RATE_LIMIT_RETRIES', 1)
    SPOTIFY_RETRY_AFTER_CAP_SECONDS = _get_float('SPOTIFY_RETRY_AFTER_CAP_SECONDS', 5.0)

    # Playlist listing
    PLAYLIST_FETCH_WORKERS = _get_int('PLAYLIST_FETCH_WORKERS', 4)
    DEFAULT_PLAYLIST_PAGE_SIZE = _get_int('DEFAULT_PLAYLIST_PAGE_SIZE', 50)

    # HTTP surface
    CORS_ALLOWED_ORIGINS = _get_csv_list('CORS_ALLOWED_ORIGINS', 'http://localhost:3000')

    # Runtime behavior
    # Turn Flask debug on/off from env; default off to avoid noisy console
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
    # JSON log lines on stdout with request id/path/method
    STRUCTURED_LOGGING = _get_bool('STRUCTURED_LOGGING', True)
