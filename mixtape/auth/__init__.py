#!/usr/bin/env python
"""Authentication utilities: Flask-Login integration and the Spotify OAuth manager."""

from __future__ import annotations

from flask import jsonify
from flask_login import LoginManager
from spotipy.cache_handler import MemoryCacheHandler
from spotipy.oauth2 import SpotifyOAuth

login_manager = LoginManager()
login_manager.session_protection = "strong"
login_manager.login_message = None


def build_oauth(config) -> SpotifyOAuth:
    """SpotifyOAuth that keeps tokens in memory; the user row is the real store."""
    return SpotifyOAuth(
        client_id=config.get("SPOTIPY_CLIENT_ID"),
        client_secret=config.get("SPOTIPY_CLIENT_SECRET"),
        redirect_uri=config.get("SPOTIPY_REDIRECT_URI"),
        scope=" ".join(config.get("SPOTIFY_SCOPES") or []),
        cache_handler=MemoryCacheHandler(),
        open_browser=False,
    )


def init_auth(app):
    """Attach Flask-Login to the Flask app and register auth blueprints."""
    from mixtape.database.db_manager import User, db
    from mixtape.interfaces.http.routes.auth import auth_bp

    login_manager.init_app(app)
    login_manager.login_view = "auth.login"

    @login_manager.user_loader
    def load_user(user_id: str) -> User | None:
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    @login_manager.unauthorized_handler
    def _unauthorized():
        return jsonify({"error": "authentication_required"}), 401

    # Routes and the session refresh ask for a fresh manager per use
    app.extensions["spotify_oauth"] = lambda: build_oauth(app.config)

    app.register_blueprint(auth_bp)

    return login_manager


__all__ = ["login_manager", "init_auth", "build_oauth"]
