#!/usr/bin/env python
"""Spotify OAuth login endpoints backing the Flask-Login session."""

from __future__ import annotations

import logging
import secrets

import spotipy
from flask import Blueprint, current_app, jsonify, redirect, request, session
from flask_login import current_user, login_user, logout_user
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyOauthError

from mixtape.database.db_manager import User, db

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")
_STATE_KEY = "spotify_oauth_state"


def fetch_profile(access_token: str) -> dict:
    """Return the Spotify profile (id, display_name) owning the token."""
    return spotipy.Spotify(auth=access_token).current_user()


@auth_bp.route("/login", methods=["GET"])
def login():
    state = secrets.token_urlsafe(16)
    session[_STATE_KEY] = state
    oauth = current_app.extensions["spotify_oauth"]()
    return redirect(oauth.get_authorize_url(state=state))


@auth_bp.route("/callback", methods=["GET"])
def callback():
    if request.args.get("error"):
        return jsonify({"error": "authorization_denied", "message": request.args["error"]}), 400

    expected_state = session.pop(_STATE_KEY, None)
    if not expected_state or request.args.get("state") != expected_state:
        return jsonify({"error": "invalid_state"}), 400

    code = request.args.get("code")
    if not code:
        return jsonify({"error": "code_required"}), 400

    oauth = current_app.extensions["spotify_oauth"]()
    try:
        token_info = oauth.get_access_token(code, as_dict=True, check_cache=False)
        profile = fetch_profile(token_info["access_token"])
    except (SpotifyOauthError, SpotifyException) as exc:
        logger.warning("Spotify login failed: %s", exc)
        return jsonify({"error": "login_failed", "message": "Could not complete the Spotify login."}), 502

    spotify_id = profile["id"]
    user = User.query.filter_by(spotify_id=spotify_id).first()
    if user is None:
        user = User(spotify_id=spotify_id)
        db.session.add(user)
    user.display_name = profile.get("display_name") or spotify_id
    user.apply_token_info(token_info)
    db.session.commit()

    login_user(user)
    logger.info("Spotify user %s signed in", spotify_id)
    return redirect(current_app.config.get("FRONTEND_URL") or "/")


@auth_bp.route("/logout", methods=["POST"])
def logout():
    if current_user.is_authenticated:
        logout_user()
    return jsonify({"success": True}), 200


@auth_bp.route("/session", methods=["GET"])
def session_info():
    if current_user.is_authenticated:
        return jsonify({"user": current_user.to_dict()}), 200
    return jsonify({"user": None}), 200


__all__ = ["auth_bp", "fetch_profile"]
