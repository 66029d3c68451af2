from __future__ import annotations

import logging

from flask import current_app
from flask_login import current_user
from spotipy.oauth2 import SpotifyOauthError

from mixtape.database.db_manager import db
from mixtape.domain.mixtapes.errors import ErrorKind, MixtapeError
from mixtape.domain.mixtapes.service import SpotifySession

logger = logging.getLogger(__name__)


def _refresh_tokens(user) -> None:
    if not user.refresh_token:
        raise MixtapeError(ErrorKind.PERMISSION_DENIED, "Your Spotify session expired. Please sign in again.")
    oauth = current_app.extensions["spotify_oauth"]()
    try:
        token_info = oauth.refresh_access_token(user.refresh_token)
    except SpotifyOauthError as exc:
        logger.warning("Spotify token refresh failed for %s: %s", user.spotify_id, exc)
        raise MixtapeError(
            ErrorKind.PERMISSION_DENIED, "Your Spotify session expired. Please sign in again."
        ) from exc
    user.apply_token_info(token_info)
    db.session.commit()
    logger.debug("Refreshed Spotify access token for %s", user.spotify_id)


def resolve_spotify_session() -> SpotifySession:
    """Resolve the acting Spotify user and a valid access token.

    The token is refreshed first when it is about to expire.
    """
    if not getattr(current_user, "is_authenticated", False):
        raise MixtapeError(ErrorKind.PERMISSION_DENIED, "Sign in with Spotify first.")
    user = current_user._get_current_object()
    if user.token_expired():
        _refresh_tokens(user)
    return SpotifySession(user_id=user.spotify_id, access_token=user.access_token)


__all__ = ["resolve_spotify_session"]
