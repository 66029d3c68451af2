"""Shapes of the Spotify Web API payloads this service consumes.

Responses are validated here, at the boundary, instead of trusting field
presence deeper in the pipeline.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import ErrorKind, MixtapeError, UpstreamError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class _Upstream(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SpotifyImage(_Upstream):
    url: str
    width: Optional[int] = None
    height: Optional[int] = None


class SpotifyArtist(_Upstream):
    name: str


class SpotifyAlbum(_Upstream):
    name: str
    images: List[SpotifyImage] = []

    @field_validator("images", mode="before")
    @classmethod
    def _null_images(cls, value: Any) -> Any:
        return value or []


class SpotifyTrack(_Upstream):
    id: str
    uri: str
    name: str
    artists: List[SpotifyArtist] = []
    preview_url: Optional[str] = None
    album: SpotifyAlbum
    duration_ms: int


class SpotifyTrackPage(_Upstream):
    items: List[SpotifyTrack] = []
    total: Optional[int] = None
    next: Optional[str] = None


class SearchResponse(_Upstream):
    tracks: SpotifyTrackPage


class RecommendationsResponse(_Upstream):
    tracks: List[SpotifyTrack] = []


class SpotifyAudioFeatures(_Upstream):
    danceability: float
    energy: float
    tempo: float
    valence: float


class AudioFeaturesResponse(_Upstream):
    # Tracks without an analysis come back as null entries
    audio_features: List[Optional[SpotifyAudioFeatures]] = []


class PlaylistItemTrack(_Upstream):
    # Local files and unavailable items carry no id
    id: Optional[str] = None


class PlaylistItem(_Upstream):
    track: Optional[PlaylistItemTrack] = None


class PlaylistTracksPage(_Upstream):
    items: List[PlaylistItem] = []
    next: Optional[str] = None
    total: Optional[int] = None

    def track_ids(self) -> List[str]:
        return [item.track.id for item in self.items if item.track is not None and item.track.id]


class SpotifyPlaylist(_Upstream):
    id: str
    name: str
    description: Optional[str] = None
    images: List[SpotifyImage] = []
    tracks: PlaylistTracksPage = PlaylistTracksPage()

    @field_validator("images", mode="before")
    @classmethod
    def _null_images(cls, value: Any) -> Any:
        return value or []


class CreatePlaylistResponse(_Upstream):
    id: str


class SpotifyErrorBody(_Upstream):
    status: Optional[int] = None
    message: str = ""


def upstream_error(body: Any) -> Optional[UpstreamError]:
    """Return the error carried by an error-shaped body, or None."""
    if not isinstance(body, dict) or "error" not in body:
        return None
    raw = body["error"]
    if isinstance(raw, dict):
        parsed = SpotifyErrorBody.model_validate(raw)
        return UpstreamError(parsed.status, parsed.message)
    # OAuth endpoints answer {"error": "invalid_grant", "error_description": ...}
    return UpstreamError(None, str(body.get("error_description") or raw))


def parse_body(model: Type[ModelT], body: Any, *, action: str) -> ModelT:
    """Validate a successful body, raising the mapped error for error bodies."""
    error = upstream_error(body)
    if error is not None:
        raise error
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        logger.error("Unexpected Spotify response while trying to %s: %s", action, exc)
        raise MixtapeError(
            ErrorKind.INTERNAL_ERROR,
            f"Unexpected response from Spotify while trying to {action}.",
        ) from exc


__all__ = [
    "SpotifyImage",
    "SpotifyArtist",
    "SpotifyAlbum",
    "SpotifyTrack",
    "SpotifyTrackPage",
    "SearchResponse",
    "RecommendationsResponse",
    "SpotifyAudioFeatures",
    "AudioFeaturesResponse",
    "PlaylistItem",
    "PlaylistTracksPage",
    "SpotifyPlaylist",
    "CreatePlaylistResponse",
    "SpotifyErrorBody",
    "upstream_error",
    "parse_body",
]
