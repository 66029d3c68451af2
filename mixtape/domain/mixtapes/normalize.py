"""Mapping of validated Spotify payloads onto the internal track and playlist models."""

from __future__ import annotations

from typing import List, Optional, Sequence

from mixtape.models.dto import AudioFeatures, Image, Playlist, Track

from .schemas import SpotifyAudioFeatures, SpotifyImage, SpotifyPlaylist, SpotifyTrack
from .audio_features import scale_track_features


def _image(raw: Optional[SpotifyImage]) -> Optional[Image]:
    if raw is None:
        return None
    return Image(url=raw.url, width=raw.width, height=raw.height)


def to_track(raw: SpotifyTrack, audio_features: Optional[AudioFeatures] = None) -> Track:
    images = raw.album.images
    return Track(
        id=raw.id,
        uri=raw.uri,
        name=raw.name,
        artists=[artist.name for artist in raw.artists],
        preview_url=raw.preview_url,
        album_name=raw.album.name,
        # Spotify lists album art largest first; the last one is the thumbnail
        image=_image(images[-1]) if images else None,
        duration_ms=raw.duration_ms,
        audio_features=audio_features,
    )


def to_tracks_with_features(
    raw_tracks: Sequence[SpotifyTrack],
    raw_features: Optional[Sequence[Optional[SpotifyAudioFeatures]]],
) -> List[Track]:
    """Pair tracks with a parallel audio-features array.

    ``raw_features`` is None when the lookup failed; every track then carries
    unknown features.
    """
    tracks: List[Track] = []
    for index, raw in enumerate(raw_tracks):
        features = None
        if raw_features is not None and index < len(raw_features):
            features = scale_track_features(raw_features[index])
        tracks.append(to_track(raw, features))
    return tracks


def playlist_cover(images: Sequence[SpotifyImage]) -> Optional[Image]:
    """Medium resolution cover: the second image, else whatever exists."""
    if len(images) > 1:
        return _image(images[1])
    if images:
        return _image(images[0])
    return None


def to_playlist(raw: SpotifyPlaylist, playlist_url: str, audio_features: AudioFeatures) -> Playlist:
    return Playlist(
        id=raw.id,
        name=raw.name,
        description=raw.description or "",
        image=playlist_cover(raw.images),
        uri=playlist_url,
        audio_features=None if audio_features.is_unknown else audio_features,
    )


__all__ = [
    "to_track",
    "to_tracks_with_features",
    "playlist_cover",
    "to_playlist",
]
