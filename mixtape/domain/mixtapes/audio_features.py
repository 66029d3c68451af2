"""Audio feature scaling and averaging."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from mixtape.models.dto import UNKNOWN_AUDIO_FEATURES, AudioFeatures

from .schemas import SpotifyAudioFeatures


def calculate_average_audio_features(records: Iterable[AudioFeatures]) -> AudioFeatures:
    """Element-wise arithmetic mean; an empty input yields the unknown sentinel."""
    items = list(records)
    if not items:
        return UNKNOWN_AUDIO_FEATURES
    count = len(items)
    return AudioFeatures(
        danceability=sum(item.danceability for item in items) / count,
        energy=sum(item.energy for item in items) / count,
        tempo=sum(item.tempo for item in items) / count,
        valence=sum(item.valence for item in items) / count,
    )


def scale_track_features(raw: Optional[SpotifyAudioFeatures]) -> Optional[AudioFeatures]:
    """0-1 upstream values to floored 0-100 integers; tempo is kept as is."""
    if raw is None:
        return None
    return AudioFeatures(
        danceability=math.floor(raw.danceability * 100),
        energy=math.floor(raw.energy * 100),
        tempo=raw.tempo,
        valence=math.floor(raw.valence * 100),
    )


def scale_playlist_features(raw: SpotifyAudioFeatures) -> AudioFeatures:
    """Same as the track scaling but without flooring, for averaging."""
    return AudioFeatures(
        danceability=raw.danceability * 100,
        energy=raw.energy * 100,
        tempo=raw.tempo,
        valence=raw.valence * 100,
    )


def to_target_fraction(value: float) -> float:
    """Map a 0-100 target back onto the 0-1 scale the upstream API expects."""
    return value / 100


__all__ = [
    "calculate_average_audio_features",
    "scale_track_features",
    "scale_playlist_features",
    "to_target_fraction",
]
