#!/usr/bin/env python
"""
Pydantic DTOs for the playlist-assembly API.

Internal track/playlist representations built from Spotify payloads, plus the
validated inputs of the four mixtape operations. Inputs are checked here so
out-of-range values never reach the orchestrator.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AudioFeatures(BaseModel):
    """Danceability, energy and valence on a 0-100 scale; tempo in BPM."""

    model_config = ConfigDict(frozen=True)

    danceability: float = Field(ge=0, le=100)
    energy: float = Field(ge=0, le=100)
    tempo: float = Field(ge=0)
    valence: float = Field(ge=0, le=100)

    @property
    def is_unknown(self) -> bool:
        return not (self.danceability or self.energy or self.tempo or self.valence)


# All-zero record standing in for "audio features unavailable" on the wire
UNKNOWN_AUDIO_FEATURES = AudioFeatures(danceability=0, energy=0, tempo=0, valence=0)


def audio_features_to_wire(features: Optional[AudioFeatures]) -> Dict[str, float]:
    return (features or UNKNOWN_AUDIO_FEATURES).model_dump()


class Image(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    width: Optional[int] = None
    height: Optional[int] = None


class Track(BaseModel):
    """A track as offered to the user while curating a mixtape."""

    model_config = ConfigDict(frozen=True)

    id: str
    uri: str
    name: str
    artists: List[str]
    preview_url: Optional[str] = None
    album_name: str
    image: Optional[Image] = None
    duration_ms: int = Field(ge=0)
    audio_features: Optional[AudioFeatures] = None

    def to_wire(self) -> Dict[str, Any]:
        data = self.model_dump(exclude={"audio_features"})
        data["audio_features"] = audio_features_to_wire(self.audio_features)
        return data


class Playlist(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    image: Optional[Image] = None
    uri: str
    audio_features: Optional[AudioFeatures] = None

    def to_wire(self) -> Dict[str, Any]:
        data = self.model_dump(exclude={"audio_features"})
        data["audio_features"] = audio_features_to_wire(self.audio_features)
        return data


class PlaylistPage(BaseModel):
    items: List[Playlist]
    total: int = Field(ge=0)
    next_cursor: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "items": [item.to_wire() for item in self.items],
            "total": self.total,
        }
        if self.next_cursor is not None:
            data["next_cursor"] = self.next_cursor
        return data


class CreatedPlaylist(BaseModel):
    name: str
    url: str


class SearchQuery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    q: str = ""
    offset: int = Field(default=0, ge=0, le=1000)
    limit: int = Field(default=20, ge=0, le=50)


class RecommendationQuery(BaseModel):
    """Seeds plus optional targets, bounded ones on the 0-100 scale."""

    model_config = ConfigDict(extra="ignore")

    track_seeds: List[str] = Field(default_factory=list, max_length=5)
    limit: int = Field(default=20, ge=1, le=100)
    danceability: Optional[float] = Field(default=None, ge=0, le=100)
    tempo: Optional[float] = Field(default=None, ge=0)
    valence: Optional[float] = Field(default=None, ge=0, le=100)
    energy: Optional[float] = Field(default=None, ge=0, le=100)

    @field_validator("track_seeds", mode="before")
    @classmethod
    def _drop_blank_seeds(cls, value: object) -> object:
        if isinstance(value, (list, tuple)):
            return [str(seed).strip() for seed in value if str(seed).strip()]
        return value


class PlaylistsQuery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    limit: Optional[int] = Field(default=None, ge=1, le=100)
    cursor: Optional[str] = None
    is_creator_only: bool = False

    @field_validator("cursor", mode="before")
    @classmethod
    def _blank_cursor_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CreatePlaylistInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    uris: List[str] = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)
    is_public: bool = False
    description: str = ""

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped


__all__ = [
    "AudioFeatures",
    "UNKNOWN_AUDIO_FEATURES",
    "audio_features_to_wire",
    "Image",
    "Track",
    "Playlist",
    "PlaylistPage",
    "CreatedPlaylist",
    "SearchQuery",
    "RecommendationQuery",
    "PlaylistsQuery",
    "CreatePlaylistInput",
]
