#!/usr/bin/env python
"""
Typed settings for talking to the Spotify Web API.

Merges defaults from config.Config with optional runtime overrides and clamps
values into the ranges the upstream service tolerates.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from config import Config


def _clamp_int(value: object, low: int, high: int, fallback: int) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    return max(low, min(number, high))


class SpotifyApiSettings(BaseModel):
    """Upstream API endpoints, batching and backpressure knobs."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    api_base_url: str = "https://api.spotify.com/v1"
    web_base_url: str = "https://open.spotify.com"
    request_timeout_seconds: float = 10.0
    max_items_per_request: int = 100
    rate_limit_retries: int = 1
    retry_after_cap_seconds: float = 5.0
    playlist_fetch_workers: int = 4
    default_playlist_page_size: int = 50

    @field_validator("api_base_url", "web_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("request_timeout_seconds", mode="before")
    @classmethod
    def _coerce_timeout(cls, value: object) -> float:
        try:
            timeout = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 10.0
        return timeout if timeout > 0 else 10.0

    @field_validator("max_items_per_request", mode="before")
    @classmethod
    def _coerce_batch_size(cls, value: object) -> int:
        return _clamp_int(value, 1, 100, 100)

    @field_validator("rate_limit_retries", mode="before")
    @classmethod
    def _coerce_retries(cls, value: object) -> int:
        return _clamp_int(value, 0, 3, 1)

    @field_validator("retry_after_cap_seconds", mode="before")
    @classmethod
    def _coerce_retry_cap(cls, value: object) -> float:
        try:
            cap = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 5.0
        return max(0.0, cap)

    @field_validator("playlist_fetch_workers", mode="before")
    @classmethod
    def _coerce_workers(cls, value: object) -> int:
        return _clamp_int(value, 1, 16, 4)

    @field_validator("default_playlist_page_size", mode="before")
    @classmethod
    def _coerce_page_size(cls, value: object) -> int:
        return _clamp_int(value, 1, 100, 50)

    def playlist_url(self, playlist_id: str) -> str:
        return f"{self.web_base_url}/playlist/{playlist_id}"


def load_spotify_api_settings(overrides: Optional[Dict[str, Any]] = None) -> SpotifyApiSettings:
    """Load settings merging config defaults with optional runtime overrides."""
    data: Dict[str, Any] = {
        "api_base_url": Config.SPOTIFY_API_BASE_URL,
        "web_base_url": Config.SPOTIFY_WEB_BASE_URL,
        "request_timeout_seconds": Config.SPOTIFY_REQUEST_TIMEOUT_SECONDS,
        "max_items_per_request": Config.SPOTIFY_MAX_ITEMS_PER_REQUEST,
        "rate_limit_retries": Config.SPOTIFY_RATE_LIMIT_RETRIES,
        "retry_after_cap_seconds": Config.SPOTIFY_RETRY_AFTER_CAP_SECONDS,
        "playlist_fetch_workers": Config.PLAYLIST_FETCH_WORKERS,
        "default_playlist_page_size": Config.DEFAULT_PLAYLIST_PAGE_SIZE,
    }
    if overrides:
        data.update(overrides)
    return SpotifyApiSettings.model_validate(data)


__all__ = [
    "SpotifyApiSettings",
    "load_spotify_api_settings",
]
