from __future__ import annotations

from flask import Blueprint, Response
from prometheus_client import Counter, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

UPSTREAM_REQUESTS = Counter(
    "mixtape_upstream_requests_total",
    "Requests sent to the Spotify Web API.",
    ["endpoint", "status"],
)
PLAYLISTS_CREATED = Counter(
    "mixtape_playlists_created_total",
    "Playlists fully created on Spotify and recorded locally.",
)
PARTIAL_WRITE_FAILURES = Counter(
    "mixtape_partial_write_failures_total",
    "Playlist creations where some add-track batches failed.",
)
AUDIO_FEATURE_FALLBACKS = Counter(
    "mixtape_audio_feature_fallbacks_total",
    "Audio-feature lookups that failed and fell back to unknown features.",
)


def record_upstream_request(endpoint: str, status: int) -> None:
    UPSTREAM_REQUESTS.labels(endpoint=endpoint, status=str(status)).inc()


def record_playlist_created() -> None:
    PLAYLISTS_CREATED.inc()


def record_partial_write_failure() -> None:
    PARTIAL_WRITE_FAILURES.inc()


def record_audio_feature_fallback() -> None:
    AUDIO_FEATURE_FALLBACKS.inc()


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
