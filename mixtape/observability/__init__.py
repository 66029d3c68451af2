# noqa: D104 - package initialization
from .logging import configure_structured_logging  # noqa: F401
from .metrics import (  # noqa: F401
    metrics_blueprint,
    record_audio_feature_fallback,
    record_partial_write_failure,
    record_playlist_created,
    record_upstream_request,
)
