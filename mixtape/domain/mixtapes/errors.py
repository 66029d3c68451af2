"""Application error taxonomy and the upstream status translation table."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    INTERNAL_ERROR = "internal_error"
    PERSISTENCE_CONFLICT = "persistence_conflict"
    PARTIAL_WRITE_FAILURE = "partial_write_failure"


ERROR_KIND_BY_HTTP_STATUS = {
    400: ErrorKind.INVALID_INPUT,
    401: ErrorKind.PERMISSION_DENIED,
    403: ErrorKind.PERMISSION_DENIED,
    404: ErrorKind.NOT_FOUND,
    429: ErrorKind.RATE_LIMITED,
    500: ErrorKind.UPSTREAM_UNAVAILABLE,
    502: ErrorKind.UPSTREAM_UNAVAILABLE,
    503: ErrorKind.UPSTREAM_UNAVAILABLE,
    504: ErrorKind.UPSTREAM_UNAVAILABLE,
}

# Status our own HTTP layer answers with for each kind
HTTP_STATUS_BY_ERROR_KIND = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PERSISTENCE_CONFLICT: 409,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.INTERNAL_ERROR: 500,
    ErrorKind.PARTIAL_WRITE_FAILURE: 500,
    ErrorKind.UPSTREAM_UNAVAILABLE: 502,
}


def error_kind_for_status(status: Optional[int]) -> ErrorKind:
    """Translate an upstream HTTP status.

    Any 5xx outside the table is an upstream outage; every other unmapped
    status, including a missing one, is an internal error.
    """
    kind = ERROR_KIND_BY_HTTP_STATUS.get(status)
    if kind is not None:
        return kind
    if status is not None and 500 <= status < 600:
        return ErrorKind.UPSTREAM_UNAVAILABLE
    return ErrorKind.INTERNAL_ERROR


class MixtapeError(Exception):
    """Failure surfaced to the caller of a playlist operation.

    ``url`` points at an upstream resource that already exists even though the
    operation as a whole failed.
    """

    def __init__(self, kind: ErrorKind, message: str, *, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.url = url

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_ERROR_KIND.get(self.kind, 500)

    def to_dict(self) -> dict:
        payload = {"error": self.kind.value, "message": self.message}
        if self.url:
            payload["url"] = self.url
        return payload


class UpstreamError(MixtapeError):
    """An error body returned by the Spotify Web API."""

    def __init__(self, status: Optional[int], upstream_message: str) -> None:
        self.status = status
        self.upstream_message = upstream_message
        super().__init__(error_kind_for_status(status), f"{status}! {upstream_message}")


class PartialWriteError(MixtapeError):
    """Some bulk writes failed after the upstream playlist was created."""

    def __init__(self, message: str, *, url: str, causes: Sequence[UpstreamError]) -> None:
        super().__init__(ErrorKind.PARTIAL_WRITE_FAILURE, message, url=url)
        self.causes: List[UpstreamError] = list(causes)

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["causes"] = [cause.message for cause in self.causes]
        return payload


class PersistenceError(MixtapeError):
    """The upstream playlist exists but its local record could not be saved."""


__all__ = [
    "ErrorKind",
    "ERROR_KIND_BY_HTTP_STATUS",
    "HTTP_STATUS_BY_ERROR_KIND",
    "error_kind_for_status",
    "MixtapeError",
    "UpstreamError",
    "PartialWriteError",
    "PersistenceError",
]
