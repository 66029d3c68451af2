"""Playlist assembly: search, recommendations, listing and creation of mixtapes."""

from .errors import ErrorKind, MixtapeError, PartialWriteError, PersistenceError, UpstreamError
from .fetch import RequestConfig, SpotifyApiClient, sequential_fetch
from .repository import DefaultPlaylistRecordRepository, PlaylistRecordRepository
from .service import MixtapeService, SpotifySession

__all__ = [
    "ErrorKind",
    "MixtapeError",
    "PartialWriteError",
    "PersistenceError",
    "UpstreamError",
    "RequestConfig",
    "SpotifyApiClient",
    "sequential_fetch",
    "PlaylistRecordRepository",
    "DefaultPlaylistRecordRepository",
    "MixtapeService",
    "SpotifySession",
]
