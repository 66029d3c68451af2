from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from mixtape.models.dto import (
    AudioFeatures,
    CreatedPlaylist,
    CreatePlaylistInput,
    Playlist,
    PlaylistPage,
    PlaylistsQuery,
    RecommendationQuery,
    SearchQuery,
    Track,
)
from mixtape.observability.metrics import (
    record_audio_feature_fallback,
    record_partial_write_failure,
    record_playlist_created,
)
from mixtape.settings import SpotifyApiSettings
from mixtape.utils.batching import batch_offsets, chunked

from .audio_features import calculate_average_audio_features, scale_playlist_features, to_target_fraction
from .errors import ErrorKind, MixtapeError, PartialWriteError, PersistenceError
from .fetch import SpotifyApiClient, follow_pages, sequential_fetch
from .normalize import to_playlist, to_track, to_tracks_with_features
from .repository import DefaultPlaylistRecordRepository, PlaylistRecordRepository
from .schemas import (
    AudioFeaturesResponse,
    CreatePlaylistResponse,
    PlaylistTracksPage,
    RecommendationsResponse,
    SearchResponse,
    SpotifyAudioFeatures,
    SpotifyPlaylist,
    parse_body,
    upstream_error,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpotifySession:
    """The acting Spotify user and a currently valid bearer token."""

    user_id: str
    access_token: str


def recommendation_params(query: RecommendationQuery) -> Dict[str, Any]:
    """Query string for /recommendations; bounded targets go back to 0-1."""
    params: Dict[str, Any] = {
        "seed_tracks": ",".join(query.track_seeds),
        "limit": query.limit,
    }
    if query.danceability is not None:
        params["target_danceability"] = to_target_fraction(query.danceability)
    if query.tempo is not None:
        params["target_tempo"] = query.tempo
    if query.valence is not None:
        params["target_valence"] = to_target_fraction(query.valence)
    if query.energy is not None:
        params["target_energy"] = to_target_fraction(query.energy)
    return params


class MixtapeService:
    """Search, recommendation, listing and creation of mixtapes on Spotify."""

    def __init__(
        self,
        api_client: SpotifyApiClient,
        repository: Optional[PlaylistRecordRepository] = None,
        settings: Optional[SpotifyApiSettings] = None,
    ) -> None:
        self.api = api_client
        self.settings = settings or api_client.settings
        self.repo: PlaylistRecordRepository = repository or DefaultPlaylistRecordRepository()

    def search(self, session: SpotifySession, query: SearchQuery) -> List[Track]:
        if not query.q.strip():
            return []
        config = self.api.build(
            session.access_token,
            "search",
            params={"q": query.q, "type": "track", "offset": query.offset, "limit": query.limit},
        )
        response = parse_body(SearchResponse, self.api.send(config), action="search tracks")
        if not response.tracks.items:
            raise MixtapeError(ErrorKind.NOT_FOUND, "No tracks found")
        return [to_track(item) for item in response.tracks.items]

    def get_recommendations(self, session: SpotifySession, query: RecommendationQuery) -> List[Track]:
        if not query.track_seeds:
            return []
        config = self.api.build(session.access_token, "recommendations", params=recommendation_params(query))
        response = parse_body(RecommendationsResponse, self.api.send(config), action="fetch recommendations")
        if not response.tracks:
            return []

        ids = [track.id for track in response.tracks]
        features_body = self.api.send(
            self.api.build(session.access_token, "audio-features", params={"ids": ",".join(ids)})
        )
        return to_tracks_with_features(response.tracks, self._audio_features_or_none(features_body, len(ids)))

    def _audio_features_or_none(
        self, body: Any, count: int
    ) -> Optional[List[Optional[SpotifyAudioFeatures]]]:
        """Audio features are an enrichment: failures degrade to unknown values."""
        try:
            return parse_body(AudioFeaturesResponse, body, action="fetch audio features").audio_features
        except MixtapeError as exc:
            logger.warning("Audio features unavailable for %d tracks: %s", count, exc.message)
            record_audio_feature_fallback()
            return None

    def get_playlists(self, session: SpotifySession, query: PlaylistsQuery) -> PlaylistPage:
        limit = query.limit or self.settings.default_playlist_page_size
        created_by = session.user_id if query.is_creator_only else None

        total = self.repo.count(created_by=created_by)
        # One extra row tells us whether another page exists
        records = self.repo.list_page(take=limit + 1, cursor=query.cursor, created_by=created_by)
        next_cursor = None
        if len(records) > limit:
            next_cursor = records.pop().id

        playlists = self._load_playlists(session, [record.spotify_id for record in records])
        return PlaylistPage(
            items=[playlist for playlist in playlists if playlist is not None],
            total=total,
            next_cursor=next_cursor,
        )

    def _load_playlists(self, session: SpotifySession, spotify_ids: Sequence[str]) -> List[Optional[Playlist]]:
        if not spotify_ids:
            return []
        # Different playlists are independent resources; each one's own
        # batches still run sequentially inside _load_playlist.
        workers = min(self.settings.playlist_fetch_workers, len(spotify_ids))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="playlist-fetch") as pool:
            return list(pool.map(lambda spotify_id: self._load_playlist(session, spotify_id), spotify_ids))

    def _load_playlist(self, session: SpotifySession, spotify_id: str) -> Optional[Playlist]:
        body = self.api.send(self.api.build(session.access_token, f"playlists/{quote(spotify_id)}"))
        error = upstream_error(body)
        if error is not None and error.status == 404:
            logger.warning("Recorded playlist %s no longer exists on Spotify; skipping it", spotify_id)
            return None
        raw = parse_body(SpotifyPlaylist, body, action=f"fetch playlist {spotify_id}")

        track_ids = self._playlist_track_ids(session, body.get("tracks") or {})
        features = self._playlist_audio_features(session, track_ids)
        return to_playlist(raw, self.settings.playlist_url(raw.id), features)

    def _playlist_track_ids(self, session: SpotifySession, first_page: Any) -> List[str]:
        track_ids: List[str] = []
        for page in follow_pages(self.api, first_page, access_token=session.access_token):
            track_ids.extend(parse_body(PlaylistTracksPage, page, action="fetch playlist tracks").track_ids())
        return track_ids

    def _playlist_audio_features(self, session: SpotifySession, track_ids: Sequence[str]) -> AudioFeatures:
        batches = chunked(track_ids, self.settings.max_items_per_request)
        configs = [
            self.api.build(session.access_token, "audio-features", params={"ids": ",".join(batch)})
            for batch in batches
        ]
        records: List[AudioFeatures] = []
        for batch, body in zip(batches, sequential_fetch(self.api, configs)):
            features = self._audio_features_or_none(body, len(batch))
            if features is None:
                continue
            records.extend(scale_playlist_features(item) for item in features if item is not None)
        return calculate_average_audio_features(records)

    def create_playlist(self, session: SpotifySession, data: CreatePlaylistInput) -> CreatedPlaylist:
        token = session.access_token
        create_body = self.api.send(
            self.api.build(
                token,
                f"users/{quote(session.user_id)}/playlists",
                method="POST",
                json={"name": data.name, "public": data.is_public, "description": data.description},
            )
        )
        created = parse_body(CreatePlaylistResponse, create_body, action="create the playlist")
        playlist_url = self.settings.playlist_url(created.id)
        logger.info("Created Spotify playlist %s for %s", created.id, session.user_id)

        size = self.settings.max_items_per_request
        # Explicit positions keep the intended order across separate requests
        configs = [
            self.api.build(
                token,
                f"playlists/{quote(created.id)}/tracks",
                method="POST",
                json={"position": position, "uris": list(data.uris[position:position + size])},
            )
            for position in batch_offsets(len(data.uris), size)
        ]
        failures = [
            error
            for error in (upstream_error(body) for body in sequential_fetch(self.api, configs))
            if error is not None
        ]
        if failures:
            record_partial_write_failure()
            logger.error(
                "%d of %d add-track batches failed for playlist %s: %s",
                len(failures), len(configs), created.id, "; ".join(f.message for f in failures),
            )
            raise PartialWriteError(
                "Some tracks were not added to the playlist on Spotify. "
                f"Visit {playlist_url} to manually add the tracks.",
                url=playlist_url,
                causes=failures,
            )

        unsaved_message = (
            f"Unable to save playlist {data.name} to the database, "
            f"but it's available at {playlist_url}."
        )
        try:
            self.repo.add(spotify_id=created.id, created_by=session.user_id)
        except IntegrityError as exc:
            logger.error("Playlist %s is already recorded: %s", created.id, exc)
            raise PersistenceError(ErrorKind.PERSISTENCE_CONFLICT, unsaved_message, url=playlist_url) from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to record playlist %s: %s", created.id, exc, exc_info=True)
            raise PersistenceError(ErrorKind.INTERNAL_ERROR, unsaved_message, url=playlist_url) from exc

        record_playlist_created()
        return CreatedPlaylist(name=data.name, url=playlist_url)


__all__ = ["SpotifySession", "MixtapeService", "recommendation_params"]
