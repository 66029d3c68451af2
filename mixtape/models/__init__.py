from .dto import (
    UNKNOWN_AUDIO_FEATURES,
    AudioFeatures,
    CreatedPlaylist,
    CreatePlaylistInput,
    Image,
    Playlist,
    PlaylistPage,
    PlaylistsQuery,
    RecommendationQuery,
    SearchQuery,
    Track,
    audio_features_to_wire,
)

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
