"""Mixtape: curate tracks and publish them as Spotify playlists."""

__version__ = "0.1.0"
