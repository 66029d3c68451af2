"""Database models and bootstrap helpers."""

from .db_manager import PlaylistRecord, User, db, initialize_database

__all__ = ["db", "User", "PlaylistRecord", "initialize_database"]
