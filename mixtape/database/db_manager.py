# mixtape/database/db_manager.py
import logging
import os
import uuid
from datetime import datetime, timedelta
from typing import Optional

from flask_login import UserMixin
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.engine import make_url

# Initialize the SQLAlchemy object
db = SQLAlchemy()
logger = logging.getLogger(__name__)

# Refresh the access token a little before Spotify actually expires it
TOKEN_EXPIRY_MARGIN = timedelta(seconds=60)


def _new_record_id() -> str:
    return uuid.uuid4().hex


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    spotify_id = db.Column(db.String(128), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(255), nullable=True)
    access_token = db.Column(db.Text, nullable=True)
    refresh_token = db.Column(db.Text, nullable=True)
    token_expires_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def get_id(self) -> str:
        return str(self.id)

    def token_expired(self, now: Optional[datetime] = None) -> bool:
        if not self.access_token:
            return True
        if self.token_expires_at is None:
            return False
        now = now or datetime.utcnow()
        return self.token_expires_at - TOKEN_EXPIRY_MARGIN <= now

    def apply_token_info(self, token_info: dict) -> None:
        """Store the fields of a spotipy token dict on the user row."""
        self.access_token = token_info.get("access_token")
        # Spotify only rotates the refresh token occasionally
        if token_info.get("refresh_token"):
            self.refresh_token = token_info["refresh_token"]
        expires_at = token_info.get("expires_at")
        self.token_expires_at = datetime.utcfromtimestamp(expires_at) if expires_at else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "spotify_id": self.spotify_id,
            "display_name": self.display_name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<User {self.spotify_id}>"


class PlaylistRecord(db.Model):
    """Marks an upstream playlist as created through this app."""

    __tablename__ = 'playlist_records'

    id = db.Column(db.String(32), primary_key=True, default=_new_record_id)
    spotify_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    created_by = db.Column(db.String(128), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'spotify_id': self.spotify_id,
            'created_by': self.created_by,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<PlaylistRecord {self.spotify_id} by {self.created_by}>'


def initialize_database(app):
    """
    Initializes the SQLAlchemy extension with the Flask app instance
    and creates all database tables if they don't already exist.
    """
    db.init_app(app)
    # Ensure the instance folder exists for SQLite database file
    instance_path = app.instance_path
    if not os.path.exists(instance_path):
        os.makedirs(instance_path)
        logger.info("Created instance folder: %s", instance_path)

    # Ensure the directory for the configured SQLite file exists
    try:
        uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if uri:
            url = make_url(uri)
            # Only handle file-based SQLite (not :memory:)
            if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
                db_dir = os.path.dirname(url.database)
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)
                    logger.info("Created SQLite DB directory: %s", db_dir)
    except Exception as e:
        # Don't block app startup on path parsing issues; log and continue
        logger.warning("Could not ensure SQLite directory exists: %s", e)

    # Create database tables within the application context
    with app.app_context():
        db.create_all()
        logger.info("Database tables created or already exist.")
