"""Factory Boy factories for database models used in tests."""

from datetime import datetime, timedelta

import factory
from factory.alchemy import SQLAlchemyModelFactory

from mixtape.database.db_manager import PlaylistRecord, User

_EPOCH = datetime(2024, 1, 1, 12, 0, 0)


class _BaseFactory(SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        sqlalchemy_session = None
        sqlalchemy_session_persistence = "flush"


class UserFactory(_BaseFactory):
    class Meta:
        model = User

    spotify_id = factory.Sequence(lambda n: f"user-{n}")
    display_name = factory.LazyAttribute(lambda obj: f"Listener {obj.spotify_id}")
    access_token = factory.Sequence(lambda n: f"access-token-{n}")
    refresh_token = factory.Sequence(lambda n: f"refresh-token-{n}")
    token_expires_at = None


class PlaylistRecordFactory(_BaseFactory):
    class Meta:
        model = PlaylistRecord

    spotify_id = factory.Sequence(lambda n: f"playlist-{n}")
    created_by = "user-owner"
    # Distinct, increasing timestamps so ordering is deterministic
    created_at = factory.Sequence(lambda n: _EPOCH + timedelta(minutes=n))


_FACTORIES = [UserFactory, PlaylistRecordFactory]


def set_session(session):
    for factory_cls in _FACTORIES:
        factory_cls._meta.sqlalchemy_session = session


def reset_session():
    for factory_cls in _FACTORIES:
        factory_cls._meta.sqlalchemy_session = None


__all__ = [
    "UserFactory",
    "PlaylistRecordFactory",
    "set_session",
    "reset_session",
]
