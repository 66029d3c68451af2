import os
from datetime import datetime, timedelta

import pytest
from flask import Flask
from sqlalchemy.exc import IntegrityError


@pytest.mark.unit
def test_initialize_database_in_memory_only_creates_instance_dir(tmp_path, monkeypatch):
    from mixtape.database.db_manager import initialize_database

    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    instance_dir = tmp_path / "instance"
    app.instance_path = str(instance_dir)

    calls = []
    real_makedirs = os.makedirs

    def tracing_makedirs(path, *args, **kwargs):
        calls.append(os.path.abspath(path))
        return real_makedirs(path, *args, **kwargs)

    monkeypatch.setattr(os, "makedirs", tracing_makedirs)

    initialize_database(app)

    assert instance_dir.exists()
    assert len(calls) == 1
    assert os.path.abspath(str(instance_dir)) in calls


@pytest.mark.unit
def test_initialize_database_creates_sqlite_parent_dir(tmp_path):
    from mixtape.database.db_manager import initialize_database

    db_file = tmp_path / "nested" / "dir" / "mixtape.db"
    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_file.as_posix()}"
    app.instance_path = str(tmp_path / "instance")

    initialize_database(app)

    assert db_file.parent.exists()
    assert db_file.exists()


@pytest.mark.unit
def test_playlist_record_defaults_and_unique_spotify_id(db_session, factories):
    from mixtape.database.db_manager import PlaylistRecord

    record = PlaylistRecord(spotify_id="sp-1", created_by="owner")
    db_session.add(record)
    db_session.commit()

    data = record.to_dict()
    assert len(data["id"]) == 32
    assert data["spotify_id"] == "sp-1"
    assert data["created_by"] == "owner"
    assert data["created_at"] is not None

    dup = factories.PlaylistRecordFactory.build(spotify_id="sp-1")
    db_session.add(dup)
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    assert PlaylistRecord.query.filter_by(spotify_id="sp-1").count() == 1


@pytest.mark.unit
def test_user_token_expiry_uses_margin(db_session, factories):
    now = datetime(2024, 5, 1, 12, 0, 0)
    user = factories.UserFactory(token_expires_at=now + timedelta(seconds=30))
    assert user.token_expired(now) is True

    user.token_expires_at = now + timedelta(minutes=10)
    assert user.token_expired(now) is False

    user.token_expires_at = None
    assert user.token_expired(now) is False

    user.access_token = None
    assert user.token_expired(now) is True


@pytest.mark.unit
def test_apply_token_info_keeps_refresh_token_when_not_rotated(db_session, factories):
    user = factories.UserFactory(refresh_token="original-refresh")

    user.apply_token_info({"access_token": "new-access", "expires_at": 1714564800})

    assert user.access_token == "new-access"
    assert user.refresh_token == "original-refresh"
    assert user.token_expires_at == datetime.utcfromtimestamp(1714564800)

    user.apply_token_info({"access_token": "newer", "refresh_token": "rotated", "expires_at": None})
    assert user.refresh_token == "rotated"
    assert user.token_expires_at is None


@pytest.mark.unit
def test_user_to_dict_hides_tokens(db_session, factories):
    user = factories.UserFactory(spotify_id="listener", display_name="Listener")
    db_session.commit()

    data = user.to_dict()
    assert data["spotify_id"] == "listener"
    assert data["display_name"] == "Listener"
    assert "access_token" not in data
    assert "refresh_token" not in data
    assert user.get_id() == str(user.id)
