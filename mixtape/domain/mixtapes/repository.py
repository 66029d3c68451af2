from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError

from mixtape.database.db_manager import PlaylistRecord, db


logger = logging.getLogger(__name__)


class PlaylistRecordRepository:
    """Interface for the local record of playlists created through the app."""

    def add(self, spotify_id: str, created_by: str) -> PlaylistRecord:  # pragma: no cover - interface
        raise NotImplementedError

    def count(self, created_by: Optional[str] = None) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    def list_page(
        self,
        take: int,
        cursor: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> List[PlaylistRecord]:  # pragma: no cover - interface
        raise NotImplementedError


class DefaultPlaylistRecordRepository(PlaylistRecordRepository):
    def add(self, spotify_id: str, created_by: str) -> PlaylistRecord:
        """Insert a record; a duplicate upstream id raises IntegrityError."""
        record = PlaylistRecord(spotify_id=spotify_id, created_by=created_by)
        db.session.add(record)
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
        logger.info("Recorded playlist %s created by %s", spotify_id, created_by)
        return record

    def _filtered(self, created_by: Optional[str]):
        query = PlaylistRecord.query
        if created_by is not None:
            query = query.filter(PlaylistRecord.created_by == created_by)
        return query

    def count(self, created_by: Optional[str] = None) -> int:
        return self._filtered(created_by).count()

    def list_page(
        self,
        take: int,
        cursor: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> List[PlaylistRecord]:
        """Newest first, starting at the cursor record itself when given."""
        query = self._filtered(created_by)
        if cursor:
            anchor = db.session.get(PlaylistRecord, cursor)
            if anchor is None:
                logger.debug("Unknown playlist cursor %s", cursor)
                return []
            query = query.filter(
                or_(
                    PlaylistRecord.created_at < anchor.created_at,
                    and_(
                        PlaylistRecord.created_at == anchor.created_at,
                        PlaylistRecord.id <= anchor.id,
                    ),
                )
            )
        return (
            query.order_by(PlaylistRecord.created_at.desc(), PlaylistRecord.id.desc())
            .limit(take)
            .all()
        )


__all__ = ["PlaylistRecordRepository", "DefaultPlaylistRecordRepository"]
