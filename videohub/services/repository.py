"""Persistence for videos and playback progress.

Route handlers never query models directly; they receive a
:class:`VideoRepository` bound to the request's session through
:func:`get_repository`.
"""
from datetime import datetime

from fastapi import Depends
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from videohub.db import get_db
from videohub.models.playback import CountedPlay, PlaybackProgress
from videohub.models.video import Video, VideoStatus, VideoTag


class VideoRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def add(self, video: Video) -> Video:
        self.db.add(video)
        self.db.commit()
        return video

    def refresh(self, video: Video) -> Video:
        self.db.refresh(video)
        return video

    def rollback(self) -> None:
        self.db.rollback()

    def get(self, video_id: str) -> Video | None:
        return self.db.get(Video, video_id)

    def get_active(self, video_id: str) -> Video | None:
        return (
            self.db.query(Video)
            .filter(Video.id == video_id, Video.status != VideoStatus.deleted)
            .first()
        )

    def get_public(self, video_id: str) -> Video | None:
        return (
            self.db.query(Video)
            .filter(Video.id == video_id, Video.status == VideoStatus.public)
            .first()
        )

    def list_public(
        self,
        offset: int,
        limit: int,
        category: str | None = None,
        search: str | None = None,
    ) -> tuple[list[Video], int]:
        query = self.db.query(Video).filter(Video.status == VideoStatus.public)
        if category:
            query = query.filter(Video.category == category)
        if search:
            keyword = f"%{_escape_like(search.lower())}%"
            query = query.filter(
                or_(
                    func.lower(Video.title).like(keyword, escape="\\"),
                    func.lower(Video.description).like(keyword, escape="\\"),
                    Video.tag_rows.any(func.lower(VideoTag.name).like(keyword, escape="\\")),
                )
            )
        return self._page(query, offset, limit)

    def list_by_owner(self, owner_id: str, offset: int, limit: int) -> tuple[list[Video], int]:
        query = self.db.query(Video).filter(
            Video.owner_id == owner_id, Video.status != VideoStatus.deleted
        )
        return self._page(query, offset, limit)

    def _page(self, query, offset: int, limit: int) -> tuple[list[Video], int]:
        total = query.count()
        items = (
            query.order_by(Video.created_at.desc(), Video.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    def increment(self, video: Video, counter: str) -> Video:
        column = getattr(Video, counter)
        # In-place increment so concurrent requests never lose an update.
        self.db.query(Video).filter(Video.id == video.id).update(
            {column: column + 1}, synchronize_session=False
        )
        self.db.commit()
        self.db.refresh(video)
        return video

    def update(self, video: Video, changes: dict) -> Video:
        for field, value in changes.items():
            setattr(video, field, value)
        video.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(video)
        return video

    def soft_delete(self, video: Video) -> Video:
        return self.update(video, {"status": VideoStatus.deleted})

    def record_progress(
        self,
        video: Video,
        user_id: str,
        position: float,
        session_id: str,
        threshold: float,
    ) -> tuple[PlaybackProgress, bool]:
        """Overwrite the caller's position; count a play once per session."""
        progress = (
            self.db.query(PlaybackProgress)
            .filter(PlaybackProgress.user_id == user_id, PlaybackProgress.video_id == video.id)
            .first()
        )
        if progress is None:
            progress = PlaybackProgress(user_id=user_id, video_id=video.id)
            self.db.add(progress)
        progress.position = position
        progress.updated_at = datetime.utcnow()

        counted = position >= threshold and not self._play_counted(user_id, video.id, session_id)
        if counted:
            self.db.add(CountedPlay(user_id=user_id, video_id=video.id, session_id=session_id))
            self.db.query(Video).filter(Video.id == video.id).update(
                {Video.plays: Video.plays + 1}, synchronize_session=False
            )
        self.db.commit()
        self.db.refresh(progress)
        self.db.refresh(video)
        return progress, counted

    def _play_counted(self, user_id: str, video_id: str, session_id: str) -> bool:
        return (
            self.db.query(CountedPlay.id)
            .filter(
                CountedPlay.user_id == user_id,
                CountedPlay.video_id == video_id,
                CountedPlay.session_id == session_id,
            )
            .first()
            is not None
        )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def get_repository(db: Session = Depends(get_db)) -> VideoRepository:
    return VideoRepository(db)
