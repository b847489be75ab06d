import uuid
from datetime import datetime
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, UniqueConstraint
from videohub.db import Base


class PlaybackProgress(Base):
    __tablename__ = "playback_progress"
    __table_args__ = (UniqueConstraint("user_id", "video_id", name="ux_progress_user_video"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False, index=True)
    video_id = Column(String(36), ForeignKey("video.id"), nullable=False)
    position = Column(Float, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class CountedPlay(Base):
    """A (user, video, session) triple that has already bumped ``Video.plays``."""

    __tablename__ = "counted_play"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", "session_id", name="ux_counted_play_session"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False)
    video_id = Column(String(36), ForeignKey("video.id"), nullable=False)
    session_id = Column(String(64), nullable=False)
    counted_at = Column(DateTime, nullable=False, default=datetime.utcnow)
