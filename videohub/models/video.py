import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, BigInteger, Float, DateTime, Enum, ForeignKey, Text
from sqlalchemy.orm import relationship
from videohub.db import Base


class VideoCategory(str, enum.Enum):
    tutorial = "tutorial"
    entertainment = "entertainment"
    education = "education"
    music = "music"
    sports = "sports"
    news = "news"
    gaming = "gaming"
    other = "other"


class VideoQuality(str, enum.Enum):
    q240p = "240p"
    q360p = "360p"
    q480p = "480p"
    q720p = "720p"
    q1080p = "1080p"


class VideoStatus(str, enum.Enum):
    """Visibility of a video. ``deleted`` is the soft-delete state."""

    public = "public"
    private = "private"
    deleted = "deleted"


class ProcessingStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"


def _enum_column(enum_cls, **kwargs):
    return Column(
        Enum(enum_cls, native_enum=False, values_callable=lambda e: [m.value for m in e], length=16),
        **kwargs,
    )


class Video(Base):
    __tablename__ = "video"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = _enum_column(VideoCategory, nullable=False, index=True)
    media_path = Column(String, nullable=False)
    mime_type = Column(String, nullable=True)
    thumbnail_url = Column(String, nullable=True)
    file_size = Column(BigInteger, nullable=False, default=0)
    duration = Column(Float, nullable=False, default=0)
    quality = _enum_column(VideoQuality, nullable=False, default=VideoQuality.q720p)
    views = Column(Integer, nullable=False, default=0)
    plays = Column(Integer, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)
    dislikes = Column(Integer, nullable=False, default=0)
    status = _enum_column(VideoStatus, nullable=False, default=VideoStatus.public, index=True)
    processing_status = _enum_column(ProcessingStatus, nullable=False, default=ProcessingStatus.completed)
    owner_id = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    tag_rows = relationship(
        "VideoTag",
        order_by="VideoTag.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        return [row.name for row in self.tag_rows]

    @tags.setter
    def tags(self, names: list[str]) -> None:
        self.tag_rows = [VideoTag(name=name, position=index) for index, name in enumerate(names)]

    @property
    def is_public(self) -> bool:
        return self.status == VideoStatus.public

    @property
    def is_active(self) -> bool:
        return self.status != VideoStatus.deleted


class VideoTag(Base):
    __tablename__ = "video_tag"
    id = Column(Integer, primary_key=True, autoincrement=True)
    video_id = Column(String(36), ForeignKey("video.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    name = Column(String, nullable=False)
