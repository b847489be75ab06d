from uuid import UUID

from pydantic import BaseModel, Field

from videohub.models.video import VideoQuality


class VideoMetadataOut(BaseModel):
    id: UUID
    title: str
    duration: float
    quality: VideoQuality
    file_size: int
    views: int
    plays: int
    likes: int
    dislikes: int

    class Config:
        from_attributes = True


class ProgressIn(BaseModel):
    position: float = Field(ge=0)
    session_id: str | None = Field(default=None, max_length=64)


class ProgressOut(BaseModel):
    video_id: UUID
    position: float
    plays: int
    counted: bool
