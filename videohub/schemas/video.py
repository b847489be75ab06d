from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from videohub.models.video import ProcessingStatus, VideoCategory, VideoQuality, VideoStatus


def parse_tags(raw: str | None) -> list[str]:
    """Split a comma separated tag string, keeping order and duplicates."""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class VideoCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=1000)
    category: VideoCategory
    tags: str | None = None
    is_public: bool = True
    duration: float = Field(default=0, ge=0)
    quality: VideoQuality = VideoQuality.q720p

    strip_text = field_validator("title", "description", mode="before")(_strip)

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, value):
        return "" if value is None else value

    @property
    def tag_list(self) -> list[str]:
        return parse_tags(self.tags)


class VideoUpdate(BaseModel):
    """Partial update. Only fields present in the request body are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    category: VideoCategory | None = None
    tags: str | None = None
    is_public: bool | None = None

    strip_text = field_validator("title", "description", mode="before")(_strip)

    def changes(self) -> dict:
        patch = {}
        supplied = self.model_fields_set
        if "title" in supplied and self.title is not None:
            patch["title"] = self.title
        if "description" in supplied and self.description is not None:
            patch["description"] = self.description
        if "category" in supplied and self.category is not None:
            patch["category"] = self.category
        if "tags" in supplied:
            patch["tags"] = parse_tags(self.tags)
        if "is_public" in supplied and self.is_public is not None:
            patch["status"] = VideoStatus.public if self.is_public else VideoStatus.private
        return patch


class VideoOut(BaseModel):
    id: UUID
    title: str
    description: str
    category: VideoCategory
    tags: list[str]
    thumbnail_url: str | None = None
    file_size: int
    duration: float
    quality: VideoQuality
    views: int
    plays: int
    likes: int
    dislikes: int
    status: VideoStatus
    is_public: bool
    is_active: bool
    processing_status: ProcessingStatus
    owner_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VideoUploadOut(BaseModel):
    id: UUID
    title: str
    description: str
    category: VideoCategory
    tags: list[str]
    thumbnail_url: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    current: int
    pages: int
    total: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        pages = (total + limit - 1) // limit
        return cls(current=page, pages=pages, total=total, has_next=page < pages, has_prev=page > 1)
