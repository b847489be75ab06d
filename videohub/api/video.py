import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import ValidationError as PydanticValidationError

from videohub import config
from videohub.api.common import can_manage, ensure_can_manage, envelope, validated_video_id
from videohub.errors import NotFoundError, StorageError, ValidationError, validation_message
from videohub.models.video import ProcessingStatus, Video, VideoCategory, VideoStatus
from videohub.schemas.video import Pagination, VideoCreate, VideoOut, VideoUpdate, VideoUploadOut
from videohub.security import CurrentUser, get_current_user, get_optional_user
from videohub.services.repository import VideoRepository, get_repository
from videohub.services.storage import THUMBNAIL, VIDEO, StoredFile, check_upload, remove_files, save_upload, thumbnail_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/videos", tags=["videos"])


def _category_filter(category: str | None) -> str | None:
    normalized = (category or "").strip().lower()
    if not normalized or normalized == "all":
        return None
    try:
        return VideoCategory(normalized).value
    except ValueError as exc:
        raise ValidationError(f"Unknown category: {category}") from exc


def _page_window(page: int, limit: int) -> tuple[int, int]:
    safe_limit = min(limit, config.MAX_PAGE_SIZE)
    return (page - 1) * safe_limit, safe_limit


def _video_list(items: list[Video]) -> list[VideoOut]:
    return [VideoOut.model_validate(item) for item in items]


@router.get("")
def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1),
    category: str | None = None,
    search: str | None = None,
    repo: VideoRepository = Depends(get_repository),
):
    offset, safe_limit = _page_window(page, limit)
    keyword = (search or "").strip() or None
    items, total = repo.list_public(offset, safe_limit, category=_category_filter(category), search=keyword)
    logger.info("Retrieved %d videos for page %d", len(items), page)
    return envelope(data=_video_list(items), pagination=Pagination.build(page, safe_limit, total))


@router.get("/mine")
def list_my_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1),
    user: CurrentUser = Depends(get_current_user),
    repo: VideoRepository = Depends(get_repository),
):
    offset, safe_limit = _page_window(page, limit)
    items, total = repo.list_by_owner(user.id, offset, safe_limit)
    return envelope(data=_video_list(items), pagination=Pagination.build(page, safe_limit, total))


@router.get("/{video_id}")
def get_video(
    video_id: str,
    user: CurrentUser | None = Depends(get_optional_user),
    repo: VideoRepository = Depends(get_repository),
):
    video_id = validated_video_id(video_id)
    video = repo.get_public(video_id)
    if video is None:
        if config.OWNER_CAN_VIEW_HIDDEN and user is not None:
            hidden = repo.get(video_id)
            if hidden is not None and can_manage(user, hidden):
                return envelope(data=VideoOut.model_validate(hidden))
        raise NotFoundError()

    video = repo.increment(video, "views")
    logger.info("Video %s viewed", video_id)
    return envelope(data=VideoOut.model_validate(video))


@router.post("", status_code=201)
def upload_video(
    video: UploadFile | None = File(None),
    thumbnail: UploadFile | None = File(None),
    title: str | None = Form(None),
    description: str | None = Form(None),
    category: str | None = Form(None),
    tags: str | None = Form(None),
    is_public: bool = Form(True),
    duration: float | None = Form(None),
    quality: str | None = Form(None),
    user: CurrentUser = Depends(get_current_user),
    repo: VideoRepository = Depends(get_repository),
):
    if video is None:
        raise ValidationError("Video file is required")

    check_upload(video, VIDEO)
    if thumbnail is not None:
        check_upload(thumbnail, THUMBNAIL)

    fields = {
        "title": title,
        "description": description,
        "category": category,
        "tags": tags,
        "is_public": is_public,
        "duration": duration,
        "quality": quality,
    }
    try:
        metadata = VideoCreate(**{key: value for key, value in fields.items() if value is not None})
    except PydanticValidationError as exc:
        raise ValidationError(validation_message(exc.errors())) from exc

    stored: list[StoredFile] = []
    try:
        media = save_upload(video, VIDEO)
        stored.append(media)
        thumb = None
        if thumbnail is not None:
            thumb = save_upload(thumbnail, THUMBNAIL)
            stored.append(thumb)

        record = Video(
            title=metadata.title,
            description=metadata.description,
            category=metadata.category,
            media_path=media.path,
            mime_type=video.content_type,
            thumbnail_url=thumbnail_url(thumb) if thumb else None,
            file_size=media.size,
            duration=metadata.duration,
            quality=metadata.quality,
            status=VideoStatus.public if metadata.is_public else VideoStatus.private,
            processing_status=ProcessingStatus.completed,
            owner_id=user.id,
        )
        record.tags = metadata.tag_list
        record = repo.add(record)
    except Exception as exc:
        repo.rollback()
        remove_files(stored)
        logger.exception("Upload by user %s failed, removed %d file(s)", user.id, len(stored))
        raise StorageError("Failed to upload video", cause=exc) from exc

    # The record is committed from here on; its files must stay.
    record = repo.refresh(record)
    logger.info("Video uploaded: %s by user: %s", record.id, user.id)
    return envelope(data=VideoUploadOut.model_validate(record), message="Video uploaded successfully")


@router.put("/{video_id}")
def update_video(
    video_id: str,
    payload: VideoUpdate,
    user: CurrentUser = Depends(get_current_user),
    repo: VideoRepository = Depends(get_repository),
):
    video_id = validated_video_id(video_id)
    video = repo.get_active(video_id)
    if video is None:
        raise NotFoundError()
    ensure_can_manage(user, video, "update")

    video = repo.update(video, payload.changes())
    logger.info("Video updated: %s by user: %s", video_id, user.id)
    return envelope(data=VideoOut.model_validate(video), message="Video updated successfully")


@router.delete("/{video_id}")
def delete_video(
    video_id: str,
    user: CurrentUser = Depends(get_current_user),
    repo: VideoRepository = Depends(get_repository),
):
    video_id = validated_video_id(video_id)
    video = repo.get_active(video_id)
    if video is None:
        raise NotFoundError()
    ensure_can_manage(user, video, "delete")

    repo.soft_delete(video)
    logger.info("Video deleted: %s by user: %s", video_id, user.id)
    return envelope(message="Video deleted successfully")
