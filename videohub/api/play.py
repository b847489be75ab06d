import logging
import mimetypes
import os

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from videohub import config
from videohub.api.common import can_manage, envelope, validated_video_id
from videohub.errors import NotFoundError
from videohub.schemas.playback import ProgressIn, ProgressOut, VideoMetadataOut
from videohub.security import CurrentUser, get_current_user, get_optional_user
from videohub.services.repository import VideoRepository, get_repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/play", tags=["play"])

DEFAULT_SESSION = "default"


@router.get("/{video_id}/stream")
def stream_video(
    video_id: str,
    user: CurrentUser | None = Depends(get_optional_user),
    repo: VideoRepository = Depends(get_repository),
):
    video = repo.get_active(validated_video_id(video_id))
    if video is None or not (video.is_public or can_manage(user, video)):
        raise NotFoundError()
    if not os.path.isfile(video.media_path):
        logger.warning("Media file missing for video %s: %s", video.id, video.media_path)
        raise NotFoundError("Video file not found")

    media_type = video.mime_type or mimetypes.guess_type(video.media_path)[0] or "application/octet-stream"
    # FileResponse answers Range requests with 206 partial content.
    return FileResponse(video.media_path, media_type=media_type)


@router.get("/{video_id}/metadata")
def video_metadata(video_id: str, repo: VideoRepository = Depends(get_repository)):
    video = repo.get_public(validated_video_id(video_id))
    if video is None:
        raise NotFoundError()
    return envelope(data=VideoMetadataOut.model_validate(video))


@router.post("/{video_id}/progress")
def update_progress(
    video_id: str,
    payload: ProgressIn,
    user: CurrentUser = Depends(get_current_user),
    repo: VideoRepository = Depends(get_repository),
):
    video = repo.get_active(validated_video_id(video_id))
    if video is None or not (video.is_public or can_manage(user, video)):
        raise NotFoundError()

    progress, counted = repo.record_progress(
        video,
        user_id=user.id,
        position=payload.position,
        session_id=payload.session_id or DEFAULT_SESSION,
        threshold=config.PLAY_THRESHOLD_SECONDS,
    )
    if counted:
        logger.info("Play counted for video %s by user %s", video.id, user.id)
    return envelope(
        data=ProgressOut(video_id=video.id, position=progress.position, plays=video.plays, counted=counted),
        message="Progress updated",
    )
