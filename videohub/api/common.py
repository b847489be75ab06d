import re

from videohub.errors import AuthorizationError, ValidationError
from videohub.models.video import Video
from videohub.schemas.video import Pagination
from videohub.security import CurrentUser

_VIDEO_ID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")


def validated_video_id(value: str) -> str:
    normalized = (value or "").strip()
    if not _VIDEO_ID_RE.fullmatch(normalized):
        raise ValidationError("Invalid video ID format")
    return normalized.lower()


def can_manage(user: CurrentUser | None, video: Video) -> bool:
    return user is not None and (user.is_admin or video.owner_id == user.id)


def ensure_can_manage(user: CurrentUser, video: Video, action: str) -> None:
    if not can_manage(user, video):
        raise AuthorizationError(f"Not authorized to {action} this video")


def envelope(data=None, message: str | None = None, pagination: Pagination | None = None) -> dict:
    body: dict = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    if pagination is not None:
        body["pagination"] = pagination
    return body
