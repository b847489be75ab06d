import logging
import mimetypes
import os
import shutil
import time
import uuid
from dataclasses import dataclass

from fastapi import UploadFile

from videohub import config
from videohub.errors import FileSizeError, FileTypeError

logger = logging.getLogger(__name__)

VIDEO = "video"
THUMBNAIL = "thumbnail"


@dataclass(frozen=True)
class StoredFile:
    kind: str
    path: str
    size: int


def ensure_storage() -> None:
    os.makedirs(config.VIDEO_DIR, exist_ok=True)
    os.makedirs(config.THUMBNAIL_DIR, exist_ok=True)


def _upload_size(file: UploadFile) -> int:
    if file.size is not None:
        return file.size
    stream = file.file
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def _content_type(file: UploadFile) -> str:
    return (file.content_type or "").split(";")[0].strip().lower()


def check_upload(file: UploadFile, kind: str) -> int:
    """Reject a file by MIME type or size. Nothing is written here."""
    content_type = _content_type(file)
    if kind == VIDEO:
        if not content_type.startswith("video/") or (
            config.ALLOWED_VIDEO_TYPES and content_type not in config.ALLOWED_VIDEO_TYPES
        ):
            raise FileTypeError("Only video files are allowed")
    elif kind == THUMBNAIL:
        if not content_type.startswith("image/") or (
            config.ALLOWED_IMAGE_TYPES and content_type not in config.ALLOWED_IMAGE_TYPES
        ):
            raise FileTypeError("Only image files are allowed for thumbnails")
    else:
        raise ValueError(f"unknown upload kind: {kind}")

    size = _upload_size(file)
    if size > config.MAX_UPLOAD_BYTES:
        raise FileSizeError(f"File exceeds the {config.MAX_UPLOAD_BYTES // (1024 * 1024)} MB limit")
    return size


def _extension(file: UploadFile) -> str:
    _, ext = os.path.splitext(os.path.basename((file.filename or "").strip()).lower())
    if ext and ext[1:].isalnum():
        return ext
    return mimetypes.guess_extension(_content_type(file)) or ".bin"


def save_upload(file: UploadFile, kind: str) -> StoredFile:
    ensure_storage()
    directory = config.VIDEO_DIR if kind == VIDEO else config.THUMBNAIL_DIR
    stamped_filename = f"{kind}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{_extension(file)}"
    path = os.path.join(directory, stamped_filename).replace("\\", "/")
    file.file.seek(0)
    try:
        with open(path, "wb") as f:
            shutil.copyfileobj(file.file, f)
        size = os.path.getsize(path)
    except OSError:
        if os.path.exists(path):
            os.remove(path)
        logger.warning("Discarded partial %s upload at %s", kind, path)
        raise
    logger.debug("Stored %s upload at %s (%d bytes)", kind, path, size)
    return StoredFile(kind=kind, path=path, size=size)


def remove_files(stored: list[StoredFile]) -> None:
    for item in stored:
        try:
            if os.path.exists(item.path):
                os.remove(item.path)
                logger.info("Removed orphaned %s file %s", item.kind, item.path)
        except OSError:
            logger.exception("Could not remove %s", item.path)


def thumbnail_url(stored: StoredFile) -> str:
    return f"{config.THUMBNAIL_URL_PREFIX}/{os.path.basename(stored.path)}"
