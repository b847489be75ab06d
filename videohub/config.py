import os


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str = "") -> list[str]:
    return [item.strip().lower() for item in os.getenv(name, default).split(",") if item.strip()]


ENVIRONMENT = os.getenv("VIDEOHUB_ENVIRONMENT", "development").strip().lower()
SERVER_HOST = os.getenv("VIDEOHUB_SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("VIDEOHUB_SERVER_PORT", "5000"))

DATABASE_URL = os.getenv("VIDEOHUB_DATABASE_URL", "sqlite:///./videohub.db")

STORAGE_DIR = os.getenv("VIDEOHUB_STORAGE_DIR", "storage")
VIDEO_DIR = os.path.join(STORAGE_DIR, "videos")
THUMBNAIL_DIR = os.path.join(STORAGE_DIR, "thumbnails")
THUMBNAIL_URL_PREFIX = "/storage/thumbnails"
MAX_UPLOAD_BYTES = int(os.getenv("VIDEOHUB_MAX_UPLOAD_BYTES", str(100 * 1024 * 1024)))
# Empty means any video/* or image/* type is accepted.
ALLOWED_VIDEO_TYPES = _env_list("VIDEOHUB_ALLOWED_VIDEO_TYPES")
ALLOWED_IMAGE_TYPES = _env_list("VIDEOHUB_ALLOWED_IMAGE_TYPES")

JWT_SECRET = os.getenv("VIDEOHUB_JWT_SECRET", "dev-secret-change-me")
JWT_ALGORITHM = os.getenv("VIDEOHUB_JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("VIDEOHUB_JWT_EXPIRE_MINUTES", str(7 * 24 * 60)))

CORS_ORIGINS = _env_list("VIDEOHUB_CORS_ORIGINS", "http://localhost:3000")

PLAY_THRESHOLD_SECONDS = float(os.getenv("VIDEOHUB_PLAY_THRESHOLD_SECONDS", "5"))
OWNER_CAN_VIEW_HIDDEN = _env_flag("VIDEOHUB_OWNER_CAN_VIEW_HIDDEN", "0")

RATE_LIMIT_ENABLED = _env_flag("VIDEOHUB_RATE_LIMIT_ENABLED", "1")
RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("VIDEOHUB_RATE_LIMIT_WINDOW", str(15 * 60)))
RATE_LIMIT_MAX = int(os.getenv("VIDEOHUB_RATE_LIMIT_MAX", "100"))

LOG_LEVEL = os.getenv("VIDEOHUB_LOG_LEVEL", "INFO").strip().upper()
LOG_FILE = os.getenv("VIDEOHUB_LOG_FILE", "").strip()
QUIET_ACCESS_LOG = _env_flag("VIDEOHUB_QUIET_ACCESS_LOG", "1")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def is_development() -> bool:
    return ENVIRONMENT == "development"
