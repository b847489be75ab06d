import itertools
import os
import tempfile
from datetime import datetime, timedelta

import pytest

# Point the app at a throwaway database and storage tree before it is imported.
_TMP_DIR = tempfile.mkdtemp(prefix="videohub-tests-")
os.environ["VIDEOHUB_DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'videohub.db')}"
os.environ["VIDEOHUB_STORAGE_DIR"] = os.path.join(_TMP_DIR, "storage")
os.environ["VIDEOHUB_ENVIRONMENT"] = "test"
os.environ["VIDEOHUB_JWT_SECRET"] = "test-secret"
os.environ["VIDEOHUB_RATE_LIMIT_MAX"] = "100000"

from fastapi.testclient import TestClient  # noqa: E402

from videohub import config  # noqa: E402
from videohub.db import Base, SessionLocal, engine  # noqa: E402
from videohub.main import app  # noqa: E402
from videohub.models.video import Video, VideoCategory, VideoStatus  # noqa: E402
from videohub.ratelimit import limiter  # noqa: E402
from videohub.security import create_access_token  # noqa: E402


def stored_files() -> list[str]:
    found = []
    for directory in (config.VIDEO_DIR, config.THUMBNAIL_DIR):
        if os.path.isdir(directory):
            found.extend(os.path.join(directory, name) for name in os.listdir(directory))
    return found


@pytest.fixture(autouse=True)
def reset_state():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    for path in stored_files():
        os.remove(path)
    os.makedirs(config.VIDEO_DIR, exist_ok=True)
    os.makedirs(config.THUMBNAIL_DIR, exist_ok=True)
    limiter.reset()
    yield


@pytest.fixture
def files_on_disk():
    return stored_files


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def auth_headers():
    def _headers(user_id: str = "user-1", role: str = "user") -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}

    return _headers


@pytest.fixture
def make_video(db_session):
    counter = itertools.count()
    base_time = datetime(2024, 1, 1, 12, 0, 0)

    def _make(tags=None, **overrides) -> Video:
        n = next(counter)
        values = {
            "title": f"Video {n}",
            "description": "",
            "category": VideoCategory.other,
            "media_path": os.path.join(config.VIDEO_DIR, f"seed-{n}.mp4"),
            "mime_type": "video/mp4",
            "file_size": 0,
            "owner_id": "user-1",
            "status": VideoStatus.public,
            "created_at": base_time + timedelta(minutes=n),
            "updated_at": base_time + timedelta(minutes=n),
        }
        values.update(overrides)
        video = Video(**values)
        video.tags = tags or []
        db_session.add(video)
        db_session.commit()
        db_session.refresh(video)
        return video

    return _make


@pytest.fixture
def reload(db_session):
    def _reload(video_id: str) -> Video | None:
        db_session.expire_all()
        return db_session.get(Video, video_id)

    return _reload
