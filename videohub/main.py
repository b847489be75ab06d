import logging
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from videohub import config
from videohub.api import play, video
from videohub.db import init_db
from videohub.errors import setup_exception_handlers
from videohub.logging_setup import setup_logging
from videohub.ratelimit import RateLimitMiddleware
from videohub.services.storage import ensure_storage

setup_logging()
init_db()
ensure_storage()

logger = logging.getLogger(__name__)

app = FastAPI(title="videohub")
# Added first so CORS headers also reach 429 responses.
app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_exception_handlers(app)


@app.get("/")
def root():
    return {
        "success": True,
        "service": "videohub-api",
        "time_utc": datetime.now(timezone.utc).isoformat(),
        "docs": "/docs",
    }


@app.get("/healthz")
def healthz():
    return {"success": True, "environment": config.ENVIRONMENT}


app.include_router(video.router)
app.include_router(play.router)

# Only thumbnails are public files; videos go through /play/{id}/stream.
app.mount(config.THUMBNAIL_URL_PREFIX, StaticFiles(directory=config.THUMBNAIL_DIR), name="thumbnails")


def run() -> None:
    logger.info("Starting videohub on %s:%d (%s)", config.SERVER_HOST, config.SERVER_PORT, config.ENVIRONMENT)
    uvicorn.run("videohub.main:app", host=config.SERVER_HOST, port=config.SERVER_PORT)
