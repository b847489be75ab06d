import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from videohub.config import LOG_FILE, LOG_LEVEL, QUIET_ACCESS_LOG

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if LOG_FILE:
        log_dir = os.path.dirname(LOG_FILE)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(
            RotatingFileHandler(LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
        )

    root = logging.getLogger("videohub")
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    if not root.handlers:
        formatter = logging.Formatter(LOG_FORMAT)
        for handler in handlers:
            handler.setFormatter(formatter)
            root.addHandler(handler)

    if QUIET_ACCESS_LOG:
        # Keep warning/error lines, suppress normal access noise (200/201 etc).
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
