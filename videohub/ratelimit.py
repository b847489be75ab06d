"""Per-client fixed-window request limiting.

Counters live in process memory, so the limit applies per worker.
"""
import logging
import math
import time
from dataclasses import dataclass

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from videohub import config

logger = logging.getLogger(__name__)

EXEMPT_PATHS = ("/healthz", "/docs", "/openapi.json", "/redoc")


@dataclass
class _Window:
    started_at: float
    count: int = 0


class RateLimiter:
    def __init__(self, max_requests: int, window_seconds: int) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._windows: dict[str, _Window] = {}

    def hit(self, key: str, now: float | None = None) -> tuple[bool, int, int]:
        """Count one request; return (allowed, remaining, seconds until reset)."""
        now = time.monotonic() if now is None else now
        window = self._windows.get(key)
        if window is None or now - window.started_at >= self.window_seconds:
            window = _Window(started_at=now)
            self._windows[key] = window
            self._prune(now)
        window.count += 1
        reset_in = max(1, math.ceil(window.started_at + self.window_seconds - now))
        remaining = max(0, self.max_requests - window.count)
        return window.count <= self.max_requests, remaining, reset_in

    def _prune(self, now: float) -> None:
        expired = [key for key, w in self._windows.items() if now - w.started_at >= self.window_seconds]
        for key in expired:
            del self._windows[key]

    def reset(self) -> None:
        self._windows.clear()


limiter = RateLimiter(config.RATE_LIMIT_MAX, config.RATE_LIMIT_WINDOW_SECONDS)


def _client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if not config.RATE_LIMIT_ENABLED or request.url.path.startswith(EXEMPT_PATHS):
            return await call_next(request)

        client = _client_key(request)
        allowed, remaining, reset_in = limiter.hit(client)
        headers = {
            "X-RateLimit-Limit": str(limiter.max_requests),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(reset_in),
        }
        if not allowed:
            logger.warning("Rate limit exceeded for %s on %s %s", client, request.method, request.url.path)
            return JSONResponse(
                status_code=429,
                content={"success": False, "message": "Too many requests, please try again later"},
                headers={**headers, "Retry-After": str(reset_in)},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
