"""
Request-level guards for the moderation routes.

  - SecurityManager: rate limiting (core/rate_limiter.py) and upload
    validation (core/file_validator.py) behind one object route handlers
    can patch in tests.
  - ModerationGate: caps how many pipeline runs execute at once, which bounds
    the ffmpeg processes and provider calls in flight. Saturation is a 503,
    not a queue.

`security_manager` is a module-level singleton; the gate is created in the
FastAPI lifespan and stored on `app.state.moderation_gate`.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import HTTPException, Request

from clipguard.core.file_validator import sanitize_log_message, validate_video
from clipguard.core.rate_limiter import check_rate_limit

logger = logging.getLogger(__name__)


class SecurityManager:
    """Orchestrates rate limiting and upload validation."""

    def check_rate_limit(self, identifier: str) -> None:
        check_rate_limit(identifier)

    def validate_video(self, filename: str, filesize: int, file_path: str = None) -> bool:
        return validate_video(filename, filesize, file_path)

    def sanitize_log_message(self, message: str) -> str:
        return sanitize_log_message(message)


class ModerationGate:
    """Non-blocking admission control over concurrent moderation runs."""

    def __init__(self, max_runs: int):
        self.max_runs = max_runs
        self._semaphore = asyncio.Semaphore(max_runs)

    @property
    def saturated(self) -> bool:
        return self._semaphore.locked()

    @asynccontextmanager
    async def admit(self):
        if self.saturated:
            logger.warning(f"[GATE] All {self.max_runs} moderation slots busy, rejecting request")
            raise HTTPException(
                status_code=503,
                detail="Moderation capacity reached. Please retry shortly.",
                headers={"Retry-After": "5"},
            )
        async with self._semaphore:
            yield


security_manager = SecurityManager()


def get_client_ip(request: Request) -> str:
    """Extracts the real client IP from proxy headers, falling back to host."""
    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip

    x_forwarded = request.headers.get("x-forwarded-for")
    if x_forwarded:
        return x_forwarded.split(",")[0].strip()

    return request.client.host if request.client else "127.0.0.1"
