"""
Per-client request rate limiting for the moderation routes.

Redis-backed (shared across instances) when configured, with an in-memory
sliding window fallback. The Redis client is read at call time so it picks
up the instance initialized during the FastAPI lifespan.
"""

import time
import logging
from typing import Dict, List

from fastapi import HTTPException

from clipguard.config import settings
from clipguard.integrations import redis_client as redis_module

logger = logging.getLogger(__name__)

# In-memory store: {identifier: [timestamp, ...]}
_rate_limits: Dict[str, List[float]] = {}


def _too_many() -> HTTPException:
    return HTTPException(
        status_code=429,
        detail="Too many moderation requests. Please try again in a minute."
    )


def check_rate_limit(identifier: str) -> None:
    """Raise 429 when `identifier` has used up its request window."""
    rc = redis_module.client
    if rc:
        _check_rate_limit_redis(rc, identifier)
    else:
        _check_rate_limit_memory(identifier)


def _check_rate_limit_redis(rc, identifier: str) -> None:
    key = redis_module.namespaced(f"moderate_rate:{identifier}")
    try:
        current_count = rc.incr(key)
        if current_count == 1:
            rc.expire(key, settings.rate_limit_request_window_sec)

        if current_count > settings.rate_limit_max_requests:
            logger.warning(f"[RATE] Redis limit exceeded for {identifier}")
            raise _too_many()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[RATE] Redis rate limit error: {e}. Falling back to memory.")
        _check_rate_limit_memory(identifier)


def _check_rate_limit_memory(identifier: str) -> None:
    now = time.time()
    window = settings.rate_limit_request_window_sec

    if len(_rate_limits) > settings.rate_limit_memory_limit:
        _cleanup_all_limits(now)

    recent = [t for t in _rate_limits.get(identifier, []) if now - t < window]

    if len(recent) >= settings.rate_limit_max_requests:
        _rate_limits[identifier] = recent
        logger.warning(f"[RATE] Memory limit exceeded for {identifier}")
        raise _too_many()

    recent.append(now)
    _rate_limits[identifier] = recent


def _cleanup_all_limits(now: float) -> None:
    """Remove all identifiers that have been idle for the full window."""
    window = settings.rate_limit_request_window_sec
    expired_keys = [
        k for k, v in _rate_limits.items()
        if not v or now - v[-1] > window
    ]
    for k in expired_keys:
        del _rate_limits[k]
    logger.info(f"[RATE] Cleanup removed {len(expired_keys)} inactive clients.")
