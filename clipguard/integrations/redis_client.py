"""
Upstash Redis integration for state shared across API instances.

Only the moderation rate limiter uses it today. `client` stays None until
`initialize()` runs in the FastAPI lifespan; callers read
`redis_client.client` at call time and fall back to per-process state when
it is None. Keys are namespaced with `settings.redis_key_prefix` so several
deployments can share one database.
"""

import os
import logging

from upstash_redis import Redis

from clipguard.config import settings

logger = logging.getLogger(__name__)

client = None  # Redis | None


def _credentials():
    """REST URL/token, accepting the Upstash console names and the legacy host/password pair."""
    url = os.getenv("UPSTASH_REDIS_REST_URL") or os.getenv("UPSTASH_REDIS_HOST")
    token = os.getenv("UPSTASH_REDIS_REST_TOKEN") or os.getenv("UPSTASH_REDIS_PASSWORD")
    return url, token


def namespaced(key: str) -> str:
    return f"{settings.redis_key_prefix}:{key}"


def initialize() -> None:
    global client

    url, token = _credentials()
    if not (url and token):
        logger.warning("[STARTUP] Redis credentials not found. Moderation rate limiting stays per-process.")
        return

    try:
        client = Redis(url=url, token=token)
        logger.info(f"[STARTUP] Upstash Redis client initialized (prefix '{settings.redis_key_prefix}')")
    except Exception as e:
        logger.error(f"[STARTUP] Failed to initialize Upstash Redis client: {e}")
