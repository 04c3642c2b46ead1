"""
Shared aiohttp ClientSession for outbound provider calls (HTTP transcription).

Initialized once during the FastAPI lifespan so repeated transcription
uploads reuse pooled connections instead of a fresh TCP/TLS handshake.

Usage:
    async with http_client.request_session() as sess:
        async with sess.post(url, data=form) as response:
            ...

The context manager yields the shared session when available, otherwise
creates and closes a temporary one (covers tests, scripts and batch runs
that never started the app).
"""

import logging
from contextlib import asynccontextmanager

import aiohttp

from clipguard.config import settings

logger = logging.getLogger(__name__)

session: aiohttp.ClientSession | None = None


def _new_session() -> aiohttp.ClientSession:
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=settings.transcription_timeout_sec)
    )


async def initialize() -> None:
    global session
    session = _new_session()
    logger.info("[STARTUP] Shared HTTP session initialized")


async def close() -> None:
    global session
    if session and not session.closed:
        await session.close()
        session = None
        logger.info("[SHUTDOWN] Shared HTTP session closed")


@asynccontextmanager
async def request_session():
    """
    Yields the shared session if available, otherwise a temporary one.

    Never closes the shared session; http_client.close() handles that.
    """
    if session and not session.closed:
        yield session
    else:
        tmp = _new_session()
        try:
            yield tmp
        finally:
            await tmp.close()
