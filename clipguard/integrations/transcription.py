"""
Transcription provider selection.

`transcribe(audio_bytes)` routes to Gemini or to an OpenAI-compatible
`/audio/transcriptions` endpoint depending on `settings.transcription_provider`
and which credentials are present:

    auto   → gemini when the Gemini client is up, else http when a URL is set, else none
    gemini → Gemini only
    http   → HTTP endpoint only
    none   → always '' (no transcript available)

Provider failures raise ProviderError; an empty string is a valid answer.
"""

import asyncio
import logging
import os

import aiohttp

from clipguard.config import settings
from clipguard.integrations import http_client as http_module
from clipguard.integrations.gemini import client as gemini_client
from clipguard.moderation.errors import ProviderError

logger = logging.getLogger(__name__)


def resolve_provider() -> str:
    mode = settings.transcription_provider.lower()
    if mode != "auto":
        return mode
    if gemini_client.is_configured():
        return "gemini"
    if settings.transcription_api_url:
        return "http"
    return "none"


async def _transcribe_http(audio_bytes: bytes) -> str:
    if not settings.transcription_api_url:
        raise ProviderError("TRANSCRIPTION_API_URL not configured")

    form = aiohttp.FormData()
    form.add_field("model", settings.transcription_model)
    form.add_field("file", audio_bytes, filename="audio.wav", content_type="audio/wav")

    headers = {}
    api_key = os.getenv("TRANSCRIPTION_API_KEY")
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"

    async with http_module.request_session() as sess:
        try:
            async with sess.post(settings.transcription_api_url, data=form, headers=headers) as response:
                if response.status != 200:
                    raise ProviderError(f"Transcription endpoint returned status {response.status}")
                try:
                    payload = await response.json(content_type=None)
                except ValueError as e:
                    raise ProviderError("Transcription endpoint returned invalid JSON") from e
        except aiohttp.ClientError as e:
            raise ProviderError(f"Transcription request failed: {e}") from e

    if not isinstance(payload, dict):
        raise ProviderError(f"Transcription endpoint returned {type(payload).__name__}, expected an object")

    return str(payload.get("text") or "").strip()


async def transcribe(audio_bytes: bytes) -> str:
    provider = resolve_provider()
    logger.info(f"[AUDIO] Transcribing {len(audio_bytes)} bytes via {provider}")

    if provider == "none":
        return ""

    try:
        if provider == "gemini":
            coro = asyncio.to_thread(gemini_client.transcribe_audio, audio_bytes)
        elif provider == "http":
            coro = _transcribe_http(audio_bytes)
        else:
            raise ProviderError(f"Unknown transcription provider: {provider}")
        return await asyncio.wait_for(coro, timeout=settings.transcription_timeout_sec)
    except asyncio.TimeoutError:
        raise ProviderError(f"Transcription timed out after {settings.transcription_timeout_sec}s")
