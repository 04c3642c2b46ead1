"""
Gemini API client: initialization and the two inference calls the pipeline uses.

`client` starts as None. Call `initialize()` inside the FastAPI lifespan (or
before running the pipeline from a script). Consuming modules reference
`gemini_client.client` at call time rather than importing the variable.

`detect_moderation_labels` classifies one frame; `transcribe_audio` turns a
WAV track into text. Both raise ProviderError on any failure.
"""

import io
import os
import json
import time
import logging
from typing import List

from PIL import Image
from google import genai
from google.genai import types

from clipguard.config import settings
from clipguard.integrations.gemini.prompts import get_label_instruction, get_transcription_instruction
from clipguard.moderation.errors import ProviderError
from clipguard.schemas.moderation import ModerationLabel

logger = logging.getLogger(__name__)

# Set by initialize(). None when GEMINI_API_KEY is absent or init fails.
client = None  # genai.Client | None


def initialize() -> None:
    """Create the Gemini client and bind it to the module-level `client`."""
    global client

    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key:
        logger.warning("[STARTUP] GEMINI_API_KEY not set. Cloud frame analysis disabled.")
        return

    try:
        client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(
                timeout=settings.gemini_http_timeout_ms,
                retry_options=types.HttpRetryOptions(
                    attempts=settings.gemini_max_retries,
                    initial_delay=settings.gemini_retry_initial_delay,
                    max_delay=settings.gemini_retry_max_delay,
                    exp_base=settings.gemini_retry_exp_base,
                    http_status_codes=[408, 429, 500, 502, 503, 504]
                )
            )
        )
        logger.info("[STARTUP] Gemini client initialized")
    except Exception as e:
        logger.error(f"[STARTUP] Failed to initialize Gemini client: {e}")


def is_configured() -> bool:
    return client is not None


def _resize_if_needed(img: Image.Image) -> Image.Image:
    """
    Resizes image if it exceeds the pixel cap to limit token usage and avoid payload errors.
    Keeps aspect ratio.
    """
    w, h = img.size
    pixels = w * h

    if pixels > settings.gemini_max_pixels:
        scale = (settings.gemini_max_pixels / pixels) ** 0.5
        new_w = int(w * scale)
        new_h = int(h * scale)
        return img.resize((new_w, new_h), Image.Resampling.LANCZOS)

    return img


def _prepare_frame(image_bytes: bytes) -> bytes:
    """Re-encode a frame as an RGB JPEG within the upload pixel cap."""
    img_to_close = []
    try:
        img_original = Image.open(io.BytesIO(image_bytes))
        img_to_close.append(img_original)

        img_working = _resize_if_needed(img_original)
        if img_working is not img_original:
            img_to_close.append(img_working)

        if img_working.mode != "RGB":
            img_rgb = img_working.convert("RGB")
            img_to_close.append(img_rgb)
            img_working = img_rgb

        img_byte_arr = io.BytesIO()
        img_working.save(img_byte_arr, format='JPEG', quality=settings.gemini_jpeg_quality)
        return img_byte_arr.getvalue()
    finally:
        for img_obj in img_to_close:
            img_obj.close()


def detect_moderation_labels(image_bytes: bytes) -> List[ModerationLabel]:
    """Classify one frame. Returns labels with free-text names and confidences."""
    if client is None:
        raise ProviderError("Gemini client not initialized")

    try:
        payload = _prepare_frame(image_bytes)

        config = types.GenerateContentConfig(
            system_instruction=get_label_instruction(),
            temperature=settings.gemini_temperature,
            response_mime_type="application/json",
            response_schema=list[ModerationLabel],
        )

        response = client.models.generate_content(
            model=settings.gemini_model,
            contents=[
                types.Part.from_bytes(data=payload, mime_type="image/jpeg"),
                "List the moderation labels for this frame, strictly following the system instructions.",
            ],
            config=config
        )
    except Exception as e:
        logger.error(f"[GEMINI] detect_moderation_labels error: {e}")
        raise ProviderError(f"Frame classification failed: {e}") from e

    labels = response.parsed
    if labels is None:
        raise ProviderError("Frame classification returned no parseable labels")
    return list(labels)


def transcribe_audio(audio_bytes: bytes) -> str:
    """Best-effort verbatim transcript of a WAV track; '' when no speech."""
    if client is None:
        raise ProviderError("Gemini client not initialized")

    try:
        config = types.GenerateContentConfig(
            system_instruction=get_transcription_instruction(),
            temperature=settings.gemini_temperature,
        )
        response = client.models.generate_content(
            model=settings.gemini_model,
            contents=[
                types.Part.from_bytes(data=audio_bytes, mime_type="audio/wav"),
                "Transcribe this audio.",
            ],
            config=config
        )
    except Exception as e:
        logger.error(f"[GEMINI] transcribe_audio error: {e}")
        raise ProviderError(f"Transcription failed: {e}") from e

    return (response.text or "").strip()


if __name__ == "__main__":
    import sys
    if len(sys.argv) > 1:
        initialize()
        path = sys.argv[1]
        print(f"Labelling: {path}...")
        start = time.perf_counter()
        with open(path, "rb") as f:
            result = [label.model_dump() for label in detect_moderation_labels(f.read())]
        end = time.perf_counter()
        print(f"Result: {json.dumps(result, indent=2)}")
        print(f"Latency: {end - start:.4f}s")
