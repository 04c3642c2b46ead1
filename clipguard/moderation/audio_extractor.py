"""
Audio demux + transcription.

Pulls a mono 16-bit PCM WAV track out of the asset with ffmpeg, then hands
its bytes to the configured transcription provider. Every failure degrades
to an empty transcript so the audio stage becomes a neutral no-op.
"""

import logging
import os

from clipguard.config import settings
from clipguard.integrations import transcription
from clipguard.moderation.errors import ExtractionError, ModerationError
from clipguard.moderation.frame_extractor import run_media_tool

logger = logging.getLogger(__name__)

AUDIO_FILENAME = "audio.wav"


async def extract_audio(media_path: str, output_dir: str) -> str:
    """Write the mono PCM track into `output_dir` and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    audio_path = os.path.join(output_dir, AUDIO_FILENAME)

    code, _, _ = await run_media_tool(
        [
            settings.ffmpeg_binary,
            "-i", media_path,
            "-vn",
            "-acodec", "pcm_s16le",
            "-ar", str(settings.audio_sample_rate),
            "-ac", "1",
            "-y",
            audio_path,
        ],
        timeout=settings.ffmpeg_timeout_sec,
    )
    if code != 0:
        raise ExtractionError(f"ffmpeg audio extraction failed with code {code}")
    if not os.path.exists(audio_path) or os.path.getsize(audio_path) == 0:
        raise ExtractionError("ffmpeg produced no audio")
    return audio_path


async def extract_and_transcribe(media_path: str, output_dir: str) -> str:
    """Transcript of the asset's speech, or '' when unavailable for any reason."""
    try:
        audio_path = await extract_audio(media_path, output_dir)
    except ExtractionError as e:
        logger.warning(f"[AUDIO] Audio extraction failed: {e}")
        return ""

    try:
        with open(audio_path, "rb") as f:
            audio_bytes = f.read()
        return await transcription.transcribe(audio_bytes)
    except (ModerationError, OSError) as e:
        logger.warning(f"[AUDIO] Transcription failed: {e}")
        return ""
