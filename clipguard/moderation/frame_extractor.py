"""
Frame sampling through ffmpeg.

Frames are taken at uniform intervals across the asset duration (probed with
ffprobe), scaled, and written as JPEG stills into a caller-owned scratch
directory. Any toolkit failure surfaces as `ExtractionError`.
"""

import asyncio
import json
import logging
import os
from typing import List, Optional

from clipguard.config import settings
from clipguard.moderation.errors import ExtractionError

logger = logging.getLogger(__name__)

FRAME_PREFIX = "frame_"
FRAME_SUFFIX = ".jpg"


async def run_media_tool(args: List[str], timeout: float) -> tuple:
    """
    Run an external media command and return (returncode, stdout, stderr).
    Kills the process on timeout; a missing binary or timeout raises ExtractionError.
    """
    proc = None
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        return proc.returncode, stdout, stderr
    except FileNotFoundError:
        raise ExtractionError(f"{args[0]} not installed")
    except asyncio.TimeoutError:
        raise ExtractionError(f"{args[0]} timed out after {timeout}s")
    finally:
        if proc is not None:
            try:
                if proc.returncode is None:
                    proc.kill()
                    await proc.wait()
            except ProcessLookupError:
                pass


async def probe_duration(media_path: str) -> Optional[float]:
    """Asset duration in seconds, or None when ffprobe cannot tell."""
    try:
        code, stdout, _ = await run_media_tool(
            [settings.ffprobe_binary, "-v", "quiet", "-print_format", "json",
             "-show_format", media_path],
            timeout=settings.ffprobe_timeout_sec,
        )
    except ExtractionError as e:
        logger.warning(f"[FRAMES] Duration probe failed: {e}")
        return None

    if code != 0:
        return None
    try:
        duration = float(json.loads(stdout.decode()).get("format", {}).get("duration", 0))
    except (ValueError, TypeError, AttributeError):
        return None
    return duration if duration > 0 else None


def _fallback_interval(count: int) -> int:
    return max(1, settings.frame_fallback_window_sec // count)


def sample_rate_expr(count: int, duration: Optional[float]) -> str:
    """ffmpeg `fps` filter value that spreads `count` frames over `duration`."""
    if duration:
        return f"{count}/{duration:.3f}"
    return f"1/{_fallback_interval(count)}"


def frame_interval_sec(count: int, duration: Optional[float]) -> float:
    """Seconds between consecutive sampled frames; frame i sits at i * interval."""
    if duration:
        return duration / count
    return float(_fallback_interval(count))


def list_frames(output_dir: str) -> List[str]:
    names = sorted(
        f for f in os.listdir(output_dir)
        if f.startswith(FRAME_PREFIX) and f.endswith(FRAME_SUFFIX)
    )
    return [os.path.join(output_dir, f) for f in names]


async def extract_frames(
    media_path: str,
    count: int,
    output_dir: str,
    duration: Optional[float] = None,
) -> List[str]:
    """
    Sample `count` evenly spaced frames from `media_path` into `output_dir`.

    `duration` skips the ffprobe call when the caller has already probed.
    Returns frame paths ordered earliest first.
    Raises ExtractionError on non-zero exit, timeout, or zero frames produced.
    """
    if count < 1:
        raise ExtractionError(f"Invalid frame count: {count}")

    os.makedirs(output_dir, exist_ok=True)
    if duration is None:
        duration = await probe_duration(media_path)
    rate = sample_rate_expr(count, duration)

    code, _, stderr = await run_media_tool(
        [
            settings.ffmpeg_binary,
            "-i", media_path,
            "-vf", f"fps={rate},scale={settings.frame_width}:{settings.frame_height}",
            "-frames:v", str(count),
            "-f", "image2",
            "-y",
            os.path.join(output_dir, f"{FRAME_PREFIX}%03d{FRAME_SUFFIX}"),
        ],
        timeout=settings.ffmpeg_timeout_sec,
    )
    if code != 0:
        tail = stderr.decode(errors="replace").strip().splitlines()[-1:] if stderr else []
        raise ExtractionError(f"ffmpeg failed with code {code}: {' '.join(tail)}")

    frames = list_frames(output_dir)
    if not frames:
        raise ExtractionError("ffmpeg produced no frames")

    logger.info(f"[FRAMES] Extracted {len(frames)} frames (fps={rate}, duration={duration})")
    return frames
