"""
Top-level moderation pipeline, the public entry point for the /moderate route.

`moderate` runs the stages in a fixed order, reporting coarse progress:

  1. Metadata scan     (title, description, tags)
  2. Text analysis     (title + description)
  3. Frames → visual   (ffmpeg sampling, cloud or heuristic classifier)
  4. Audio → speech    (ffmpeg demux, transcription, transcript scoring)

then fuses every stage's violations into one verdict.

A failing stage degrades to its neutral result and the run continues. Only
a failure of the orchestrator itself, an exceeded time limit, or cancellation
ends the run early, and even then the caller gets a fail-closed rejection
rather than an exception. Scratch frames and audio live in a per-run
temporary directory that is always removed.
"""

import asyncio
import inspect
import logging
import os
import shutil
import tempfile
import time
from typing import Callable, Optional

from clipguard.config import settings
from clipguard.moderation.audio_analyzer import analyze_audio, audio_violations
from clipguard.moderation.audio_extractor import extract_and_transcribe
from clipguard.moderation.decision import fail_safe_result, fuse
from clipguard.moderation.errors import ExtractionError, ModerationCancelled, PipelineError
from clipguard.moderation.frame_extractor import extract_frames, frame_interval_sec, probe_duration
from clipguard.moderation.metadata_analyzer import analyze_metadata, metadata_violations
from clipguard.moderation.text_analyzer import analyze_text, text_violations
from clipguard.moderation.visual_analyzer import VisualAnalyzer, build_visual_analyzer, visual_violations
from clipguard.schemas.moderation import AudioResult, ModerationDetails, ModerationRequest, ModerationResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _report(on_progress: Optional[ProgressCallback], percent: float, stage: str) -> None:
    if on_progress:
        on_progress(percent, stage)


def _check_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ModerationCancelled("moderation cancelled")


async def _run_stage(stage: str, func, *args, default=(None, ())):
    """Run one stage; any exception becomes the stage's neutral (result, violations)."""
    try:
        outcome = func(*args)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return outcome
    except Exception as e:
        logger.warning(f"[PIPELINE] {stage} stage failed, continuing without it: {e}")
        return default


def _metadata_stage(request: ModerationRequest):
    result = analyze_metadata(request.title, request.description, request.tags)
    return result, metadata_violations(result)


def _text_stage(request: ModerationRequest):
    result = analyze_text(f"{request.title} {request.description}")
    return result, text_violations(result)


async def _visual_stage(request, frames_dir, analyzer: VisualAnalyzer, on_progress):
    count = settings.moderation_frame_count
    duration = await probe_duration(request.media_path)
    try:
        frames = await extract_frames(request.media_path, count, frames_dir, duration=duration)
    except ExtractionError as e:
        logger.warning(f"[PIPELINE] Frame extraction failed, visual analysis disabled: {e}")
        return None, []

    result = await analyzer.analyze_frames(frames, on_progress)
    logger.info(
        f"[VISUAL] provider={result.provider.value} frames={result.frames_analyzed} "
        f"violent={result.violent_scenes} nudity={result.nudity_detected} weapons={result.weapons_detected}"
    )
    return result, visual_violations(result, frame_interval_sec(count, duration))


async def _audio_stage(request, audio_dir, on_progress):
    transcript = await extract_and_transcribe(request.media_path, audio_dir)
    _report(on_progress, 85, "Analyzing speech content...")
    result = analyze_audio(transcript)
    return result, audio_violations(result)


async def _run_pipeline(
    request: ModerationRequest,
    on_progress: Optional[ProgressCallback],
    cancel_event: Optional[asyncio.Event],
    visual_analyzer: Optional[VisualAnalyzer],
    start: float,
) -> ModerationResult:
    violations = []
    scratch_dir = tempfile.mkdtemp(prefix="clipguard-", dir=settings.scratch_dir)

    try:
        _report(on_progress, 10, "Initializing moderation analysis...")
        metadata_result, found = await _run_stage("metadata", _metadata_stage, request)
        violations.extend(found)

        _check_cancelled(cancel_event)
        _report(on_progress, 20, "Analyzing text content...")
        text_result, found = await _run_stage("text", _text_stage, request)
        violations.extend(found)

        _check_cancelled(cancel_event)
        _report(on_progress, 35, "Extracting video frames...")
        analyzer = visual_analyzer or build_visual_analyzer()
        video_result, found = await _run_stage(
            "visual", _visual_stage,
            request, os.path.join(scratch_dir, "frames"), analyzer, on_progress,
        )
        violations.extend(found)

        _check_cancelled(cancel_event)
        _report(on_progress, 70, "Analyzing audio content...")
        audio_result, found = await _run_stage(
            "audio", _audio_stage,
            request, os.path.join(scratch_dir, "audio"), on_progress,
            default=(AudioResult(), ()),
        )
        violations.extend(found)

        _check_cancelled(cancel_event)
        _report(on_progress, 90, "Finalizing analysis...")
        result = fuse(
            violations,
            ModerationDetails(
                metadata=metadata_result,
                text=text_result,
                video=video_result,
                audio=audio_result,
            ),
            _elapsed_ms(start),
        )
        _report(on_progress, 100, "Analysis complete")
        return result

    finally:
        shutil.rmtree(scratch_dir, ignore_errors=True)


async def moderate(
    request: ModerationRequest,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[asyncio.Event] = None,
    visual_analyzer: Optional[VisualAnalyzer] = None,
) -> ModerationResult:
    """
    Decide whether `request` may be published. Never raises.

    Args:
        request: The submission to moderate.
        on_progress: Called as (percent, stage) at stage boundaries and per frame.
        cancel_event: When set, the run stops at the next stage boundary.
        visual_analyzer: Overrides the strategy chosen from configuration.
    """
    start = time.perf_counter()
    logger.info(f"[PIPELINE] Moderating {os.path.basename(request.media_path)}")

    try:
        result = await asyncio.wait_for(
            _run_pipeline(request, on_progress, cancel_event, visual_analyzer, start),
            timeout=settings.moderation_timeout_sec,
        )
    except asyncio.TimeoutError:
        logger.error(f"[PIPELINE] Moderation exceeded {settings.moderation_timeout_sec}s limit")
        return fail_safe_result(
            f"moderation timed out after {settings.moderation_timeout_sec}s", _elapsed_ms(start)
        )
    except ModerationCancelled as e:
        logger.warning("[PIPELINE] Moderation cancelled by caller")
        return fail_safe_result(str(e), _elapsed_ms(start))
    except Exception as e:
        error = e if isinstance(e, PipelineError) else PipelineError(str(e) or type(e).__name__)
        logger.error(f"[PIPELINE] Content moderation failed: {error}")
        return fail_safe_result(str(error), _elapsed_ms(start))

    logger.info(
        f"[PIPELINE] approved={result.approved} confidence={result.confidence:.2f} "
        f"violations={len(result.violations)} categories={[c.value for c in result.categories]} "
        f"time={result.processing_time_ms}ms"
    )
    return result
