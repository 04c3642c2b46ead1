"""
Moderation helpers around the pipeline: text-only quick check, sequential
batch moderation, and memory usage logging.
"""

import logging
import os
from typing import Callable, List, Optional, Sequence

import psutil

from clipguard.config import settings
from clipguard.moderation.decision import fail_safe_result
from clipguard.moderation.pipeline import moderate
from clipguard.moderation.text_analyzer import analyze_text
from clipguard.schemas.moderation import ModerationRequest, ModerationResult, QuickCheckResult

logger = logging.getLogger(__name__)


def log_memory(stage: str) -> None:
    """Log current process and system memory usage. Only runs when DEBUG logging is active."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    process = psutil.Process(os.getpid())
    mem_info = process.memory_info()
    sys_mem = psutil.virtual_memory()
    logger.debug(
        f"[MEMORY] {stage} | "
        f"PID: {os.getpid()} | "
        f"Process RSS: {mem_info.rss / 1024 / 1024:.2f} MB | "
        f"System Available: {sys_mem.available / 1024 / 1024:.2f} MB / {sys_mem.total / 1024 / 1024:.2f} MB"
    )


def quick_check(title: str, description: str, tags: Optional[Sequence[str]] = None) -> QuickCheckResult:
    """Text-only pre-screen for a submission, before any media is processed."""
    text = f"{title} {description} {' '.join(tags or [])}"
    result = analyze_text(text)

    if result.toxicity > settings.quick_check_toxicity_threshold:
        return QuickCheckResult(
            approved=False,
            reason=f"High toxicity detected ({round(result.toxicity * 100)}%)",
        )

    if len(result.profanity_words) > settings.quick_check_max_profanity:
        return QuickCheckResult(
            approved=False,
            reason=f"Excessive profanity ({len(result.profanity_words)} words)",
        )

    return QuickCheckResult(approved=True)


async def moderate_batch(
    requests: Sequence[ModerationRequest],
    on_item_done: Optional[Callable[[int, int], None]] = None,
) -> List[ModerationResult]:
    """Moderate each request in turn; one result per request, in input order."""
    results: List[ModerationResult] = []
    total = len(requests)

    for i, request in enumerate(requests):
        def _log_progress(percent: float, stage: str, index: int = i) -> None:
            logger.info(f"[BATCH] Video {index + 1}/{total}: {stage} ({percent:.0f}%)")

        try:
            result = await moderate(request, on_progress=_log_progress)
        except Exception as e:
            logger.error(f"[BATCH] Failed to moderate video {i + 1}: {e}")
            result = fail_safe_result(str(e), 0, description="Moderation failed")

        results.append(result)
        if on_item_done:
            on_item_done(i + 1, total)

    return results
