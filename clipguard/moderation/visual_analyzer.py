"""
Frame classification for nudity, violence, weapons and blood.

Two interchangeable strategies share one contract:

  - CloudVisualStrategy: sends each frame to a remote moderation-label
    classifier and maps label names onto the four signals by substring.
    A single failed frame is logged and skipped; if every frame fails the
    strategy raises ProviderError.
  - HeuristicVisualStrategy: counts frames that exist and decode. It never
    reports a detection. That is a documented limitation of running without
    a cloud provider, not a bug.

`VisualAnalyzer` wraps the fallback: it tries the primary strategy (when one
is configured) and re-runs with the heuristic on any exception.
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

from PIL import Image

from clipguard.config import settings
from clipguard.integrations.gemini import client as gemini_client
from clipguard.moderation.errors import ProviderError
from clipguard.schemas.moderation import (
    ModerationLabel,
    Severity,
    VideoResult,
    Violation,
    ViolationType,
    VisualProvider,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]
LabelDetector = Callable[[bytes], List[ModerationLabel]]

# Progress window the visual stage occupies in the overall run (percent)
PROGRESS_START = 35
PROGRESS_SPAN = 35

NUDITY_TERMS = ("explicit nudity", "nudity")
VIOLENCE_TERMS = ("violence", "graphic violence")
WEAPON_TERMS = ("weapon", "gun")
BLOOD_TERMS = ("blood",)


def _report_frame(on_progress: Optional[ProgressCallback], index: int, total: int) -> None:
    if on_progress:
        on_progress(
            PROGRESS_START + (index / max(1, total)) * PROGRESS_SPAN,
            f"Analyzing frame {index + 1}/{total}",
        )


class VisualStrategy(ABC):
    """One way of turning frame files into a VideoResult."""

    provider: VisualProvider

    @abstractmethod
    async def analyze_frames(
        self,
        frame_paths: Sequence[str],
        on_progress: Optional[ProgressCallback] = None,
    ) -> VideoResult:
        ...


class HeuristicVisualStrategy(VisualStrategy):
    provider = VisualProvider.HEURISTIC

    @staticmethod
    def _is_analyzable(frame_path: str) -> bool:
        if not os.path.exists(frame_path):
            return False
        try:
            with Image.open(frame_path) as img:
                img.verify()
            return True
        except Exception as e:
            logger.warning(f"[VISUAL] Failed to read frame {os.path.basename(frame_path)}: {e}")
            return False

    async def analyze_frames(self, frame_paths, on_progress=None) -> VideoResult:
        frames_analyzed = 0
        for i, frame_path in enumerate(frame_paths):
            if not await asyncio.to_thread(self._is_analyzable, frame_path):
                continue
            frames_analyzed += 1
            _report_frame(on_progress, i, len(frame_paths))

        return VideoResult(frames_analyzed=frames_analyzed, provider=self.provider)


class CloudVisualStrategy(VisualStrategy):
    provider = VisualProvider.CLOUD

    def __init__(self, detect_labels: Optional[LabelDetector] = None, timeout: Optional[float] = None):
        self.detect_labels = detect_labels or gemini_client.detect_moderation_labels
        self.timeout = timeout or settings.cloud_frame_timeout_sec

    def _read_and_detect(self, frame_path: str) -> List[ModerationLabel]:
        with open(frame_path, "rb") as f:
            image_bytes = f.read()
        return self.detect_labels(image_bytes)

    async def _classify(self, frame_path: str) -> List[ModerationLabel]:
        # Frame read and classifier call share one timeout
        return await asyncio.wait_for(
            asyncio.to_thread(self._read_and_detect, frame_path), timeout=self.timeout
        )

    async def analyze_frames(self, frame_paths, on_progress=None) -> VideoResult:
        frames_analyzed = 0
        frames_failed = 0
        violent_scenes = 0
        nudity = weapons = blood = False
        first_nudity = first_violence = first_weapon = None
        suspicious_objects: List[str] = []

        for i, frame_path in enumerate(frame_paths):
            if not os.path.exists(frame_path):
                continue
            try:
                labels = await self._classify(frame_path)
            except Exception as e:
                frames_failed += 1
                logger.warning(f"[VISUAL] Cloud moderation failed for frame {os.path.basename(frame_path)}: {e}")
                continue

            for label in labels:
                name = (label.name or "").lower()
                matched = False
                if any(term in name for term in NUDITY_TERMS):
                    nudity = matched = True
                    first_nudity = i if first_nudity is None else first_nudity
                if any(term in name for term in VIOLENCE_TERMS):
                    violent_scenes += 1
                    matched = True
                    first_violence = i if first_violence is None else first_violence
                if any(term in name for term in WEAPON_TERMS):
                    weapons = matched = True
                    first_weapon = i if first_weapon is None else first_weapon
                if any(term in name for term in BLOOD_TERMS):
                    blood = matched = True
                if matched and label.name not in suspicious_objects:
                    suspicious_objects.append(label.name)

            frames_analyzed += 1
            _report_frame(on_progress, i, len(frame_paths))

        if frames_analyzed == 0 and frames_failed > 0:
            raise ProviderError(f"Cloud moderation failed for all {frames_failed} frames")

        return VideoResult(
            frames_analyzed=frames_analyzed,
            violent_scenes=violent_scenes,
            nudity_detected=nudity,
            weapons_detected=weapons,
            blood_detected=blood,
            suspicious_objects=tuple(suspicious_objects),
            first_nudity_frame=first_nudity,
            first_violence_frame=first_violence,
            first_weapon_frame=first_weapon,
            provider=self.provider,
        )


class VisualAnalyzer:
    """Runs the primary strategy and falls back to the heuristic on any exception."""

    def __init__(self, primary: Optional[VisualStrategy] = None, fallback: Optional[VisualStrategy] = None):
        self.primary = primary
        self.fallback = fallback or HeuristicVisualStrategy()

    async def analyze_frames(
        self,
        frame_paths: Sequence[str],
        on_progress: Optional[ProgressCallback] = None,
    ) -> VideoResult:
        if self.primary is not None:
            try:
                return await self.primary.analyze_frames(frame_paths, on_progress)
            except Exception as e:
                logger.warning(f"[VISUAL] {self.primary.provider.value} analysis failed, falling back to heuristic: {e}")
        return await self.fallback.analyze_frames(frame_paths, on_progress)


def build_visual_analyzer() -> VisualAnalyzer:
    """Pick the strategy from `settings.visual_provider` and credential availability."""
    mode = settings.visual_provider.lower()
    if mode == "heuristic":
        return VisualAnalyzer()
    if gemini_client.is_configured():
        return VisualAnalyzer(primary=CloudVisualStrategy())
    if mode == "cloud":
        logger.warning("[VISUAL] Cloud provider requested but no credentials configured; using heuristic")
    return VisualAnalyzer()


def _frame_time(index: Optional[int], frame_interval_sec: Optional[float]) -> Optional[float]:
    if index is None or frame_interval_sec is None:
        return None
    return round(index * frame_interval_sec, 3)


def visual_violations(result: VideoResult, frame_interval_sec: Optional[float] = None) -> List[Violation]:
    """
    Map a VideoResult onto violations.

    With `frame_interval_sec` (seconds between sampled frames) each violation
    carries the time of the first frame that triggered it.
    """
    violations = []

    if result.nudity_detected:
        violations.append(
            Violation(
                type=ViolationType.NUDITY,
                severity=Severity.CRITICAL,
                confidence=0.85,
                description="Nudity or sexual content detected",
                evidence="Visual analysis",
                timestamp=_frame_time(result.first_nudity_frame, frame_interval_sec),
            )
        )

    if result.violent_scenes > 0:
        violations.append(
            Violation(
                type=ViolationType.VIOLENCE,
                severity=(
                    Severity.CRITICAL
                    if result.violent_scenes > settings.violent_scene_critical_count
                    else Severity.HIGH
                ),
                confidence=0.8,
                description=f"Violence detected in {result.violent_scenes} scenes",
                evidence="Frame analysis",
                timestamp=_frame_time(result.first_violence_frame, frame_interval_sec),
            )
        )

    if result.weapons_detected:
        violations.append(
            Violation(
                type=ViolationType.WEAPONS,
                severity=Severity.HIGH,
                confidence=0.75,
                description="Weapons detected in video",
                evidence="Object detection",
                timestamp=_frame_time(result.first_weapon_frame, frame_interval_sec),
            )
        )

    return violations
