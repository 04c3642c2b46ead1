"""
Decision fusion: fold every stage's violations into one verdict.

    approved   = no critical violation and fewer than two high ones
    confidence = mean violation confidence, or the fixed clean value
    categories = categories implied by the violation types, else (safe,)
"""

import logging
from typing import Dict, List, Sequence

from clipguard.config import settings
from clipguard.schemas.moderation import (
    ModerationCategory,
    ModerationDetails,
    ModerationResult,
    Severity,
    Violation,
    ViolationType,
)

logger = logging.getLogger(__name__)

CATEGORY_BY_TYPE: Dict[ViolationType, ModerationCategory] = {
    ViolationType.NUDITY: ModerationCategory.ADULT,
    ViolationType.SEXUAL_CONTENT: ModerationCategory.ADULT,
    ViolationType.VIOLENCE: ModerationCategory.VIOLENT,
    ViolationType.WEAPONS: ModerationCategory.VIOLENT,
    ViolationType.BLOOD: ModerationCategory.VIOLENT,
    ViolationType.HATE_SPEECH: ModerationCategory.TOXIC,
    ViolationType.HARASSMENT: ModerationCategory.TOXIC,
    ViolationType.PROFANITY: ModerationCategory.TOXIC,
    ViolationType.SPAM: ModerationCategory.SPAM,
    ViolationType.COPYRIGHT: ModerationCategory.SPAM,
    ViolationType.FAKE_NEWS: ModerationCategory.SPAM,
    ViolationType.DRUGS: ModerationCategory.QUESTIONABLE,
    ViolationType.SELF_HARM: ModerationCategory.QUESTIONABLE,
    ViolationType.EXTREMISM: ModerationCategory.QUESTIONABLE,
}

FAIL_SAFE_DESCRIPTION = "moderation analysis failed — manual review required"


def categories_for(violations: Sequence[Violation]) -> List[ModerationCategory]:
    """Distinct categories in order of first appearance; (safe,) when none."""
    categories: List[ModerationCategory] = []
    for v in violations:
        category = CATEGORY_BY_TYPE[v.type]
        if category not in categories:
            categories.append(category)
    return categories or [ModerationCategory.SAFE]


def is_approved(violations: Sequence[Violation]) -> bool:
    critical = sum(1 for v in violations if v.severity == Severity.CRITICAL)
    high = sum(1 for v in violations if v.severity == Severity.HIGH)
    return critical == 0 and high < 2


def overall_confidence(violations: Sequence[Violation]) -> float:
    if not violations:
        return settings.clean_confidence
    return sum(v.confidence for v in violations) / len(violations)


def fuse(
    violations: Sequence[Violation],
    details: ModerationDetails,
    processing_time_ms: int,
) -> ModerationResult:
    return ModerationResult(
        approved=is_approved(violations),
        confidence=overall_confidence(violations),
        violations=tuple(violations),
        categories=tuple(categories_for(violations)),
        processing_time_ms=processing_time_ms,
        details=details,
    )


def fail_safe_result(
    evidence: str,
    processing_time_ms: int,
    description: str = FAIL_SAFE_DESCRIPTION,
) -> ModerationResult:
    """Critical rejection synthesized when the run itself could not finish."""
    return ModerationResult(
        approved=False,
        confidence=0.0,
        violations=(
            Violation(
                type=ViolationType.SPAM,
                severity=Severity.CRITICAL,
                confidence=1.0,
                description=description,
                evidence=evidence,
            ),
        ),
        categories=(ModerationCategory.QUESTIONABLE,),
        processing_time_ms=processing_time_ms,
        details=ModerationDetails(),
    )
