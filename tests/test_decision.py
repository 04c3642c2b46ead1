"""Pure unit tests for clipguard/moderation/decision.py."""

import itertools

import pytest
from pydantic import ValidationError

from clipguard.moderation.decision import (
    FAIL_SAFE_DESCRIPTION,
    categories_for,
    fail_safe_result,
    fuse,
    is_approved,
    overall_confidence,
)
from clipguard.schemas.moderation import (
    ModerationCategory,
    ModerationDetails,
    ModerationResult,
    Severity,
    Violation,
    ViolationType,
)


def _v(type_=ViolationType.SPAM, severity=Severity.MEDIUM, confidence=0.5) -> Violation:
    return Violation(type=type_, severity=severity, confidence=confidence, description="test")


# ---------------------------------------------------------------------------
# Approval rule
# ---------------------------------------------------------------------------


def test_no_violations_is_approved_with_clean_confidence():
    result = fuse([], ModerationDetails(), 12)
    assert result.approved is True
    assert result.confidence == 0.95
    assert result.categories == (ModerationCategory.SAFE,)
    assert result.processing_time_ms == 12


def test_single_critical_rejects():
    assert is_approved([_v(severity=Severity.CRITICAL)]) is False


def test_one_high_is_tolerated_two_are_not():
    assert is_approved([_v(severity=Severity.HIGH), _v(severity=Severity.MEDIUM)]) is True
    assert is_approved([_v(severity=Severity.HIGH), _v(severity=Severity.HIGH)]) is False


def test_many_low_and_medium_are_approved():
    assert is_approved([_v(severity=Severity.LOW)] * 5 + [_v(severity=Severity.MEDIUM)] * 5) is True


def test_adding_a_violation_never_flips_rejection_to_approval():
    severities = list(Severity)
    for base in itertools.product(severities, repeat=2):
        violations = [_v(severity=s) for s in base]
        if is_approved(violations):
            continue
        for extra in severities:
            assert is_approved(violations + [_v(severity=extra)]) is False


def test_confidence_is_mean_of_violation_confidences():
    assert overall_confidence([_v(confidence=0.7), _v(confidence=1.0)]) == pytest.approx(0.85)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def test_categories_are_deduplicated_in_first_seen_order():
    violations = [
        _v(ViolationType.PROFANITY),
        _v(ViolationType.NUDITY),
        _v(ViolationType.HATE_SPEECH),
        _v(ViolationType.WEAPONS),
    ]
    assert categories_for(violations) == [
        ModerationCategory.TOXIC,
        ModerationCategory.ADULT,
        ModerationCategory.VIOLENT,
    ]


@pytest.mark.parametrize("type_", [ViolationType.DRUGS, ViolationType.SELF_HARM, ViolationType.EXTREMISM])
def test_unmapped_harms_are_questionable(type_):
    assert categories_for([_v(type_)]) == [ModerationCategory.QUESTIONABLE]


def test_every_violation_type_has_a_category():
    for type_ in ViolationType:
        assert categories_for([_v(type_)]) != [ModerationCategory.SAFE]


def test_safe_cannot_be_combined():
    with pytest.raises(ValidationError):
        ModerationResult(
            approved=True,
            confidence=0.9,
            categories=(ModerationCategory.SAFE, ModerationCategory.SPAM),
        )


# ---------------------------------------------------------------------------
# Fail-safe
# ---------------------------------------------------------------------------


def test_fail_safe_result_is_a_critical_rejection():
    result = fail_safe_result("ffmpeg exploded", 42)
    assert result.approved is False
    assert result.confidence == 0.0
    assert result.categories == (ModerationCategory.QUESTIONABLE,)
    assert result.processing_time_ms == 42
    [violation] = result.violations
    assert violation.type == ViolationType.SPAM
    assert violation.severity == Severity.CRITICAL
    assert violation.confidence == 1.0
    assert violation.description == FAIL_SAFE_DESCRIPTION
    assert violation.evidence == "ffmpeg exploded"
    assert result.details == ModerationDetails()


def test_results_are_frozen():
    result = fuse([], ModerationDetails(), 0)
    with pytest.raises(ValidationError):
        result.approved = False
