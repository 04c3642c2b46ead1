from clipguard.schemas.moderation import (
    AudioResult,
    MetadataResult,
    ModerationCategory,
    ModerationDetails,
    ModerationLabel,
    ModerationRequest,
    ModerationResult,
    QuickCheckRequest,
    QuickCheckResult,
    Sentiment,
    Severity,
    TextResult,
    VideoResult,
    Violation,
    ViolationType,
    VisualProvider,
)

__all__ = [
    "AudioResult",
    "MetadataResult",
    "ModerationCategory",
    "ModerationDetails",
    "ModerationLabel",
    "ModerationRequest",
    "ModerationResult",
    "QuickCheckRequest",
    "QuickCheckResult",
    "Sentiment",
    "Severity",
    "TextResult",
    "VideoResult",
    "Violation",
    "ViolationType",
    "VisualProvider",
]
