"""
Metadata scoring for uploaded assets.

Scans title, description and tags for filename-style tokens and flagged
keywords. Pure function over the lexicon: no I/O.
"""

import logging
from typing import List, Optional, Sequence

from clipguard.moderation.lexicon import DEFAULT_LEXICON, Lexicon
from clipguard.schemas.moderation import MetadataResult, Severity, Violation, ViolationType

logger = logging.getLogger(__name__)

METADATA_VIOLATION_CONFIDENCE = 0.7


def analyze_metadata(
    title: str,
    description: str,
    tags: Optional[Sequence[str]] = None,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> MetadataResult:
    tags = list(tags or [])
    combined = f"{title} {description} {' '.join(tags)}".lower()

    suspicious_filename = any(p.search(combined) for p in lexicon.metadata_patterns)
    flagged_keywords = [k for k in lexicon.metadata_keywords if k in combined]
    suspicious_tags = [
        tag for tag in tags
        if any(k in tag.lower() for k in flagged_keywords)
    ]

    if suspicious_filename or flagged_keywords:
        logger.info(f"[METADATA] Flagged keywords: {flagged_keywords}, suspicious tags: {suspicious_tags}")

    return MetadataResult(
        suspicious_filename=suspicious_filename,
        suspicious_tags=tuple(suspicious_tags),
        flagged_keywords=tuple(flagged_keywords),
    )


def metadata_violations(result: MetadataResult) -> List[Violation]:
    if not (result.suspicious_filename or result.flagged_keywords):
        return []
    return [
        Violation(
            type=ViolationType.SPAM,
            severity=Severity.MEDIUM,
            confidence=METADATA_VIOLATION_CONFIDENCE,
            description="Suspicious metadata detected",
            evidence=", ".join(result.flagged_keywords),
        )
    ]
