"""
Sentiment, profanity and toxicity scoring over arbitrary text.

Used on title + description and on audio transcripts. Deterministic, no I/O.

Toxicity is a fixed linear sum of lexicon hits, clamped to [0, 1]:

    0.2 × profane words + 0.3 × hate-speech patterns
    + 0.1 × negative words + 0.25 × violence words

The weights and the thresholds applied to the score are uncalibrated
heuristics; see `Settings.toxicity_*`.
"""

from typing import List

from clipguard.config import settings
from clipguard.moderation.lexicon import DEFAULT_LEXICON, Lexicon
from clipguard.schemas.moderation import Sentiment, Severity, TextResult, Violation, ViolationType

PROFANITY_WEIGHT = 0.2
HATE_SPEECH_WEIGHT = 0.3
NEGATIVE_WEIGHT = 0.1
VIOLENCE_WEIGHT = 0.25


def analyze_text(text: str, lexicon: Lexicon = DEFAULT_LEXICON) -> TextResult:
    lower_text = (text or "").lower()

    profanity_words = [w for w in lexicon.profanity if w in lower_text]
    hate_speech_indicators = [p.pattern for p in lexicon.hate_speech_patterns if p.search(lower_text)]

    positive_count = sum(1 for w in lexicon.positive if w in lower_text)
    negative_count = sum(1 for w in lexicon.negative if w in lower_text)
    violence_count = sum(1 for w in lexicon.violence if w in lower_text)

    if positive_count > negative_count:
        sentiment = Sentiment.POSITIVE
    elif negative_count > positive_count:
        sentiment = Sentiment.NEGATIVE
    else:
        sentiment = Sentiment.NEUTRAL

    toxicity = (
        len(profanity_words) * PROFANITY_WEIGHT
        + len(hate_speech_indicators) * HATE_SPEECH_WEIGHT
        + negative_count * NEGATIVE_WEIGHT
        + violence_count * VIOLENCE_WEIGHT
    )
    toxicity = max(0.0, min(toxicity, 1.0))

    return TextResult(
        sentiment=sentiment,
        toxicity=toxicity,
        profanity_words=tuple(profanity_words),
        hate_speech_indicators=tuple(hate_speech_indicators),
    )


def text_violations(result: TextResult) -> List[Violation]:
    if result.toxicity <= settings.toxicity_violation_threshold:
        return []
    severity = (
        Severity.CRITICAL
        if result.toxicity > settings.toxicity_critical_threshold
        else Severity.HIGH
    )
    return [
        Violation(
            type=ViolationType.HATE_SPEECH,
            severity=severity,
            confidence=result.toxicity,
            description="Toxic language detected in text",
            evidence=", ".join(result.profanity_words),
        )
    ]
