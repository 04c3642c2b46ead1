"""
Speech-content scoring over an audio transcript.

Profanity and toxicity come from the text analyzer. Aggression is read from
surface markers in the raw transcript (uppercase runs, repeated !/?,
aggressive profanity); each occurrence adds a fixed increment, clamped to 1.
"""

from typing import List

from clipguard.config import settings
from clipguard.moderation.lexicon import DEFAULT_LEXICON, Lexicon
from clipguard.moderation.text_analyzer import analyze_text
from clipguard.schemas.moderation import AudioResult, Severity, Violation, ViolationType

AGGRESSION_INCREMENT = 0.2
PROFANITY_CONFIDENCE = 0.8
EVIDENCE_SNIPPET_CHARS = 100


def calculate_aggression_level(transcript: str, lexicon: Lexicon = DEFAULT_LEXICON) -> float:
    score = 0.0
    for marker in lexicon.aggression_markers:
        score += len(marker.findall(transcript)) * AGGRESSION_INCREMENT
    return min(score, 1.0)


def analyze_audio(transcript: str, lexicon: Lexicon = DEFAULT_LEXICON) -> AudioResult:
    if not transcript:
        return AudioResult()

    text_result = analyze_text(transcript, lexicon)
    aggression_level = calculate_aggression_level(transcript, lexicon)

    return AudioResult(
        transcription=transcript,
        profanity_count=len(text_result.profanity_words),
        aggression_level=aggression_level,
        suspicious_audio=(
            text_result.toxicity > settings.suspicious_audio_toxicity
            or aggression_level > settings.aggression_violation_threshold
        ),
    )


def audio_violations(result: AudioResult) -> List[Violation]:
    violations = []

    if result.profanity_count > 0:
        violations.append(
            Violation(
                type=ViolationType.PROFANITY,
                severity=(
                    Severity.HIGH
                    if result.profanity_count > settings.profanity_high_count
                    else Severity.MEDIUM
                ),
                confidence=PROFANITY_CONFIDENCE,
                description=f"{result.profanity_count} profane words detected in audio",
                evidence=result.transcription[:EVIDENCE_SNIPPET_CHARS] + "...",
            )
        )

    if result.aggression_level > settings.aggression_violation_threshold:
        violations.append(
            Violation(
                type=ViolationType.HARASSMENT,
                severity=Severity.MEDIUM,
                confidence=result.aggression_level,
                description="Aggressive or threatening tone detected",
                evidence="Audio tone analysis",
            )
        )

    return violations
