"""
Read-only word lists and patterns shared by the text, metadata and audio analyzers.

`DEFAULT_LEXICON` is built once at import and never mutated, so concurrent
runs can read it without locking. Analyzers accept an alternative `Lexicon`
for tests or locale-specific deployments.
"""

import re
from dataclasses import dataclass
from typing import Tuple


PROFANITY_WORDS = (
    "fuck", "shit", "bitch", "damn", "hell", "ass", "bastard", "crap",
    "piss", "cock", "dick", "pussy", "whore", "slut", "faggot", "nigger",
    "cunt", "motherfucker", "asshole", "bullshit",
)

VIOLENCE_WORDS = (
    "kill", "murder", "death", "blood", "violence", "shoot", "stab",
    "torture", "bomb", "explosion", "terrorist", "weapon", "gun",
    "knife", "sword", "fight", "attack", "assault",
)

HATE_SPEECH_PATTERNS = (
    r"\b(hate|kill|murder)\s+(all\s+)?(jews|blacks|whites|muslims|christians|gays|women|men)\b",
    r"\b(nazi|hitler|holocaust)\s+(was|is)\s+(right|good)\b",
    r"\b(terrorist|bombing|attack)\s+(plan|target|kill)\b",
    r"\b(racial|ethnic)\s+cleansing\b",
    r"\b(burn|hang|lynch)\s+(the|all)\b",
)

POSITIVE_WORDS = ("good", "great", "awesome", "excellent", "amazing", "love", "like", "happy")
NEGATIVE_WORDS = ("bad", "terrible", "awful", "hate", "disgusting", "stupid", "kill", "die")

# Filename-style tokens: explicit, violent, hateful, spam
METADATA_PATTERNS = (
    r"\b(xxx|porn|sex|nude|naked)\b",
    r"\b(kill|murder|death|blood)\b",
    r"\b(hate|nazi|terrorist|bomb)\b",
    r"\b(spam|click|bait|fake)\b",
)

METADATA_KEYWORDS = (
    "explicit", "adult", "nsfw", "violence", "blood", "murder",
    "hate", "racist", "sexist", "terrorist", "bomb", "weapon",
    "drug", "cocaine", "heroin", "suicide", "self-harm",
)

# Surface markers of an aggressive tone, matched against the raw transcript
AGGRESSION_MARKERS = (
    r"[A-Z]{3,}",
    r"!{2,}",
    r"\?{2,}",
    r"(?i:fuck|shit|damn|hell)",
)


@dataclass(frozen=True)
class Lexicon:
    profanity: Tuple[str, ...]
    violence: Tuple[str, ...]
    positive: Tuple[str, ...]
    negative: Tuple[str, ...]
    hate_speech_patterns: Tuple[re.Pattern, ...]
    metadata_patterns: Tuple[re.Pattern, ...]
    metadata_keywords: Tuple[str, ...]
    aggression_markers: Tuple[re.Pattern, ...]

    @classmethod
    def build(cls) -> "Lexicon":
        return cls(
            profanity=PROFANITY_WORDS,
            violence=VIOLENCE_WORDS,
            positive=POSITIVE_WORDS,
            negative=NEGATIVE_WORDS,
            hate_speech_patterns=tuple(re.compile(p, re.IGNORECASE) for p in HATE_SPEECH_PATTERNS),
            metadata_patterns=tuple(re.compile(p, re.IGNORECASE) for p in METADATA_PATTERNS),
            metadata_keywords=METADATA_KEYWORDS,
            aggression_markers=tuple(re.compile(p) for p in AGGRESSION_MARKERS),
        )


DEFAULT_LEXICON = Lexicon.build()
