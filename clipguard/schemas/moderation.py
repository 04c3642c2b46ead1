from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ViolationType(str, Enum):
    VIOLENCE = "violence"
    BLOOD = "blood"
    WEAPONS = "weapons"
    NUDITY = "nudity"
    SEXUAL_CONTENT = "sexual_content"
    HATE_SPEECH = "hate_speech"
    HARASSMENT = "harassment"
    PROFANITY = "profanity"
    SPAM = "spam"
    DRUGS = "drugs"
    SELF_HARM = "self_harm"
    EXTREMISM = "extremism"
    COPYRIGHT = "copyright"
    FAKE_NEWS = "fake_news"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ModerationCategory(str, Enum):
    SAFE = "safe"
    QUESTIONABLE = "questionable"
    ADULT = "adult"
    VIOLENT = "violent"
    TOXIC = "toxic"
    SPAM = "spam"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class VisualProvider(str, Enum):
    CLOUD = "cloud"
    HEURISTIC = "heuristic"


class ModerationRequest(BaseModel):
    """One submission: the video handle plus its user-supplied text."""
    model_config = ConfigDict(frozen=True)

    media_path: str
    title: str
    description: str = ""
    tags: Optional[Tuple[str, ...]] = None
    category: Optional[str] = None


class Violation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ViolationType
    severity: Severity
    confidence: float = Field(ge=0.0, le=1.0)
    description: str
    evidence: Optional[str] = None      # frame reference, text snippet, ...
    timestamp: Optional[float] = None   # seconds into the asset


class MetadataResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    suspicious_filename: bool = False
    suspicious_tags: Tuple[str, ...] = ()
    flagged_keywords: Tuple[str, ...] = ()


class TextResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    sentiment: Sentiment = Sentiment.NEUTRAL
    toxicity: float = Field(0.0, ge=0.0, le=1.0)
    profanity_words: Tuple[str, ...] = ()
    hate_speech_indicators: Tuple[str, ...] = ()


class VideoResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    frames_analyzed: int = 0
    violent_scenes: int = 0
    nudity_detected: bool = False
    weapons_detected: bool = False
    blood_detected: bool = False
    suspicious_objects: Tuple[str, ...] = ()
    # Index into the sampled frames of the first hit per signal
    first_nudity_frame: Optional[int] = None
    first_violence_frame: Optional[int] = None
    first_weapon_frame: Optional[int] = None
    provider: VisualProvider = VisualProvider.HEURISTIC


class AudioResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    transcription: str = ""
    profanity_count: int = 0
    aggression_level: float = Field(0.0, ge=0.0, le=1.0)
    suspicious_audio: bool = False


class ModerationDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    metadata: Optional[MetadataResult] = None
    text: Optional[TextResult] = None
    video: Optional[VideoResult] = None
    audio: Optional[AudioResult] = None


class ModerationResult(BaseModel):
    """Terminal verdict for one run. Never mutated after it is returned."""
    model_config = ConfigDict(frozen=True)

    approved: bool
    confidence: float
    violations: Tuple[Violation, ...] = ()
    categories: Tuple[ModerationCategory, ...] = (ModerationCategory.SAFE,)
    processing_time_ms: int = 0
    details: ModerationDetails = Field(default_factory=ModerationDetails)

    @model_validator(mode="after")
    def _safe_is_exclusive(self) -> "ModerationResult":
        if ModerationCategory.SAFE in self.categories and len(self.categories) > 1:
            raise ValueError("'safe' cannot be combined with other categories")
        return self


class ModerationLabel(BaseModel):
    """Gemini structured output schema: one label per detected issue in a frame."""
    name: str = Field(description="Label name from the moderation taxonomy, e.g. 'Graphic Violence'")
    confidence: float = Field(description="Confidence score between 0.0 and 1.0")


class QuickCheckRequest(BaseModel):
    title: str
    description: str = ""
    tags: Optional[list[str]] = None


class QuickCheckResult(BaseModel):
    approved: bool
    reason: Optional[str] = None
