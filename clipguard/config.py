"""
Central application configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden at runtime via an environment variable of the
same name (case-insensitive), e.g.:

    MODERATION_FRAME_COUNT=20 uvicorn clipguard.main:app   # denser sampling
    export VISUAL_PROVIDER=heuristic                         # offline staging

A `.env` file at the project root is loaded automatically.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,   # VISUAL_PROVIDER == visual_provider
        extra="ignore",         # silently drop unknown env vars
    )

    # ------------------------------------------------------------------ #
    # Media toolkit (ffmpeg / ffprobe)                                    #
    # ------------------------------------------------------------------ #
    ffmpeg_binary: str = Field(
        "ffmpeg", description="Executable used for frame and audio extraction"
    )
    ffprobe_binary: str = Field(
        "ffprobe", description="Executable used to probe the asset duration"
    )
    ffmpeg_timeout_sec: int = Field(
        120, description="Timeout for a single ffmpeg extraction (seconds)"
    )
    ffprobe_timeout_sec: int = Field(
        10, description="Timeout for ffprobe subprocess (seconds)"
    )
    scratch_dir: str | None = Field(
        None, description="Root for per-run scratch directories (None → system temp)"
    )

    # ------------------------------------------------------------------ #
    # Frame sampling                                                      #
    # ------------------------------------------------------------------ #
    moderation_frame_count: int = Field(
        10, description="Frames sampled per asset, evenly spaced over its duration"
    )
    frame_width: int = Field(640, description="Width extracted frames are scaled to")
    frame_height: int = Field(360, description="Height extracted frames are scaled to")
    frame_fallback_window_sec: int = Field(
        60, description="Assumed duration when ffprobe cannot report one"
    )

    # ------------------------------------------------------------------ #
    # Audio                                                               #
    # ------------------------------------------------------------------ #
    audio_sample_rate: int = Field(
        16_000, description="Sample rate (Hz) of the mono PCM track sent for transcription"
    )
    transcription_provider: str = Field(
        "auto", description="auto | gemini | http | none"
    )
    transcription_timeout_sec: int = Field(
        60, description="Timeout for one transcription call (seconds)"
    )
    transcription_api_url: str | None = Field(
        None, description="OpenAI-compatible /audio/transcriptions endpoint"
    )
    transcription_model: str = Field(
        "whisper-1", description="Model name sent to the HTTP transcription endpoint"
    )

    # ------------------------------------------------------------------ #
    # Visual analysis                                                     #
    # ------------------------------------------------------------------ #
    visual_provider: str = Field(
        "auto", description="auto | cloud | heuristic"
    )
    cloud_frame_timeout_sec: int = Field(
        20, description="Timeout for one frame classification call (seconds)"
    )

    # ------------------------------------------------------------------ #
    # Gemini Client                                                       #
    # ------------------------------------------------------------------ #
    gemini_model: str = Field(
        "gemini-2.5-flash", description="Model used for frame labels and transcription"
    )
    gemini_http_timeout_ms: int = Field(
        15_000, description="HTTP client total timeout (ms)"
    )
    gemini_max_retries: int = Field(
        2, description="Max retry attempts on transient errors"
    )
    gemini_retry_initial_delay: float = Field(
        1.0, description="First retry delay (seconds)"
    )
    gemini_retry_max_delay: float = Field(
        5.0, description="Max retry back-off delay (seconds)"
    )
    gemini_retry_exp_base: float = Field(
        2.0, description="Exponential back-off multiplier"
    )
    gemini_max_pixels: int = Field(
        1_048_576, description="1024×1024 resize cap before upload"
    )
    gemini_jpeg_quality: int = Field(
        85, description="JPEG quality for frame upload"
    )
    gemini_temperature: float = Field(
        0.0, description="Sampling temperature for Gemini model"
    )

    # ------------------------------------------------------------------ #
    # Decision thresholds                                                 #
    # ------------------------------------------------------------------ #
    toxicity_violation_threshold: float = Field(
        0.7, description="Text toxicity above this → hate_speech violation"
    )
    toxicity_critical_threshold: float = Field(
        0.9, description="Text toxicity above this → violation is critical"
    )
    aggression_violation_threshold: float = Field(
        0.7, description="Audio aggression above this → harassment violation"
    )
    suspicious_audio_toxicity: float = Field(
        0.6, description="Transcript toxicity above this → suspicious audio"
    )
    violent_scene_critical_count: int = Field(
        3, description="More violent scenes than this → violence is critical"
    )
    profanity_high_count: int = Field(
        5, description="More profane words than this → profanity is high"
    )
    clean_confidence: float = Field(
        0.95, description="Confidence reported when no violation was found"
    )

    # ------------------------------------------------------------------ #
    # Quick check                                                         #
    # ------------------------------------------------------------------ #
    quick_check_toxicity_threshold: float = Field(
        0.8, description="Quick check rejects text above this toxicity"
    )
    quick_check_max_profanity: int = Field(
        3, description="Quick check rejects text with more profane words than this"
    )

    # ------------------------------------------------------------------ #
    # Run limits & admission                                              #
    # ------------------------------------------------------------------ #
    moderation_timeout_sec: int = Field(
        600, description="Whole-run time limit; exceeded → fail-closed result"
    )
    max_concurrent_runs: int = Field(
        2, description="Runs admitted at once by the HTTP surface"
    )

    # ------------------------------------------------------------------ #
    # Uploads & rate limiting                                             #
    # ------------------------------------------------------------------ #
    max_video_upload_mb: int = Field(
        200, description="Max MB for video uploads"
    )
    rate_limit_request_window_sec: int = Field(
        60, description="Sliding window for per-client request rate (seconds)"
    )
    rate_limit_max_requests: int = Field(
        10, description="Max requests allowed within the rate-limit window"
    )
    rate_limit_memory_limit: int = Field(
        1000, description="Max keys before in-memory rate-limit map is pruned"
    )
    redis_key_prefix: str = Field(
        "clipguard", description="Namespace for keys written to the shared Redis"
    )

    # ------------------------------------------------------------------ #
    # Derived byte-level properties (computed from MB fields)             #
    # ------------------------------------------------------------------ #
    @property
    def max_video_upload_bytes(self) -> int:
        return self.max_video_upload_mb * 1024 * 1024


# Single shared instance. Import this everywhere.
settings = Settings()
