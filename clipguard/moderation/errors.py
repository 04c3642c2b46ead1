"""
Failure taxonomy for the moderation pipeline.

Only `PipelineError` ever reaches the caller, and then as a synthesized
rejection rather than a raised exception.
"""


class ModerationError(Exception):
    """Base class for moderation failures."""


class ExtractionError(ModerationError):
    """The media toolkit failed, timed out, or produced no output."""


class ProviderError(ModerationError):
    """A cloud classifier or transcription call failed."""


class PipelineError(ModerationError):
    """Any other failure inside the orchestrator itself."""


class ModerationCancelled(ModerationError):
    """The caller's cancellation signal was set between two stages."""
