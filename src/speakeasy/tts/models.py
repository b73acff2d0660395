"""TTS data models with validation."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path


class Priority(str, Enum):
    """Queue priority of a speech request."""

    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


@dataclass
class VoiceSettings:
    """ElevenLabs voice generation settings.

    Args:
        stability: Voice stability (0.0-1.0)
        similarity_boost: Voice similarity boost (0.0-1.0)
        style: Voice style exaggeration (0.0-1.0)
        use_speaker_boost: Whether to use speaker boost
    """

    stability: float = 0.5
    similarity_boost: float = 0.5
    style: float = 0.0
    use_speaker_boost: bool = True

    def __post_init__(self) -> None:
        """Validate voice settings."""
        if not 0.0 <= self.stability <= 1.0:
            raise ValueError("stability must be between 0.0 and 1.0")
        if not 0.0 <= self.similarity_boost <= 1.0:
            raise ValueError("similarity_boost must be between 0.0 and 1.0")
        if not 0.0 <= self.style <= 1.0:
            raise ValueError("style must be between 0.0 and 1.0")

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SpeechResult:
    """Outcome of one completed speak request.

    Args:
        provider: Provider whose audio was played
        cached: True if the audio came from the cache
        played: True if audio went to the speakers (False when silent)
        cache_key: Cache key, for cacheable providers
        artifact_path: Cached artifact path, if the audio is in the cache
        attempts: (provider, error message) for every failed attempt
    """

    provider: str
    cached: bool = False
    played: bool = False
    cache_key: str | None = None
    artifact_path: Path | None = None
    attempts: list[tuple[str, str]] = field(default_factory=list)
