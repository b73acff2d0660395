"""Abstract base class for text-to-speech providers.

This module defines the interface that all TTS providers must implement,
ensuring consistent behavior across different TTS backends.
"""

from abc import ABC, abstractmethod
from enum import Enum


class ProviderName(str, Enum):
    """The closed set of providers speakeasy knows about."""

    SYSTEM = "system"
    OPENAI = "openai"
    ELEVENLABS = "elevenlabs"
    GROQ = "groq"


# Fallback walks this order after the requested provider fails
CANONICAL_ORDER: tuple[ProviderName, ...] = (
    ProviderName.SYSTEM,
    ProviderName.OPENAI,
    ProviderName.ELEVENLABS,
    ProviderName.GROQ,
)


class TTSProvider(ABC):
    """Abstract base class for text-to-speech providers.

    All TTS providers must inherit from this class and implement the
    configuration check, synthesis and error description methods.

    Attributes:
        name: Provider identifier
        audio_format: File extension of the audio synthesize() returns
        model: Provider model used for synthesis, if it has one
        cacheable: Whether results may be stored in the audio cache
    """

    name: ProviderName
    audio_format: str = "mp3"
    model: str | None = None
    cacheable: bool = True

    def __init__(self, voice: str = "") -> None:
        self.voice = voice

    @abstractmethod
    def is_configured(self) -> bool:
        """Return whether the provider can be used. Never raises."""
        pass

    @abstractmethod
    async def synthesize(self, text: str, voice: str, rate: int | float) -> bytes:
        """Convert text to audio bytes.

        Args:
            text: The text to convert to speech
            voice: Voice ID or name to use for synthesis
            rate: Speech rate in words per minute

        Returns:
            Audio data as bytes in ``audio_format``

        Raises:
            ConfigurationError: If the provider is not configured
            ProviderError: If the backend call fails
            EmptyResultError: If the backend returned no audio
        """
        pass

    @abstractmethod
    def describe_error(self, error: Exception) -> str:
        """Render a user-facing message for an error from this provider."""
        pass
