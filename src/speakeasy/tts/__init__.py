"""TTS (Text-to-Speech) package for speakeasy.

This package holds the shared error types and data models. The pipeline lives
in ``speakeasy.tts.pipeline``.
"""

from .errors import (
    AllProvidersExhaustedError,
    CacheIOError,
    ConfigurationError,
    EmptyResultError,
    InvalidConfigurationError,
    ProviderError,
    TTSError,
)
from .models import Priority, SpeechResult, VoiceSettings

__all__ = [
    "AllProvidersExhaustedError",
    "CacheIOError",
    "ConfigurationError",
    "EmptyResultError",
    "InvalidConfigurationError",
    "Priority",
    "ProviderError",
    "SpeechResult",
    "TTSError",
    "VoiceSettings",
]
