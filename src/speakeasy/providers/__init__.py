"""Provider abstraction for text-to-speech services.

This module provides a registry pattern for managing TTS providers,
allowing runtime selection of different TTS backends.
"""

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from ..config import SpeakEasyConfig

from .base import CANONICAL_ORDER, ProviderName, TTSProvider
from .elevenlabs import ElevenLabsProvider
from .groq import GroqProvider
from .openai import OpenAIProvider
from .system import SystemTTSProvider

__all__ = [
    "CANONICAL_ORDER",
    "ElevenLabsProvider",
    "GroqProvider",
    "OpenAIProvider",
    "ProviderName",
    "ProviderRegistry",
    "SystemTTSProvider",
    "TTSProvider",
    "create_providers",
]


class ProviderRegistry:
    """Registry for managing TTS providers.

    This class maintains a registry of available TTS providers,
    allowing registration and retrieval by name.
    """

    _providers: ClassVar[dict[str, type[TTSProvider]]] = {}

    @classmethod
    def register(cls, name: str, provider_class: type[TTSProvider]) -> None:
        """Register a TTS provider.

        Args:
            name: Name to register the provider under
            provider_class: Provider class that implements TTSProvider
        """
        cls._providers[name] = provider_class

    @classmethod
    def get(cls, name: str) -> type[TTSProvider]:
        """Get a provider class by name.

        Args:
            name: Name of the provider to retrieve

        Returns:
            Provider class

        Raises:
            KeyError: If provider name not found
        """
        if name not in cls._providers:
            available = ", ".join(cls._providers.keys()) if cls._providers else "none"
            raise KeyError(
                f"Provider '{name}' not found. Available providers: {available}"
            )
        return cls._providers[name]

    @classmethod
    def names(cls) -> list[str]:
        return list(cls._providers.keys())


def create_providers(
    config: "SpeakEasyConfig",
) -> dict[ProviderName, TTSProvider]:
    """Build one provider instance per known provider from configuration.

    Args:
        config: Resolved speakeasy configuration

    Returns:
        Mapping of provider name to configured instance, in canonical order
    """
    providers: dict[ProviderName, TTSProvider] = {}
    for name in CANONICAL_ORDER:
        settings = config.provider_config(name.value)
        provider_class = ProviderRegistry.get(name.value)
        if name is ProviderName.SYSTEM:
            providers[name] = provider_class(voice=settings.voice)
        else:
            providers[name] = provider_class(
                api_key=settings.api_key,
                voice=settings.voice,
                model=settings.model,
            )
    return providers


# Register providers
ProviderRegistry.register(ProviderName.SYSTEM.value, SystemTTSProvider)
ProviderRegistry.register(ProviderName.OPENAI.value, OpenAIProvider)
ProviderRegistry.register(ProviderName.ELEVENLABS.value, ElevenLabsProvider)
ProviderRegistry.register(ProviderName.GROQ.value, GroqProvider)
