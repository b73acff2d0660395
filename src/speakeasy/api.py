"""High-level API for speakeasy library usage."""

from dataclasses import replace

from .config import SpeakEasyConfig, load_config
from .core import SpeakEasy
from .tts.models import SpeechResult


def _build(
    provider: str | None, cache: bool, config: SpeakEasyConfig | None
) -> SpeakEasy:
    config = config or load_config()
    overrides = {}
    if provider:
        overrides["provider"] = provider
    if not cache:
        overrides["cache"] = replace(config.cache, enabled=False)
    return SpeakEasy(replace(config, **overrides) if overrides else config)


async def speak(
    text: str,
    provider: str | None = None,
    priority: str = "normal",
    interrupt: bool = False,
    cache: bool = True,
    silent: bool = False,
    config: SpeakEasyConfig | None = None,
) -> SpeechResult:
    """Speak text using the user's configuration.

    Args:
        text: Text to speak
        provider: TTS provider to try first (defaults to the configured one)
        priority: Queue priority: "high", "normal" or "low"
        interrupt: Stop current playback first
        cache: Whether to use the audio cache
        silent: Synthesize and cache without playing
        config: Configuration to use instead of the config file

    Returns:
        SpeechResult describing what happened

    Raises:
        ValueError: If text is empty
        AllProvidersExhaustedError: If every provider failed
        InvalidConfigurationError: If the cache TTL or size is malformed
        RuntimeError: If audio playback fails
    """
    if not text or not text.strip():
        raise ValueError("Text cannot be empty")

    speaker = _build(provider, cache, config)
    return await speaker.speak(
        text, priority=priority, interrupt=interrupt, silent=silent
    )


async def say(
    text: str,
    provider: str | None = None,
    cache: bool = True,
    config: SpeakEasyConfig | None = None,
) -> SpeechResult:
    """Speak text with normal priority. Shorthand for ``speak``."""
    return await speak(text, provider=provider, cache=cache, config=config)
