"""TTS pipeline orchestrator for speakeasy.

Coordinates the providers, TTSCache and AudioPlayer for a single request:
validate the provider, check the cache, synthesize, cache the result and play
it, falling back through the remaining providers when one fails.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path

from ..audio.player import AudioPlayer, transient_audio_file
from ..cache.manager import TTSCache
from ..cache.models import CacheEntry, Provenance
from ..providers.base import CANONICAL_ORDER, ProviderName, TTSProvider
from .errors import (
    AllProvidersExhaustedError,
    ConfigurationError,
    EmptyResultError,
    ProviderError,
)
from .models import SpeechResult

logger = logging.getLogger(__name__)


@dataclass
class _Audio:
    """Audio produced by one successful provider attempt."""

    provider: ProviderName
    audio_format: str
    data: bytes | None = None
    entry: CacheEntry | None = None
    cached: bool = False
    cache_key: str | None = None


class TTSPipeline:
    """Orchestrates the TTS workflow from text to audio output.

    Example:
        pipeline = TTSPipeline(
            providers=create_providers(config),
            player=AudioPlayer(),
            cache=TTSCache(ttl="7d"),
        )
        result = await pipeline.run("Deploy complete", provider="openai")
        # SpeechResult(provider="openai", cached=False, played=True, ...)
    """

    def __init__(
        self,
        providers: dict[ProviderName, TTSProvider],
        player: AudioPlayer,
        cache: TTSCache | None = None,
        default_provider: str = "system",
        rate: int | float = 180,
        temp_dir: Path | None = None,
        provider_timeout: float | None = 30.0,
        source: str | None = "speakeasy",
    ) -> None:
        """Initialize TTS pipeline.

        Args:
            providers: Provider instances by name; missing names are skipped
            player: Audio player used for output
            cache: Audio cache, or None to disable caching
            default_provider: Provider tried first when a request names none
            rate: Speech rate in words per minute
            temp_dir: Directory for transient audio files
            provider_timeout: Seconds to wait for synthesis (None waits forever)
            source: Request origin recorded in cache metadata
        """
        self.providers = {ProviderName(name): p for name, p in providers.items()}
        self.player = player
        self.cache = cache
        self.default_provider = default_provider
        self.rate = rate
        self.temp_dir = temp_dir
        self.provider_timeout = provider_timeout
        self.source = source

    def attempt_order(self, requested: str | ProviderName) -> list[ProviderName]:
        """Return the providers to try, in order, for a requested provider.

        The requested provider comes first, followed by the providers after it
        in canonical order. Providers that were not supplied are skipped.

        Raises:
            ValueError: If the provider name is unknown
        """
        try:
            start = ProviderName(requested)
        except ValueError:
            known = ", ".join(p.value for p in CANONICAL_ORDER)
            raise ValueError(
                f"Unknown provider '{requested}'. Available providers: {known}"
            ) from None
        index = CANONICAL_ORDER.index(start)
        return [p for p in CANONICAL_ORDER[index:] if p in self.providers]

    async def run(
        self,
        text: str,
        provider: str | None = None,
        silent: bool = False,
        use_cache: bool = True,
    ) -> SpeechResult:
        """Speak text, falling back through providers on failure.

        Args:
            text: Text to convert to speech
            provider: Provider to try first (defaults to the configured one)
            silent: Produce and cache audio without playing it
            use_cache: Whether to read and write the audio cache

        Returns:
            SpeechResult describing what happened

        Raises:
            ValueError: If text is empty or the provider is unknown
            AllProvidersExhaustedError: If every provider failed
            RuntimeError: If audio playback fails
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        requested_name = provider or self.default_provider
        order = self.attempt_order(requested_name)
        requested = ProviderName(requested_name)
        attempts: list[tuple[str, str]] = []
        last_error: Exception | None = None
        last_message: str | None = None

        for name in order:
            try:
                audio = await self._produce(name, text, use_cache)
            except Exception as e:
                logger.warning(f"Provider {name.value} failed: {e}")
                last_message = self._describe(name, e)
                attempts.append((name.value, last_message))
                last_error = e
                continue
            return await self._deliver(audio, silent, attempts)

        fallback_error: Exception | None = None
        fallback_message: str | None = None
        if requested is not ProviderName.SYSTEM:
            logger.warning("All providers failed, falling back to system voice")
            try:
                audio = await self._produce(ProviderName.SYSTEM, text, use_cache)
            except Exception as e:
                logger.error(f"System voice fallback failed: {e}")
                fallback_message = self._describe(ProviderName.SYSTEM, e)
                attempts.append((ProviderName.SYSTEM.value, fallback_message))
                fallback_error = e
            else:
                return await self._deliver(audio, silent, attempts)

        if last_error is None:
            last_error = fallback_error or ConfigurationError(
                f"Provider '{requested.value}' is not available"
            )
            last_message = fallback_message
            fallback_error = fallback_message = None
        raise AllProvidersExhaustedError(
            last_error,
            fallback_error,
            attempts,
            last_message=last_message,
            fallback_message=fallback_message,
        )

    def _describe(self, name: ProviderName, error: Exception) -> str:
        """Render a provider failure the way that provider explains it to users."""
        provider = self.providers.get(name)
        if provider is None:
            return str(error)
        return provider.describe_error(error)

    async def _produce(
        self, name: ProviderName, text: str, use_cache: bool
    ) -> _Audio:
        provider = self.providers.get(name)
        if provider is None:
            raise ConfigurationError(f"Provider '{name.value}' is not available")

        # === VALIDATING ===
        if not provider.is_configured():
            raise ConfigurationError(f"Provider '{name.value}' is not configured")

        voice = provider.voice
        caching = use_cache and provider.cacheable and self.cache is not None
        key = None

        # === CHECKING CACHE ===
        if caching:
            key = self.cache.generate_cache_key(text, name.value, voice, self.rate)
            entry = self.cache.get(key)
            if entry is not None:
                logger.debug(f"Cache hit for {name.value}: {entry.artifact_path}")
                return _Audio(
                    provider=name,
                    audio_format=entry.artifact_path.suffix.lstrip("."),
                    entry=entry,
                    cached=True,
                    cache_key=key,
                )

        # === SYNTHESIZING ===
        logger.debug(f"Synthesizing with {name.value} (voice={voice}, rate={self.rate})")
        started = time.monotonic()
        try:
            data = await asyncio.wait_for(
                provider.synthesize(text, voice, self.rate), self.provider_timeout
            )
        except asyncio.TimeoutError as e:
            raise ProviderError(
                f"{name.value} timed out after {self.provider_timeout}s",
                provider=name.value,
                original_error=e,
            ) from e
        duration_ms = (time.monotonic() - started) * 1000

        if not data:
            raise EmptyResultError(
                f"{name.value} returned no audio", provider=name.value
            )

        audio = _Audio(
            provider=name, audio_format=provider.audio_format, data=data, cache_key=key
        )

        # === CACHING ===
        if caching:
            audio.entry = self.cache.set(
                key,
                data,
                provider=name.value,
                voice=voice,
                rate=self.rate,
                text=text,
                provenance=Provenance.capture(source=self.source, model=provider.model),
                duration_ms=duration_ms,
                extension=provider.audio_format,
            )

        return audio

    async def _deliver(
        self, audio: _Audio, silent: bool, attempts: list[tuple[str, str]]
    ) -> SpeechResult:
        result = SpeechResult(
            provider=audio.provider.value,
            cached=audio.cached,
            played=False,
            cache_key=audio.cache_key,
            artifact_path=audio.entry.artifact_path if audio.entry else None,
            attempts=attempts,
        )
        if silent:
            logger.debug("Silent request, skipping playback")
            return result

        # === PLAYING ===
        if audio.entry is not None:
            await self.player.play_file(audio.entry.artifact_path)
        else:
            with transient_audio_file(
                audio.data, suffix=f".{audio.audio_format}", directory=self.temp_dir
            ) as path:
                await self.player.play_file(path)

        result.played = True
        return result
