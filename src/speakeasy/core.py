"""Core functionality for speakeasy - orchestrates TTS, caching and playback."""

import logging
import re
from pathlib import Path
from typing import Any

from .audio.player import AudioPlayer
from .cache.manager import TTSCache
from .cache.models import CacheStats
from .config import SpeakEasyConfig
from .providers import create_providers
from .providers.base import ProviderName, TTSProvider
from .queue import SpeechQueue, SpeechRequest
from .tts.models import Priority, SpeechResult
from .tts.pipeline import TTSPipeline

logger = logging.getLogger(__name__)

_EMOJI_RE = re.compile(
    "[\U0001F600-\U0001F64F\U0001F300-\U0001F5FF\U0001F680-\U0001F6FF\U0001F1E0-\U0001F1FF]"
)
_SYMBOL_RE = re.compile(r"[^\w\s.,!?'-]")
_WHITESPACE_RE = re.compile(r"\s+")


def clean_text_for_speech(text: str) -> str:
    """Strip emoji and symbols that voices would read aloud literally.

    Args:
        text: Raw text

    Returns:
        Text with emoji removed, other symbols replaced by spaces and
        whitespace collapsed
    """
    text = _EMOJI_RE.sub("", text)
    text = _SYMBOL_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


class SpeakEasy:
    """Speaks text through a priority queue with provider fallback and caching.

    Example:
        speaker = SpeakEasy(load_config())
        await speaker.speak("Build finished")
        await speaker.speak("Deploy failed", priority="high", interrupt=True)
    """

    def __init__(
        self,
        config: SpeakEasyConfig | None = None,
        providers: dict[ProviderName, TTSProvider] | None = None,
        player: AudioPlayer | None = None,
        cache: TTSCache | None = None,
        source: str | None = "speakeasy",
    ) -> None:
        """Initialize speakeasy from resolved configuration.

        Args:
            config: Resolved configuration (defaults to built-in defaults)
            providers: Provider instances (built from config if omitted)
            player: Audio player (created with the configured volume if omitted)
            cache: Audio cache (built from config.cache if omitted)
            source: Request origin recorded in cache metadata

        Raises:
            InvalidConfigurationError: If the cache TTL or size is malformed
        """
        self.config = config or SpeakEasyConfig()
        self._cache = cache
        if self._cache is None and self.config.cache.enabled:
            self._cache = self._build_cache()
        self._cache_enabled = self._cache is not None

        self.player = player or AudioPlayer(volume=self.config.volume)
        self.pipeline = TTSPipeline(
            providers=providers if providers is not None else create_providers(self.config),
            player=self.player,
            cache=self._cache,
            default_provider=self.config.provider,
            rate=self.config.rate,
            temp_dir=self.config.temp_dir,
            provider_timeout=self.config.provider_timeout,
            source=source,
        )
        self.queue = SpeechQueue(self._process)

    def _build_cache(self) -> TTSCache:
        return TTSCache(
            cache_dir=self.config.cache.dir,
            ttl=self.config.cache.ttl,
            max_size=self.config.cache.max_size,
        )

    @property
    def cache(self) -> TTSCache | None:
        """The audio cache, or None while caching is disabled."""
        return self._cache if self._cache_enabled else None

    async def _process(self, request: SpeechRequest) -> SpeechResult:
        return await self.pipeline.run(
            request.text, silent=request.silent, use_cache=self._cache_enabled
        )

    async def speak(
        self,
        text: str,
        priority: str | Priority = Priority.NORMAL,
        interrupt: bool = False,
        silent: bool = False,
    ) -> SpeechResult:
        """Queue text for speech and wait until it has been spoken.

        Args:
            text: Text to speak
            priority: "high" jumps the queue; "normal" and "low" wait in order
            interrupt: Stop whatever is playing right now first
            silent: Synthesize and cache without playing

        Returns:
            SpeechResult for this request

        Raises:
            ValueError: If text is empty after cleaning or priority is unknown
            AllProvidersExhaustedError: If every provider failed
            RuntimeError: If audio playback fails
        """
        cleaned = clean_text_for_speech(text)
        if not cleaned:
            raise ValueError("Text cannot be empty")

        request = SpeechRequest(
            text=cleaned,
            priority=Priority(priority),
            interrupt=interrupt,
            silent=silent,
        )
        if interrupt and self.queue.is_playing:
            self.stop_speaking()

        return await self.queue.submit(request)

    def stop_speaking(self) -> bool:
        """Stop the active playback. Returns True if something was playing."""
        return self.player.stop()

    def clear_queue(self) -> int:
        return self.queue.clear()

    def queue_status(self) -> dict[str, Any]:
        return self.queue.status()

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    def cleanup_cache(self, max_age: str | int | float | None = None) -> int:
        """Remove expired cache entries.

        Args:
            max_age: Override the configured TTL for this sweep

        Returns:
            Number of entries removed
        """
        if self._cache is None:
            return 0
        return self._cache.cleanup(max_age)

    def enable_cache(self) -> None:
        if self._cache is None:
            self._cache = self._build_cache()
        self._cache_enabled = True
        self.pipeline.cache = self._cache

    def disable_cache(self) -> None:
        self._cache_enabled = False
        self.pipeline.cache = None

    def get_cache_stats(self) -> CacheStats | None:
        if self._cache is None:
            return None
        return self._cache.get_stats()

    def get_cache_dir(self) -> Path | None:
        return self._cache.get_cache_dir() if self._cache is not None else None
