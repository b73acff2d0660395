"""Unit tests for the SpeakEasy facade."""

import asyncio
import sys
from dataclasses import replace
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from speakeasy.cache.manager import TTSCache
from speakeasy.config import CacheConfig, SpeakEasyConfig
from speakeasy.core import SpeakEasy, clean_text_for_speech
from speakeasy.providers.base import ProviderName
from speakeasy.tts.errors import InvalidConfigurationError
from test_helpers import RecordingPlayer, make_providers


def _config(cache_dir: Path, **overrides) -> SpeakEasyConfig:
    return replace(
        SpeakEasyConfig(provider="openai", cache=CacheConfig(dir=cache_dir)),
        **overrides,
    )


class TestCleanTextForSpeech:
    """Test text cleanup before synthesis."""

    def test_strips_emoji(self) -> None:
        assert clean_text_for_speech("Build passed 🎉🚀") == "Build passed"

    def test_symbols_become_spaces(self) -> None:
        assert clean_text_for_speech("a*b#c") == "a b c"

    def test_keeps_speech_punctuation(self) -> None:
        assert clean_text_for_speech("Hi, it's done! Ready? Yes-no.") == (
            "Hi, it's done! Ready? Yes-no."
        )

    def test_collapses_whitespace(self) -> None:
        assert clean_text_for_speech("  one \n\t two  ") == "one two"

    def test_only_symbols_becomes_empty(self) -> None:
        assert clean_text_for_speech("🎉 *** 🚀") == ""


class TestSpeakEasyConstruction:
    """Test building the facade from configuration."""

    def test_bad_ttl_raises_at_construction(self, cache_dir: Path) -> None:
        config = _config(cache_dir, cache=CacheConfig(dir=cache_dir, ttl="1 week"))

        with pytest.raises(InvalidConfigurationError):
            SpeakEasy(config, providers=make_providers(), player=RecordingPlayer())

    def test_bad_size_raises_at_construction(self, cache_dir: Path) -> None:
        config = _config(cache_dir, cache=CacheConfig(dir=cache_dir, max_size="big"))

        with pytest.raises(InvalidConfigurationError):
            SpeakEasy(config, providers=make_providers(), player=RecordingPlayer())

    def test_cache_built_from_config(self, cache_dir: Path) -> None:
        speaker = SpeakEasy(
            _config(cache_dir), providers=make_providers(), player=RecordingPlayer()
        )

        assert speaker.cache is not None
        assert speaker.get_cache_dir() == cache_dir

    def test_disabled_cache_not_built(self, cache_dir: Path) -> None:
        config = _config(cache_dir, cache=CacheConfig(enabled=False, dir=cache_dir))

        speaker = SpeakEasy(config, providers=make_providers(), player=RecordingPlayer())

        assert speaker.cache is None
        assert not cache_dir.exists()

    def test_pipeline_uses_config(self, cache_dir: Path, tmp_path: Path) -> None:
        config = _config(cache_dir, rate=220, temp_dir=tmp_path, provider_timeout=5.0)

        speaker = SpeakEasy(config, providers=make_providers(), player=RecordingPlayer())

        assert speaker.pipeline.rate == 220
        assert speaker.pipeline.default_provider == "openai"
        assert speaker.pipeline.temp_dir == tmp_path
        assert speaker.pipeline.provider_timeout == 5.0


class TestSpeakEasySpeak:
    """Test speaking through the queue."""

    @pytest.mark.asyncio
    async def test_speak_uses_configured_provider_and_cache(self, cache_dir: Path) -> None:
        providers = make_providers()
        speaker = SpeakEasy(
            _config(cache_dir), providers=providers, player=RecordingPlayer()
        )

        first = await speaker.speak("Deploy complete ✅")
        second = await speaker.speak("deploy complete")

        assert first.provider == "openai"
        assert second.cached is True
        assert providers[ProviderName.OPENAI].calls[0][0] == "Deploy complete"

    @pytest.mark.asyncio
    async def test_empty_text_rejected(self, cache_dir: Path) -> None:
        speaker = SpeakEasy(
            _config(cache_dir), providers=make_providers(), player=RecordingPlayer()
        )

        with pytest.raises(ValueError, match="Text cannot be empty"):
            await speaker.speak("🎉")

    @pytest.mark.asyncio
    async def test_unknown_priority_rejected(self, cache_dir: Path) -> None:
        speaker = SpeakEasy(
            _config(cache_dir), providers=make_providers(), player=RecordingPlayer()
        )

        with pytest.raises(ValueError):
            await speaker.speak("hi", priority="urgent")

    @pytest.mark.asyncio
    async def test_priority_order_for_concurrent_calls(self, cache_dir: Path) -> None:
        providers = make_providers()
        speaker = SpeakEasy(
            _config(cache_dir), providers=providers, player=RecordingPlayer()
        )

        await asyncio.gather(
            speaker.speak("A"),
            speaker.speak("B", priority="high"),
            speaker.speak("C"),
        )

        assert [call[0] for call in providers[ProviderName.OPENAI].calls] == [
            "B",
            "A",
            "C",
        ]

    @pytest.mark.asyncio
    async def test_interrupt_stops_current_playback(self, cache_dir: Path) -> None:
        player = RecordingPlayer(delay=0.05)
        speaker = SpeakEasy(_config(cache_dir), providers=make_providers(), player=player)

        first = asyncio.create_task(speaker.speak("first"))
        await asyncio.sleep(0.01)
        await speaker.speak("second", interrupt=True)
        await first

        assert player.stop_calls == 1

    @pytest.mark.asyncio
    async def test_interrupt_when_idle_does_not_stop(self, cache_dir: Path) -> None:
        player = RecordingPlayer()
        speaker = SpeakEasy(_config(cache_dir), providers=make_providers(), player=player)

        await speaker.speak("hello", interrupt=True)

        assert player.stop_calls == 0

    @pytest.mark.asyncio
    async def test_silent_request(self, cache_dir: Path) -> None:
        player = RecordingPlayer()
        speaker = SpeakEasy(_config(cache_dir), providers=make_providers(), player=player)

        result = await speaker.speak("hello", silent=True)

        assert result.played is False
        assert player.played == []
        assert result.artifact_path.exists()


class TestSpeakEasyCacheControls:
    """Test cache management through the facade."""

    @pytest.mark.asyncio
    async def test_disable_and_enable_cache(self, cache_dir: Path) -> None:
        providers = make_providers()
        speaker = SpeakEasy(
            _config(cache_dir), providers=providers, player=RecordingPlayer()
        )

        speaker.disable_cache()
        await speaker.speak("hello")
        await speaker.speak("hello")
        assert speaker.cache is None
        assert len(providers[ProviderName.OPENAI].calls) == 2

        speaker.enable_cache()
        await speaker.speak("hello")
        await speaker.speak("hello")
        assert len(providers[ProviderName.OPENAI].calls) == 3
        assert speaker.get_cache_stats().hits == 1

    def test_enable_cache_builds_cache_when_started_disabled(self, cache_dir: Path) -> None:
        config = _config(cache_dir, cache=CacheConfig(enabled=False, dir=cache_dir))
        speaker = SpeakEasy(config, providers=make_providers(), player=RecordingPlayer())

        speaker.enable_cache()

        assert isinstance(speaker.cache, TTSCache)
        assert speaker.pipeline.cache is speaker.cache

    @pytest.mark.asyncio
    async def test_clear_and_cleanup(self, cache_dir: Path) -> None:
        speaker = SpeakEasy(
            _config(cache_dir), providers=make_providers(), player=RecordingPlayer()
        )
        await speaker.speak("one")

        assert speaker.cleanup_cache() == 0
        speaker.clear_cache()

        assert speaker.get_cache_stats().total_entries == 0

    def test_cache_methods_without_cache(self, cache_dir: Path) -> None:
        config = _config(cache_dir, cache=CacheConfig(enabled=False, dir=cache_dir))
        speaker = SpeakEasy(config, providers=make_providers(), player=RecordingPlayer())

        speaker.clear_cache()
        assert speaker.cleanup_cache() == 0
        assert speaker.get_cache_stats() is None
        assert speaker.get_cache_dir() is None


class TestSpeakEasyQueueControls:
    """Test queue management through the facade."""

    @pytest.mark.asyncio
    async def test_queue_status_and_clear(self, cache_dir: Path) -> None:
        player = RecordingPlayer(delay=0.05)
        speaker = SpeakEasy(_config(cache_dir), providers=make_providers(), player=player)

        first = asyncio.create_task(speaker.speak("first"))
        second = asyncio.create_task(speaker.speak("second"))
        await asyncio.sleep(0.01)

        status = speaker.queue_status()
        assert status["current"]["text"] == "first"
        assert [item["text"] for item in status["waiting"]] == ["second"]

        assert speaker.clear_queue() == 1
        await first
        with pytest.raises(asyncio.CancelledError):
            await second

    def test_stop_speaking_when_idle(self, cache_dir: Path) -> None:
        speaker = SpeakEasy(
            _config(cache_dir), providers=make_providers(), player=RecordingPlayer()
        )
        assert speaker.stop_speaking() is False
