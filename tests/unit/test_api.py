"""Unit tests for API module logic."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from speakeasy.api import say, speak
from speakeasy.config import CacheConfig, SpeakEasyConfig
from speakeasy.tts.models import SpeechResult


def _mock_speakeasy() -> MagicMock:
    speaker = MagicMock()
    speaker.speak = AsyncMock(return_value=SpeechResult(provider="openai", played=True))
    return MagicMock(return_value=speaker)


class TestSpeakParameterHandling:
    """Test speak function parameter processing logic."""

    @pytest.mark.asyncio
    async def test_speak_passes_queue_options(self) -> None:
        """Test speak forwards priority, interrupt and silent to the facade."""
        mock_class = _mock_speakeasy()
        config = SpeakEasyConfig()

        with patch("speakeasy.api.SpeakEasy", mock_class):
            result = await speak(
                "test", priority="high", interrupt=True, silent=True, config=config
            )

        assert result.provider == "openai"
        mock_class.assert_called_once_with(config)
        mock_class.return_value.speak.assert_called_once_with(
            "test", priority="high", interrupt=True, silent=True
        )

    @pytest.mark.asyncio
    async def test_provider_overrides_config(self) -> None:
        """Test an explicit provider replaces the configured default."""
        mock_class = _mock_speakeasy()

        with patch("speakeasy.api.SpeakEasy", mock_class):
            await speak("test", provider="groq", config=SpeakEasyConfig())

        used = mock_class.call_args.args[0]
        assert used.provider == "groq"

    @pytest.mark.asyncio
    async def test_cache_false_disables_cache(self) -> None:
        """Test cache=False turns the cache off without touching other settings."""
        mock_class = _mock_speakeasy()
        config = SpeakEasyConfig(cache=CacheConfig(ttl="1h"))

        with patch("speakeasy.api.SpeakEasy", mock_class):
            await speak("test", cache=False, config=config)

        used = mock_class.call_args.args[0]
        assert used.cache.enabled is False
        assert used.cache.ttl == "1h"
        assert config.cache.enabled is True

    @pytest.mark.asyncio
    async def test_config_loaded_when_not_given(self) -> None:
        """Test the config file is read when no config is passed."""
        mock_class = _mock_speakeasy()
        loaded = SpeakEasyConfig(provider="elevenlabs")

        with (
            patch("speakeasy.api.SpeakEasy", mock_class),
            patch("speakeasy.api.load_config", return_value=loaded) as mock_load,
        ):
            await speak("test")

        mock_load.assert_called_once_with()
        assert mock_class.call_args.args[0] is loaded

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   "])
    async def test_empty_text_rejected(self, text: str) -> None:
        """Test empty text is rejected before anything is built."""
        mock_class = _mock_speakeasy()

        with patch("speakeasy.api.SpeakEasy", mock_class):
            with pytest.raises(ValueError, match="Text cannot be empty"):
                await speak(text, config=SpeakEasyConfig())

        mock_class.assert_not_called()


class TestSay:
    """Test the say shorthand."""

    @pytest.mark.asyncio
    async def test_say_uses_normal_priority(self) -> None:
        mock_class = _mock_speakeasy()

        with patch("speakeasy.api.SpeakEasy", mock_class):
            await say("hello", provider="openai", config=SpeakEasyConfig())

        mock_class.return_value.speak.assert_called_once_with(
            "hello", priority="normal", interrupt=False, silent=False
        )
        assert mock_class.call_args.args[0].provider == "openai"
