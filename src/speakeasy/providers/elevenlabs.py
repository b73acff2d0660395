"""ElevenLabs text-to-speech provider implementation."""

import asyncio

from elevenlabs.client import ElevenLabs

from ..tts.errors import ConfigurationError, EmptyResultError, ProviderError
from ..tts.models import VoiceSettings
from .base import ProviderName, TTSProvider
from .openai import api_key_looks_valid


class ElevenLabsProvider(TTSProvider):
    """ElevenLabs TTS provider implementation.

    Synthesizes speech through the ElevenLabs SDK. The SDK client is created
    on first use so that checking configuration never touches the network.
    """

    name = ProviderName.ELEVENLABS
    audio_format = "mp3"
    model = "eleven_multilingual_v2"

    def __init__(
        self,
        api_key: str | None = None,
        voice: str = "EXAVITQu4vr4xnSDxMaL",
        model: str | None = None,
        voice_settings: VoiceSettings | None = None,
    ) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key
            voice: Default voice ID
            model: ElevenLabs model ID
            voice_settings: Stability/similarity settings sent with each request
        """
        super().__init__(voice)
        self._api_key = api_key
        if model:
            self.model = model
        self.voice_settings = voice_settings or VoiceSettings()
        self._client: ElevenLabs | None = None

    def is_configured(self) -> bool:
        return api_key_looks_valid(self._api_key)

    def _get_client(self) -> ElevenLabs:
        if self._client is None:
            try:
                self._client = ElevenLabs(api_key=self._api_key)
            except Exception as e:
                raise ConfigurationError(
                    f"Failed to initialize ElevenLabs client: {e}", e
                ) from e
        return self._client

    def _classify(self, error: Exception) -> ProviderError:
        status = getattr(error, "status_code", None)
        text = str(error)
        if status == 401 or "unauthorized" in text.lower() or "401" in text:
            if "model_deprecated" in text:
                message = "ElevenLabs API error: Model deprecated - update the model ID"
            else:
                message = "ElevenLabs API error: Invalid API key"
            status = 401
        elif status == 403:
            message = (
                "ElevenLabs API error: Access forbidden - check your API key permissions"
            )
        elif status == 422:
            message = (
                "ElevenLabs API error: Invalid voice ID or parameters - "
                "check your configuration"
            )
        elif status == 429 or "429" in text:
            message = "ElevenLabs API error: Rate limit exceeded"
            status = 429
        else:
            message = f"ElevenLabs TTS failed: {error}"
        return ProviderError(
            message, provider=self.name.value, status_code=status, original_error=error
        )

    async def synthesize(self, text: str, voice: str, rate: int | float) -> bytes:
        """Convert text to speech audio bytes.

        Args:
            text: Text to convert to speech
            voice: Voice ID to use for synthesis
            rate: Speech rate in words per minute (ElevenLabs paces itself)

        Returns:
            Audio data as bytes (MP3 format)

        Raises:
            ConfigurationError: If no usable API key is configured
            ProviderError: If API call fails
            EmptyResultError: If the API returned no audio
        """
        if not self.is_configured():
            raise ConfigurationError("ElevenLabs API key is required")

        client = self._get_client()
        voice_id = voice or self.voice

        # Run synchronous ElevenLabs client in thread to avoid blocking event loop
        def _sync_convert() -> bytes:
            audio_generator = client.text_to_speech.convert(
                text=text.strip(),
                voice_id=voice_id,
                model_id=self.model,
                voice_settings=self.voice_settings.to_dict(),
            )
            # Collect all audio chunks
            return b"".join(audio_generator)

        try:
            audio_bytes = await asyncio.to_thread(_sync_convert)
        except Exception as e:
            raise self._classify(e) from e

        if not audio_bytes:
            raise EmptyResultError(
                "No audio data received from ElevenLabs API", provider=self.name.value
            )

        return audio_bytes

    def describe_error(self, error: Exception) -> str:
        message = str(error)
        if "Invalid API key" in message or "API key is required" in message:
            return (
                "🔑 Invalid ElevenLabs API key. Get yours at: "
                "https://elevenlabs.io/app/settings/api-keys"
            )
        if "Access forbidden" in message:
            return "🔒 ElevenLabs access forbidden. Ensure your API key has TTS permissions"
        if "Rate limit" in message:
            return (
                "⏰ ElevenLabs rate limit exceeded. Try again later or use system "
                'voice: `speakeasy "text" --provider system`'
            )
        return f"ElevenLabs TTS failed: {message}"
