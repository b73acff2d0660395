"""Groq text-to-speech provider implementation."""

import httpx

from .base import ProviderName
from .openai import OpenAICompatibleProvider


class GroqProvider(OpenAICompatibleProvider):
    """Groq TTS provider using its OpenAI-compatible speech endpoint."""

    name = ProviderName.GROQ
    endpoint = "https://api.groq.com/openai/v1/audio/speech"
    display_name = "Groq"
    key_url = "https://console.groq.com/keys"
    audio_format = "wav"
    response_format = "wav"
    model = "playai-tts"

    def __init__(
        self,
        api_key: str | None = None,
        voice: str = "Celeste-PlayAI",
        model: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(api_key, voice, model, client, timeout)
