"""OpenAI text-to-speech provider implementation."""

import logging

import httpx

from ..tts.errors import ConfigurationError, EmptyResultError, ProviderError
from .base import ProviderName, TTSProvider

logger = logging.getLogger(__name__)

MIN_API_KEY_LENGTH = 10

# Speech speed 1.0 corresponds to 200 words per minute
WPM_PER_SPEED_UNIT = 200


def api_key_looks_valid(api_key: str | None) -> bool:
    return bool(api_key) and len(api_key) > MIN_API_KEY_LENGTH


class OpenAICompatibleProvider(TTSProvider):
    """Provider for services exposing an OpenAI-style ``/audio/speech`` endpoint.

    Subclasses set the endpoint, display name and defaults.
    """

    endpoint: str
    display_name: str
    key_url: str
    response_format: str | None = None

    def __init__(
        self,
        api_key: str | None = None,
        voice: str = "",
        model: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the provider.

        Args:
            api_key: API key for the service
            voice: Default voice
            model: Model ID (defaults to the class default)
            client: Optional preconfigured HTTP client
            timeout: Per-request timeout in seconds
        """
        super().__init__(voice)
        self._api_key = api_key
        if model:
            self.model = model
        self._client = client
        self._timeout = timeout

    def is_configured(self) -> bool:
        return api_key_looks_valid(self._api_key)

    def _payload(self, text: str, voice: str, rate: int | float) -> dict:
        payload = {
            "model": self.model,
            "voice": voice or self.voice,
            "input": text,
            "speed": rate / WPM_PER_SPEED_UNIT,
        }
        if self.response_format:
            payload["response_format"] = self.response_format
        return payload

    def _status_error(self, response: httpx.Response) -> ProviderError:
        status = response.status_code
        if status == 401:
            message = f"{self.display_name} API error: Invalid API key"
        elif status == 403:
            message = (
                f"{self.display_name} API error: Access forbidden - "
                "check your API key permissions"
            )
        elif status == 422:
            message = (
                f"{self.display_name} API error: Invalid voice ID or parameters - "
                "check your configuration"
            )
        elif status == 429:
            message = f"{self.display_name} API error: Rate limit exceeded"
        else:
            message = f"{self.display_name} API error: {status} {response.reason_phrase}"
        return ProviderError(message, provider=self.name.value, status_code=status)

    async def _post(self, payload: dict) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if self._client is not None:
            return await self._client.post(self.endpoint, json=payload, headers=headers)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(self.endpoint, json=payload, headers=headers)

    async def synthesize(self, text: str, voice: str, rate: int | float) -> bytes:
        """Convert text to speech audio bytes.

        Args:
            text: Text to convert to speech
            voice: Voice to use (falls back to the configured voice)
            rate: Speech rate in words per minute

        Returns:
            Audio data as bytes

        Raises:
            ConfigurationError: If no usable API key is configured
            ProviderError: If API call fails
            EmptyResultError: If the API returned no audio
        """
        if not self.is_configured():
            raise ConfigurationError(f"{self.display_name} API key is required")

        try:
            response = await self._post(self._payload(text, voice, rate))
        except httpx.HTTPError as e:
            raise ProviderError(
                f"{self.display_name} TTS failed: {e}",
                provider=self.name.value,
                original_error=e,
            ) from e

        if response.status_code >= 400:
            raise self._status_error(response)

        if not response.content:
            raise EmptyResultError(
                f"No audio content received from {self.display_name} API",
                provider=self.name.value,
                status_code=response.status_code,
            )

        logger.debug(f"{self.display_name} returned {len(response.content)} bytes")
        return response.content

    def describe_error(self, error: Exception) -> str:
        message = str(error)
        if "Invalid API key" in message or "API key is required" in message:
            return f"🔑 Invalid {self.display_name} API key. Get yours at: {self.key_url}"
        if "Access forbidden" in message:
            return (
                f"🔒 {self.display_name} access forbidden. "
                "Ensure your API key has TTS permissions"
            )
        if "Rate limit" in message:
            return (
                f"⏰ {self.display_name} rate limit exceeded. Try again later or use "
                'system voice: `speakeasy "text" --provider system`'
            )
        return f"{self.display_name} TTS failed: {message}"


class OpenAIProvider(OpenAICompatibleProvider):
    """OpenAI TTS provider implementation."""

    name = ProviderName.OPENAI
    endpoint = "https://api.openai.com/v1/audio/speech"
    display_name = "OpenAI"
    key_url = "https://platform.openai.com/api-keys"
    audio_format = "mp3"
    model = "tts-1"

    def __init__(
        self,
        api_key: str | None = None,
        voice: str = "nova",
        model: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(api_key, voice, model, client, timeout)
