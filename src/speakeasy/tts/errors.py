"""Custom TTS exceptions."""


class TTSError(Exception):
    """Base exception for TTS-related errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class ConfigurationError(TTSError):
    """Exception raised when a selected provider is not configured.

    This typically occurs when:
    - API key is missing or too short to be valid
    - The platform has no usable system voice

    Triggers fallback to the next provider.
    """

    pass


class ProviderError(TTSError):
    """Exception raised for provider communication errors.

    This typically occurs when:
    - API key is rejected (401) or lacks permissions (403)
    - Rate limits are exceeded (429 error)
    - Request format is invalid (4xx errors)
    - API server is unavailable (5xx errors) or unreachable
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.provider = provider
        self.status_code = status_code


class EmptyResultError(ProviderError):
    """Provider reported success but returned no audio payload."""

    pass


class CacheIOError(TTSError):
    """Failure reading or writing the artifact store, index or stats file.

    Never propagated past the cache's public methods.
    """

    pass


class AllProvidersExhaustedError(TTSError):
    """Every provider, including the system voice fallback, failed.

    The message uses the provider-described text when given, so users see the
    same hints a single provider failure would show them.
    """

    def __init__(
        self,
        last_error: Exception,
        fallback_error: Exception | None = None,
        attempts: list[tuple[str, str]] | None = None,
        last_message: str | None = None,
        fallback_message: str | None = None,
    ) -> None:
        message = f"All providers failed. Last error: {last_message or last_error}"
        if fallback_error is not None:
            message += (
                f" (system fallback also failed: {fallback_message or fallback_error})"
            )
        super().__init__(message, last_error)
        self.last_error = last_error
        self.fallback_error = fallback_error
        self.attempts = attempts or []


class InvalidConfigurationError(TTSError, ValueError):
    """Malformed TTL or size value supplied at construction time."""

    pass
