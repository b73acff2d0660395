"""Deterministic cache keys for synthesis requests."""

import hashlib

KEY_LENGTH = 16


def normalize_text(text: str) -> str:
    """Trim surrounding whitespace and lowercase."""
    return text.strip().lower()


def generate_cache_key(text: str, provider: str, voice: str, rate: int | float) -> str:
    """Generate the cache key for a (text, provider, voice, rate) request.

    The same normalized tuple always produces the same key, on any machine and
    across restarts. The key doubles as the artifact's file stem.

    Args:
        text: Raw input text (normalized before hashing)
        provider: Provider name
        voice: Voice identifier
        rate: Speech rate in words per minute

    Returns:
        16-character hex string

    Raises:
        ValueError: If any input parameter is None
    """
    if text is None or provider is None or voice is None or rate is None:
        raise ValueError("All parameters (text, provider, voice, rate) must be non-None")

    key_data = f"{normalize_text(text)}|{provider}|{voice}|{rate}"
    return hashlib.sha256(key_data.encode("utf-8")).hexdigest()[:KEY_LENGTH]
