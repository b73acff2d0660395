"""Configuration management for speakeasy.

Loads configuration from ~/.config/speakeasy/config.toml.
Priority chain: CLI flags > env vars > config file > built-in defaults.
"""

import os
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_DIR = Path.home() / ".config" / "speakeasy"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_CONFIG = """\
# speakeasy configuration

[defaults]
# Provider: "system" (OS built-in), "openai", "elevenlabs", "groq"
provider = "system"

# Speech rate in words per minute
rate = 180

# Playback volume (0.0-1.0)
volume = 0.7

# Accepted for compatibility; the fallback order is always
# system -> openai -> elevenlabs -> groq
fallback_order = ["system", "openai", "elevenlabs", "groq"]

# Directory for transient audio files (defaults to the system temp dir)
# temp_dir = "/tmp/speakeasy"

[providers.system]
voice = "Samantha"

[providers.openai]
voice = "nova"
model = "tts-1"

[providers.elevenlabs]
voice = "EXAVITQu4vr4xnSDxMaL"
model = "eleven_multilingual_v2"

[providers.groq]
voice = "Celeste-PlayAI"
model = "playai-tts"

[cache]
# Cache synthesized audio from remote providers
enabled = true

# Entry lifetime: number (ms) or string such as "7d", "12h", "30m"
ttl = "7d"

# Total size budget: number (bytes) or string such as "100MB", "1GB"
# max_size = "100MB"

# Cache directory (defaults to ~/.cache/speakeasy)
# dir = "~/.cache/speakeasy"

[timeouts]
# Seconds to wait for a provider before falling back
provider = 30

# API keys may be set here or through environment variables:
#   OPENAI_API_KEY      - OpenAI provider
#   ELEVENLABS_API_KEY  - ElevenLabs provider
#   GROQ_API_KEY        - Groq provider
"""


@dataclass(frozen=True)
class ProviderConfig:
    """Settings for a single TTS provider."""

    voice: str
    model: str | None = None
    api_key: str | None = None


@dataclass(frozen=True)
class CacheConfig:
    """Audio cache configuration."""

    enabled: bool = True
    ttl: str | int | float | None = "7d"
    max_size: str | int | None = None
    dir: Path | None = None


@dataclass(frozen=True)
class SpeakEasyConfig:
    """Top-level speakeasy configuration."""

    provider: str = "system"
    rate: int | float = 180
    volume: float = 0.7
    fallback_order: tuple[str, ...] = ("system", "openai", "elevenlabs", "groq")
    temp_dir: Path | None = None
    provider_timeout: float | None = 30.0
    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    cache: CacheConfig = field(default_factory=CacheConfig)

    def provider_config(self, name: str) -> ProviderConfig:
        """Return settings for a provider, falling back to built-in defaults."""
        if name in self.providers:
            return self.providers[name]
        return DEFAULT_PROVIDERS.get(name, ProviderConfig(voice=""))


DEFAULT_PROVIDERS: dict[str, ProviderConfig] = {
    "system": ProviderConfig(voice="Samantha"),
    "openai": ProviderConfig(voice="nova", model="tts-1"),
    "elevenlabs": ProviderConfig(
        voice="EXAVITQu4vr4xnSDxMaL", model="eleven_multilingual_v2"
    ),
    "groq": ProviderConfig(voice="Celeste-PlayAI", model="playai-tts"),
}

API_KEY_ENV_VARS = {
    "openai": "OPENAI_API_KEY",
    "elevenlabs": "ELEVENLABS_API_KEY",
    "groq": "GROQ_API_KEY",
}

_cached_config: SpeakEasyConfig | None = None


def generate_config() -> Path:
    """Generate default config file at ~/.config/speakeasy/config.toml."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(DEFAULT_CONFIG)
    return CONFIG_PATH


def _optional_path(value: str | None) -> Path | None:
    return Path(value).expanduser() if value else None


def parse_config(data: dict) -> SpeakEasyConfig:
    """Build a SpeakEasyConfig from parsed TOML data with env var overrides.

    Args:
        data: Parsed TOML document

    Returns:
        Resolved configuration

    Raises:
        ValueError: If a value has the wrong type
    """
    defaults = data.get("defaults", {})
    provider_tables = data.get("providers", {})
    cache = data.get("cache", {})
    timeouts = data.get("timeouts", {})

    providers: dict[str, ProviderConfig] = {}
    for name, default in DEFAULT_PROVIDERS.items():
        table = provider_tables.get(name, {})
        if not isinstance(table, dict):
            raise ValueError(f"providers.{name} must be a table")
        api_key = None
        if name in API_KEY_ENV_VARS:
            # Env vars override config file values
            api_key = os.getenv(API_KEY_ENV_VARS[name]) or table.get("api_key")
        providers[name] = ProviderConfig(
            voice=table.get("voice", default.voice),
            model=table.get("model", default.model),
            api_key=api_key,
        )

    rate = defaults.get("rate", 180)
    if isinstance(rate, bool) or not isinstance(rate, (int, float)) or rate <= 0:
        raise ValueError(f"defaults.rate must be a positive number, got {rate!r}")

    volume = defaults.get("volume", 0.7)
    if isinstance(volume, bool) or not isinstance(volume, (int, float)):
        raise ValueError(f"defaults.volume must be a number, got {volume!r}")

    timeout = timeouts.get("provider", 30.0)
    if timeout is not None and (
        isinstance(timeout, bool) or not isinstance(timeout, (int, float))
    ):
        raise ValueError(f"timeouts.provider must be a number, got {timeout!r}")

    return SpeakEasyConfig(
        provider=os.getenv("SPEAKEASY_PROVIDER", defaults.get("provider", "system")),
        rate=rate,
        volume=float(volume),
        fallback_order=tuple(
            defaults.get("fallback_order", SpeakEasyConfig.fallback_order)
        ),
        temp_dir=_optional_path(defaults.get("temp_dir")),
        provider_timeout=float(timeout) if timeout else None,
        providers=providers,
        cache=CacheConfig(
            enabled=bool(cache.get("enabled", True)),
            ttl=cache.get("ttl", "7d"),
            max_size=cache.get("max_size"),
            dir=_optional_path(os.getenv("SPEAKEASY_CACHE_DIR", cache.get("dir"))),
        ),
    )


def load_config(path: Path | None = None) -> SpeakEasyConfig:
    """Load configuration from config file with env var overrides.

    A missing config file yields the built-in defaults.

    Args:
        path: Config file to read (defaults to ~/.config/speakeasy/config.toml)

    Returns:
        Loaded and validated SpeakEasyConfig.

    Raises:
        SystemExit: If the config file is invalid.
    """
    global _cached_config
    if path is None and _cached_config is not None:
        return _cached_config

    config_path = path or CONFIG_PATH
    data: dict = {}
    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            print(f"Invalid config file {config_path}: {e}", file=sys.stderr)
            print("Fix it or delete it to use the defaults.", file=sys.stderr)
            raise SystemExit(1) from e

    try:
        config = parse_config(data)
    except ValueError as e:
        print(f"Invalid config value in {config_path}: {e}", file=sys.stderr)
        raise SystemExit(1) from e

    if path is None:
        _cached_config = config
    return config


def reset_config_cache() -> None:
    """Forget the cached configuration so the next load re-reads the file."""
    global _cached_config
    _cached_config = None
