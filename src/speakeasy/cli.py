"""Typer CLI definition for speakeasy."""

import asyncio
import logging
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path

import typer

from .audio.player import AudioPlayer
from .cache.manager import TTSCache
from .cache.models import CacheMetadata
from .config import SpeakEasyConfig, generate_config, load_config
from .core import SpeakEasy
from .tts.errors import (
    AllProvidersExhaustedError,
    InvalidConfigurationError,
    TTSError,
)

app = typer.Typer(help="Speak text with provider fallback and an audio cache")


def process_text_input(text: str | None) -> str:
    """Process text input and return the text to speak.

    Args:
        text: Optional text input from CLI argument, file or stdin

    Returns:
        The text to speak

    Raises:
        ValueError: If no text is provided
    """
    if text is None or not text.strip():
        raise ValueError("No text provided")

    return text


def _fail(message: str, error: Exception, debug: bool) -> None:
    if debug:
        typer.echo(f"Debug - {message}: {error!r}", err=True)
    else:
        typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(1) from None


def _format_time(timestamp_ms: float | None) -> str:
    if timestamp_ms is None:
        return "-"
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def _format_size(size: float) -> str:
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def _echo_entry(metadata: CacheMetadata) -> None:
    text = metadata.text[:50] + "..." if len(metadata.text) > 50 else metadata.text
    typer.echo(
        f"{metadata.cache_key}  {_format_time(metadata.timestamp)}  "
        f"{metadata.provider}/{metadata.voice}  {_format_size(metadata.size)}  {text}"
    )


def _open_cache(config: SpeakEasyConfig) -> TTSCache:
    return TTSCache(
        cache_dir=config.cache.dir, ttl=config.cache.ttl, max_size=config.cache.max_size
    )


def _run_cache_command(
    config: SpeakEasyConfig,
    stats: bool,
    clear: bool,
    cleanup: bool,
    find: str | None,
    recent: int | None,
    entry_id: str | None,
    play: str | None,
) -> None:
    cache = _open_cache(config)

    if stats:
        s = cache.get_stats()
        typer.echo("=== Cache Stats ===")
        typer.echo(f"Directory: {cache.get_cache_dir()}")
        typer.echo(f"Entries: {s.total_entries}")
        typer.echo(f"Total size: {_format_size(s.total_size)}")
        typer.echo(f"Average size: {_format_size(s.avg_size)}")
        typer.echo(f"Hits: {s.hits}  Misses: {s.misses}  Hit rate: {s.hit_rate:.1%}")
        typer.echo(f"Oldest: {_format_time(s.earliest)}")
        typer.echo(f"Newest: {_format_time(s.latest)}")
        for label, counts in (
            ("Providers", s.providers),
            ("Models", s.models),
            ("Sources", s.sources),
        ):
            if counts:
                summary = ", ".join(f"{k}: {v}" for k, v in sorted(counts.items()))
                typer.echo(f"{label}: {summary}")
        return

    if clear:
        cache.clear()
        typer.echo("Cache cleared")
        return

    if cleanup:
        removed = cache.cleanup()
        typer.echo(f"Removed {removed} expired entries")
        return

    if find is not None:
        matches = cache.find_by_text(find)
        if not matches:
            typer.echo(f"No cached entries match '{find}'")
        for metadata in matches:
            _echo_entry(metadata)
        return

    if recent is not None:
        entries = cache.get_recent(recent)
        if not entries:
            typer.echo("Cache is empty")
        for metadata in entries:
            _echo_entry(metadata)
        return

    key = entry_id or play
    metadata = cache.get_metadata(key)
    if metadata is None:
        raise ValueError(f"No cache entry with id {key}")

    if entry_id:
        typer.echo(f"ID: {metadata.cache_key}")
        typer.echo(f"Text: {metadata.text}")
        typer.echo(f"Provider: {metadata.provider}")
        typer.echo(f"Voice: {metadata.voice}")
        typer.echo(f"Model: {metadata.model or 'unknown'}")
        typer.echo(f"Rate: {metadata.rate}")
        typer.echo(f"Size: {_format_size(metadata.size)}")
        typer.echo(f"Created: {_format_time(metadata.timestamp)}")
        typer.echo(f"Source: {metadata.source or 'unknown'}")
        if metadata.duration_ms is not None:
            typer.echo(f"Generation time: {metadata.duration_ms:.0f} ms")
        typer.echo(f"File: {metadata.artifact_path}")
        return

    asyncio.run(AudioPlayer(volume=config.volume).play_file(metadata.artifact_path))


@app.command()
def speak(
    text: str | None = typer.Argument(None, help="Text to convert to speech"),
    file: Path | None = typer.Option(None, "-f", "--file", help="Read text from file"),
    provider: str | None = typer.Option(
        None, "-p", "--provider", help="TTS provider (from config if omitted)"
    ),
    rate: int | None = typer.Option(
        None, "-r", "--rate", help="Speech rate in words per minute"
    ),
    priority: str = typer.Option(
        "normal", "--priority", help="Queue priority: high, normal or low"
    ),
    interrupt: bool = typer.Option(
        False, "--interrupt", "-i", help="Interrupt current speech"
    ),
    silent: bool = typer.Option(
        False, "--silent", help="Synthesize and cache without playing"
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Disable audio caching"),
    debug: bool = typer.Option(
        False, "--debug", help="Show verbose error messages and cache activity"
    ),
    cache_stats: bool = typer.Option(
        False, "--cache-stats", help="Show cache statistics and exit"
    ),
    cache_clear: bool = typer.Option(
        False, "--cache-clear", help="Delete every cache entry and exit"
    ),
    cache_cleanup: bool = typer.Option(
        False, "--cache-cleanup", help="Remove expired cache entries and exit"
    ),
    cache_find: str | None = typer.Option(
        None, "--cache-find", help="List cache entries whose text contains TEXT"
    ),
    cache_recent: int | None = typer.Option(
        None, "--cache-recent", help="List the N most recent cache entries"
    ),
    cache_id: str | None = typer.Option(
        None, "--cache-id", help="Show details of a cache entry"
    ),
    cache_play: str | None = typer.Option(
        None, "--cache-play", help="Play a cache entry by id"
    ),
    init_config: bool = typer.Option(
        False, "--init-config", help="Write the default config file and exit"
    ),
) -> None:
    """Speak text with provider fallback and an audio cache."""
    # Configure logging for debug mode
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    if init_config:
        path = generate_config()
        typer.echo(f"Config written to {path}")
        raise typer.Exit(0)

    config = load_config()

    if (
        cache_stats
        or cache_clear
        or cache_cleanup
        or cache_find is not None
        or cache_recent is not None
        or cache_id
        or cache_play
    ):
        try:
            _run_cache_command(
                config,
                cache_stats,
                cache_clear,
                cache_cleanup,
                cache_find,
                cache_recent,
                cache_id,
                cache_play,
            )
        except (TTSError, OSError, RuntimeError, ValueError) as e:
            _fail("Cache command failed", e, debug)
        raise typer.Exit(0)

    # Get text from argument, file, or stdin (in priority order)
    if text is None:
        if file:
            try:
                text = file.read_text()
            except FileNotFoundError as e:
                if debug:
                    typer.echo(f"Debug - File not found: {file} ({e!r})", err=True)
                else:
                    typer.echo(f"Error: File not found: {file}", err=True)
                raise typer.Exit(1) from None
            except PermissionError as e:
                if debug:
                    typer.echo(f"Debug - Permission denied: {file} ({e!r})", err=True)
                else:
                    typer.echo(
                        f"Error: Permission denied reading file: {file}", err=True
                    )
                raise typer.Exit(1) from None
            except UnicodeDecodeError as e:
                if debug:
                    typer.echo(f"Debug - Decode error: {file} ({e!r})", err=True)
                else:
                    typer.echo(
                        f"Error: Unable to decode file as text: {file}", err=True
                    )
                raise typer.Exit(1) from None
        elif not sys.stdin.isatty():
            text = sys.stdin.read().strip()

    # Process text input
    try:
        speech_text = process_text_input(text)
    except ValueError as e:
        _fail("Text processing error", e, debug)

    # CLI flags override config values
    overrides = {}
    if provider:
        overrides["provider"] = provider
    if rate:
        overrides["rate"] = rate
    if no_cache:
        overrides["cache"] = replace(config.cache, enabled=False)
    if overrides:
        config = replace(config, **overrides)

    try:
        speaker = SpeakEasy(config, source="cli")
        result = asyncio.run(
            speaker.speak(
                speech_text, priority=priority, interrupt=interrupt, silent=silent
            )
        )
        if debug:
            typer.echo(
                f"Debug - Spoke with {result.provider} "
                f"(cached={result.cached}, played={result.played})",
                err=True,
            )
    except InvalidConfigurationError as e:
        _fail("Configuration error", e, debug)
    except AllProvidersExhaustedError as e:
        _fail("All providers failed", e, debug)
    except RuntimeError as e:
        if debug:
            typer.echo(f"Debug - Audio playback error: {e!r}", err=True)
        else:
            typer.echo(f"Error: Failed to play audio: {e}", err=True)
        raise typer.Exit(1) from None
    except ValueError as e:
        _fail("Invalid input", e, debug)
    except Exception as e:
        if debug:
            typer.echo(f"Debug - Unexpected error: {e!r}", err=True)
        else:
            typer.echo("Error: An unexpected error occurred", err=True)
        raise typer.Exit(1) from None
