"""Data models for cache storage."""

import getpass
import os
import platform
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path


@dataclass
class CacheEntry:
    """Cache entry referencing a stored audio artifact.

    Attributes:
        cache_key: Deterministic key, also the artifact file stem
        artifact_path: Path to the cached audio file
        provider: TTS provider name (e.g., "openai", "elevenlabs")
        voice: Voice identifier used for synthesis
        rate: Speech rate in words per minute
        text: Text (after speech cleanup) that produced the audio
        timestamp: Creation time in milliseconds since the epoch
        size: Artifact size in bytes
    """

    cache_key: str
    artifact_path: Path
    provider: str
    voice: str
    rate: float
    text: str
    timestamp: float
    size: int


@dataclass(frozen=True)
class Provenance:
    """Where and how a cache entry was produced."""

    model: str | None = None
    source: str | None = None
    session_id: str | None = None
    process_id: int | None = None
    hostname: str | None = None
    user: str | None = None
    working_directory: str | None = None
    command_line: str | None = None

    @classmethod
    def capture(
        cls,
        source: str | None = None,
        session_id: str | None = None,
        model: str | None = None,
    ) -> "Provenance":
        """Snapshot the current process as the origin of a request."""
        try:
            user = getpass.getuser()
        except (KeyError, OSError):
            user = None
        return cls(
            model=model,
            source=source,
            session_id=session_id,
            process_id=os.getpid(),
            hostname=platform.node() or None,
            user=user,
            working_directory=os.getcwd(),
            command_line=" ".join(sys.argv),
        )


@dataclass(frozen=True)
class CacheMetadata:
    """Queryable record stored alongside every cache entry.

    Created together with its entry and never mutated afterwards.
    """

    cache_key: str
    artifact_path: Path
    provider: str
    voice: str
    rate: float
    text: str
    timestamp: float
    size: int
    model: str | None = None
    source: str | None = None
    session_id: str | None = None
    process_id: int | None = None
    hostname: str | None = None
    user: str | None = None
    working_directory: str | None = None
    command_line: str | None = None
    duration_ms: float | None = None
    success: bool = True
    error_message: str | None = None

    @classmethod
    def from_entry(
        cls,
        entry: CacheEntry,
        provenance: Provenance | None = None,
        duration_ms: float | None = None,
        success: bool = True,
        error_message: str | None = None,
    ) -> "CacheMetadata":
        return cls(
            **asdict(entry),
            **asdict(provenance or Provenance()),
            duration_ms=duration_ms,
            success=success,
            error_message=error_message,
        )

    def to_entry(self) -> CacheEntry:
        return CacheEntry(
            cache_key=self.cache_key,
            artifact_path=self.artifact_path,
            provider=self.provider,
            voice=self.voice,
            rate=self.rate,
            text=self.text,
            timestamp=self.timestamp,
            size=self.size,
        )


@dataclass
class CacheQuery:
    """Filters for metadata searches. Unset fields match everything."""

    text: str | None = None
    provider: str | None = None
    model: str | None = None
    source: str | None = None
    min_size: int | None = None
    max_size: int | None = None
    since: float | None = None
    until: float | None = None
    success: bool | None = None
    session_id: str | None = None
    user: str | None = None
    working_directory: str | None = None

    def matches(self, metadata: CacheMetadata) -> bool:
        if self.text is not None and self.text.lower() not in metadata.text.lower():
            return False
        exact = {
            "provider": self.provider,
            "model": self.model,
            "source": self.source,
            "session_id": self.session_id,
            "user": self.user,
            "working_directory": self.working_directory,
        }
        for name, expected in exact.items():
            if expected is not None and getattr(metadata, name) != expected:
                return False
        if self.min_size is not None and metadata.size < self.min_size:
            return False
        if self.max_size is not None and metadata.size > self.max_size:
            return False
        if self.since is not None and metadata.timestamp < self.since:
            return False
        if self.until is not None and metadata.timestamp > self.until:
            return False
        if self.success is not None and metadata.success != self.success:
            return False
        return True


@dataclass
class CacheStats:
    """Aggregate view over the metadata index and lookup counters."""

    total_entries: int = 0
    total_size: int = 0
    hits: int = 0
    misses: int = 0
    hit_rate: float = 0.0
    avg_size: float = 0.0
    earliest: float | None = None
    latest: float | None = None
    providers: dict[str, int] = field(default_factory=dict)
    models: dict[str, int] = field(default_factory=dict)
    sources: dict[str, int] = field(default_factory=dict)
