"""Content-addressable cache of synthesized audio.

Orchestrates the artifact files, MetadataIndex (SQLite), StatsTracker and
EvictionPolicy so that identical synthesis requests reuse previously
generated audio instead of calling a paid provider again.
"""

import logging
import time
from collections import Counter
from collections.abc import Callable
from pathlib import Path

from ..tts.errors import CacheIOError
from . import get_cache_dir
from .eviction import EvictionPolicy
from .keys import generate_cache_key
from .limits import parse_ttl
from .models import CacheEntry, CacheMetadata, CacheQuery, CacheStats, Provenance
from .stats import StatsTracker
from .storage import MetadataIndex

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = ("mp3", "wav")


def _now_ms() -> float:
    return time.time() * 1000


class TTSCache:
    """High-level cache manager for TTS audio.

    Every public method is best-effort: storage faults are logged and turned
    into a miss, a ``None``/``False`` result or an empty list, never raised to
    the caller.

    Example:
        cache = TTSCache(Path("/tmp/speakeasy-cache"), ttl="7d", max_size="100mb")

        key = cache.generate_cache_key("Deploy complete", "openai", "nova", 180)
        entry = cache.get(key)
        if entry is None:
            audio = await provider.synthesize("Deploy complete", "nova", 180)
            entry = cache.set(
                key, audio, provider="openai", voice="nova", rate=180,
                text="Deploy complete",
            )
    """

    def __init__(
        self,
        cache_dir: Path | None = None,
        ttl: str | int | float | None = "7d",
        max_size: str | int | float | None = None,
        clock: Callable[[], float] | None = None,
    ):
        """Initialize the cache in the given directory.

        Args:
            cache_dir: Directory for artifacts, index and stats
                (defaults to ~/.cache/speakeasy)
            ttl: Entry lifetime, e.g. "7d" or milliseconds (None disables)
            max_size: Total artifact budget, e.g. "100mb" or bytes (None disables)
            clock: Callable returning the current time in milliseconds

        Raises:
            InvalidConfigurationError: If ttl or max_size is malformed
            CacheIOError: If the index cannot be created
        """
        # Parse limits first so bad config fails before touching the disk
        self.policy = EvictionPolicy(ttl=ttl, max_size=max_size)
        self._clock = clock or _now_ms

        self.cache_dir = Path(cache_dir) if cache_dir else get_cache_dir()
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheIOError(f"Failed to create cache directory: {e}", e) from e

        self.index = MetadataIndex(self.cache_dir)
        self.stats = StatsTracker(self.cache_dir)

        logger.debug(
            f"TTSCache initialized at {self.cache_dir} "
            f"(ttl_ms={self.policy.ttl_ms}, max_size={self.policy.max_size})"
        )

    @staticmethod
    def generate_cache_key(text: str, provider: str, voice: str, rate: int | float) -> str:
        return generate_cache_key(text, provider, voice, rate)

    def get_cache_dir(self) -> Path:
        return self.cache_dir

    def _record(self, hit: bool) -> None:
        try:
            if hit:
                self.stats.record_hit()
            else:
                self.stats.record_miss()
        except CacheIOError as e:
            logger.error(f"Failed to persist cache stats: {e}")

    def _remove(self, metadata: CacheMetadata) -> None:
        """Remove an artifact file and its index record."""
        try:
            metadata.artifact_path.unlink(missing_ok=True)
        except OSError as e:
            raise CacheIOError(f"Failed to delete {metadata.artifact_path}: {e}", e) from e
        self.index.delete(metadata.cache_key)

    def get(self, key: str) -> CacheEntry | None:
        """Look up a cache entry by key.

        Expired entries and records whose artifact file has disappeared are
        purged as a side effect and reported as a miss. Every call counts as
        either a hit or a miss.

        Args:
            key: Cache key from generate_cache_key()

        Returns:
            The entry if present, live and backed by a file; None otherwise
        """
        entry = None
        try:
            metadata = self.index.get(key)
            if metadata is None:
                logger.debug(f"Cache miss: {key}")
            elif self.policy.is_expired(metadata, self._clock()):
                logger.debug(f"Cache entry expired: {key}")
                self._remove(metadata)
            elif not metadata.artifact_path.exists():
                logger.warning(
                    f"Cache corruption: metadata exists but audio file missing: "
                    f"{metadata.artifact_path}"
                )
                self.index.delete(key)
            else:
                entry = metadata.to_entry()
                logger.debug(f"Cache hit: {key} -> {entry.artifact_path}")
        except CacheIOError as e:
            logger.error(f"Error during cache lookup: {e}")
            entry = None

        self._record(entry is not None)
        return entry

    def set(
        self,
        key: str,
        audio_bytes: bytes,
        *,
        provider: str,
        voice: str,
        rate: int | float,
        text: str,
        provenance: Provenance | None = None,
        duration_ms: float | None = None,
        extension: str = "mp3",
    ) -> CacheEntry | None:
        """Store audio under a key together with its metadata.

        The size budget is enforced over the existing entries before the new
        artifact is written. On any failure the partially written file is
        removed and None is returned.

        Args:
            key: Cache key from generate_cache_key()
            audio_bytes: Audio data to store
            provider: Provider that produced the audio
            voice: Voice identifier used
            rate: Speech rate used
            text: Text that produced the audio
            provenance: Request origin details for the metadata index
            duration_ms: How long synthesis took
            extension: Artifact file extension

        Returns:
            The stored entry, or None if caching failed
        """
        artifact_path = self.cache_dir / f"{key}.{extension}"
        written = False
        try:
            previous = self.index.get(key)
            if previous is not None and previous.artifact_path != artifact_path:
                previous.artifact_path.unlink(missing_ok=True)

            self._enforce_size_budget(exclude=key)

            artifact_path.write_bytes(audio_bytes)
            written = True

            entry = CacheEntry(
                cache_key=key,
                artifact_path=artifact_path,
                provider=provider,
                voice=voice,
                rate=rate,
                text=text,
                timestamp=self._clock(),
                size=len(audio_bytes),
            )
            self.index.save(
                CacheMetadata.from_entry(entry, provenance, duration_ms=duration_ms)
            )
        except (CacheIOError, OSError) as e:
            logger.error(f"Failed to cache audio for {key}: {e}")
            if written:
                try:
                    artifact_path.unlink(missing_ok=True)
                    logger.debug(f"Cleaned up partial audio file: {artifact_path}")
                except OSError as cleanup_error:
                    logger.warning(
                        f"Failed to clean up partial audio file: {cleanup_error}"
                    )
            return None

        logger.info(
            f"Cached audio for '{text[:50]}' ({provider}/{voice}) as {artifact_path.name}"
        )
        return entry

    def _enforce_size_budget(self, exclude: str | None = None) -> int:
        entries = [m for m in self.index.all() if m.cache_key != exclude]
        victims = self.policy.select_oversize(entries)
        for metadata in victims:
            logger.debug(f"Evicting {metadata.cache_key} ({metadata.size} bytes)")
            self._remove(metadata)
        return len(victims)

    def delete(self, key: str) -> bool:
        """Remove an entry's artifact and metadata. Returns True if it existed."""
        try:
            metadata = self.index.get(key)
            if metadata is None:
                return False
            self._remove(metadata)
            return True
        except CacheIOError as e:
            logger.error(f"Cache deletion error: {e}")
            return False

    def clear(self) -> None:
        """Delete every artifact and reset the index. Hit/miss stats are kept."""
        try:
            for metadata in self.index.all():
                metadata.artifact_path.unlink(missing_ok=True)
            # Strays the index never recorded
            for extension in AUDIO_EXTENSIONS:
                for path in self.cache_dir.glob(f"*.{extension}"):
                    path.unlink(missing_ok=True)
            self.index.clear()
            logger.info(f"Cleared cache at {self.cache_dir}")
        except (CacheIOError, OSError) as e:
            logger.error(f"Cache clear error: {e}")

    def cleanup(self, max_age: str | int | float | None = None) -> int:
        """Sweep expired entries, then trim to the size budget.

        Args:
            max_age: Optional age limit overriding the TTL for this sweep

        Returns:
            Number of entries removed

        Raises:
            InvalidConfigurationError: If max_age is malformed
        """
        max_age_ms = parse_ttl(max_age)
        removed = 0
        try:
            expired = self.policy.select_expired(
                self.index.all(), self._clock(), max_age_ms
            )
            for metadata in expired:
                self._remove(metadata)
                removed += 1
            removed += self._enforce_size_budget()
        except CacheIOError as e:
            logger.error(f"Cache cleanup error: {e}")
        if removed:
            logger.info(f"Cache cleanup removed {removed} entries")
        return removed

    def read_artifact(self, entry: CacheEntry) -> bytes:
        return entry.artifact_path.read_bytes()

    def get_metadata(self, key: str) -> CacheMetadata | None:
        try:
            return self.index.get(key)
        except CacheIOError as e:
            logger.error(f"Metadata lookup error: {e}")
            return None

    def all_metadata(self) -> list[CacheMetadata]:
        try:
            return self.index.all()
        except CacheIOError as e:
            logger.error(f"Metadata listing error: {e}")
            return []

    def search(self, query: CacheQuery) -> list[CacheMetadata]:
        try:
            return self.index.search(query)
        except CacheIOError as e:
            logger.error(f"Metadata search error: {e}")
            return []

    def find_by_text(self, text: str) -> list[CacheMetadata]:
        return self.search(CacheQuery(text=text))

    def find_by_provider(self, provider: str) -> list[CacheMetadata]:
        return self.search(CacheQuery(provider=provider))

    def get_recent(self, limit: int = 10) -> list[CacheMetadata]:
        try:
            return self.index.recent(limit)
        except CacheIOError as e:
            logger.error(f"Metadata listing error: {e}")
            return []

    def get_stats(self) -> CacheStats:
        """Summarize the index and the durable hit/miss counters."""
        entries = self.all_metadata()
        total_size = sum(m.size for m in entries)
        timestamps = [m.timestamp for m in entries]

        return CacheStats(
            total_entries=len(entries),
            total_size=total_size,
            hits=self.stats.hits,
            misses=self.stats.misses,
            hit_rate=self.stats.hit_rate,
            avg_size=total_size / len(entries) if entries else 0.0,
            earliest=min(timestamps) if timestamps else None,
            latest=max(timestamps) if timestamps else None,
            providers=dict(Counter(m.provider for m in entries)),
            models=dict(Counter(m.model or "unknown" for m in entries)),
            sources=dict(Counter(m.source or "unknown" for m in entries)),
        )
