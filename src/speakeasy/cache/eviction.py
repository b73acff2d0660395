"""TTL and size-budget eviction rules."""

from collections.abc import Iterable

from .limits import parse_size, parse_ttl
from .models import CacheEntry, CacheMetadata


class EvictionPolicy:
    """Decides which cache entries have to go.

    Both limits are parsed at construction, so a malformed value fails fast
    with InvalidConfigurationError instead of being silently defaulted.

    Attributes:
        ttl_ms: Maximum entry age in milliseconds (None disables expiry)
        max_size: Maximum total artifact bytes (None disables the budget)
    """

    def __init__(
        self,
        ttl: str | int | float | None = "7d",
        max_size: str | int | float | None = None,
    ) -> None:
        self.ttl_ms = parse_ttl(ttl)
        self.max_size = parse_size(max_size)

    def is_expired(
        self, entry: CacheEntry | CacheMetadata, now_ms: float, max_age_ms: float | None = None
    ) -> bool:
        """True when the entry is older than the TTL (or the given max age)."""
        limit = max_age_ms if max_age_ms is not None else self.ttl_ms
        if limit is None:
            return False
        return now_ms - entry.timestamp > limit

    def select_expired(
        self,
        entries: Iterable[CacheMetadata],
        now_ms: float,
        max_age_ms: float | None = None,
    ) -> list[CacheMetadata]:
        return [e for e in entries if self.is_expired(e, now_ms, max_age_ms)]

    def select_oversize(self, entries: list[CacheMetadata]) -> list[CacheMetadata]:
        """Oldest entries to remove until the total fits within max_size.

        Args:
            entries: Candidates in insertion order (ties keep that order)

        Returns:
            Entries to evict, oldest first
        """
        if self.max_size is None:
            return []

        total = sum(e.size for e in entries)
        victims: list[CacheMetadata] = []
        # sorted() is stable, so equal timestamps keep insertion order
        for entry in sorted(entries, key=lambda e: e.timestamp):
            if total <= self.max_size:
                break
            victims.append(entry)
            total -= entry.size
        return victims
