"""Durable hit/miss counters."""

import json
import logging
import os
import tempfile
from pathlib import Path

from ..tts.errors import CacheIOError

logger = logging.getLogger(__name__)

STATS_FILENAME = "stats.json"


class StatsTracker:
    """Hit/miss counters persisted to ``<cache_dir>/stats.json``.

    Counters are loaded once and written back after every increment so a
    restarted process resumes accurate totals. They track lookups, not stored
    entries, and survive a cache clear.
    """

    def __init__(self, cache_dir: Path):
        self.stats_path = Path(cache_dir) / STATS_FILENAME
        self.hits = 0
        self.misses = 0
        self._load()

    def _load(self) -> None:
        if not self.stats_path.exists():
            return
        try:
            data = json.loads(self.stats_path.read_text())
            self.hits = int(data.get("hits", 0))
            self.misses = int(data.get("misses", 0))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load cache stats, starting from zero: {e}")
            self.hits = 0
            self.misses = 0

    def _save(self) -> None:
        """Write counters atomically via a temp file in the same directory."""
        payload = json.dumps({"hits": self.hits, "misses": self.misses})
        try:
            self.stats_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.stats_path.parent, prefix=".stats-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(payload)
                os.replace(tmp_path, self.stats_path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CacheIOError(f"Failed to save cache stats: {e}", e) from e

    def record_hit(self) -> None:
        self.hits += 1
        self._save()

    def record_miss(self) -> None:
        self.misses += 1
        self._save()

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0
