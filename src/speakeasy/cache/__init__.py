"""Audio result cache for speakeasy.

Artifacts, the SQLite metadata index and the stats file all live in one
directory, by default ``$XDG_CACHE_HOME/speakeasy`` or ``~/.cache/speakeasy``.
"""

import os
from pathlib import Path


def get_cache_dir() -> Path:
    """Get or create the default speakeasy cache directory.

    Returns:
        Path to the cache directory
    """
    cache_home = os.environ.get("XDG_CACHE_HOME")
    base = Path(cache_home) if cache_home else Path.home() / ".cache"
    cache_dir = base / "speakeasy"
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir
