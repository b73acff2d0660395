"""SQLite metadata index implementation."""

import sqlite3
from pathlib import Path

from ..tts.errors import CacheIOError
from .models import CacheMetadata, CacheQuery

INDEX_FILENAME = "metadata-index.sqlite"

_COLUMNS = (
    "cache_key",
    "artifact_path",
    "provider",
    "voice",
    "rate",
    "text",
    "timestamp",
    "size",
    "model",
    "source",
    "session_id",
    "process_id",
    "hostname",
    "user",
    "working_directory",
    "command_line",
    "duration_ms",
    "success",
    "error_message",
)


class MetadataIndex:
    """SQLite-based index of cache metadata.

    Stores one metadata row per cache key while audio artifacts are stored
    separately on the filesystem. Every sqlite3 failure surfaces as
    CacheIOError.
    """

    def __init__(self, cache_dir: Path):
        """Initialize metadata index with database in given directory.

        Args:
            cache_dir: Directory containing the index database

        Raises:
            CacheIOError: If the database cannot be created
        """
        self.cache_dir = cache_dir

        # Create cache directory if it doesn't exist
        cache_dir.mkdir(parents=True, exist_ok=True)

        self.db_path = cache_dir / INDEX_FILENAME
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection with WAL mode."""
        conn = sqlite3.connect(str(self.db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    def _execute(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        """Run a single statement on a fresh connection and commit."""
        try:
            conn = self._get_connection()
            try:
                rows = conn.execute(sql, params).fetchall()
                conn.commit()
                return rows
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise CacheIOError(f"Metadata index error: {e}", e) from e

    def _init_db(self) -> None:
        """Initialize database schema with tables and indexes."""
        # id preserves insertion order for entries sharing a timestamp
        self._execute("""
            CREATE TABLE IF NOT EXISTS entries (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                cache_key TEXT NOT NULL UNIQUE,
                artifact_path TEXT NOT NULL,
                provider TEXT NOT NULL,
                voice TEXT NOT NULL,
                rate REAL NOT NULL,
                text TEXT NOT NULL,
                timestamp REAL NOT NULL,
                size INTEGER NOT NULL,
                model TEXT,
                source TEXT,
                session_id TEXT,
                process_id INTEGER,
                hostname TEXT,
                user TEXT,
                working_directory TEXT,
                command_line TEXT,
                duration_ms REAL,
                success INTEGER NOT NULL DEFAULT 1,
                error_message TEXT
            )
        """)
        self._execute("""
            CREATE INDEX IF NOT EXISTS idx_timestamp
            ON entries(timestamp)
        """)

    @staticmethod
    def _to_row(metadata: CacheMetadata) -> tuple:
        values = []
        for column in _COLUMNS:
            value = getattr(metadata, column)
            if column == "artifact_path":
                value = str(value)
            elif column == "success":
                value = int(value)
            values.append(value)
        return tuple(values)

    @staticmethod
    def _from_row(row: sqlite3.Row) -> CacheMetadata:
        values = {column: row[column] for column in _COLUMNS}
        values["artifact_path"] = Path(values["artifact_path"])
        values["success"] = bool(values["success"])
        return CacheMetadata(**values)

    def save(self, metadata: CacheMetadata) -> None:
        """Save metadata, replacing any previous record for the same key.

        Args:
            metadata: Metadata record to save
        """
        placeholders = ", ".join("?" for _ in _COLUMNS)
        # REPLACE deletes the old row, so a rewritten key gets a fresh id
        self._execute(
            f"INSERT OR REPLACE INTO entries ({', '.join(_COLUMNS)}) "
            f"VALUES ({placeholders})",
            self._to_row(metadata),
        )

    def get(self, cache_key: str) -> CacheMetadata | None:
        """Retrieve metadata by cache key.

        Args:
            cache_key: Key to look up

        Returns:
            Metadata if found, None otherwise
        """
        rows = self._execute(
            "SELECT * FROM entries WHERE cache_key = ?", (cache_key,)
        )
        if not rows:
            return None
        return self._from_row(rows[0])

    def delete(self, cache_key: str) -> bool:
        """Delete the record for a key. Returns True if a record existed."""
        try:
            conn = self._get_connection()
            try:
                cursor = conn.execute(
                    "DELETE FROM entries WHERE cache_key = ?", (cache_key,)
                )
                conn.commit()
                return cursor.rowcount > 0
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise CacheIOError(f"Metadata index error: {e}", e) from e

    def clear(self) -> None:
        """Remove every record."""
        self._execute("DELETE FROM entries")

    def all(self) -> list[CacheMetadata]:
        """All records, oldest first."""
        rows = self._execute("SELECT * FROM entries ORDER BY timestamp ASC, id ASC")
        return [self._from_row(row) for row in rows]

    def search(self, query: CacheQuery) -> list[CacheMetadata]:
        """Linear-scan filter over all records, oldest first."""
        return [metadata for metadata in self.all() if query.matches(metadata)]

    def recent(self, limit: int) -> list[CacheMetadata]:
        """The ``limit`` records with the largest timestamps, newest first."""
        if limit <= 0:
            return []
        rows = self._execute(
            "SELECT * FROM entries ORDER BY timestamp DESC, id DESC LIMIT ?",
            (limit,),
        )
        return [self._from_row(row) for row in rows]

    def count(self) -> int:
        rows = self._execute("SELECT COUNT(*) AS n FROM entries")
        return int(rows[0]["n"])

    def total_size(self) -> int:
        rows = self._execute("SELECT COALESCE(SUM(size), 0) AS total FROM entries")
        return int(rows[0]["total"])
