"""SQLite implementation of CacheStore.

An embedded single-file store holding every cached response. It satisfies the
CacheStore protocol through structural typing.

Each operation opens its own connection and runs inside one transaction,
so a write is atomic with respect to concurrent reads of the same key.
The database uses WAL journaling so readers are not blocked by a writer.
"""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

from writer_ai_service.entities import CacheEntryEntity
from writer_ai_service.errors import CacheError


class SqliteCacheRepository:
    """Cache entries in a SQLite table keyed by cache key.

    Schema:
        cache_entries(key TEXT PRIMARY KEY, response TEXT,
                      created_at REAL, expires_at REAL)
    """

    def __init__(self, path: Path | str, timeout: float = 5.0) -> None:
        """Initialize the repository, creating the database if needed.

        Args:
            path: Location of the SQLite file. Parent directories are created.
            timeout: Seconds to wait for a lock held by another connection.
        """
        self._path = Path(path)
        self._timeout = timeout
        self._ensure_db()

    @classmethod
    def create(cls, path: Path | str) -> "SqliteCacheRepository":
        """Factory method to create SqliteCacheRepository with defaults."""
        return cls(path=path)

    @contextmanager
    def _connection(self, action: str) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self._path, timeout=self._timeout)
        except sqlite3.Error as e:
            raise CacheError(f"Failed to open cache database {self._path}: {e}") from e
        try:
            with conn:
                yield conn
        except sqlite3.Error as e:
            raise CacheError(f"{action} failed: {e}") from e
        finally:
            conn.close()

    def _ensure_db(self) -> None:
        """Ensure the database file and table exist."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheError(f"Failed to create cache directory {self._path.parent}: {e}") from e

        with self._connection("Cache initialisation") as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("""
                CREATE TABLE IF NOT EXISTS cache_entries (
                    key TEXT PRIMARY KEY,
                    response TEXT NOT NULL,
                    created_at REAL NOT NULL,
                    expires_at REAL NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_cache_entries_expires
                ON cache_entries(expires_at)
            """)
        logger.debug("Cache database ready at {}", self._path)

    def get(self, key: str) -> CacheEntryEntity | None:
        """Fetch an entry regardless of expiry.

        Args:
            key: The cache key

        Returns:
            The entry, or None if absent
        """
        with self._connection("Cache lookup") as conn:
            row = conn.execute(
                "SELECT response, created_at, expires_at FROM cache_entries WHERE key = ?",
                (key,),
            ).fetchone()

        if row is None:
            return None

        response, created_at, expires_at = row
        if not isinstance(response, str):
            raise CacheError(f"Invalid cache entry format for key {key}")
        try:
            return CacheEntryEntity(
                response=response,
                created_at=float(created_at),
                expires_at=float(expires_at),
            )
        except (TypeError, ValueError) as e:
            raise CacheError(f"Invalid cache entry timestamps for key {key}: {e}") from e

    def put(self, key: str, entry: CacheEntryEntity) -> None:
        """Insert or overwrite an entry.

        Args:
            key: The cache key
            entry: The entry to persist
        """
        with self._connection("Cache store") as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO cache_entries
                (key, response, created_at, expires_at)
                VALUES (?, ?, ?, ?)
                """,
                (key, entry.response, entry.created_at, entry.expires_at),
            )

    def delete(self, key: str) -> bool:
        with self._connection("Cache delete") as conn:
            cursor = conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
        return cursor.rowcount > 0

    def delete_expired(self, now: float) -> int:
        """Delete every entry that expired before ``now``.

        Returns:
            Number of entries removed
        """
        with self._connection("Cache sweep") as conn:
            cursor = conn.execute("DELETE FROM cache_entries WHERE expires_at < ?", (now,))
        return cursor.rowcount

    def clear_all(self) -> int:
        with self._connection("Cache clear") as conn:
            cursor = conn.execute("DELETE FROM cache_entries")
        return cursor.rowcount

    def count_all(self) -> int:
        with self._connection("Cache count") as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM cache_entries").fetchone()
        return count

    def health_check(self) -> bool:
        """Check if the database is readable.

        Returns:
            True if healthy, False otherwise
        """
        try:
            with self._connection("Cache health check") as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except CacheError as e:
            logger.warning("Cache health check failed: {}", e)
            return False

    def get_stats(self) -> dict:
        """Get repository statistics.

        Returns:
            Dictionary with stats
        """
        size_bytes = 0
        for suffix in ("", "-wal"):
            candidate = self._path.with_name(self._path.name + suffix)
            if candidate.exists():
                size_bytes += candidate.stat().st_size
        return {
            "backend": "sqlite",
            "location": str(self._path),
            "total_entries": self.count_all(),
            "size_bytes": size_bytes,
        }

    def close(self) -> None:
        """Nothing to release; connections are opened per operation."""

    @property
    def path(self) -> Path:
        """Get the database file path."""
        return self._path
