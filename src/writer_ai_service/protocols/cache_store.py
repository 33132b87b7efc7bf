"""Cache storage protocol.

Defines the interface for a durable key/value backend holding memoized
LLM responses. Implementations raise CacheError on backend failures.

Implementations:
- SQLite file in the per-user cache directory
- in-memory doubles in tests
"""

from typing import Protocol, runtime_checkable

from writer_ai_service.entities import CacheEntryEntity


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Example:
        ```python
        repo: CacheStore = SqliteCacheRepository.create(path)
        ```
    """

    def get(self, key: str) -> CacheEntryEntity | None:
        """Fetch an entry regardless of expiry.

        Args:
            key: The cache key

        Returns:
            The entry, or None if absent
        """
        ...

    def put(self, key: str, entry: CacheEntryEntity) -> None:
        """Insert or overwrite an entry atomically.

        Args:
            key: The cache key
            entry: The entry to persist
        """
        ...

    def delete(self, key: str) -> bool:
        """Delete an entry.

        Args:
            key: The cache key

        Returns:
            True if an entry was removed
        """
        ...

    def delete_expired(self, now: float) -> int:
        """Delete every entry whose expires_at is before ``now``.

        Returns:
            Number of entries removed
        """
        ...

    def clear_all(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries removed
        """
        ...

    def count_all(self) -> int:
        """Count stored entries, expired ones included."""
        ...

    def health_check(self) -> bool:
        """Check if the backend is accessible."""
        ...

    def get_stats(self) -> dict:
        """Get backend statistics (implementation-specific)."""
        ...

    def close(self) -> None:
        """Release backend resources."""
        ...
