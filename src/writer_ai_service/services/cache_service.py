"""Cache service for response memoization.

Wraps a CacheStore with the cache policy: key derivation, TTL, lazy
eviction of expired entries and the enabled switch.
"""

import hashlib
import json
import time
from collections.abc import Callable

from loguru import logger

from writer_ai_service.config import CacheSettings
from writer_ai_service.entities import CacheEntryEntity
from writer_ai_service.errors import CacheError
from writer_ai_service.protocols import CacheStore


class CacheService:
    """TTL-bounded memoization of LLM responses.

    When the cache is disabled lookups always miss and stores are no-ops,
    even for entries written while it was enabled.

    Example:
        ```python
        cache = CacheService.create(
            repository=SqliteCacheRepository.create(path),
            settings=settings.cache,
        )
        key = CacheService.generate_key(text, model, CacheService.template_digest(template))
        if (hit := cache.lookup(key)) is None:
            cache.store(key, await llm.complete(text))
        ```
    """

    def __init__(
        self,
        repository: CacheStore,
        settings: CacheSettings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache service.

        Args:
            repository: Cache storage backend (required).
            settings: Cache policy (enabled flag, TTL, size hint).
            clock: Source of the current Unix time.
        """
        self._repository = repository
        self._settings = settings
        self._clock = clock

    @classmethod
    def create(
        cls,
        repository: CacheStore,
        settings: CacheSettings,
        clock: Callable[[], float] = time.time,
    ) -> "CacheService":
        """Factory method to create CacheService."""
        return cls(repository=repository, settings=settings, clock=clock)

    @staticmethod
    def template_digest(template: str | None) -> str:
        """Digest of the prompt template, ``"0"`` when there is none."""
        if template is None:
            return "0"
        return hashlib.sha256(template.encode("utf-8")).hexdigest()

    @staticmethod
    def generate_key(text: str, model: str, template_digest: str) -> str:
        """Derive the cache key for a request.

        Pure and stable across processes: the same (text, model, template
        digest) triple always gives the same key, and changing any of them
        changes it.

        Args:
            text: The raw input text
            model: Model identifier
            template_digest: Result of template_digest()

        Returns:
            Hex SHA-256 digest
        """
        combined = json.dumps([model, template_digest, text], ensure_ascii=False)
        return hashlib.sha256(combined.encode("utf-8")).hexdigest()

    def lookup(self, key: str) -> str | None:
        """Return the cached response for ``key``.

        Business logic:
        1. Disabled cache → miss
        2. Absent entry → miss
        3. Expired entry → delete it, miss

        Args:
            key: The cache key

        Returns:
            The cached response, or None

        Raises:
            CacheError: If the backend fails to read the entry
        """
        if not self._settings.enabled:
            return None

        entry = self._repository.get(key)
        if entry is None:
            logger.debug("Cache miss for text input")
            return None

        if entry.is_expired(self._clock()):
            try:
                self._repository.delete(key)
                logger.debug("Removed expired cache entry")
            except CacheError as e:
                logger.warning("Failed to remove expired cache entry: {}", e.message)
            return None

        logger.debug("Cache hit for text input")
        return entry.response

    def store(self, key: str, text: str, ttl: float | None = None) -> None:
        """Persist a response, overwriting any entry for the same key.

        Args:
            key: The cache key
            text: The response to cache
            ttl: Lifetime in seconds. Defaults to the configured ttl_days.

        Raises:
            CacheError: If the backend fails to write the entry
        """
        if not self._settings.enabled:
            return

        ttl = self._settings.ttl_seconds if ttl is None else ttl
        entry = CacheEntryEntity.create(text, now=self._clock(), ttl=ttl)
        self._repository.put(key, entry)
        logger.debug("Stored response in cache")

    def sweep_expired(self) -> int:
        """Remove every expired entry.

        Housekeeping only: lookup() never returns a stale entry anyway.

        Returns:
            Number of entries removed
        """
        if not self._settings.enabled:
            return 0

        count = self._repository.delete_expired(self._clock())
        if count > 0:
            logger.info("Removed {} expired cache entries", count)
        return count

    def clear(self) -> int:
        """Remove all entries.

        Returns:
            Number of entries removed
        """
        count = self._repository.clear_all()
        logger.info("Cache cleared ({} entries)", count)
        return count

    def get_stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        stats = self._repository.get_stats()
        stats["enabled"] = self._settings.enabled
        stats["ttl_days"] = self._settings.ttl_days
        stats["max_size_mb"] = self._settings.max_size_mb
        stats["max_size_enforced"] = False
        return stats

    def is_healthy(self) -> bool:
        return self._repository.health_check()

    def close(self) -> None:
        self._repository.close()

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    @property
    def repository(self) -> CacheStore:
        """Get the underlying repository (for testing)."""
        return self._repository
