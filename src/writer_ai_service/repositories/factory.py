"""Construction of the cache store from settings."""

from loguru import logger

from writer_ai_service.config import Settings, default_cache_path
from writer_ai_service.protocols import CacheStore

from .sqlite_repository import SqliteCacheRepository


def create_cache_repository(settings: Settings) -> CacheStore:
    """Open the SQLite cache at ``cache.path`` or the per-user cache directory."""
    path = default_cache_path(settings)
    logger.info("Initializing cache at: {}", path)
    return SqliteCacheRepository.create(path)
