"""Service layer for business logic.

Services depend on protocols, not concrete implementations.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from writer_ai_service.services import CacheService, ProcessService

    cache = CacheService.create(repository=repo, settings=settings.cache)
    service = ProcessService.create(settings, cache, llm_provider)
    result = await service.process("My English is no such god.")
    ```
"""

from .cache_service import CacheService
from .process_service import ProcessResult, ProcessService

__all__ = [
    "CacheService",
    "ProcessResult",
    "ProcessService",
]
