"""Repository layer for data access.

This layer hides external dependencies (SQLite, LLM HTTP APIs)
behind the protocols in writer_ai_service.protocols. Implementations are
protocol-based (structural typing), not inheritance-based.
"""

from writer_ai_service.protocols import CacheStore, LlmProvider

from .factory import create_cache_repository
from .http_llm_provider import HttpLlmProvider
from .sqlite_repository import SqliteCacheRepository

__all__ = [
    "CacheStore",
    "LlmProvider",
    "HttpLlmProvider",
    "SqliteCacheRepository",
    "create_cache_repository",
]
