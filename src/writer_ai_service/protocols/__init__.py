"""Protocol interfaces for swappable implementations.

Protocols use structural typing, so any class with matching methods
satisfies them:
- CacheStore: SQLite, or a test double
- LlmProvider: the HTTP adapter or a test double
"""

from .cache_store import CacheStore
from .llm_provider import LlmProvider

__all__ = [
    "CacheStore",
    "LlmProvider",
]
