"""Domain entities for internal representation.

Pure frozen dataclasses used by services and repositories. They are NOT
API contracts; use the DTOs from the dto package for that.
"""

from .cache_entry import CacheEntryEntity
from .provider_response import (
    RESPONSE_SHAPES,
    OllamaShape,
    OpenAIChatShape,
    OpenAIResponsesShape,
    ProviderResponse,
    match_response_shape,
)

__all__ = [
    "CacheEntryEntity",
    "OllamaShape",
    "OpenAIChatShape",
    "OpenAIResponsesShape",
    "ProviderResponse",
    "RESPONSE_SHAPES",
    "match_response_shape",
]
