"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract. Internal domain
logic uses entities from the entities package.
"""

from .requests import ProcessRequest
from .responses import (
    CacheStatsResponse,
    ErrorResponse,
    HealthCheckResponse,
    ProcessResponse,
)

__all__ = [
    "ProcessRequest",
    "ProcessResponse",
    "ErrorResponse",
    "CacheStatsResponse",
    "HealthCheckResponse",
]
