"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class ProcessResponse(BaseModel):
    """Response DTO for POST /process."""

    response: str = Field(..., description="The improved text, from cache or freshly computed")


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str = Field(..., description="Human-readable error message")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    backend: str = Field(..., description="Cache backend name")
    location: str = Field(..., description="Database file or key prefix")
    enabled: bool = Field(..., description="Whether lookups and stores are active")
    total_entries: int = Field(..., description="Stored entries, expired ones included", ge=0)
    ttl_days: int = Field(..., description="Lifetime of new entries in days", ge=0)
    max_size_mb: int = Field(..., description="Configured size limit in MB")
    max_size_enforced: bool = Field(False, description="Whether the size limit is enforced")
    size_bytes: int | None = Field(None, description="On-disk size, when known")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_enabled: bool = Field(..., description="Whether response caching is enabled")
    cache_healthy: bool = Field(..., description="Whether the cache backend is reachable")
    model: str = Field(..., description="Configured LLM model")
