"""HTTP handlers for text processing.

Handlers convert between DTOs (API contracts) and service calls. Service
errors derive from WriterAIError and are rendered by the exception
handlers registered in api.app; anything else is wrapped as an internal
error here.
"""

from loguru import logger

from writer_ai_service.config import Settings
from writer_ai_service.dto import (
    CacheStatsResponse,
    HealthCheckResponse,
    ProcessRequest,
    ProcessResponse,
)
from writer_ai_service.errors import WriterAIError
from writer_ai_service.services import CacheService, ProcessService


class ProcessHandler:
    """HTTP handlers for /process, /health and /cache/stats.

    Example:
        ```python
        handler = ProcessHandler(process_service, cache_service, settings)

        @app.post("/process", response_model=ProcessResponse)
        async def process_text(request: ProcessRequest):
            return await handler.process(request)
        ```
    """

    def __init__(
        self,
        process_service: ProcessService,
        cache_service: CacheService,
        settings: Settings,
    ) -> None:
        """Initialize the handler.

        Args:
            process_service: Request orchestrator (required).
            cache_service: Response cache, for health and stats.
            settings: Application settings.
        """
        self._process = process_service
        self._cache = cache_service
        self._settings = settings

    async def process(self, request: ProcessRequest) -> ProcessResponse:
        """Handle POST /process requests.

        Args:
            request: The process request DTO

        Returns:
            ProcessResponse with the improved text

        Raises:
            WriterAIError: If processing fails
        """
        try:
            result = await self._process.process(request.text)
        except WriterAIError:
            raise
        except Exception as e:
            logger.opt(exception=e).error("Unexpected error while processing text")
            raise WriterAIError("Internal server error") from e

        return ProcessResponse(response=result.response)

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /cache/stats requests."""
        try:
            stats = self._cache.get_stats()
        except WriterAIError:
            raise
        except Exception as e:
            logger.opt(exception=e).error("Unexpected error while reading cache stats")
            raise WriterAIError("Failed to get stats") from e

        return CacheStatsResponse(
            backend=stats.get("backend", "unknown"),
            location=stats.get("location", ""),
            enabled=stats.get("enabled", False),
            total_entries=stats.get("total_entries", 0),
            ttl_days=stats.get("ttl_days", 0),
            max_size_mb=stats.get("max_size_mb", 0),
            max_size_enforced=stats.get("max_size_enforced", False),
            size_bytes=stats.get("size_bytes"),
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        cache_healthy = self._cache.is_healthy()

        return HealthCheckResponse(
            status="healthy" if cache_healthy else "unhealthy",
            cache_enabled=self._cache.enabled,
            cache_healthy=cache_healthy,
            model=self._settings.model_name,
        )
