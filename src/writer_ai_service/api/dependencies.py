"""Dependency injection configuration for the FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Settings are passed explicitly, never read from a global
"""

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated

import httpx
from fastapi import Depends, FastAPI, Request
from loguru import logger

from writer_ai_service.config import Settings, get_settings
from writer_ai_service.errors import CacheError
from writer_ai_service.handlers import ProcessHandler
from writer_ai_service.log import configure_logging
from writer_ai_service.protocols import CacheStore
from writer_ai_service.repositories import HttpLlmProvider, create_cache_repository
from writer_ai_service.services import CacheService, ProcessService


def get_handler(request: Request) -> ProcessHandler:
    """Dependency injection for ProcessHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The ProcessHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "process_handler", None)
    if handler is None:
        raise RuntimeError("ProcessHandler not initialized. Check lifespan setup.")
    return handler


def build_lifespan(
    settings: Settings | None = None,
    repository: CacheStore | None = None,
    http_client: httpx.AsyncClient | None = None,
    probe_llm: bool = True,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Create the lifespan context manager for the app.

    Args:
        settings: Effective settings. If None, loaded via get_settings() at startup.
        repository: Cache backend. If None, chosen from settings.
        http_client: Client for LLM calls. If None, the provider creates one.
        probe_llm: Whether to test LLM connectivity at startup.

    Returns:
        A lifespan callable for FastAPI
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize all layers and store them in app.state.

        1. Repository (data access)
        2. Services (cache policy, orchestration)
        3. Handler (HTTP endpoints)
        """
        effective = settings or get_settings()
        if settings is None:
            configure_logging(effective.log_level)

        cache_repository = repository or create_cache_repository(effective)
        cache_service = CacheService.create(repository=cache_repository, settings=effective.cache)
        try:
            removed = cache_service.sweep_expired()
            if removed > 0:
                logger.info("Removed {} expired cache entries during startup", removed)
        except CacheError as e:
            logger.warning("Startup cache sweep failed: {}", e.message)

        if effective.cache.enabled:
            logger.info(
                "Response caching is enabled (TTL: {} days, Max size: {} MB, not enforced)",
                effective.cache.ttl_days,
                effective.cache.max_size_mb,
            )
        else:
            logger.info("Response caching is disabled")

        llm_provider = HttpLlmProvider.create(settings=effective, client=http_client)
        if probe_llm:
            await llm_provider.probe()

        process_service = ProcessService.create(
            settings=effective,
            cache_service=cache_service,
            llm_provider=llm_provider,
        )

        app.state.settings = effective
        app.state.cache_service = cache_service
        app.state.llm_provider = llm_provider
        app.state.process_handler = ProcessHandler(
            process_service=process_service,
            cache_service=cache_service,
            settings=effective,
        )
        logger.info("Using model {} at {}", effective.model_name, effective.llm_url)

        yield

        await llm_provider.close()
        cache_service.close()
        del app.state.process_handler
        del app.state.llm_provider
        del app.state.cache_service
        del app.state.settings
        logger.info("Writer AI service shut down")

    return lifespan


# Type alias for cleaner dependency injection
HandlerDep = Annotated[ProcessHandler, Depends(get_handler)]
