"""FastAPI application.

Run with ``writer-ai-service serve`` or
``uvicorn writer_ai_service.api.app:app --port 8989``.
"""

import httpx
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from writer_ai_service import __version__
from writer_ai_service.api.dependencies import HandlerDep, build_lifespan
from writer_ai_service.config import Settings
from writer_ai_service.dto import (
    CacheStatsResponse,
    ErrorResponse,
    HealthCheckResponse,
    ProcessRequest,
    ProcessResponse,
)
from writer_ai_service.errors import SerializationError, WriterAIError
from writer_ai_service.protocols import CacheStore

router = APIRouter()


@router.get("/")
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": "Writer AI Service",
        "version": __version__,
        "endpoints": {
            "process": "/process",
            "health": "/health",
            "cache_stats": "/cache/stats",
        },
    }


@router.post(
    "/process",
    response_model=ProcessResponse,
    responses={
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def process_text(request: ProcessRequest, handler: HandlerDep) -> ProcessResponse:
    """Return an LLM-improved version of the submitted text."""
    return await handler.process(request)


@router.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(handler: HandlerDep) -> CacheStatsResponse:
    """Get cache statistics."""
    return await handler.get_stats()


async def writer_ai_error_handler(request: Request, exc: WriterAIError) -> JSONResponse:
    """Render service errors as ``{"error": message}``."""
    logger.error("Error processing request: {}", exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Treat malformed request bodies as serialization errors."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', 'invalid')}"
        for error in exc.errors()
    )
    return await writer_ai_error_handler(request, SerializationError(details or "invalid request body"))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled error while processing {} {}", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="Internal server error").model_dump(),
    )


def create_app(
    settings: Settings | None = None,
    repository: CacheStore | None = None,
    http_client: httpx.AsyncClient | None = None,
    probe_llm: bool = True,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Effective settings. If None, loaded at startup.
        repository: Cache backend override.
        http_client: LLM HTTP client override.
        probe_llm: Whether to test LLM connectivity at startup.

    Returns:
        The FastAPI application
    """
    app = FastAPI(
        title="Writer AI Service",
        description="Improves text with an LLM and caches the results on disk",
        version=__version__,
        lifespan=build_lifespan(
            settings=settings,
            repository=repository,
            http_client=http_client,
            probe_llm=probe_llm,
        ),
    )
    app.add_exception_handler(WriterAIError, writer_ai_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router)
    return app


app = create_app()
