"""Request orchestration for POST /process.

Per request:
    key → lookup → hit: return cached text
                 → miss: LLM call → store → return fresh text

Cache failures degrade to uncached behaviour; LLM failures propagate.
"""

import time
from dataclasses import dataclass

from loguru import logger

from writer_ai_service.config import Settings
from writer_ai_service.errors import CacheError
from writer_ai_service.protocols import LlmProvider
from writer_ai_service.services.cache_service import CacheService

LONG_RESPONSE_CHARS = 1000


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one processed request."""

    response: str
    cached: bool
    elapsed_ms: float


class ProcessService:
    """Improve text through the LLM, memoizing results in the cache.

    There is no coordination between concurrent requests: two misses on the
    same key both call the LLM and the last store wins.
    """

    def __init__(
        self,
        settings: Settings,
        cache_service: CacheService,
        llm_provider: LlmProvider,
    ) -> None:
        """Initialize the process service.

        Args:
            settings: Immutable application settings.
            cache_service: Response cache.
            llm_provider: LLM adapter.
        """
        self._settings = settings
        self._cache = cache_service
        self._llm = llm_provider
        self._template_digest = CacheService.template_digest(settings.prompt_template)

    @classmethod
    def create(
        cls,
        settings: Settings,
        cache_service: CacheService,
        llm_provider: LlmProvider,
    ) -> "ProcessService":
        """Factory method to create ProcessService."""
        return cls(settings=settings, cache_service=cache_service, llm_provider=llm_provider)

    def cache_key(self, text: str) -> str:
        return CacheService.generate_key(text, self._settings.model_name, self._template_digest)

    async def process(self, text: str) -> ProcessResult:
        """Return the improved version of ``text``.

        Args:
            text: Raw input text

        Returns:
            ProcessResult with the response and whether it came from cache

        Raises:
            UpstreamError: If the LLM call fails
        """
        logger.info("Received text length: {}", len(text))
        start_time = time.perf_counter()
        key = self.cache_key(text)

        cached = self._lookup(key)
        if cached is not None:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.info("Cache hit! Response time: {:.3f}ms", elapsed_ms)
            return ProcessResult(response=cached, cached=True, elapsed_ms=elapsed_ms)

        response = await self._llm.complete(text)
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info("LLM response time: {:.3f}ms", elapsed_ms)
        logger.info("Sending back response length: {}", len(response))

        self._store(key, response)

        if len(response) > LONG_RESPONSE_CHARS:
            logger.warning(
                "Response is unusually long ({}). Consider reviewing the prompt template.",
                len(response),
            )

        return ProcessResult(response=response, cached=False, elapsed_ms=elapsed_ms)

    def _lookup(self, key: str) -> str | None:
        try:
            return self._cache.lookup(key)
        except CacheError as e:
            logger.warning("{}. Falling back to LLM API", e.message)
            return None

    def _store(self, key: str, response: str) -> None:
        try:
            self._cache.store(key, response)
        except CacheError as e:
            logger.warning("Failed to store in cache: {}", e.message)
