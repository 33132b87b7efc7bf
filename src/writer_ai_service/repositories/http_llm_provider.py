"""HTTP adapter for LLM providers.

Talks to any provider that accepts a JSON body with ``model`` and ``prompt``
fields and answers in one of the shapes from entities.provider_response:

- Ollama /api/generate: ``{"response": "..."}``
- OpenAI-compatible chat completions: ``{"choices": [{"message": {"content": "..."}}]}``
- OpenAI Responses API: ``{"output": [{"content": [{"text": "..."}]}]}``

Failures are never retried here:
- non-2xx status → LlmApiError
- connection failure or timeout → NetworkError
- body matching no known shape → UnrecognizedFormat
"""

import json
from typing import Any

import httpx
from loguru import logger

from writer_ai_service.config import TEMPLATE_PLACEHOLDER, Settings
from writer_ai_service.entities import match_response_shape
from writer_ai_service.errors import LlmApiError, NetworkError, UnrecognizedFormat, truncate_body


class HttpLlmProvider:
    """httpx-based implementation of the LlmProvider protocol.

    Example:
        ```python
        provider = HttpLlmProvider.create(settings)
        improved = await provider.complete("My English is no such god.")
        ```
    """

    PROBE_TIMEOUT = 5.0

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            settings: Application settings (endpoint, model, params, template).
            client: Pre-built async client. If None, one is created lazily
                    with the configured request timeout.
        """
        self._settings = settings
        self._client = client

    @classmethod
    def create(
        cls,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
    ) -> "HttpLlmProvider":
        """Factory method to create HttpLlmProvider."""
        return cls(settings=settings, client=client)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._settings.request_timeout_secs,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @property
    def model_name(self) -> str:
        return self._settings.model_name

    def build_prompt(self, text: str) -> str:
        """Substitute ``text`` into the prompt template, if one is configured."""
        template = self._settings.prompt_template
        if template is None:
            return text
        return template.replace(TEMPLATE_PLACEHOLDER, text)

    def build_payload(self, text: str) -> dict[str, Any]:
        """Build the request body.

        The base object is shallow-merged with ``llm_params``: configured
        parameters win, including ``stream``, and nested objects replace
        rather than merge.
        """
        payload: dict[str, Any] = {
            "model": self._settings.model_name,
            "prompt": self.build_prompt(text),
            "stream": False,
        }
        if self._settings.llm_params:
            payload.update(self._settings.llm_params)
        return payload

    def build_headers(self) -> dict[str, str]:
        """Authentication headers for OpenAI-compatible providers."""
        headers: dict[str, str] = {}
        if self._settings.openai_api_key:
            headers["Authorization"] = f"Bearer {self._settings.openai_api_key}"
        if self._settings.openai_org_id:
            headers["OpenAI-Organization"] = self._settings.openai_org_id
        if self._settings.openai_project_id:
            headers["OpenAI-Project"] = self._settings.openai_project_id
        return headers

    async def complete(self, text: str) -> str:
        """Send text to the LLM and return the trimmed answer.

        Args:
            text: The user's input text

        Returns:
            The improved text

        Raises:
            LlmApiError: If the provider answered with a non-2xx status
            NetworkError: If the provider could not be reached in time
            UnrecognizedFormat: If the body matched no known shape
        """
        url = self._settings.llm_url
        payload = self.build_payload(text)
        logger.info("Sending request to LLM URL: {}", url)
        logger.debug("LLM payload fields: {}", sorted(payload))

        try:
            response = await self.client.post(url, json=payload, headers=self.build_headers())
        except httpx.TimeoutException as e:
            raise NetworkError(
                f"no answer from {url} within {self._settings.request_timeout_secs:g}s",
                {"url": url},
            ) from e
        except httpx.HTTPError as e:
            error_msg = str(e) or type(e).__name__
            if isinstance(e, httpx.ConnectError):
                error_msg += f" (is the provider running at {url}?)"
            raise NetworkError(error_msg, {"url": url}) from e

        if not response.is_success:
            logger.error(
                "LLM API returned error status {}: {}",
                response.status_code,
                truncate_body(response.text),
            )
            raise LlmApiError(response.status_code, response.text)

        return self.parse_response(response.text)

    @staticmethod
    def parse_response(body: str) -> str:
        """Extract the answer text from a successful response body.

        Raises:
            UnrecognizedFormat: If the body is not JSON or matches no known shape
        """
        try:
            data = json.loads(body)
        except json.JSONDecodeError:
            logger.warning("LLM response is not JSON: {}", truncate_body(body))
            raise UnrecognizedFormat(body) from None

        shape = match_response_shape(data)
        if shape is None:
            logger.warning("LLM response format not recognized: {}", truncate_body(body))
            raise UnrecognizedFormat(body)

        logger.debug("Matched {} response shape", type(shape).__name__)
        return shape.text.strip()

    def probe_url(self) -> str:
        """URL of the provider's model listing endpoint."""
        url = httpx.URL(self._settings.llm_url)
        if "/api/" in url.path:
            return str(url.copy_with(path=url.path.split("/api/")[0] + "/api/tags"))
        if "/v1/" in url.path:
            return str(url.copy_with(path=url.path.split("/v1/")[0] + "/v1/models"))
        return str(url.copy_with(path="/"))

    async def probe(self) -> bool:
        """Check that the provider is reachable. Only logs, never raises.

        Returns:
            True if the provider answered with a 2xx status
        """
        url = self.probe_url()
        logger.info("Testing LLM API connectivity at {}", url)
        try:
            response = await self.client.get(
                url,
                headers=self.build_headers(),
                timeout=self.PROBE_TIMEOUT,
            )
        except httpx.HTTPError as e:
            logger.warning("Failed to connect to LLM API: {}", str(e) or type(e).__name__)
            if isinstance(e, httpx.TimeoutException):
                logger.warning("Connection timed out - the provider may not be running")
            elif isinstance(e, httpx.ConnectError):
                logger.warning("Connection error - check that the provider is reachable at {}", url)
            return False

        if response.is_success:
            logger.info("Successfully connected to LLM API, using model {}", self.model_name)
            return True

        logger.warning(
            "LLM API responded with status code {}: {}",
            response.status_code,
            truncate_body(response.text),
        )
        return False

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
