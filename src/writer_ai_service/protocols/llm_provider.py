"""LLM provider protocol."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class LlmProvider(Protocol):
    """Protocol for services that turn input text into improved text."""

    @property
    def model_name(self) -> str:
        """Return the model identifier used for requests."""
        ...

    async def complete(self, text: str) -> str:
        """Send ``text`` to the model and return its trimmed answer.

        Raises:
            UpstreamError: On any provider or transport failure
        """
        ...

    async def probe(self) -> bool:
        """Best-effort connectivity check. Never raises."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
