"""Cache entry domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheEntryEntity:
    """A memoized LLM response.

    Attributes:
        response: The LLM output text
        created_at: When the entry was written (Unix timestamp)
        expires_at: When the entry stops being served (Unix timestamp)
    """

    response: str
    created_at: float
    expires_at: float

    @classmethod
    def create(cls, response: str, now: float, ttl: float) -> "CacheEntryEntity":
        return cls(response=response, created_at=now, expires_at=now + ttl)

    def is_expired(self, now: float) -> bool:
        return self.expires_at < now
