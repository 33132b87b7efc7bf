"""Shared fixtures.

The LLM is never contacted: tests build an httpx.AsyncClient on a
MockTransport whose handler records every request it sees.
"""

import json
import os
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from writer_ai_service.config import CREDENTIAL_FIELDS, ENV_PREFIX, CacheSettings, Settings
from writer_ai_service.repositories import SqliteCacheRepository
from writer_ai_service.services import CacheService


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLlm:
    """Records requests and answers with a fixed status and body."""

    def __init__(self, status_code: int = 200, body: object = None) -> None:
        self.status_code = status_code
        self.body = {"response": "ok"} if body is None else body
        self.requests: list[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep developer overrides and credentials out of the settings under test."""
    for name in list(os.environ):
        if name.upper().startswith(ENV_PREFIX) or name in CREDENTIAL_FIELDS.values():
            monkeypatch.delenv(name)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    return tmp_path / "cache" / "responses.sqlite3"


@pytest.fixture
def sqlite_repository(cache_path: Path) -> SqliteCacheRepository:
    return SqliteCacheRepository.create(cache_path)


@pytest.fixture
def make_cache_service(sqlite_repository, clock) -> Callable[..., CacheService]:
    def factory(**cache_overrides) -> CacheService:
        return CacheService.create(
            repository=sqlite_repository,
            settings=CacheSettings(**cache_overrides),
            clock=clock,
        )

    return factory


@pytest.fixture
def settings(cache_path: Path) -> Settings:
    """Settings pointing the cache at a temporary file."""
    return Settings(
        llm_url="http://llm.test/api/generate",
        model_name="test-model",
        cache=CacheSettings(path=str(cache_path)),
    )


@pytest.fixture
def fake_llm() -> FakeLlm:
    return FakeLlm()
