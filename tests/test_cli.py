"""Tests for the command-line tooling."""

import json

import pytest
from click.testing import CliRunner

from writer_ai_service.cli import main
from writer_ai_service.config import CONFIG_FILE_NAME
from writer_ai_service.entities import CacheEntryEntity
from writer_ai_service.repositories import SqliteCacheRepository


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr("writer_ai_service.cli.configure_logging", lambda level: None)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("WRITER_AI_SERVICE__CACHE__PATH", str(tmp_path / "cache.sqlite3"))
    return tmp_path / "conf"


@pytest.fixture
def repository(tmp_path):
    return SqliteCacheRepository(tmp_path / "cache.sqlite3")


def invoke(runner, config_dir, *args, **kwargs):
    return runner.invoke(main, ["--config-dir", str(config_dir), *args], **kwargs)


def test_config_path(runner, config_dir):
    result = invoke(runner, config_dir, "config", "path")

    assert result.exit_code == 0
    assert result.stdout.strip() == str(config_dir / CONFIG_FILE_NAME)
    assert not config_dir.exists()


def test_config_show_writes_default_file(runner, config_dir):
    result = invoke(runner, config_dir, "config", "show")

    assert result.exit_code == 0
    shown = json.loads(result.stdout)
    assert shown["port"] == 8989
    assert (config_dir / CONFIG_FILE_NAME).exists()


def test_config_show_masks_api_key(runner, config_dir, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-abcdefghijklmnop")

    result = invoke(runner, config_dir, "config", "show")

    assert json.loads(result.stdout)["openai_api_key"] == "sk-a...mnop"
    assert "sk-abcdefghijklmnop" not in result.stdout


def test_cache_stats(runner, config_dir, repository):
    repository.put("k", CacheEntryEntity.create("v", now=0.0, ttl=10**12))

    result = invoke(runner, config_dir, "cache", "stats")

    assert result.exit_code == 0
    stats = json.loads(result.stdout)
    assert stats["total_entries"] == 1
    assert stats["backend"] == "sqlite"


def test_cache_sweep_and_clear(runner, config_dir, repository):
    repository.put("stale", CacheEntryEntity.create("v", now=0.0, ttl=1))
    repository.put("fresh", CacheEntryEntity.create("v", now=0.0, ttl=10**12))

    swept = invoke(runner, config_dir, "cache", "sweep")
    assert swept.exit_code == 0
    assert "Removed 1 expired entries" in swept.stdout

    cleared = invoke(runner, config_dir, "cache", "clear", "--yes")
    assert cleared.exit_code == 0
    assert "Removed 1 entries" in cleared.stdout
    assert repository.count_all() == 0


def test_cache_clear_asks_for_confirmation(runner, config_dir, repository):
    repository.put("k", CacheEntryEntity.create("v", now=0.0, ttl=10**12))

    result = invoke(runner, config_dir, "cache", "clear", input="n\n")

    assert result.exit_code != 0
    assert repository.count_all() == 1


def test_config_error_exits_non_zero(runner, config_dir):
    config_dir.mkdir()
    (config_dir / CONFIG_FILE_NAME).write_text("port = = 1\n")

    result = invoke(runner, config_dir, "config", "show")

    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_serve_uses_options(runner, config_dir, monkeypatch):
    calls = {}

    def fake_run(app, host, port, log_level):
        calls.update(host=host, port=port, log_level=log_level)

    monkeypatch.setattr("uvicorn.run", fake_run)

    result = invoke(runner, config_dir, "serve", "--port", "9000", "--no-probe")

    assert result.exit_code == 0
    assert calls == {"host": "127.0.0.1", "port": 9000, "log_level": "info"}
