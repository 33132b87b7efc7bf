"""Command-line entry point.

Examples:
    writer-ai-service serve
    writer-ai-service serve --port 9000 --no-probe
    writer-ai-service cache stats
    writer-ai-service cache sweep
    writer-ai-service config show
"""

import json
import sys
from pathlib import Path
from typing import NoReturn

import click
from loguru import logger

from writer_ai_service import __version__
from writer_ai_service.config import CONFIG_FILE_NAME, Settings, find_config_dir, load_settings
from writer_ai_service.errors import WriterAIError
from writer_ai_service.log import configure_logging
from writer_ai_service.repositories import create_cache_repository
from writer_ai_service.services import CacheService


class CliContext:
    """Options shared by every command; settings load on first use."""

    def __init__(self, config_dir: Path | None, log_level: str | None) -> None:
        self.config_dir = config_dir
        self.log_level = log_level
        self._settings: Settings | None = None

    @property
    def config_path(self) -> Path:
        return (self.config_dir or find_config_dir()) / CONFIG_FILE_NAME

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            configure_logging(self.log_level or "INFO")
            try:
                self._settings = load_settings(config_dir=self.config_dir)
            except WriterAIError as e:
                fail(e)
            configure_logging(self.log_level or self._settings.log_level)
        return self._settings

    def cache_service(self) -> CacheService:
        settings = self.settings
        try:
            repository = create_cache_repository(settings)
        except WriterAIError as e:
            fail(e)
        return CacheService.create(repository=repository, settings=settings.cache)


def fail(error: WriterAIError) -> NoReturn:
    logger.error(error.message)
    sys.exit(1)


pass_context = click.make_pass_decorator(CliContext)


@click.group()
@click.version_option(__version__, prog_name="writer-ai-service")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help=f"Directory holding {CONFIG_FILE_NAME} (default: ~/.config/writer_ai_service)",
)
@click.option("--log-level", help="Override the configured log level (e.g. DEBUG)")
@click.pass_context
def main(ctx: click.Context, config_dir: Path | None, log_level: str | None) -> None:
    """Improve text with an LLM, caching responses on disk."""
    ctx.obj = CliContext(config_dir=config_dir, log_level=log_level)


@main.command()
@click.option("--host", help="Bind address (default: from config)")
@click.option("--port", type=int, help="Listen port (default: from config)")
@click.option("--no-probe", is_flag=True, help="Skip the LLM connectivity check at startup")
@pass_context
def serve(cli: CliContext, host: str | None, port: int | None, no_probe: bool) -> None:
    """Run the HTTP service."""
    import uvicorn

    from writer_ai_service.api.app import create_app

    settings = cli.settings
    host = host or settings.host
    port = port or settings.port
    logger.info("Starting server on {}:{}", host, port)
    uvicorn.run(
        create_app(settings=settings, probe_llm=not no_probe),
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


@main.group()
def cache() -> None:
    """Inspect or maintain the response cache."""


@cache.command("stats")
@pass_context
def cache_stats(cli: CliContext) -> None:
    """Print cache statistics as JSON."""
    cache_service = cli.cache_service()
    try:
        click.echo(json.dumps(cache_service.get_stats(), indent=2))
    except WriterAIError as e:
        fail(e)
    finally:
        cache_service.close()


@cache.command("sweep")
@pass_context
def cache_sweep(cli: CliContext) -> None:
    """Remove expired entries."""
    cache_service = cli.cache_service()
    try:
        click.echo(f"Removed {cache_service.sweep_expired()} expired entries")
    except WriterAIError as e:
        fail(e)
    finally:
        cache_service.close()


@cache.command("clear")
@click.confirmation_option(prompt="Remove every cached response?")
@pass_context
def cache_clear(cli: CliContext) -> None:
    """Remove every entry."""
    cache_service = cli.cache_service()
    try:
        click.echo(f"Removed {cache_service.clear()} entries")
    except WriterAIError as e:
        fail(e)
    finally:
        cache_service.close()


@main.group()
def config() -> None:
    """Inspect the effective configuration."""


@config.command("show")
@pass_context
def config_show(cli: CliContext) -> None:
    """Print the effective settings with the API key masked."""
    click.echo(json.dumps(cli.settings.redacted(), indent=2))


@config.command("path")
@pass_context
def config_path(cli: CliContext) -> None:
    """Print the location of the config file."""
    click.echo(cli.config_path)


if __name__ == "__main__":
    main()
