"""Configuration loading.

Effective settings are resolved from three layers, highest precedence first:

1. Environment variables prefixed ``WRITER_AI_SERVICE__`` (nested sections
   use ``__`` too, e.g. ``WRITER_AI_SERVICE__CACHE__ENABLED=false``)
2. ``~/.config/writer_ai_service/config.toml``
3. Built-in defaults

When the file is missing a default one is written from the effective values
so later runs see the same configuration.
"""

import os
import tomllib
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

import tomli_w
from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
    TomlConfigSettingsSource,
)

from writer_ai_service.errors import ConfigError

load_dotenv()

ENV_PREFIX = "WRITER_AI_SERVICE__"
ENV_NESTED_DELIMITER = "__"
APP_DIR_NAME = "writer_ai_service"
CONFIG_FILE_NAME = "config.toml"
CACHE_FILE_NAME = "response_cache.sqlite3"
TEMPLATE_PLACEHOLDER = "{{input}}"

DEFAULT_LLM_PARAMS: dict[str, Any] = {
    "temperature": 0.7,
    "max_output_tokens": 500,
    "top_p": 1,
}

DEFAULT_PROMPT_TEMPLATE = """Improve the provided text input for clarity, grammar, and overall communication, ensuring it's fluently expressed in English.

# Steps

1. **Identify Errors**: Examine the input text for grammatical, spelling, and punctuation errors.
2. **Improve Clarity**: Rephrase sentences to improve clarity and flow while maintaining the original meaning.
3. **Ensure Fluency**: Adjust the text to sound natural and fluent in English.
4. **Check Consistency**: Ensure the tone remains consistent throughout the text.
5. **Produce Improved Text**: Deliver the revised version focusing on correctness and readability.

# Output Format

- Provide a single improved version of the input text as a plain sentence or paragraph.
- Do not include the original text in the response.

# Examples

**Example 1:**

- **Input**: "My English is no such god. Howe ar you?"
- **Output**: "My English isn't very good. How are you?"

**Example 2:**

- **Input**: "Weather here change alot. I not used it."
- **Output**: "The weather here changes a lot. I'm not used to it."

# Notes

- Maintain the main idea or intent of the original input.
- Focus on improving readability and grammatical correctness.

{{input}}
"""

CREDENTIAL_FIELDS = {
    "openai_api_key": "OPENAI_API_KEY",
    "openai_org_id": "OPENAI_ORG_ID",
    "openai_project_id": "OPENAI_PROJECT_ID",
}

CONFIG_FILE_HEADER = """\
# Writer AI service configuration
# Created because the file was missing. Review and adjust as needed.
#
# Authentication for OpenAI-compatible APIs may be added here as
# openai_api_key, openai_org_id and openai_project_id, or set via
# OPENAI_API_KEY, OPENAI_ORG_ID and OPENAI_PROJECT_ID.
# {{input}} in prompt_template is replaced by the submitted text.
# cache.max_size_mb is accepted but not enforced yet.

"""


class CacheSettings(BaseModel):
    """Response cache policy."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    ttl_days: int = Field(default=30, ge=0)
    max_size_mb: int = Field(default=100, ge=0, description="Accepted and reported, not enforced")
    path: str | None = Field(default=None, description="Override of the SQLite file location")

    @property
    def ttl_seconds(self) -> int:
        return self.ttl_days * 24 * 60 * 60


class Settings(BaseSettings):
    """Application settings, loaded once per process and never mutated.

    Keyword arguments act as the config-file layer: environment variables
    prefixed ``WRITER_AI_SERVICE__`` override them.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter=ENV_NESTED_DELIMITER,
        extra="ignore",
        frozen=True,
    )

    port: int = Field(default=8989, gt=0, lt=65536)
    host: str = "127.0.0.1"
    llm_url: str = "http://localhost:11434/api/generate"
    model_name: str = "mistral:latest"
    llm_params: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra fields merged into the LLM request body",
    )
    prompt_template: str | None = None
    openai_api_key: str | None = None
    openai_org_id: str | None = None
    openai_project_id: str | None = None
    request_timeout_secs: float = Field(default=180.0, gt=0, allow_inf_nan=False)
    log_level: str = "INFO"
    cache: CacheSettings = Field(default_factory=CacheSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings

    @field_validator("prompt_template")
    @classmethod
    def check_placeholder(cls, value: str | None) -> str | None:
        if value is None:
            return value
        count = value.count(TEMPLATE_PLACEHOLDER)
        if count != 1:
            raise ValueError(f"must contain exactly one {TEMPLATE_PLACEHOLDER} placeholder, found {count}")
        return value

    @field_validator(*CREDENTIAL_FIELDS)
    @classmethod
    def empty_credential_is_unset(cls, value: str | None) -> str | None:
        return value or None

    @property
    def masked_api_key(self) -> str | None:
        """API key safe for logs: first and last four characters only."""
        if not self.openai_api_key:
            return None
        if len(self.openai_api_key) <= 8:
            return "[too short]"
        return f"{self.openai_api_key[:4]}...{self.openai_api_key[-4:]}"

    def redacted(self) -> dict[str, Any]:
        """Settings as a plain dict with the API key masked."""
        data = self.model_dump()
        data["openai_api_key"] = self.masked_api_key
        return data


def find_config_dir() -> Path:
    """Return ``~/.config/writer_ai_service``."""
    try:
        home = Path.home()
    except RuntimeError as e:
        raise ConfigError("could not determine home directory") from e
    return home / ".config" / APP_DIR_NAME


def default_cache_path(settings: Settings, environ: Mapping[str, str] | None = None) -> Path:
    """Location of the on-disk cache, honouring ``cache.path`` and XDG_CACHE_HOME."""
    if settings.cache.path:
        return Path(settings.cache.path).expanduser()
    environ = os.environ if environ is None else environ
    base = environ.get("XDG_CACHE_HOME")
    cache_root = Path(base) if base else Path.home() / ".cache"
    return cache_root / APP_DIR_NAME / CACHE_FILE_NAME


def load_settings(config_dir: Path | None = None) -> Settings:
    """Resolve the effective settings.

    Args:
        config_dir: Directory holding config.toml. Defaults to find_config_dir().

    Returns:
        The effective Settings

    Raises:
        ConfigError: If the file is malformed, a value is invalid, or the
                     default file cannot be written
    """
    config_dir = config_dir or find_config_dir()
    config_path = config_dir / CONFIG_FILE_NAME
    logger.info("Attempting to load configuration from: {}", config_path)

    file_values = read_config_file(config_path)
    if file_values is None:
        # The stock template and params seed a fresh file only; an existing
        # file that omits them means "none".
        values: dict[str, Any] = {
            "llm_params": dict(DEFAULT_LLM_PARAMS),
            "prompt_template": DEFAULT_PROMPT_TEMPLATE,
        }
    else:
        values = file_values

    for name, env_name in CREDENTIAL_FIELDS.items():
        if not values.get(name) and os.environ.get(env_name):
            logger.info("Using {} from environment", env_name)
            values[name] = os.environ[env_name]

    try:
        settings = Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {describe_validation_error(e)}") from e
    except SettingsError as e:
        raise ConfigError(f"invalid environment override: {e}") from e

    if file_values is None:
        logger.warning("Config file not found at {}. Creating a default one.", config_path)
        write_config_file(config_path, settings)
    else:
        logger.info("Loaded configuration successfully from {}", config_path)

    if settings.masked_api_key:
        logger.info("Using API key: {}", settings.masked_api_key)
    logger.debug("Effective configuration: {}", settings.redacted())
    return settings


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use."""
    return load_settings()


def read_config_file(path: Path) -> dict[str, Any] | None:
    """Read config.toml, or return None when it does not exist.

    Raises:
        ConfigError: If the file cannot be read or is not valid UTF-8 TOML
    """
    if not path.exists():
        return None
    try:
        data = TomlConfigSettingsSource(Settings, toml_file=path)()
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"malformed config file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e

    for key in data:
        if key not in Settings.model_fields:
            logger.warning("Ignoring unknown config key '{}' in {}", key, path)
    if isinstance(data.get("cache"), dict):
        for key in data["cache"]:
            if key not in CacheSettings.model_fields:
                logger.warning("Ignoring unknown cache setting '{}' in {}", key, path)
    return dict(data)


def write_config_file(path: Path, settings: Settings) -> None:
    """Persist settings as a TOML config file, creating parent directories."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_config(settings), encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to write config file {path}: {e}") from e
    logger.info("Created default config file at {}", path)


def render_config(settings: Settings) -> str:
    """Render settings as TOML text. Credentials are never written."""
    data = settings.model_dump(exclude=set(CREDENTIAL_FIELDS), exclude_none=True)
    return CONFIG_FILE_HEADER + tomli_w.dumps(data, multiline_strings=True)


def describe_validation_error(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}" for item in error.errors()
    )
