"""Tests for configuration loading."""

import tomllib

import pytest

from writer_ai_service.config import (
    CONFIG_FILE_NAME,
    DEFAULT_LLM_PARAMS,
    DEFAULT_PROMPT_TEMPLATE,
    CacheSettings,
    Settings,
    default_cache_path,
    load_settings,
    render_config,
)
from writer_ai_service.errors import ConfigError


def write_config(config_dir, text):
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / CONFIG_FILE_NAME).write_text(text, encoding="utf-8")


def test_missing_file_uses_defaults_and_writes_one(tmp_path):
    config_dir = tmp_path / "conf"

    settings = load_settings(config_dir=config_dir)

    assert settings.port == 8989
    assert settings.host == "127.0.0.1"
    assert settings.model_name == "mistral:latest"
    assert settings.request_timeout_secs == 180.0
    assert settings.prompt_template == DEFAULT_PROMPT_TEMPLATE
    assert settings.llm_params == DEFAULT_LLM_PARAMS
    assert settings.cache.enabled is True
    assert settings.cache.ttl_days == 30
    assert settings.cache.max_size_mb == 100

    written = tomllib.loads((config_dir / CONFIG_FILE_NAME).read_text(encoding="utf-8"))
    assert written["port"] == 8989
    assert written["prompt_template"] == DEFAULT_PROMPT_TEMPLATE
    assert written["llm_params"] == DEFAULT_LLM_PARAMS
    assert written["cache"]["ttl_days"] == 30


def test_written_default_file_loads_to_same_settings(tmp_path):
    first = load_settings(config_dir=tmp_path)
    second = load_settings(config_dir=tmp_path)

    assert first == second


def test_missing_file_is_seeded_with_env_values(tmp_path, monkeypatch):
    monkeypatch.setenv("WRITER_AI_SERVICE__MODEL_NAME", "llama3")

    load_settings(config_dir=tmp_path)

    written = tomllib.loads((tmp_path / CONFIG_FILE_NAME).read_text(encoding="utf-8"))
    assert written["model_name"] == "llama3"


def test_file_values_override_defaults(tmp_path):
    write_config(
        tmp_path,
        """
port = 9100
model_name = "llama3"
llm_url = "http://example.test/v1/chat/completions"

[cache]
enabled = false
ttl_days = 7
""",
    )

    settings = load_settings(config_dir=tmp_path)

    assert settings.port == 9100
    assert settings.model_name == "llama3"
    assert settings.llm_url == "http://example.test/v1/chat/completions"
    assert settings.cache.enabled is False
    assert settings.cache.ttl_days == 7
    assert settings.cache.max_size_mb == 100


def test_existing_file_without_template_means_no_template(tmp_path):
    write_config(tmp_path, 'model_name = "llama3"\n')

    settings = load_settings(config_dir=tmp_path)

    assert settings.prompt_template is None
    assert settings.llm_params == {}


def test_environment_overrides_file(tmp_path, monkeypatch):
    write_config(
        tmp_path,
        """
port = 9100

[cache]
enabled = true

[llm_params]
temperature = 0.7
top_p = 1
""",
    )
    monkeypatch.setenv("WRITER_AI_SERVICE__PORT", "9200")
    monkeypatch.setenv("WRITER_AI_SERVICE__CACHE__ENABLED", "false")
    monkeypatch.setenv("WRITER_AI_SERVICE__CACHE__TTL_DAYS", "3")
    monkeypatch.setenv("WRITER_AI_SERVICE__LLM_PARAMS__TEMPERATURE", "0.2")
    monkeypatch.setenv("WRITER_AI_SERVICE__LLM_PARAMS__STOP", "end")

    settings = load_settings(config_dir=tmp_path)

    assert settings.port == 9200
    assert settings.cache.enabled is False
    assert settings.cache.ttl_days == 3
    assert settings.llm_params == {"temperature": 0.2, "top_p": 1, "stop": "end"}


def test_credentials_fall_back_to_openai_variables(tmp_path, monkeypatch):
    write_config(tmp_path, "")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-abcdefghijklmnop")
    monkeypatch.setenv("OPENAI_ORG_ID", "org-1")

    settings = load_settings(config_dir=tmp_path)

    assert settings.openai_api_key == "sk-abcdefghijklmnop"
    assert settings.openai_org_id == "org-1"
    assert settings.openai_project_id is None
    assert settings.masked_api_key == "sk-a...mnop"


def test_file_credentials_win_over_fallback(tmp_path, monkeypatch):
    write_config(tmp_path, 'openai_api_key = "from-file-key-123"\n')
    monkeypatch.setenv("OPENAI_API_KEY", "from-env-key-456")

    settings = load_settings(config_dir=tmp_path)

    assert settings.openai_api_key == "from-file-key-123"


def test_prefixed_credentials_win_over_file(tmp_path, monkeypatch):
    write_config(tmp_path, 'openai_api_key = "from-file-key-123"\n')
    monkeypatch.setenv("WRITER_AI_SERVICE__OPENAI_API_KEY", "from-prefixed-789")

    settings = load_settings(config_dir=tmp_path)

    assert settings.openai_api_key == "from-prefixed-789"


def test_empty_credential_means_unset(tmp_path):
    write_config(tmp_path, 'openai_api_key = ""\n')

    assert load_settings(config_dir=tmp_path).openai_api_key is None


def test_malformed_toml_raises_config_error(tmp_path):
    write_config(tmp_path, "port = = 1\n")

    with pytest.raises(ConfigError, match="malformed"):
        load_settings(config_dir=tmp_path)


def test_non_utf8_file_raises_config_error(tmp_path):
    (tmp_path / CONFIG_FILE_NAME).write_bytes(b'model_name = "\xff\xfe"\n')

    with pytest.raises(ConfigError, match="malformed"):
        load_settings(config_dir=tmp_path)


def test_wrong_type_raises_config_error(tmp_path):
    write_config(tmp_path, 'port = "not a number"\n')

    with pytest.raises(ConfigError, match="port"):
        load_settings(config_dir=tmp_path)


def test_invalid_env_value_raises_config_error(tmp_path, monkeypatch):
    write_config(tmp_path, "")
    monkeypatch.setenv("WRITER_AI_SERVICE__CACHE__ENABLED", "maybe")

    with pytest.raises(ConfigError, match="cache.enabled"):
        load_settings(config_dir=tmp_path)


@pytest.mark.parametrize("port", ["0", "70000"])
def test_port_out_of_range(tmp_path, monkeypatch, port):
    write_config(tmp_path, "")
    monkeypatch.setenv("WRITER_AI_SERVICE__PORT", port)

    with pytest.raises(ConfigError, match="port"):
        load_settings(config_dir=tmp_path)


@pytest.mark.parametrize("timeout", ["0", "-5", "nan", "inf"])
def test_timeout_must_be_positive_and_finite(tmp_path, monkeypatch, timeout):
    write_config(tmp_path, "")
    monkeypatch.setenv("WRITER_AI_SERVICE__REQUEST_TIMEOUT_SECS", timeout)

    with pytest.raises(ConfigError, match="request_timeout_secs"):
        load_settings(config_dir=tmp_path)


@pytest.mark.parametrize(
    "template",
    ["no placeholder here", "{{input}} twice {{input}}"],
)
def test_template_needs_exactly_one_placeholder(tmp_path, template):
    write_config(tmp_path, f'prompt_template = "{template}"\n')

    with pytest.raises(ConfigError, match="placeholder"):
        load_settings(config_dir=tmp_path)


def test_negative_ttl_raises_config_error(tmp_path):
    write_config(tmp_path, "[cache]\nttl_days = -1\n")

    with pytest.raises(ConfigError, match="cache.ttl_days"):
        load_settings(config_dir=tmp_path)


def test_unwritable_config_dir_raises_config_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")

    with pytest.raises(ConfigError, match="failed to write config file"):
        load_settings(config_dir=blocker / "conf")


def test_unknown_keys_are_ignored(tmp_path):
    write_config(tmp_path, 'port = 9001\nflavour = "vanilla"\n\n[cache]\ncolour = "blue"\n')

    settings = load_settings(config_dir=tmp_path)

    assert settings.port == 9001
    assert not hasattr(settings, "flavour")


def test_settings_are_immutable():
    settings = Settings()

    with pytest.raises(ValueError):
        settings.port = 1


def test_render_config_never_writes_credentials():
    settings = Settings(openai_api_key="sk-secret-value-1234", openai_org_id="org-secret")

    text = render_config(settings)

    assert "sk-secret-value-1234" not in text
    assert "org-secret" not in text
    data = tomllib.loads(text)
    assert data["port"] == 8989
    assert "openai_api_key" not in data


def test_render_config_round_trips_template():
    template = "Say \"hi\" to 'everyone':\n\n{{input}}\n"
    settings = Settings(prompt_template=template, llm_params={"options": {"num_ctx": 4096}})

    data = tomllib.loads(render_config(settings))

    assert data["prompt_template"] == template
    assert data["llm_params"] == {"options": {"num_ctx": 4096}}


def test_redacted_masks_api_key():
    settings = Settings(openai_api_key="sk-secret-value-1234", llm_params={"temperature": 0.1})

    data = settings.redacted()

    assert data["openai_api_key"] == "sk-s...1234"
    assert data["llm_params"] == {"temperature": 0.1}
    assert data["cache"]["ttl_days"] == 30


def test_default_cache_path_honours_xdg_and_override(tmp_path):
    assert default_cache_path(Settings(), environ={"XDG_CACHE_HOME": str(tmp_path)}) == (
        tmp_path / "writer_ai_service" / "response_cache.sqlite3"
    )

    custom = Settings(cache=CacheSettings(path=str(tmp_path / "mine.db")))
    assert default_cache_path(custom) == tmp_path / "mine.db"
