"""Tests für die Konfiguration."""

import pytest

from config import Config, DEFAULT_API_BASE, DEFAULT_USER_AGENT
from rest import RestClient

ENV_KEYS = (
    "DISCORD_TOKEN",
    "API_BASE",
    "API_VERSION",
    "USER_AGENT",
    "REQUEST_TIMEOUT_SECONDS",
    "MAX_RETRIES",
    "MAX_RETRY_AFTER_SECONDS",
    "LOG_LEVEL",
    "ERROR_WEBHOOK_URL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_from_env_defaults(clean_env):
    clean_env.setenv("DISCORD_TOKEN", "abc")
    cfg = Config.from_env()

    assert cfg.discord_token == "abc"
    assert cfg.api_base == DEFAULT_API_BASE
    assert cfg.api_version == 10
    assert cfg.user_agent == DEFAULT_USER_AGENT
    assert cfg.request_timeout_seconds == 12
    assert cfg.max_retries == 5
    assert cfg.max_retry_after_seconds == 0
    assert cfg.log_level == "INFO"
    assert cfg.error_webhook_url == ""


def test_from_env_overrides(clean_env):
    clean_env.setenv("DISCORD_TOKEN", "abc")
    clean_env.setenv("API_BASE", "http://localhost:9000/")
    clean_env.setenv("API_VERSION", "9")
    clean_env.setenv("MAX_RETRIES", "2")
    clean_env.setenv("MAX_RETRY_AFTER_SECONDS", "30")
    clean_env.setenv("REQUEST_TIMEOUT_SECONDS", "3.5")
    cfg = Config.from_env()

    assert cfg.api_base == "http://localhost:9000"
    assert cfg.api_version == 9
    assert cfg.max_retries == 2
    assert cfg.max_retry_after_seconds == 30
    assert cfg.request_timeout_seconds == 3.5


def test_from_env_requires_token(clean_env):
    with pytest.raises(ValueError):
        Config.from_env()


def test_client_from_config(clean_env):
    clean_env.setenv("DISCORD_TOKEN", "abc")
    clean_env.setenv("MAX_RETRIES", "1")
    client = RestClient.from_config(Config.from_env())

    assert client.token == "abc"
    assert client.max_retries == 1
    assert client.url("/users/@me") == "https://discord.com/api/v10/users/@me"
