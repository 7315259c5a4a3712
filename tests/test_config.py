"""Tests for settings loading and Redis client construction."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from passwordless_redis.clients import create_redis_client
from passwordless_redis.core.config import TokenStoreSettings, get_settings
from passwordless_redis.errors import InvalidConfigurationError
from passwordless_redis.services import RedisTokenStore

SETTINGS_ENV_KEYS = [
    "REDIS_URL",
    "REDIS_HOST",
    "REDIS_PORT",
    "REDIS_DATABASE",
    "TOKEN_KEY_PREFIX",
    "TOKEN_HASH_ROUNDS",
    "TOKEN_CLEAR_CONCURRENCY",
    "APP_LOG_LEVEL",
    "APP_LOG_FORMAT",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in SETTINGS_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    # Keep a developer's local .env out of the picture.
    monkeypatch.chdir(tmp_path)


def test_defaults(clean_env) -> None:
    settings = TokenStoreSettings()

    assert settings.redis_url is None
    assert settings.redis_host == "localhost"
    assert settings.redis_port == 6379
    assert settings.database == 0
    assert settings.token_key_prefix == "pwdless:"
    assert settings.hash_rounds == 12
    assert settings.clear_concurrency == 8


def test_reads_environment(clean_env, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REDIS_DATABASE", "7")
    monkeypatch.setenv("TOKEN_KEY_PREFIX", "login:")
    monkeypatch.setenv("TOKEN_HASH_ROUNDS", "13")

    settings = TokenStoreSettings()

    assert settings.database == 7
    assert settings.token_key_prefix == "login:"
    assert settings.hash_rounds == 13


def test_reads_env_file(clean_env, tmp_path: Path) -> None:
    env_file = tmp_path / "store.env"
    env_file.write_text("REDIS_DATABASE=4\nTOKEN_KEY_PREFIX=file:\n", encoding="utf-8")

    settings = TokenStoreSettings(_env_file=env_file)  # type: ignore[call-arg]

    assert settings.database == 4
    assert settings.token_key_prefix == "file:"


@pytest.mark.parametrize(
    "key, value",
    [
        ("REDIS_DATABASE", "test"),
        ("REDIS_DATABASE", "-1"),
        ("TOKEN_HASH_ROUNDS", "11"),
        ("TOKEN_HASH_ROUNDS", "32"),
        ("TOKEN_KEY_PREFIX", ""),
        ("TOKEN_CLEAR_CONCURRENCY", "0"),
    ],
)
def test_rejects_invalid_values(
    clean_env, monkeypatch: pytest.MonkeyPatch, key: str, value: str
) -> None:
    monkeypatch.setenv(key, value)
    with pytest.raises(ValidationError):
        TokenStoreSettings()


def test_get_settings_is_cached(clean_env) -> None:
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()


def test_client_uses_host_port_and_database(clean_env) -> None:
    settings = TokenStoreSettings(REDIS_HOST="redis.internal", REDIS_PORT=6380, REDIS_DATABASE=3)

    client = create_redis_client(settings)

    kwargs = client.connection_pool.connection_kwargs
    assert kwargs["host"] == "redis.internal"
    assert kwargs["port"] == 6380
    assert kwargs["db"] == 3
    assert kwargs["decode_responses"] is True


def test_client_prefers_url(clean_env) -> None:
    settings = TokenStoreSettings(
        REDIS_URL="redis://cache.example.com:6390", REDIS_DATABASE=5
    )

    client = create_redis_client(settings, socket_timeout=2.0)

    kwargs = client.connection_pool.connection_kwargs
    assert kwargs["host"] == "cache.example.com"
    assert kwargs["port"] == 6390
    assert kwargs["db"] == 5
    assert kwargs["socket_timeout"] == 2.0


@pytest.mark.parametrize(
    "url",
    ["redis://localhost:6379/3", "redis://localhost:6379?db=3", "unix:///tmp/redis.sock?db=3"],
)
def test_client_rejects_url_naming_other_database(clean_env, url: str) -> None:
    settings = TokenStoreSettings(REDIS_URL=url, REDIS_DATABASE=0)

    with pytest.raises(InvalidConfigurationError):
        create_redis_client(settings)


def test_client_accepts_url_naming_same_database(clean_env) -> None:
    settings = TokenStoreSettings(REDIS_URL="redis://localhost:6379/3", REDIS_DATABASE=3)

    client = create_redis_client(settings)

    assert client.connection_pool.connection_kwargs["db"] == 3


def test_client_rejects_non_numeric_url_database(clean_env) -> None:
    settings = TokenStoreSettings(REDIS_URL="redis://localhost:6379/cache")

    with pytest.raises(InvalidConfigurationError):
        create_redis_client(settings)


def test_log_format_setting(clean_env, monkeypatch: pytest.MonkeyPatch) -> None:
    assert "%(levelname)s" in TokenStoreSettings().log_format

    monkeypatch.setenv("APP_LOG_FORMAT", "%(message)s")
    assert TokenStoreSettings().log_format == "%(message)s"


def test_store_from_settings(clean_env) -> None:
    settings = TokenStoreSettings(
        REDIS_DATABASE=2, TOKEN_KEY_PREFIX="app:", TOKEN_HASH_ROUNDS=13
    )

    store = RedisTokenStore.from_settings(settings)

    assert store.database == 2
    assert store.namespace.prefix == "app:"
