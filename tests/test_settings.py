"""
Tests for environment-driven settings.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from max_confirmator.config.settings import DEFAULT_BASE_URL, load_settings

ENV_VARS = (
    "MAX_JEUNE_BASE_URL",
    "CREDENTIAL_STORE",
    "AWS_REGION",
    "USERS_PARAMETER_NAME",
    "CREDENTIALS_FILE",
    "REQUEST_TIMEOUT_SECONDS",
    "PROACTIVE_REFRESH",
    "TRAVELS_LOOKBACK_HOURS",
    "LOG_LEVEL",
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHAT_ID",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = load_settings()

    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.credential_store == "ssm"
    assert settings.aws_region == "eu-west-3"
    assert settings.users_parameter_name == "/SNCFMaxJeune/users"
    assert settings.request_timeout_seconds == 10.0
    assert settings.proactive_refresh is False
    assert settings.travels_lookback == timedelta(hours=24)
    assert settings.telegram_enabled is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MAX_JEUNE_BASE_URL", "https://staging.example.test/api/")
    monkeypatch.setenv("CREDENTIAL_STORE", "FILE")
    monkeypatch.setenv("CREDENTIALS_FILE", "/tmp/users.json")
    monkeypatch.setenv("PROACTIVE_REFRESH", "yes")
    monkeypatch.setenv("TRAVELS_LOOKBACK_HOURS", "48")
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "bot")
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "42")

    settings = load_settings()

    assert settings.base_url == "https://staging.example.test/api"
    assert settings.credential_store == "file"
    assert settings.credentials_file == Path("/tmp/users.json")
    assert settings.proactive_refresh is True
    assert settings.travels_lookback == timedelta(hours=48)
    assert settings.request_timeout_seconds == 2.5
    assert settings.log_level == "DEBUG"
    assert settings.telegram_enabled is True


def test_explicit_credentials_file_forces_file_store(tmp_path):
    settings = load_settings(credentials_file=tmp_path / "users.json")

    assert settings.credential_store == "file"
    assert settings.credentials_file == tmp_path / "users.json"


@pytest.mark.parametrize(
    "name, value",
    [
        ("CREDENTIAL_STORE", "vault"),
        ("TRAVELS_LOOKBACK_HOURS", "-1"),
        ("TRAVELS_LOOKBACK_HOURS", "soon"),
        ("REQUEST_TIMEOUT_SECONDS", "0"),
    ],
)
def test_invalid_values_raise(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        load_settings()
