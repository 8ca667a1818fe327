"""設定値・ロガーのテスト"""

import logging
from datetime import timedelta

import pytest

from lunchbot.utils.config import (
    ConfigError,
    LunchSettings,
    check_environment_variables,
    create_logger,
    get_env_variable,
)

ENV_KEYS = [
    "FORKABLE_EMAIL",
    "FORKABLE_PASSWORD",
    "FORKABLE_AUTH_TOKEN",
    "TIMEZONE",
    "FORKABLE_GRAPHQL_URL",
    "FORKABLE_SESSION_SAFETY_MARGIN_MINUTES",
    "FORKABLE_SESSION_FALLBACK_HOURS",
    "FORKABLE_REQUEST_TIMEOUT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_settings_defaults(clean_env):
    settings = LunchSettings.from_env()

    assert settings.timezone == "America/Los_Angeles"
    assert settings.graphql_url == "https://forkable.com/api/v2/graphql"
    assert settings.session_safety_margin == timedelta(hours=1)
    assert settings.session_fallback_lifetime == timedelta(hours=23)
    assert settings.request_timeout is None
    assert settings.has_credentials is False


def test_settings_from_env(clean_env):
    clean_env.setenv("FORKABLE_EMAIL", "me@example.com")
    clean_env.setenv("FORKABLE_PASSWORD", "secret")
    clean_env.setenv("FORKABLE_SESSION_SAFETY_MARGIN_MINUTES", "30")
    clean_env.setenv("FORKABLE_SESSION_FALLBACK_HOURS", "12")
    clean_env.setenv("FORKABLE_REQUEST_TIMEOUT", "10")

    settings = LunchSettings.from_env()

    assert settings.has_credentials is True
    assert settings.session_safety_margin == timedelta(minutes=30)
    assert settings.session_fallback_lifetime == timedelta(hours=12)
    assert settings.request_timeout == 10.0


def test_settings_with_invalid_number_raises_config_error(clean_env):
    clean_env.setenv("FORKABLE_REQUEST_TIMEOUT", "ten")

    with pytest.raises(ConfigError):
        LunchSettings.from_env()


def test_get_env_variable(monkeypatch):
    monkeypatch.setenv("FORKABLE_AUTH_TOKEN", "inbound")
    assert get_env_variable("FORKABLE_AUTH_TOKEN") == "inbound"

    monkeypatch.delenv("FORKABLE_AUTH_TOKEN")
    with pytest.raises(ConfigError):
        get_env_variable("FORKABLE_AUTH_TOKEN")


def test_check_environment_variables_reports_missing(monkeypatch):
    monkeypatch.delenv("FORKABLE_PASSWORD", raising=False)

    is_valid, missing_vars = check_environment_variables()

    assert is_valid is False
    assert "FORKABLE_PASSWORD" in missing_vars


def test_create_logger_adds_single_handler():
    logger = create_logger("lunchbot.tests.logger")
    create_logger("lunchbot.tests.logger")

    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO
    assert logger.propagate is False
