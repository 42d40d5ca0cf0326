from __future__ import annotations

import logging

import pytest

from assistant_stream.core.logging import configure_logging
from assistant_stream.core.settings import Settings


def test_local_env_defaults_to_debug_logging_and_swagger(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.setenv("APP_ENV", "local")

    settings = Settings()

    assert settings.effective_log_level == "DEBUG"
    assert settings.enable_swagger is True


def test_explicit_log_level_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("LOG_LEVEL", "warning")

    settings = Settings()

    assert settings.effective_log_level == "WARNING"
    assert settings.enable_swagger is False


def test_request_timeout_must_be_positive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ASSISTANT_REQUEST_TIMEOUT_SECONDS", "0")

    with pytest.raises(ValueError):
        Settings()


def test_configure_logging_quiets_httpx_request_logs_outside_debug() -> None:
    configure_logging("info")
    assert logging.getLogger("httpx").level == logging.WARNING

    configure_logging("debug")
    assert logging.getLogger("httpx").level == logging.DEBUG
