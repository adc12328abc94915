from __future__ import annotations

import logging

import pytest

from branchstate.config import ConfigurationError, configure_logging, get_log_level
from branchstate.config.logging import LOG_LEVEL_ENV_VAR


def test_get_log_level_defaults_to_info() -> None:
    assert get_log_level() == logging.INFO


def test_get_log_level_accepts_lowercase_names(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "debug")

    assert get_log_level() == logging.DEBUG


def test_get_log_level_rejects_unknown_names(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "chatty")

    with pytest.raises(ConfigurationError):
        get_log_level()


def test_configure_logging_passes_level_to_basic_config(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr(logging, "basicConfig", fake_basic_config)
    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "WARNING")

    configure_logging(force=True)

    assert captured["level"] == logging.WARNING
    assert captured["force"] is True
