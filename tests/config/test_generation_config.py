from __future__ import annotations

import pytest

from branchstate.config import ConfigurationError, GenerationConfig, get_generation_config
from branchstate.config.generation import MAX_ATTEMPTS_ENV_VAR


def test_generation_config_defaults_to_two_attempts() -> None:
    assert get_generation_config() == GenerationConfig(max_attempts=2)


def test_generation_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(MAX_ATTEMPTS_ENV_VAR, "3")

    assert get_generation_config().max_attempts == 3


def test_generation_config_rejects_non_positive_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(MAX_ATTEMPTS_ENV_VAR, "0")

    with pytest.raises(ConfigurationError):
        get_generation_config()


def test_generation_config_validates_direct_construction() -> None:
    with pytest.raises(ValueError, match="max_attempts"):
        GenerationConfig(max_attempts=0)
