"""Typed readers for optional environment settings."""

from __future__ import annotations

import os

from .errors import ConfigurationError


def optional_positive_int(name: str, *, default: int) -> int:
    """Read a positive integer from ``name``, falling back to ``default`` when unset."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value
