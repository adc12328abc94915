"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_positive_int
from .errors import ConfigurationError
from .generation import GenerationConfig, get_generation_config
from .logging import configure_logging, get_log_level

__all__ = [
    "ConfigurationError",
    "GenerationConfig",
    "configure_logging",
    "get_generation_config",
    "get_log_level",
    "optional_positive_int",
]
