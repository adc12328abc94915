"""Errors raised while reading branchstate settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when an environment setting such as the log level or retry budget is unusable."""
