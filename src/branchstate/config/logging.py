"""Shared logging helpers for branchstate."""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError

LOG_LEVEL_ENV_VAR = "BRANCHSTATE_LOG_LEVEL"


def get_log_level(*, default: int = logging.INFO) -> int:
    """Resolve the log level from ``BRANCHSTATE_LOG_LEVEL`` (a level name)."""

    raw = os.getenv(LOG_LEVEL_ENV_VAR)
    if raw is None or not raw.strip():
        return default
    level = logging.getLevelNamesMapping().get(raw.strip().upper())
    if level is None:
        raise ConfigurationError(f"Unknown log level in {LOG_LEVEL_ENV_VAR}: {raw!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: the level
    defaults to ``BRANCHSTATE_LOG_LEVEL`` (or INFO) and the format is terse enough for
    CLI output. Pass ``force=True`` to reconfigure during tests or specialised entry
    points.
    """

    logging.basicConfig(
        level=get_log_level() if level is None else level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
