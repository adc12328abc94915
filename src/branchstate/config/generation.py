"""Page-generation defaults for the reconciliation retry loop."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_positive_int

DEFAULT_MAX_RECONCILIATION_ATTEMPTS = 2
MAX_ATTEMPTS_ENV_VAR = "BRANCHSTATE_MAX_RECONCILIATION_ATTEMPTS"


@dataclass(frozen=True, slots=True)
class GenerationConfig:
    max_attempts: int = DEFAULT_MAX_RECONCILIATION_ATTEMPTS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")


def get_generation_config() -> GenerationConfig:
    return GenerationConfig(
        max_attempts=optional_positive_int(
            MAX_ATTEMPTS_ENV_VAR,
            default=DEFAULT_MAX_RECONCILIATION_ATTEMPTS,
        )
    )
