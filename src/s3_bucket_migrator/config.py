"""Run configuration for the S3 Bucket Migrator."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any

from .exceptions import MigrationConfigError

DEFAULT_SEPARATOR = "."
DEFAULT_SUBSTITUTE = "-"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise MigrationConfigError(f"{name} must be a number, got '{raw}'") from e


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise MigrationConfigError(f"{name} must be an integer, got '{raw}'") from e


@dataclass(frozen=True)
class MigrationSettings:
    """Tunables shared by every run of a process.

    Attributes:
        max_concurrency: Upper bound on concurrently running bucket pipelines
        consistency_timeout: Seconds to wait for a created bucket to become visible
        initial_delay: First visibility poll delay in seconds
        max_delay: Cap on the visibility poll delay in seconds
        separator: Character replaced in source bucket names
        substitute: Replacement character
    """

    max_concurrency: int = 4
    consistency_timeout: float = 60.0
    initial_delay: float = 0.5
    max_delay: float = 8.0
    separator: str = DEFAULT_SEPARATOR
    substitute: str = DEFAULT_SUBSTITUTE

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            raise MigrationConfigError("max_concurrency must be at least 1")
        if self.consistency_timeout <= 0:
            raise MigrationConfigError("consistency_timeout must be positive")
        if self.initial_delay <= 0 or self.max_delay < self.initial_delay:
            raise MigrationConfigError("poll delays must be positive and max_delay >= initial_delay")
        if len(self.separator) != 1 or len(self.substitute) != 1:
            raise MigrationConfigError("separator and substitute must be single characters")
        if self.separator == self.substitute:
            raise MigrationConfigError("separator and substitute must differ")

    @classmethod
    def from_env(cls) -> MigrationSettings:
        """Build settings from MIGRATOR_* environment variables."""
        return cls(
            max_concurrency=_env_int("MIGRATOR_MAX_CONCURRENCY", cls.max_concurrency),
            consistency_timeout=_env_float("MIGRATOR_CONSISTENCY_TIMEOUT_SECONDS", cls.consistency_timeout),
            initial_delay=_env_float("MIGRATOR_CONSISTENCY_INITIAL_DELAY_SECONDS", cls.initial_delay),
            max_delay=_env_float("MIGRATOR_CONSISTENCY_MAX_DELAY_SECONDS", cls.max_delay),
            separator=os.getenv("MIGRATOR_NAME_SEPARATOR") or cls.separator,
            substitute=os.getenv("MIGRATOR_NAME_SUBSTITUTE") or cls.substitute,
        )

    def override(self, **changes: Any) -> MigrationSettings:
        """Return a copy with the given non-None fields replaced."""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})
