"""Scheduling defaults and their environment overrides."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Final

from .env import env_float
from .errors import ConfigurationError

DEFAULT_RECONCILE_TIMEOUT: Final[timedelta] = timedelta(minutes=1)
DEFAULT_MAX_JITTER_MS: Final[int] = 1500
DEFAULT_SHORT_WAIT: Final[timedelta] = timedelta(seconds=30)


@dataclass(frozen=True, slots=True)
class SchedulingConfig:
    """Tunables for one scheduling pass.

    ``timeout`` bounds the whole pass (fetch, list, jitter and write),
    ``max_jitter_ms`` is the exclusive upper bound of the pre-write delay and
    ``short_wait`` is how long to wait before polling again when no class matched.
    """

    timeout: timedelta = DEFAULT_RECONCILE_TIMEOUT
    max_jitter_ms: int = DEFAULT_MAX_JITTER_MS
    short_wait: timedelta = DEFAULT_SHORT_WAIT

    def __post_init__(self) -> None:
        if self.timeout <= timedelta(0):
            raise ConfigurationError("Reconcile timeout must be positive")
        if self.max_jitter_ms < 0:
            raise ConfigurationError("Maximum jitter must be non-negative")
        if self.short_wait < timedelta(0):
            raise ConfigurationError("Short wait must be non-negative")


def get_scheduling_config() -> SchedulingConfig:
    timeout = env_float("CLAIMSCHED_TIMEOUT_SECONDS", DEFAULT_RECONCILE_TIMEOUT.total_seconds())
    max_jitter = env_float("CLAIMSCHED_MAX_JITTER_MS", DEFAULT_MAX_JITTER_MS)
    short_wait = env_float("CLAIMSCHED_SHORT_WAIT_SECONDS", DEFAULT_SHORT_WAIT.total_seconds())
    try:
        return SchedulingConfig(
            timeout=timedelta(seconds=timeout),
            max_jitter_ms=int(max_jitter),
            short_wait=timedelta(seconds=short_wait),
        )
    except OverflowError as exc:
        raise ConfigurationError(f"Scheduling setting out of range: {exc}") from exc
