"""Configuration value object for the claim scheduling reconciler."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from claimsched.config.scheduling import DEFAULT_RECONCILE_TIMEOUT, DEFAULT_SHORT_WAIT
from claimsched.domain.ports.events import NopRecorder
from claimsched.domain.scheduling.jitter import Jitterer, RandomJitterer

if TYPE_CHECKING:
    from claimsched.config.scheduling import SchedulingConfig
    from claimsched.domain.ports.events import EventRecorder

_DEFAULT_LOGGER = logging.getLogger("claimsched.scheduling")


@dataclass(frozen=True, slots=True)
class SchedulerOptions:
    """Every knob the reconciler recognises, with its default.

    - ``jitterer``: called once per pass right before the conditional write;
      defaults to a uniform delay in ``[0, 1.5s)``.
    - ``recorder``: receives the "class selected" event; defaults to a no-op.
    - ``logger``: debug log sink; defaults to the ``claimsched.scheduling`` logger.
    - ``rng``: picks among candidate classes; pass a seeded ``random.Random``
      for reproducible selection.
    - ``timeout``: bounds a whole pass.
    - ``short_wait``: requeue delay when no class matches.
    - ``clock``: monotonic clock used for the deadline.
    """

    jitterer: Jitterer = field(default_factory=RandomJitterer)
    recorder: EventRecorder = field(default_factory=NopRecorder)
    logger: logging.Logger | logging.LoggerAdapter[logging.Logger] = _DEFAULT_LOGGER
    rng: random.Random = field(default_factory=random.Random)
    timeout: timedelta = DEFAULT_RECONCILE_TIMEOUT
    short_wait: timedelta = DEFAULT_SHORT_WAIT
    clock: Callable[[], float] = time.monotonic

    @classmethod
    def from_config(cls, config: SchedulingConfig, **overrides: object) -> SchedulerOptions:
        """Build options from environment-derived config; keyword overrides win."""

        values: dict[str, object] = {
            "jitterer": RandomJitterer(config.max_jitter_ms),
            "timeout": config.timeout,
            "short_wait": config.short_wait,
        }
        values.update(overrides)
        return cls(**values)  # pyright: ignore[reportArgumentType]


class Deadline:
    """Deadline for one pass, measured on the options' clock."""

    def __init__(self, timeout: timedelta, clock: Callable[[], float]) -> None:
        self.timeout = timeout.total_seconds()
        self._clock = clock
        self._expires_at = clock() + self.timeout

    def remaining(self) -> float:
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self._clock() >= self._expires_at
