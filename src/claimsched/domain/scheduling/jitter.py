"""Randomised pre-write delays.

Several schedulers may race to bind the same claim. Sleeping for a random
amount of time before writing keeps any one of them from predictably winning,
for example because it has fewer classes to list and select from than its
competitors.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from claimsched.config.scheduling import DEFAULT_MAX_JITTER_MS


@runtime_checkable
class Jitterer(Protocol):
    """Blocks the caller for a random duration."""

    def __call__(self) -> None: ...


class RandomJitterer:
    """Sleep a whole number of milliseconds drawn uniformly from ``[0, max_ms)``."""

    def __init__(
        self,
        max_ms: int = DEFAULT_MAX_JITTER_MS,
        *,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_ms < 0:
            raise ValueError("max_ms must be non-negative")
        self.max_ms = max_ms
        self._rng = rng or random.Random()  # noqa: S311
        self._sleep = sleep

    def delay(self) -> float:
        """Draw the next delay in seconds without sleeping."""

        if self.max_ms == 0:
            return 0.0
        return self._rng.randrange(self.max_ms) / 1000

    def __call__(self) -> None:
        self._sleep(self.delay())


def no_jitter() -> None:
    """Jitterer that returns immediately."""
