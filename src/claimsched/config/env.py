"""Environment variable loaders for configuration."""

from __future__ import annotations

import math
import os

from .errors import ConfigurationError


def env_float(name: str, default: float) -> float:
    """Return an optional numeric environment variable, falling back to ``default``.

    Blank values count as unset. Anything that is not a finite number raises
    ``ConfigurationError``.
    """

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be a finite number, got {raw!r}")
    return value
