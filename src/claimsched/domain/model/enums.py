"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Severity(StrEnum):
    NORMAL = "normal"
    WARNING = "warning"
