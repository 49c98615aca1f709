"""Errors raised by store adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from claimsched.domain.model import ObjectKey


class StoreError(RuntimeError):
    """Base class for failures reported by a backing store."""


class ClaimNotFoundError(StoreError):
    """Raised when a claim does not exist (any more)."""

    def __init__(self, kind: str, key: ObjectKey) -> None:
        super().__init__(f"{kind} {key} not found")
        self.kind = kind
        self.key = key


class VersionConflictError(StoreError):
    """Raised when a conditional write carries a stale version token."""

    def __init__(self, kind: str, key: ObjectKey, expected: object) -> None:
        super().__init__(
            f"{kind} {key} has been modified since it was read (version {expected} is stale)"
        )
        self.kind = kind
        self.key = key
        self.expected = expected
