"""Ports for persisting claims and reading resource classes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from claimsched.domain.model import Claim, ClassSelector, ObjectKey, ResourceClass


@runtime_checkable
class ClaimRepository(Protocol):
    """Versioned access to claims.

    ``update`` is a conditional write: the store must reject it with
    ``VersionConflictError`` when ``claim.resource_version`` no longer matches
    the stored version, leaving the stored claim untouched. Depending on the
    adapter the rejection surfaces from ``update`` itself or from the unit of
    work's ``commit``.

    ``timeout`` is the number of seconds the caller is still willing to wait;
    adapters give up with ``TimeoutError`` (or their driver's equivalent) once
    it is spent. ``None`` waits indefinitely.
    """

    def get(self, kind: str, key: ObjectKey, *, timeout: float | None = None) -> Claim: ...

    def update(self, claim: Claim, *, timeout: float | None = None) -> None: ...


@runtime_checkable
class ResourceClassRepository(Protocol):
    """Filtered, read-only listing of resource classes."""

    def list_matching(
        self,
        kind: str,
        selector: ClassSelector,
        *,
        timeout: float | None = None,
    ) -> Sequence[ResourceClass]: ...
