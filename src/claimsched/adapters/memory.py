"""In-process versioned store.

Emulates the optimistic-concurrency contract of a real store: every read
returns a private copy tagged with the stored version, and a write only lands
if that version is still current. The compare-and-swap runs under a lock
owned by the store, never by callers.
"""

from __future__ import annotations

import threading
import time
from collections import Counter
from contextlib import contextmanager
from dataclasses import replace
from typing import TYPE_CHECKING, Literal

from claimsched.domain.ports import (
    ClaimNotFoundError,
    SchedulingRepositories,
    VersionConflictError,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from types import TracebackType

    from claimsched.domain.model import Claim, ClassSelector, ObjectKey, ResourceClass

type _ClaimId = tuple[str, ObjectKey]


def _copy_claim(claim: Claim) -> Claim:
    return replace(claim)


def _copy_class(resource_class: ResourceClass) -> ResourceClass:
    return replace(resource_class, labels=dict(resource_class.labels))


class InMemoryStore:
    """Thread-safe claim and class storage with per-claim version counters.

    ``fail_get``, ``fail_list`` and ``fail_update`` make the next matching
    operations raise the given exception; ``calls`` counts operations.
    ``latency`` delays every read and write by that many seconds. Operations
    given a ``timeout`` raise ``TimeoutError`` once it is spent, whether on
    latency or while waiting for the lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._claims: dict[_ClaimId, Claim] = {}
        self._classes: dict[tuple[str, ObjectKey], ResourceClass] = {}
        self.calls: Counter[str] = Counter()
        self.fail_get: Exception | None = None
        self.fail_list: Exception | None = None
        self.fail_update: Exception | None = None
        self.latency: float = 0.0

    @contextmanager
    def _access(self, timeout: float | None) -> Iterator[None]:
        started = time.monotonic()
        if self.latency > 0:
            if timeout is not None and self.latency > timeout:
                time.sleep(max(timeout, 0.0))
                raise TimeoutError(f"store did not answer within {timeout:g}s")
            time.sleep(self.latency)
        if timeout is None:
            acquired = self._lock.acquire()
        else:
            remaining = max(0.0, timeout - (time.monotonic() - started))
            acquired = self._lock.acquire(timeout=remaining)
        if not acquired:
            raise TimeoutError(f"store lock not acquired within {timeout:g}s")
        try:
            yield
        finally:
            self._lock.release()

    def add_claim(self, claim: Claim) -> Claim:
        with self._lock:
            stored = _copy_claim(claim)
            stored.resource_version = 1
            self._claims[(claim.kind, claim.key)] = stored
            return _copy_claim(stored)

    def add_class(self, resource_class: ResourceClass) -> None:
        with self._lock:
            self._classes[(resource_class.kind, resource_class.key)] = _copy_class(resource_class)

    def get_claim(self, kind: str, key: ObjectKey, *, timeout: float | None = None) -> Claim:
        with self._access(timeout):
            self.calls["get"] += 1
            if self.fail_get is not None:
                raise self.fail_get
            stored = self._claims.get((kind, key))
            if stored is None:
                raise ClaimNotFoundError(kind, key)
            return _copy_claim(stored)

    def list_classes(
        self,
        kind: str,
        selector: ClassSelector,
        *,
        timeout: float | None = None,
    ) -> list[ResourceClass]:
        with self._access(timeout):
            self.calls["list"] += 1
            if self.fail_list is not None:
                raise self.fail_list
            return [
                _copy_class(resource_class)
                for (class_kind, _), resource_class in self._classes.items()
                if class_kind == kind and selector.matches(resource_class.labels)
            ]

    def compare_and_swap(self, claim: Claim, *, timeout: float | None = None) -> int:
        """Store ``claim`` if its version is current; return the new version."""

        with self._access(timeout):
            self.calls["update"] += 1
            if self.fail_update is not None:
                raise self.fail_update
            stored = self._claims.get((claim.kind, claim.key))
            if stored is None:
                raise ClaimNotFoundError(claim.kind, claim.key)
            if stored.resource_version != claim.resource_version:
                raise VersionConflictError(claim.kind, claim.key, claim.resource_version)
            updated = _copy_claim(claim)
            updated.resource_version = stored.resource_version + 1
            self._claims[(claim.kind, claim.key)] = updated
            return updated.resource_version

    def delete_claim(self, kind: str, key: ObjectKey) -> None:
        with self._lock:
            self._claims.pop((kind, key), None)

    def stored_claim(self, kind: str, key: ObjectKey) -> Claim:
        """Return a copy of the stored claim without counting a read."""

        with self._lock:
            return _copy_claim(self._claims[(kind, key)])


class InMemoryClaimRepository:
    """Claim repository that stages writes until the unit of work commits."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self.pending: list[tuple[Claim, float | None]] = []

    def get(self, kind: str, key: ObjectKey, *, timeout: float | None = None) -> Claim:
        return self._store.get_claim(kind, key, timeout=timeout)

    def update(self, claim: Claim, *, timeout: float | None = None) -> None:
        self.pending.append((claim, timeout))

    def flush(self) -> None:
        pending, self.pending = self.pending, []
        for claim, timeout in pending:
            claim.resource_version = self._store.compare_and_swap(claim, timeout=timeout)


class InMemoryResourceClassRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def list_matching(
        self,
        kind: str,
        selector: ClassSelector,
        *,
        timeout: float | None = None,
    ) -> Sequence[ResourceClass]:
        return self._store.list_classes(kind, selector, timeout=timeout)


class InMemoryUnitOfWork:
    """Unit of work over an ``InMemoryStore``."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self._claims = InMemoryClaimRepository(store)
        self._repositories = SchedulingRepositories(
            claims=self._claims,
            classes=InMemoryResourceClassRepository(store),
        )
        self.committed = False

    @property
    def repositories(self) -> SchedulingRepositories:
        return self._repositories

    def __enter__(self) -> InMemoryUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self._claims.flush()
        self.committed = True

    def rollback(self) -> None:
        self._claims.pending.clear()
