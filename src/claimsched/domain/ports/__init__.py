"""Domain port definitions for adapters."""

from __future__ import annotations

from .errors import ClaimNotFoundError, StoreError, VersionConflictError
from .events import Event, EventRecorder, NopRecorder
from .persistence import ClaimRepository, ResourceClassRepository
from .unit_of_work import (
    RepositoryCollection,
    SchedulingRepositories,
    SchedulingUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "ClaimNotFoundError",
    "ClaimRepository",
    "Event",
    "EventRecorder",
    "NopRecorder",
    "RepositoryCollection",
    "ResourceClassRepository",
    "SchedulingRepositories",
    "SchedulingUnitOfWork",
    "StoreError",
    "UnitOfWork",
    "VersionConflictError",
]
