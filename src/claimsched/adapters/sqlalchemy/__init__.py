"""SQLAlchemy adapter package for claimsched."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import SqlAlchemyClaimRepository, SqlAlchemyResourceClassRepository
from .timeouts import statement_timeout
from .unit_of_work import (
    SqlAlchemySchedulingUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyClaimRepository",
    "SqlAlchemyResourceClassRepository",
    "SqlAlchemySchedulingUnitOfWork",
    "StartupError",
    "configured_engine",
    "is_started",
    "mapper_registry",
    "shutdown",
    "startup",
    "statement_timeout",
]
