"""SQLAlchemy-backed unit of work for claim scheduling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from claimsched.adapters.sqlalchemy.mappings import start_mappers
from claimsched.adapters.sqlalchemy.migrations import upgrade_head
from claimsched.adapters.sqlalchemy.repositories import (
    SqlAlchemyClaimRepository,
    SqlAlchemyResourceClassRepository,
)
from claimsched.adapters.sqlalchemy.timeouts import statement_timeout
from claimsched.config import get_database_uri
from claimsched.domain.ports import SchedulingRepositories, VersionConflictError

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call claimsched.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, metadata, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(database_uri or get_database_uri(), future=True)
    start_mappers()
    upgrade_head(engine=resolved_engine)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class SqlAlchemySchedulingUnitOfWork:
    """Unit of work managing one SQLAlchemy session per scheduling pass."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemySchedulingUnitOfWork:
        self.session = self.session_factory()
        self._claims = SqlAlchemyClaimRepository(self.session)
        self._repositories = SchedulingRepositories(
            claims=self._claims,
            classes=SqlAlchemyResourceClassRepository(self.session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        """Flush and commit; a stale claim version becomes ``VersionConflictError``."""

        staged, self._claims.staged = self._claims.staged, []
        timeout, self._claims.write_timeout = self._claims.write_timeout, None
        try:
            with statement_timeout(self.session, timeout):
                self.session.commit()
        except StaleDataError as exc:
            self.session.rollback()
            if not staged:
                raise
            kind, key, version = staged[0]
            raise VersionConflictError(kind, key, version) from exc

    def rollback(self) -> None:
        self._claims.staged.clear()
        self._claims.write_timeout = None
        self.session.rollback()

    @property
    def repositories(self) -> SchedulingRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


if TYPE_CHECKING:
    from claimsched.domain.ports import SchedulingUnitOfWork

    _uow_check: SchedulingUnitOfWork = SqlAlchemySchedulingUnitOfWork()
