"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from claimsched.adapters.sqlalchemy.mappings import claim_table, resource_class_table
from claimsched.adapters.sqlalchemy.timeouts import statement_timeout
from claimsched.domain.model import Claim, ResourceClass
from claimsched.domain.ports import ClaimNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.orm import Session

    from claimsched.domain.model import ClassSelector, ObjectKey


class SqlAlchemyClaimRepository:
    """Claims loaded into the session; the mapper's version column guards writes."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.staged: list[tuple[str, ObjectKey, int]] = []
        self.write_timeout: float | None = None

    def get(self, kind: str, key: ObjectKey, *, timeout: float | None = None) -> Claim:
        stmt = (
            select(Claim)
            .where(claim_table.c.kind == kind)
            .where(claim_table.c.namespace == key.namespace)
            .where(claim_table.c.name == key.name)
        )
        with statement_timeout(self.session, timeout):
            claim = self.session.execute(stmt).scalar_one_or_none()
        if claim is None:
            raise ClaimNotFoundError(kind, key)
        return claim

    def update(self, claim: Claim, *, timeout: float | None = None) -> None:
        # The version check happens when the unit of work flushes.
        if timeout is not None:
            self.write_timeout = (
                timeout if self.write_timeout is None else min(self.write_timeout, timeout)
            )
        self.staged.append((claim.kind, claim.key, claim.resource_version))
        self.session.add(claim)


class SqlAlchemyResourceClassRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_matching(
        self,
        kind: str,
        selector: ClassSelector,
        *,
        timeout: float | None = None,
    ) -> Sequence[ResourceClass]:
        # Labels are stored as JSON text, so the selector is applied in Python.
        stmt = (
            select(ResourceClass)
            .where(resource_class_table.c.kind == kind)
            .order_by(resource_class_table.c.namespace, resource_class_table.c.name)
        )
        with statement_timeout(self.session, timeout):
            candidates = self.session.execute(stmt).scalars().all()
        return [
            resource_class
            for resource_class in candidates
            if selector.matches(resource_class.labels)
        ]


if TYPE_CHECKING:
    from typing import cast

    from claimsched.domain.ports import ClaimRepository, ResourceClassRepository

    _session_stub = cast("Session", object())
    _claim_repo: ClaimRepository = SqlAlchemyClaimRepository(_session_stub)
    _class_repo: ResourceClassRepository = SqlAlchemyResourceClassRepository(_session_stub)
