"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from claimsched.adapters.events import LoggingRecorder
from claimsched.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemySchedulingUnitOfWork,
    is_started,
    startup,
)
from claimsched.config import get_scheduling_config
from claimsched.domain.model import Claim, ClassSelector, ResourceClass
from claimsched.domain.ports import SchedulingUnitOfWork
from claimsched.domain.scheduling import ClaimSchedulingReconciler, SchedulerOptions

if TYPE_CHECKING:
    from collections.abc import Mapping

    from claimsched.domain.model import ObjectKey
    from claimsched.domain.scheduling import ReconcileResult

UnitOfWorkFactory = Callable[[], SchedulingUnitOfWork]

log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def build_reconciler(
    *,
    claim_kind: str,
    class_kind: str,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    options: SchedulerOptions | None = None,
) -> ClaimSchedulingReconciler:
    """Wire a reconciler to the configured store with environment-derived options."""

    if unit_of_work_factory is None:
        _ensure_started()
    effective_uow = unit_of_work_factory or SqlAlchemySchedulingUnitOfWork
    effective_options = options or SchedulerOptions.from_config(
        get_scheduling_config(),
        recorder=LoggingRecorder(),
    )
    return ClaimSchedulingReconciler(
        effective_uow,
        claim_kind=claim_kind,
        class_kind=class_kind,
        options=effective_options,
    )


def schedule_claim(
    key: ObjectKey,
    *,
    claim_kind: str,
    class_kind: str,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    options: SchedulerOptions | None = None,
) -> ReconcileResult:
    """Run a single scheduling pass for ``key`` and report its outcome."""

    reconciler = build_reconciler(
        claim_kind=claim_kind,
        class_kind=class_kind,
        unit_of_work_factory=unit_of_work_factory,
        options=options,
    )
    log.info("Scheduling %s %s onto %s (%s)", claim_kind, key, class_kind, reconciler.name)
    result = reconciler.reconcile(key)
    log.info(
        "Finished scheduling %s: outcome=%s, requeue_after=%s, selected=%s",
        key,
        result.outcome,
        result.requeue_after,
        result.selected.name if result.selected else None,
    )
    if result.error is not None:
        log.warning("Scheduling %s failed: %s", key, result.error)
    return result


def add_resource_class(
    key: ObjectKey,
    *,
    kind: str,
    labels: Mapping[str, str],
) -> ResourceClass:
    """Persist a new resource class in the configured database."""

    _ensure_started()
    resource_class = ResourceClass(
        kind=kind,
        namespace=key.namespace,
        name=key.name,
        labels=dict(labels),
    )
    with SqlAlchemySchedulingUnitOfWork() as uow:
        uow.session.add(resource_class)
        uow.commit()
    return resource_class


def add_claim(
    key: ObjectKey,
    *,
    kind: str,
    selector: Mapping[str, str],
    external_name: str | None = None,
) -> Claim:
    """Persist a new, unscheduled claim in the configured database."""

    _ensure_started()
    claim = Claim(
        kind=kind,
        namespace=key.namespace,
        name=key.name,
        class_selector=ClassSelector(selector),
        external_name=external_name,
    )
    with SqlAlchemySchedulingUnitOfWork() as uow:
        uow.session.add(claim)
        uow.commit()
    return claim
