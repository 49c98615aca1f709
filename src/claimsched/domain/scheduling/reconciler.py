"""Race-tolerant scheduling of claims to resource classes.

Any number of reconcilers, in any number of processes, may work on the same
claim at once. None of them coordinates with the others. Each pass reads the
claim, picks a matching class at random, waits a random moment and then tries
a conditional write. The store's version check lets exactly one write land;
every loser is re-run by its dispatcher and stops at the "already scheduled"
check.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import TYPE_CHECKING

from claimsched.domain.ports import ClaimNotFoundError, Event
from claimsched.domain.scheduling.errors import (
    ERR_GET_CLAIM,
    ERR_LIST_CLASSES,
    ERR_UPDATE_CLAIM,
    ReconcileTimeoutError,
    wrap,
)
from claimsched.domain.scheduling.options import Deadline, SchedulerOptions
from claimsched.domain.scheduling.outcome import ReconcileResult

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from claimsched.domain.model import Claim, ObjectKey, ResourceClass
    from claimsched.domain.ports import SchedulingUnitOfWork

REASON_CLASS_FOUND = "SelectedResourceClass"


def controller_name(kind: str) -> str:
    """Recommended name for a controller scheduling claims of ``kind``."""

    return "claimscheduling/" + kind.lower()


class ClaimSchedulingReconciler:
    """Schedule claims of one kind to classes of another kind.

    ``reconcile`` performs a single attempt and never loops internally. The
    returned ``ReconcileResult`` tells the dispatcher whether and when to call
    again; re-entry is always safe.
    """

    def __init__(
        self,
        unit_of_work_factory: Callable[[], SchedulingUnitOfWork],
        *,
        claim_kind: str,
        class_kind: str,
        options: SchedulerOptions | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self.claim_kind = claim_kind
        self.class_kind = class_kind
        self.options = options or SchedulerOptions()

    @property
    def name(self) -> str:
        return controller_name(self.claim_kind)

    def reconcile(self, key: ObjectKey) -> ReconcileResult:
        """Try once to bind the claim identified by ``key`` to a matching class."""

        opts = self.options
        log = logging.LoggerAdapter(opts.logger, {"request": str(key)})
        log.debug("Reconciling %s %s", self.claim_kind, key)
        deadline = Deadline(opts.timeout, opts.clock)

        with ExitStack() as stack:
            try:
                uow = stack.enter_context(self._uow_factory())
                claim = uow.repositories.claims.get(
                    self.claim_kind, key, timeout=deadline.remaining()
                )
                self._check_deadline(deadline, "while getting the claim")
            except ClaimNotFoundError:
                # Nothing to schedule any more.
                log.debug("Resource claim %s no longer exists", key)
                return ReconcileResult.nothing_to_do()
            except Exception as exc:  # noqa: BLE001
                log.debug("Cannot get resource claim %s: %s", key, exc)
                return ReconcileResult.transient_failure(wrap(ERR_GET_CLAIM, exc))

            log = logging.LoggerAdapter(
                opts.logger,
                {
                    "request": str(key),
                    "uid": str(claim.uid),
                    "version": claim.resource_version,
                    "external_name": claim.external_name or "",
                    "class_kind": self.class_kind,
                },
            )

            # Some other scheduler may have won since we were queued. Any set
            # reference is final, whoever set it.
            if claim.is_scheduled:
                log.debug("Resource class is already set for %s", key)
                return ReconcileResult.already_scheduled()

            try:
                classes = uow.repositories.classes.list_matching(
                    self.class_kind, claim.class_selector, timeout=deadline.remaining()
                )
                self._check_deadline(deadline, "while listing resource classes")
            except Exception as exc:  # noqa: BLE001
                # No single scheduler knows whether a rival will succeed where
                # this one failed, so the claim itself is not marked as failing.
                log.debug("Cannot list resource classes for %s: %s", key, exc)
                return ReconcileResult.transient_failure(wrap(ERR_LIST_CLASSES, exc))

            if not classes:
                # Either no class matches or another scheduler owns the ones
                # that do. Poll again shortly; the next pass aborts early if a
                # rival scheduled the claim meanwhile.
                log.debug(
                    "No matching %s found for %s, requeueing after %s",
                    self.class_kind,
                    key,
                    opts.short_wait,
                )
                return ReconcileResult.deferred(opts.short_wait)

            selected = self._select(classes)
            reference = selected.reference()
            claim.set_class_reference(reference)

            opts.jitterer()
            if deadline.expired:
                timeout = ReconcileTimeoutError("before updating the claim", deadline.timeout)
                log.debug("Giving up on %s: %s", key, timeout)
                return ReconcileResult.transient_failure(
                    wrap(ERR_UPDATE_CLAIM, timeout), selected=reference
                )

            log.debug("Attempting to set resource class %s for %s", selected.name, key)
            self._record_selection(claim, selected, log)
            try:
                uow.repositories.claims.update(claim, timeout=deadline.remaining())
                uow.commit()
            except Exception as exc:  # noqa: BLE001
                # A rival that won makes our version stale. Either way the next
                # pass sorts it out.
                uow.rollback()
                log.debug("Cannot update resource claim %s: %s", key, exc)
                return ReconcileResult.transient_failure(
                    wrap(ERR_UPDATE_CLAIM, exc), selected=reference
                )

        log.info("Scheduled %s %s to %s %s", self.claim_kind, key, self.class_kind, selected.name)
        return ReconcileResult.scheduled(reference)

    def _select(self, classes: Sequence[ResourceClass]) -> ResourceClass:
        return classes[self.options.rng.randrange(len(classes))]

    def _record_selection(
        self,
        claim: Claim,
        selected: ResourceClass,
        log: logging.LoggerAdapter[logging.Logger],
    ) -> None:
        event = Event.normal(
            REASON_CLASS_FOUND,
            "Selected matching resource class",
            **{"class-name": selected.name},
        ).with_annotations(
            **{"external-name": claim.external_name or "", "class-kind": self.class_kind}
        )
        try:
            self.options.recorder.record(claim, event)
        except Exception:
            log.warning("Cannot record %s event for %s", event.reason, claim.key, exc_info=True)

    @staticmethod
    def _check_deadline(deadline: Deadline, stage: str) -> None:
        if deadline.expired:
            raise ReconcileTimeoutError(stage, deadline.timeout)
