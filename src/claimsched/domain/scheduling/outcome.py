"""Results handed back to whatever dispatches reconcile passes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import timedelta

    from claimsched.domain.model import ClassReference
    from claimsched.domain.scheduling.errors import SchedulingError


class Outcome(StrEnum):
    SCHEDULED = "scheduled"
    ALREADY_SCHEDULED = "already_scheduled"
    NOTHING_TO_DO = "nothing_to_do"
    DEFERRED = "deferred"
    TRANSIENT_FAILURE = "transient_failure"


class Dispatch(StrEnum):
    """What the dispatcher should do next.

    ``DONE_WITH_ERROR`` ends this pass with an error; dispatchers re-invoke it
    under their own backoff policy. ``RETRY_IMMEDIATELY`` is part of the
    contract for dispatchers that need it but no outcome maps to it.
    """

    DONE = "done"
    DONE_WITH_ERROR = "done_with_error"
    RETRY_AFTER = "retry_after"
    RETRY_IMMEDIATELY = "retry_immediately"


_TERMINAL = frozenset({Outcome.SCHEDULED, Outcome.ALREADY_SCHEDULED, Outcome.NOTHING_TO_DO})


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    outcome: Outcome
    requeue_after: timedelta | None = None
    error: SchedulingError | None = None
    selected: ClassReference | None = None

    @property
    def is_terminal(self) -> bool:
        return self.outcome in _TERMINAL

    @property
    def dispatch(self) -> Dispatch:
        if self.outcome is Outcome.DEFERRED:
            return Dispatch.RETRY_AFTER
        if self.error is not None:
            return Dispatch.DONE_WITH_ERROR
        return Dispatch.DONE

    @classmethod
    def scheduled(cls, selected: ClassReference) -> ReconcileResult:
        return cls(Outcome.SCHEDULED, selected=selected)

    @classmethod
    def already_scheduled(cls) -> ReconcileResult:
        return cls(Outcome.ALREADY_SCHEDULED)

    @classmethod
    def nothing_to_do(cls) -> ReconcileResult:
        return cls(Outcome.NOTHING_TO_DO)

    @classmethod
    def deferred(cls, wait: timedelta) -> ReconcileResult:
        return cls(Outcome.DEFERRED, requeue_after=wait)

    @classmethod
    def transient_failure(
        cls,
        error: SchedulingError,
        *,
        selected: ClassReference | None = None,
    ) -> ReconcileResult:
        return cls(Outcome.TRANSIENT_FAILURE, error=error, selected=selected)
