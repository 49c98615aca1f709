from __future__ import annotations

from datetime import timedelta

from claimsched.domain.model import ClassReference
from claimsched.domain.scheduling import (
    ERR_LIST_CLASSES,
    Dispatch,
    Outcome,
    ReconcileResult,
    SchedulingError,
)


def test_terminal_outcomes_map_to_done() -> None:
    for result in (
        ReconcileResult.scheduled(ClassReference(kind="Class", name="fast")),
        ReconcileResult.already_scheduled(),
        ReconcileResult.nothing_to_do(),
    ):
        assert result.is_terminal
        assert result.dispatch is Dispatch.DONE
        assert result.error is None


def test_deferred_maps_to_retry_after() -> None:
    result = ReconcileResult.deferred(timedelta(seconds=30))

    assert result.outcome is Outcome.DEFERRED
    assert not result.is_terminal
    assert result.dispatch is Dispatch.RETRY_AFTER
    assert result.requeue_after == timedelta(seconds=30)


def test_transient_failure_maps_to_done_with_error() -> None:
    error = SchedulingError(ERR_LIST_CLASSES, RuntimeError("boom"))
    result = ReconcileResult.transient_failure(error)

    assert not result.is_terminal
    assert result.dispatch is Dispatch.DONE_WITH_ERROR
    assert result.error is error
    assert str(result.error) == "cannot list resource classes: boom"
