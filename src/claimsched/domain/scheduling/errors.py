"""Error taxonomy for scheduling passes.

Every store failure is wrapped with a stable context tag naming the operation
that failed and handed back to the caller inside the reconcile result. None of
these errors is fatal; the dispatcher retries the whole pass.
"""

from __future__ import annotations

from typing import Final

ERR_GET_CLAIM: Final[str] = "cannot get resource claim"
ERR_LIST_CLASSES: Final[str] = "cannot list resource classes"
ERR_UPDATE_CLAIM: Final[str] = "cannot update resource claim"


class SchedulingError(RuntimeError):
    """A failed store interaction, tagged with the operation that failed."""

    def __init__(self, context: str, cause: BaseException) -> None:
        super().__init__(f"{context}: {cause}")
        self.context = context
        self.cause = cause


class ReconcileTimeoutError(TimeoutError):
    """Raised when a pass runs past its deadline."""

    def __init__(self, stage: str, timeout: float) -> None:
        super().__init__(f"reconcile deadline of {timeout:g}s exceeded {stage}")
        self.stage = stage
        self.timeout = timeout


def wrap(context: str, cause: BaseException) -> SchedulingError:
    """Return ``cause`` tagged with ``context``, chaining the original exception."""

    error = SchedulingError(context, cause)
    error.__cause__ = cause
    return error
