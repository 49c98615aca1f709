"""Event recorders backed by the standard logging module."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from claimsched.domain.model import Severity

if TYPE_CHECKING:
    from claimsched.domain.model import Claim
    from claimsched.domain.ports import Event

log = logging.getLogger(__name__)

_LEVELS = {Severity.NORMAL: logging.INFO, Severity.WARNING: logging.WARNING}


class LoggingRecorder:
    """Write events to a logger, one line per event."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or log

    def record(self, claim: Claim, event: Event) -> None:
        annotations = " ".join(f"{key}={value}" for key, value in sorted(event.annotations.items()))
        self._log.log(
            _LEVELS[event.severity],
            "%s %s: %s (%s) %s",
            claim.kind,
            claim.key,
            event.message,
            event.reason,
            annotations,
            extra={"event_reason": event.reason, "annotations": dict(event.annotations)},
        )
