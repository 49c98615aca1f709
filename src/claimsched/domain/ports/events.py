"""Port for recording human-observable events about claims."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from claimsched.domain.model import Severity

if TYPE_CHECKING:
    from claimsched.domain.model import Claim


@dataclass(frozen=True, slots=True)
class Event:
    severity: Severity
    reason: str
    message: str
    annotations: dict[str, str] = field(default_factory=dict[str, str])

    @classmethod
    def normal(cls, reason: str, message: str, **annotations: str) -> Event:
        return cls(Severity.NORMAL, reason, message, dict(annotations))

    @classmethod
    def warning(cls, reason: str, message: str, **annotations: str) -> Event:
        return cls(Severity.WARNING, reason, message, dict(annotations))

    def with_annotations(self, **annotations: str) -> Event:
        return Event(self.severity, self.reason, self.message, {**annotations, **self.annotations})


@runtime_checkable
class EventRecorder(Protocol):
    """Best-effort sink for events; an event may be lost or recorded twice."""

    def record(self, claim: Claim, event: Event) -> None: ...


class NopRecorder:
    """Recorder that drops every event."""

    def record(self, claim: Claim, event: Event) -> None:
        _ = (claim, event)
