"""Claims, resource classes and the reference that binds one to the other.

A claim starts unscheduled. Scheduling sets its class reference exactly once;
nothing in this package clears or replaces a reference after it is set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from claimsched.domain.model.base import NamedEntity

if TYPE_CHECKING:
    from collections.abc import Mapping
    from uuid import UUID


class ClassAlreadySetError(ValueError):
    """Raised when a class reference would overwrite an existing one."""


@dataclass(frozen=True, slots=True)
class ClassSelector:
    """Label-match predicate narrowing resource classes to candidates."""

    match_labels: Mapping[str, str] = field(default_factory=dict[str, str])

    def __post_init__(self) -> None:
        object.__setattr__(self, "match_labels", dict(self.match_labels))

    def matches(self, labels: Mapping[str, str]) -> bool:
        return all(labels.get(key) == value for key, value in self.match_labels.items())


@dataclass(frozen=True, slots=True)
class ClassReference:
    """Value object recording which resource class a claim is bound to."""

    kind: str
    name: str
    uid: UUID | None = None


@dataclass(eq=False, kw_only=True)
class ResourceClass(NamedEntity):
    """Candidate scheduling target. Read-only to the scheduler."""

    labels: dict[str, str] = field(default_factory=dict[str, str])

    def reference(self) -> ClassReference:
        return ClassReference(kind=self.kind, name=self.name, uid=self.uid)


@dataclass(eq=False, kw_only=True)
class Claim(NamedEntity):
    """A request to be bound to a resource class.

    ``resource_version`` is the opaque version token handed out by the store on
    read. Stores reject writes whose token no longer matches the stored one.
    """

    class_selector: ClassSelector = field(default_factory=ClassSelector)
    class_reference: ClassReference | None = None
    external_name: str | None = None
    resource_version: int = 0

    @property
    def is_scheduled(self) -> bool:
        return self.class_reference is not None

    def set_class_reference(self, reference: ClassReference) -> None:
        """Bind the local copy of this claim. Persisting is the store's job."""

        if self.class_reference is not None:
            raise ClassAlreadySetError(
                f"Claim {self.key} is already bound to {self.class_reference.kind}/"
                f"{self.class_reference.name}"
            )
        self.class_reference = reference
