"""
Base building blocks:
internal identity and the namespace/name key shared by stored objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4

from claimsched.domain.model.keys import ObjectKey


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain."""

    uid: UUID = field(default_factory=new_id)


@dataclass(eq=False, kw_only=True)
class NamedEntity(Entity):
    """Entity addressed by kind plus namespace/name."""

    kind: str
    namespace: str = ""
    name: str

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(namespace=self.namespace, name=self.name)
