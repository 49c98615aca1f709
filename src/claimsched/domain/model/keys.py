"""Stable identities for stored objects."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ObjectKey:
    """Namespace/name pair identifying a claim or class within its kind."""

    namespace: str
    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Object name must not be empty")

    @classmethod
    def parse(cls, value: str) -> ObjectKey:
        """Parse ``namespace/name`` (or a bare ``name`` in the empty namespace)."""

        namespace, sep, name = value.strip().rpartition("/")
        if not sep:
            return cls(namespace="", name=name)
        return cls(namespace=namespace, name=name)

    def __str__(self) -> str:
        if not self.namespace:
            return self.name
        return f"{self.namespace}/{self.name}"
