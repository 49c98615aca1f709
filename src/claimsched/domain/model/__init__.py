"""Public domain model surface."""

from __future__ import annotations

from claimsched.domain.model.base import Entity, NamedEntity, new_id
from claimsched.domain.model.claims import (
    Claim,
    ClassAlreadySetError,
    ClassReference,
    ClassSelector,
    ResourceClass,
)
from claimsched.domain.model.enums import Severity
from claimsched.domain.model.keys import ObjectKey

__all__ = [
    "Claim",
    "ClassAlreadySetError",
    "ClassReference",
    "ClassSelector",
    "Entity",
    "NamedEntity",
    "ObjectKey",
    "ResourceClass",
    "Severity",
    "new_id",
]
