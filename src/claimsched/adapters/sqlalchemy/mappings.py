"""SQLAlchemy mapping metadata for the claimsched domain model."""

from __future__ import annotations

import json
import logging
import uuid
from functools import cache
from typing import Any, cast

from sqlalchemy import (
    Column,
    Dialect,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)

from claimsched.domain.model import Claim, ClassReference, ClassSelector, ResourceClass

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


def _load_labels(value: str | None) -> dict[str, str]:
    if value is None:
        return {}
    loaded = json.loads(value)
    if not isinstance(loaded, dict):
        return {}
    items = cast(dict[Any, Any], loaded)
    return {str(key): str(item) for key, item in items.items()}


class LabelsType(TypeDecorator[dict[str, str]]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: dict[str, str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(dict(value), sort_keys=True)

    def process_result_value(self, value: str | None, dialect: Dialect) -> dict[str, str]:
        _ = dialect
        return _load_labels(value)


class ClassSelectorType(TypeDecorator[ClassSelector]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: ClassSelector | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(dict(value.match_labels), sort_keys=True)

    def process_result_value(self, value: str | None, dialect: Dialect) -> ClassSelector:
        _ = dialect
        return ClassSelector(_load_labels(value))


class ClassReferenceType(TypeDecorator[ClassReference]):
    """JSON-encoded class reference; NULL while the claim is unscheduled."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: ClassReference | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = {
            "kind": value.kind,
            "name": value.name,
            "uid": str(value.uid) if value.uid is not None else None,
        }
        return json.dumps(payload, sort_keys=True)

    def process_result_value(self, value: str | None, dialect: Dialect) -> ClassReference | None:
        _ = dialect
        if value is None:
            return None
        loaded = cast(dict[str, Any], json.loads(value))
        raw_uid = loaded.get("uid")
        return ClassReference(
            kind=str(loaded["kind"]),
            name=str(loaded["name"]),
            uid=uuid.UUID(raw_uid) if raw_uid else None,
        )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

claim_table = Table(
    "claim",
    mapper_registry.metadata,
    Column("uid", UUIDColumnType, primary_key=True),
    Column("kind", String, nullable=False),
    Column("namespace", String, nullable=False, default=""),
    Column("name", String, nullable=False),
    Column("class_selector", ClassSelectorType, nullable=False),
    Column("class_reference", ClassReferenceType, nullable=True),
    Column("external_name", String, nullable=True),
    Column("resource_version", Integer, nullable=False),
    UniqueConstraint("kind", "namespace", "name", name="uq_claim_kind_namespace_name"),
)

resource_class_table = Table(
    "resource_class",
    mapper_registry.metadata,
    Column("uid", UUIDColumnType, primary_key=True),
    Column("kind", String, nullable=False, index=True),
    Column("namespace", String, nullable=False, default=""),
    Column("name", String, nullable=False),
    Column("labels", LabelsType, nullable=False),
    UniqueConstraint("kind", "namespace", "name", name="uq_resource_class_kind_namespace_name"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model.

    The claim mapper uses ``resource_version`` as its version counter: every
    flush issues ``UPDATE ... WHERE uid = ? AND resource_version = ?`` and
    raises ``StaleDataError`` when no row matched.
    """

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        Claim,
        claim_table,
        version_id_col=claim_table.c.resource_version,
    )

    mapper_registry.map_imperatively(
        ResourceClass,
        resource_class_table,
    )

    orm.configure_mappers()
    return mapper_registry
