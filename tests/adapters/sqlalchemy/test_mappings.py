from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import Session

from claimsched.adapters.sqlalchemy.migrations import upgrade_head
from claimsched.domain.model import Claim, ClassReference, ClassSelector, ResourceClass
from tests.helpers.claims import CLASS_KIND, make_claim, make_class

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.engine import Engine


def test_migrations_create_claim_tables(sqlite_engine: Engine) -> None:
    inspector = inspect(sqlite_engine)

    tables = set(inspector.get_table_names())
    assert {"claim", "resource_class", "alembic_version"} <= tables
    claim_columns = {column["name"] for column in inspector.get_columns("claim")}
    assert claim_columns == {
        "uid",
        "kind",
        "namespace",
        "name",
        "class_selector",
        "class_reference",
        "external_name",
        "resource_version",
    }


def test_claim_round_trips_selector_and_reference(sqlite_engine: Engine) -> None:
    claim = make_claim(selector={"env": "prod", "region": "eu"}, external_name="orders-db")
    claim.set_class_reference(ClassReference(kind=CLASS_KIND, name="fast", uid=claim.uid))

    with Session(sqlite_engine) as session:
        session.add(claim)
        session.commit()

    with Session(sqlite_engine) as session:
        loaded = session.get(Claim, claim.uid)
        assert loaded is not None
        assert loaded.class_selector == ClassSelector({"env": "prod", "region": "eu"})
        assert loaded.class_reference == ClassReference(kind=CLASS_KIND, name="fast", uid=claim.uid)
        assert loaded.external_name == "orders-db"
        assert loaded.resource_version == 1


def test_unscheduled_claim_stores_null_reference(sqlite_engine: Engine) -> None:
    claim = make_claim()

    with Session(sqlite_engine) as session:
        session.add(claim)
        session.commit()
        stored = session.execute(text("SELECT class_reference FROM claim")).scalar_one()

    assert stored is None


def test_resource_class_labels_round_trip(sqlite_engine: Engine) -> None:
    resource_class = make_class("fast", labels={"env": "prod", "tier": "gold"})

    with Session(sqlite_engine) as session:
        session.add(resource_class)
        session.commit()

    with Session(sqlite_engine) as session:
        loaded = session.get(ResourceClass, resource_class.uid)
        assert loaded is not None
        assert loaded.labels == {"env": "prod", "tier": "gold"}
        assert loaded.key == resource_class.key


def test_upgrade_head_accepts_database_uri(tmp_path: Path) -> None:
    uri = f"sqlite+pysqlite:///{tmp_path / 'migrated.db'}"

    upgrade_head(database_uri=uri)

    engine = create_engine(uri, future=True)
    try:
        assert {"claim", "resource_class"} <= set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
