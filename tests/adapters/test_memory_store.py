from __future__ import annotations

import time
from dataclasses import replace
from typing import TYPE_CHECKING

import pytest

from claimsched.adapters.memory import InMemoryUnitOfWork
from claimsched.domain.model import ClassReference, ClassSelector
from claimsched.domain.ports import ClaimNotFoundError, VersionConflictError
from tests.helpers.claims import CLAIM_KIND, CLASS_KIND, claim_key, make_claim, make_class

if TYPE_CHECKING:
    from claimsched.adapters.memory import InMemoryStore


def test_reads_are_private_copies(memory_store: InMemoryStore) -> None:
    memory_store.add_claim(make_claim())

    first = memory_store.get_claim(CLAIM_KIND, claim_key())
    first.set_class_reference(ClassReference(kind=CLASS_KIND, name="fast"))
    second = memory_store.get_claim(CLAIM_KIND, claim_key())

    assert second.class_reference is None
    assert first.resource_version == second.resource_version == 1


def test_compare_and_swap_bumps_version(memory_store: InMemoryStore) -> None:
    memory_store.add_claim(make_claim())
    claim = memory_store.get_claim(CLAIM_KIND, claim_key())
    claim.set_class_reference(ClassReference(kind=CLASS_KIND, name="fast"))

    assert memory_store.compare_and_swap(claim) == 2
    stored = memory_store.stored_claim(CLAIM_KIND, claim_key())
    assert stored.class_reference == ClassReference(kind=CLASS_KIND, name="fast")
    assert stored.resource_version == 2


def test_stale_version_is_rejected_and_store_unchanged(memory_store: InMemoryStore) -> None:
    memory_store.add_claim(make_claim())
    winner = memory_store.get_claim(CLAIM_KIND, claim_key())
    loser = memory_store.get_claim(CLAIM_KIND, claim_key())
    winner.set_class_reference(ClassReference(kind=CLASS_KIND, name="fast"))
    loser.set_class_reference(ClassReference(kind=CLASS_KIND, name="slow"))
    memory_store.compare_and_swap(winner)

    with pytest.raises(VersionConflictError) as excinfo:
        memory_store.compare_and_swap(loser)

    assert excinfo.value.expected == 1
    stored = memory_store.stored_claim(CLAIM_KIND, claim_key())
    assert stored.class_reference == ClassReference(kind=CLASS_KIND, name="fast")
    assert stored.resource_version == 2


def test_missing_claim_raises_not_found(memory_store: InMemoryStore) -> None:
    with pytest.raises(ClaimNotFoundError):
        memory_store.get_claim(CLAIM_KIND, claim_key("missing"))

    memory_store.add_claim(make_claim())
    claim = memory_store.get_claim(CLAIM_KIND, claim_key())
    memory_store.delete_claim(CLAIM_KIND, claim_key())

    with pytest.raises(ClaimNotFoundError):
        memory_store.compare_and_swap(claim)


def test_list_classes_filters_by_kind_and_selector(memory_store: InMemoryStore) -> None:
    memory_store.add_class(make_class("prod-a", labels={"env": "prod"}))
    memory_store.add_class(make_class("prod-b", labels={"env": "prod", "tier": "gold"}))
    memory_store.add_class(make_class("dev", labels={"env": "dev"}))
    memory_store.add_class(make_class("other", labels={"env": "prod"}, kind="RedisClass"))

    matching = memory_store.list_classes(CLASS_KIND, ClassSelector({"env": "prod"}))

    assert sorted(resource_class.name for resource_class in matching) == ["prod-a", "prod-b"]


def test_failure_hooks_raise(memory_store: InMemoryStore) -> None:
    memory_store.add_claim(make_claim())
    memory_store.fail_list = RuntimeError("list down")

    with pytest.raises(RuntimeError, match="list down"):
        memory_store.list_classes(CLASS_KIND, ClassSelector())

    assert memory_store.calls["list"] == 1


def test_unit_of_work_writes_only_on_commit(memory_store: InMemoryStore) -> None:
    memory_store.add_claim(make_claim())

    with InMemoryUnitOfWork(memory_store) as uow:
        claim = uow.repositories.claims.get(CLAIM_KIND, claim_key())
        claim.set_class_reference(ClassReference(kind=CLASS_KIND, name="fast"))
        uow.repositories.claims.update(claim)
        assert memory_store.stored_claim(CLAIM_KIND, claim_key()).class_reference is None
        uow.commit()

    assert uow.committed
    assert claim.resource_version == 2
    assert memory_store.stored_claim(CLAIM_KIND, claim_key()).class_reference is not None


def test_unit_of_work_rollback_discards_pending(memory_store: InMemoryStore) -> None:
    memory_store.add_claim(make_claim())

    with InMemoryUnitOfWork(memory_store) as uow:
        claim = uow.repositories.claims.get(CLAIM_KIND, claim_key())
        uow.repositories.claims.update(replace(claim, external_name="renamed"))
        uow.rollback()
        uow.commit()

    assert memory_store.calls["update"] == 0
    assert memory_store.stored_claim(CLAIM_KIND, claim_key()).external_name is None


def test_latency_beyond_timeout_raises(memory_store: InMemoryStore) -> None:
    memory_store.add_claim(make_claim())
    memory_store.latency = 1.0

    started = time.monotonic()
    with pytest.raises(TimeoutError):
        memory_store.get_claim(CLAIM_KIND, claim_key(), timeout=0.05)

    assert time.monotonic() - started < 0.5
    assert memory_store.calls["get"] == 0


def test_held_lock_times_out(memory_store: InMemoryStore) -> None:
    memory_store.add_claim(make_claim())

    with memory_store._lock, pytest.raises(TimeoutError):
        memory_store.list_classes(CLASS_KIND, ClassSelector(), timeout=0.05)


def test_unit_of_work_passes_write_timeout(memory_store: InMemoryStore) -> None:
    memory_store.add_claim(make_claim())
    memory_store.latency = 0.5

    with InMemoryUnitOfWork(memory_store) as uow:
        claim = uow.repositories.claims.get(CLAIM_KIND, claim_key())
        claim.set_class_reference(ClassReference(kind=CLASS_KIND, name="fast"))
        uow.repositories.claims.update(claim, timeout=0.05)
        with pytest.raises(TimeoutError):
            uow.commit()

    assert memory_store.stored_claim(CLAIM_KIND, claim_key()).class_reference is None
