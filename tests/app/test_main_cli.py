from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta

import pytest

from claimsched import main as main_module
from claimsched.domain.model import ClassReference, ObjectKey
from claimsched.domain.scheduling import ReconcileResult


def _fake_schedule(
    result: ReconcileResult,
    captured: dict[str, object],
) -> Callable[..., ReconcileResult]:
    def fake_schedule(key: ObjectKey, **kwargs: object) -> ReconcileResult:
        captured["key"] = key
        captured.update(kwargs)
        return result

    return fake_schedule


def test_schedule_command_passes_kinds(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}
    result = ReconcileResult.scheduled(ClassReference(kind="CloudSQLInstanceClass", name="fast"))
    monkeypatch.setattr(main_module, "schedule_claim", _fake_schedule(result, captured))

    main_module.main(
        [
            "schedule",
            "default/orders",
            "--claim-kind",
            "PostgreSQLInstance",
            "--class-kind",
            "CloudSQLInstanceClass",
        ]
    )

    assert captured == {
        "key": ObjectKey(namespace="default", name="orders"),
        "claim_kind": "PostgreSQLInstance",
        "class_kind": "CloudSQLInstanceClass",
    }


def test_schedule_command_exits_for_retry(monkeypatch: pytest.MonkeyPatch) -> None:
    result = ReconcileResult.deferred(timedelta(seconds=30))
    monkeypatch.setattr(main_module, "schedule_claim", _fake_schedule(result, {}))

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["schedule", "orders", "--claim-kind", "A", "--class-kind", "B"])

    assert excinfo.value.code == main_module.EXIT_RETRY


def test_schedule_command_reports_unexpected_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_schedule(*_: object, **__: object) -> ReconcileResult:
        raise RuntimeError("database locked")

    monkeypatch.setattr(main_module, "schedule_claim", broken_schedule)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["schedule", "orders", "--claim-kind", "A", "--class-kind", "B"])

    assert excinfo.value.code == 1


def test_class_add_parses_labels(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_add(key: ObjectKey, **kwargs: object) -> object:
        captured["key"] = key
        captured.update(kwargs)
        return type("Created", (), {"kind": "K", "key": key, "uid": "uid"})()

    monkeypatch.setattr(main_module, "add_resource_class", fake_add)

    main_module.main(
        ["class", "add", "infra/fast", "--kind", "K", "--label", "env=prod", "--label", "tier=gold"]
    )

    assert captured == {
        "key": ObjectKey(namespace="infra", name="fast"),
        "kind": "K",
        "labels": {"env": "prod", "tier": "gold"},
    }


def test_claim_add_parses_selector(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_add(key: ObjectKey, **kwargs: object) -> object:
        captured["key"] = key
        captured.update(kwargs)
        return type("Created", (), {"kind": "K", "key": key, "uid": "uid"})()

    monkeypatch.setattr(main_module, "add_claim", fake_add)

    main_module.main(
        ["claim", "add", "default/orders", "--kind", "K", "--selector", "env=prod"]
    )

    assert captured == {
        "key": ObjectKey(namespace="default", name="orders"),
        "kind": "K",
        "selector": {"env": "prod"},
        "external_name": None,
    }


@pytest.mark.parametrize(
    "argv",
    [
        ["class", "add", "infra/fast", "--kind", "K", "--label", "no-separator"],
        ["claim", "add", "default/", "--kind", "K"],
        ["schedule", "orders", "--claim-kind", "A"],
    ],
)
def test_invalid_arguments_exit_with_usage_error(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main_module.main(argv)

    assert excinfo.value.code == 2
