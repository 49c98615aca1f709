#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from claimsched.app import add_claim, add_resource_class, schedule_claim
from claimsched.config import configure_logging
from claimsched.domain.model import ObjectKey

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_RETRY = 3


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Schedule resource claims to resource classes")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    schedule = subparsers.add_parser("schedule", help="Run one scheduling pass for a claim")
    schedule.add_argument("claim", type=str, help="Claim to schedule, as NAMESPACE/NAME")
    schedule.add_argument("--claim-kind", type=str, required=True, help="Kind of the claim")
    schedule.add_argument(
        "--class-kind",
        type=str,
        required=True,
        help="Kind of resource class to schedule the claim to",
    )

    resource_class = subparsers.add_parser("class", help="Resource class commands")
    class_sub = resource_class.add_subparsers(dest="class_command", required=True)
    class_add = class_sub.add_parser("add", help="Add a resource class")
    class_add.add_argument("name", type=str, help="Resource class, as NAMESPACE/NAME")
    class_add.add_argument("--kind", type=str, required=True, help="Resource class kind")
    class_add.add_argument(
        "--label",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Label to attach (repeatable)",
    )

    claim = subparsers.add_parser("claim", help="Claim commands")
    claim_sub = claim.add_subparsers(dest="claim_command", required=True)
    claim_add = claim_sub.add_parser("add", help="Add an unscheduled claim")
    claim_add.add_argument("name", type=str, help="Claim, as NAMESPACE/NAME")
    claim_add.add_argument("--kind", type=str, required=True, help="Claim kind")
    claim_add.add_argument(
        "--selector",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Label the resource class must carry (repeatable)",
    )
    claim_add.add_argument("--external-name", type=str, help="Optional external name")

    return parser.parse_args(list(argv))


def _parse_key(value: str) -> ObjectKey:
    try:
        return ObjectKey.parse(value)
    except ValueError as exc:
        raise ValueError(f"Invalid object key: {value!r}") from exc


def _parse_labels(pairs: Sequence[str]) -> dict[str, str]:
    labels: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid label {pair!r}, expected KEY=VALUE")
        labels[key.strip()] = value.strip()
    return labels


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        key = _parse_key(
            parsed_args.claim if parsed_args.command == "schedule" else parsed_args.name
        )
        labels: dict[str, str] = {}
        if parsed_args.command == "class":
            labels = _parse_labels(parsed_args.label)
        elif parsed_args.command == "claim":
            labels = _parse_labels(parsed_args.selector)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "schedule":
            result = schedule_claim(
                key,
                claim_kind=parsed_args.claim_kind,
                class_kind=parsed_args.class_kind,
            )
            if not result.is_terminal:
                sys.exit(EXIT_RETRY)
        elif parsed_args.command == "class" and parsed_args.class_command == "add":
            resource_class = add_resource_class(key, kind=parsed_args.kind, labels=labels)
            log.info("Created %s %s (%s)", resource_class.kind, resource_class.key, resource_class.uid)
        elif parsed_args.command == "claim" and parsed_args.claim_command == "add":
            claim = add_claim(
                key,
                kind=parsed_args.kind,
                selector=labels,
                external_name=parsed_args.external_name,
            )
            log.info("Created %s %s (%s)", claim.kind, claim.key, claim.uid)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
