"""Root logger setup for the claimsched command line."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Send log records to stderr as ``time level [logger] message`` lines.

    ``claimsched`` calls this once per invocation: at INFO normally, at DEBUG
    with ``--verbose`` so each reconcile step becomes visible. ``force=True``
    replaces handlers installed earlier, e.g. by a test harness.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
