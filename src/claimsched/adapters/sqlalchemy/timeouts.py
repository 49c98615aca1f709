"""Per-call time limits for statements issued through a session."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, cast

from sqlalchemy import text

if TYPE_CHECKING:
    import sqlite3
    from collections.abc import Iterator

    from sqlalchemy.orm import Session

log = logging.getLogger(__name__)

# SQLite checks the progress handler every N virtual machine instructions.
_SQLITE_PROGRESS_STEPS = 1000


@contextmanager
def statement_timeout(session: Session, timeout: float | None) -> Iterator[None]:
    """Abort statements run inside the block once ``timeout`` seconds have passed.

    SQLite statements are interrupted through the connection's progress
    handler; PostgreSQL gets a transaction-local ``statement_timeout``. Other
    dialects run unbounded.
    """

    if timeout is None:
        yield
        return

    connection = session.connection()
    dialect = connection.dialect.name
    if dialect == "sqlite":
        raw = cast("sqlite3.Connection", connection.connection.dbapi_connection)
        expires_at = time.monotonic() + max(timeout, 0.0)
        raw.set_progress_handler(
            lambda: int(time.monotonic() >= expires_at), _SQLITE_PROGRESS_STEPS
        )
        try:
            yield
        finally:
            raw.set_progress_handler(None, _SQLITE_PROGRESS_STEPS)
        return

    if dialect == "postgresql":
        milliseconds = max(1, int(timeout * 1000))
        connection.execute(
            text("SELECT set_config('statement_timeout', :value, true)"),
            {"value": str(milliseconds)},
        )
        yield
        return

    log.debug("No statement timeout support for dialect %s", dialect)
    yield
