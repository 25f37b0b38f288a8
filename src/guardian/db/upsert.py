"""Dialect-aware INSERT ... ON CONFLICT support.

Postgres is the production database; SQLite backs local runs and the test
suite. Both dialects expose the same on_conflict_do_* API.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession


def dialect_insert(db: AsyncSession, table: Any) -> Any:  # noqa: ANN401
    """Return an ON CONFLICT-capable insert() for the session's dialect."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite_insert(table)
    return pg_insert(table)
