"""Dialect-aware ``INSERT ... ON CONFLICT`` helpers."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

__all__ = ["insert_ignore_conflicts", "upsert_rows"]


def _dialect_insert(session: Session, table: Table) -> postgresql.Insert | sqlite.Insert:
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upsert is not supported on {dialect}")  # pragma: no cover


def insert_ignore_conflicts(
    session: Session,
    table: Table,
    rows: Sequence[Mapping[str, Any]],
    conflict_keys: Sequence[str],
) -> int:
    """Insert ``rows`` skipping any that collide on ``conflict_keys``.

    Returns the number of rows actually inserted.
    """
    if not rows:
        return 0
    stmt = _dialect_insert(session, table).values(list(rows))
    stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_keys))
    result = session.execute(stmt)
    return int(result.rowcount or 0)


def upsert_rows(
    session: Session,
    table: Table,
    rows: Sequence[Mapping[str, Any]],
    conflict_keys: Sequence[str],
    update_columns: Sequence[str],
) -> None:
    """Insert ``rows``, overwriting ``update_columns`` on rows that already exist."""
    if not rows:
        return
    stmt = _dialect_insert(session, table).values(list(rows))
    stmt = stmt.on_conflict_do_update(
        index_elements=list(conflict_keys),
        set_={column: stmt.excluded[column] for column in update_columns},
    )
    session.execute(stmt)
