"""Shared SQL helpers for record-shaped inserts and updates."""

from __future__ import annotations

import sqlite3
from typing import Any, Mapping
from uuid import uuid4


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:12]}"


def insert_record(
    connection: sqlite3.Connection, table: str, record: Mapping[str, Any]
) -> sqlite3.Cursor:
    columns = ", ".join(record)
    placeholders = ", ".join(["?"] * len(record))
    return connection.execute(
        f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
        tuple(record.values()),
    )


def update_record(
    connection: sqlite3.Connection,
    table: str,
    record_id: str,
    changes: Mapping[str, Any],
) -> int:
    """Update the given columns of one row and return the affected row count."""
    if not changes:
        return 0
    assignments = ", ".join(f"{column} = ?" for column in changes)
    cursor = connection.execute(
        f"UPDATE {table} SET {assignments} WHERE id = ?",
        (*changes.values(), record_id),
    )
    return cursor.rowcount
