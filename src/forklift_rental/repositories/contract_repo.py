"""Contract persistence helpers, including the append-only history log."""

from __future__ import annotations

import sqlite3
from dataclasses import replace
from typing import Iterable, Optional

from forklift_rental.domain.models import (
    Contract,
    ContractHistoryEntry,
    ContractStatus,
)
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories.mappers import (
    contract_from_row,
    contract_to_record,
    history_entry_from_row,
)
from forklift_rental.repositories.records import insert_record, new_id, update_record
from forklift_rental.utils.dates import now_iso


def _insert_history(
    connection: sqlite3.Connection,
    contract_id: str,
    entries: Iterable[ContractHistoryEntry],
) -> None:
    for entry in entries:
        connection.execute(
            """
            INSERT INTO contract_history (contract_id, type, date, description)
            VALUES (?, ?, ?, ?)
            """,
            (contract_id, entry.type.value, entry.date, entry.description),
        )


def _load_history(
    connection: sqlite3.Connection, contract_ids: Optional[list[str]] = None
) -> dict[str, list[ContractHistoryEntry]]:
    if contract_ids is None:
        rows = connection.execute(
            "SELECT * FROM contract_history ORDER BY id"
        ).fetchall()
    else:
        if not contract_ids:
            return {}
        placeholders = ", ".join(["?"] * len(contract_ids))
        rows = connection.execute(
            f"""
            SELECT * FROM contract_history
            WHERE contract_id IN ({placeholders})
            ORDER BY id
            """,
            contract_ids,
        ).fetchall()
    grouped: dict[str, list[ContractHistoryEntry]] = {}
    for row in rows:
        grouped.setdefault(row["contract_id"], []).append(history_entry_from_row(row))
    return grouped


def create_contract(
    contract: Contract,
    *,
    connection: sqlite3.Connection,
) -> Contract:
    """Insert a contract together with its initial history entries."""
    logger = get_logger("contract_repo")
    created_at = now_iso()
    stored = replace(
        contract,
        id=contract.id or new_id("cont"),
        history=list(contract.history),
        created_at=created_at,
        updated_at=created_at,
    )
    try:
        insert_record(connection, "contracts", contract_to_record(stored))
        _insert_history(connection, stored.id, stored.history)
    except Exception:
        logger.exception("Failed to create contract")
        raise
    return stored


def update_contract(
    contract_id: str,
    changes: dict[str, object],
    *,
    connection: sqlite3.Connection,
) -> bool:
    logger = get_logger("contract_repo")
    changes = {**changes, "updated_at": now_iso()}
    try:
        updated = update_record(connection, "contracts", contract_id, changes)
    except Exception:
        logger.exception("Failed to update contract id=%s", contract_id)
        raise
    return updated > 0


def set_status(
    contract_id: str,
    status: ContractStatus,
    *,
    connection: sqlite3.Connection,
) -> bool:
    return update_contract(contract_id, {"status": status.value}, connection=connection)


def append_history(
    contract_id: str,
    entry: ContractHistoryEntry,
    *,
    connection: sqlite3.Connection,
) -> None:
    logger = get_logger("contract_repo")
    try:
        _insert_history(connection, contract_id, [entry])
    except Exception:
        logger.exception("Failed to append history contract id=%s", contract_id)
        raise


def get_contract(
    contract_id: str,
    *,
    connection: sqlite3.Connection,
) -> Optional[Contract]:
    logger = get_logger("contract_repo")
    try:
        row = connection.execute(
            "SELECT * FROM contracts WHERE id = ?",
            (contract_id,),
        ).fetchone()
        if not row:
            return None
        history = _load_history(connection, [contract_id])
    except Exception:
        logger.exception("Failed to fetch contract id=%s", contract_id)
        raise
    return contract_from_row(row, history.get(contract_id, []))


def list_contracts(
    *,
    connection: sqlite3.Connection,
    rental_company_id: Optional[str] = None,
    status: Optional[ContractStatus] = None,
) -> list[Contract]:
    """List contracts in registration order, optionally filtered."""
    logger = get_logger("contract_repo")
    clauses: list[str] = []
    params: list[object] = []
    if rental_company_id is not None:
        clauses.append("rental_company_id = ?")
        params.append(rental_company_id)
    if status is not None:
        clauses.append("status = ?")
        params.append(status.value)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    try:
        rows = connection.execute(
            f"SELECT * FROM contracts {where} ORDER BY rowid",
            params,
        ).fetchall()
        history = _load_history(
            connection, None if not clauses else [row["id"] for row in rows]
        )
    except Exception:
        logger.exception("Failed to list contracts")
        raise
    return [contract_from_row(row, history.get(row["id"], [])) for row in rows]
