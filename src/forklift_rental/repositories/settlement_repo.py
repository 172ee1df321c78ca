"""Repository for settlement ledger lines."""

from __future__ import annotations

import sqlite3
from dataclasses import replace
from typing import List, Optional

from forklift_rental.domain.models import SettlementItem, SettlementStatus
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories.mappers import (
    settlement_item_from_row,
    settlement_item_to_record,
)
from forklift_rental.repositories.records import insert_record, new_id, update_record


class SettlementRepo:
    """Data access for settlement items."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create(self, item: SettlementItem) -> SettlementItem:
        stored = replace(item, id=item.id or new_id("set"))
        try:
            insert_record(
                self._connection, "settlement_items", settlement_item_to_record(stored)
            )
        except Exception:
            self._logger.exception(
                "Failed to create settlement item contract_id=%s", item.contract_id
            )
            raise
        return stored

    def set_status(self, item_id: str, status: SettlementStatus) -> bool:
        try:
            updated = update_record(
                self._connection, "settlement_items", item_id, {"status": status.value}
            )
        except Exception:
            self._logger.exception("Failed to update settlement item id=%s", item_id)
            raise
        return updated > 0

    def delete(self, item_id: str) -> bool:
        try:
            cursor = self._connection.execute(
                "DELETE FROM settlement_items WHERE id = ?",
                (item_id,),
            )
        except Exception:
            self._logger.exception("Failed to delete settlement item id=%s", item_id)
            raise
        return cursor.rowcount > 0

    def get_by_id(self, item_id: str) -> Optional[SettlementItem]:
        try:
            row = self._connection.execute(
                "SELECT * FROM settlement_items WHERE id = ?",
                (item_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to fetch settlement item id=%s", item_id)
            raise
        return settlement_item_from_row(row) if row else None

    def list_all(self) -> List[SettlementItem]:
        try:
            rows = self._connection.execute(
                "SELECT * FROM settlement_items ORDER BY rowid"
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list settlement items")
            raise
        return [settlement_item_from_row(row) for row in rows]

    def list_by_contract(self, contract_id: str) -> List[SettlementItem]:
        try:
            rows = self._connection.execute(
                """
                SELECT * FROM settlement_items
                WHERE contract_id = ?
                ORDER BY date, rowid
                """,
                (contract_id,),
            ).fetchall()
        except Exception:
            self._logger.exception(
                "Failed to list settlement items contract_id=%s", contract_id
            )
            raise
        return [settlement_item_from_row(row) for row in rows]

    def list_overdue_contract_ids(self) -> List[str]:
        """Return contracts with at least one overdue line, oldest first."""
        try:
            rows = self._connection.execute(
                """
                SELECT contract_id, MIN(rowid) AS first_row
                FROM settlement_items
                WHERE status = ?
                GROUP BY contract_id
                ORDER BY first_row
                """,
                (SettlementStatus.OVERDUE.value,),
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list overdue contracts")
            raise
        return [row["contract_id"] for row in rows]
