"""Repository for overdue records and their notification log."""

from __future__ import annotations

import sqlite3
from typing import List, Optional

from forklift_rental.domain.models import OverdueCaseType, OverdueRecord
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories.mappers import overdue_record_from_row
from forklift_rental.repositories.records import new_id, update_record


class OverdueRepo:
    """Data access for overdue records."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create(self, contract_id: str, accumulated_overdue_fee: int = 0) -> OverdueRecord:
        record_id = new_id("ovd")
        try:
            self._connection.execute(
                """
                INSERT INTO overdue_records (id, contract_id, accumulated_overdue_fee)
                VALUES (?, ?, ?)
                """,
                (record_id, contract_id, accumulated_overdue_fee),
            )
        except Exception:
            self._logger.exception(
                "Failed to create overdue record contract_id=%s", contract_id
            )
            raise
        return OverdueRecord(
            id=record_id,
            contract_id=contract_id,
            accumulated_overdue_fee=accumulated_overdue_fee,
        )

    def set_accumulated_fee(self, record_id: str, amount: int) -> bool:
        try:
            updated = update_record(
                self._connection,
                "overdue_records",
                record_id,
                {"accumulated_overdue_fee": amount},
            )
        except Exception:
            self._logger.exception("Failed to update overdue fee id=%s", record_id)
            raise
        return updated > 0

    def add_notification(
        self, record_id: str, case_type: OverdueCaseType, notified_at: str
    ) -> None:
        try:
            self._connection.execute(
                """
                INSERT INTO overdue_notifications (overdue_record_id, case_type, notified_at)
                VALUES (?, ?, ?)
                """,
                (record_id, case_type.value, notified_at),
            )
            update_record(
                self._connection,
                "overdue_records",
                record_id,
                {"last_notification_date": notified_at},
            )
        except Exception:
            self._logger.exception(
                "Failed to record notification id=%s case=%s", record_id, case_type
            )
            raise

    def delete(self, record_id: str) -> bool:
        try:
            cursor = self._connection.execute(
                "DELETE FROM overdue_records WHERE id = ?",
                (record_id,),
            )
        except Exception:
            self._logger.exception("Failed to delete overdue record id=%s", record_id)
            raise
        return cursor.rowcount > 0

    def get_by_id(self, record_id: str) -> Optional[OverdueRecord]:
        return self._fetch_one("id", record_id)

    def get_by_contract(self, contract_id: str) -> Optional[OverdueRecord]:
        return self._fetch_one("contract_id", contract_id)

    def list_all(self) -> List[OverdueRecord]:
        try:
            rows = self._connection.execute(
                "SELECT * FROM overdue_records ORDER BY rowid"
            ).fetchall()
            notifications = self._notifications()
        except Exception:
            self._logger.exception("Failed to list overdue records")
            raise
        return [
            overdue_record_from_row(row, notifications.get(row["id"], []))
            for row in rows
        ]

    def _fetch_one(self, column: str, value: str) -> Optional[OverdueRecord]:
        try:
            row = self._connection.execute(
                f"SELECT * FROM overdue_records WHERE {column} = ?",
                (value,),
            ).fetchone()
            if not row:
                return None
            notifications = self._notifications(row["id"])
        except Exception:
            self._logger.exception("Failed to fetch overdue record %s=%s", column, value)
            raise
        return overdue_record_from_row(row, notifications.get(row["id"], []))

    def _notifications(self, record_id: Optional[str] = None) -> dict[str, list[str]]:
        if record_id is None:
            rows = self._connection.execute(
                "SELECT * FROM overdue_notifications ORDER BY id"
            ).fetchall()
        else:
            rows = self._connection.execute(
                """
                SELECT * FROM overdue_notifications
                WHERE overdue_record_id = ?
                ORDER BY id
                """,
                (record_id,),
            ).fetchall()
        grouped: dict[str, list[str]] = {}
        for row in rows:
            grouped.setdefault(row["overdue_record_id"], []).append(row["case_type"])
        return grouped
