"""Repository for forklift persistence."""

from __future__ import annotations

import sqlite3
from dataclasses import replace
from typing import Iterable, List, Optional

from forklift_rental.domain.models import (
    Forklift,
    ForkliftManagementStatus,
    ForkliftOperationStatus,
)
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories.mappers import forklift_from_row, forklift_to_record
from forklift_rental.repositories.records import insert_record, new_id, update_record
from forklift_rental.utils.dates import now_iso

_UNCHANGED = object()


class ForkliftRepo:
    """CRUD operations for forklifts."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create(self, forklift: Forklift) -> Forklift:
        created_at = now_iso()
        stored = replace(
            forklift,
            id=forklift.id or new_id("fork"),
            created_at=created_at,
            updated_at=created_at,
        )
        try:
            insert_record(self._connection, "forklifts", forklift_to_record(stored))
        except Exception:
            self._logger.exception(
                "Failed to create forklift chassis=%s", forklift.chassis_number
            )
            raise
        return stored

    def create_many(self, forklifts: Iterable[Forklift]) -> list[Forklift]:
        return [self.create(forklift) for forklift in forklifts]

    def update(self, forklift: Forklift) -> Optional[Forklift]:
        record = forklift_to_record(forklift)
        record.pop("id")
        record.pop("created_at")
        record["updated_at"] = now_iso()
        try:
            updated = update_record(self._connection, "forklifts", forklift.id, record)
        except Exception:
            self._logger.exception("Failed to update forklift id=%s", forklift.id)
            raise
        if updated == 0:
            return None
        return self.get_by_id(forklift.id)

    def set_management_status(
        self,
        forklift_id: str,
        status: ForkliftManagementStatus,
        current_contract_id: object = _UNCHANGED,
    ) -> bool:
        changes: dict[str, object] = {
            "management_status": status.value,
            "updated_at": now_iso(),
        }
        if current_contract_id is not _UNCHANGED:
            changes["current_contract_id"] = current_contract_id
        try:
            updated = update_record(self._connection, "forklifts", forklift_id, changes)
        except Exception:
            self._logger.exception(
                "Failed to update management status forklift id=%s", forklift_id
            )
            raise
        return updated > 0

    def set_operation_status(
        self, forklift_id: str, status: Optional[ForkliftOperationStatus]
    ) -> bool:
        try:
            updated = update_record(
                self._connection,
                "forklifts",
                forklift_id,
                {
                    "operation_status": status.value if status else None,
                    "updated_at": now_iso(),
                },
            )
        except Exception:
            self._logger.exception(
                "Failed to update operation status forklift id=%s", forklift_id
            )
            raise
        return updated > 0

    def delete(self, forklift_id: str) -> bool:
        try:
            cursor = self._connection.execute(
                "DELETE FROM forklifts WHERE id = ?",
                (forklift_id,),
            )
        except Exception:
            self._logger.exception("Failed to delete forklift id=%s", forklift_id)
            raise
        return cursor.rowcount > 0

    def get_by_id(self, forklift_id: str) -> Optional[Forklift]:
        try:
            row = self._connection.execute(
                "SELECT * FROM forklifts WHERE id = ?",
                (forklift_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to fetch forklift id=%s", forklift_id)
            raise
        return forklift_from_row(row) if row else None

    def get_by_chassis_number(self, chassis_number: str) -> Optional[Forklift]:
        try:
            row = self._connection.execute(
                "SELECT * FROM forklifts WHERE chassis_number = ?",
                (chassis_number,),
            ).fetchone()
        except Exception:
            self._logger.exception(
                "Failed to fetch forklift chassis=%s", chassis_number
            )
            raise
        return forklift_from_row(row) if row else None

    def list_all(self) -> List[Forklift]:
        try:
            rows = self._connection.execute(
                "SELECT * FROM forklifts ORDER BY rowid"
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list forklifts")
            raise
        return [forklift_from_row(row) for row in rows]

    def list_by_company(self, rental_company_id: str) -> List[Forklift]:
        try:
            rows = self._connection.execute(
                """
                SELECT * FROM forklifts
                WHERE rental_company_id = ?
                ORDER BY rowid
                """,
                (rental_company_id,),
            ).fetchall()
        except Exception:
            self._logger.exception(
                "Failed to list forklifts company=%s", rental_company_id
            )
            raise
        return [forklift_from_row(row) for row in rows]
