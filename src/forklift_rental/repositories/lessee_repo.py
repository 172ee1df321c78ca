"""Repository for lessee persistence."""

from __future__ import annotations

import sqlite3
from dataclasses import replace
from typing import List, Optional

from forklift_rental.domain.models import Lessee
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories.mappers import lessee_from_row, lessee_to_record
from forklift_rental.repositories.records import insert_record, new_id, update_record
from forklift_rental.utils.dates import now_iso


class LesseeRepo:
    """CRUD operations for lessees.

    ``Lessee.contract_ids`` is read back from the contracts table in
    registration order rather than stored separately.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create(self, lessee: Lessee) -> Lessee:
        created_at = now_iso()
        stored = replace(
            lessee,
            id=lessee.id or new_id("less"),
            contract_ids=[],
            created_at=created_at,
            updated_at=created_at,
        )
        try:
            insert_record(self._connection, "lessees", lessee_to_record(stored))
        except Exception:
            self._logger.exception("Failed to create lessee")
            raise
        return stored

    def update(self, lessee: Lessee) -> Optional[Lessee]:
        record = lessee_to_record(lessee)
        record.pop("id")
        record.pop("created_at")
        record["updated_at"] = now_iso()
        try:
            updated = update_record(self._connection, "lessees", lessee.id, record)
        except Exception:
            self._logger.exception("Failed to update lessee id=%s", lessee.id)
            raise
        if updated == 0:
            return None
        return self.get_by_id(lessee.id)

    def delete(self, lessee_id: str) -> bool:
        try:
            cursor = self._connection.execute(
                "DELETE FROM lessees WHERE id = ?",
                (lessee_id,),
            )
        except Exception:
            self._logger.exception("Failed to delete lessee id=%s", lessee_id)
            raise
        return cursor.rowcount > 0

    def get_by_id(self, lessee_id: str) -> Optional[Lessee]:
        try:
            row = self._connection.execute(
                "SELECT * FROM lessees WHERE id = ?",
                (lessee_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to fetch lessee id=%s", lessee_id)
            raise
        if not row:
            return None
        return lessee_from_row(row, self._contract_ids().get(lessee_id, []))

    def list_all(self) -> List[Lessee]:
        try:
            rows = self._connection.execute(
                "SELECT * FROM lessees ORDER BY rowid"
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list lessees")
            raise
        contract_ids = self._contract_ids()
        return [lessee_from_row(row, contract_ids.get(row["id"], [])) for row in rows]

    def search_by_name(self, term: str) -> List[Lessee]:
        term = term.strip()
        if not term:
            return self.list_all()
        try:
            rows = self._connection.execute(
                """
                SELECT * FROM lessees
                WHERE name LIKE ? COLLATE NOCASE
                ORDER BY rowid
                """,
                (f"%{term}%",),
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to search lessees term=%s", term)
            raise
        contract_ids = self._contract_ids()
        return [lessee_from_row(row, contract_ids.get(row["id"], [])) for row in rows]

    def _contract_ids(self) -> dict[str, list[str]]:
        try:
            rows = self._connection.execute(
                "SELECT id, lessee_id FROM contracts ORDER BY rowid"
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to load lessee contract references")
            raise
        grouped: dict[str, list[str]] = {}
        for row in rows:
            grouped.setdefault(row["lessee_id"], []).append(row["id"])
        return grouped
