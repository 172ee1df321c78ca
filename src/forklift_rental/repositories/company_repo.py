"""Repository for rental company persistence."""

from __future__ import annotations

import sqlite3
from dataclasses import replace
from typing import List, Optional

from forklift_rental.domain.models import RentalCompany, RentalCompanyStatus
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories.mappers import company_from_row, company_to_record
from forklift_rental.repositories.records import insert_record, new_id, update_record
from forklift_rental.utils.dates import now_iso


class CompanyRepo:
    """CRUD operations for rental companies."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create(self, company: RentalCompany) -> RentalCompany:
        created_at = now_iso()
        stored = replace(
            company,
            id=company.id or new_id("comp"),
            created_at=created_at,
            updated_at=created_at,
        )
        try:
            insert_record(self._connection, "rental_companies", company_to_record(stored))
        except Exception:
            self._logger.exception("Failed to create rental company")
            raise
        return stored

    def update(self, company: RentalCompany) -> Optional[RentalCompany]:
        record = company_to_record(company)
        record.pop("id")
        record.pop("created_at")
        record["updated_at"] = now_iso()
        try:
            updated = update_record(
                self._connection, "rental_companies", company.id, record
            )
        except Exception:
            self._logger.exception("Failed to update rental company id=%s", company.id)
            raise
        if updated == 0:
            return None
        return self.get_by_id(company.id)

    def set_status(self, company_id: str, status: RentalCompanyStatus) -> bool:
        try:
            updated = update_record(
                self._connection,
                "rental_companies",
                company_id,
                {"status": status.value, "updated_at": now_iso()},
            )
        except Exception:
            self._logger.exception(
                "Failed to update rental company status id=%s", company_id
            )
            raise
        return updated > 0

    def delete(self, company_id: str) -> bool:
        try:
            cursor = self._connection.execute(
                "DELETE FROM rental_companies WHERE id = ?",
                (company_id,),
            )
        except Exception:
            self._logger.exception("Failed to delete rental company id=%s", company_id)
            raise
        return cursor.rowcount > 0

    def get_by_id(self, company_id: str) -> Optional[RentalCompany]:
        try:
            row = self._connection.execute(
                "SELECT * FROM rental_companies WHERE id = ?",
                (company_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to fetch rental company id=%s", company_id)
            raise
        return company_from_row(row) if row else None

    def list_all(self) -> List[RentalCompany]:
        try:
            rows = self._connection.execute(
                "SELECT * FROM rental_companies ORDER BY rowid"
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list rental companies")
            raise
        return [company_from_row(row) for row in rows]
