"""Rental company administration."""

from __future__ import annotations

import sqlite3
from dataclasses import replace
from typing import Optional

from forklift_rental.db.connection import transaction
from forklift_rental.domain.models import RentalCompany, RentalCompanyStatus, User
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories.company_repo import CompanyRepo
from forklift_rental.services.access_filter import Feature, require_access, visible_entities
from forklift_rental.services.errors import NotFoundError
from forklift_rental.services.validators import coerce_enum, optional_text, require_text


class CompanyService:
    """Registration and status changes for rental companies (admin only)."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._repo = CompanyRepo(connection)
        self._logger = get_logger(self.__class__.__name__)

    def register(
        self,
        actor: Optional[User],
        name: str,
        *,
        registration_number: Optional[str] = None,
        address: Optional[str] = None,
        representative: Optional[str] = None,
        phone_number: Optional[str] = None,
        status: RentalCompanyStatus | str = RentalCompanyStatus.PREPARING,
    ) -> RentalCompany:
        require_access(actor, Feature.RENTAL_COMPANIES)
        company = RentalCompany(
            id=None,
            name=require_text(name, "name"),
            registration_number=optional_text(registration_number),
            address=optional_text(address),
            representative=optional_text(representative),
            phone_number=optional_text(phone_number),
            status=coerce_enum(RentalCompanyStatus, status, "status"),
        )
        with transaction(self._connection):
            stored = self._repo.create(company)
        self._logger.info("Registered rental company id=%s", stored.id)
        return stored

    def update(
        self,
        actor: Optional[User],
        company_id: str,
        *,
        name: Optional[str] = None,
        registration_number: Optional[str] = None,
        address: Optional[str] = None,
        representative: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> RentalCompany:
        require_access(actor, Feature.RENTAL_COMPANIES)
        company = self.get(company_id)
        changes: dict[str, object] = {}
        if name is not None:
            changes["name"] = require_text(name, "name")
        for field, value in (
            ("registration_number", registration_number),
            ("address", address),
            ("representative", representative),
            ("phone_number", phone_number),
        ):
            if value is not None:
                changes[field] = optional_text(value)
        with transaction(self._connection):
            updated = self._repo.update(replace(company, **changes))
        if updated is None:
            raise NotFoundError(f"Rental company {company_id} not found.")
        return updated

    def change_status(
        self,
        actor: Optional[User],
        company_id: str,
        status: RentalCompanyStatus | str,
    ) -> RentalCompany:
        require_access(actor, Feature.RENTAL_COMPANIES)
        new_status = coerce_enum(RentalCompanyStatus, status, "status")
        with transaction(self._connection):
            if not self._repo.set_status(company_id, new_status):
                raise NotFoundError(f"Rental company {company_id} not found.")
        self._logger.info(
            "Rental company id=%s status=%s", company_id, new_status.value
        )
        return self.get(company_id)

    def delete(self, actor: Optional[User], company_id: str) -> bool:
        """Delete a company; dependent records are left untouched."""
        require_access(actor, Feature.RENTAL_COMPANIES)
        with transaction(self._connection):
            deleted = self._repo.delete(company_id)
        if not deleted:
            raise NotFoundError(f"Rental company {company_id} not found.")
        self._logger.info("Deleted rental company id=%s", company_id)
        return True

    def get(self, company_id: str) -> RentalCompany:
        company = self._repo.get_by_id(company_id)
        if not company:
            raise NotFoundError(f"Rental company {company_id} not found.")
        return company

    def list_companies(self, actor: Optional[User]) -> list[RentalCompany]:
        return visible_entities(actor, self._repo.list_all())
