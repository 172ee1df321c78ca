"""Lessee registration and lookup."""

from __future__ import annotations

import sqlite3
from dataclasses import replace
from typing import Optional

from forklift_rental.db.connection import transaction
from forklift_rental.domain.models import Lessee, User
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories import contract_repo
from forklift_rental.repositories.forklift_repo import ForkliftRepo
from forklift_rental.repositories.lessee_repo import LesseeRepo
from forklift_rental.services.access_filter import is_admin, visible_entities
from forklift_rental.services.errors import NotFoundError
from forklift_rental.services.validators import optional_text, require_text


class LesseeService:
    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._repo = LesseeRepo(connection)
        self._forklift_repo = ForkliftRepo(connection)
        self._logger = get_logger(self.__class__.__name__)

    def register(
        self,
        name: str,
        *,
        registration_number: Optional[str] = None,
        address: Optional[str] = None,
        representative: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> Lessee:
        lessee = Lessee(
            id=None,
            name=require_text(name, "name"),
            registration_number=optional_text(registration_number),
            address=optional_text(address),
            representative=optional_text(representative),
            phone_number=optional_text(phone_number),
        )
        with transaction(self._connection):
            stored = self._repo.create(lessee)
        self._logger.info("Registered lessee id=%s", stored.id)
        return stored

    def update(
        self,
        lessee_id: str,
        *,
        name: Optional[str] = None,
        registration_number: Optional[str] = None,
        address: Optional[str] = None,
        representative: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> Lessee:
        lessee = self.get(lessee_id)
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
            updated = self._repo.update(replace(lessee, **changes))
        if updated is None:
            raise NotFoundError(f"Lessee {lessee_id} not found.")
        return updated

    def get(self, lessee_id: str) -> Lessee:
        lessee = self._repo.get_by_id(lessee_id)
        if not lessee:
            raise NotFoundError(f"Lessee {lessee_id} not found.")
        return lessee

    def search(self, actor: Optional[User], term: str = "") -> list[Lessee]:
        """Return lessees whose name contains ``term`` and the actor may see.

        Scoped actors only see lessees holding a contract with their company.
        """
        lessees = self._repo.search_by_name(term)
        if is_admin(actor):
            return lessees
        return visible_entities(
            actor,
            lessees,
            contracts=contract_repo.list_contracts(connection=self._connection),
            forklifts=self._forklift_repo.list_all(),
        )
