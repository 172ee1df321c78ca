"""Entity store: repositories over one connection plus consistent snapshots."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from forklift_rental.db.connection import IN_MEMORY, get_connection, read_transaction
from forklift_rental.db.migrations import apply_migrations
from forklift_rental.domain.models import (
    Contract,
    Forklift,
    Lessee,
    OverdueRecord,
    RentalCompany,
    SettlementItem,
    User,
)
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories import contract_repo
from forklift_rental.repositories.company_repo import CompanyRepo
from forklift_rental.repositories.document_repo import DocumentRepository
from forklift_rental.repositories.forklift_repo import ForkliftRepo
from forklift_rental.repositories.lessee_repo import LesseeRepo
from forklift_rental.repositories.overdue_repo import OverdueRepo
from forklift_rental.repositories.settlement_repo import SettlementRepo
from forklift_rental.repositories.user_repo import UserRepo


@dataclass(frozen=True)
class StoreSnapshot:
    """Point-in-time copy of every collection, read in one transaction."""

    companies: tuple[RentalCompany, ...] = ()
    forklifts: tuple[Forklift, ...] = ()
    lessees: tuple[Lessee, ...] = ()
    contracts: tuple[Contract, ...] = ()
    settlement_items: tuple[SettlementItem, ...] = ()
    overdue_records: tuple[OverdueRecord, ...] = ()
    users: tuple[User, ...] = ()


class EntityStore:
    """Owns the connection and the repositories built on it."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection
        self.companies = CompanyRepo(connection)
        self.forklifts = ForkliftRepo(connection)
        self.lessees = LesseeRepo(connection)
        self.settlements = SettlementRepo(connection)
        self.overdue = OverdueRepo(connection)
        self.users = UserRepo(connection)
        self.documents = DocumentRepository(connection)
        self._logger = get_logger(self.__class__.__name__)

    @classmethod
    def open(cls, database_path: Optional[Path | str] = None) -> "EntityStore":
        """Open (or create) a database and bring its schema up to date."""
        connection = get_connection(database_path or IN_MEMORY)
        version = apply_migrations(connection)
        store = cls(connection)
        store._logger.info(
            "Entity store ready path=%s schema=v%s",
            database_path or IN_MEMORY,
            version,
        )
        return store

    def snapshot(self) -> StoreSnapshot:
        with read_transaction(self.connection):
            return StoreSnapshot(
                companies=tuple(self.companies.list_all()),
                forklifts=tuple(self.forklifts.list_all()),
                lessees=tuple(self.lessees.list_all()),
                contracts=tuple(
                    contract_repo.list_contracts(connection=self.connection)
                ),
                settlement_items=tuple(self.settlements.list_all()),
                overdue_records=tuple(self.overdue.list_all()),
                users=tuple(self.users.list_all()),
            )

    def close(self) -> None:
        self.connection.close()
