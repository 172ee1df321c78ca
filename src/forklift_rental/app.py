"""Library entry point: wire the store and services together."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from forklift_rental.config import PDF_ISSUER, AppConfig
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories.entity_store import EntityStore
from forklift_rental.services.company_service import CompanyService
from forklift_rental.services.contract_service import ContractService
from forklift_rental.services.forklift_service import ForkliftService
from forklift_rental.services.lessee_service import LesseeService
from forklift_rental.services.overdue_service import OverdueService
from forklift_rental.services.settlement_service import SettlementService
from forklift_rental.services.user_service import UserService
from forklift_rental.utils.config_store import AppSettings, load_app_settings


@dataclass(frozen=True)
class ForkliftRentalServices:
    """Shared store and services for dependency injection."""

    config: AppConfig
    settings: AppSettings
    store: EntityStore
    company_service: CompanyService
    lessee_service: LesseeService
    forklift_service: ForkliftService
    contract_service: ContractService
    settlement_service: SettlementService
    overdue_service: OverdueService
    user_service: UserService

    @property
    def connection(self) -> sqlite3.Connection:
        return self.store.connection

    def close(self) -> None:
        self.store.close()


def bootstrap(
    database_path: Optional[Path | str] = None,
    *,
    pdf_dir: Optional[Path] = None,
    config_path: Optional[Path] = None,
) -> ForkliftRentalServices:
    """Open the store (in memory unless a path is given) and build the services.

    Settings come from ``config_path`` when given, otherwise defaults apply.
    """
    config = AppConfig()
    settings = load_app_settings(config_path) if config_path else AppSettings()
    issuer = replace(PDF_ISSUER, name=settings.pdf_issuer_name)
    store = EntityStore.open(database_path)
    connection = store.connection
    get_logger(__name__).info("Starting %s", config.app_name)
    return ForkliftRentalServices(
        config=config,
        settings=settings,
        store=store,
        company_service=CompanyService(connection),
        lessee_service=LesseeService(connection),
        forklift_service=ForkliftService(connection),
        contract_service=ContractService(connection, settings=settings),
        settlement_service=SettlementService(connection, issuer=issuer),
        overdue_service=OverdueService(connection, pdf_dir=pdf_dir, issuer=issuer),
        user_service=UserService(connection),
    )
