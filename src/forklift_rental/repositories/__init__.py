"""Repositories for data access."""

from forklift_rental.repositories.company_repo import CompanyRepo
from forklift_rental.repositories.document_repo import DocumentRepository
from forklift_rental.repositories.entity_store import EntityStore, StoreSnapshot
from forklift_rental.repositories.forklift_repo import ForkliftRepo
from forklift_rental.repositories.lessee_repo import LesseeRepo
from forklift_rental.repositories.overdue_repo import OverdueRepo
from forklift_rental.repositories.settlement_repo import SettlementRepo
from forklift_rental.repositories.user_repo import UserRepo

__all__ = [
    "CompanyRepo",
    "DocumentRepository",
    "EntityStore",
    "ForkliftRepo",
    "LesseeRepo",
    "OverdueRepo",
    "SettlementRepo",
    "StoreSnapshot",
    "UserRepo",
]
