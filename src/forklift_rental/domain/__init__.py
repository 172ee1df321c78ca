"""Domain models for ForkliftRental."""

from forklift_rental.domain.models import (
    Contract,
    ContractHistoryEntry,
    ContractHistoryType,
    ContractStatus,
    ContractType,
    Document,
    DocumentType,
    Forklift,
    ForkliftDisplayContractStatus,
    ForkliftManagementStatus,
    ForkliftOperationStatus,
    Lessee,
    OverdueCaseType,
    OverdueRecord,
    PaymentMethod,
    REVENUE_ITEM_TYPES,
    RentalCompany,
    RentalCompanyStatus,
    SettlementItem,
    SettlementItemType,
    SettlementStatus,
    User,
    UserRole,
)

__all__ = [
    "Contract",
    "ContractHistoryEntry",
    "ContractHistoryType",
    "ContractStatus",
    "ContractType",
    "Document",
    "DocumentType",
    "Forklift",
    "ForkliftDisplayContractStatus",
    "ForkliftManagementStatus",
    "ForkliftOperationStatus",
    "Lessee",
    "OverdueCaseType",
    "OverdueRecord",
    "PaymentMethod",
    "REVENUE_ITEM_TYPES",
    "RentalCompany",
    "RentalCompanyStatus",
    "SettlementItem",
    "SettlementItemType",
    "SettlementStatus",
    "User",
    "UserRole",
]
