"""Domain dataclasses and enums."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    OPERATION_TOOL_ADMIN = "OPERATION_TOOL_ADMIN"
    BUSINESS_MANAGER = "BUSINESS_MANAGER"
    OPERATOR = "OPERATOR"


class RentalCompanyStatus(str, Enum):
    PREPARING = "PREPARING"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"


class ForkliftManagementStatus(str, Enum):
    IN_STORAGE = "IN_STORAGE"
    RENTED = "RENTED"
    ON_LOAN = "ON_LOAN"
    UNDER_REPAIR = "UNDER_REPAIR"
    PART_REPLACEMENT = "PART_REPLACEMENT"
    OVERDUE_RECOVERY = "OVERDUE_RECOVERY"
    DISPOSED = "DISPOSED"


class ForkliftOperationStatus(str, Enum):
    CHECKING = "CHECKING"
    UNAVAILABLE = "UNAVAILABLE"
    OPERATING = "OPERATING"
    STOPPED = "STOPPED"
    REMOTE_STOPPED = "REMOTE_STOPPED"


class ForkliftDisplayContractStatus(str, Enum):
    """Contract badge shown next to a forklift."""

    ONE_MONTH_LEFT = "ONE_MONTH_LEFT"
    TWO_MONTHS_LEFT = "TWO_MONTHS_LEFT"
    MID_TERM_TERMINATION = "MID_TERM_TERMINATION"
    ON_HOLD = "ON_HOLD"
    CONTRACT_ENDED = "CONTRACT_ENDED"


class ContractStatus(str, Enum):
    RENTING = "RENTING"
    CONTRACT_ENDED = "CONTRACT_ENDED"
    MID_TERM_TERMINATION = "MID_TERM_TERMINATION"
    ON_HOLD = "ON_HOLD"
    AWAITING_RECOVERY = "AWAITING_RECOVERY"


class ContractType(str, Enum):
    SHORT_TERM = "SHORT_TERM"
    LONG_TERM = "LONG_TERM"


class ContractHistoryType(str, Enum):
    CONTRACT_SIGNED = "CONTRACT_SIGNED"
    RENTAL_START = "RENTAL_START"
    FORKLIFT_DELIVERED = "FORKLIFT_DELIVERED"
    CONTRACT_EXTENDED = "CONTRACT_EXTENDED"
    CONTRACT_ENDED = "CONTRACT_ENDED"


class PaymentMethod(str, Enum):
    CMS_5TH = "CMS_5TH"
    CMS_15TH = "CMS_15TH"
    CMS_25TH = "CMS_25TH"
    MONTH_END_BANK_TRANSFER = "MONTH_END_BANK_TRANSFER"
    AFTER_30_DAYS_BANK_TRANSFER = "AFTER_30_DAYS_BANK_TRANSFER"
    AFTER_45_DAYS_BANK_TRANSFER = "AFTER_45_DAYS_BANK_TRANSFER"
    BANK_TRANSFER = "BANK_TRANSFER"
    CREDIT_CARD = "CREDIT_CARD"


class SettlementItemType(str, Enum):
    RENTAL_FEE = "RENTAL_FEE"
    SHIPPING_COST = "SHIPPING_COST"
    DEPOSIT = "DEPOSIT"
    REPAIR_COST = "REPAIR_COST"
    COMMISSION = "COMMISSION"
    EARLY_TERMINATION_PENALTY = "EARLY_TERMINATION_PENALTY"


REVENUE_ITEM_TYPES = frozenset(
    {SettlementItemType.RENTAL_FEE, SettlementItemType.DEPOSIT}
)


class SettlementStatus(str, Enum):
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class OverdueCaseType(str, Enum):
    RENTAL_FEE_OVERDUE = "RENTAL_FEE_OVERDUE"
    DEPOSIT_DEDUCTED = "DEPOSIT_DEDUCTED"
    CONTRACT_TERMINATED = "CONTRACT_TERMINATED"
    CERTIFIED_MAIL = "CERTIFIED_MAIL"


@dataclass(slots=True)
class User:
    id: Optional[str]
    email: str
    name: str
    role: UserRole
    rental_company_id: Optional[str] = None


@dataclass(slots=True)
class RentalCompany:
    id: Optional[str]
    name: str
    registration_number: Optional[str] = None
    address: Optional[str] = None
    representative: Optional[str] = None
    phone_number: Optional[str] = None
    status: RentalCompanyStatus = RentalCompanyStatus.PREPARING
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(slots=True)
class Forklift:
    id: Optional[str]
    manufacturer: str
    model_name: str
    year: int
    tonnage: float
    type: str
    chassis_number: str
    rental_company_id: str
    purchase_date: Optional[str] = None
    purchase_price: float = 0.0
    withdrawal_date: Optional[str] = None
    location: Optional[str] = None
    gps_serial_number: Optional[str] = None
    notes: Optional[str] = None
    management_status: ForkliftManagementStatus = ForkliftManagementStatus.IN_STORAGE
    operation_status: Optional[ForkliftOperationStatus] = None
    current_contract_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(slots=True)
class Lessee:
    id: Optional[str]
    name: str
    registration_number: Optional[str] = None
    address: Optional[str] = None
    representative: Optional[str] = None
    phone_number: Optional[str] = None
    contract_ids: list[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(slots=True)
class ContractHistoryEntry:
    type: ContractHistoryType
    date: str
    description: Optional[str] = None


@dataclass(slots=True)
class Contract:
    id: Optional[str]
    lessee_id: str
    forklift_id: str
    start_date: str
    end_date: str
    rental_fee: float
    payment_due_date: str
    tax_invoice_issue_date: Optional[str] = None
    rental_company_id: Optional[str] = None
    contract_type: ContractType = ContractType.LONG_TERM
    status: ContractStatus = ContractStatus.RENTING
    payment_method: PaymentMethod = PaymentMethod.CMS_5TH
    contract_pdf_url: Optional[str] = None
    shipping_cost: Optional[float] = None
    deposit: Optional[float] = None
    repair_cost: Optional[float] = None
    commission: Optional[float] = None
    early_termination_penalty: Optional[float] = None
    history: list[ContractHistoryEntry] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(slots=True)
class SettlementItem:
    id: Optional[str]
    contract_id: str
    type: SettlementItemType
    amount: float
    date: str
    status: SettlementStatus = SettlementStatus.PAID
    description: Optional[str] = None


@dataclass(slots=True)
class OverdueRecord:
    id: Optional[str]
    contract_id: str
    accumulated_overdue_fee: int = 0
    last_notification_date: Optional[str] = None
    notification_history: list[OverdueCaseType] = field(default_factory=list)


class DocumentType(str, Enum):
    OVERDUE_NOTICE = "overdue_notice"
    SETTLEMENT_REPORT = "settlement_report"


@dataclass(slots=True)
class Document:
    id: Optional[int]
    contract_id: Optional[str]
    doc_type: DocumentType
    file_path: str
    generated_at: str
    checksum: str
