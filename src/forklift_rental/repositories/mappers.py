"""SQLite row mappers for domain models."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, Iterable, Optional

from forklift_rental.domain.models import (
    Contract,
    ContractHistoryEntry,
    ContractHistoryType,
    ContractStatus,
    ContractType,
    Document,
    DocumentType,
    Forklift,
    ForkliftManagementStatus,
    ForkliftOperationStatus,
    Lessee,
    OverdueCaseType,
    OverdueRecord,
    PaymentMethod,
    RentalCompany,
    RentalCompanyStatus,
    SettlementItem,
    SettlementItemType,
    SettlementStatus,
    User,
    UserRole,
)


def _row_value(row: sqlite3.Row, key: str) -> Any:
    return row[key] if key in row.keys() else None


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def company_from_row(row: sqlite3.Row) -> RentalCompany:
    return RentalCompany(
        id=row["id"],
        name=row["name"],
        registration_number=_row_value(row, "registration_number"),
        address=_row_value(row, "address"),
        representative=_row_value(row, "representative"),
        phone_number=_row_value(row, "phone_number"),
        status=RentalCompanyStatus(row["status"]),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def company_to_record(company: RentalCompany) -> Dict[str, Any]:
    return {
        "id": company.id,
        "name": company.name,
        "registration_number": company.registration_number,
        "address": company.address,
        "representative": company.representative,
        "phone_number": company.phone_number,
        "status": _enum_value(company.status),
        "created_at": company.created_at,
        "updated_at": company.updated_at,
    }


def forklift_from_row(row: sqlite3.Row) -> Forklift:
    raw_operation = _row_value(row, "operation_status")
    return Forklift(
        id=row["id"],
        manufacturer=row["manufacturer"],
        model_name=row["model_name"],
        year=int(row["year"]),
        tonnage=float(row["tonnage"]),
        type=row["type"],
        chassis_number=row["chassis_number"],
        rental_company_id=row["rental_company_id"],
        purchase_date=_row_value(row, "purchase_date"),
        purchase_price=float(_row_value(row, "purchase_price") or 0),
        withdrawal_date=_row_value(row, "withdrawal_date"),
        location=_row_value(row, "location"),
        gps_serial_number=_row_value(row, "gps_serial_number"),
        notes=_row_value(row, "notes"),
        management_status=ForkliftManagementStatus(row["management_status"]),
        operation_status=(
            ForkliftOperationStatus(raw_operation) if raw_operation else None
        ),
        current_contract_id=_row_value(row, "current_contract_id"),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def forklift_to_record(forklift: Forklift) -> Dict[str, Any]:
    return {
        "id": forklift.id,
        "manufacturer": forklift.manufacturer,
        "model_name": forklift.model_name,
        "year": forklift.year,
        "tonnage": forklift.tonnage,
        "type": forklift.type,
        "chassis_number": forklift.chassis_number,
        "gps_serial_number": forklift.gps_serial_number,
        "purchase_date": forklift.purchase_date,
        "purchase_price": forklift.purchase_price,
        "withdrawal_date": forklift.withdrawal_date,
        "location": forklift.location,
        "notes": forklift.notes,
        "management_status": _enum_value(forklift.management_status),
        "operation_status": _enum_value(forklift.operation_status),
        "current_contract_id": forklift.current_contract_id,
        "rental_company_id": forklift.rental_company_id,
        "created_at": forklift.created_at,
        "updated_at": forklift.updated_at,
    }


def lessee_from_row(
    row: sqlite3.Row, contract_ids: Optional[Iterable[str]] = None
) -> Lessee:
    return Lessee(
        id=row["id"],
        name=row["name"],
        registration_number=_row_value(row, "registration_number"),
        address=_row_value(row, "address"),
        representative=_row_value(row, "representative"),
        phone_number=_row_value(row, "phone_number"),
        contract_ids=list(contract_ids or []),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def lessee_to_record(lessee: Lessee) -> Dict[str, Any]:
    return {
        "id": lessee.id,
        "name": lessee.name,
        "registration_number": lessee.registration_number,
        "address": lessee.address,
        "representative": lessee.representative,
        "phone_number": lessee.phone_number,
        "created_at": lessee.created_at,
        "updated_at": lessee.updated_at,
    }


def history_entry_from_row(row: sqlite3.Row) -> ContractHistoryEntry:
    return ContractHistoryEntry(
        type=ContractHistoryType(row["type"]),
        date=row["date"],
        description=_row_value(row, "description"),
    )


def contract_from_row(
    row: sqlite3.Row, history: Optional[Iterable[ContractHistoryEntry]] = None
) -> Contract:
    return Contract(
        id=row["id"],
        lessee_id=row["lessee_id"],
        forklift_id=row["forklift_id"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        rental_fee=row["rental_fee"],
        payment_due_date=row["payment_due_date"],
        tax_invoice_issue_date=_row_value(row, "tax_invoice_issue_date"),
        rental_company_id=_row_value(row, "rental_company_id"),
        contract_type=ContractType(row["contract_type"]),
        status=ContractStatus(row["status"]),
        payment_method=PaymentMethod(row["payment_method"]),
        contract_pdf_url=_row_value(row, "contract_pdf_url"),
        shipping_cost=_row_value(row, "shipping_cost"),
        deposit=_row_value(row, "deposit"),
        repair_cost=_row_value(row, "repair_cost"),
        commission=_row_value(row, "commission"),
        early_termination_penalty=_row_value(row, "early_termination_penalty"),
        history=list(history or []),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def contract_to_record(contract: Contract) -> Dict[str, Any]:
    return {
        "id": contract.id,
        "lessee_id": contract.lessee_id,
        "forklift_id": contract.forklift_id,
        "contract_pdf_url": contract.contract_pdf_url,
        "start_date": contract.start_date,
        "end_date": contract.end_date,
        "contract_type": _enum_value(contract.contract_type),
        "status": _enum_value(contract.status),
        "rental_fee": contract.rental_fee,
        "shipping_cost": contract.shipping_cost,
        "deposit": contract.deposit,
        "repair_cost": contract.repair_cost,
        "commission": contract.commission,
        "early_termination_penalty": contract.early_termination_penalty,
        "tax_invoice_issue_date": contract.tax_invoice_issue_date,
        "payment_due_date": contract.payment_due_date,
        "payment_method": _enum_value(contract.payment_method),
        "rental_company_id": contract.rental_company_id,
        "created_at": contract.created_at,
        "updated_at": contract.updated_at,
    }


def settlement_item_from_row(row: sqlite3.Row) -> SettlementItem:
    return SettlementItem(
        id=row["id"],
        contract_id=row["contract_id"],
        type=SettlementItemType(row["type"]),
        amount=row["amount"],
        date=row["date"],
        status=SettlementStatus(row["status"]),
        description=_row_value(row, "description"),
    )


def settlement_item_to_record(item: SettlementItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "contract_id": item.contract_id,
        "type": _enum_value(item.type),
        "amount": item.amount,
        "date": item.date,
        "status": _enum_value(item.status),
        "description": item.description,
    }


def overdue_record_from_row(
    row: sqlite3.Row, notifications: Optional[Iterable[str]] = None
) -> OverdueRecord:
    return OverdueRecord(
        id=row["id"],
        contract_id=row["contract_id"],
        accumulated_overdue_fee=int(row["accumulated_overdue_fee"] or 0),
        last_notification_date=_row_value(row, "last_notification_date"),
        notification_history=[
            OverdueCaseType(case_type) for case_type in (notifications or [])
        ],
    )


def user_from_row(row: sqlite3.Row) -> User:
    return User(
        id=row["id"],
        email=row["email"],
        name=row["name"],
        role=UserRole(row["role"]),
        rental_company_id=_row_value(row, "rental_company_id"),
    )


def document_from_row(row: sqlite3.Row) -> Document:
    return Document(
        id=row["id"],
        contract_id=_row_value(row, "contract_id"),
        doc_type=DocumentType(row["doc_type"]),
        file_path=row["file_path"],
        generated_at=row["generated_at"],
        checksum=row["checksum"],
    )
